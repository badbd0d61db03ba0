"""Security contract tests for the configuration system.

Prove that the model credential never leaks into representations or logs.
"""

import logging
import os
from unittest.mock import patch

import pytest

from content_assistant import create_assistant
from content_assistant.config import resolve_config

SECRET_KEY = "sk-very-secret-api-key-12345-abcdef"


class TestConfigurationSecurityContracts:
    """Security contract tests for configuration system."""

    @pytest.mark.contract
    @pytest.mark.security
    def test_api_key_never_in_string_representation(self):
        """Security: API key must never appear in string representations."""
        with patch.dict(os.environ, {"GEMINI_API_KEY": SECRET_KEY}):
            resolved = resolve_config()

        assert resolved.api_key == SECRET_KEY
        assert SECRET_KEY not in str(resolved)
        assert SECRET_KEY not in repr(resolved)

    @pytest.mark.contract
    @pytest.mark.security
    def test_api_key_redacted_in_diagnostics(self):
        """Security: the diagnostic mapping shows only a redaction marker."""
        resolved = resolve_config({"api_key": SECRET_KEY})

        diagnostics = resolved.to_dict()
        assert diagnostics["api_key"] == "<redacted>"
        assert SECRET_KEY not in str(diagnostics)

    @pytest.mark.contract
    @pytest.mark.security
    def test_api_key_not_logged_during_setup(self, caplog):
        """Security: building an assistant never logs the credential."""
        caplog.set_level(logging.DEBUG, logger="content_assistant")
        create_assistant(resolve_config({"api_key": SECRET_KEY}))

        assert SECRET_KEY not in caplog.text
