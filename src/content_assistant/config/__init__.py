"""Configuration management for the content assistant.

Configuration is resolved explicitly and passed into the components that need
it; there is no module-level settings singleton. `config_scope` lets a block
of code (typically a test) install an ambient configuration that
`resolve_config` returns instead of reading the environment.
"""

from collections.abc import Generator
from contextlib import contextmanager
import contextvars
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..exceptions import ConfigurationError
from .schema import AssistantSettings

__all__ = ["AssistantSettings", "config_scope", "resolve_config"]

_ambient_settings_var: contextvars.ContextVar[AssistantSettings] = (
    contextvars.ContextVar("content_assistant_settings")
)


def resolve_config(
    overrides: dict[str, Any] | None = None,
    *,
    env_file: str | Path | None = None,
) -> AssistantSettings:
    """Resolve settings with precedence: overrides > environment > defaults.

    Inside a `config_scope`, the scoped settings replace the environment and
    overrides are applied on top of them.

    Raises:
        ConfigurationError: If any value fails validation.
    """
    try:
        try:
            ambient = _ambient_settings_var.get()
        except LookupError:
            return AssistantSettings(_env_file=env_file, **(overrides or {}))
        if not overrides:
            return ambient
        merged = {**ambient.model_dump(), **overrides}
        return AssistantSettings(**merged)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


@contextmanager
def config_scope(settings: AssistantSettings) -> Generator[None, None, None]:
    """Temporarily use a different configuration.

    Context-variable based, so it is safe across threads and tasks.

    Example:
        with config_scope(AssistantSettings(model="gemini-1.5-pro")):
            assistant = create_assistant()
    """
    token = _ambient_settings_var.set(settings)
    try:
        yield
    finally:
        _ambient_settings_var.reset(token)
