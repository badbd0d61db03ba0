"""Identity resolution for inbound requests.

The assistant never validates credentials itself. A resolver maps the
``Authorization`` header to an opaque owner id (or None for anonymous use);
deployments plug in whatever verifies their tokens.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable


def bearer_token(authorization: str | None) -> str | None:
    """Return the token from ``Bearer <token>``, or None."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


@runtime_checkable
class IdentityResolver(Protocol):
    async def resolve(self, authorization: str | None) -> str | None: ...


class AnonymousResolver:
    """Treats every caller as anonymous; history is never written."""

    async def resolve(self, authorization: str | None) -> str | None:  # noqa: ARG002
        return None


class StaticTokenResolver:
    """Looks bearer tokens up in a fixed mapping (local setups and tests)."""

    def __init__(self, tokens: Mapping[str, str]) -> None:
        self._tokens = dict(tokens)

    async def resolve(self, authorization: str | None) -> str | None:
        token = bearer_token(authorization)
        if token is None:
            return None
        return self._tokens.get(token)
