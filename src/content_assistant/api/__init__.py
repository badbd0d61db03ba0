"""HTTP surface: SSE streaming endpoint, history and health."""

from .app import create_app
from .identity import AnonymousResolver, IdentityResolver, StaticTokenResolver

__all__ = [
    "AnonymousResolver",
    "IdentityResolver",
    "StaticTokenResolver",
    "create_app",
]
