"""Services wiring the tool surface to auth, storage and collaborators."""

from __future__ import annotations

from .auth import Authenticator, SupabaseAuthenticator
from .bindings import HttpServiceBinding, ServiceBindings, UnavailableServiceBinding
from .context import McpContext

__all__ = [
    "Authenticator",
    "HttpServiceBinding",
    "McpContext",
    "ServiceBindings",
    "SupabaseAuthenticator",
    "UnavailableServiceBinding",
]
