"""Exceptions raised by the daemon RPC client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


class DaemonRPCError(Exception):
    """Base class for every error surfaced by the client."""


class TransportError(DaemonRPCError):
    """Raised when the HTTP exchange with the daemon fails."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(TransportError):
    """Raised when the daemon keeps rejecting our credentials."""


class MalformedResponseError(DaemonRPCError):
    """Raised when the response body is not a JSON-RPC envelope."""

    def __init__(self, message: str, body: bytes = b"") -> None:
        super().__init__(message)
        self.body = body


class InvalidRequestError(DaemonRPCError, ValueError):
    """Raised before any network activity when a request cannot be built."""


@dataclass(eq=False)
class RPCError(DaemonRPCError):
    code: int
    message: str
    data: Any = field(default=None)

    def __str__(self) -> str:  # noqa: D401
        return f"RPC error {self.code}: {self.message}"
