"""Generic JSON-RPC 2.0 invoker for the daemon."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Union

from .errors import InvalidRequestError, MalformedResponseError, RPCError
from .transport import Transport

LOGGER = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
REQUEST_ID = "0"

JSONValue = Union[None, bool, int, float, str, List["JSONValue"], Dict[str, "JSONValue"]]


def build_request(method: str, params: Any = None) -> Dict[str, Any]:
    """Return a fresh request envelope; ``params`` is left out when ``None``."""

    if not isinstance(method, str) or not method.strip():
        raise InvalidRequestError(f"RPC method must be a non-empty string, got {method!r}")
    payload: Dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": REQUEST_ID, "method": method}
    if params is not None:
        payload["params"] = params
    return payload


def encode_request(payload: Dict[str, Any]) -> bytes:
    try:
        return json.dumps(payload).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise InvalidRequestError(f"params for {payload['method']!r} are not JSON serializable: {exc}") from exc


def parse_response(body: bytes) -> JSONValue:
    """Return the ``result`` of a response envelope or raise its ``error``."""

    try:
        data = json.loads(body)
    except ValueError as exc:
        raise MalformedResponseError(f"response is not valid JSON: {exc}", body=body) from exc

    if not isinstance(data, dict) or ("result" not in data and "error" not in data):
        raise MalformedResponseError("response has neither result nor error", body=body)

    error = data.get("error")
    if error is not None:
        code = error.get("code") if isinstance(error, dict) else None
        if not isinstance(code, int) or isinstance(code, bool):
            raise MalformedResponseError(f"response carries an invalid error object: {error!r}", body=body)
        raise RPCError(code=code, message=error.get("message", ""), data=error.get("data"))

    if "result" not in data:
        raise MalformedResponseError("response has a null error and no result", body=body)
    return data["result"]


class RPCInvoker:
    """Send one JSON-RPC request per call and normalise the reply.

    ``TransportError`` and ``AuthenticationError`` from the transport are
    propagated untouched. ``RPCError`` is the daemon's own answer and is never
    retried here.
    """

    def __init__(self, transport: Transport) -> None:
        self.transport = transport

    def call(self, method: str, params: Any = None) -> JSONValue:
        payload = build_request(method, params)
        body = encode_request(payload)
        LOGGER.debug("Calling %s on %s", method, self.transport.url)
        _, raw = self.transport.send(body)
        return parse_response(raw)
