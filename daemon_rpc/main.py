"""Command line entrypoint."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Callable, List, Optional

from pydantic import ValidationError
from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential
from tenacity.wait import wait_base

from .config import DaemonConfig, load_config
from .daemon import DaemonRPC
from .errors import AuthenticationError, DaemonRPCError, InvalidRequestError, TransportError

LOGGER = logging.getLogger(__name__)

_OVERRIDES = {
    "host": "monero_rpc_host",
    "port": "monero_rpc_port",
    "scheme": "monero_rpc_scheme",
    "user": "monero_rpc_user",
    "password": "monero_rpc_password",
    "timeout": "monero_rpc_timeout",
    "log_level": "daemon_rpc_log_level",
}


def _build_rpc(config: DaemonConfig) -> DaemonRPC:
    return DaemonRPC.from_endpoint(config.endpoint(), timeout=config.monero_rpc_timeout)


def _resolve_log_level(value: Optional[str]) -> int:
    level = logging.getLevelName(str(value or "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def _parse_params(raw: Optional[str], as_string: bool = False) -> Any:
    """Decode ``raw`` as JSON, falling back to the plain string (e.g. a block hash).

    Numeric-looking values such as heights decode to numbers unless ``as_string``.
    """

    if raw is None or as_string:
        return raw
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, TransportError) and not isinstance(exc, AuthenticationError)


def _call_with_retries(
    call: Callable[..., Any],
    method: str,
    params: Any,
    retries: int,
    wait: Optional[wait_base] = None,
) -> Any:
    """Retry connection-level failures only; daemon errors are final answers."""

    retrying = Retrying(
        stop=stop_after_attempt(max(retries, 0) + 1),
        wait=wait if wait is not None else wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception(_is_transient),
        before_sleep=lambda state: LOGGER.info(
            "Attempt %s failed: %s", state.attempt_number, state.outcome.exception()
        ),
        reraise=True,
    )
    return retrying(call, method, params)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Monero daemon JSON-RPC client")
    parser.add_argument("method", nargs="?", help="RPC method name, e.g. get_info")
    parser.add_argument(
        "params",
        nargs="?",
        help="Parameters as JSON; 912345 is sent as a number, use --raw or '\"912345\"' for a string",
    )
    parser.add_argument("--raw", action="store_true", help="Send PARAMS as a plain string without JSON decoding")
    parser.add_argument("--host", help="Daemon host (MONERO_RPC_HOST)")
    parser.add_argument("--port", type=int, help="Daemon RPC port (MONERO_RPC_PORT)")
    parser.add_argument("--scheme", choices=["http", "https"], help="URL scheme (MONERO_RPC_SCHEME)")
    parser.add_argument("--user", help="RPC login user (MONERO_RPC_USER)")
    parser.add_argument("--password", help="RPC login password (MONERO_RPC_PASSWORD)")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds (MONERO_RPC_TIMEOUT)")
    parser.add_argument("--retries", type=int, default=0, help="Retries on connection failures")
    parser.add_argument("--log-level", help="Logging level (DAEMON_RPC_LOG_LEVEL)")
    parser.add_argument("--healthcheck", action="store_true", help="Query the block count and exit")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.healthcheck and args.method is None:
        parser.error("a method is required unless --healthcheck is given")

    overrides = {
        field: getattr(args, option)
        for option, field in _OVERRIDES.items()
        if getattr(args, option) is not None
    }
    try:
        config = load_config(**overrides)
    except ValidationError as exc:
        parser.error(str(exc))

    logging.basicConfig(
        level=_resolve_log_level(config.daemon_rpc_log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    rpc = _build_rpc(config)

    if args.healthcheck:
        try:
            result = _call_with_retries(rpc.call, "getblockcount", None, args.retries)
        except DaemonRPCError as exc:
            LOGGER.error("Healthcheck failed for %s: %s", rpc.endpoint.url, exc)
            return 1
        LOGGER.info("Daemon at %s is up: %s", rpc.endpoint.url, result)
        return 0

    try:
        result = _call_with_retries(rpc.call, args.method, _parse_params(args.params, args.raw), args.retries)
    except InvalidRequestError as exc:
        LOGGER.error("%s", exc)
        return 2
    except DaemonRPCError as exc:
        LOGGER.error("%s failed: %s", args.method, exc)
        return 1

    print(json.dumps(result, indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    sys.exit(main())
