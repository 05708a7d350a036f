"""Monero daemon RPC client with named convenience methods."""

from __future__ import annotations

from typing import Any, Dict, Optional

from .rpc import RPCInvoker
from .transport import Endpoint, Transport


class DaemonRPC(RPCInvoker):
    """JSON-RPC client for ``monerod`` with optional digest authentication."""

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 18081,
        scheme: str = "http",
        username: str = "",
        password: str = "",
        timeout: float = 10,
        transport: Optional[Transport] = None,
    ) -> None:
        if transport is None:
            endpoint = Endpoint(host=host, port=port, scheme=scheme, username=username, password=password)
            transport = Transport(endpoint, timeout=timeout)
        super().__init__(transport)

    @classmethod
    def from_endpoint(cls, endpoint: Endpoint, timeout: float = 10) -> "DaemonRPC":
        return cls(transport=Transport(endpoint, timeout=timeout))

    @property
    def endpoint(self) -> Endpoint:
        return self.transport.endpoint

    # Convenience wrappers -------------------------------------------------

    def get_block_count(self) -> Dict[str, Any]:
        return self.call("getblockcount")

    def get_info(self) -> Dict[str, Any]:
        return self.call("get_info")

    def hard_fork_info(self) -> Dict[str, Any]:
        return self.call("hard_fork_info")

    def get_last_block_header(self) -> Dict[str, Any]:
        return self.call("getlastblockheader")

    def get_block_header_by_hash(self, block_hash: str) -> Dict[str, Any]:
        return self.call("getblockheaderbyhash", block_hash)

    def get_block_by_hash(self, block_hash: str) -> Dict[str, Any]:
        return self.call("getblock", block_hash)

    def get_block_by_height(self, height: int) -> Dict[str, Any]:
        # The daemon expects the height as a string here.
        return self.call("getblock", str(height))

    def get_bans(self) -> Dict[str, Any]:
        return self.call("getbans")
