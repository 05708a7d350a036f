import json

import pytest

from daemon_rpc.daemon import DaemonRPC
from daemon_rpc.transport import Endpoint
from tests.helpers import RecordingPost, ok

BLOCK_HASH = "e22cf75f39ae720e8b71b3d120a5ac03f0db50bba6379e2850975b4859190bc6"


class RecordingDaemon(DaemonRPC):
    def __init__(self) -> None:
        super().__init__()
        self.calls: list[tuple] = []

    def call(self, method, params=None):
        self.calls.append((method, params))
        return {"status": "OK"}


@pytest.mark.parametrize(
    ("invoke", "expected"),
    [
        (lambda rpc: rpc.get_block_count(), ("getblockcount", None)),
        (lambda rpc: rpc.get_info(), ("get_info", None)),
        (lambda rpc: rpc.hard_fork_info(), ("hard_fork_info", None)),
        (lambda rpc: rpc.get_last_block_header(), ("getlastblockheader", None)),
        (lambda rpc: rpc.get_block_header_by_hash(BLOCK_HASH), ("getblockheaderbyhash", BLOCK_HASH)),
        (lambda rpc: rpc.get_block_by_hash(BLOCK_HASH), ("getblock", BLOCK_HASH)),
        (lambda rpc: rpc.get_bans(), ("getbans", None)),
    ],
)
def test_convenience_methods_forward_to_call(invoke, expected):
    rpc = RecordingDaemon()

    assert invoke(rpc) == {"status": "OK"}
    assert rpc.calls == [expected]


def test_block_height_is_sent_as_string():
    rpc = RecordingDaemon()

    rpc.get_block_by_height(1)

    assert rpc.calls == [("getblock", "1")]


def test_block_by_height_on_the_wire(monkeypatch):
    post = RecordingPost(ok({"blob": "...", "status": "OK"}))
    monkeypatch.setattr("daemon_rpc.transport.requests.post", post)

    result = DaemonRPC(host="node.example", port=18089).get_block_by_height(912345)

    assert result["status"] == "OK"
    assert post.calls[0]["url"] == "http://node.example:18089/json_rpc"
    assert json.loads(post.calls[0]["data"]) == {
        "jsonrpc": "2.0",
        "id": "0",
        "method": "getblock",
        "params": "912345",
    }


def test_from_endpoint_uses_given_endpoint_and_timeout():
    endpoint = Endpoint(host="10.0.0.2", scheme="https", username="u", password="p")

    rpc = DaemonRPC.from_endpoint(endpoint, timeout=2.5)

    assert rpc.endpoint is endpoint
    assert rpc.transport.timeout == 2.5
