import pytest


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    for name in (
        "MONERO_RPC_HOST",
        "MONERO_RPC_PORT",
        "MONERO_RPC_SCHEME",
        "MONERO_RPC_USER",
        "MONERO_RPC_PASSWORD",
        "MONERO_RPC_LOGIN",
        "MONERO_RPC_TIMEOUT",
        "DAEMON_RPC_LOG_LEVEL",
        "NETRC",
    ):
        monkeypatch.delenv(name, raising=False)
