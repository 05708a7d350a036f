import hashlib
import json
import threading

import requests
from requests import Response
from requests.utils import parse_dict_header


class DummyResponse(Response):
    def __init__(self, status_code: int, payload=None, headers=None, body: bytes | None = None) -> None:
        super().__init__()
        self.status_code = status_code
        self._content = body if body is not None else json.dumps(payload).encode()
        self.headers.update(headers or {})


def ok(result) -> DummyResponse:
    return DummyResponse(200, {"jsonrpc": "2.0", "id": "0", "result": result})


class RecordingPost:
    """Stand-in for ``requests.post`` that replays canned responses."""

    def __init__(self, *responses) -> None:
        self.responses = list(responses)
        self.calls: list[dict] = []

    def __call__(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response

    def payload(self, index: int = -1) -> dict:
        return json.loads(self.calls[index]["data"])


def _md5(text: str) -> str:
    return hashlib.md5(text.encode("utf-8")).hexdigest()


class DigestDaemon:
    """Fake ``monerod --rpc-login`` that checks digest responses.

    Used as ``requests.post`` it records the headers after ``auth=`` has been
    applied; ``respond`` can also serve prepared requests from ``Session.send``.
    """

    realm = "monero-rpc"

    def __init__(self, username: str, password: str, result=None) -> None:
        self.username = username
        self.password = password
        self.result = result if result is not None else {"status": "OK"}
        self.nonce = "dcd98b7102dd2f0e8b11d0f600bfb0c093"
        self.calls: list[dict] = []
        self._lock = threading.Lock()

    def challenge(self) -> DummyResponse:
        header = f'Digest qop="auth",algorithm=MD5,realm="{self.realm}",nonce="{self.nonce}",stale=false'
        return DummyResponse(401, body=b"", headers={"WWW-Authenticate": header})

    def authorized(self, header: str | None) -> bool:
        if not header or not header.startswith("Digest "):
            return False
        fields = parse_dict_header(header[len("Digest "):])
        if fields.get("username") != self.username or fields.get("nonce") != self.nonce:
            return False
        ha1 = _md5(f"{self.username}:{self.realm}:{self.password}")
        ha2 = _md5(f"POST:{fields['uri']}")
        expected = _md5(f"{ha1}:{fields['nonce']}:{fields['nc']}:{fields['cnonce']}:{fields['qop']}:{ha2}")
        return fields.get("response") == expected

    def respond(self, url, headers, **extra) -> DummyResponse:
        with self._lock:
            self.calls.append({"url": url, "headers": dict(headers), **extra})
        if not self.authorized(headers.get("Authorization")):
            return self.challenge()
        return ok(self.result)

    def __call__(self, url, **kwargs):
        prepared = requests.Request(
            "POST", url, data=kwargs.get("data"), headers=kwargs.get("headers"), auth=kwargs.get("auth")
        ).prepare()
        return self.respond(url, prepared.headers, auth=kwargs.get("auth"))
