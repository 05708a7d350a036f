"""HTTP transport for the daemon's ``/json_rpc`` endpoint.

The daemon answers unauthenticated requests with ``401`` and a
``WWW-Authenticate`` challenge when it runs with ``--rpc-login``. The transport
answers that challenge once and remembers it, so later calls can send the
``Authorization`` header up front.
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import requests
from requests import Response
from requests.auth import AuthBase, HTTPBasicAuth, HTTPDigestAuth
from requests.utils import parse_dict_header

from .errors import AuthenticationError, TransportError

LOGGER = logging.getLogger(__name__)

JSON_RPC_PATH = "/json_rpc"

# Splits a merged header such as 'Digest a=1,b=2, Digest a=3' into challenges.
_CHALLENGE_SPLIT = re.compile(r",\s*(?=(?:digest|basic)\s)", flags=re.IGNORECASE)

Challenge = Tuple[str, Dict[str, str]]


@dataclass(frozen=True)
class Endpoint:
    host: str = "127.0.0.1"
    port: int = 18081
    scheme: str = "http"
    username: str = ""
    password: str = field(default="", repr=False)

    @property
    def url(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{self.scheme}://{host}:{self.port}{JSON_RPC_PATH}"

    @property
    def credentials(self) -> Optional[tuple[str, str]]:
        if self.username or self.password:
            return self.username, self.password
        return None


def parse_challenges(header: str) -> List[Challenge]:
    """Return ``(scheme, params)`` pairs found in a ``WWW-Authenticate`` value."""

    challenges: List[Challenge] = []
    for chunk in _CHALLENGE_SPLIT.split(header.strip()):
        scheme, _, params = chunk.strip().partition(" ")
        if scheme:
            challenges.append((scheme.lower(), parse_dict_header(params)))
    return challenges


class DigestCredentials(HTTPDigestAuth):
    """Digest auth computed against a challenge we parsed ourselves.

    ``HTTPDigestAuth`` keeps the nonce counter in thread-local storage, so one
    instance can be shared by concurrent callers.
    """

    def header_for(self, challenge: Dict[str, str], method: str, url: str) -> Optional[str]:
        self.init_per_thread_state()
        self._thread_local.chal = challenge
        return self.build_digest_header(method, url)


class PresetAuthorization(AuthBase):
    """Attach an already computed ``Authorization`` header.

    requests only falls back to ~/.netrc credentials when ``auth`` is empty.
    """

    def __init__(self, header: str) -> None:
        self.header = header

    def __call__(self, request):
        request.headers["Authorization"] = self.header
        return request


class Transport:
    """POST raw JSON bodies to the daemon, answering one auth challenge per call."""

    def __init__(self, endpoint: Endpoint, timeout: float = 10) -> None:
        self.endpoint = endpoint
        self.timeout = timeout
        credentials = endpoint.credentials
        self._digest = DigestCredentials(*credentials) if credentials else None
        self._basic = HTTPBasicAuth(*credentials) if credentials else None
        self._challenge_lock = threading.Lock()
        self._challenge: Optional[Challenge] = None

    @property
    def url(self) -> str:
        return self.endpoint.url

    def send(self, body: bytes) -> tuple[int, bytes]:
        response = self._post(body, self._cached_challenge())
        if response.status_code == 401:
            challenge = self._select_challenge(response)
            LOGGER.debug("Daemon requested %s authentication, retrying", challenge[0])
            response = self._post(body, challenge)
            if response.status_code == 401:
                self._remember_challenge(None)
                LOGGER.warning("Daemon at %s rejected credentials for %r", self.url, self.endpoint.username)
                raise AuthenticationError(f"daemon at {self.url} rejected credentials", status_code=401)
            self._remember_challenge(challenge)

        if not 200 <= response.status_code < 300:
            raise TransportError(
                f"daemon at {self.url} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        LOGGER.debug("Daemon answered HTTP %s", response.status_code)
        return response.status_code, response.content

    def _post(self, body: bytes, challenge: Optional[Challenge]) -> Response:
        headers = {"Content-Type": "application/json"}
        auth = None
        if challenge is not None:
            scheme, params = challenge
            if scheme == "basic":
                auth = self._basic
            else:
                auth = PresetAuthorization(self._digest_header(params))
        try:
            return requests.post(
                self.url,
                data=body,
                headers=headers,
                auth=auth,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(f"request to {self.url} failed: {exc}") from exc

    def _digest_header(self, params: Dict[str, str]) -> str:
        missing = [key for key in ("realm", "nonce") if not params.get(key)]
        if missing:
            raise AuthenticationError(
                f"digest challenge from {self.url} lacks {', '.join(missing)}",
                status_code=401,
            )
        header = self._digest.header_for(params, "POST", self.url) if self._digest else None
        if header is None:
            raise AuthenticationError(
                "unsupported digest challenge "
                f"(algorithm={params.get('algorithm')!r}, qop={params.get('qop')!r})",
                status_code=401,
            )
        return header

    def _select_challenge(self, response: Response) -> Challenge:
        if self._digest is None:
            raise AuthenticationError(
                f"daemon at {self.url} requires authentication but no credentials are configured",
                status_code=401,
            )
        header = response.headers.get("WWW-Authenticate", "")
        challenges = parse_challenges(header)
        for wanted in ("digest", "basic"):
            for scheme, params in challenges:
                if scheme == wanted:
                    return scheme, params
        raise AuthenticationError(f"unsupported authentication challenge {header!r}", status_code=401)

    def _cached_challenge(self) -> Optional[Challenge]:
        with self._challenge_lock:
            return self._challenge

    def _remember_challenge(self, challenge: Optional[Challenge]) -> None:
        with self._challenge_lock:
            self._challenge = challenge
