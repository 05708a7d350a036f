"""Configuration loader for the daemon RPC client."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .transport import Endpoint


class DaemonConfig(BaseSettings):
    """Pydantic-based configuration model."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    monero_rpc_host: str = "127.0.0.1"
    monero_rpc_port: int = 18081
    monero_rpc_scheme: str = "http"
    monero_rpc_user: str = ""
    monero_rpc_password: str = ""
    monero_rpc_login: Optional[str] = None
    monero_rpc_timeout: float = 10

    daemon_rpc_log_level: str = "INFO"

    @field_validator("monero_rpc_host", mode="before")
    @classmethod
    def strip_host(cls, value: object) -> str:
        host = str(value or "").strip()
        if not host:
            raise ValueError("MONERO_RPC_HOST must not be blank")
        return host

    @field_validator("monero_rpc_scheme", mode="before")
    @classmethod
    def validate_scheme(cls, value: object) -> str:
        allowed = {"http", "https"}
        scheme = str(value or "http").strip().lower()
        if scheme not in allowed:
            raise ValueError(f"MONERO_RPC_SCHEME must be one of {sorted(allowed)}")
        return scheme

    @field_validator("monero_rpc_port")
    @classmethod
    def validate_port(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ValueError("MONERO_RPC_PORT must be between 1 and 65535")
        return value

    @field_validator("monero_rpc_timeout")
    @classmethod
    def positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("MONERO_RPC_TIMEOUT must be positive")
        return value

    @field_validator("monero_rpc_login", mode="before")
    @classmethod
    def validate_login(cls, value: str | None) -> str | None:
        """Accept the ``user:password`` form used by ``monerod --rpc-login``."""

        if value is None:
            return None
        login = str(value).strip()
        if not login:
            return None
        if ":" not in login:
            raise ValueError("MONERO_RPC_LOGIN must look like user:password")
        return login

    @property
    def credentials(self) -> tuple[str, str]:
        """Explicit user/password win over ``monero_rpc_login``."""

        if self.monero_rpc_user or self.monero_rpc_password:
            return self.monero_rpc_user, self.monero_rpc_password
        if self.monero_rpc_login:
            username, password = self.monero_rpc_login.split(":", 1)
            return username, password
        return "", ""

    def endpoint(self) -> Endpoint:
        username, password = self.credentials
        return Endpoint(
            host=self.monero_rpc_host,
            port=self.monero_rpc_port,
            scheme=self.monero_rpc_scheme,
            username=username,
            password=password,
        )


def load_config(**overrides: Any) -> DaemonConfig:
    """Load configuration from environment variables.

    Keyword overrides (for example values given on the command line) take
    precedence over the environment.
    """

    return DaemonConfig(**overrides)
