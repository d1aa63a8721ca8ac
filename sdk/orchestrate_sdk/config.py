"""
Client configuration for the Orchestrate SDK.

Each client holds one immutable ClientConfig; nothing is read from global
state after construction. Settings can be given explicitly or loaded from
environment variables.

Invariants:
    - base_url always ends with "/" so relative paths resolve under it
    - The API key is never included in repr() or log records

How to change safely:
    - Add new settings with defaults that keep existing callers working
    - Document new environment variables in from_env()
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.orchestrate.io/v0/"
DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class ClientConfig:
    """Connection settings for one client.

    Attributes:
        auth_token: API key, sent as the HTTP Basic user name
        base_url: API root; all request paths are relative to it
        timeout: Per-request timeout in seconds, enforced by the transport
        link_prefix: Path prefix the service puts on pagination links.
            Defaults to the path of base_url (e.g. "/v0/").
    """

    auth_token: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    link_prefix: str | None = None

    def __post_init__(self) -> None:
        """Validate and normalise settings."""
        if not self.auth_token:
            raise ValueError("auth_token cannot be empty")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")

        parts = urlsplit(self.base_url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"base_url must be an absolute http(s) URL, got {self.base_url!r}")
        if not self.base_url.endswith("/"):
            object.__setattr__(self, "base_url", self.base_url + "/")

        if self.link_prefix is not None:
            prefix = "/" + self.link_prefix.strip("/") + "/"
            object.__setattr__(self, "link_prefix", prefix.replace("//", "/"))

    @property
    def root_path(self) -> str:
        """Path prefix that pagination links are relative to."""
        if self.link_prefix is not None:
            return self.link_prefix
        return urlsplit(self.base_url).path or "/"

    @classmethod
    def from_env(cls) -> ClientConfig:
        """Load configuration from environment variables.

        Reads ORCHESTRATE_API_KEY (required), ORCHESTRATE_BASE_URL,
        ORCHESTRATE_TIMEOUT and ORCHESTRATE_LINK_PREFIX.
        """
        auth_token = os.getenv("ORCHESTRATE_API_KEY", "")
        if not auth_token:
            raise ValueError("ORCHESTRATE_API_KEY is not set")

        config = cls(
            auth_token=auth_token,
            base_url=os.getenv("ORCHESTRATE_BASE_URL", DEFAULT_BASE_URL),
            timeout=float(os.getenv("ORCHESTRATE_TIMEOUT", str(DEFAULT_TIMEOUT))),
            link_prefix=os.getenv("ORCHESTRATE_LINK_PREFIX") or None,
        )
        logger.debug(f"Loaded client config for {config.base_url}")
        return config
