"""ServiceSettings: connection and naming configuration for a code-intelligence service."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from sgref.serde import optional_float, optional_string, string_mapping

DEFAULT_SERVICE_URL = "https://sourcegraph.com"
SHORT_SCHEME = "sg://"
DEFAULT_HOST_ALIASES: Mapping[str, str] = MappingProxyType({"gh": "github.com"})
DEFAULT_TIMEOUT = 10.0

ENV_SERVICE_URL = "SRC_ENDPOINT"
ENV_ACCESS_TOKEN = "SRC_ACCESS_TOKEN"
ENV_TIMEOUT = "SRC_TIMEOUT"


@dataclass(frozen=True, slots=True)
class ServiceSettings:
    """Where the service lives, how to authenticate, and which host aliases to accept.

    Settings are plain values passed explicitly to the pipeline and to the
    GraphQL source. ``from_env`` is a convenience for building one from the
    conventional ``SRC_*`` variables; nothing reads the environment implicitly.
    """

    service_url: str = DEFAULT_SERVICE_URL
    access_token: str | None = None
    host_aliases: Mapping[str, str] = field(default_factory=lambda: DEFAULT_HOST_ALIASES)
    timeout: float | None = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        """Drop a trailing slash from the service URL and freeze the alias mapping."""
        if not self.service_url:
            msg = "service_url cannot be empty."
            raise ValueError(msg)
        if self.timeout is not None and self.timeout <= 0:
            msg = "timeout must be positive or None."
            raise ValueError(msg)
        object.__setattr__(self, "service_url", self.service_url.rstrip("/"))
        object.__setattr__(
            self,
            "host_aliases",
            MappingProxyType({str(alias): host for alias, host in self.host_aliases.items()}),
        )

    @property
    def graphql_url(self) -> str:
        """Return the GraphQL API endpoint of the service."""
        return f"{self.service_url}/.api/graphql"

    def headers(self) -> dict[str, str]:
        """Return HTTP headers for API requests, including authorization when a token is set."""
        headers = {"Content-Type": "application/json"}
        if self.access_token:
            headers["Authorization"] = f"token {self.access_token}"
        return headers

    @classmethod
    def from_dict(cls, value: Mapping[str, object]) -> "ServiceSettings":
        """Build settings from a plain mapping, such as a parsed config file section."""
        service_url = optional_string(value.get("service_url"), field_name="ServiceSettings.service_url")
        host_aliases = string_mapping(value.get("host_aliases"), field_name="ServiceSettings.host_aliases")
        timeout = value.get("timeout", DEFAULT_TIMEOUT)
        return cls(
            service_url=service_url or DEFAULT_SERVICE_URL,
            access_token=optional_string(value.get("access_token"), field_name="ServiceSettings.access_token"),
            host_aliases=DEFAULT_HOST_ALIASES if host_aliases is None else host_aliases,
            timeout=optional_float(timeout, field_name="ServiceSettings.timeout"),
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ServiceSettings":
        """Build settings from ``SRC_ENDPOINT``, ``SRC_ACCESS_TOKEN`` and ``SRC_TIMEOUT``."""
        env = os.environ if environ is None else environ
        timeout = DEFAULT_TIMEOUT
        raw_timeout = env.get(ENV_TIMEOUT)
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError as exc:
                msg = f"{ENV_TIMEOUT} must be a number, got {raw_timeout!r}."
                raise ValueError(msg) from exc
        return cls(
            service_url=env.get(ENV_SERVICE_URL) or DEFAULT_SERVICE_URL,
            access_token=env.get(ENV_ACCESS_TOKEN) or None,
            timeout=timeout,
        )
