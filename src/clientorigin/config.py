"""Configuration of trusted proxies and logging."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from safir.logging import LogLevel, Profile, configure_logging

from ._factory import RequestFactory
from ._ipmatch import ProxyRangeSet, parse_pattern
from ._resolver import ClientAttributeResolver

__all__ = ["ProxyConfig"]


class ProxyConfig(BaseSettings):
    """Settings for resolving clients behind proxies.

    Every setting may be given in the environment with a ``CLIENTORIGIN_``
    prefix. ``CLIENTORIGIN_TRUSTED_PROXIES`` is a comma-separated list.
    """

    model_config = SettingsConfigDict(
        env_prefix="CLIENTORIGIN_", case_sensitive=False
    )

    trusted_proxies: Annotated[list[str], NoDecode] = Field(
        [],
        title="Trusted proxies",
        description=(
            "IP addresses and CIDR blocks of the proxies whose forwarding"
            " headers are believed"
        ),
        examples=[["10.0.0.0/8", "192.168.1.1", "2001:db8::/32"]],
    )

    logger_name: str = Field(
        "clientorigin",
        title="Logger name",
        description="Name of the logger configured by `configure_logging`",
    )

    log_level: LogLevel = Field(
        LogLevel.INFO,
        title="Log level",
        description="Python log level for the configured logger",
    )

    profile: Profile = Field(
        Profile.production,
        title="Logging profile",
        description="Whether to log JSON (production) or text (development)",
    )

    @field_validator("trusted_proxies", mode="before")
    @classmethod
    def _split_trusted_proxies(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [p.strip() for p in v.split(",") if p.strip()]
        return v

    @field_validator("trusted_proxies")
    @classmethod
    def _validate_trusted_proxies(cls, v: list[str]) -> list[str]:
        for pattern in v:
            parse_pattern(pattern)
        return v

    @property
    def proxy_range_set(self) -> ProxyRangeSet:
        """The trusted proxies as a `~clientorigin.ProxyRangeSet`."""
        return ProxyRangeSet(self.trusted_proxies)

    def build_resolver(self) -> ClientAttributeResolver:
        """Create a resolver trusting the configured proxies."""
        return ClientAttributeResolver(self.proxy_range_set)

    def build_factory(self) -> RequestFactory:
        """Create a request factory trusting the configured proxies."""
        return RequestFactory(self.proxy_range_set)

    def configure_logging(self) -> None:
        """Configure structlog logging from these settings.

        Debug messages about resolved clients go to the ``clientorigin``
        logger, so set ``logger_name`` to ``clientorigin`` (the default) or
        a parent of it to see them.
        """
        configure_logging(
            name=self.logger_name,
            profile=self.profile,
            log_level=self.log_level,
        )
