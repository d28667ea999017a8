"""
Configuration settings for services built on micro_kit.

Each settings model is built from a ``ConfigFile`` section and reports the
missing component by path when a required value is absent.
"""

import logging
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from micro_kit.config.loader import ConfigFile
from micro_kit.exceptions import ConfigError, MissingComponentError

logger = logging.getLogger("micro_kit.config")

DEFAULT_SERVICE_PORT = 8081


class APIConfig(BaseModel):
    """HTTP listener configuration, read from the ``service`` section."""

    address: str = Field(description="Address the API binds to")
    port: int = Field(
        default=DEFAULT_SERVICE_PORT, ge=0, le=65535, description="API port"
    )

    @classmethod
    def from_config(cls, config: ConfigFile) -> "APIConfig":
        """
        Build API settings from a config file.

        Raises:
            MissingComponentError: If ``service`` or ``service.address`` is absent
        """
        if config.get("service") is None:
            raise MissingComponentError("service")
        if config.get("service.address") is None:
            raise MissingComponentError("service -> address")

        try:
            return cls(
                address=config.get_str("service.address"),
                port=config.get_int("service.port", DEFAULT_SERVICE_PORT),
            )
        except ValidationError as e:
            raise ConfigError(f"Invalid service configuration: {e}", config_key="service") from e

    def get_conn(self) -> str:
        """Return the ``address:port`` string the server binds to."""
        return f"{self.address}:{self.port}"


class ProducerSettings(BaseModel):
    """Message-broker producer settings."""

    topic: str | None = Field(default=None, description="Default topic to publish to")
    acks: Literal["0", "1", "all"] = Field(
        default="all", description="Acknowledgements required from the broker"
    )
    linger_ms: int = Field(default=5, ge=0, description="Batching delay in ms")

    @field_validator("acks", mode="before")
    @classmethod
    def _acks_as_string(cls, value):
        return str(value)


class ConsumerSettings(BaseModel):
    """Message-broker consumer settings."""

    group_id: str = Field(description="Consumer group")
    topics: list[str] = Field(default_factory=list, description="Subscribed topics")
    auto_offset_reset: Literal["earliest", "latest"] = Field(
        default="latest", description="Where to start when no offset is committed"
    )


class BrokerConfig(BaseModel):
    """Message-broker client configuration, read from the ``broker`` section."""

    bootstrap: str = Field(description="Bootstrap server in host:port form")
    client_id: str = Field(default="micro-kit", description="Client identifier")
    producer: ProducerSettings | None = Field(default=None)
    consumer: ConsumerSettings | None = Field(default=None)

    @field_validator("bootstrap")
    @classmethod
    def _validate_bootstrap(cls, value: str) -> str:
        if ":" not in value:
            raise ValueError(f"Invalid bootstrap format: {value}")
        host, port = value.rsplit(":", 1)
        if not host or not port.isdigit():
            raise ValueError(f"Invalid bootstrap format: {value}")
        return value

    @property
    def host(self) -> str:
        return self.bootstrap.rsplit(":", 1)[0]

    @property
    def port(self) -> int:
        return int(self.bootstrap.rsplit(":", 1)[1])

    @classmethod
    def from_config(cls, config: ConfigFile) -> "BrokerConfig":
        """
        Build broker settings from a config file.

        Raises:
            MissingComponentError: If ``broker``, ``broker.bootstrap`` or
                ``broker.consumer.group_id`` (when a consumer is configured) is absent
            ConfigError: If a value has the wrong shape
        """
        section = config.get("broker")
        if section is None:
            raise MissingComponentError("broker")
        if not isinstance(section, dict):
            raise ConfigError("broker must be a mapping", config_key="broker")
        if config.get("broker.bootstrap") is None:
            raise MissingComponentError("broker -> bootstrap")
        if config.get("broker.consumer") is not None and (
            config.get("broker.consumer.group_id") is None
        ):
            raise MissingComponentError("broker -> consumer -> group_id")

        try:
            return cls.model_validate(section)
        except ValidationError as e:
            raise ConfigError(f"Invalid broker configuration: {e}", config_key="broker") from e
