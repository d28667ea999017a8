"""
Service bootstrap.

Wires a YAML config file, logging, the two registries and the HTTP reporting
app together so a service only has to register its checks and metrics.

Example config::

    service:
      address: 0.0.0.0
      port: 8081
    logging:
      handlers:
        console:
          class: logging.StreamHandler
      root:
        level: INFO
        handlers: [console]
"""

from pathlib import Path

from fastapi import FastAPI

from micro_kit.api.api_server import create_api_app, run_server
from micro_kit.config.loader import ConfigFile
from micro_kit.config.settings import APIConfig, BrokerConfig
from micro_kit.monitoring.health_check import HealthCheckRegistry
from micro_kit.monitoring.metrics import MetricsRegistry
from micro_kit.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


class MicroService:
    """
    A configured service instance.

    Owns one ``HealthCheckRegistry`` and one ``MetricsRegistry``; both are
    handed to the HTTP app by reference.
    """

    def __init__(
        self,
        name: str,
        config: ConfigFile,
        check_timeout: float | None = None,
    ):
        self.name = name
        self.config = config
        self.api_config = APIConfig.from_config(config)
        self.health = HealthCheckRegistry(check_timeout=check_timeout)
        self.metrics = MetricsRegistry(name)
        self._app: FastAPI | None = None

    @classmethod
    def from_file(
        cls, name: str, path: str | Path, check_timeout: float | None = None
    ) -> "MicroService":
        """Load the config file, configure logging and build the service."""
        config = ConfigFile.open(path)
        configure_logging(config)
        return cls(name, config, check_timeout=check_timeout)

    def broker_config(self) -> BrokerConfig:
        """Message-broker client settings from the ``broker`` section."""
        return BrokerConfig.from_config(self.config)

    @property
    def app(self) -> FastAPI:
        if self._app is None:
            self._app = create_api_app(self.health, self.metrics, title=self.name)
        return self._app

    def run(self) -> None:
        """Serve the reporting endpoints until interrupted."""
        logger.info(f"Starting {self.name} on {self.api_config.get_conn()}")
        run_server(self.app, self.api_config)
