from typing import Any, Callable, Optional, Sequence
import logging
import re
import uuid

from docker.models.containers import ExecResult
from pymongo import MongoClient
from testcontainers.core.container import DockerContainer
from testcontainers.core.wait_strategies import LogMessageWaitStrategy

from mongo_replset.config import (
    AUTH_DATABASE,
    MONGODB_PORT,
    READY_LOG_MESSAGE,
    STARTUP_TIMEOUT_SECONDS,
    settings,
)
from mongo_replset.errors import MongoConfigurationError
from mongo_replset.models.container import ActivationState, MongoContainerConfig
from mongo_replset.services.commands import startup_command, startup_environment
from mongo_replset.services.replica_set import ReplicaSetInitializer

logger = logging.getLogger(__name__)


class StartedMongoDbContainer:
    """A running MongoDB node that has become replica set primary"""

    def __init__(
        self,
        container: DockerContainer,
        username: Optional[str] = None,
        password: Optional[str] = None
    ):
        self._container = container
        self._username = username
        self._password = password
        self._stopped = False

    @property
    def container(self) -> DockerContainer:
        return self._container

    @property
    def username(self) -> Optional[str]:
        return self._username

    @property
    def password(self) -> Optional[str]:
        return self._password

    def get_host(self) -> str:
        return self._container.get_container_host_ip()

    def get_mapped_port(self) -> int:
        return int(self._container.get_exposed_port(MONGODB_PORT))

    def get_connection_string(self) -> str:
        """Get MongoDB connection string for the node"""
        if self._username is not None and self._password is not None:
            return (
                f"mongodb://{self._username}:{self._password}"
                f"@{self.get_host()}:{self.get_mapped_port()}"
            )

        return f"mongodb://{self.get_host()}:{self.get_mapped_port()}"

    def get_client(self, **kwargs: Any) -> MongoClient:
        """
        Create a pymongo client for the node

        The replica set member is registered under its in-container hostname,
        which is not resolvable from the host, so the client connects
        directly instead of discovering the set.
        """
        options: dict = {"directConnection": True}
        if self._username is not None and self._password is not None:
            options.update(
                username=self._username,
                password=self._password,
                authSource=AUTH_DATABASE
            )
        options.update(kwargs)
        return MongoClient(self.get_host(), self.get_mapped_port(), **options)

    def exec(self, command: Sequence[str]) -> ExecResult:
        """Run a command inside the container"""
        return self._container.exec(list(command))

    def stop(self):
        """Stop and remove the container"""
        if self._stopped:
            return
        self._container.stop()
        self._stopped = True
        logger.info("Stopped MongoDB container")

    def __enter__(self) -> "StartedMongoDbContainer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()


class MongoDbContainer:
    """
    Builds and starts a single-node MongoDB replica set in Docker

    Usage:
        with MongoDbContainer("mongo:6.0").with_username("root").with_password("pass") as mongo:
            client = mongo.get_client()
    """

    def __init__(
        self,
        image: Optional[str] = None,
        container_factory: Callable[..., DockerContainer] = DockerContainer
    ):
        """
        Args:
            image: MongoDB image, defaults to settings.default_image
            container_factory: Builds the underlying container from an image
        """
        self.image = image or settings.default_image
        self._username: Optional[str] = None
        self._password: Optional[str] = None
        self._container_factory = container_factory
        self._config: Optional[MongoContainerConfig] = None
        self._started: Optional[StartedMongoDbContainer] = None
        self.state = ActivationState.CONFIGURED

    @property
    def config(self) -> Optional[MongoContainerConfig]:
        """Configuration snapshot taken at start, None before"""
        return self._config

    def with_username(self, username: str) -> "MongoDbContainer":
        self._ensure_configurable()
        self._username = username
        return self

    def with_password(self, password: str) -> "MongoDbContainer":
        self._ensure_configurable()
        self._password = password
        return self

    def _ensure_configurable(self):
        if self.state != ActivationState.CONFIGURED:
            raise MongoConfigurationError(
                f"Configuration is frozen once startup begins (state: {self.state.value})"
            )

    def _freeze(self) -> MongoContainerConfig:
        config = MongoContainerConfig(
            image=self.image,
            username=self._username,
            password=self._password
        )
        if config.has_partial_credentials:
            raise MongoConfigurationError(
                "Username and password must be set together"
            )
        return config

    def _create_container(self, config: MongoContainerConfig) -> DockerContainer:
        """Translate the configuration into container startup parameters"""
        name = f"{settings.docker_container_prefix}-{uuid.uuid4().hex[:12]}"

        container = self._container_factory(
            config.image,
            labels={settings.docker_label: "true"}
        )
        container.with_name(name)
        container.with_exposed_ports(MONGODB_PORT)
        container.with_command(startup_command(config))
        for key, value in startup_environment(config).items():
            container.with_env(key, value)
        container.waiting_for(
            LogMessageWaitStrategy(readiness_pattern(config))
            .with_startup_timeout(STARTUP_TIMEOUT_SECONDS)
        )

        return container

    def start(self) -> StartedMongoDbContainer:
        """
        Start the container and bring up the replica set

        Returns:
            StartedMongoDbContainer: Handle on the primary node

        Raises:
            MongoConfigurationError: Partial credentials, or already started
            TimeoutError: The server never logged readiness
            MongoCommandError: A replica set command exited non-zero
        """
        self._ensure_configurable()

        try:
            config = self._freeze()
        except MongoConfigurationError:
            self.state = ActivationState.FAILED
            raise
        self._config = config

        container: Optional[DockerContainer] = None
        self.state = ActivationState.STARTING
        logger.info(f"Starting MongoDB container from {config.image}")

        try:
            container = self._create_container(config)

            # DockerContainer.start() blocks until the wait strategy is satisfied
            self.state = ActivationState.AWAITING_LOG
            container.start()
            logger.info("MongoDB is waiting for connections")

            self._container_started(container, config)

        except Exception as e:
            self.state = ActivationState.FAILED
            logger.error(f"Failed to start MongoDB container from {config.image}: {e}")
            if container is not None:
                _discard(container)
            raise

        self.state = ActivationState.READY
        self._started = StartedMongoDbContainer(container, config.username, config.password)
        return self._started

    def _container_started(self, container: DockerContainer, config: MongoContainerConfig):
        """Initialize the replica set and wait for the node to become primary"""
        initializer = ReplicaSetInitializer(config)

        self.state = ActivationState.INITIATING
        initializer.initiate(container)

        self.state = ActivationState.POLLING_PRIMARY
        initializer.wait_for_primary(container)

    def __enter__(self) -> StartedMongoDbContainer:
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._started is not None:
            self._started.stop()


def readiness_pattern(config: MongoContainerConfig) -> re.Pattern:
    """Log pattern that marks the server as ready for connections"""
    # With credentials the entrypoint runs a temporary server to create the
    # root user before the real one starts; both log the readiness line.
    expected = 2 if config.has_credentials else 1
    return re.compile(
        ".*".join([re.escape(READY_LOG_MESSAGE)] * expected),
        re.IGNORECASE | re.DOTALL
    )


def _discard(container: DockerContainer):
    try:
        container.stop()
    except Exception as e:
        logger.warning(f"Failed to remove MongoDB container after failed start: {e}")
