"""
Pytest configuration for unit tests
"""
import pytest
import logging
from typing import Callable, List, Optional

from docker.models.containers import ExecResult

from mongo_replset.services import container as container_module

logging.basicConfig(level=logging.DEBUG)

READY_LINE = b"2024-01-01T00:00:00.000+0000 I NETWORK  [initandlisten] waiting for connections on port 27017\n"
READY_LINE_JSON = b'{"t":{"$date":"2024-01-01T00:00:00.000+00:00"},"s":"I","c":"NETWORK","msg":"Waiting for connections"}\n'


class FakeContainer:
    """In-memory stand-in for testcontainers' DockerContainer"""

    def __init__(self, image: str, **kwargs):
        self.image = image
        self.kwargs = kwargs
        self.name: Optional[str] = None
        self.ports: List[int] = []
        self.command = None
        self.env = {}
        self.started = False
        self.stopped = False
        self.exec_calls: List[List[str]] = []
        self.exec_results: List[ExecResult] = []
        self.stdout = READY_LINE
        self.stderr = b""
        self.start_error: Optional[Exception] = None
        self.wait_strategy = None
        self.host = "localhost"
        self.mapped_port = "32768"

    def with_name(self, name):
        self.name = name
        return self

    def with_exposed_ports(self, *ports):
        self.ports.extend(ports)
        return self

    def with_command(self, command):
        self.command = command
        return self

    def with_env(self, key, value):
        self.env[key] = value
        return self

    def waiting_for(self, strategy):
        self.wait_strategy = strategy
        return self

    def start(self):
        if self.start_error is not None:
            raise self.start_error
        self.started = True
        if self.wait_strategy is not None:
            self.wait_strategy.wait_until_ready(self)
        return self

    def stop(self, force=True, delete_volume=True):
        self.stopped = True

    def get_logs(self):
        return self.stdout, self.stderr

    def exec(self, command):
        self.exec_calls.append(list(command))
        if self.exec_results:
            return self.exec_results.pop(0)
        return ExecResult(0, b"ok")

    def get_container_host_ip(self):
        return self.host

    def get_exposed_port(self, port):
        return self.mapped_port


class ContainerFactory:
    """Records every fake container it builds"""

    def __init__(self, configure: Optional[Callable[[FakeContainer], None]] = None):
        self.configure = configure
        self.created: List[FakeContainer] = []

    def __call__(self, image, **kwargs):
        container = FakeContainer(image, **kwargs)
        if self.configure is not None:
            self.configure(container)
        self.created.append(container)
        return container

    @property
    def last(self) -> FakeContainer:
        return self.created[-1]


@pytest.fixture
def factory():
    return ContainerFactory()


class FakeLogWait:
    """Log wait strategy that checks the fake's logs once"""

    def __init__(self, message):
        self.message = message
        self.timeout = None

    def with_startup_timeout(self, timeout):
        self.timeout = timeout
        return self

    def wait_until_ready(self, container):
        stdout, stderr = container.get_logs()
        if self.message.search(stdout.decode()) or self.message.search(stderr.decode()):
            return
        raise TimeoutError(
            f"Container did not emit logs containing '{self.message.pattern}' "
            f"within {self.timeout:.3f} seconds"
        )


@pytest.fixture(autouse=True)
def log_waits(monkeypatch):
    """Replace the log wait strategy with a single check of the fake's logs."""
    strategies = []

    def build(message):
        strategy = FakeLogWait(message)
        strategies.append(strategy)
        return strategy

    monkeypatch.setattr(container_module, "LogMessageWaitStrategy", build)
    return strategies
