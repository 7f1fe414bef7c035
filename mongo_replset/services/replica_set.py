from typing import Protocol, Sequence
import logging

from docker.models.containers import ExecResult

from mongo_replset.errors import MongoCommandError
from mongo_replset.models.container import MongoContainerConfig
from mongo_replset.services.commands import (
    INITIATE_SCRIPT,
    eval_command,
    masked,
    wait_for_primary_script,
)

logger = logging.getLogger(__name__)


class ExecCapable(Protocol):
    """Anything that can run a command inside a running container"""

    def exec(self, command: Sequence[str]) -> ExecResult:
        ...


class ReplicaSetInitializer:
    """Turns a freshly started mongod into a one-node replica set primary"""

    def __init__(self, config: MongoContainerConfig):
        self.config = config

    def initiate(self, container: ExecCapable) -> str:
        """Run rs.initiate() against the node"""
        output = self.run_eval(container, INITIATE_SCRIPT)
        logger.info(f"Replica set initiated on {self.config.image}")
        return output

    def wait_for_primary(self, container: ExecCapable) -> str:
        """Block until the node reports itself as primary"""
        output = self.run_eval(container, wait_for_primary_script())
        logger.info(f"Node running {self.config.image} is primary")
        return output

    def run_eval(self, container: ExecCapable, script: str) -> str:
        """
        Evaluate a script with the database shell inside the container

        Args:
            container: Started container to exec into
            script: JavaScript passed to --eval

        Returns:
            str: Combined stdout/stderr of the shell

        Raises:
            MongoCommandError: The shell exited with a non-zero code
        """
        command = eval_command(self.config, script)
        logger.debug(f"Executing in container: {masked(command)}")

        exit_code, raw_output = container.exec(command)
        output = _decode(raw_output)

        if exit_code != 0:
            logger.error(f"Mongo command failed with exit code {exit_code}: {output}")
            raise MongoCommandError(exit_code, output, command)

        return output


def _decode(raw_output) -> str:
    if raw_output is None:
        return ""
    if isinstance(raw_output, bytes):
        return raw_output.decode("utf-8", errors="replace")
    return str(raw_output)
