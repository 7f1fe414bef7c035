from typing import Optional, Sequence


class MongoContainerError(Exception):
    """Base error for MongoDB container bring-up"""


class MongoConfigurationError(MongoContainerError, ValueError):
    """Container configuration is incomplete or can no longer be changed"""


class MongoCommandError(MongoContainerError):
    """An administrative command run inside the container exited non-zero"""

    def __init__(self, exit_code: int, output: str, command: Optional[Sequence[str]] = None):
        self.exit_code = exit_code
        self.output = output
        self.command = list(command) if command is not None else None
        super().__init__(f"Error running mongo command. Exit code {exit_code}: {output}")
