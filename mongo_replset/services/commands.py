"""
Command lines and shell scripts used to boot a single-node replica set.

Everything here is pure: the functions only look at the configuration they
are given and never touch Docker.
"""
import re
from typing import Dict, List, Optional, Sequence

from mongo_replset.config import (
    AUTH_DATABASE,
    KEYFILE_PATH,
    KEYFILE_RANDOM_BYTES,
    LEGACY_SHELL,
    MODERN_SHELL,
    MODERN_SHELL_MIN_MAJOR,
    PRIMARY_POLL_ATTEMPTS,
    PRIMARY_POLL_INTERVAL_MS,
    REPLICA_SET_NAME,
    ROOT_PASSWORD_ENV,
    ROOT_USERNAME_ENV,
)
from mongo_replset.models.container import MongoContainerConfig

INITIATE_SCRIPT = "rs.initiate();"

_MAJOR_VERSION = re.compile(r"^(\d+)")


def image_tag(image: str) -> Optional[str]:
    """
    Extract the tag from a Docker image reference

    Registry ports (localhost:5000/mongo:6.0) and digests
    (mongo:7.0@sha256:...) are handled.

    Returns:
        The tag, or None when the reference has no tag
    """
    reference = image.split("@", 1)[0]
    name = reference.rsplit("/", 1)[-1]
    if ":" not in name:
        return None
    return name.split(":", 1)[1] or None


def major_version(image: str) -> Optional[int]:
    """Numeric major version prefix of the image tag, if there is one"""
    tag = image_tag(image)
    if tag is None:
        return None
    match = _MAJOR_VERSION.match(tag)
    return int(match.group(1)) if match else None


def shell_binary(image: str) -> str:
    """
    Pick the database shell shipped with the image

    MongoDB 5 and later ship mongosh; older images only have the legacy
    mongo shell. Tags without a numeric major version (latest, no tag) get
    mongosh rather than the legacy shell, because they resolve to current
    images that no longer include mongo.
    """
    major = major_version(image)
    if major is None or major >= MODERN_SHELL_MIN_MAJOR:
        return MODERN_SHELL
    return LEGACY_SHELL


def startup_command(config: MongoContainerConfig) -> List[str]:
    """
    Container command for the server

    With credentials, a random keyfile is generated, locked down to the
    mongodb user and the server is exec'd through the image entrypoint so the
    root user gets created on first boot.
    """
    if not config.has_credentials:
        return ["--replSet", REPLICA_SET_NAME]

    script = " && ".join([
        f"openssl rand -base64 {KEYFILE_RANDOM_BYTES} > {KEYFILE_PATH}",
        f"chmod 600 {KEYFILE_PATH}",
        f"chown mongodb:mongodb {KEYFILE_PATH}",
        f"exec docker-entrypoint.sh mongod --replSet {REPLICA_SET_NAME} "
        f"--keyFile {KEYFILE_PATH} --bind_ip_all",
    ])
    return ["/bin/sh", "-c", script]


def startup_environment(config: MongoContainerConfig) -> Dict[str, str]:
    """Environment variables for the container"""
    if not config.has_credentials:
        return {}
    return {
        ROOT_USERNAME_ENV: config.username,
        ROOT_PASSWORD_ENV: config.password,
    }


def eval_command(config: MongoContainerConfig, script: str) -> List[str]:
    """Database shell invocation evaluating a script inside the container"""
    command = [shell_binary(config.image)]

    if config.has_credentials:
        command += [
            "--username", config.username,
            "--password", config.password,
            "--authenticationDatabase", AUTH_DATABASE,
        ]

    command += ["--eval", script]
    return command


def wait_for_primary_script(
    attempts: int = PRIMARY_POLL_ATTEMPTS,
    interval_ms: int = PRIMARY_POLL_INTERVAL_MS
) -> str:
    """
    Script that polls isMaster until the node is primary

    Exits with status 1 on the `attempts`-th failed check, sleeping
    `interval_ms` between checks.
    """
    return (
        "var attempt = 0; "
        "while (!db.runCommand({isMaster: 1}).ismaster) { "
        "attempt++; "
        f"if (attempt >= {attempts}) {{ quit(1); }} "
        f"print(attempt); sleep({interval_ms}); "
        "}"
    )


def masked(command: Sequence[str]) -> str:
    """Render a command for logging with the password hidden"""
    parts = list(command)
    for idx, part in enumerate(parts[:-1]):
        if part == "--password":
            parts[idx + 1] = "****"
    return " ".join(parts)
