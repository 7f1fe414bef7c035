"""
Pytest configuration for integration tests
"""
import pytest
import docker
import logging

from mongo_replset.config import settings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

TEST_IMAGE = "mongo:4.0.1"
TEST_MODERN_IMAGE = "mongo:7.0"
TEST_USERNAME = "root"
TEST_PASSWORD = "pass"


@pytest.fixture(scope="session")
def docker_client():
    """Get Docker client, skipping when no daemon is reachable."""
    try:
        client = docker.from_env()
        client.ping()
    except docker.errors.DockerException as e:
        pytest.skip(f"Docker is not available: {e}")
    yield client
    client.close()


def cleanup_test_containers(docker_client: docker.DockerClient):
    """Remove containers left behind by earlier runs."""
    logger.info("Cleaning up test containers...")

    try:
        containers = docker_client.containers.list(
            all=True,
            filters={"label": f"{settings.docker_label}=true"}
        )
        for container in containers:
            logger.info(f"Removing container: {container.name}")
            container.remove(force=True)
    except docker.errors.APIError as e:
        logger.warning(f"Error removing containers: {e}")


@pytest.fixture(scope="session", autouse=True)
def setup_and_teardown(docker_client):
    """Setup before all tests and cleanup after all tests."""
    cleanup_test_containers(docker_client)

    yield

    logger.info("Test session complete. Cleaning up...")
    cleanup_test_containers(docker_client)
