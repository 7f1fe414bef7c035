from pydantic_settings import BaseSettings


# MongoDB
MONGODB_PORT = 27017
REPLICA_SET_NAME = "rs0"
AUTH_DATABASE = "admin"

# Keyfile shared by replica set members when authentication is enabled
KEYFILE_PATH = "/tmp/mongo-keyfile"
KEYFILE_RANDOM_BYTES = 756

# Startup
STARTUP_TIMEOUT_SECONDS = 120
READY_LOG_MESSAGE = "waiting for connections"

# Replica set bring-up
PRIMARY_POLL_ATTEMPTS = 60
PRIMARY_POLL_INTERVAL_MS = 100

# Images with a major version at or above this ship mongosh instead of mongo
MODERN_SHELL_MIN_MAJOR = 5
MODERN_SHELL = "mongosh"
LEGACY_SHELL = "mongo"

# Root credentials consumed by the image entrypoint on first boot
ROOT_USERNAME_ENV = "MONGO_INITDB_ROOT_USERNAME"
ROOT_PASSWORD_ENV = "MONGO_INITDB_ROOT_PASSWORD"


class Settings(BaseSettings):
    """Library configuration"""

    # MongoDB
    default_image: str = "mongo:4.0.1"

    # Docker
    docker_container_prefix: str = "mongo-replset"
    docker_label: str = "mongo-replset.managed"

    class Config:
        env_prefix = "MONGO_REPLSET_"
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
