"""Ephemeral single-node MongoDB replica sets in Docker for integration tests"""
from mongo_replset.config import MONGODB_PORT, REPLICA_SET_NAME, settings
from mongo_replset.errors import (
    MongoCommandError,
    MongoConfigurationError,
    MongoContainerError,
)
from mongo_replset.models.container import ActivationState, MongoContainerConfig
from mongo_replset.services.container import MongoDbContainer, StartedMongoDbContainer

__all__ = [
    "ActivationState",
    "MONGODB_PORT",
    "MongoCommandError",
    "MongoConfigurationError",
    "MongoContainerConfig",
    "MongoContainerError",
    "MongoDbContainer",
    "REPLICA_SET_NAME",
    "StartedMongoDbContainer",
    "settings",
]
