from mongo_replset.models.container import ActivationState, MongoContainerConfig

__all__ = ["ActivationState", "MongoContainerConfig"]
