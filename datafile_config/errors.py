"""
Error types for datafile configuration

Two families of errors live here:
- Fatal construction errors (decode, unsupported version). These abort
  construction; there is never a partially built config to hand back.
- Not-found errors, one per entity kind. Accessors never raise these
  themselves - they log them and pass them to the configured error handler,
  then return an empty entity so a live decision path keeps running.
"""

from typing import Optional


class DatafileConfigError(Exception):
    """
    Base exception for datafile configuration errors

    Lets callers catch everything this package signals with a single except
    clause instead of a generic Exception.
    """
    pass


class ConfigDecodeError(DatafileConfigError):
    """Datafile text is null, empty or structurally malformed"""
    pass


class UnsupportedVersionError(ConfigDecodeError):
    """Datafile declares a version this package does not understand"""

    def __init__(self, version: Optional[str]):
        self.version = version
        super().__init__(
            f"This version of the datafile config package does not support "
            f"the given datafile version: {version}"
        )


class EntityNotFoundError(DatafileConfigError):
    """
    Requested entity is not in the datafile

    `keys` holds the key(s)/id(s) used for the lookup, in argument order.
    """

    entity_kind = "entity"

    def __init__(self, *keys: str):
        self.keys = keys
        quoted = ", ".join(f'"{key}"' for key in keys)
        super().__init__(f"Provided {self.entity_kind} ({quoted}) is not in datafile.")


class InvalidGroupError(EntityNotFoundError):
    entity_kind = "group"


class InvalidExperimentError(EntityNotFoundError):
    entity_kind = "experiment"


class InvalidEventError(EntityNotFoundError):
    entity_kind = "event"


class InvalidAudienceError(EntityNotFoundError):
    entity_kind = "audience"


class InvalidAttributeError(EntityNotFoundError):
    entity_kind = "attribute"


class InvalidVariationError(EntityNotFoundError):
    entity_kind = "variation"


class InvalidFeatureError(EntityNotFoundError):
    entity_kind = "feature"


class InvalidRolloutError(EntityNotFoundError):
    entity_kind = "rollout"
