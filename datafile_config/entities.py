"""
Datafile entities - the records decoded from a datafile

Every entity is an immutable pydantic model:
- Field names are snake_case; the datafile's camelCase keys are accepted as
  aliases, so both `{"layerId": ...}` and `layer_id=...` work.
- Unknown keys are ignored. Datafiles grow new fields over time and older
  packages must keep reading them.
- Every field has a default, so `Experiment()` is a valid empty entity.
  Config accessors return these on a miss instead of None.
- null/absent nested lists become empty tuples.
- Opaque payloads (audience conditions, forced variations) are frozen into
  tuples and read-only mappings, so entities shared by every accessor
  cannot be changed after construction.
"""

from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def none_as_empty(value: Any) -> Any:
    """Treat a null collection as "no entities of this kind" """
    return () if value is None else value


def freeze(value: Any) -> Any:
    """Recursively turn dicts into read-only mappings and lists into tuples"""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    return value


class DatafileEntity(BaseModel):
    """Shared model configuration for all datafile records"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )


class VariableUsage(DatafileEntity):
    """Value a variation assigns to a feature variable"""

    id: str = ""
    value: str = ""


class Variation(DatafileEntity):
    id: str = ""
    key: str = ""
    feature_enabled: Optional[bool] = None
    variables: Tuple[VariableUsage, ...] = ()

    @field_validator("variables", mode="before")
    @classmethod
    def default_empty_collections(cls, value: Any) -> Any:
        return none_as_empty(value)


class TrafficAllocation(DatafileEntity):
    entity_id: str = ""
    end_of_range: int = 0


class Experiment(DatafileEntity):
    """
    An experiment, or a rollout rule (rules share the experiment shape)

    group_id / group_policy stay None for top-level experiments. They are
    stamped on when a grouped experiment is merged into the flat experiment
    space during indexing.
    """

    id: str = ""
    key: str = ""
    status: str = ""
    layer_id: str = ""
    variations: Tuple[Variation, ...] = ()
    traffic_allocation: Tuple[TrafficAllocation, ...] = ()
    audience_ids: Tuple[str, ...] = ()
    audience_conditions: Any = None
    forced_variations: Mapping[str, str] = Field(default_factory=lambda: MappingProxyType({}))
    group_id: Optional[str] = None
    group_policy: Optional[str] = None

    @field_validator("variations", "traffic_allocation", "audience_ids", mode="before")
    @classmethod
    def default_empty_collections(cls, value: Any) -> Any:
        return none_as_empty(value)

    @field_validator("forced_variations", mode="before")
    @classmethod
    def default_empty_forced_variations(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("audience_conditions", "forced_variations", mode="after")
    @classmethod
    def freeze_payloads(cls, value: Any) -> Any:
        return freeze(value)

    @property
    def is_in_group(self) -> bool:
        return self.group_id is not None


class Group(DatafileEntity):
    """Mutually exclusive set of experiments sharing a traffic policy"""

    id: str = ""
    policy: str = ""
    experiments: Tuple[Experiment, ...] = ()
    traffic_allocation: Tuple[TrafficAllocation, ...] = ()

    @field_validator("experiments", "traffic_allocation", mode="before")
    @classmethod
    def default_empty_collections(cls, value: Any) -> Any:
        return none_as_empty(value)


class Rollout(DatafileEntity):
    """Ordered rollout rules used for gradual feature delivery"""

    id: str = ""
    experiments: Tuple[Experiment, ...] = ()

    @field_validator("experiments", mode="before")
    @classmethod
    def default_empty_collections(cls, value: Any) -> Any:
        return none_as_empty(value)


class Event(DatafileEntity):
    id: str = ""
    key: str = ""
    experiment_ids: Tuple[str, ...] = ()

    @field_validator("experiment_ids", mode="before")
    @classmethod
    def default_empty_collections(cls, value: Any) -> Any:
        return none_as_empty(value)


class Attribute(DatafileEntity):
    id: str = ""
    key: str = ""


class Audience(DatafileEntity):
    """
    Audience definition

    Plain audiences carry their conditions as a serialized string, typed
    audiences as structured data; both are kept opaque here.
    """

    id: str = ""
    name: str = ""
    conditions: Any = None

    @field_validator("conditions", mode="after")
    @classmethod
    def freeze_conditions(cls, value: Any) -> Any:
        return freeze(value)


class FeatureVariable(DatafileEntity):
    id: str = ""
    key: str = ""
    type: str = ""
    default_value: str = ""


class FeatureFlag(DatafileEntity):
    id: str = ""
    key: str = ""
    rollout_id: str = ""
    experiment_ids: Tuple[str, ...] = ()
    variables: Tuple[FeatureVariable, ...] = ()

    @field_validator("experiment_ids", "variables", mode="before")
    @classmethod
    def default_empty_collections(cls, value: Any) -> Any:
        return none_as_empty(value)


class FeatureView(DatafileEntity):
    """
    Read-only view of a feature flag with its rules resolved

    experiment_rules follow the feature's experiment id order, delivery_rules
    the order of the rules in the feature's rollout. variables_map is keyed
    by variable id.
    """

    id: str = ""
    key: str = ""
    experiment_rules: Tuple[Experiment, ...] = ()
    delivery_rules: Tuple[Experiment, ...] = ()
    variables_map: Mapping[str, FeatureVariable] = Field(
        default_factory=lambda: MappingProxyType({})
    )

    @field_validator("variables_map", mode="after")
    @classmethod
    def freeze_variables_map(cls, value: Any) -> Any:
        return MappingProxyType(dict(value))
