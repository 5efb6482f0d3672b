"""
Project Config - read-only view of one datafile

DatafileProjectConfig is built once per datafile and then shared by every
consumer. A newer datafile gets a brand new instance; existing ones are
never patched in place, so concurrent readers need no locking.

Lookup contract:
- Hit: the stored entity is returned unchanged.
- Miss: the condition is logged, passed to the error handler, and an empty
  entity of the requested type is returned. Callers can always dereference
  the result; code that cares checks for the empty entity.
"""

import logging
from typing import Callable, List, Mapping, Optional, Tuple, TypeVar

from .datafile import (
    RESERVED_ATTRIBUTE_PREFIX,
    SUPPORTED_DATAFILE_VERSIONS,
    Datafile,
    check_datafile_version,
    decode_datafile,
)
from .entities import (
    Attribute,
    Audience,
    Event,
    Experiment,
    FeatureFlag,
    FeatureView,
    Group,
    Rollout,
    Variation,
)
from .error_handler import ErrorHandler, NoOpErrorHandler
from .errors import (
    EntityNotFoundError,
    InvalidAttributeError,
    InvalidAudienceError,
    InvalidEventError,
    InvalidExperimentError,
    InvalidFeatureError,
    InvalidGroupError,
    InvalidRolloutError,
    InvalidVariationError,
)
from .index import DatafileIndex, VariationMap, build_index

E = TypeVar("E")


class DatafileProjectConfig:
    """
    Compiled, immutable index over a datafile with typed accessors
    """

    SUPPORTED_VERSIONS = SUPPORTED_DATAFILE_VERSIONS
    RESERVED_ATTRIBUTE_PREFIX = RESERVED_ATTRIBUTE_PREFIX

    def __init__(
        self,
        datafile: Datafile,
        content: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        """
        Build the config from an already decoded datafile

        Args:
            datafile: decoded entity set
            content: the raw text the datafile was decoded from, returned
                verbatim by to_datafile()
            logger: sink for not-found and anomaly messages
            error_handler: receives an EntityNotFoundError on every miss

        Raises:
            UnsupportedVersionError: datafile version not supported
        """
        check_datafile_version(datafile.version)

        self._datafile = datafile
        self._content = content
        self._logger = logger or logging.getLogger(__name__)
        self._error_handler = error_handler or NoOpErrorHandler()
        self._index: DatafileIndex = build_index(datafile)

        self._logger.info(
            f"Built project config for project {datafile.project_id or '<unknown>'} "
            f"(datafile version {datafile.version}, revision {datafile.revision})"
        )

    @classmethod
    def create(
        cls,
        content: Optional[str],
        logger: Optional[logging.Logger] = None,
        error_handler: Optional[ErrorHandler] = None,
    ) -> "DatafileProjectConfig":
        """
        Decode datafile text and build a config from it

        Raises:
            ConfigDecodeError: null, empty or malformed datafile
            UnsupportedVersionError: datafile version not supported
        """
        datafile = decode_datafile(content)
        return cls(datafile, content=content, logger=logger, error_handler=error_handler)

    # ------------------------------------------------------------------
    # Project metadata
    # ------------------------------------------------------------------

    @property
    def version(self) -> Optional[str]:
        return self._datafile.version

    @property
    def account_id(self) -> str:
        return self._datafile.account_id

    @property
    def project_id(self) -> str:
        return self._datafile.project_id

    @property
    def revision(self) -> str:
        return self._datafile.revision

    @property
    def sdk_key(self) -> str:
        return self._datafile.sdk_key

    @property
    def environment_key(self) -> str:
        return self._datafile.environment_key

    @property
    def send_flag_decisions(self) -> bool:
        return self._datafile.send_flag_decisions

    @property
    def anonymize_ip(self) -> bool:
        return self._datafile.anonymize_ip

    @property
    def bot_filtering(self) -> Optional[bool]:
        return self._datafile.bot_filtering

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @property
    def error_handler(self) -> ErrorHandler:
        return self._error_handler

    # ------------------------------------------------------------------
    # Decoded entity collections
    # ------------------------------------------------------------------

    @property
    def datafile(self) -> Datafile:
        return self._datafile

    @property
    def groups(self) -> Tuple[Group, ...]:
        return self._datafile.groups

    @property
    def experiments(self) -> Tuple[Experiment, ...]:
        return self._datafile.experiments

    @property
    def events(self) -> Tuple[Event, ...]:
        return self._datafile.events

    @property
    def attributes(self) -> Tuple[Attribute, ...]:
        return self._datafile.attributes

    @property
    def audiences(self) -> Tuple[Audience, ...]:
        return self._datafile.audiences

    @property
    def typed_audiences(self) -> Tuple[Audience, ...]:
        return self._datafile.typed_audiences

    @property
    def feature_flags(self) -> Tuple[FeatureFlag, ...]:
        return self._datafile.feature_flags

    @property
    def rollouts(self) -> Tuple[Rollout, ...]:
        return self._datafile.rollouts

    # ------------------------------------------------------------------
    # Derived maps (read-only views)
    # ------------------------------------------------------------------

    @property
    def group_id_map(self) -> Mapping[str, Group]:
        return self._index.group_id_map

    @property
    def experiment_id_map(self) -> Mapping[str, Experiment]:
        return self._index.experiment_id_map

    @property
    def experiment_key_map(self) -> Mapping[str, Experiment]:
        return self._index.experiment_key_map

    @property
    def event_key_map(self) -> Mapping[str, Event]:
        return self._index.event_key_map

    @property
    def attribute_key_map(self) -> Mapping[str, Attribute]:
        return self._index.attribute_key_map

    @property
    def audience_id_map(self) -> Mapping[str, Audience]:
        return self._index.audience_id_map

    @property
    def feature_key_map(self) -> Mapping[str, FeatureFlag]:
        return self._index.feature_key_map

    @property
    def rollout_id_map(self) -> Mapping[str, Rollout]:
        return self._index.rollout_id_map

    @property
    def variation_key_map(self) -> VariationMap:
        """experiment key -> variation key -> Variation"""
        return self._index.variation_key_map

    @property
    def variation_id_map(self) -> VariationMap:
        """experiment key -> variation id -> Variation"""
        return self._index.variation_id_map

    @property
    def variation_key_map_by_experiment_id(self) -> VariationMap:
        """experiment id -> variation key -> Variation"""
        return self._index.variation_key_map_by_experiment_id

    @property
    def variation_id_map_by_experiment_id(self) -> VariationMap:
        """experiment id -> variation id -> Variation"""
        return self._index.variation_id_map_by_experiment_id

    @property
    def experiment_feature_map(self) -> Mapping[str, Tuple[str, ...]]:
        return self._index.experiment_feature_map

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def _not_found(self, message: str, error: EntityNotFoundError) -> None:
        self._logger.error(message)
        self._error_handler.handle_error(error)

    def _lookup(
        self,
        mapping: Mapping[str, E],
        key: str,
        default: Callable[[], E],
        message: str,
        error: Callable[[], EntityNotFoundError],
    ) -> E:
        if key in mapping:
            return mapping[key]
        self._not_found(message, error())
        return default()

    def _lookup_variation(
        self, variation_map: VariationMap, experiment: str, variation: str, message: str
    ) -> Variation:
        variations = variation_map.get(experiment)
        if variations is not None and variation in variations:
            return variations[variation]
        self._not_found(message, InvalidVariationError(experiment, variation))
        return Variation()

    def get_group(self, group_id: str) -> Group:
        return self._lookup(
            self._index.group_id_map,
            group_id,
            Group,
            f'Group ID "{group_id}" is not in datafile.',
            lambda: InvalidGroupError(group_id),
        )

    def get_experiment_from_key(self, experiment_key: str) -> Experiment:
        return self._lookup(
            self._index.experiment_key_map,
            experiment_key,
            Experiment,
            f'Experiment key "{experiment_key}" is not in datafile.',
            lambda: InvalidExperimentError(experiment_key),
        )

    def get_experiment_from_id(self, experiment_id: str) -> Experiment:
        return self._lookup(
            self._index.experiment_id_map,
            experiment_id,
            Experiment,
            f'Experiment ID "{experiment_id}" is not in datafile.',
            lambda: InvalidExperimentError(experiment_id),
        )

    def get_event(self, event_key: str) -> Event:
        return self._lookup(
            self._index.event_key_map,
            event_key,
            Event,
            f'Event key "{event_key}" is not in datafile.',
            lambda: InvalidEventError(event_key),
        )

    def get_audience(self, audience_id: str) -> Audience:
        return self._lookup(
            self._index.audience_id_map,
            audience_id,
            Audience,
            f'Audience ID "{audience_id}" is not in datafile.',
            lambda: InvalidAudienceError(audience_id),
        )

    def get_attribute(self, attribute_key: str) -> Attribute:
        return self._lookup(
            self._index.attribute_key_map,
            attribute_key,
            Attribute,
            f'Attribute key "{attribute_key}" is not in datafile.',
            lambda: InvalidAttributeError(attribute_key),
        )

    def get_variation_from_key(self, experiment_key: str, variation_key: str) -> Variation:
        return self._lookup_variation(
            self._index.variation_key_map,
            experiment_key,
            variation_key,
            f'No variation key "{variation_key}" defined in datafile '
            f'for experiment "{experiment_key}".',
        )

    def get_variation_from_id(self, experiment_key: str, variation_id: str) -> Variation:
        return self._lookup_variation(
            self._index.variation_id_map,
            experiment_key,
            variation_id,
            f'No variation ID "{variation_id}" defined in datafile '
            f'for experiment "{experiment_key}".',
        )

    def get_variation_from_key_by_experiment_id(
        self, experiment_id: str, variation_key: str
    ) -> Variation:
        return self._lookup_variation(
            self._index.variation_key_map_by_experiment_id,
            experiment_id,
            variation_key,
            f'No variation key "{variation_key}" defined in datafile '
            f'for experiment "{experiment_id}".',
        )

    def get_variation_from_id_by_experiment_id(
        self, experiment_id: str, variation_id: str
    ) -> Variation:
        return self._lookup_variation(
            self._index.variation_id_map_by_experiment_id,
            experiment_id,
            variation_id,
            f'No variation ID "{variation_id}" defined in datafile '
            f'for experiment "{experiment_id}".',
        )

    def get_feature_flag_from_key(self, feature_key: str) -> FeatureFlag:
        return self._lookup(
            self._index.feature_key_map,
            feature_key,
            FeatureFlag,
            f'Feature key "{feature_key}" is not in datafile.',
            lambda: InvalidFeatureError(feature_key),
        )

    def get_feature_view(self, feature_key: str) -> FeatureView:
        """
        Feature flag with its experiment rules, delivery rules and variables resolved

        Experiment ids the flat experiment space does not know are skipped;
        a feature without a known rollout has no delivery rules. A missing
        feature follows the usual miss contract and returns an empty view.
        """
        feature = self._index.feature_key_map.get(feature_key)
        if feature is None:
            self._not_found(
                f'Feature key "{feature_key}" is not in datafile.',
                InvalidFeatureError(feature_key),
            )
            return FeatureView()

        experiment_id_map = self._index.experiment_id_map
        experiment_rules = tuple(
            experiment_id_map[experiment_id]
            for experiment_id in feature.experiment_ids
            if experiment_id in experiment_id_map
        )
        rollout = self._index.rollout_id_map.get(feature.rollout_id)
        delivery_rules = rollout.experiments if rollout is not None else ()

        return FeatureView(
            id=feature.id,
            key=feature.key,
            experiment_rules=experiment_rules,
            delivery_rules=delivery_rules,
            variables_map={variable.id: variable for variable in feature.variables},
        )

    def get_rollout_from_id(self, rollout_id: str) -> Rollout:
        return self._lookup(
            self._index.rollout_id_map,
            rollout_id,
            Rollout,
            f'Rollout ID "{rollout_id}" is not in datafile.',
            lambda: InvalidRolloutError(rollout_id),
        )

    def get_attribute_id(self, attribute_key: str) -> Optional[str]:
        """
        Resolve the id to report for an attribute key

        Declared attributes resolve to their datafile id, even when the key
        carries the reserved prefix (logged as an anomaly). Undeclared keys
        with the reserved prefix are their own id. Anything else is not
        found and resolves to None.
        """
        has_reserved_prefix = attribute_key.startswith(RESERVED_ATTRIBUTE_PREFIX)
        attribute = self._index.attribute_key_map.get(attribute_key)
        if attribute is not None:
            if has_reserved_prefix:
                self._logger.warning(
                    f"Attribute {attribute_key} unexpectedly has reserved prefix "
                    f"{RESERVED_ATTRIBUTE_PREFIX}; using attribute ID instead of "
                    f"reserved attribute name."
                )
            return attribute.id

        if has_reserved_prefix:
            return attribute_key

        self._not_found(
            f'Attribute key "{attribute_key}" is not in datafile.',
            InvalidAttributeError(attribute_key),
        )
        return None

    def is_feature_experiment(self, experiment_id: str) -> bool:
        """True when at least one feature flag lists this experiment id"""
        return experiment_id in self._index.experiment_feature_map

    def get_experiment_feature_list(self, experiment_id: str) -> Optional[List[str]]:
        """
        Ids of the features owning an experiment

        Returns None (not an empty list) for experiments no feature lists.
        """
        if not self.is_feature_experiment(experiment_id):
            return None
        return list(self._index.experiment_feature_map[experiment_id])

    def to_datafile(self) -> Optional[str]:
        """The exact text this config was built from"""
        return self._content
