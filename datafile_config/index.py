"""
Index building - one-shot compilation of a Datafile into lookup maps

Each pass is a pure function so it can be tested on its own. build_index
applies them in the required order:

1. Direct projections (groups, top-level experiments, events, attributes,
   audiences, features, rollouts)
2. Typed audiences overlaid onto plain audiences (typed wins)
3. Grouped experiments stamped with group id/policy and merged into the
   flat experiment space
4. Experiment key map and variation maps for every experiment
5. Variation maps for every rollout rule (rules never enter experiment maps)
6. Reverse experiment -> feature index

Duplicate keys within one source list are last-write-wins. Documents that
rely on this have always been accepted, so no validation is added here.
"""

import logging
from dataclasses import dataclass
from itertools import chain
from types import MappingProxyType
from typing import Callable, Dict, Iterable, List, Mapping, NamedTuple, Tuple, TypeVar

from .datafile import Datafile
from .entities import (
    Attribute,
    Audience,
    Event,
    Experiment,
    FeatureFlag,
    Group,
    Rollout,
    Variation,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

VariationMap = Mapping[str, Mapping[str, Variation]]


def generate_map(entities: Iterable[T], key: Callable[[T], str]) -> Dict[str, T]:
    """Project a sequence into a map by key; later duplicates overwrite earlier ones"""
    return {key(entity): entity for entity in entities}


def overlay_map(base: Mapping[str, T], overrides: Mapping[str, T]) -> Dict[str, T]:
    """New map with every entry of `overrides` replacing the one in `base`"""
    merged = dict(base)
    merged.update(overrides)
    return merged


def merge_group_experiments(
    experiment_id_map: Mapping[str, Experiment], groups: Iterable[Group]
) -> Dict[str, Experiment]:
    """
    Merge grouped experiments into the flat experiment-id space

    Each grouped experiment is copied with the group's id and policy stamped
    on, so the decoded Group records stay untouched. A grouped experiment
    sharing an id with an earlier entry replaces it; well-formed datafiles
    never do this.
    """
    merged = dict(experiment_id_map)
    for group in groups:
        experiments_in_group = generate_map(group.experiments, lambda e: e.id)
        for experiment_id, experiment in experiments_in_group.items():
            merged[experiment_id] = experiment.model_copy(
                update={"group_id": group.id, "group_policy": group.policy}
            )
    return merged


class VariationMaps(NamedTuple):
    """The four ways variations are indexed"""

    by_experiment_key_and_key: Dict[str, Dict[str, Variation]]
    by_experiment_key_and_id: Dict[str, Dict[str, Variation]]
    by_experiment_id_and_key: Dict[str, Dict[str, Variation]]
    by_experiment_id_and_id: Dict[str, Dict[str, Variation]]


def build_variation_maps(experiments: Iterable[Experiment]) -> VariationMaps:
    """
    Index variations of experiment-shaped records four ways

    Works for experiments and rollout rules alike. Every record gets fresh,
    possibly empty, sub-maps under its own key and id.
    """
    maps = VariationMaps({}, {}, {}, {})
    for experiment in experiments:
        by_key = generate_map(experiment.variations, lambda v: v.key)
        by_id = generate_map(experiment.variations, lambda v: v.id)
        maps.by_experiment_key_and_key[experiment.key] = by_key
        maps.by_experiment_key_and_id[experiment.key] = by_id
        maps.by_experiment_id_and_key[experiment.id] = dict(by_key)
        maps.by_experiment_id_and_id[experiment.id] = dict(by_id)
    return maps


def build_experiment_feature_map(feature_flags: Iterable[FeatureFlag]) -> Dict[str, List[str]]:
    """Reverse index: experiment id -> ids of the features listing it"""
    experiment_feature_map: Dict[str, List[str]] = {}
    for feature in feature_flags:
        for experiment_id in feature.experiment_ids:
            experiment_feature_map.setdefault(experiment_id, []).append(feature.id)
    return experiment_feature_map


def freeze_nested(maps: Mapping[str, Mapping[str, T]]) -> Mapping[str, Mapping[str, T]]:
    return MappingProxyType({k: MappingProxyType(dict(v)) for k, v in maps.items()})


@dataclass(frozen=True)
class DatafileIndex:
    """Read-only lookup maps compiled from a Datafile"""

    group_id_map: Mapping[str, Group]
    experiment_id_map: Mapping[str, Experiment]
    experiment_key_map: Mapping[str, Experiment]
    event_key_map: Mapping[str, Event]
    attribute_key_map: Mapping[str, Attribute]
    audience_id_map: Mapping[str, Audience]
    feature_key_map: Mapping[str, FeatureFlag]
    rollout_id_map: Mapping[str, Rollout]
    variation_key_map: VariationMap
    variation_id_map: VariationMap
    variation_key_map_by_experiment_id: VariationMap
    variation_id_map_by_experiment_id: VariationMap
    experiment_feature_map: Mapping[str, Tuple[str, ...]]


def build_index(datafile: Datafile) -> DatafileIndex:
    """Compile every lookup map for a datafile; nothing is mutated afterwards"""
    group_id_map = generate_map(datafile.groups, lambda g: g.id)
    event_key_map = generate_map(datafile.events, lambda e: e.key)
    attribute_key_map = generate_map(datafile.attributes, lambda a: a.key)
    feature_key_map = generate_map(datafile.feature_flags, lambda f: f.key)
    rollout_id_map = generate_map(datafile.rollouts, lambda r: r.id)

    audience_id_map = overlay_map(
        generate_map(datafile.audiences, lambda a: a.id),
        generate_map(datafile.typed_audiences, lambda a: a.id),
    )

    experiment_id_map = merge_group_experiments(
        generate_map(datafile.experiments, lambda e: e.id), datafile.groups
    )
    experiment_key_map = generate_map(experiment_id_map.values(), lambda e: e.key)

    rollout_rules = chain.from_iterable(rollout.experiments for rollout in datafile.rollouts)
    variation_maps = build_variation_maps(chain(experiment_id_map.values(), rollout_rules))

    experiment_feature_map = build_experiment_feature_map(datafile.feature_flags)

    logger.debug(
        f"Indexed {len(experiment_id_map)} experiments, {len(group_id_map)} groups, "
        f"{len(feature_key_map)} features, {len(rollout_id_map)} rollouts, "
        f"{len(audience_id_map)} audiences"
    )

    return DatafileIndex(
        group_id_map=MappingProxyType(group_id_map),
        experiment_id_map=MappingProxyType(experiment_id_map),
        experiment_key_map=MappingProxyType(experiment_key_map),
        event_key_map=MappingProxyType(event_key_map),
        attribute_key_map=MappingProxyType(attribute_key_map),
        audience_id_map=MappingProxyType(audience_id_map),
        feature_key_map=MappingProxyType(feature_key_map),
        rollout_id_map=MappingProxyType(rollout_id_map),
        variation_key_map=freeze_nested(variation_maps.by_experiment_key_and_key),
        variation_id_map=freeze_nested(variation_maps.by_experiment_key_and_id),
        variation_key_map_by_experiment_id=freeze_nested(variation_maps.by_experiment_id_and_key),
        variation_id_map_by_experiment_id=freeze_nested(variation_maps.by_experiment_id_and_id),
        experiment_feature_map=MappingProxyType(
            {k: tuple(v) for k, v in experiment_feature_map.items()}
        ),
    )
