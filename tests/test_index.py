import json

import pytest

from datafile_config import Audience, Experiment, FeatureFlag, Group, Variation, decode_datafile
from datafile_config.index import (
    build_experiment_feature_map,
    build_index,
    build_variation_maps,
    generate_map,
    merge_group_experiments,
    overlay_map,
)

from .conftest import make_datafile


def test_generate_map_is_last_write_wins():
    first = Experiment(id="1", key="dup")
    second = Experiment(id="2", key="dup")

    experiment_map = generate_map([first, second], lambda e: e.key)

    assert experiment_map == {"dup": second}


def test_overlay_map_prefers_overrides_and_keeps_base():
    plain = {"1": Audience(id="1", name="plain"), "2": Audience(id="2", name="other")}
    typed = {"1": Audience(id="1", name="typed")}

    merged = overlay_map(plain, typed)

    assert merged["1"].name == "typed"
    assert merged["2"].name == "other"
    assert plain["1"].name == "plain"


def test_merge_group_experiments_stamps_copies():
    grouped = Experiment(id="10", key="exp1")
    group = Group(id="g1", policy="random", experiments=(grouped,))
    top_level = Experiment(id="11", key="exp2")

    merged = merge_group_experiments({"11": top_level}, [group])

    assert merged["10"].group_id == "g1"
    assert merged["10"].group_policy == "random"
    assert merged["11"].group_id is None
    # decoded records are left untouched
    assert grouped.group_id is None
    assert group.experiments[0].group_id is None


def test_merge_group_experiments_overwrites_colliding_ids():
    top_level = Experiment(id="10", key="top")
    group = Group(id="g1", policy="random", experiments=(Experiment(id="10", key="grouped"),))

    merged = merge_group_experiments({"10": top_level}, [group])

    assert merged["10"].key == "grouped"


def test_build_variation_maps_indexes_four_ways():
    control = Variation(id="100", key="control")
    treatment = Variation(id="101", key="treatment")
    experiment = Experiment(id="10", key="exp1", variations=(control, treatment))

    maps = build_variation_maps([experiment])

    assert maps.by_experiment_key_and_key["exp1"] == {"control": control, "treatment": treatment}
    assert maps.by_experiment_key_and_id["exp1"] == {"100": control, "101": treatment}
    assert maps.by_experiment_id_and_key["10"] == {"control": control, "treatment": treatment}
    assert maps.by_experiment_id_and_id["10"] == {"100": control, "101": treatment}


def test_build_variation_maps_creates_empty_sub_maps_without_variations():
    maps = build_variation_maps([Experiment(id="10", key="exp1")])

    assert maps.by_experiment_key_and_key == {"exp1": {}}
    assert maps.by_experiment_id_and_id == {"10": {}}


def test_build_experiment_feature_map_collects_owning_features():
    features = [
        FeatureFlag(id="f1", key="one", experiment_ids=("10", "11")),
        FeatureFlag(id="f2", key="two", experiment_ids=("11",)),
        FeatureFlag(id="f3", key="three"),
    ]

    assert build_experiment_feature_map(features) == {"10": ["f1"], "11": ["f1", "f2"]}


@pytest.fixture
def index():
    return build_index(decode_datafile(json.dumps(make_datafile())))


def test_build_index_merges_grouped_experiments(index):
    assert set(index.experiment_id_map) == {"10", "11", "12"}
    assert set(index.experiment_key_map) == {"exp1", "exp2", "exp3"}
    assert index.experiment_key_map["exp1"].group_id == "1"
    assert index.group_id_map["1"].policy == "random"


def test_build_index_indexes_rollout_rule_variations_only(index):
    assert "20" not in index.experiment_id_map
    assert "rule1" not in index.experiment_key_map
    assert index.variation_key_map["rule1"]["on"].id == "201"
    assert index.variation_id_map["rule1"]["201"].key == "on"
    assert index.variation_key_map_by_experiment_id["20"]["on"].id == "201"
    assert index.variation_id_map_by_experiment_id["20"]["201"].key == "on"


def test_build_index_typed_audiences_win(index):
    assert index.audience_id_map["500"].name == "typed"
    assert index.audience_id_map["501"].name == "plain only"


def test_build_index_reverse_feature_index(index):
    assert dict(index.experiment_feature_map) == {"10": ("f1",), "11": ("f1",)}


def test_build_index_maps_are_read_only(index):
    with pytest.raises(TypeError):
        index.experiment_key_map["new"] = Experiment()
    with pytest.raises(TypeError):
        index.variation_key_map["exp1"]["new"] = Variation()
    with pytest.raises(AttributeError):
        index.experiment_key_map = {}


def test_build_index_is_deterministic():
    datafile = decode_datafile(json.dumps(make_datafile()))

    first = build_index(datafile)
    second = build_index(datafile)

    assert dict(first.experiment_id_map) == dict(second.experiment_id_map)
    assert dict(first.audience_id_map) == dict(second.audience_id_map)
    assert {k: dict(v) for k, v in first.variation_id_map.items()} == {
        k: dict(v) for k, v in second.variation_id_map.items()
    }
