import json

import pytest

from datafile_config import (
    DEFAULT_DATAFILE,
    ConfigDecodeError,
    get_package_version,
    list_bundled_datafiles,
    load_bundled_project_config,
    load_project_config,
)

from .conftest import make_datafile


def test_load_project_config_from_path(tmp_path):
    path = tmp_path / "datafile.json"
    content = json.dumps(make_datafile())
    path.write_text(content, encoding="utf-8")

    config = load_project_config(path)

    assert config.get_experiment_from_key("exp2").id == "11"
    assert config.to_datafile() == content


def test_load_project_config_accepts_string_path(tmp_path):
    path = tmp_path / "datafile.json"
    path.write_text(json.dumps(make_datafile()), encoding="utf-8")

    assert load_project_config(str(path)).revision == "3"


def test_load_project_config_missing_file(tmp_path):
    with pytest.raises(ConfigDecodeError, match="not found"):
        load_project_config(tmp_path / "missing.json")


def test_bundled_datafiles_are_listed():
    assert DEFAULT_DATAFILE in list_bundled_datafiles()


def test_load_bundled_project_config_defaults_to_example():
    config = load_bundled_project_config()

    assert config.version == "4"
    assert config.get_experiment_from_key("group_exp_1").group_id == "7722400015"
    assert config.get_feature_flag_from_key("new_checkout").rollout_id == "166660"


def test_load_bundled_project_config_unknown_name():
    with pytest.raises(ConfigDecodeError, match="Available datafiles"):
        load_bundled_project_config("does_not_exist.json")


def test_get_package_version_returns_a_string():
    version = get_package_version()

    assert isinstance(version, str)
    assert version
