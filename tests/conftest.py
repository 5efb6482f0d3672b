import json
from typing import Any, Dict, List

import pytest

from datafile_config import DatafileProjectConfig, ErrorHandler, load_bundled_project_config


class RecordingErrorHandler(ErrorHandler):
    """Collects every error handed to it"""

    def __init__(self) -> None:
        self.errors: List[Exception] = []

    def handle_error(self, error: Exception) -> None:
        self.errors.append(error)


def make_datafile(**overrides: Any) -> Dict[str, Any]:
    """Minimal v4 datafile; keyword arguments replace top-level keys"""
    datafile: Dict[str, Any] = {
        "version": "4",
        "accountId": "1",
        "projectId": "2",
        "revision": "3",
        "groups": [
            {
                "id": "1",
                "policy": "random",
                "trafficAllocation": [{"entityId": "10", "endOfRange": 10000}],
                "experiments": [
                    {
                        "id": "10",
                        "key": "exp1",
                        "status": "Running",
                        "variations": [{"id": "100", "key": "control"}],
                    }
                ],
            }
        ],
        "experiments": [
            {
                "id": "11",
                "key": "exp2",
                "status": "Running",
                "variations": [
                    {"id": "110", "key": "a"},
                    {"id": "111", "key": "b"},
                ],
            },
            {
                "id": "12",
                "key": "exp3",
                "status": "Paused",
                "variations": [{"id": "120", "key": "only"}],
            },
        ],
        "rollouts": [
            {
                "id": "200",
                "experiments": [
                    {
                        "id": "20",
                        "key": "rule1",
                        "variations": [{"id": "201", "key": "on"}],
                    }
                ],
            }
        ],
        "featureFlags": [
            {"id": "f1", "key": "feature_one", "rolloutId": "200", "experimentIds": ["10", "11"]},
        ],
        "events": [{"id": "300", "key": "purchase", "experimentIds": ["10"]}],
        "attributes": [{"id": "400", "key": "browser"}],
        "audiences": [
            {"id": "500", "name": "plain", "conditions": "[\"and\"]"},
            {"id": "501", "name": "plain only", "conditions": "[\"or\"]"},
        ],
        "typedAudiences": [
            {"id": "500", "name": "typed", "conditions": ["and", {"name": "browser", "value": "chrome"}]},
        ],
    }
    datafile.update(overrides)
    return datafile


@pytest.fixture
def datafile_dict() -> Dict[str, Any]:
    return make_datafile()


@pytest.fixture
def error_handler() -> RecordingErrorHandler:
    return RecordingErrorHandler()


@pytest.fixture
def config(datafile_dict: Dict[str, Any], error_handler: RecordingErrorHandler) -> DatafileProjectConfig:
    return DatafileProjectConfig.create(json.dumps(datafile_dict), error_handler=error_handler)


@pytest.fixture
def example_config() -> DatafileProjectConfig:
    return load_bundled_project_config()
