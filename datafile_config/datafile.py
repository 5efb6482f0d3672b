"""
Datafile decoding - raw text to a validated entity set

A datafile is the versioned, immutable document describing a project's
experiments, groups, audiences, attributes, events, feature flags and
rollouts. This module turns its text into a `Datafile` model:

1. Reject null/empty input (fail fast, clear messages)
2. Parse the text - datafiles are JSON; hand-maintained YAML datafiles
   are read with the YAML loader
3. Gate on the declared version before doing any further work
4. Validate into pydantic models, defaulting absent collections to empty

Every failure surfaces as ConfigDecodeError (or its UnsupportedVersionError
subclass). There is no partially decoded datafile.
"""

import json
import logging
from typing import Any, Dict, Optional, Tuple

import yaml
from pydantic import Field, ValidationError, field_validator

from .entities import (
    Attribute,
    Audience,
    DatafileEntity,
    Event,
    Experiment,
    FeatureFlag,
    Group,
    Rollout,
    none_as_empty,
)
from .errors import ConfigDecodeError, UnsupportedVersionError

logger = logging.getLogger(__name__)

# Datafile versions this package understands
SUPPORTED_DATAFILE_VERSIONS = ("2", "3", "4")

# Attributes with this prefix are addressed by name, not by a datafile id
RESERVED_ATTRIBUTE_PREFIX = "$opt_"


class Datafile(DatafileEntity):
    """
    The decoded entity set plus project metadata

    Collections missing from the document (or explicitly null) mean "no
    entities of this kind" and come back as empty tuples.
    """

    version: Optional[str] = None
    account_id: str = ""
    project_id: str = ""
    revision: str = ""
    sdk_key: str = ""
    environment_key: str = ""
    send_flag_decisions: bool = False
    anonymize_ip: bool = Field(default=False, alias="anonymizeIP")
    bot_filtering: Optional[bool] = None

    groups: Tuple[Group, ...] = ()
    experiments: Tuple[Experiment, ...] = ()
    events: Tuple[Event, ...] = ()
    attributes: Tuple[Attribute, ...] = ()
    audiences: Tuple[Audience, ...] = ()
    typed_audiences: Tuple[Audience, ...] = ()
    feature_flags: Tuple[FeatureFlag, ...] = ()
    rollouts: Tuple[Rollout, ...] = ()

    @field_validator("version", mode="before")
    @classmethod
    def normalize_version(cls, value: Any) -> Any:
        return None if value is None else str(value)

    @field_validator(
        "groups",
        "experiments",
        "events",
        "attributes",
        "audiences",
        "typed_audiences",
        "feature_flags",
        "rollouts",
        mode="before",
    )
    @classmethod
    def default_empty_collections(cls, value: Any) -> Any:
        return none_as_empty(value)


def check_datafile_version(version: Any) -> str:
    """
    Version gate - fail unless the datafile version is supported

    Accepts the raw version field (string or int) and returns it normalized
    to a string.

    Raises:
        UnsupportedVersionError: carrying the offending version string
    """
    normalized = None if version is None else str(version)
    if normalized not in SUPPORTED_DATAFILE_VERSIONS:
        logger.error(f"Unsupported datafile version: {normalized}")
        raise UnsupportedVersionError(normalized)
    return normalized


def parse_datafile_text(content: Optional[str]) -> Dict[str, Any]:
    """
    Parse datafile text into a raw mapping without validating entities

    Text starting with `{` or `[` is a JSON document and is read with the
    JSON parser; anything else is read as a hand-maintained YAML datafile.
    """
    if content is None:
        raise ConfigDecodeError("Unable to parse null datafile.")
    if not content or not content.strip():
        raise ConfigDecodeError("Unable to parse empty datafile.")

    if content.lstrip().startswith(("{", "[")):
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigDecodeError(f"Invalid JSON datafile: {e}") from e
    else:
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigDecodeError(f"Invalid YAML datafile: {e}") from e

    if not isinstance(data, dict):
        raise ConfigDecodeError("Datafile must contain a JSON object")

    return data


def decode_datafile(content: Optional[str]) -> Datafile:
    """
    Decode datafile text into a validated Datafile

    Args:
        content: raw datafile text (JSON or YAML)

    Returns:
        Datafile with every entity collection present (possibly empty)

    Raises:
        ConfigDecodeError: null, empty or malformed input
        UnsupportedVersionError: datafile version not supported
    """
    data = parse_datafile_text(content)
    check_datafile_version(data.get("version"))

    try:
        datafile = Datafile.model_validate(data)
    except ValidationError as e:
        raise ConfigDecodeError(f"Datafile does not match the expected structure: {e}") from e

    logger.debug(f"Decoded datafile version {datafile.version}, revision {datafile.revision}")
    return datafile
