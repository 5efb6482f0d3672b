# datafile_config/__init__.py
"""
Datafile Configuration Package

This package compiles an experimentation datafile - experiments, variations,
groups, audiences, attributes, events, feature flags and rollouts - into fast,
read-only lookup maps, and exposes typed accessors so the rest of an
application can resolve entities by key or id without re-scanning the raw
document.

Architecture Pattern: Build Once, Read Many
- A datafile is decoded and version-checked once
- All lookup maps are compiled eagerly at construction time
- The resulting config is immutable and safe to share across threads
- A newer datafile means a brand new config, never an in-place patch

Usage:
    from datafile_config import DatafileProjectConfig

    config = DatafileProjectConfig.create(datafile_text)
    experiment = config.get_experiment_from_key("checkout_button_test")
    variation = config.get_variation_from_key("checkout_button_test", "treatment")

Design Principles:
1. Fail fast on bad documents - decode and version errors abort construction
2. Degrade gracefully on bad lookups - misses are logged and return empty entities
3. Immutability - every exposed map is a read-only view
"""

# Package version - this should match setup.py
__version__ = "1.0.0"

# Package metadata
__author__ = "Flit Experimentation Team"
__email__ = "kevwaithakam@gmail.com"
__description__ = "Compiled, read-only index over experimentation datafiles"

# Public API - what users can import from this package
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
    FeatureVariable,
    FeatureView,
    Group,
    Rollout,
    TrafficAllocation,
    Variation,
)
from .error_handler import ErrorHandler, NoOpErrorHandler, RaiseExceptionErrorHandler
from .errors import (
    ConfigDecodeError,
    DatafileConfigError,
    EntityNotFoundError,
    InvalidAttributeError,
    InvalidAudienceError,
    InvalidEventError,
    InvalidExperimentError,
    InvalidFeatureError,
    InvalidGroupError,
    InvalidRolloutError,
    InvalidVariationError,
    UnsupportedVersionError,
)
from .loader import (
    DEFAULT_DATAFILE,
    get_package_version,
    list_bundled_datafiles,
    load_bundled_project_config,
    load_project_config,
)
from .project_config import DatafileProjectConfig

__all__ = [
    "DatafileProjectConfig",
    "Datafile",
    "decode_datafile",
    "check_datafile_version",
    "load_project_config",
    "load_bundled_project_config",
    "list_bundled_datafiles",
    "get_package_version",
    "DEFAULT_DATAFILE",
    "SUPPORTED_DATAFILE_VERSIONS",
    "RESERVED_ATTRIBUTE_PREFIX",
    "Attribute",
    "Audience",
    "Event",
    "Experiment",
    "FeatureFlag",
    "FeatureVariable",
    "FeatureView",
    "Group",
    "Rollout",
    "TrafficAllocation",
    "Variation",
    "ErrorHandler",
    "NoOpErrorHandler",
    "RaiseExceptionErrorHandler",
    "DatafileConfigError",
    "ConfigDecodeError",
    "UnsupportedVersionError",
    "EntityNotFoundError",
    "InvalidGroupError",
    "InvalidExperimentError",
    "InvalidEventError",
    "InvalidAudienceError",
    "InvalidAttributeError",
    "InvalidVariationError",
    "InvalidFeatureError",
    "InvalidRolloutError",
    "__version__",
]

# Logging configuration for package
import logging

# Package logger - every module logs through a child of this one
logger = logging.getLogger(__name__)

# Add a null handler to prevent logging errors if no handler is configured
logger.addHandler(logging.NullHandler())

# Export the logger for use in other modules
__all__.append("logger")
