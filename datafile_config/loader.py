"""
Datafile Loader - build project configs from files on disk or bundled with the package

The package ships sample datafiles under datafile_config/datafiles/. They
are located with importlib.resources so lookups work whether we're:
1. Running in development (pip install -e .)
2. Running from an installed package
3. Running tests
"""

import logging
from importlib import metadata, resources
from pathlib import Path
from typing import List, Optional, Union

from .error_handler import ErrorHandler
from .errors import ConfigDecodeError
from .project_config import DatafileProjectConfig

logger = logging.getLogger(__name__)

DISTRIBUTION_NAME = "datafile-config"
BUNDLED_DATAFILE_PACKAGE = "datafile_config.datafiles"
DEFAULT_DATAFILE = "example_datafile.json"


def read_datafile(path: Union[str, Path]) -> str:
    """Read datafile text from disk"""
    datafile_path = Path(path)
    try:
        content = datafile_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigDecodeError(f"Datafile not found: {datafile_path}") from e
    except OSError as e:
        raise ConfigDecodeError(f"Could not read datafile {datafile_path}: {e}") from e

    logger.debug(f"Read {len(content)} characters from {datafile_path}")
    return content


def load_project_config(
    path: Union[str, Path],
    logger: Optional[logging.Logger] = None,
    error_handler: Optional[ErrorHandler] = None,
) -> DatafileProjectConfig:
    """
    Build a project config from a datafile on disk

    Raises:
        ConfigDecodeError: file missing/unreadable or datafile malformed
        UnsupportedVersionError: datafile version not supported
    """
    content = read_datafile(path)
    return DatafileProjectConfig.create(content, logger=logger, error_handler=error_handler)


def list_bundled_datafiles() -> List[str]:
    """Names of the datafiles shipped with the package"""
    datafiles = resources.files(BUNDLED_DATAFILE_PACKAGE)
    return sorted(
        entry.name
        for entry in datafiles.iterdir()
        if entry.name.endswith((".json", ".yaml", ".yml"))
    )


def load_bundled_project_config(
    name: str = DEFAULT_DATAFILE,
    logger: Optional[logging.Logger] = None,
    error_handler: Optional[ErrorHandler] = None,
) -> DatafileProjectConfig:
    """
    Build a project config from a datafile bundled with the package

    Raises:
        ConfigDecodeError: no bundled datafile with that name, or malformed
    """
    resource = resources.files(BUNDLED_DATAFILE_PACKAGE).joinpath(name)
    if not resource.is_file():
        raise ConfigDecodeError(
            f"Bundled datafile '{name}' not found. "
            f"Available datafiles: {list_bundled_datafiles()}"
        )

    content = resource.read_text(encoding="utf-8")
    return DatafileProjectConfig.create(content, logger=logger, error_handler=error_handler)


def get_package_version() -> str:
    """
    Version of the installed datafile-config distribution

    Worth logging next to a datafile revision when reproducing decisions.
    """
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        logger.warning(f"Could not determine package version for {DISTRIBUTION_NAME}")
        return "unknown"
