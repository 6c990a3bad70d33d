"""
Package version.

Resolved from installed distribution metadata; a source checkout falls back
to the ``pyproject.toml`` next to the package, then to ``DEFAULT_VERSION``.
"""
import importlib.metadata
import logging
import pathlib
from typing import Optional

import tomli

logger = logging.getLogger(__name__)

DISTRIBUTION = "dfinity-tx"
DEFAULT_VERSION = "0.3.0"


def _pyproject_version(path: pathlib.Path) -> Optional[str]:
    """Version from a pyproject.toml, if it describes this distribution"""
    try:
        with path.open("rb") as f:
            project = tomli.load(f)["project"]
        if project.get("name", DISTRIBUTION) != DISTRIBUTION:
            logger.debug("%s belongs to %s, ignoring", path, project["name"])
            return None
        return project["version"]
    except (FileNotFoundError, KeyError, tomli.TOMLDecodeError) as e:
        logger.debug("No version in %s: %r", path, e)
        return None


def resolve_version() -> str:
    try:
        return importlib.metadata.version(DISTRIBUTION)
    except importlib.metadata.PackageNotFoundError:
        pyproject = pathlib.Path(__file__).parent.parent / "pyproject.toml"
        return _pyproject_version(pyproject) or DEFAULT_VERSION


__version__ = resolve_version()
