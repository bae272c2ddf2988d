"""
Package version, resolved once at import.
"""
import importlib.metadata
import pathlib

import tomli

DISTRIBUTION = "stakeflow-sdk"
FALLBACK_VERSION = "0.1.0"


def _source_tree_version() -> str:
    """Version declared in pyproject.toml when running from a checkout."""
    pyproject = pathlib.Path(__file__).resolve().parent.parent / "pyproject.toml"
    try:
        with pyproject.open("rb") as f:
            return tomli.load(f)["project"]["version"]
    except (OSError, KeyError, tomli.TOMLDecodeError):
        return FALLBACK_VERSION


def resolve_version() -> str:
    try:
        return importlib.metadata.version(DISTRIBUTION)
    except importlib.metadata.PackageNotFoundError:
        return _source_tree_version()


__version__ = resolve_version()
