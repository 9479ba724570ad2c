"""circleci-env - Manage CircleCI project environment variables."""

from ._version import __version__
from .client import CircleCI
from .exceptions import (
    APIError,
    CircleCIError,
    ConfigurationError,
    DecodeError,
    KeyNotFoundError,
    TransportError,
)
from .types import VCS_TYPES, EnvironmentVariable, VcsType

__all__ = [
    "__version__",
    "CircleCI",
    "CircleCIError",
    "ConfigurationError",
    "TransportError",
    "APIError",
    "KeyNotFoundError",
    "DecodeError",
    "EnvironmentVariable",
    "VcsType",
    "VCS_TYPES",
]
