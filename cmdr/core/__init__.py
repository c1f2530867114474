"""
Core components for cmdr.

This module contains the template renderer, the process runner and the
models, configuration and logging they share.
"""

from .base import Command, Param, Runtime
from .catalog import CommandCatalog
from .config import CmdrConfig, LoggingConfig, RunnerConfig, runner_from_config
from .exceptions import (
    CmdrError,
    CommandTimeoutError,
    ConfigError,
    IncompleteParametersError,
    MustBeRootError,
    NoSuchFileError,
    SpawnError,
    StreamError,
    TemplateSyntaxError,
    UserLookupError,
)
from .launcher import ProcessLauncher
from .runner import CommandRunner
from .session import SessionCounter
from .template import GLOB_PATTERN, PLACEHOLDER_PATTERN, render

__all__ = [
    "Command",
    "Param",
    "Runtime",
    "CommandCatalog",
    "CmdrConfig",
    "LoggingConfig",
    "RunnerConfig",
    "runner_from_config",
    "CmdrError",
    "CommandTimeoutError",
    "ConfigError",
    "IncompleteParametersError",
    "MustBeRootError",
    "NoSuchFileError",
    "SpawnError",
    "StreamError",
    "TemplateSyntaxError",
    "UserLookupError",
    "ProcessLauncher",
    "CommandRunner",
    "SessionCounter",
    "GLOB_PATTERN",
    "PLACEHOLDER_PATTERN",
    "render",
]
