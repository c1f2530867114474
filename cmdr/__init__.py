"""
cmdr - run a fixed catalog of local commands from parameterized templates.

A Command pairs an executable with an argument template such as
``-l {{PATH}} [{{FLAGS}}]``. Rendering fills placeholders, resolves optional
fragments and expands environment variables and globs; the runner then
executes the result without a shell, capturing output, exit status and
timing in a Runtime record.

Core Components:
- Template Renderer: placeholder, optional-fragment, env and glob expansion
- Session Counter: process-lifetime unique invocation identifiers
- Process Runner: synchronous, queue-delivered and detached execution
- Catalog and CLI: named commands loaded from YAML, run from the terminal
"""

from cmdr.core.base import Command, Param, Runtime
from cmdr.core.catalog import CommandCatalog
from cmdr.core.config import CmdrConfig
from cmdr.core.exceptions import (
    CmdrError,
    CommandTimeoutError,
    IncompleteParametersError,
    MustBeRootError,
    NoSuchFileError,
    TemplateSyntaxError,
)
from cmdr.core.launcher import ProcessLauncher
from cmdr.core.runner import CommandRunner
from cmdr.core.session import SessionCounter
from cmdr.core.template import render
from cmdr.utils.deadline import run_with_deadline

__version__ = "0.1.0"
__description__ = "Safe execution of parameterized local command templates"

__all__ = [
    "Command",
    "Param",
    "Runtime",
    "CommandCatalog",
    "CmdrConfig",
    "CmdrError",
    "CommandTimeoutError",
    "IncompleteParametersError",
    "MustBeRootError",
    "NoSuchFileError",
    "TemplateSyntaxError",
    "ProcessLauncher",
    "CommandRunner",
    "SessionCounter",
    "render",
    "run_with_deadline",
]
