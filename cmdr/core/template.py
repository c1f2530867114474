"""
Argument template rendering.

A template is plain text holding ``{{NAME}}`` placeholders and ``[...]``
optional fragments. Rendering runs a fixed pipeline: named substitution, bare
appends, optional-fragment resolution, the completeness check, environment
expansion and finally glob expansion. Globs and environment references are
only expanded once every required placeholder has been filled.
"""

import glob
import os
import re
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from cmdr.core.exceptions import (
    IncompleteParametersError,
    NoSuchFileError,
    TemplateSyntaxError,
)

PLACEHOLDER_PATTERN = re.compile(r"\{\{[A-Z]+\}\}")
GLOB_PATTERN = re.compile(r"[\w.-]*\*[\w.-]*")
ENV_PATTERN = re.compile(r"\$(?:\{(\w+)\}|(\w+))")


def substitute(text: str, params: Iterable[Tuple[str, str]]) -> str:
    """Replace named placeholders and append bare parameters."""
    bare: List[str] = []
    for name, value in params:
        if name:
            text = text.replace("{{" + name + "}}", value)
        else:
            bare.append(value)
    for value in bare:
        text += " " + value
    return text


def missing_placeholders(text: str) -> List[str]:
    """Return the unresolved placeholder names in text, in order of appearance."""
    return [match[2:-2] for match in PLACEHOLDER_PATTERN.findall(text)]


def resolve_optional(text: str) -> str:
    """Strip or drop ``[...]`` fragments.

    A fragment is dropped while any placeholder remains unresolved anywhere in
    the text, otherwise its brackets are removed and the content kept.
    """
    while True:
        start = text.find("[")
        if start < 0:
            break
        end = text.find("]")
        if end < 0 or end < start:
            raise TemplateSyntaxError(
                f"unbalanced optional fragment in {text!r}",
                details={"position": end if end >= 0 else start},
            )
        if PLACEHOLDER_PATTERN.search(text):
            text = text[:start] + text[end + 1 :]
        else:
            text = text[:start] + text[start + 1 : end] + text[end + 1 :]
    if "]" in text:
        raise TemplateSyntaxError(
            f"unbalanced optional fragment in {text!r}",
            details={"position": text.find("]")},
        )
    return text


def check_complete(text: str) -> str:
    missing = missing_placeholders(text)
    if missing:
        raise IncompleteParametersError(
            f"missing required parameter: {', '.join(missing)}",
            details={"missing": missing},
        )
    return text


def expand_env(text: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Expand ``$NAME`` and ``${NAME}``; undefined variables become empty."""
    env = os.environ if environ is None else environ

    def _lookup(match: "re.Match[str]") -> str:
        return env.get(match.group(1) or match.group(2), "")

    return ENV_PATTERN.sub(_lookup, text)


def expand_globs(text: str) -> str:
    """Replace each glob token with its sorted, space-joined matches."""

    def _expand(match: "re.Match[str]") -> str:
        pattern = match.group(0)
        files = sorted(glob.glob(pattern))
        if not files:
            raise NoSuchFileError(
                f"{pattern}: no such file or directory",
                details={"pattern": pattern},
            )
        return " ".join(files)

    return GLOB_PATTERN.sub(_expand, text)


def render(template: str, params: Sequence[Tuple[str, str]] = ()) -> str:
    """Render an argument template.

    Args:
        template: Argument template text
        params: Ordered (name, value) pairs; an empty name appends the value

    Returns:
        The rendered argument text

    Raises:
        TemplateSyntaxError: Optional brackets are malformed
        IncompleteParametersError: A required placeholder was not supplied
        NoSuchFileError: A glob matched no files
    """
    text = substitute(template, params)
    text = resolve_optional(text)
    text = check_complete(text)
    text = expand_env(text)
    return expand_globs(text)
