"""Version constraint expressions for ``required_version``.

Constraint syntax is the one deployment tooling conventionally uses::

    ">= 2.0.0"
    ">= 2.1, < 3"
    "~> 2"            # >= 2.0.0
    "~> 2.3"          # >= 2.3.0, < 3.0.0
    "~> 2.3.1"        # >= 2.3.1, < 2.4.0
    "!= 2.2.0"

Versions may carry a leading ``v``, one to three numeric segments, a
prerelease tag and build metadata. A prerelease version only satisfies a
constraint that names a prerelease of the very same base version.
"""

from __future__ import annotations

import operator
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass

import semver

from ecsconf.kernel.exceptions import ConstraintSyntaxError

_CONSTRAINT_PATTERN = re.compile(
    r"^\s*(?P<op>~>|>=|<=|!=|=|>|<)?\s*v?"
    r"(?P<version>(?P<core>\d+(?:\.\d+){0,2})"
    r"(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?)\s*$"
)

_COMPARATORS: dict[str, Callable[[semver.Version, semver.Version], bool]] = {
    "=": operator.eq,
    "!=": operator.ne,
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
}


def parse_version(text: str) -> semver.Version | None:
    """Parse a runtime version string, returning None when it is not semantic.

    Examples
    --------
    >>> str(parse_version("v2.1.0"))
    '2.1.0'
    >>> parse_version("current") is None
    True
    """
    candidate = text.strip()
    if candidate.startswith("v"):
        candidate = candidate[1:]
    try:
        return semver.Version.parse(candidate, optional_minor_and_patch=True)
    except (ValueError, TypeError):
        return None


@dataclass(frozen=True, slots=True)
class Constraint:
    """A single ``<op> <version>`` term of a constraint expression."""

    op: str
    version: semver.Version
    segments: int
    original: str

    def check(self, version: semver.Version) -> bool:
        if not self._prerelease_allows(version):
            return False
        if self.op == "~>":
            return self._pessimistic(version)
        # semver ordering ignores build metadata
        return _COMPARATORS[self.op](version, self.version)

    def _prerelease_allows(self, version: semver.Version) -> bool:
        if not version.prerelease:
            return True
        if not self.version.prerelease:
            return False
        return version.finalize_version() == self.version.finalize_version()

    def _pessimistic(self, version: semver.Version) -> bool:
        # Only segments before the last one are pinned: "~> 2" has no upper bound
        if version < self.version:
            return False
        if self.segments == 1:
            return True
        if self.segments == 2:
            upper = self.version.bump_major()
        else:
            upper = self.version.bump_minor()
        return version < upper.finalize_version()

    def __str__(self) -> str:
        return self.original


class VersionConstraints:
    """A conjunction of version constraints parsed from an expression."""

    def __init__(self, constraints: list[Constraint]) -> None:
        self._constraints = constraints

    @classmethod
    def parse(cls, expression: str) -> VersionConstraints:
        """Parse a comma-separated constraint expression.

        Raises
        ------
        ConstraintSyntaxError
            If any term is empty or malformed
        """
        constraints = []
        for term in expression.split(","):
            match = _CONSTRAINT_PATTERN.match(term)
            if match is None:
                raise ConstraintSyntaxError(expression, f"malformed constraint: {term.strip()!r}")
            try:
                version = semver.Version.parse(
                    match.group("version"), optional_minor_and_patch=True
                )
            except ValueError as e:
                raise ConstraintSyntaxError(expression, str(e)) from e
            constraints.append(
                Constraint(
                    op=match.group("op") or "=",
                    version=version,
                    segments=match.group("core").count(".") + 1,
                    original=term.strip(),
                )
            )
        return cls(constraints)

    def check(self, version: semver.Version) -> bool:
        """Return True when ``version`` satisfies every constraint."""
        return all(c.check(version) for c in self._constraints)

    def __iter__(self) -> Iterator[Constraint]:
        return iter(self._constraints)

    def __len__(self) -> int:
        return len(self._constraints)

    def __str__(self) -> str:
        return ", ".join(str(c) for c in self._constraints)

    def __repr__(self) -> str:
        return f"VersionConstraints({str(self)!r})"
