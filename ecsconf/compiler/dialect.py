"""Input dialects, selected by file extension."""

from __future__ import annotations

from enum import StrEnum
from pathlib import PurePath

from ecsconf.kernel.exceptions import UnsupportedFormatError


class Dialect(StrEnum):
    """Document dialect of a config or definition file."""

    YAML = "yaml"
    JSON = "json"
    JSONNET = "jsonnet"

    @property
    def evaluated(self) -> bool:
        """JSON is valid jsonnet, so both go through the evaluator."""
        return self is not Dialect.YAML

    @classmethod
    def from_path(cls, path: str | PurePath) -> Dialect:
        """Pick the dialect from the file extension.

        Raises
        ------
        UnsupportedFormatError
            If the extension is not one of .yml, .yaml, .json, .jsonnet
        """
        suffix = PurePath(path).suffix
        dialect = _EXTENSIONS.get(suffix)
        if dialect is None:
            raise UnsupportedFormatError(str(path), suffix)
        return dialect


_EXTENSIONS: dict[str, Dialect] = {
    ".yml": Dialect.YAML,
    ".yaml": Dialect.YAML,
    ".json": Dialect.JSON,
    ".jsonnet": Dialect.JSONNET,
}
