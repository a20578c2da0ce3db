"""Function bindings contributed to document rendering and jsonnet evaluation."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from typing import Any

# Jinja2 globals exposed while rendering documents: name -> callable
TemplateFuncs = Mapping[str, Callable[..., Any]]


@dataclass(frozen=True, slots=True)
class NativeFunction:
    """A jsonnet native function with fixed positional parameters.

    Jsonnet code reaches it with ``std.native(name)(args...)``.
    """

    name: str
    params: tuple[str, ...]
    func: Callable[..., Any]

    def with_prefix(self, prefix: str) -> NativeFunction:
        if not prefix:
            return self
        return replace(self, name=f"{prefix}{self.name}")


def prefixed(funcs: TemplateFuncs, prefix: str) -> dict[str, Callable[..., Any]]:
    """Return ``funcs`` with every name prefixed by ``prefix``."""
    return {f"{prefix}{name}": func for name, func in funcs.items()}
