"""Per-load context threaded into normalization and plugin setup."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from ecsconf.compiler.plugins import PluginRegistry, default_registry
from ecsconf.kernel.aws import SessionFactory, default_session_factory
from ecsconf.kernel.exceptions import LoadCancelledError


@dataclass(slots=True)
class LoadContext:
    """What a single load needs beyond the document itself.

    Attributes
    ----------
    session_factory : SessionFactory
        Builds the AWS session from the resolved region. Replace it to use
        fixed credentials, a profile, or a stub in tests.
    plugin_registry : PluginRegistry
        Where plugin declarations are resolved.
    cancel_event : threading.Event | None
        When set, the load stops before credential resolution or the next
        plugin setup. Template evaluation and decoding are not interrupted.
    """

    session_factory: SessionFactory = default_session_factory
    plugin_registry: PluginRegistry = field(default_factory=default_registry)
    cancel_event: threading.Event | None = None

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def raise_if_cancelled(self, stage: str) -> None:
        if self.cancelled:
            raise LoadCancelledError(stage)
