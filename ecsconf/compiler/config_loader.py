"""Configuration loader for ecsconf.

Turns a service definition file into a resolved, validated :class:`Config`:

1. **Evaluate**: ``.json``/``.jsonnet`` files run through jsonnet with the
   loader's external variables and native functions; ``.yml``/``.yaml``
   pass through.
2. **Read**: the text is rendered (Jinja2 ``env``/``must_env`` and plugin
   functions) and ``${VAR}`` references are substituted.
3. **Decode**: YAML or JSON is decoded into the ``Config`` model.
4. **Normalize**: defaults, absolute paths, ``required_version``, AWS
   session and the plugin pipeline (see ``normalizer.py``).
5. **Gate**: the running version is checked against ``required_version``.

Functions contributed by plugins are kept by the loader afterwards, so the
same loader can read the task and service definitions the config points at.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ecsconf.compiler.context import LoadContext
from ecsconf.compiler.dialect import Dialect
from ecsconf.compiler.normalizer import ConfigNormalizer
from ecsconf.compiler.plugins import PluginRegistry, default_registry
from ecsconf.compiler.preprocessing.env_vars import overlay_environ, with_extra_env_set
from ecsconf.compiler.preprocessing.jsonnet import JsonnetEngine
from ecsconf.compiler.preprocessing.template import TemplateRenderer
from ecsconf.kernel.aws import SessionFactory, default_session_factory
from ecsconf.kernel.config.models import Config
from ecsconf.kernel.exceptions import DecodeError, ReadError
from ecsconf.kernel.logging import get_logger

logger = get_logger(__name__)

_BYTES_SOURCE = "<bytes>"


def _known_keys() -> set[str]:
    keys = set()
    for name, field in Config.model_fields.items():
        keys.add(name)
        if field.alias:
            keys.add(field.alias)
    return keys


def unmarshal_config(data: bytes | str, dialect: Dialect, path: str) -> Config:
    """Decode YAML or JSON into a Config.

    Parameters
    ----------
    data : bytes | str
        Document after evaluation and reading
    dialect : Dialect
        YAML decodes as YAML; JSON and JSONNET decode as JSON
    path : str
        Originating file, for error messages

    Raises
    ------
    DecodeError
        If the text is malformed, the root is not a mapping, or a field has
        the wrong shape
    """
    try:
        if dialect is Dialect.YAML:
            raw: Any = yaml.safe_load(data)
        else:
            raw = json.loads(data)
    except (yaml.YAMLError, ValueError) as e:
        raise DecodeError(path, str(e)) from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise DecodeError(path, f"expected a mapping, got {type(raw).__name__}")

    unknown = sorted(set(raw) - _known_keys())
    if unknown:
        logger.warning("Ignoring unknown keys in {path}: {keys}", path=path, keys=unknown)

    try:
        return Config.model_validate(raw)
    except ValidationError as e:
        raise DecodeError(path, str(e)) from e


class ConfigLoader:
    """Loads service definition files into resolved Configs.

    Parameters
    ----------
    ext_str : Mapping[str, str] | None
        Jsonnet external string variables (``std.extVar``)
    ext_code : Mapping[str, str] | None
        Jsonnet external code variables
    session_factory : SessionFactory
        Builds the AWS session from the resolved region
    plugin_registry : PluginRegistry | None
        Registry used for plugin declarations; built-ins by default

    Examples
    --------
    >>> loader = ConfigLoader(ext_str={"env": "staging"})
    >>> config = loader.load("ecspresso.jsonnet", version="2.4.0")  # doctest: +SKIP
    >>> task_def = loader.evaluate(config.task_definition_path)  # doctest: +SKIP
    """

    def __init__(
        self,
        ext_str: Mapping[str, str] | None = None,
        ext_code: Mapping[str, str] | None = None,
        session_factory: SessionFactory = default_session_factory,
        plugin_registry: PluginRegistry | None = None,
    ) -> None:
        self.renderer = TemplateRenderer()
        self.jsonnet = JsonnetEngine(ext_str=ext_str, ext_code=ext_code)
        self.session_factory = session_factory
        if plugin_registry is None:
            plugin_registry = default_registry()
        self.plugin_registry = plugin_registry
        self.normalizer = ConfigNormalizer()

    def new_context(self, **overrides: Any) -> LoadContext:
        """Build a LoadContext from this loader's settings."""
        settings: dict[str, Any] = {
            "session_factory": self.session_factory,
            "plugin_registry": self.plugin_registry,
        }
        settings.update(overrides)
        return LoadContext(**settings)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, path: str | Path, version: str, context: LoadContext | None = None) -> Config:
        """Load, normalize and version-gate a config file.

        Nothing is returned unless every stage succeeds.

        Raises
        ------
        ConfigError
            Subclass naming the failed stage
        """
        config_path = str(path)
        dialect = Dialect.from_path(config_path)
        logger.info("Loading configuration from {path}", path=config_path)

        if dialect.evaluated:
            json_text = self.jsonnet.evaluate_file(config_path)
            data = self.read_with_env_bytes(json_text.encode("utf-8"), source=config_path)
        else:
            data = self.read_with_env(config_path)

        config = unmarshal_config(data, dialect, config_path)
        config.runtime.path = config_path
        config.runtime.dir = os.path.dirname(config_path)

        self.normalizer.restrict(config, context or self.new_context())
        config.validate_version(version)

        self.absorb_functions(config)
        return config

    def absorb_functions(self, config: Config) -> None:
        """Make the config's plugin functions available to later reads."""
        for funcs in config.template_funcs:
            self.renderer.add_funcs(funcs)
        for fn in config.jsonnet_native_funcs:
            self.jsonnet.add_native_function(fn)

    # ------------------------------------------------------------------
    # Reading and evaluation
    # ------------------------------------------------------------------

    def read_with_env(self, path: str | Path, extra_env: Mapping[str, str] | None = None) -> bytes:
        """Read a file, render it and substitute environment variables.

        ``extra_env`` is visible only during this call.

        Raises
        ------
        ReadError
            On I/O failure or an undefined variable
        """
        source = str(path)
        try:
            text = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ReadError(source, str(e)) from e
        return self._render(text, extra_env, source)

    def read_with_env_bytes(
        self,
        data: bytes,
        extra_env: Mapping[str, str] | None = None,
        source: str = _BYTES_SOURCE,
    ) -> bytes:
        """Like :meth:`read_with_env` for an in-memory document."""
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ReadError(source, str(e)) from e
        return self._render(text, extra_env, source)

    def evaluate(self, path: str | Path, extra_env: Mapping[str, str] | None = None) -> str:
        """Return the document text after dialect evaluation.

        JSON and jsonnet files are evaluated to JSON text; YAML is returned
        as written.
        """
        dialect = Dialect.from_path(path)
        if dialect.evaluated:
            return self.jsonnet.evaluate_file(path, extra_env)
        try:
            return Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ReadError(str(path), str(e)) from e

    def read_definition(self, config: Config, path: str | Path) -> bytes:
        """Read a task or service definition with ``config.env`` in effect.

        JSON and jsonnet definitions are evaluated first, then rendered like
        any other document. The config's ``env`` entries are visible to
        templates, ``${VAR}`` references and jsonnet natives only for the
        duration of the call.

        Raises
        ------
        ConfigError
            ``TemplateEvaluationError`` from jsonnet or ``ReadError`` from
            rendering
        """
        extra_env = config.env or None
        source = str(path)
        if Dialect.from_path(source).evaluated:
            json_text = self.jsonnet.evaluate_file(source, extra_env)
            return self.read_with_env_bytes(json_text.encode("utf-8"), extra_env, source=source)
        return self.read_with_env(source, extra_env)

    def _render(self, text: str, extra_env: Mapping[str, str] | None, source: str) -> bytes:
        environ = overlay_environ(extra_env)
        # Plugin functions may consult os.environ directly
        rendered = with_extra_env_set(
            extra_env, lambda: self.renderer.render(text, environ, source=source)
        )
        return rendered.encode("utf-8")


def load_config(
    path: str | Path,
    version: str,
    *,
    ext_str: Mapping[str, str] | None = None,
    ext_code: Mapping[str, str] | None = None,
    session_factory: SessionFactory = default_session_factory,
) -> Config:
    """Load a config file with a one-off :class:`ConfigLoader`."""
    loader = ConfigLoader(ext_str=ext_str, ext_code=ext_code, session_factory=session_factory)
    return loader.load(path, version)
