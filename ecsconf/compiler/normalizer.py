"""Normalization of a freshly decoded Config ("restrict").

Steps run in a fixed order because later ones rely on earlier defaults:

1. default the cluster name
2. default the config directory to "."
3. make service/task definition paths absolute, relative to the config dir
4. parse ``required_version``
5. default the timeout
6. default the region from ``AWS_REGION``
7. resolve the AWS session
8. run the plugin pipeline
9. warn about the deprecated ``filter_command``

Any failure aborts the load.
"""

from __future__ import annotations

import os

from botocore.exceptions import BotoCoreError

from ecsconf.compiler.context import LoadContext
from ecsconf.compiler.plugins import DEFAULT_PLUGIN_NAMES
from ecsconf.kernel.config.duration import Duration
from ecsconf.kernel.config.models import (
    DEFAULT_CLUSTER_NAME,
    DEFAULT_TIMEOUT,
    Config,
    ConfigPlugin,
)
from ecsconf.kernel.exceptions import (
    CredentialResolutionError,
    LoadCancelledError,
    PluginSetupError,
)
from ecsconf.kernel.logging import get_logger
from ecsconf.kernel.versioning import VersionConstraints

logger = get_logger(__name__)


def resolve_definition_path(config_dir: str, path: str) -> str:
    """Return ``path`` made absolute against ``config_dir``; empty stays empty."""
    if not path or os.path.isabs(path):
        return path
    return os.path.abspath(os.path.join(config_dir, path))


class ConfigNormalizer:
    """Fill defaults, resolve paths and credentials, and run plugins."""

    def restrict(self, config: Config, context: LoadContext) -> None:
        runtime = config.runtime

        if not config.cluster:
            config.cluster = DEFAULT_CLUSTER_NAME
        if not runtime.dir:
            runtime.dir = "."
        config.service_definition_path = resolve_definition_path(
            runtime.dir, config.service_definition_path
        )
        config.task_definition_path = resolve_definition_path(
            runtime.dir, config.task_definition_path
        )
        if config.required_version:
            runtime.version_constraints = VersionConstraints.parse(config.required_version)
        if config.timeout is None:
            config.timeout = Duration(DEFAULT_TIMEOUT)
        if not config.region:
            config.region = os.environ.get("AWS_REGION", "")

        context.raise_if_cancelled("credential resolution")
        try:
            runtime.aws_session = context.session_factory(config.region)
        except BotoCoreError as e:
            raise CredentialResolutionError(str(e)) from e

        self.setup_plugins(config, context)

        if config.filter_command:
            logger.warning(
                "filter_command is deprecated. Use environment variable or CLI flag instead."
            )

    def setup_plugins(self, config: Config, context: LoadContext) -> None:
        """Set up built-in plugins, then declared ones, one at a time.

        Each plugin sees every change made by the plugins before it. The
        first failure stops the pipeline.

        Raises
        ------
        PluginSetupError
            If a plugin is unknown or its setup raises
        """
        declarations = [ConfigPlugin(name=name) for name in DEFAULT_PLUGIN_NAMES]
        declarations.extend(config.plugins)

        for declaration in declarations:
            context.raise_if_cancelled(f"plugin {declaration.name}")
            logger.debug("Setting up plugin {name}", name=declaration.name)
            try:
                plugin = context.plugin_registry.create(declaration)
                plugin.setup(context, config)
            except (PluginSetupError, LoadCancelledError):
                raise
            except Exception as e:
                raise PluginSetupError(declaration.name, str(e)) from e
