"""Configuration data models for ecsconf.

``Config`` mirrors the service definition file field-for-field (the
serialized names are the YAML/JSON keys). Besides the declared fields it
keeps runtime state that never serializes: where the file came from, the
functions plugins contributed, the parsed ``required_version`` and the
resolved AWS session. That state lives in :class:`ConfigRuntime`.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Protocol, runtime_checkable

import boto3
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    field_serializer,
    field_validator,
    model_validator,
)

from ecsconf.kernel.aws import assume_role_session
from ecsconf.kernel.config.duration import Duration
from ecsconf.kernel.exceptions import VersionMismatchError
from ecsconf.kernel.functions import NativeFunction, TemplateFuncs
from ecsconf.kernel.logging import get_logger
from ecsconf.kernel.versioning import VersionConstraints, parse_version

logger = get_logger(__name__)

DEFAULT_CLUSTER_NAME = "default"
DEFAULT_TIMEOUT = timedelta(minutes=10)


class ConfigPlugin(BaseModel):
    """A plugin declaration: ``{name, config, func_prefix}``.

    ``config`` is handed to the plugin untouched.
    """

    model_config = ConfigDict(extra="ignore")

    name: str
    config: dict[str, Any] = Field(default_factory=dict)
    func_prefix: str = ""

    @field_validator("config", mode="before")
    @classmethod
    def _none_config(cls, value: Any) -> Any:
        return {} if value is None else value


class ConfigCodeDeploy(BaseModel):
    """CodeDeploy application and deployment group, passed through opaque."""

    model_config = ConfigDict(extra="ignore")

    application_name: str = ""
    deployment_group_name: str = ""


@runtime_checkable
class HasTags(Protocol):
    """Anything whose AWS tags can be read and replaced."""

    def get_tags(self) -> list[dict[str, Any]]: ...

    def set_tags(self, tags: list[dict[str, Any]]) -> None: ...


class DictTags:
    """Adapt a boto3-shaped resource dict to :class:`HasTags`.

    ECS descriptions keep tags under ``"tags"`` as ``{"key", "value"}``
    mappings; other APIs use ``"Tags"`` with capitalized keys.
    """

    def __init__(self, resource: dict[str, Any], field: str = "tags") -> None:
        self.resource = resource
        self.field = field

    def get_tags(self) -> list[dict[str, Any]]:
        return list(self.resource.get(self.field) or [])

    def set_tags(self, tags: list[dict[str, Any]]) -> None:
        if not tags and self.field not in self.resource:
            return
        self.resource[self.field] = tags


def _tag_key(tag: dict[str, Any]) -> str | None:
    return tag.get("key", tag.get("Key"))


def _scalar_str(value: Any) -> Any:
    """Coerce YAML scalars (numbers, booleans, null) to their string form."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return str(value)
    return value


class ConfigIgnore(BaseModel):
    """Tag keys to strip from resources before they are compared or registered."""

    model_config = ConfigDict(extra="ignore")

    tags: list[str] = Field(default_factory=list)

    def filter_tags(self, tags: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if not self.tags:
            return tags
        ignored = set(self.tags)
        return [tag for tag in tags if _tag_key(tag) not in ignored]

    def apply(self, entity: HasTags) -> None:
        entity.set_tags(self.filter_tags(entity.get_tags()))


@dataclass(slots=True)
class CLIOptions:
    """Command-line overrides applied after load."""

    timeout: timedelta | None = None
    filter_command: str = ""


@dataclass(slots=True)
class ConfigRuntime:
    """Non-serialized state attached to a Config while it is loaded."""

    path: str = ""
    dir: str = ""
    template_funcs: list[dict[str, Callable[..., Any]]] = field(default_factory=list)
    jsonnet_native_funcs: list[NativeFunction] = field(default_factory=list)
    version_constraints: VersionConstraints | None = None
    aws_session: boto3.session.Session | None = None


class Config(BaseModel):
    """A service deployment configuration.

    Examples
    --------
    YAML form::

        region: ap-northeast-1
        cluster: default
        service: myservice
        service_definition: ecs-service-def.json
        task_definition: ecs-task-def.json
        timeout: 10m0s
        required_version: ">= 2.0.0"
        plugins:
          - name: tfstate
            config:
              url: s3://my-bucket/terraform.tfstate
        ignore:
          tags:
            - ecspresso:ignore
    """

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    required_version: str = ""
    region: str = ""
    cluster: str = ""
    service: str = ""
    service_definition_path: str = Field(default="", alias="service_definition")
    task_definition_path: str = Field(default="", alias="task_definition")
    plugins: list[ConfigPlugin] = Field(default_factory=list)
    appspec: dict[str, Any] | None = None
    filter_command: str = ""
    timeout: Duration | None = None
    codedeploy: ConfigCodeDeploy | None = None
    ignore: ConfigIgnore | None = None
    env: dict[str, str] = Field(default_factory=dict)

    _runtime: ConfigRuntime = PrivateAttr(default_factory=ConfigRuntime)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # An explicit `key: null` means "not set"
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @field_validator(
        "required_version",
        "region",
        "cluster",
        "service",
        "service_definition_path",
        "task_definition_path",
        "filter_command",
        mode="before",
    )
    @classmethod
    def _coerce_scalar(cls, value: Any) -> Any:
        return _scalar_str(value)

    @field_validator("env", mode="before")
    @classmethod
    def _coerce_env(cls, value: Any) -> Any:
        # Values such as PORT: 8080 decode as strings
        if isinstance(value, dict):
            return {str(k): _scalar_str(v) for k, v in value.items()}
        return value

    @field_validator("timeout", mode="before")
    @classmethod
    def _parse_timeout(cls, value: Any) -> Any:
        return None if value is None else Duration.parse(value)

    @field_serializer("timeout")
    def _serialize_timeout(self, value: Duration | None) -> str | None:
        return None if value is None else str(value)

    # ------------------------------------------------------------------
    # Runtime state
    # ------------------------------------------------------------------

    @property
    def runtime(self) -> ConfigRuntime:
        return self._runtime

    @property
    def path(self) -> str:
        return self._runtime.path

    @property
    def config_dir(self) -> str:
        return self._runtime.dir

    @property
    def version_constraints(self) -> VersionConstraints | None:
        return self._runtime.version_constraints

    @property
    def aws_session(self) -> boto3.session.Session | None:
        return self._runtime.aws_session

    @property
    def template_funcs(self) -> list[dict[str, Callable[..., Any]]]:
        return self._runtime.template_funcs

    @property
    def jsonnet_native_funcs(self) -> list[NativeFunction]:
        return self._runtime.jsonnet_native_funcs

    def add_template_funcs(self, funcs: TemplateFuncs) -> None:
        """Contribute Jinja2 functions for rendering definition documents."""
        self._runtime.template_funcs.append(dict(funcs))

    def add_jsonnet_native_funcs(self, *funcs: NativeFunction) -> None:
        """Contribute jsonnet native functions for evaluating definition documents."""
        self._runtime.jsonnet_native_funcs.extend(funcs)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def validate_version(self, version: str) -> None:
        """Check that ``version`` satisfies ``required_version``.

        A version string that is not semantic (``"current"``, a dev build
        tag) is always allowed and only logged.

        Raises
        ------
        VersionMismatchError
            If the version parses and violates the constraints
        """
        constraints = self._runtime.version_constraints
        if constraints is None:
            return
        parsed = parse_version(version)
        if parsed is None:
            logger.warning(
                'Invalid version format "{version}". Skip checking required_version.',
                version=version,
            )
            return
        if not constraints.check(parsed):
            raise VersionMismatchError(version, str(constraints))

    def override_by_cli_options(self, options: CLIOptions) -> None:
        if options.timeout is not None:
            self.timeout = Duration(options.timeout)
        if options.filter_command:
            self.filter_command = options.filter_command

    def apply_ignore(self, entity: HasTags) -> None:
        """Strip ignored tags from ``entity``; a no-op when ``ignore`` is unset."""
        if self.ignore is not None:
            self.ignore.apply(entity)

    def assume_role(self, role_arn: str) -> None:
        """Swap the session credentials for the given role; empty ARN is a no-op."""
        if not role_arn:
            return
        if self._runtime.aws_session is None:
            raise RuntimeError("assume_role requires a resolved AWS session")
        self._runtime.aws_session = assume_role_session(self._runtime.aws_session, role_arn)

    def to_document(self) -> dict[str, Any]:
        """Serialize with file field names, leaving out unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def new_default_config() -> Config:
    """Create a configuration with region from ``AWS_REGION`` and the default timeout."""
    return Config(
        region=os.environ.get("AWS_REGION", ""),
        timeout=Duration(DEFAULT_TIMEOUT),
    )
