"""Tests for jsonnet evaluation."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from ecsconf.compiler.preprocessing.jsonnet import JsonnetEngine, binding_params
from ecsconf.kernel.exceptions import TemplateEvaluationError
from ecsconf.kernel.functions import NativeFunction


def write(tmp_path: Path, name: str, content: str) -> Path:
    path = tmp_path / name
    path.write_text(content)
    return path


class TestEvaluateFile:
    def test_plain_json(self, tmp_path: Path) -> None:
        path = write(tmp_path, "ecspresso.json", '{"region": "us-east-1"}')
        assert json.loads(JsonnetEngine().evaluate_file(path)) == {"region": "us-east-1"}

    def test_external_variables(self, tmp_path: Path) -> None:
        path = write(
            tmp_path,
            "ecspresso.jsonnet",
            "{ cluster: std.extVar('cluster'), desired: std.extVar('desired') }",
        )
        engine = JsonnetEngine(ext_str={"cluster": "prod"}, ext_code={"desired": "1 + 2"})
        assert json.loads(engine.evaluate_file(path)) == {"cluster": "prod", "desired": 3}

    def test_env_natives(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AWS_REGION", "ap-northeast-1")
        path = write(
            tmp_path,
            "ecspresso.jsonnet",
            """
            local env = std.native('env');
            local must_env = std.native('must_env');
            { region: must_env('AWS_REGION'), cluster: env('CLUSTER', 'default') }
            """,
        )
        result = json.loads(JsonnetEngine().evaluate_file(path))
        assert result == {"region": "ap-northeast-1", "cluster": "default"}

    def test_must_env_missing(self, tmp_path: Path) -> None:
        path = write(tmp_path, "ecspresso.jsonnet", "{ region: std.native('must_env')('AWS_REGION') }")
        with pytest.raises(TemplateEvaluationError) as exc_info:
            JsonnetEngine().evaluate_file(path)
        assert exc_info.value.path == str(path)
        assert "AWS_REGION" in str(exc_info.value)

    def test_extra_env_is_scoped(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ECSCONF_STAGE", raising=False)
        path = write(tmp_path, "stage.jsonnet", "{ stage: std.native('must_env')('ECSCONF_STAGE') }")
        engine = JsonnetEngine()
        result = json.loads(engine.evaluate_file(path, extra_env={"ECSCONF_STAGE": "dev"}))
        assert result == {"stage": "dev"}
        assert "ECSCONF_STAGE" not in os.environ

    def test_registered_native(self, tmp_path: Path) -> None:
        engine = JsonnetEngine()
        engine.add_native_function(NativeFunction("greet", ("name",), lambda name: f"hello {name}"))
        path = write(tmp_path, "greet.jsonnet", "{ msg: std.native('greet')('ecs') }")
        assert json.loads(engine.evaluate_file(path)) == {"msg": "hello ecs"}
        assert "greet" in engine.native_function_names

    def test_failing_native(self, tmp_path: Path) -> None:
        def broken(name: str) -> str:
            raise ValueError(f"no parameter {name}")

        engine = JsonnetEngine(native_functions=[NativeFunction("ssm", ("name",), broken)])
        path = write(tmp_path, "ssm.jsonnet", "{ image: std.native('ssm')('/app/image') }")
        with pytest.raises(TemplateEvaluationError):
            engine.evaluate_file(path)

    def test_syntax_error(self, tmp_path: Path) -> None:
        path = write(tmp_path, "bad.jsonnet", "{ region: }")
        with pytest.raises(TemplateEvaluationError):
            JsonnetEngine().evaluate_file(path)

    def test_missing_external_variable(self, tmp_path: Path) -> None:
        path = write(tmp_path, "ext.jsonnet", "{ cluster: std.extVar('cluster') }")
        with pytest.raises(TemplateEvaluationError):
            JsonnetEngine().evaluate_file(path)


class TestEvaluateSnippet:
    def test_relative_import(self, tmp_path: Path) -> None:
        write(tmp_path, "common.libsonnet", "{ cluster: 'shared' }")
        source = "local common = import 'common.libsonnet'; common + { service: 'web' }"
        result = JsonnetEngine().evaluate_snippet(str(tmp_path / "main.jsonnet"), source)
        assert json.loads(result) == {"cluster": "shared", "service": "web"}


class TestMultiParameterNatives:
    def test_three_parameters(self, tmp_path: Path) -> None:
        engine = JsonnetEngine()
        engine.add_native_function(
            NativeFunction("join3", ("first", "second", "third"), lambda a, b, c: f"{a}-{b}-{c}")
        )
        path = write(tmp_path, "join.jsonnet", "{ name: std.native('join3')('x', 'y', 'z') }")
        assert json.loads(engine.evaluate_file(path)) == {"name": "x-y-z"}

    def test_env_default_and_set(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ECSCONF_CLUSTER", "prod")
        path = write(
            tmp_path,
            "env.jsonnet",
            """
            local env = std.native('env');
            { set: env('ECSCONF_CLUSTER', 'default'), unset: env('ECSCONF_NOPE', 'fallback') }
            """,
        )
        result = json.loads(JsonnetEngine().evaluate_file(path))
        assert result == {"set": "prod", "unset": "fallback"}

    def test_binding_params_keep_arity(self) -> None:
        fn = NativeFunction("cfn_output", ("stack", "key"), lambda stack, key: "")
        assert binding_params(fn) == ("a", "b")
