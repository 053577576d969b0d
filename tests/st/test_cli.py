"""CLI 端到端测试 — 真实容器装配，传输层替换为内存注册表"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

import minipm.core.config as cfgmod
from minipm import __version__
from minipm.cli import main
from minipm.core.dep.integrity import compute_integrity
from minipm.services.container import reset_container


@pytest.fixture
def workdir(tmp_path: Path, fake_npm, monkeypatch: pytest.MonkeyPatch) -> Path:
    (tmp_path / "minipm.yml").write_text(yaml.safe_dump({
        "manifest": str(tmp_path / "package.json"),
        "lock_file": str(tmp_path / "dep-lock.json"),
        "modules_dir": str(tmp_path / "node_modules"),
        "cache_dir": str(tmp_path / "cache"),
        "registry_url": fake_npm.REGISTRY,
    }))
    monkeypatch.setattr("minipm.cli.setup_logging", lambda **kw: None)
    monkeypatch.setattr(
        "minipm.services.container.http_get_bytes", lambda url, **kw: fake_npm(url),
    )
    monkeypatch.setattr(cfgmod, "_current", None)
    reset_container()
    yield tmp_path
    reset_container()


def _manifest(workdir: Path, deps: dict[str, str]) -> None:
    (workdir / "package.json").write_text(json.dumps({"name": "app", "dependencies": deps}))


def _invoke(workdir: Path, *args: str):
    return CliRunner().invoke(main, ["--config", str(workdir / "minipm.yml"), *args])


class TestInstallCommand:
    def test_install_and_reuse(self, workdir: Path, fake_npm) -> None:
        fake_npm.publish("a", "1.0.0", {"b": "^1.0.0"})
        fake_npm.publish("b", "1.1.0")
        _manifest(workdir, {"a": "^1.0.0"})

        first = _invoke(workdir, "install")
        assert first.exit_code == 0, first.output
        assert "+ a@1.0.0 [registry]" in first.output
        assert "+ b@1.1.0 [registry]" in first.output
        assert (workdir / "node_modules" / "a" / "node_modules" / "b").is_dir()

        fake_npm.requests.clear()
        second = _invoke(workdir, "install")
        assert second.exit_code == 0, second.output
        assert "+ a@1.0.0 [lock]" in second.output
        assert fake_npm.registry_requests == []

    def test_missing_manifest(self, workdir: Path, fake_npm) -> None:
        result = _invoke(workdir, "install")
        assert result.exit_code == 1
        assert "[CONFIG_ERROR]" in result.output
        assert fake_npm.requests == []

    def test_resolution_failure(self, workdir: Path, fake_npm) -> None:
        fake_npm.publish("a", "1.0.0")
        _manifest(workdir, {"a": "^2.0.0"})
        result = _invoke(workdir, "install")
        assert result.exit_code == 1
        assert "[RESOLUTION_NOT_FOUND]" in result.output

    def test_keep_going_reports_failures(self, workdir: Path, fake_npm) -> None:
        fake_npm.publish("a", "1.0.0")
        _manifest(workdir, {"missing": "*", "a": "*"})
        result = _invoke(workdir, "install", "--keep-going")
        assert result.exit_code == 1
        assert "! missing" in result.output
        assert "+ a@1.0.0 [registry]" in result.output


class TestLsCommand:
    def test_empty(self, workdir: Path) -> None:
        result = _invoke(workdir, "ls")
        assert result.exit_code == 0
        assert "锁文件为空" in result.output

    def test_lists_entries(self, workdir: Path, fake_npm) -> None:
        fake_npm.publish("a", "1.0.0", {"b": "^1.0.0"})
        fake_npm.publish("b", "1.0.0")
        _manifest(workdir, {"a": "*"})
        _invoke(workdir, "install")

        result = _invoke(workdir, "ls")
        assert result.exit_code == 0
        assert "a" in result.output and "b ^1.0.0" in result.output


class TestRegistryCommands:
    def test_resolve(self, workdir: Path, fake_npm) -> None:
        fake_npm.publish("a", "1.0.0")
        fake_npm.publish("a", "1.4.2", {"b": "^2.0.0"})
        result = _invoke(workdir, "resolve", "a", "^1.0.0")
        assert result.exit_code == 0, result.output
        assert "a@1.4.2" in result.output
        assert "依赖: b ^2.0.0" in result.output

    def test_resolve_invalid_range(self, workdir: Path, fake_npm) -> None:
        fake_npm.publish("a", "1.0.0")
        result = _invoke(workdir, "resolve", "a", ">=>=")
        assert result.exit_code == 1
        assert "[INVALID_RANGE]" in result.output

    def test_integrity(self, workdir: Path) -> None:
        f = workdir / "pkg.tgz"
        f.write_bytes(b"artifact")
        result = _invoke(workdir, "integrity", str(f))
        assert result.exit_code == 0
        assert result.output.strip() == compute_integrity(b"artifact")


class TestMain:
    def test_version(self) -> None:
        result = CliRunner().invoke(main, ["--version"])
        assert __version__ in result.output

    def test_invalid_config(self, workdir: Path) -> None:
        (workdir / "minipm.yml").write_text("timeout: [unclosed\n")
        result = _invoke(workdir, "ls")
        assert result.exit_code == 1
        assert "[CONFIG_ERROR]" in result.output
