"""清单读取测试"""

import json
from pathlib import Path

import pytest

from minipm.core.dep.manifest import load_manifest
from minipm.core.exceptions import ConfigError


def _write(tmp_path: Path, data: object) -> Path:
    path = tmp_path / "package.json"
    path.write_text(json.dumps(data))
    return path


class TestLoadManifest:
    def test_dependencies(self, tmp_path: Path) -> None:
        path = _write(tmp_path, {
            "name": "app",
            "dependencies": {"left-pad": "^1.0.0", "@scope/util": "2.0.0"},
            "devDependencies": {"jest": "^29.0.0"},
        })
        assert load_manifest(path) == {"left-pad": "^1.0.0", "@scope/util": "2.0.0"}

    def test_no_dependency_section(self, tmp_path: Path) -> None:
        assert load_manifest(_write(tmp_path, {"name": "app"})) == {}

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="不存在"):
            load_manifest(tmp_path / "package.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text("{")
        with pytest.raises(ConfigError, match="JSON"):
            load_manifest(path)

    @pytest.mark.parametrize("data", [
        [],
        {"dependencies": ["left-pad"]},
        {"dependencies": {"left-pad": 1}},
    ])
    def test_malformed(self, tmp_path: Path, data: object) -> None:
        with pytest.raises(ConfigError):
            load_manifest(_write(tmp_path, data))
