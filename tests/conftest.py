"""共享 fixture — 内存中的 npm 注册表 + tarball 构造

整体结构:

  FakeNpm.publish(name, version, deps)
      │  生成 tarball（内容包在 package/ 下）并登记 packument
      ▼
  FakeNpm(url) -> bytes          ← 作为 transport 注入 RegistryClient / ArtifactFetcher
      │  packument URL 返回 JSON，tarball URL 返回字节，其余抛 NetworkError
      ▼
  fake_npm.registry_requests     ← 断言是否访问了注册表
"""

from __future__ import annotations

import io
import json
import tarfile
from pathlib import Path
from urllib.parse import unquote

import pytest

from minipm.core.dep.fetcher import ArtifactFetcher
from minipm.core.dep.integrity import compute_integrity
from minipm.core.dep.registry import RegistryClient
from minipm.core.exceptions import NetworkError


def build_tarball(files: dict[str, str | bytes], prefix: str = "package") -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tf:
        for rel, content in sorted(files.items()):
            data = content.encode("utf-8") if isinstance(content, str) else content
            info = tarfile.TarInfo(name=f"{prefix}/{rel}" if prefix else rel)
            info.size = len(data)
            info.mtime = 0
            info.mode = 0o644
            tf.addfile(info, io.BytesIO(data))
    return buf.getvalue()


class FakeNpm:
    """内存注册表 + 制品服务器，可直接作为 transport 调用"""

    REGISTRY = "https://registry.test"

    def __init__(self) -> None:
        self.packages: dict[str, dict[str, dict]] = {}
        self.tarballs: dict[str, bytes] = {}
        self.requests: list[str] = []

    def publish(
        self,
        name: str,
        version: str,
        dependencies: dict[str, str] | None = None,
        *,
        files: dict[str, str | bytes] | None = None,
        integrity: str | None = None,
    ) -> dict:
        payload = files or {
            "package.json": json.dumps({"name": name, "version": version}),
            "index.js": f"module.exports = '{name}@{version}';\n",
        }
        data = build_tarball(payload)
        url = f"{self.REGISTRY}/{name}/-/{name.split('/')[-1]}-{version}.tgz"
        self.tarballs[url] = data
        entry: dict = {
            "name": name,
            "version": version,
            "dist": {
                "tarball": url,
                "integrity": compute_integrity(data) if integrity is None else integrity,
            },
        }
        if dependencies is not None:
            entry["dependencies"] = dependencies
        self.packages.setdefault(name, {})[version] = entry
        return entry

    def __call__(self, url: str) -> bytes:
        self.requests.append(url)
        if url in self.tarballs:
            return self.tarballs[url]
        name = unquote(url[len(self.REGISTRY) + 1:])
        if url.startswith(self.REGISTRY + "/") and name in self.packages:
            return json.dumps({"name": name, "versions": self.packages[name]}).encode()
        raise NetworkError(f"请求失败: {url} - HTTP 404")

    @property
    def registry_requests(self) -> list[str]:
        return [u for u in self.requests if u not in self.tarballs]

    @property
    def tarball_requests(self) -> list[str]:
        return [u for u in self.requests if u in self.tarballs]


@pytest.fixture
def fake_npm() -> FakeNpm:
    return FakeNpm()


@pytest.fixture
def registry(fake_npm: FakeNpm) -> RegistryClient:
    return RegistryClient(transport=fake_npm, registry_url=FakeNpm.REGISTRY)


@pytest.fixture
def fetcher(fake_npm: FakeNpm) -> ArtifactFetcher:
    return ArtifactFetcher(transport=fake_npm)


@pytest.fixture
def tarball():
    """tarball 构造函数"""
    return build_tarball


def snapshot_tree(root: Path) -> dict[str, bytes]:
    return {
        str(p.relative_to(root)): p.read_bytes()
        for p in sorted(root.rglob("*")) if p.is_file()
    }


@pytest.fixture
def tree_snapshot():
    """目录树快照函数: {相对路径: 内容}"""
    return snapshot_tree
