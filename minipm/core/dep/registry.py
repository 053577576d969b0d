"""注册表客户端

职责:
- 按包名获取 npm 风格的 packument（GET <registry_url>/<name>）
- 转换为 {version: RegistryVersionRecord}
- 单次运行内按包名缓存，同一包只请求一次

传输错误不重试，统一转换为 RegistryError。
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import quote

from minipm.core.dep.models import RegistryVersionRecord, Transport
from minipm.core.exceptions import NetworkError, RegistryError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"


def package_url(registry_url: str, name: str) -> str:
    """包元数据地址，scoped 包 @scope/name 编码为 @scope%2Fname"""
    return f"{registry_url.rstrip('/')}/{quote(name, safe='@')}"


class RegistryClient:
    """注册表适配器"""

    def __init__(self, transport: Transport, registry_url: str = DEFAULT_REGISTRY_URL) -> None:
        self.transport = transport
        self.registry_url = registry_url
        self._packuments: dict[str, dict[str, RegistryVersionRecord]] = {}
        self.request_count = 0

    def get_versions(self, name: str) -> dict[str, RegistryVersionRecord]:
        """返回包的全部已发布版本"""
        if name in self._packuments:
            return self._packuments[name]

        url = package_url(self.registry_url, name)
        logger.info("查询注册表: %s", url)
        self.request_count += 1
        try:
            raw = self.transport(url)
        except (NetworkError, ValidationError) as e:
            raise RegistryError(f"注册表请求失败: {name} - {e}", package=name) from e

        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise RegistryError(f"注册表响应不是合法 JSON: {name} - {e}", package=name) from e

        records = parse_packument(payload, package=name)
        self._packuments[name] = records
        logger.info("已获取 %s 的 %d 个版本", name, len(records))
        return records


def parse_packument(payload: Any, *, package: str = "") -> dict[str, RegistryVersionRecord]:
    """解析 packument 的 versions 段"""
    if not isinstance(payload, dict) or not isinstance(payload.get("versions"), dict):
        raise RegistryError(f"注册表响应缺少 versions: {package}", package=package)

    records: dict[str, RegistryVersionRecord] = {}
    for key, item in payload["versions"].items():
        if not isinstance(item, dict):
            raise RegistryError(f"无效的版本条目: {package}@{key}", package=package)
        dist = item.get("dist")
        if not isinstance(dist, dict) or not isinstance(dist.get("tarball"), str):
            raise RegistryError(f"版本条目缺少 dist.tarball: {package}@{key}", package=package)
        deps = item.get("dependencies")
        if deps is not None and not _is_str_mapping(deps):
            raise RegistryError(f"无效的 dependencies: {package}@{key}", package=package)
        records[key] = RegistryVersionRecord(
            version=str(item.get("version") or key),
            artifact_url=dist["tarball"],
            integrity=str(dist.get("integrity") or ""),
            dependencies=dict(deps) if deps is not None else None,
        )
    return records


def _is_str_mapping(value: Any) -> bool:
    return isinstance(value, dict) and all(
        isinstance(k, str) and isinstance(v, str) for k, v in value.items()
    )
