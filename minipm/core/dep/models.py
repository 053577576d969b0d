"""依赖数据模型

数据类:
- DependencyRequest: 依赖请求（名称 + 版本范围）
- RegistryVersionRecord: 注册表中单个已发布版本
- LockEntry: 锁文件条目（解析回执）
- InstalledPackage / InstallReport: 一次安装的结果汇总
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path

# 嵌套安装目录名，每个包的传递依赖都安装在自己的 node_modules 下
MODULES_DIRNAME = "node_modules"

# 传输层: url -> 字节，失败抛 NetworkError
Transport = Callable[[str], bytes]


@dataclass(frozen=True)
class DependencyRequest:
    """来自清单（直接依赖）或已解析包声明（传递依赖）的请求"""

    name: str
    range: str


def iter_requests(dependencies: Mapping[str, str] | None) -> Iterator[DependencyRequest]:
    for name, spec in (dependencies or {}).items():
        yield DependencyRequest(name=name, range=spec)


@dataclass(frozen=True)
class RegistryVersionRecord:
    """注册表中的一个已发布版本，单次运行内不可变"""

    version: str
    artifact_url: str
    integrity: str
    dependencies: dict[str, str] | None = None


@dataclass
class LockEntry:
    """锁文件条目

    version 必须是写入时实际拉取并校验通过的版本，而不是请求的范围。
    integrity 为空表示该条目没有摘要，复用时跳过校验。
    """

    version: str
    resolved_url: str
    integrity: str = ""
    dependencies: dict[str, str] | None = None

    @classmethod
    def from_record(cls, record: RegistryVersionRecord) -> LockEntry:
        return cls(
            version=record.version,
            resolved_url=record.artifact_url,
            integrity=record.integrity,
            dependencies=dict(record.dependencies) if record.dependencies is not None else None,
        )

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "version": self.version,
            "resolved_url": self.resolved_url,
            "integrity": self.integrity,
        }
        if self.dependencies is not None:
            data["dependencies"] = dict(sorted(self.dependencies.items()))
        return data


@dataclass
class InstalledPackage:
    """单个已安装包"""

    name: str
    version: str
    path: Path
    source: str  # "lock" | "registry"


@dataclass
class InstallReport:
    """一次安装的结果汇总"""

    installed: list[InstalledPackage] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)  # 顶层包名 -> 错误信息
    skipped_cycles: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed

    def count(self, source: str) -> int:
        return sum(1 for p in self.installed if p.source == source)
