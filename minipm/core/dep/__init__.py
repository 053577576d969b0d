"""依赖解析 / 拉取 / 锁文件协调

模块划分:
- models.py: 数据模型
- resolver.py: 版本范围解析
- integrity.py: 完整性摘要校验
- archive.py: tarball 解压
- fetcher.py: 拉取 + 校验 + 安装
- registry.py: 注册表客户端
- lockfile.py: 锁文件模型与持久化
- manifest.py: 清单读取
- reconciler.py: 锁文件协调（递归编排）
"""

from minipm.core.dep.fetcher import ArtifactFetcher
from minipm.core.dep.integrity import compute_integrity, verify_integrity
from minipm.core.dep.lockfile import LockFile
from minipm.core.dep.manifest import load_manifest
from minipm.core.dep.models import (
    DependencyRequest,
    InstalledPackage,
    InstallReport,
    LockEntry,
    RegistryVersionRecord,
)
from minipm.core.dep.reconciler import Reconciler
from minipm.core.dep.registry import RegistryClient
from minipm.core.dep.resolver import resolve_version, version_satisfies

__all__ = [
    "ArtifactFetcher",
    "DependencyRequest",
    "InstallReport",
    "InstalledPackage",
    "LockEntry",
    "LockFile",
    "Reconciler",
    "RegistryClient",
    "RegistryVersionRecord",
    "compute_integrity",
    "load_manifest",
    "resolve_version",
    "verify_integrity",
    "version_satisfies",
]
