"""锁文件协调器

对每个依赖 (name, range) 决定复用锁条目还是重新解析，驱动拉取安装，
再递归处理该包自己的依赖。

流程:
  1. 锁条目存在且其版本满足 range → 复用:
     按 resolved_url/integrity 安装到 install_root/name，
     递归处理条目记录的 dependencies，不访问注册表、不改写锁条目
  2. 否则重新解析: 查询注册表 → 选出最高满足版本 → 安装 → 递归 →
     成功后插入/覆盖锁条目
  3. 任何失败立即向上抛出，中止整个协调（fail-fast）；
     之前兄弟依赖已写入的锁条目保留

安装树严格嵌套、不做去重:
  node_modules/A/node_modules/B/...

当前解析路径上已出现过的 (name, version) 再次出现时视为环，跳过不重复安装。
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

from minipm.core.dep.lockfile import LockFile
from minipm.core.dep.models import (
    MODULES_DIRNAME,
    DependencyRequest,
    InstalledPackage,
    InstallReport,
    LockEntry,
    RegistryVersionRecord,
    iter_requests,
)
from minipm.core.dep.resolver import parse_version, resolve_version, version_satisfies
from minipm.core.exceptions import DependencyError, IntegrityError

logger = logging.getLogger(__name__)

# 当前递归路径上的 (name, version)
ActivePath = frozenset[tuple[str, str]]


class VersionSource(Protocol):
    def get_versions(self, name: str) -> dict[str, RegistryVersionRecord]: ...


class Installer(Protocol):
    def fetch_and_install(
        self, url: str, name: str, integrity: str | None, target_dir: Path,
    ) -> Path: ...


class Reconciler:
    """递归协调依赖树与锁文件

    lock 由调用方持有，协调过程中被原地修改；
    无论成功失败，调用方都应在结束后持久化它。
    """

    def __init__(
        self,
        registry: VersionSource,
        fetcher: Installer,
        lock: LockFile,
        *,
        keep_going: bool = False,
    ) -> None:
        self.registry = registry
        self.fetcher = fetcher
        self.lock = lock
        self.keep_going = keep_going

    def reconcile(
        self, dependencies: Mapping[str, str] | None, install_root: Path,
    ) -> InstallReport:
        """协调顶层依赖。

        keep_going=True 时单个顶层依赖失败只记录到 report.failed，继续处理下一个；
        默认第一个失败即抛出。
        """
        report = InstallReport()
        for req in iter_requests(dependencies):
            if not self.keep_going:
                self._reconcile_one(req, install_root, report, frozenset())
                continue
            try:
                self._reconcile_one(req, install_root, report, frozenset())
            except DependencyError as e:
                logger.error("依赖安装失败，继续处理其余依赖: %s@%s - %s", req.name, req.range, e)
                report.failed[req.name] = str(e)
        return report

    def _reconcile_level(
        self,
        dependencies: Mapping[str, str] | None,
        install_root: Path,
        report: InstallReport,
        active: ActivePath,
    ) -> None:
        for req in iter_requests(dependencies):
            self._reconcile_one(req, install_root, report, active)

    def _reconcile_one(
        self,
        req: DependencyRequest,
        install_root: Path,
        report: InstallReport,
        active: ActivePath,
    ) -> None:
        entry = self.lock.get(req.name)
        if entry is not None and self._lock_satisfies(req, entry):
            self._install_from_lock(req, entry, install_root, report, active)
            return

        record = self._resolve(req)
        if self._is_cycle(req.name, record.version, active, report):
            return
        if not record.integrity:
            raise IntegrityError(
                f"注册表未提供完整性摘要: {req.name}@{record.version}",
                package=req.name,
            )

        path = self.fetcher.fetch_and_install(
            record.artifact_url, req.name, record.integrity, install_root,
        )
        report.installed.append(InstalledPackage(
            name=req.name, version=record.version, path=path, source="registry",
        ))
        self._reconcile_level(
            record.dependencies, path / MODULES_DIRNAME, report,
            active | {(req.name, record.version)},
        )
        self.lock.put(req.name, LockEntry.from_record(record))

    def _install_from_lock(
        self,
        req: DependencyRequest,
        entry: LockEntry,
        install_root: Path,
        report: InstallReport,
        active: ActivePath,
    ) -> None:
        if self._is_cycle(req.name, entry.version, active, report):
            return
        logger.info("复用锁条目: %s@%s (范围 %s)", req.name, entry.version, req.range)
        path = self.fetcher.fetch_and_install(
            entry.resolved_url, req.name, entry.integrity or None, install_root,
        )
        report.installed.append(InstalledPackage(
            name=req.name, version=entry.version, path=path, source="lock",
        ))
        self._reconcile_level(
            entry.dependencies, path / MODULES_DIRNAME, report,
            active | {(req.name, entry.version)},
        )

    def _lock_satisfies(self, req: DependencyRequest, entry: LockEntry) -> bool:
        satisfied = version_satisfies(req.range, entry.version, package=req.name)
        if satisfied:
            return True
        if parse_version(entry.version) is None:
            logger.warning("锁条目版本无法解析，重新解析: %s@%s", req.name, entry.version)
        else:
            logger.info("锁条目已过期: %s@%s 不满足 %s", req.name, entry.version, req.range)
        return False

    def _resolve(self, req: DependencyRequest) -> RegistryVersionRecord:
        versions = self.registry.get_versions(req.name)
        chosen = resolve_version(req.range, versions.keys(), package=req.name)
        logger.info("解析: %s@%s -> %s", req.name, req.range, chosen)
        return versions[chosen]

    @staticmethod
    def _is_cycle(
        name: str, version: str, active: ActivePath, report: InstallReport,
    ) -> bool:
        if (name, version) not in active:
            return False
        logger.warning("检测到依赖环，跳过: %s@%s", name, version)
        report.skipped_cycles.append(f"{name}@{version}")
        return True
