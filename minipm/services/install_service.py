"""安装服务 — 清单 → 协调 → 锁文件

一次安装的完整流程:
  1. 读取清单（失败即 ConfigError，不发起任何网络请求）
  2. 加载锁文件（不存在视为空）
  3. 协调依赖树，写入 node_modules
  4. 无论第 3 步成功与否，都尝试写回锁文件

锁文件写回失败抛 PersistenceError；若协调本身已失败，
写回失败只记录日志，原始异常继续向上抛出。已完成的安装不回滚。
"""

from __future__ import annotations

import logging
from pathlib import Path

from minipm.core.dep.fetcher import ArtifactFetcher
from minipm.core.dep.lockfile import LockFile
from minipm.core.dep.manifest import load_manifest
from minipm.core.dep.models import InstallReport
from minipm.core.dep.reconciler import Reconciler
from minipm.core.dep.registry import RegistryClient
from minipm.core.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class InstallService:
    """按清单安装依赖并维护锁文件"""

    def __init__(
        self,
        registry: RegistryClient,
        fetcher: ArtifactFetcher,
        *,
        manifest: str | Path = "package.json",
        lock_file: str | Path = "dep-lock.json",
        modules_dir: str | Path = "node_modules",
        keep_going: bool = False,
    ) -> None:
        self.registry = registry
        self.fetcher = fetcher
        self.manifest = Path(manifest)
        self.lock_file = Path(lock_file)
        self.modules_dir = Path(modules_dir)
        self.keep_going = keep_going

    def install(self, *, keep_going: bool | None = None) -> InstallReport:
        dependencies = load_manifest(self.manifest)
        lock = LockFile.load(self.lock_file)

        if not dependencies:
            logger.info("清单中没有依赖")
            self._persist(lock)
            return InstallReport()

        reconciler = Reconciler(
            self.registry, self.fetcher, lock,
            keep_going=self.keep_going if keep_going is None else keep_going,
        )
        try:
            report = reconciler.reconcile(dependencies, self.modules_dir)
        except Exception:
            try:
                self._persist(lock)
            except PersistenceError as e:
                logger.error("%s", e)
            raise

        self._persist(lock)
        logger.info(
            "安装完成: %d 个包 (锁复用 %d, 注册表 %d, 失败 %d)",
            len(report.installed), report.count("lock"),
            report.count("registry"), len(report.failed),
        )
        return report

    def read_lock(self) -> LockFile:
        return LockFile.load(self.lock_file)

    def _persist(self, lock: LockFile) -> None:
        lock.save(self.lock_file)
