"""服务容器 — 统一依赖注入

注册表客户端、制品拉取器和安装服务都通过容器获取，
同一容器内共享同一个传输层和注册表缓存。CLI 通过 get_container() 获取。

依赖关系（→ 表示依赖）:
  install  → registry, fetcher
  registry → transport
  fetcher  → transport

用法:
    container = ServiceContainer()
    report = container.install.install()

    # 显式注入配置
    cfg = Config.from_file("minipm.yml")
    container = ServiceContainer(config=cfg)
"""

from __future__ import annotations

import functools
import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from minipm.utils.net import http_get_bytes

if TYPE_CHECKING:
    from minipm.core.config import Config
    from minipm.core.dep.fetcher import ArtifactFetcher
    from minipm.core.dep.models import Transport
    from minipm.core.dep.registry import RegistryClient
    from minipm.services.install_service import InstallService

logger = logging.getLogger(__name__)


class ServiceContainer:
    """懒加载服务容器

    transport 可替换（测试中注入假的下载函数），默认走 http_get_bytes。
    """

    def __init__(
        self,
        config: Config | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._instances: dict[str, object] = {}
        if config is None:
            from minipm.core.config import get_config
            config = get_config()
        self._config = config
        self._transport = transport or functools.partial(
            http_get_bytes, timeout=config.timeout,
        )

    @property
    def config(self) -> Config:
        return self._config

    @property
    def registry(self) -> RegistryClient:
        if "registry" not in self._instances:
            from minipm.core.dep.registry import RegistryClient
            self._instances["registry"] = RegistryClient(
                transport=self._transport,
                registry_url=self._config.registry_url,
            )
        return self._instances["registry"]  # type: ignore[return-value]

    @property
    def fetcher(self) -> ArtifactFetcher:
        if "fetcher" not in self._instances:
            from minipm.core.dep.fetcher import ArtifactFetcher
            cache_dir = self._config.cache_dir
            self._instances["fetcher"] = ArtifactFetcher(
                transport=self._transport,
                cache_dir=Path(cache_dir) if cache_dir else None,
                strip_components=self._config.strip_components,
            )
        return self._instances["fetcher"]  # type: ignore[return-value]

    @property
    def install(self) -> InstallService:
        if "install" not in self._instances:
            from minipm.services.install_service import InstallService
            self._instances["install"] = InstallService(
                registry=self.registry,
                fetcher=self.fetcher,
                manifest=self._config.manifest,
                lock_file=self._config.lock_file,
                modules_dir=self._config.modules_dir,
                keep_going=self._config.keep_going,
            )
        return self._instances["install"]  # type: ignore[return-value]


# ---- 全局单例 ----

_global: ServiceContainer | None = None
_global_lock = threading.Lock()


def get_container() -> ServiceContainer:
    """获取全局 ServiceContainer 单例（线程安全）"""
    global _global  # noqa: PLW0603
    if _global is not None:
        return _global
    with _global_lock:
        if _global is None:
            _global = ServiceContainer()
        return _global


def reset_container() -> None:
    """重置全局容器（CLI 切换配置或测试时使用）"""
    global _global  # noqa: PLW0603
    with _global_lock:
        _global = None
