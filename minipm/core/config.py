"""集中配置管理

提供统一的配置入口，支持从 YAML 文件加载 + 编程式覆盖。
文件中未知的键保存在 extra 中，不会导致加载失败。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import yaml

from minipm.core.exceptions import ConfigError
from minipm.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "minipm.yml"


@dataclass
class Config:
    """全局配置"""

    # 文件
    manifest: str = "package.json"
    lock_file: str = "dep-lock.json"
    modules_dir: str = "node_modules"

    # 注册表
    registry_url: str = "https://registry.npmjs.org"
    timeout: int = 30  # 秒

    # 下载缓存，留空表示关闭
    cache_dir: str = ".minipm/cache"

    # 解压时去掉的前导目录层数（npm 包统一包在 package/ 下）
    strip_components: int = 1

    # 顶层依赖失败后是否继续处理其余顶层依赖
    keep_going: bool = False

    extra: dict = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str = DEFAULT_CONFIG_FILE) -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        try:
            data = load_yaml(path)
        except (yaml.YAMLError, ValueError) as e:
            raise ConfigError(f"配置文件无效: {path} - {e}") from e
        if not data:
            return cls()
        known = {f.name for f in cls.__dataclass_fields__.values()}
        matched = {k: v for k, v in data.items() if k in known and k != "extra"}
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    def to_dict(self) -> dict:
        from dataclasses import asdict
        return asdict(self)


# 全局单例，首次 import 时不加载文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = DEFAULT_CONFIG_FILE) -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
