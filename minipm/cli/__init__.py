"""minipm 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

from __future__ import annotations

import functools
import os
from collections.abc import Callable
from typing import Any, TypeVar

import click

from minipm import __version__
from minipm.core.config import DEFAULT_CONFIG_FILE, init_config
from minipm.core.exceptions import ConfigError, MiniPMError
from minipm.services.container import ServiceContainer, get_container, reset_container
from minipm.utils.logger import setup_logging

F = TypeVar("F", bound=Callable[..., Any])


def _svc() -> ServiceContainer:
    """获取全局服务容器的快捷方式"""
    return get_container()


def handle_errors(func: F) -> F:
    """将 MiniPMError 转换为 "[code] message" 输出并以退出码 1 结束"""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except MiniPMError as e:
            click.echo(f"[{e.code}] {e}", err=True)
            raise click.exceptions.Exit(1) from e

    return wrapper  # type: ignore[return-value]


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config", "config_path", default=DEFAULT_CONFIG_FILE,
    show_default=True, help="配置文件路径（不存在则使用默认配置）",
)
def main(config_path: str) -> None:
    """minipm - 最小化包管理客户端"""
    setup_logging(
        level=os.getenv("MINIPM_LOG_LEVEL", "INFO"),
        json_output=os.getenv("MINIPM_LOG_JSON", "") == "1",
    )
    try:
        init_config(config_path)
    except ConfigError as e:
        click.echo(f"[{e.code}] {e}", err=True)
        raise click.exceptions.Exit(1) from e
    reset_container()


# 注册各领域子命令
from minipm.cli.cmd_install import register as _reg_install  # noqa: E402
from minipm.cli.cmd_registry import register as _reg_registry  # noqa: E402

_reg_install(main)
_reg_registry(main)
