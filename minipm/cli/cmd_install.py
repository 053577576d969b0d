"""CLI — 安装与锁文件命令"""

from __future__ import annotations

import click

from minipm.cli import _svc, handle_errors


def register(group: click.Group) -> None:
    group.add_command(install)
    group.add_command(list_locked)


@click.command()
@click.option(
    "--keep-going", is_flag=True,
    help="某个顶层依赖失败时继续安装其余依赖",
)
@handle_errors
def install(keep_going: bool) -> None:
    """按清单安装依赖并更新锁文件"""
    # 未指定时沿用配置文件中的 keep_going
    report = _svc().install.install(keep_going=True if keep_going else None)
    for pkg in report.installed:
        click.echo(f"  + {pkg.name}@{pkg.version} [{pkg.source}] -> {pkg.path}")
    for entry in report.skipped_cycles:
        click.echo(f"  ~ {entry} (依赖环，已跳过)")
    for name, err in report.failed.items():
        click.echo(f"  ! {name}: {err}", err=True)
    click.echo(
        f"已安装 {len(report.installed)} 个包"
        f"（锁复用 {report.count('lock')}，注册表 {report.count('registry')}）"
    )
    if not report.success:
        raise click.exceptions.Exit(1)


@click.command(name="ls")
@handle_errors
def list_locked() -> None:
    """列出锁文件中的条目"""
    lock = _svc().install.read_lock()
    if not len(lock):
        click.echo("锁文件为空。")
        return
    for name, entry in lock.items():
        digest = entry.integrity[:20] + "..." if entry.integrity else "(无摘要)"
        click.echo(f"  {name:30s} {entry.version:12s} {digest}")
        for dep, spec in sorted((entry.dependencies or {}).items()):
            click.echo(f"      └─ {dep} {spec}")
