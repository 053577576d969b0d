"""CLI — 注册表查询与摘要工具"""

from __future__ import annotations

from pathlib import Path

import click

from minipm.cli import _svc, handle_errors
from minipm.core.dep.integrity import compute_integrity
from minipm.core.dep.resolver import resolve_version


def register(group: click.Group) -> None:
    group.add_command(resolve)
    group.add_command(integrity)


@click.command()
@click.argument("name")
@click.argument("spec", default="*")
@handle_errors
def resolve(name: str, spec: str) -> None:
    """查询注册表，输出 SPEC 范围内将被选中的版本（不安装）"""
    versions = _svc().registry.get_versions(name)
    chosen = resolve_version(spec, versions.keys(), package=name)
    record = versions[chosen]
    click.echo(f"{name}@{record.version}")
    click.echo(f"  tarball:   {record.artifact_url}")
    click.echo(f"  integrity: {record.integrity or '(无)'}")
    for dep, dep_spec in sorted((record.dependencies or {}).items()):
        click.echo(f"  依赖: {dep} {dep_spec}")


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def integrity(file: Path) -> None:
    """计算文件的 sha512 完整性摘要"""
    click.echo(compute_integrity(file.read_bytes()))
