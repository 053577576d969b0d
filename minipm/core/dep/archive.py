"""gzip + tar 解压

npm 包的内容统一包在一层目录（通常是 package/）下，
解压时按 strip_components 去掉前导目录后写入目标目录。
不安全的成员（绝对路径、..、设备文件等）由 tarfile 的 data 过滤器拒绝。
"""

from __future__ import annotations

import io
import logging
import tarfile
import zlib
from pathlib import Path

from minipm.core.exceptions import ExtractError

logger = logging.getLogger(__name__)


def _strip(name: str, count: int) -> str:
    parts = [p for p in name.split("/") if p and p != "."]
    return "/".join(parts[count:])


def _make_filter(strip_components: int):
    def _filter(member: tarfile.TarInfo, dest_path: str) -> tarfile.TarInfo | None:
        name = _strip(member.name, strip_components)
        if not name:
            return None
        changes: dict[str, str] = {"name": name}
        if member.islnk():
            changes["linkname"] = _strip(member.linkname, strip_components)
        return tarfile.data_filter(member.replace(**changes, deep=False), dest_path)
    return _filter


def extract_tarball(
    data: bytes, target_dir: Path, *,
    strip_components: int = 1, package: str = "",
) -> Path:
    """解压 gzip+tar 字节流到 target_dir，已存在的同名文件会被覆盖"""
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as tf:
            tf.extractall(path=str(target_dir), filter=_make_filter(strip_components))
    except (OSError, EOFError, zlib.error, tarfile.TarError) as e:
        raise ExtractError(
            f"解压失败 {package or target_dir}: {e}", package=package,
        ) from e
    logger.debug("解压完成: %s", target_dir)
    return target_dir
