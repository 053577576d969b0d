"""制品拉取与安装

职责:
- 下载 tarball（可选的本地内容寻址缓存优先）
- 完整性校验
- 解压到 target_dir/<name>

任何一步失败都直接抛出，已写入的文件不做清理。
"""

from __future__ import annotations

import base64
import binascii
import logging
from pathlib import Path

from minipm.core.dep.archive import extract_tarball
from minipm.core.dep.integrity import split_integrity, verify_integrity
from minipm.core.dep.models import Transport
from minipm.core.exceptions import IntegrityError, NetworkError, ValidationError
from minipm.utils.net import validate_url_scheme

logger = logging.getLogger(__name__)


class ArtifactFetcher:
    """下载、校验并解压单个包"""

    def __init__(
        self,
        transport: Transport,
        cache_dir: Path | None = None,
        strip_components: int = 1,
    ) -> None:
        self.transport = transport
        self.cache_dir = cache_dir
        self.strip_components = strip_components

    def fetch_and_install(
        self,
        url: str,
        name: str,
        integrity: str | None,
        target_dir: Path,
    ) -> Path:
        """拉取 url 指向的 tarball，校验后解压到 target_dir/name，返回安装路径。

        integrity 为空表示调用方主动跳过校验（如锁条目尚无摘要）；
        摘要存在但算法不支持时必须失败。
        """
        content = self._load(url, name, integrity)

        if integrity:
            verify_integrity(integrity, content, package=name)
            logger.info("完整性校验通过: %s", name)
            self._store_cache(integrity, content)
        else:
            logger.warning("未提供完整性摘要，跳过校验: %s", name)

        dest = target_dir / name
        extract_tarball(
            content, dest,
            strip_components=self.strip_components, package=name,
        )
        logger.info("已安装: %s -> %s", name, dest)
        return dest

    # ---- 缓存 ----

    def _cache_path(self, integrity: str | None) -> Path | None:
        if self.cache_dir is None or not integrity:
            return None
        try:
            algorithm, value = split_integrity(integrity)
            digest = base64.b64decode(value, validate=True).hex()
        except (IntegrityError, binascii.Error):
            # 摘要无效时不走缓存，由后续校验报错
            return None
        return self.cache_dir / algorithm / f"{digest}.tgz"

    def _load(self, url: str, name: str, integrity: str | None) -> bytes:
        cached = self._cache_path(integrity)
        if cached is not None and cached.is_file():
            content = cached.read_bytes()
            try:
                verify_integrity(integrity or "", content, package=name)
            except IntegrityError:
                logger.warning("缓存内容损坏，丢弃后重新下载: %s", cached)
                cached.unlink(missing_ok=True)
            else:
                logger.info("缓存命中: %s", cached)
                return content

        try:
            validate_url_scheme(url, context=f"tarball {name}")
        except ValidationError as e:
            raise NetworkError(str(e), package=name) from e
        logger.info("下载: %s", url)
        return self.transport(url)

    def _store_cache(self, integrity: str, content: bytes) -> None:
        cached = self._cache_path(integrity)
        if cached is None or cached.exists():
            return
        try:
            cached.parent.mkdir(parents=True, exist_ok=True)
            tmp = cached.with_suffix(".tmp")
            tmp.write_bytes(content)
            tmp.replace(cached)
        except OSError as e:
            # 缓存写入失败不影响安装
            logger.warning("写入缓存失败 %s: %s", cached, e)
