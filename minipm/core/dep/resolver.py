"""版本解析器

职责:
- 在已发布版本集合中挑选满足范围的最高版本
- 判断单个已锁定版本是否仍满足范围（锁文件复用检查）

范围语法采用 npm 风格（semantic_version.NpmSpec）:
精确版本、比较符、^、~、x 范围、连字符范围以及 || 并集。
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from semantic_version import NpmSpec, Version

from minipm.core.exceptions import InvalidRangeError, ResolutionNotFoundError

logger = logging.getLogger(__name__)


def parse_range(spec: str, *, package: str = "") -> NpmSpec:
    """解析版本范围，失败即视为清单损坏"""
    try:
        return NpmSpec(spec)
    except ValueError as e:
        label = f"{package}@" if package else ""
        raise InvalidRangeError(
            f"无效的版本范围: {label}{spec!r} ({e})", package=package,
        ) from e


def parse_version(text: str) -> Version | None:
    """解析精确版本，不符合 semver 时返回 None"""
    try:
        return Version(text)
    except ValueError:
        return None


def resolve_version(
    spec: str, available: Iterable[str], *, package: str = "",
) -> str:
    """从已发布版本中选出满足 spec 的最高版本，返回注册表中的原始版本字符串。

    1. spec 与某个已发布版本字符串完全相同 → 直接返回，不做范围解析
    2. 解析 spec，失败抛 InvalidRangeError
    3. 无法解析的已发布版本静默丢弃
    4. 过滤后取最大值，为空抛 ResolutionNotFoundError
    """
    versions = list(available)
    if spec in versions:
        logger.debug("精确匹配: %s@%s", package, spec)
        return spec

    req = parse_range(spec, package=package)

    candidates: dict[Version, str] = {}
    for raw in versions:
        parsed = parse_version(raw)
        if parsed is None:
            logger.debug("忽略不符合 semver 的版本: %s@%s", package, raw)
            continue
        if req.match(parsed):
            candidates[parsed] = raw

    if not candidates:
        raise ResolutionNotFoundError(
            f"没有满足范围的版本: {package}@{spec}", package=package,
        )

    best = max(candidates)
    logger.debug("范围 %s@%s -> %s (候选 %d 个)", package, spec, best, len(candidates))
    return candidates[best]


def version_satisfies(spec: str, version: str, *, package: str = "") -> bool:
    """单版本检查，与 resolve_version 使用同一套语义。

    spec 非法时抛 InvalidRangeError；version 无法解析时返回 False。
    """
    if spec == version:
        return True
    req = parse_range(spec, package=package)
    parsed = parse_version(version)
    if parsed is None:
        return False
    return req.match(parsed)
