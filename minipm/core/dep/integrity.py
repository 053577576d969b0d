"""完整性摘要校验

摘要格式: "<algorithm>-<base64(hash)>"，目前只支持 sha512。
"""

from __future__ import annotations

import base64
import hashlib

from minipm.core.exceptions import IntegrityMismatchError, UnsupportedAlgorithmError

SUPPORTED_ALGORITHM = "sha512"


def compute_integrity(content: bytes) -> str:
    """计算内容的 sha512 摘要字符串"""
    digest = base64.b64encode(hashlib.sha512(content).digest()).decode("ascii")
    return f"{SUPPORTED_ALGORITHM}-{digest}"


def split_integrity(expected: str, *, package: str = "") -> tuple[str, str]:
    """拆分摘要字符串，返回 (algorithm, base64 值)"""
    parts = expected.split("-")
    if len(parts) != 2 or parts[0] != SUPPORTED_ALGORITHM:
        raise UnsupportedAlgorithmError(
            f"不支持的摘要算法: {expected!r}"
            + (f" ({package})" if package else ""),
            package=package,
        )
    return parts[0], parts[1]


def verify_integrity(expected: str, content: bytes, *, package: str = "") -> None:
    """校验内容摘要，大小写敏感逐字节比较。

    Raises:
        UnsupportedAlgorithmError: 摘要格式或算法不受支持
        IntegrityMismatchError: 摘要不匹配
    """
    _, expected_value = split_integrity(expected, package=package)
    actual_value = base64.b64encode(hashlib.sha512(content).digest()).decode("ascii")
    if actual_value != expected_value:
        raise IntegrityMismatchError(
            f"完整性校验失败: {package or '<unknown>'}，"
            f"期望 {expected_value}，实际 {actual_value}",
            package=package, expected=expected_value, actual=actual_value,
        )
