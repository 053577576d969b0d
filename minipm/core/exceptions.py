"""统一异常体系

所有业务异常继承 MiniPMError，每个异常带稳定的 code，
CLI 层据此输出友好提示并决定退出码。

分支级异常（单个依赖的解析/拉取/校验/解压失败）统一继承 DependencyError，
编排器默认遇到第一个即中止整个安装。
"""

from __future__ import annotations


class MiniPMError(Exception):
    """基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(MiniPMError):
    """清单、配置或锁文件缺失/内容无效，在任何网络请求之前抛出"""

    code = "CONFIG_ERROR"


class LockfileError(ConfigError):
    """锁文件无法解析"""

    code = "LOCKFILE_ERROR"


class ValidationError(MiniPMError, ValueError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class DependencyError(MiniPMError):
    """单个依赖分支失败的基类"""

    code = "DEPENDENCY_ERROR"

    def __init__(self, message: str, *, package: str = "") -> None:
        super().__init__(message)
        self.package = package


class InvalidRangeError(DependencyError):
    """版本范围表达式无法解析"""

    code = "INVALID_RANGE"


class NetworkError(DependencyError):
    """网络传输失败（不重试）"""

    code = "NETWORK_ERROR"


class RegistryError(DependencyError):
    """注册表请求失败或响应无法解析"""

    code = "REGISTRY_ERROR"


class ResolutionNotFoundError(DependencyError):
    """没有已发布版本满足请求范围"""

    code = "RESOLUTION_NOT_FOUND"


class IntegrityError(DependencyError):
    """完整性摘要校验失败"""

    code = "INTEGRITY_ERROR"


class UnsupportedAlgorithmError(IntegrityError):
    """摘要算法不受支持（仅支持 sha512）"""


class IntegrityMismatchError(IntegrityError):
    """摘要不匹配"""

    def __init__(
        self, message: str, *, package: str = "",
        expected: str = "", actual: str = "",
    ) -> None:
        super().__init__(message, package=package)
        self.expected = expected
        self.actual = actual


class ExtractError(DependencyError):
    """压缩包损坏或写入文件系统失败"""

    code = "EXTRACT_ERROR"


class PersistenceError(MiniPMError):
    """最终写入锁文件失败，已完成的安装不回滚"""

    code = "PERSISTENCE_ERROR"
