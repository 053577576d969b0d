"""minipm - 最小化包管理客户端"""

__version__ = "0.1.0"
