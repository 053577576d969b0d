"""网络工具 — URL 安全校验 + 字节下载"""

from __future__ import annotations

import http.client
import logging
import urllib.error
import urllib.request
from urllib.parse import urlparse

from minipm import __version__
from minipm.core.exceptions import NetworkError, ValidationError

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = frozenset(("http", "https"))

USER_AGENT = f"minipm/{__version__}"


def validate_url_scheme(url: str, *, context: str = "") -> None:
    """校验 URL 仅使用 http/https，防止 file:// 等非预期协议访问

    Raises:
        ValidationError: URL scheme 不在白名单内
    """
    parsed = urlparse(url)
    if parsed.scheme not in _ALLOWED_SCHEMES:
        label = f" ({context})" if context else ""
        raise ValidationError(
            f"不允许的 URL 协议 '{parsed.scheme}'{label}，"
            f"仅支持 http/https: {url}"
        )


def http_get_bytes(
    url: str, *,
    timeout: float = 30,
    accept: str = "*/*",
    context: str = "",
) -> bytes:
    """GET 请求并返回完整响应体

    不做重试，任何传输错误都转换为 NetworkError 抛出。
    """
    validate_url_scheme(url, context=context)
    req = urllib.request.Request(url, headers={
        "User-Agent": USER_AGENT,
        "Accept": accept,
    })
    logger.debug("GET %s", url)
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:  # nosec B310
            return resp.read()
    except urllib.error.HTTPError as e:
        raise NetworkError(f"请求失败: {url} - HTTP {e.code}") from e
    except (urllib.error.URLError, OSError, http.client.HTTPException) as e:
        raise NetworkError(f"请求失败: {url} - {e}") from e
