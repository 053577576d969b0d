"""清单读取 — package.json 的 dependencies 段"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from minipm.core.exceptions import ConfigError

logger = logging.getLogger(__name__)


def load_manifest(path: str | Path) -> dict[str, str]:
    """读取直接依赖 {name: range}

    没有 dependencies 段表示无需安装，不算错误；
    文件缺失或格式不对抛 ConfigError（在任何网络请求之前）。
    """
    p = Path(path)
    try:
        raw = p.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigError(f"清单文件不存在: {p}") from e
    except OSError as e:
        raise ConfigError(f"读取清单文件失败: {p} - {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigError(f"清单文件不是合法 JSON: {p} - {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"清单文件顶层必须是对象: {p}")

    deps = data.get("dependencies")
    if deps is None:
        return {}
    if not isinstance(deps, dict):
        raise ConfigError(f"清单 dependencies 必须是对象: {p}")
    for name, spec in deps.items():
        if not isinstance(spec, str):
            raise ConfigError(f"依赖 {name} 的版本范围必须是字符串: {p}")
    logger.info("清单共 %d 个直接依赖", len(deps))
    return dict(deps)
