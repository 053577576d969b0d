"""锁文件模型

锁文件是 {包名: LockEntry} 的 JSON 对象:

    {
      "left-pad": {
        "version": "1.3.0",
        "resolved_url": "https://registry.npmjs.org/left-pad/-/left-pad-1.3.0.tgz",
        "integrity": "sha512-...",
        "dependencies": {"...": "^1.0.0"}
      }
    }

运行开始时加载一次（不存在视为空），编排过程中只为重新解析的包写入条目，
运行结束时整体原子写回。
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from minipm.core.dep.models import LockEntry
from minipm.core.exceptions import LockfileError, PersistenceError
from minipm.utils.yaml_io import atomic_write

logger = logging.getLogger(__name__)


class LockFile:
    """包名 -> LockEntry 的可变映射"""

    def __init__(self, entries: dict[str, LockEntry] | None = None) -> None:
        self._entries: dict[str, LockEntry] = dict(entries or {})

    def get(self, name: str) -> LockEntry | None:
        return self._entries.get(name)

    def put(self, name: str, entry: LockEntry) -> None:
        """插入或覆盖条目"""
        previous = self._entries.get(name)
        self._entries[name] = entry
        if previous is None:
            logger.debug("锁条目新增: %s@%s", name, entry.version)
        elif previous != entry:
            logger.info("锁条目更新: %s %s -> %s", name, previous.version, entry.version)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._entries))

    def items(self) -> list[tuple[str, LockEntry]]:
        return sorted(self._entries.items())

    def to_dict(self) -> dict[str, dict[str, object]]:
        return {name: entry.to_dict() for name, entry in self.items()}

    def dumps(self) -> str:
        return json.dumps(self.to_dict(), indent=2, sort_keys=True, ensure_ascii=False) + "\n"

    # ---- 持久化 ----

    @classmethod
    def loads(cls, raw: str, *, source: str = "") -> LockFile:
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            raise LockfileError(f"锁文件不是合法 JSON: {source} - {e}") from e
        if not isinstance(payload, dict):
            raise LockfileError(f"锁文件顶层必须是对象: {source}")
        return cls({name: _parse_entry(name, item) for name, item in payload.items()})

    @classmethod
    def load(cls, path: str | Path) -> LockFile:
        """加载锁文件，不存在时返回空锁"""
        p = Path(path)
        if not p.exists():
            logger.info("锁文件不存在，从空锁开始: %s", p)
            return cls()
        try:
            raw = p.read_text(encoding="utf-8")
        except OSError as e:
            raise LockfileError(f"读取锁文件失败: {p} - {e}") from e
        lock = cls.loads(raw, source=str(p))
        logger.info("已加载锁文件: %s (%d 个条目)", p, len(lock))
        return lock

    def save(self, path: str | Path) -> Path:
        """整体覆盖写入，失败抛 PersistenceError"""
        p = Path(path)
        try:
            atomic_write(p, self.dumps())
        except OSError as e:
            raise PersistenceError(f"写入锁文件失败: {p} - {e}") from e
        logger.info("已写入锁文件: %s (%d 个条目)", p, len(self))
        return p


def _parse_entry(name: Any, item: Any) -> LockEntry:
    if not isinstance(name, str) or not name:
        raise LockfileError("锁文件包含无效的包名")
    if not isinstance(item, dict):
        raise LockfileError(f"无效的锁条目: {name}")
    deps = item.get("dependencies")
    if deps is not None and not (
        isinstance(deps, dict)
        and all(isinstance(k, str) and isinstance(v, str) for k, v in deps.items())
    ):
        raise LockfileError(f"锁条目 dependencies 无效: {name}")
    integrity = item.get("integrity") or ""
    if not isinstance(integrity, str):
        raise LockfileError(f"锁条目 integrity 无效: {name}")
    return LockEntry(
        version=_required_str(item, "version", name),
        resolved_url=_required_str(item, "resolved_url", name),
        integrity=integrity,
        dependencies=dict(deps) if deps is not None else None,
    )


def _required_str(item: dict[str, Any], key: str, name: str) -> str:
    value = item.get(key)
    if not isinstance(value, str) or not value:
        raise LockfileError(f"锁条目 {name} 缺少 `{key}`")
    return value
