"""
Preference Store - versioned defaults merged with persisted overrides

Usage:
    from elpick_core.preferences import PreferenceStore, JSONFileBackend

    store = PreferenceStore(JSONFileBackend(path), component_ids=["inspector", "filters"])
    await store.load()
    store.set("ui.theme", "dark")    # write scheduled, not awaited
    await store.flush()

Writes are fire-and-forget asyncio tasks. ``get`` reads the in-memory copy
and never waits for a pending write.
"""

import asyncio
import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, Set

from .config import config

logger = logging.getLogger(__name__)

PREFS_VERSION = 1

DEFAULT_COMPONENT_STATE = {"enabled": True, "show_in_toolbar": True}


class PreferenceBackend(Protocol):
    async def get(self, key: str, default: Any = None) -> Any: ...

    async def set(self, key: str, value: Any) -> None: ...


class MemoryBackend:
    """In-process key -> JSON value store"""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self.data: Dict[str, Any] = copy.deepcopy(initial) if initial else {}

    async def get(self, key: str, default: Any = None) -> Any:
        if key not in self.data:
            return default
        return copy.deepcopy(self.data[key])

    async def set(self, key: str, value: Any) -> None:
        self.data[key] = copy.deepcopy(value)


class JSONFileBackend:
    """
    Key -> JSON value store kept in a single JSON file.

    A missing or corrupt file reads as empty; writes replace the file
    atomically.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else config.prefs_path

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable preferences file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring preferences file {self.path}: top level is not an object")
            return {}
        return data

    def _write_key(self, key: str, value: Any) -> None:
        data = self._read_all()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=str(self.path.parent), prefix=".prefs-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    async def get(self, key: str, default: Any = None) -> Any:
        data = await asyncio.to_thread(self._read_all)
        return data.get(key, default)

    async def set(self, key: str, value: Any) -> None:
        await asyncio.to_thread(self._write_key, key, value)


# =============================================================================
# DEFAULTS & MERGE
# =============================================================================

def build_defaults(component_ids: Iterable[str] = ()) -> Dict[str, Any]:
    """Current-schema defaults for the given panel ids."""
    ids = list(component_ids)
    return {
        "version": PREFS_VERSION,
        "ui": {
            "position": {"top": "15px", "left": "15px"},
            "size": {"width": "650px", "height": "450px"},
            "theme": "glass",
            "compact": False,
            "is_visible": True,
            "collapse_feature_enabled": True,
        },
        "active_tab": ids[0] if ids else "",
        "component_order": list(ids),
        "components": {cid: dict(DEFAULT_COMPONENT_STATE) for cid in ids},
        "picker": {
            "cursor": config.default_cursor,
            "highlight": config.highlight_enabled,
        },
        "debug": {
            "auto_toggle_with_devtools": False,
            "debugger_delay": "0",
        },
    }


def _reconcile_components(prefs: Dict[str, Any], component_ids: List[str]) -> None:
    known: Set[str] = set(component_ids)
    order = prefs.get("component_order")
    if not isinstance(order, list) or len(order) != len(component_ids) or set(order) != known:
        logger.debug(f"Regenerating component order: {order} -> {component_ids}")
        prefs["component_order"] = list(component_ids)

    states = prefs.get("components")
    if isinstance(states, dict):
        stale = [cid for cid in states if cid not in known]
        for cid in stale:
            del states[cid]
        if stale:
            logger.debug(f"Dropped state for unknown components: {stale}")


def merge_preferences(
    defaults: Dict[str, Any],
    persisted: Optional[Dict[str, Any]],
    component_ids: Optional[Iterable[str]] = None,
) -> Dict[str, Any]:
    """
    Merge persisted preferences over defaults.

    Nested objects merge one level deep; anything absent falls back to the
    default. Top-level keys the defaults no longer know are dropped.
    """
    persisted = persisted if isinstance(persisted, dict) else {}
    merged: Dict[str, Any] = {}

    for key, default_value in defaults.items():
        if key not in persisted:
            merged[key] = copy.deepcopy(default_value)
            continue
        value = persisted[key]
        if isinstance(default_value, dict):
            section = copy.deepcopy(default_value)
            if isinstance(value, dict):
                section.update(copy.deepcopy(value))
            merged[key] = section
        else:
            merged[key] = copy.deepcopy(value)

    if "version" in defaults:
        merged["version"] = defaults["version"]

    if component_ids is not None and "component_order" in defaults:
        _reconcile_components(merged, list(component_ids))

    return merged


# =============================================================================
# STORE
# =============================================================================

class PreferenceStore:
    """In-memory preferences with fire-and-forget persistence."""

    def __init__(
        self,
        backend: Optional[PreferenceBackend] = None,
        component_ids: Iterable[str] = (),
        storage_key: Optional[str] = None,
        defaults: Optional[Dict[str, Any]] = None,
    ):
        self.backend = backend or JSONFileBackend()
        self.component_ids = list(component_ids)
        self.storage_key = storage_key or config.prefs_storage_key
        self.defaults = defaults if defaults is not None else build_defaults(self.component_ids)
        self.prefs: Dict[str, Any] = copy.deepcopy(self.defaults)
        self._pending: Set[asyncio.Task] = set()
        self._writer: Optional[asyncio.Task] = None
        self._queued: Optional[Dict[str, Any]] = None

    async def load(self) -> Dict[str, Any]:
        persisted = await self.backend.get(self.storage_key, None)
        if persisted is None:
            logger.debug(f"No stored preferences under {self.storage_key}, using defaults")
        self.prefs = merge_preferences(self.defaults, persisted, self.component_ids)
        self.save()
        return self.prefs

    def save(self) -> None:
        """
        Persist the current preferences without waiting for the write.

        Writes go through a single writer task per store, so they land in
        call order; snapshots queued while a write is in flight collapse
        into the newest one.
        """
        snapshot = copy.deepcopy(self.prefs)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self.backend.set(self.storage_key, snapshot))
            return
        self._queued = snapshot
        if self._writer is None or self._writer.done():
            self._writer = loop.create_task(self._drain())
            self._pending.add(self._writer)
            self._writer.add_done_callback(self._write_done)

    async def _drain(self) -> None:
        while self._queued is not None:
            snapshot, self._queued = self._queued, None
            try:
                await self.backend.set(self.storage_key, snapshot)
            except Exception as e:
                logger.warning(f"Preference write failed: {e}")

    def _write_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning(f"Preference writer stopped: {task.exception()}")

    async def flush(self) -> None:
        """Wait for every scheduled write."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def get(self, key: str, default: Any = None) -> Any:
        node: Any = self.prefs
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        parts = key.split(".")
        node = self.prefs
        for part in parts[:-1]:
            if not isinstance(node.get(part), dict):
                node[part] = {}
            node = node[part]
        node[parts[-1]] = value
        self.save()

    def get_component_state(self, component_id: str) -> Optional[Dict[str, Any]]:
        return self.prefs.get("components", {}).get(component_id)

    def set_component_state(self, component_id: str, state: Dict[str, Any]) -> None:
        self.prefs.setdefault("components", {})[component_id] = dict(state)
        self.save()

    def reset(self) -> Dict[str, Any]:
        self.prefs = copy.deepcopy(self.defaults)
        self.save()
        return self.prefs
