"""Utility helpers for persisting scored attempts.

Attempts are stored as JSON files on disk, one per attempt plus a small
index used for per-user listings. A database-backed store can replace this
module as long as it keeps the same function signatures.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

log = logging.getLogger(__name__)

DATA_ROOT = Path(os.getenv("DATA_DIR", "data")).resolve()
ATTEMPTS_DIR = DATA_ROOT / "attempts"
ATTEMPT_INDEX_PATH = DATA_ROOT / "attempts_index.json"

_LOCK = threading.Lock()


def _ensure_dirs() -> None:
    ATTEMPTS_DIR.mkdir(parents=True, exist_ok=True)


def _read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        log.warning("unreadable JSON at %s; using default", path)
        return default


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False), encoding="utf-8")
    tmp.replace(path)


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def save_attempt(attempt_id: str, record: Dict[str, Any], metadata: Dict[str, Any]) -> None:
    """Persist the attempt record and its index metadata."""

    _ensure_dirs()
    with _LOCK:
        index: Dict[str, Dict[str, Any]] = _read_json(ATTEMPT_INDEX_PATH, {})
        index[attempt_id] = metadata
        _write_json(ATTEMPT_INDEX_PATH, index)

    _write_json(ATTEMPTS_DIR / f"{attempt_id}.json", record)


def load_attempt(attempt_id: str) -> Optional[Dict[str, Any]]:
    path = ATTEMPTS_DIR / f"{attempt_id}.json"
    if not path.exists():
        return None
    record = _read_json(path, None)
    return record if isinstance(record, dict) else None


def delete_attempt(attempt_id: str) -> bool:
    removed = False
    with _LOCK:
        index: Dict[str, Dict[str, Any]] = _read_json(ATTEMPT_INDEX_PATH, {})
        if attempt_id in index:
            index.pop(attempt_id, None)
            _write_json(ATTEMPT_INDEX_PATH, index)
            removed = True
    path = ATTEMPTS_DIR / f"{attempt_id}.json"
    if path.exists():
        path.unlink()
        removed = True
    return removed


def list_attempts_for_user(user_id: str) -> List[Dict[str, Any]]:
    index: Dict[str, Dict[str, Any]] = _read_json(ATTEMPT_INDEX_PATH, {})
    out: List[Dict[str, Any]] = []
    for aid, meta in index.items():
        if meta.get("userId") == user_id:
            item = {"id": aid}
            item.update({k: v for k, v in meta.items() if k != "id"})
            out.append(item)
    out.sort(key=lambda r: r.get("createdAt", ""), reverse=True)
    return out
