from __future__ import annotations
from typing import Any, Dict, Iterable
from .model import Completion


def completion_asdict(res: Completion, *, fields: Iterable[str] | None = None) -> Dict[str, Any]:
    """Return a JSON-serialisable dict (skip None) optionally filtered."""
    payload = {
        "success": res.success,
        "path": res.path,
        "bytes_read": res.bytes_read,
        "error": res.error,
    }
    payload = {k: v for k, v in payload.items() if v is not None}
    if fields:
        wanted = set(fields) | {"success"}
        payload = {k: v for k, v in payload.items() if k in wanted}
    return payload
