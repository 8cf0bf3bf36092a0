from __future__ import annotations

import json
import os
from typing import Any, Iterable, List


# PUBLIC_INTERFACE
def snapshot(items: Iterable[Any]) -> List[Any]:
    """
    Turn entities into plain JSON-ready structures.

    Items exposing `serialize()` are replaced by its result; anything else is kept as-is.
    """
    return [it.serialize() if hasattr(it, "serialize") else it for it in items]


# PUBLIC_INTERFACE
def write_json_export(path: str, items: Iterable[Any]) -> str:
    """
    Write the snapshots of `items` to `path` as pretty-printed JSON.

    Parent directories are created as needed. Returns the path written.
    """
    data = snapshot(items)
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    return path
