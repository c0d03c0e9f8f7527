"""JSON persistence helpers shared by the stores.

Records are UTF-8 JSON, pretty-printed with two-space indentation so a
human can inspect a team directory by hand. Writes go through a temporary
sibling and os.replace() so a crash mid-write never leaves a truncated
file behind for the next lock holder.
"""

from __future__ import annotations

import json
import os
import uuid
from pathlib import Path
from typing import Any


def read_json(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f".{path.name}.tmp-{uuid.uuid4().hex[:8]}")
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
            f.write("\n")
        os.replace(tmp, path)
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


def drop_none(data: dict[str, Any]) -> dict[str, Any]:
    """Omit unset optional fields from a serialized record."""
    return {k: v for k, v in data.items() if v is not None}
