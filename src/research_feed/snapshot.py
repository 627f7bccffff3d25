from __future__ import annotations

import json
from pathlib import Path

from .models import ResultSet


def write_snapshot(path: Path, result_set: ResultSet) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(result_set.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
