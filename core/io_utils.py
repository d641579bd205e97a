from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, List


async def read_json(path: Path, default: Any = None) -> Any:
    def _read() -> Any:
        try:
            with path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except FileNotFoundError:
            return default

    return await asyncio.to_thread(_read)


async def list_json_files(directory: Path) -> List[Path]:
    def _list() -> List[Path]:
        if not directory.is_dir():
            return []
        return sorted(path for path in directory.glob("*.json") if path.is_file())

    return await asyncio.to_thread(_list)
