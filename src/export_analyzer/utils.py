"""Utility functions for Export Analyzer."""

import json
import logging
import math
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Tuple

from tqdm import tqdm

from .config import DAY_MS, DEFAULT_ENCODING


logger = logging.getLogger(__name__)


def ensure_directory(path: Path) -> None:
    """Ensure directory exists."""
    path.mkdir(parents=True, exist_ok=True)


def iter_json_files(input_dir: Path) -> List[Path]:
    """Recursively collect every .json file below input_dir."""
    return sorted(p for p in Path(input_dir).rglob("*.json") if p.is_file())


def read_documents(input_dir: Path) -> Iterator[Tuple[str, str]]:
    """Yield (file name, raw text) pairs for every JSON file in a folder tree."""
    files = iter_json_files(input_dir)
    logger.info(f"Found {len(files)} JSON files in {input_dir}")
    for path in tqdm(files, desc="Reading export files", unit="files"):
        try:
            yield path.name, path.read_text(encoding=DEFAULT_ENCODING)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read {path}: {e}")


def save_json(data: Dict[str, Any], path: Path) -> None:
    """Save dictionary to JSON file."""
    ensure_directory(path.parent)
    with open(path, 'w', encoding=DEFAULT_ENCODING) as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def to_int(value: Any, default: int = 0) -> int:
    """Coerce loosely typed numbers ("17", 17.0, None) to int."""
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        try:
            return int(float(value))
        except (TypeError, ValueError, OverflowError):
            return default


def round_half_up(value: float) -> int:
    """Round to the nearest int with halves going up (12.5 -> 13, -12.5 -> -12)."""
    return int(math.floor(value + 0.5))


def to_float(value: Any):
    """Coerce to float, or None when the value is missing or not numeric."""
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def day_start_ms(timestamp_ms: int) -> int:
    """Milliseconds of the UTC midnight starting the timestamp's day."""
    return (int(timestamp_ms) // DAY_MS) * DAY_MS


def day_key(timestamp_ms: int) -> str:
    """UTC calendar day (YYYY-MM-DD) of a millisecond timestamp."""
    return datetime.fromtimestamp(day_start_ms(timestamp_ms) / 1000.0, tz=timezone.utc).strftime('%Y-%m-%d')


def format_date(timestamp_ms: int) -> str:
    """Human readable UTC date for report labels."""
    return day_key(timestamp_ms)


def top_n(counts: Dict[Any, int], n: int) -> List[Tuple[Any, int]]:
    """Entries ordered by count descending; ties keep insertion order."""
    return sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:n]


def labels_values(entries: List[Tuple[Any, int]]) -> Dict[str, list]:
    """Split (label, value) pairs into the labels/values shape used by charts."""
    return {
        "labels": [label for label, _ in entries],
        "values": [value for _, value in entries],
    }
