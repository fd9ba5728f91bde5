"""
Match Data Loader

Reads uploaded match data into CharacterAggregate values. A JSON file may
hold:

- a list of character aggregates: [{"name": ..., "matches": [...]}, ...]
- a single character aggregate: {"name": ..., "matches": [...]}
- a mapping of character name to match list: {"Goku": [...], ...}
- a bare match list, attributed to a character named after the file

A directory is loaded file by file (``*.json``, sorted by name).
"""

import json
import logging
from pathlib import Path
from typing import Any

from sparkstats.analysis.models import CharacterAggregate

logger = logging.getLogger(__name__)


class DataLoadError(ValueError):
    """Raised when match data cannot be read or has an unusable shape."""


def _is_match_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, dict) for item in value)


def parse_characters(data: Any, source_name: str = "Unknown") -> list[CharacterAggregate]:
    """
    Convert decoded JSON into character aggregates.

    Args:
        data: Decoded JSON document
        source_name: Character name for a bare match list

    Returns:
        Character aggregates in document order

    Raises:
        DataLoadError: If the document has none of the accepted shapes
    """
    if isinstance(data, dict):
        if "matches" in data:
            return [CharacterAggregate.from_dict(data)]
        if data and all(_is_match_list(v) for v in data.values()):
            return [CharacterAggregate(name=str(k), matches=list(v)) for k, v in data.items()]
        raise DataLoadError(f"{source_name}: object is neither a character nor a name->matches map")

    if isinstance(data, list):
        if all(isinstance(item, dict) and "matches" in item for item in data):
            return [CharacterAggregate.from_dict(item) for item in data]
        if _is_match_list(data):
            return [CharacterAggregate(name=source_name, matches=list(data))]

    raise DataLoadError(f"{source_name}: unsupported match data layout")


def load_file(path: Path) -> list[CharacterAggregate]:
    """Load one JSON file."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DataLoadError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise DataLoadError(f"Cannot read {path}: {e}") from e

    return parse_characters(data, source_name=path.stem)


def load_characters(path: Path | str) -> list[CharacterAggregate]:
    """
    Load character aggregates from a JSON file or a directory of JSON files.

    Files in a directory that fail to parse are skipped with a warning; a
    single file that fails raises.

    Args:
        path: File or directory path

    Returns:
        All character aggregates found

    Raises:
        DataLoadError: If the path does not exist or a single file is invalid
    """
    path = Path(path)
    if not path.exists():
        raise DataLoadError(f"Path not found: {path}")

    if path.is_file():
        characters = load_file(path)
    else:
        characters = []
        for file_path in sorted(path.glob("*.json")):
            try:
                characters.extend(load_file(file_path))
            except DataLoadError as e:
                logger.warning(f"Skipping {file_path.name}: {e}")

    total_matches = sum(len(c.matches) for c in characters)
    logger.info(f"Loaded {len(characters)} characters ({total_matches} matches) from {path}")
    return characters
