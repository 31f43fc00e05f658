"""JSON file loading and canonical snapshot serialization."""

import json
import logging
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar('T', bound=BaseModel)
logger = logging.getLogger('gameday.utils')


def load_json(path: Path | str, schema: type[T] | None = None) -> Any | T:
    """
    Read a JSON file, validating it against a pydantic model when one is given.

    Args:
        path: File to read
        schema: Model class the document must satisfy

    Returns:
        The decoded document, or a schema instance

    Raises:
        FileNotFoundError: If path does not exist
        json.JSONDecodeError: If the file is not valid JSON
        ValueError: If the document does not satisfy schema
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f'File not found: {path}')

    logger.debug(f'Reading {path}')
    text = path.read_text(encoding='utf-8')
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error(f'{path} is not valid JSON (line {e.lineno}, column {e.colno}): {e.msg}')
        raise json.JSONDecodeError(f'{path}: {e.msg}', e.doc, e.pos) from e

    if schema is None:
        return data
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        logger.error(f'{path} does not match {schema.__name__}: {e.error_count()} error(s)')
        raise ValueError(f'Schema validation failed for {path}:\n{e}') from e


def load_json_safe(path: Path | str, default: Any = None, schema: type[T] | None = None) -> Any | T:
    """Like load_json, but a missing file yields default. Broken files still raise."""
    try:
        return load_json(path, schema=schema)
    except FileNotFoundError:
        logger.debug(f'{path} not found, using default')
        return default


def canonical_json(data: Any) -> str:
    """
    Serialize data to a stable JSON string.

    Keys are sorted and separators fixed, so two equal snapshots produce
    byte-identical output regardless of dict insertion order. Pydantic
    models are dumped by alias first.
    """
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True)
    return json.dumps(data, sort_keys=True, separators=(',', ':'), ensure_ascii=False)
