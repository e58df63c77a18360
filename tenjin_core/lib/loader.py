"""
Loading schema definitions from JSON files, directories, or raw JSON text.
"""

import json
import logging
import os
from typing import Any, Dict, List, Union

from tenjin_core.lib.errors import SchemaError
from tenjin_core.lib.schema import Schema


def _parse_json(text: str, origin: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaError(f"Invalid JSON in {origin}: {e}") from e


def _schemas_from_data(data: Any, origin: str) -> List[Schema]:
    # A file may hold one schema object or a list of them
    if isinstance(data, list):
        return [Schema.from_dict(item) for item in data]
    if isinstance(data, dict):
        return [Schema.from_dict(data)]
    raise SchemaError(f"Expected a schema object or list of schemas in {origin}")


def load_file(path: str) -> List[Schema]:
    with open(path, "r", encoding="utf-8") as f:
        return _schemas_from_data(_parse_json(f.read(), path), path)


def load_source(source: Union[str, Dict[str, Any], List[Dict[str, Any]]]) -> List[Schema]:
    """
    Load schemas from a source.

    Args:
        source: Path to a .json file, a directory of .json files (loaded in
            filename order), raw JSON text, or an already-parsed mapping/list

    Returns:
        List of schemas in source order
    """
    if isinstance(source, (dict, list)):
        return _schemas_from_data(source, "schema definition")

    if os.path.isdir(source):
        schemas = []
        for filename in sorted(os.listdir(source)):
            if filename.endswith(".json"):
                path = os.path.join(source, filename)
                logging.debug(f"Loading schema file {path}")
                schemas.extend(load_file(path))
        return schemas

    if os.path.isfile(source):
        logging.debug(f"Loading schema file {source}")
        return load_file(source)

    stripped = source.strip()
    if stripped.startswith("{") or stripped.startswith("["):
        return _schemas_from_data(_parse_json(stripped, "JSON text"), "JSON text")

    raise SchemaError(f"Schema source not found: {source}")
