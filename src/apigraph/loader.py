"""Loading of API description documents from disk.

Acquisition and decoding live outside the graph core: the compiler only ever
sees the decoded mapping returned here.
"""

import json
import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}


class DocumentLoadError(ValueError):
    """Raised when a document cannot be read or decoded."""


def load_document(path: str | Path) -> dict[str, Any]:
    """Load a JSON or YAML API description.

    Files ending in .yaml/.yml are decoded as YAML, everything else as JSON
    with a YAML fallback (YAML is a superset of JSON).

    Raises:
        DocumentLoadError: If the file is missing, undecodable or not a mapping
    """
    path = Path(path)

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DocumentLoadError(f"Cannot read {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise DocumentLoadError(f"{path} is not valid UTF-8: {e}") from e

    return parse_document(text, yaml_first=path.suffix.lower() in YAML_SUFFIXES, source=str(path))


def parse_document(text: str, yaml_first: bool = False, source: str = "<string>") -> dict[str, Any]:
    """Decode document text into a mapping."""
    if yaml_first:
        data = _load_yaml(text, source)
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            logger.debug(f"{source} is not JSON, trying YAML")
            data = _load_yaml(text, source)

    if not isinstance(data, dict):
        raise DocumentLoadError(f"{source} does not contain a mapping at the top level")

    paths = data.get("paths")
    logger.info(f"Loaded {source} with {len(paths) if isinstance(paths, dict) else 0} paths")
    return data


def _load_yaml(text: str, source: str) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DocumentLoadError(f"Invalid YAML in {source}: {e}") from e
