# src/specpilot/utils/file_utils.py
import json
import yaml
from typing import Literal

SpecFileType = Literal["json", "yaml", "unknown"]

SPEC_EXTENSIONS = (".yaml", ".yml", ".json")


def has_spec_extension(filename: str) -> bool:
    return (filename or "").lower().endswith(SPEC_EXTENSIONS)


def detect_file_type(filename: str, raw_bytes: bytes) -> SpecFileType:
    """
    Best-effort spec file type detection:
    1. Use extension if available
    2. Otherwise try parsing JSON, then YAML
    """
    name = (filename or "").lower()

    if name.endswith(".json"):
        return "json"
    if name.endswith((".yaml", ".yml")):
        return "yaml"

    try:
        text = raw_bytes.decode("utf-8")
    except UnicodeDecodeError:
        return "unknown"

    try:
        json.loads(text)
        return "json"
    except ValueError:
        pass

    try:
        # Plain scalars parse as YAML too; only mappings count as documents
        if isinstance(yaml.safe_load(text), dict):
            return "yaml"
    except yaml.YAMLError:
        pass

    return "unknown"
