# src/specpilot/services/spec_upload_service.py

"""
Loading of existing specifications supplied by the user.

Uploaded JSON documents are re-serialized as YAML so every downstream step
(editing, download, code generation prompts) sees one format.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

import yaml
from opentelemetry import trace
from pydantic import BaseModel

from specpilot.services import spec_postprocessor
from specpilot.utils.file_utils import detect_file_type, has_spec_extension

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

_VERSION_KEYS = ("openapi", "swagger")


class LoadedSpec(BaseModel):
    swagger_spec: str
    filename: Optional[str] = None
    valid: bool
    warning: Optional[str] = None


def _json_to_yaml(text: str) -> str:
    try:
        document = json.loads(text)
    except ValueError as e:
        raise ValueError(f"Invalid JSON document: {e}") from e

    if not isinstance(document, dict):
        return text

    # Version key first so the YAML starts with the marker validation expects
    ordered = {key: document[key] for key in _VERSION_KEYS if key in document}
    ordered.update((key, value) for key, value in document.items() if key not in ordered)
    return yaml.safe_dump(ordered, sort_keys=False, allow_unicode=True)


def _check_yaml(text: str) -> None:
    try:
        yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML document: {e}") from e


def inspect_text(text: str, filename: Optional[str] = None) -> LoadedSpec:
    """Clean pasted or uploaded text and report whether it looks like a spec."""
    cleaned = spec_postprocessor.clean(text)
    warning = spec_postprocessor.validate(cleaned)
    return LoadedSpec(
        swagger_spec=cleaned,
        filename=filename,
        valid=warning is None,
        warning=str(warning) if warning else None,
    )


def load_uploaded_spec(filename: str, raw_bytes: bytes) -> LoadedSpec:
    """
    Turn an uploaded ``.yaml``/``.yml``/``.json`` file into spec text.

    Raises:
        ValueError: wrong extension, undecodable bytes, or a document that
            does not parse.
    """
    with tracer.start_as_current_span("service.load_uploaded_spec") as span:
        span.set_attribute("upload.filename", filename or "")
        span.set_attribute("upload.size", len(raw_bytes))

        if not has_spec_extension(filename):
            raise ValueError("Please upload a YAML or JSON file (.yaml, .yml, or .json)")

        try:
            text = raw_bytes.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ValueError("Uploaded file is not UTF-8 text") from e

        if not text.strip():
            raise ValueError("Uploaded file is empty")

        if detect_file_type(filename, raw_bytes) == "json":
            text = _json_to_yaml(text)
        else:
            _check_yaml(text)

        loaded = inspect_text(text, filename=filename)
        logger.info(f"Loaded specification from {filename} (valid={loaded.valid})")
        return loaded
