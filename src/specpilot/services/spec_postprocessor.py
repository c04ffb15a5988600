# src/specpilot/services/spec_postprocessor.py

"""
Cleanup of generated OpenAPI documents.

LLMs regularly wrap YAML in markdown fences or put a sentence in front of
the document. ``clean`` removes both; ``validate`` reports (never raises)
when the result still does not look like a spec.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from opentelemetry import trace

from specpilot.exceptions import ValidationWarning
from specpilot.metrics import spec_validation_warnings_total

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

OPENAPI_MARKER = "openapi:"
SWAGGER_MARKER = "swagger:"

_LEADING_FENCE = re.compile(r"^```[\w.+-]*[ \t]*(?:\r?\n|$)", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"(?:^|\r?\n)[ \t]*```[ \t]*$")
_MARKER_WITH_VERSION = re.compile(r"openapi:\s*['\"]?\d+(?:\.\d+)*", re.IGNORECASE)


def _strip_fences(text: str) -> str:
    # Repeat until stable so nested or doubled fences cannot survive a pass
    while True:
        stripped = _LEADING_FENCE.sub("", text, count=1)
        stripped = _TRAILING_FENCE.sub("", stripped, count=1).strip()
        if stripped == text:
            return text
        text = stripped


def clean(raw: str) -> str:
    """
    Strip markdown fences and anything before the ``openapi:`` marker.

    Text without a marker is returned as-is (apart from fences and outer
    whitespace). ``clean(clean(x)) == clean(x)`` for every input.
    """
    with tracer.start_as_current_span("service.clean_spec") as span:
        text = _strip_fences((raw or "").strip())

        if not text.startswith(OPENAPI_MARKER):
            match = _MARKER_WITH_VERSION.search(text)
            if match:
                if match.start() > 0:
                    logger.info("Dropped %d characters before the openapi marker", match.start())
                text = text[match.start():]
            else:
                logger.debug("No openapi marker found in generated spec")

        span.set_attribute("spec.length", len(text))
        return text


def validate(text: str) -> Optional[ValidationWarning]:
    """Return a warning when ``text`` does not start with an OpenAPI/Swagger marker."""
    stripped = (text or "").strip()
    if stripped.startswith(OPENAPI_MARKER) or stripped.startswith(SWAGGER_MARKER):
        return None

    spec_validation_warnings_total.inc()
    logger.warning("Specification does not start with '%s'", OPENAPI_MARKER)
    return ValidationWarning(
        "The content doesn't appear to be a valid OpenAPI/Swagger specification."
    )
