"""
Structured-field extraction from model output.

The chat model embeds machine-readable data in its reply as inline tags:

    <field name="firstName">Jane</field>
    <sales_suggestion>Ask about their commute</sales_suggestion>

This module pulls those tags out and returns the display text without them.
Malformed tags are not errors; anything that does not match exactly is left
in the text.

Usage:
    result = extract_structured_data(reply)
    store.apply_extracted_fields(result.fields)
"""

import re
from dataclasses import dataclass, field
from typing import Optional

FIELD_TAG = re.compile(r'<field name="([^"]+)">([^<]+)</field>')
SUGGESTION_TAG = re.compile(r"<sales_suggestion>([^<]+)</sales_suggestion>")


@dataclass
class ExtractionResult:
    """Display text plus the data smuggled inside it."""

    clean_text: str
    fields: dict[str, str] = field(default_factory=dict)
    suggestion: Optional[str] = None


def extract_structured_data(text: str) -> ExtractionResult:
    """
    Parse field and suggestion tags out of a block of text.

    Every well-formed field tag is collected; a repeated key keeps the value
    of its last occurrence. Only the first suggestion tag is captured and
    removed.
    """
    fields: dict[str, str] = {}
    for match in FIELD_TAG.finditer(text):
        fields[match.group(1)] = match.group(2)

    suggestion_match = SUGGESTION_TAG.search(text)
    suggestion = suggestion_match.group(1) if suggestion_match else None

    clean = FIELD_TAG.sub("", text)
    clean = SUGGESTION_TAG.sub("", clean, count=1)

    return ExtractionResult(clean_text=clean.strip(), fields=fields, suggestion=suggestion)
