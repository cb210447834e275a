"""
Template analysis: discover a PDF's fillable fields and ask the analysis
model which customer-data keys each one should receive.

The model's answer is stored on the template and later preferred over the
default mapping by the form filler. An answer that cannot be parsed leaves
the template unanalyzed.
"""

import json
import logging
import re
from typing import Any, Optional

import fitz  # PyMuPDF
from pydantic import ValidationError

from cardealpro.config import settings
from cardealpro.conversation.field_registry import FieldRegistry, field_registry
from cardealpro.conversation.record_store import form_data_key
from cardealpro.data.dealer_data import CUSTOMER, IDENTITY_FIELDS
from cardealpro.documents import template_store
from cardealpro.documents.form_filler import (
    TemplateFileMissingError,
    TemplateNotFoundError,
    TemplateUnreadableError,
)
from cardealpro.llm import ChatClient
from cardealpro.prompts.prompt_templates import (
    build_template_analysis_prompt,
    build_template_analysis_request,
)
from cardealpro.schemas.document_schema import DocumentTemplate, FormField

logger = logging.getLogger(__name__)

_JSON_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)
_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)

_WIDGET_TYPES = {
    fitz.PDF_WIDGET_TYPE_TEXT: "text",
    fitz.PDF_WIDGET_TYPE_CHECKBOX: "checkbox",
    fitz.PDF_WIDGET_TYPE_RADIOBUTTON: "radio",
    fitz.PDF_WIDGET_TYPE_COMBOBOX: "combobox",
    fitz.PDF_WIDGET_TYPE_LISTBOX: "listbox",
    fitz.PDF_WIDGET_TYPE_SIGNATURE: "signature",
}


def discover_form_fields(pdf_bytes: bytes) -> list[FormField]:
    """List every named widget in a PDF, first occurrence per name."""
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        fields: list[FormField] = []
        seen: set[str] = set()
        for page_index, page in enumerate(doc):
            for widget in page.widgets() or []:
                name = widget.field_name
                if not name or name in seen:
                    continue
                seen.add(name)
                fields.append(FormField(
                    id=name,
                    label=widget.field_label or name,
                    type=_WIDGET_TYPES.get(widget.field_type, "other"),
                    page=page_index + 1,
                ))
        return fields
    finally:
        doc.close()


def allowed_mapping_keys(registry: FieldRegistry = field_registry) -> list[str]:
    """Flat form-data keys the model may map fields to."""
    keys: list[str] = []
    for attr in IDENTITY_FIELDS.values():
        key = form_data_key(CUSTOMER, attr)
        if key not in keys:
            keys.append(key)
    for defn in registry.all():
        key = form_data_key(*defn.record_path)
        if key not in keys:
            keys.append(key)
    return keys


def parse_analysis_response(text: str) -> Optional[list[FormField]]:
    """
    Pull the field list out of a model reply.

    Accepts a ```json fenced block or the outermost ``{...}`` in the text.
    Returns None when nothing parseable is found.
    """
    fence = _JSON_FENCE.search(text)
    candidate = fence.group(1) if fence else None
    if candidate is None:
        match = _JSON_OBJECT.search(text)
        candidate = match.group(0) if match else None
    if candidate is None:
        return None

    try:
        payload: Any = json.loads(candidate)
    except json.JSONDecodeError:
        return None

    raw_fields = payload.get("fields") if isinstance(payload, dict) else None
    if not isinstance(raw_fields, list):
        return None

    try:
        return [FormField.model_validate(item) for item in raw_fields]
    except ValidationError as e:
        logger.warning("Analysis response had malformed fields: %s", e)
        return None


class TemplateAnalyzer:
    """Runs the analysis model over a stored template and persists the result."""

    def __init__(self, client: ChatClient, registry: FieldRegistry = field_registry) -> None:
        self._client = client
        self._registry = registry

    async def analyze(self, template_id: str) -> DocumentTemplate:
        """
        Analyze a template's fields.

        Returns:
            The template, with ``form_fields`` set when the model's answer
            parsed. Discovered fields whose IDs the model invented are dropped.

        Raises:
            TemplateNotFoundError, TemplateFileMissingError, TemplateUnreadableError
            UpstreamServiceError: From the chat client.
        """
        template = template_store.get_template(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        pdf_bytes = template_store.get_template_file(template.filename)
        if pdf_bytes is None:
            raise TemplateFileMissingError(template_id, template.filename)

        try:
            discovered = discover_form_fields(pdf_bytes)
        except (RuntimeError, ValueError) as e:
            raise TemplateUnreadableError(template_id, str(e)) from e

        if not discovered:
            logger.info("Template %s has no fillable fields", template_id)
            return template

        messages = [
            {"role": "system", "content": build_template_analysis_prompt(
                allowed_mapping_keys(self._registry))},
            {"role": "user", "content": build_template_analysis_request(
                template.name, [f.id for f in discovered])},
        ]
        reply = await self._client.complete(messages, model=settings.model.analysis_model)

        analyzed = parse_analysis_response(reply)
        if analyzed is None:
            logger.warning("Could not parse analysis for template %s", template_id)
            return template

        known = {f.id: f for f in discovered}
        merged: list[FormField] = []
        for form_field in analyzed:
            original = known.get(form_field.id)
            if original is None:
                logger.debug("Ignoring analyzed field not in PDF: %s", form_field.id)
                continue
            merged.append(form_field.model_copy(update={"page": original.page}))

        return template_store.update_form_fields(template_id, merged) or template
