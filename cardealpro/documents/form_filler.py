"""
Best-effort PDF form filling.

A flat form-data dict (``firstName``, ``vehicle_vin``, ``lender_name``, ...)
is mapped onto the named text fields of a PDF template. The mapping comes
from the template's analyzed fields when available, otherwise from the
default category table plus the registry's per-document field names.

Templates routinely implement only a subset of the known fields; anything
without a matching text widget is skipped. Only a missing or unreadable
template is an error.

Usage:
    pdf_bytes = PdfFormFiller().fill(template.id, store.to_form_data())
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional

import fitz  # PyMuPDF

from cardealpro.conversation.field_registry import FieldRegistry, field_registry
from cardealpro.conversation.record_store import form_data_key
from cardealpro.data.dealer_data import CUSTOMER, DEFAULT_FIELD_MAPPING, NAMESPACE_PREFIXES
from cardealpro.documents import template_store
from cardealpro.schemas.document_schema import DocumentTemplate, FormField

logger = logging.getLogger(__name__)


class DocumentGenerationError(Exception):
    """Base class for failures that abort a whole fill attempt."""


class TemplateNotFoundError(DocumentGenerationError):
    """Raised when no template row exists for the ID."""

    def __init__(self, template_id: str) -> None:
        self.template_id = template_id
        super().__init__(f"Template not found: {template_id}")


class TemplateFileMissingError(DocumentGenerationError):
    """Raised when the template row exists but its file does not."""

    def __init__(self, template_id: str, filename: str) -> None:
        self.template_id = template_id
        self.filename = filename
        super().__init__(f"File '{filename}' for template {template_id} is missing")


class TemplateUnreadableError(DocumentGenerationError):
    """Raised when the template file cannot be parsed as a PDF."""

    def __init__(self, template_id: str, detail: str) -> None:
        self.template_id = template_id
        super().__init__(f"Template {template_id} could not be read as a PDF: {detail}")


def _append_unique(target: list[str], names: Iterable[str]) -> None:
    for name in names:
        if name not in target:
            target.append(name)


@dataclass
class FieldMapping:
    """
    Abstract data key -> form field names.

    ``direct`` is keyed by the flat form-data key. ``categories`` holds the
    per-namespace tables used after stripping a ``vehicle_`` / ``tradeIn_`` /
    ``lender_`` prefix.
    """

    direct: dict[str, list[str]] = field(default_factory=dict)
    categories: dict[str, dict[str, list[str]]] = field(default_factory=dict)
    source: str = "default"

    def add(self, key: str, names: Iterable[str], category: Optional[str] = None) -> None:
        table = self.direct if category is None else self.categories.setdefault(category, {})
        _append_unique(table.setdefault(key, []), names)

    def candidates(self, data_key: str) -> list[str]:
        """Union of direct and prefix-stripped matches, first-seen order, no duplicates."""
        names: list[str] = []
        _append_unique(names, self.direct.get(data_key, []))
        for namespace, prefix in NAMESPACE_PREFIXES.items():
            if data_key.startswith(prefix):
                stripped = data_key[len(prefix):]
                _append_unique(names, self.categories.get(namespace, {}).get(stripped, []))
        return names


def mapping_from_form_fields(form_fields: list[FormField]) -> FieldMapping:
    """
    Invert analyzed fields: each declared mapping key collects the IDs of the
    form fields that satisfy it. A field's section, when it names a record
    namespace, also files unprefixed keys under that category.
    """
    mapping = FieldMapping(source="analyzed")
    for form_field in form_fields:
        for key in form_field.mappings:
            mapping.add(key, [form_field.id])
            if form_field.section in NAMESPACE_PREFIXES:
                mapping.add(key, [form_field.id], category=form_field.section)
    return mapping


def default_mapping(
    document_id: Optional[str] = None,
    registry: FieldRegistry = field_registry,
) -> FieldMapping:
    """Static fallback: the category table plus registry names for ``document_id``."""
    mapping = FieldMapping(source="default")
    for category, table in DEFAULT_FIELD_MAPPING.items():
        for key, names in table.items():
            if category == CUSTOMER:
                mapping.add(key, names)
            else:
                mapping.add(key, names, category=category)

    if document_id:
        for defn in registry.all():
            name = defn.document_mapping.get(document_id)
            if name:
                mapping.add(form_data_key(*defn.record_path), [name])
    return mapping


def resolve_mapping(
    template: DocumentTemplate, registry: FieldRegistry = field_registry
) -> FieldMapping:
    if template.has_analysis():
        return mapping_from_form_fields(template.form_fields or [])
    logger.debug("Template %s has no analyzed fields, using default mapping", template.id)
    return default_mapping(template.document_id, registry)


def plan_fill(mapping: FieldMapping, form_data: dict[str, str]) -> dict[str, str]:
    """Form field name -> value to write. Later data keys win on a shared target."""
    targets: dict[str, str] = {}
    for data_key, value in form_data.items():
        if not value:
            continue
        for name in mapping.candidates(data_key):
            targets[name] = value
    return targets


def fill_pdf_bytes(pdf_bytes: bytes, targets: dict[str, str]) -> tuple[bytes, list[str]]:
    """
    Write values into same-named text widgets.

    Returns:
        (serialized PDF, names of fields actually written)

    Raises:
        RuntimeError / ValueError from PyMuPDF when the bytes are not a PDF.
    """
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        filled: list[str] = []
        for page in doc:
            for widget in page.widgets() or []:
                name = widget.field_name
                if name not in targets:
                    continue
                if widget.field_type != fitz.PDF_WIDGET_TYPE_TEXT:
                    logger.debug("Skipping non-text field '%s'", name)
                    continue
                widget.field_value = targets[name]
                widget.update()
                filled.append(name)
        return doc.tobytes(deflate=True, no_new_id=True), filled
    finally:
        doc.close()


class PdfFormFiller:
    """Fills stored templates with session form data."""

    def __init__(self, registry: FieldRegistry = field_registry) -> None:
        self._registry = registry

    def fill(self, template_id: str, form_data: dict[str, str]) -> bytes:
        """
        Produce a filled copy of a stored template.

        Raises:
            TemplateNotFoundError: Unknown template ID.
            TemplateFileMissingError: Template row without a stored file.
            TemplateUnreadableError: Stored file is not a parseable PDF.
        """
        template = template_store.get_template(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)

        pdf_bytes = template_store.get_template_file(template.filename)
        if pdf_bytes is None:
            raise TemplateFileMissingError(template_id, template.filename)

        mapping = resolve_mapping(template, self._registry)
        targets = plan_fill(mapping, form_data)

        try:
            output, filled = fill_pdf_bytes(pdf_bytes, targets)
        except (RuntimeError, ValueError) as e:
            logger.error("Template %s unreadable: %s", template_id, e)
            raise TemplateUnreadableError(template_id, str(e)) from e

        skipped = sorted(set(targets) - set(filled))
        logger.info(
            "Filled %d field(s) in '%s' (%s mapping), %d not present",
            len(filled), template.name, mapping.source, len(skipped),
        )
        if skipped:
            logger.debug("Fields not in template %s: %s", template_id, skipped)
        return output
