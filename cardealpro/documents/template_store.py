"""
In-memory PDF template repository.

Template metadata (the ``pdf_templates`` table) and the uploaded file bytes
(blob storage, keyed by filename) are kept separately, so a template row can
exist while its file is missing.

In production, this would be a database table plus an object store bucket.
"""

import logging
import uuid
from typing import Optional

from cardealpro.schemas.document_schema import DocumentTemplate, FormField

logger = logging.getLogger(__name__)

_templates: dict[str, DocumentTemplate] = {}
_files: dict[str, bytes] = {}


def create_template(
    name: str,
    filename: str,
    content: bytes,
    category: str = "general",
    document_id: Optional[str] = None,
    required_scenarios: Optional[list[str]] = None,
) -> DocumentTemplate:
    """Store an uploaded PDF and register its metadata."""
    template_id = f"TPL-{uuid.uuid4().hex[:8].upper()}"
    stored_name = f"{template_id}-{filename}"
    _files[stored_name] = content
    template = DocumentTemplate(
        id=template_id,
        name=name,
        filename=stored_name,
        category=category,
        document_id=document_id,
        required_scenarios=required_scenarios or [],
    )
    _templates[template_id] = template
    logger.info("Template uploaded: %s (%s, %d bytes)", name, template_id, len(content))
    return template


def get_template(template_id: str) -> Optional[DocumentTemplate]:
    return _templates.get(template_id)


def list_templates() -> list[DocumentTemplate]:
    return sorted(_templates.values(), key=lambda t: t.created_at)


def find_by_document(document_id: str) -> Optional[DocumentTemplate]:
    """Most recently uploaded template linked to a catalog document."""
    matches = [t for t in list_templates() if t.document_id == document_id]
    return matches[-1] if matches else None


def get_template_file(filename: str) -> Optional[bytes]:
    return _files.get(filename)


def remove_template_file(filename: str) -> None:
    _files.pop(filename, None)


def update_form_fields(template_id: str, form_fields: list[FormField]) -> Optional[DocumentTemplate]:
    """Persist analysis results on a template. Returns None if it no longer exists."""
    template = _templates.get(template_id)
    if template is None:
        return None
    updated = template.model_copy(update={"form_fields": form_fields})
    _templates[template_id] = updated
    logger.info("Stored %d analyzed fields for template %s", len(form_fields), template_id)
    return updated


def reset() -> None:
    """Clear all templates and files. Used by tests."""
    _templates.clear()
    _files.clear()
