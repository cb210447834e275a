"""PDF template and analyzed form-field models."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


class FormField(BaseModel):
    """A fillable field discovered in a template, with the abstract keys it satisfies."""

    id: str
    label: str = ""
    type: str = "text"
    page: int = 1
    section: str = ""
    mappings: list[str] = Field(default_factory=list)


class DocumentTemplate(BaseModel):
    """An uploaded PDF form (row of the ``pdf_templates`` table)."""

    id: str
    name: str
    filename: str
    category: str = "general"
    document_id: Optional[str] = None
    required_scenarios: list[str] = Field(default_factory=list)
    form_fields: Optional[list[FormField]] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def has_analysis(self) -> bool:
        return bool(self.form_fields) and any(f.mappings for f in self.form_fields or [])
