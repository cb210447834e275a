from cardealpro.documents.analyzer import TemplateAnalyzer, discover_form_fields
from cardealpro.documents.form_filler import (
    DocumentGenerationError,
    PdfFormFiller,
    TemplateFileMissingError,
    TemplateNotFoundError,
    TemplateUnreadableError,
)
from cardealpro.documents.generator import DocumentGenerator, GenerationReport

__all__ = [
    "PdfFormFiller",
    "DocumentGenerationError",
    "TemplateNotFoundError",
    "TemplateFileMissingError",
    "TemplateUnreadableError",
    "TemplateAnalyzer",
    "discover_form_fields",
    "DocumentGenerator",
    "GenerationReport",
]
