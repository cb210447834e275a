"""
Batch document generation for a scenario.

Each required document is resolved to its most recent linked template and
filled on its own, one after another. A failure is recorded against that
document only; the rest of the batch carries on.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from cardealpro.conversation.scenarios import ScenarioResolver, scenario_resolver
from cardealpro.documents import template_store
from cardealpro.documents.form_filler import DocumentGenerationError, PdfFormFiller
from cardealpro.utils import humanize_document_id

logger = logging.getLogger(__name__)


class GenerationStatus(str, Enum):
    GENERATED = "generated"
    MISSING_TEMPLATE = "missing_template"
    FAILED = "failed"


@dataclass
class DocumentResult:
    """Outcome for one document in a batch."""
    document_id: str
    name: str
    status: GenerationStatus
    template_id: Optional[str] = None
    content: Optional[bytes] = None
    error: Optional[str] = None


@dataclass
class GenerationReport:
    scenario_id: str
    results: list[DocumentResult] = field(default_factory=list)

    @property
    def generated(self) -> list[DocumentResult]:
        return [r for r in self.results if r.status == GenerationStatus.GENERATED]

    @property
    def missing(self) -> list[str]:
        return [r.document_id for r in self.results if r.status == GenerationStatus.MISSING_TEMPLATE]

    @property
    def failed(self) -> list[DocumentResult]:
        return [r for r in self.results if r.status == GenerationStatus.FAILED]

    def summary(self) -> dict[str, int]:
        return {
            "generated": len(self.generated),
            "missing_template": len(self.missing),
            "failed": len(self.failed),
        }


class DocumentGenerator:
    """Fills every document a scenario requires."""

    def __init__(
        self,
        filler: Optional[PdfFormFiller] = None,
        resolver: ScenarioResolver = scenario_resolver,
    ) -> None:
        self._filler = filler or PdfFormFiller()
        self._resolver = resolver

    def _display_name(self, document_id: str) -> str:
        document = self._resolver.document(document_id)
        return document.name if document else humanize_document_id(document_id)

    def generate_for_scenario(self, scenario_id: str, form_data: dict[str, str]) -> GenerationReport:
        report = GenerationReport(scenario_id=scenario_id)
        for document_id in self._resolver.required_documents(scenario_id):
            name = self._display_name(document_id)
            template = template_store.find_by_document(document_id)
            if template is None:
                logger.info("No template uploaded for '%s'", document_id)
                report.results.append(DocumentResult(
                    document_id=document_id,
                    name=name,
                    status=GenerationStatus.MISSING_TEMPLATE,
                ))
                continue

            try:
                content = self._filler.fill(template.id, form_data)
            except DocumentGenerationError as e:
                logger.warning("Generating '%s' failed: %s", document_id, e)
                report.results.append(DocumentResult(
                    document_id=document_id,
                    name=name,
                    status=GenerationStatus.FAILED,
                    template_id=template.id,
                    error=str(e),
                ))
                continue

            report.results.append(DocumentResult(
                document_id=document_id,
                name=name,
                status=GenerationStatus.GENERATED,
                template_id=template.id,
                content=content,
            ))

        logger.info("Batch for scenario '%s': %s", scenario_id, report.summary())
        return report
