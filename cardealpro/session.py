"""
Sales session context.

One SalesSession owns everything about a single customer conversation: the
typed records, the message history, the stage machine, the agreement
tracker, the selected scenario, and pending notifications. Components get
what they need passed in; nothing is shared between sessions.

Usage:
    session = SalesSession(chat_client=OpenAIChatClient())
    session.select_scenario("new-no-trade")
    reply = await session.send_message("Customer is Jane Doe, wants a Camry")
    session.missing_fields()  # ["Street Address", ...]
"""

import logging
import random
import uuid
from typing import Any, Optional

from cardealpro.config import AppConfig, settings
from cardealpro.conversation.extractor import extract_structured_data
from cardealpro.conversation.record_store import CustomerRecordStore
from cardealpro.conversation.scenarios import scenario_resolver
from cardealpro.conversation.state_machine import SalesStage, SalesStageMachine
from cardealpro.conversation.techniques import AgreementTracker, select_technique
from cardealpro.documents.form_filler import DocumentGenerationError, PdfFormFiller
from cardealpro.documents.generator import DocumentGenerator, GenerationReport
from cardealpro.llm import (
    ChatClient,
    OcrEngine,
    OpenAIChatClient,
    OpenAIVisionOcr,
    UpstreamServiceError,
)
from cardealpro.logging_context import get_session_logger, set_session_id
from cardealpro.prompts.prompt_templates import build_chat_messages, build_sales_system_prompt
from cardealpro.scanning.scanner import LicenseScanner, ScanResult
from cardealpro.schemas.conversation_schema import (
    Message,
    Notification,
    NotificationLevel,
    Role,
)
from cardealpro.tools import customers

logger = get_session_logger(__name__)


class SalesSession:
    """Per-conversation state and the operations that act on it."""

    def __init__(
        self,
        chat_client: Optional[ChatClient] = None,
        ocr_engine: Optional[OcrEngine] = None,
        session_id: Optional[str] = None,
        rng: Optional[random.Random] = None,
        config: Optional[AppConfig] = None,
        filler: Optional[PdfFormFiller] = None,
    ) -> None:
        self.session_id = session_id or f"SES-{uuid.uuid4().hex[:8].upper()}"
        self._config = config or settings
        self._chat = chat_client or OpenAIChatClient(self._config.model)
        self._scanner = LicenseScanner(ocr_engine or OpenAIVisionOcr(self._config.model))
        self._rng = rng or random.Random()
        self._filler = filler or PdfFormFiller()
        self._generator = DocumentGenerator(self._filler)

        self.notifications: list[Notification] = []
        self.records = CustomerRecordStore(notify=self._notify)
        self.messages: list[Message] = []
        self.stage_machine = SalesStageMachine(self._config.sales)
        self.agreements = AgreementTracker(snippet_length=self._config.sales.topic_snippet_length)
        self.scenario_id: Optional[str] = None
        self.customer_id: Optional[str] = None

    @property
    def stage(self) -> SalesStage:
        return self.stage_machine.current_stage

    def _notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def _error(self, title: str, message: str) -> None:
        self._notify(Notification(level=NotificationLevel.ERROR, title=title, message=message))

    def drain_notifications(self) -> list[Notification]:
        """Return and clear pending notifications (each is shown once)."""
        pending, self.notifications = self.notifications, []
        return pending

    def select_scenario(self, scenario_id: Optional[str]) -> None:
        set_session_id(self.session_id)
        if scenario_id and scenario_resolver.get(scenario_id) is None:
            logger.warning("Scenario '%s' is not in the catalog", scenario_id)
        self.scenario_id = scenario_id or None
        logger.info("Scenario selected: %s", self.scenario_id)

    def missing_fields(self) -> list[str]:
        return self.records.missing_required_fields(self.scenario_id)

    def required_documents(self) -> list[str]:
        return scenario_resolver.required_documents(self.scenario_id)

    async def send_message(self, text: str) -> Message:
        """
        Process one salesperson message and return the assistant reply.

        The user message is kept even if the chat service fails; agreement
        tracking and stage progression only happen once a reply arrives.
        Stage thresholds see the history length from before this exchange.

        Raises:
            ValueError: Empty message.
            UpstreamServiceError: The chat service failed (an error
                notification is queued first).
        """
        set_session_id(self.session_id)
        text = text.strip()
        if not text:
            raise ValueError("Message text is empty")

        message_count = len(self.messages)
        self.messages.append(Message(role=Role.USER, content=text))
        stage = self.stage
        technique = select_technique(
            text, stage, self.agreements.count, rng=self._rng, config=self._config.sales
        )

        system_prompt = build_sales_system_prompt(self.scenario_id, stage, self.missing_fields())
        try:
            reply = await self._chat.complete(build_chat_messages(system_prompt, self.messages))
        except UpstreamServiceError:
            self._error("Error", "Failed to process your message. Please try again.")
            raise

        result = extract_structured_data(reply)
        if result.fields:
            self.records.apply_extracted_fields(result.fields)

        assistant = Message(
            role=Role.ASSISTANT,
            content=result.clean_text,
            field_data=result.fields or None,
            sales_suggestion=result.suggestion or technique.suggestion,
            sales_technique=technique.technique,
        )
        self.messages.append(assistant)

        self.agreements.observe(text)
        self.stage_machine.advance(message_count, text)
        logger.info(
            "Turn processed: stage=%s technique=%s fields=%d",
            self.stage.value, technique.technique.type.value, len(result.fields),
        )
        return assistant

    async def scan_document(self, image: bytes, mime_type: str = "image/jpeg") -> ScanResult:
        """
        OCR a driver's license and merge the parsed fields into the record.

        Raises:
            UnsupportedImageError: ``mime_type`` is not an image type.
            UpstreamServiceError: The OCR service failed.
        """
        set_session_id(self.session_id)
        try:
            result = await self._scanner.scan(image, mime_type)
        except UpstreamServiceError:
            self._error("Scan failed", "Could not read the document. Please try again.")
            raise
        if result.fields:
            self.records.apply_extracted_fields(result.fields)
        return result

    def generate_document(self, template_id: str) -> bytes:
        """Fill one template with the current record data."""
        set_session_id(self.session_id)
        try:
            return self._filler.fill(template_id, self.records.to_form_data())
        except DocumentGenerationError as e:
            self._error("Document generation failed", str(e))
            raise

    def generate_required_documents(self) -> GenerationReport:
        """Fill every document the selected scenario requires."""
        set_session_id(self.session_id)
        report = self._generator.generate_for_scenario(
            self.scenario_id or "", self.records.to_form_data()
        )
        for failed in report.failed:
            self._error("Document generation failed", f"{failed.name}: {failed.error}")
        return report

    def save_customer(self) -> customers.CustomerRow:
        """Persist the current records, updating the same row on later saves."""
        set_session_id(self.session_id)
        row = customers.save_customer(self.records.snapshot(), self.customer_id)
        self.customer_id = row["id"]
        self._notify(Notification(title="Customer saved", message=f"Saved as {row['id']}"))
        return row

    def snapshot(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "scenario_id": self.scenario_id,
            "stage": self.stage.value,
            "stage_trace": self.stage_machine.get_stage_trace(),
            "agreements": {"count": self.agreements.count, "topics": list(self.agreements.topics)},
            "records": self.records.snapshot(),
            "missing_fields": self.missing_fields(),
            "required_documents": self.required_documents(),
            "validation_issues": self.records.validation_report(),
            "customer_id": self.customer_id,
            "message_count": len(self.messages),
        }


class SessionRegistry:
    """Active sessions keyed by ID."""

    def __init__(self) -> None:
        self._sessions: dict[str, SalesSession] = {}

    def add(self, session: SalesSession) -> SalesSession:
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> Optional[SalesSession]:
        return self._sessions.get(session_id)

    def remove(self, session_id: str) -> bool:
        """End a session, discarding its records."""
        return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)
