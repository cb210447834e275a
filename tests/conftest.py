"""Shared test fixtures and helpers."""

import random
from typing import Optional

import fitz  # PyMuPDF
import pytest

from cardealpro.conversation.record_store import CustomerRecordStore
from cardealpro.conversation.state_machine import SalesStageMachine
from cardealpro.documents import template_store
from cardealpro.llm import UpstreamServiceError
from cardealpro.schemas.conversation_schema import Notification
from cardealpro.session import SalesSession
from cardealpro.tools import customers


class FakeChatClient:
    """Chat client returning queued replies and recording every request."""

    def __init__(self, replies: Optional[list[str]] = None, fail: bool = False) -> None:
        self.replies = list(replies or [])
        self.fail = fail
        self.requests: list[list[dict[str, str]]] = []
        self.models: list[Optional[str]] = []

    async def complete(self, messages: list[dict[str, str]], model: Optional[str] = None) -> str:
        self.requests.append(messages)
        self.models.append(model)
        if self.fail:
            raise UpstreamServiceError("chat", "connection refused")
        if self.replies:
            return self.replies.pop(0)
        return "Understood."


class FakeOcrEngine:
    """OCR engine returning fixed text."""

    def __init__(self, text: str = "", fail: bool = False) -> None:
        self.text = text
        self.fail = fail
        self.calls: list[tuple[bytes, str]] = []

    async def recognize(self, image: bytes, mime_type: str = "image/jpeg") -> str:
        self.calls.append((image, mime_type))
        if self.fail:
            raise UpstreamServiceError("ocr", "service unavailable")
        return self.text


def make_form_pdf(text_fields: list[str], checkbox_fields: Optional[list[str]] = None) -> bytes:
    """Build a one-page PDF form with the given widget names."""
    doc = fitz.open()
    try:
        page = doc.new_page()
        y = 40
        for name in text_fields:
            widget = fitz.Widget()
            widget.field_name = name
            widget.field_type = fitz.PDF_WIDGET_TYPE_TEXT
            widget.rect = fitz.Rect(72, y, 360, y + 18)
            page.add_widget(widget)
            y += 24
        for name in checkbox_fields or []:
            widget = fitz.Widget()
            widget.field_name = name
            widget.field_type = fitz.PDF_WIDGET_TYPE_CHECKBOX
            widget.rect = fitz.Rect(72, y, 90, y + 18)
            page.add_widget(widget)
            y += 24
        return doc.tobytes()
    finally:
        doc.close()


def read_form_values(pdf_bytes: bytes) -> dict[str, str]:
    """Field name -> current value for every text widget in a PDF."""
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        values: dict[str, str] = {}
        for page in doc:
            for widget in page.widgets() or []:
                if widget.field_type == fitz.PDF_WIDGET_TYPE_TEXT:
                    values[widget.field_name] = widget.field_value or ""
        return values
    finally:
        doc.close()


@pytest.fixture(autouse=True)
def _reset_stores():
    template_store.reset()
    customers.reset()
    yield
    template_store.reset()
    customers.reset()


@pytest.fixture
def notifications() -> list[Notification]:
    return []


@pytest.fixture
def record_store(notifications):
    return CustomerRecordStore(notify=notifications.append)


@pytest.fixture
def stage_machine():
    return SalesStageMachine()


@pytest.fixture
def chat_client():
    return FakeChatClient()


@pytest.fixture
def ocr_engine():
    return FakeOcrEngine()


@pytest.fixture
def session(chat_client, ocr_engine):
    return SalesSession(
        chat_client=chat_client,
        ocr_engine=ocr_engine,
        session_id="SES-TEST",
        rng=random.Random(42),
    )


@pytest.fixture
def dealer_form_pdf() -> bytes:
    """A form using the default mapping's names plus one checkbox."""
    return make_form_pdf(
        ["First Name", "Last Name", "City", "Zip", "VIN", "Trade VIN", "Lender Name"],
        checkbox_fields=["Email"],
    )
