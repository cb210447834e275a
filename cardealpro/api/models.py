"""Request and response bodies for the HTTP API."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from cardealpro.schemas.conversation_schema import Message, Notification


class CreateSessionBody(BaseModel):
    scenario_id: Optional[str] = None


class ScenarioBody(BaseModel):
    scenario_id: Optional[str] = None


class SendMessageBody(BaseModel):
    text: str = Field(min_length=1)


class MessageResponse(BaseModel):
    reply: Message
    stage: str
    missing_fields: list[str]
    notifications: list[Notification]


class ScanBody(BaseModel):
    image_base64: str
    mime_type: str = "image/jpeg"


class ScanResponse(BaseModel):
    raw_text: str
    fields: dict[str, str]
    missing_fields: list[str]
    notifications: list[Notification]


class UploadTemplateBody(BaseModel):
    name: str
    filename: str
    content_base64: str
    category: str = "general"
    document_id: Optional[str] = None
    required_scenarios: list[str] = Field(default_factory=list)


class DocumentResultBody(BaseModel):
    document_id: str
    name: str
    status: str
    template_id: Optional[str] = None
    content_base64: Optional[str] = None
    error: Optional[str] = None


class GenerationReportBody(BaseModel):
    scenario_id: str
    summary: dict[str, int]
    results: list[DocumentResultBody]
    notifications: list[Notification]


class ScenarioInfo(BaseModel):
    id: str
    name: str
    required_documents: list[str]
    has_trade_in: bool
    trade_is_unpaid: bool


class SessionSnapshot(BaseModel):
    session_id: str
    scenario_id: Optional[str]
    stage: str
    stage_trace: list[str]
    agreements: dict[str, Any]
    records: dict[str, dict[str, Any]]
    missing_fields: list[str]
    required_documents: list[str]
    validation_issues: dict[str, str]
    customer_id: Optional[str]
    message_count: int
