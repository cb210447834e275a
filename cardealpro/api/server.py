"""
FastAPI surface for the sales assistant.

Sessions live in an in-process registry on ``app.state``. Uploads arrive as
base64 inside JSON bodies. Error mapping:

- upstream chat / OCR failure -> 502
- unknown session, template, or template file -> 404
- unreadable template or bad upload payload -> 422
"""

import base64
import binascii
import logging
import random
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from cardealpro.api.models import (
    CreateSessionBody,
    DocumentResultBody,
    GenerationReportBody,
    MessageResponse,
    ScanBody,
    ScanResponse,
    ScenarioBody,
    ScenarioInfo,
    SendMessageBody,
    SessionSnapshot,
    UploadTemplateBody,
)
from cardealpro.config import settings
from cardealpro.conversation.scenarios import scenario_resolver
from cardealpro.documents import template_store
from cardealpro.documents.analyzer import TemplateAnalyzer
from cardealpro.documents.form_filler import (
    TemplateFileMissingError,
    TemplateNotFoundError,
    TemplateUnreadableError,
)
from cardealpro.llm import (
    ChatClient,
    OcrEngine,
    OpenAIChatClient,
    OpenAIVisionOcr,
    UpstreamServiceError,
)
from cardealpro.scanning.scanner import UnsupportedImageError
from cardealpro.schemas.conversation_schema import Message
from cardealpro.schemas.document_schema import DocumentTemplate
from cardealpro.session import SalesSession, SessionRegistry

logger = logging.getLogger(__name__)


def _decode_base64(data: str, what: str) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=422, detail=f"{what} is not valid base64") from None


def create_app(
    chat_client: Optional[ChatClient] = None,
    ocr_engine: Optional[OcrEngine] = None,
    rng_seed: Optional[int] = None,
) -> FastAPI:
    """Build the API app. Clients default to the OpenAI-backed implementations."""
    app = FastAPI(title=f"{settings.dealership.name} Sales Assistant", version="0.1.0")
    app.state.sessions = SessionRegistry()
    app.state.chat_client = chat_client or OpenAIChatClient()
    app.state.ocr_engine = ocr_engine or OpenAIVisionOcr()
    app.state.analyzer = TemplateAnalyzer(app.state.chat_client)

    @app.exception_handler(UpstreamServiceError)
    async def upstream_error(request: Request, exc: UpstreamServiceError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(TemplateNotFoundError)
    @app.exception_handler(TemplateFileMissingError)
    async def template_missing(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(TemplateUnreadableError)
    async def template_unreadable(request: Request, exc: TemplateUnreadableError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    def get_session(session_id: str) -> SalesSession:
        session = app.state.sessions.get(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
        return session

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/scenarios")
    async def list_scenarios() -> list[ScenarioInfo]:
        return [
            ScenarioInfo(
                id=s.id,
                name=s.name,
                required_documents=list(s.required_documents),
                has_trade_in=s.features.has_trade_in,
                trade_is_unpaid=s.features.trade_is_unpaid,
            )
            for s in scenario_resolver.all()
        ]

    # --- Sessions ---

    @app.post("/sessions", status_code=201)
    async def create_session(body: CreateSessionBody) -> SessionSnapshot:
        rng = random.Random(rng_seed) if rng_seed is not None else None
        session = SalesSession(
            chat_client=app.state.chat_client,
            ocr_engine=app.state.ocr_engine,
            rng=rng,
        )
        session.select_scenario(body.scenario_id)
        app.state.sessions.add(session)
        return SessionSnapshot(**session.snapshot())

    @app.get("/sessions/{session_id}")
    async def get_session_snapshot(session_id: str) -> SessionSnapshot:
        return SessionSnapshot(**get_session(session_id).snapshot())

    @app.delete("/sessions/{session_id}", status_code=204)
    async def end_session(session_id: str) -> Response:
        if not app.state.sessions.remove(session_id):
            raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
        return Response(status_code=204)

    @app.put("/sessions/{session_id}/scenario")
    async def set_scenario(session_id: str, body: ScenarioBody) -> SessionSnapshot:
        session = get_session(session_id)
        session.select_scenario(body.scenario_id)
        return SessionSnapshot(**session.snapshot())

    @app.patch("/sessions/{session_id}/records/{namespace}")
    async def update_record(
        session_id: str, namespace: str, values: dict[str, Optional[str]]
    ) -> SessionSnapshot:
        session = get_session(session_id)
        try:
            session.records.update_namespace(namespace, **values)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e)) from None
        return SessionSnapshot(**session.snapshot())

    @app.get("/sessions/{session_id}/messages")
    async def list_messages(session_id: str) -> list[Message]:
        return list(get_session(session_id).messages)

    @app.post("/sessions/{session_id}/messages")
    async def send_message(session_id: str, body: SendMessageBody) -> MessageResponse:
        session = get_session(session_id)
        if len(body.text) > settings.server.max_message_length:
            raise HTTPException(
                status_code=422,
                detail=f"Message exceeds {settings.server.max_message_length} characters",
            )
        try:
            reply = await session.send_message(body.text)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e)) from None
        return MessageResponse(
            reply=reply,
            stage=session.stage.value,
            missing_fields=session.missing_fields(),
            notifications=session.drain_notifications(),
        )

    @app.post("/sessions/{session_id}/scan")
    async def scan_license(session_id: str, body: ScanBody) -> ScanResponse:
        session = get_session(session_id)
        image = _decode_base64(body.image_base64, "image_base64")
        try:
            result = await session.scan_document(image, body.mime_type)
        except UnsupportedImageError as e:
            raise HTTPException(status_code=422, detail=str(e)) from None
        return ScanResponse(
            raw_text=result.raw_text,
            fields=result.fields,
            missing_fields=session.missing_fields(),
            notifications=session.drain_notifications(),
        )

    @app.post("/sessions/{session_id}/customer")
    async def save_customer(session_id: str) -> dict[str, Any]:
        return get_session(session_id).save_customer()

    # --- Templates and documents ---

    @app.post("/templates", status_code=201)
    async def upload_template(body: UploadTemplateBody) -> DocumentTemplate:
        content = _decode_base64(body.content_base64, "content_base64")
        if body.document_id and scenario_resolver.document(body.document_id) is None:
            raise HTTPException(status_code=422, detail=f"Unknown document id: {body.document_id}")
        return template_store.create_template(
            name=body.name,
            filename=body.filename,
            content=content,
            category=body.category,
            document_id=body.document_id,
            required_scenarios=body.required_scenarios,
        )

    @app.get("/templates")
    async def list_templates() -> list[DocumentTemplate]:
        return template_store.list_templates()

    @app.post("/templates/{template_id}/analyze")
    async def analyze_template(template_id: str) -> DocumentTemplate:
        return await app.state.analyzer.analyze(template_id)

    @app.post("/sessions/{session_id}/documents/{template_id}")
    async def fill_document(session_id: str, template_id: str) -> Response:
        session = get_session(session_id)
        content = session.generate_document(template_id)
        template = template_store.get_template(template_id)
        filename = template.filename if template else f"{template_id}.pdf"
        return Response(
            content=content,
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @app.post("/sessions/{session_id}/documents")
    async def generate_required(session_id: str) -> GenerationReportBody:
        session = get_session(session_id)
        report = session.generate_required_documents()
        return GenerationReportBody(
            scenario_id=report.scenario_id,
            summary=report.summary(),
            results=[
                DocumentResultBody(
                    document_id=r.document_id,
                    name=r.name,
                    status=r.status.value,
                    template_id=r.template_id,
                    content_base64=base64.b64encode(r.content).decode("ascii") if r.content else None,
                    error=r.error,
                )
                for r in report.results
            ],
            notifications=session.drain_notifications(),
        )

    logger.info("API app created")
    return app
