"""Tests for the per-conversation sales session."""

import pytest

from cardealpro.conversation.state_machine import SalesStage
from cardealpro.documents import template_store
from cardealpro.documents.form_filler import TemplateNotFoundError
from cardealpro.llm import UpstreamServiceError
from cardealpro.schemas.conversation_schema import NotificationLevel, Role, SalesTechniqueType
from cardealpro.session import SalesSession, SessionRegistry
from cardealpro.tools import customers
from tests.conftest import FakeChatClient, FakeOcrEngine, make_form_pdf, read_form_values

TAGGED_REPLY = (
    'Nice to meet Jane. <field name="firstName">Jane</field>'
    '<field name="lastName">Doe</field>'
    "<sales_suggestion>Ask what she drives today</sales_suggestion>"
)


class TestSendMessage:
    @pytest.mark.asyncio
    async def test_reply_is_cleaned_and_fields_merged(self, session, chat_client):
        chat_client.replies.append(TAGGED_REPLY)
        session.select_scenario("new-no-trade")

        reply = await session.send_message("  The customer is Jane Doe  ")

        assert reply.role == Role.ASSISTANT
        assert reply.content == "Nice to meet Jane."
        assert reply.field_data == {"firstName": "Jane", "lastName": "Doe"}
        assert reply.sales_suggestion == "Ask what she drives today"
        assert session.records.customer.first_name == "Jane"
        assert "First Name" not in session.missing_fields()
        assert [m.content for m in session.messages] == ["The customer is Jane Doe", "Nice to meet Jane."]

    @pytest.mark.asyncio
    async def test_technique_suggestion_used_when_model_gives_none(self, session):
        reply = await session.send_message("hello")
        assert reply.sales_technique.type == SalesTechniqueType.GENERAL
        assert reply.sales_suggestion.startswith("Focus on building rapport")

    @pytest.mark.asyncio
    async def test_prompt_carries_scenario_stage_and_missing(self, session, chat_client):
        session.select_scenario("used-unpaid-trade")
        await session.send_message("hello")
        system = chat_client.requests[0][0]["content"]
        assert "Current sales scenario: used-unpaid-trade" in system
        assert "Current conversation stage: introduction" in system
        assert "Payoff Amount" in system
        assert chat_client.requests[0][-1] == {"role": "user", "content": "hello"}

    @pytest.mark.asyncio
    async def test_history_sent_in_order(self, session, chat_client):
        await session.send_message("first")
        await session.send_message("second")
        roles = [m["role"] for m in chat_client.requests[1]]
        assert roles == ["system", "user", "assistant", "user"]

    @pytest.mark.asyncio
    async def test_empty_message_rejected(self, session, chat_client):
        with pytest.raises(ValueError):
            await session.send_message("   ")
        assert session.messages == []
        assert chat_client.requests == []

    @pytest.mark.asyncio
    async def test_upstream_failure_keeps_user_message(self):
        session = SalesSession(chat_client=FakeChatClient(fail=True), ocr_engine=FakeOcrEngine())
        with pytest.raises(UpstreamServiceError):
            await session.send_message("Yes, that works")

        assert [m.role for m in session.messages] == [Role.USER]
        assert session.agreements.count == 0
        notifications = session.drain_notifications()
        assert notifications[-1].level == NotificationLevel.ERROR
        assert notifications[-1].message == "Failed to process your message. Please try again."

    @pytest.mark.asyncio
    async def test_stage_advances_with_message_count(self, session):
        for _ in range(3):
            await session.send_message("tell me more")
        assert session.stage == SalesStage.INTRODUCTION
        await session.send_message("tell me more")
        assert session.stage == SalesStage.NEEDS_ASSESSMENT
        assert session.stage_machine.get_history()[1].message_count == 6

    @pytest.mark.asyncio
    async def test_agreements_counted_after_reply(self, session):
        await session.send_message("Yes, reliability matters a lot")
        await session.send_message("Sure thing")
        assert session.agreements.count == 2
        assert session.agreements.topics[0] == "Yes, reliability mat..."

    @pytest.mark.asyncio
    async def test_unknown_extracted_keys_ignored(self, session, chat_client):
        chat_client.replies.append('Ok <field name="favoriteColor">red</field>')
        await session.send_message("hello")
        assert session.records.to_form_data() == {}
        assert session.drain_notifications() == []


class TestScenario:
    def test_required_documents_follow_scenario(self, session):
        assert session.required_documents() == []
        session.select_scenario("new-unpaid-trade")
        assert session.required_documents()[-1] == "payoff-authorization"

    def test_clearing_scenario(self, session):
        session.select_scenario("new-no-trade")
        session.select_scenario(None)
        assert session.scenario_id is None
        assert session.missing_fields() == []


class TestScan:
    @pytest.mark.asyncio
    async def test_scan_merges_license_fields(self, chat_client):
        ocr = FakeOcrEngine(text="DOE JANE DL 123\n533 BELLEVIEW AVE\nCHILLICOTHE OH 45601")
        session = SalesSession(chat_client=chat_client, ocr_engine=ocr)
        result = await session.scan_document(b"image-bytes")
        assert result.fields["zipCode"] == "45601"
        assert session.records.customer.street_address == "533 BELLEVIEW AVE"
        assert session.records.customer.state == "OH"
        assert session.drain_notifications()[0].title == "Customer information updated"

    @pytest.mark.asyncio
    async def test_scanned_address_fills_street_address(self, chat_client):
        ocr = FakeOcrEngine(text="DOE JANE DL 123\n533 BELLEVIEW AVE\nCHILLICOTHE OH 45601")
        session = SalesSession(chat_client=chat_client, ocr_engine=ocr)
        session.select_scenario("new-no-trade")
        assert "Street Address" in session.missing_fields()
        await session.scan_document(b"image-bytes")
        assert "Street Address" not in session.missing_fields()

        pdf = make_form_pdf(["NAME_FIRST", "ADDRESS"])
        template = template_store.create_template(
            "Delivery Report", "delivery.pdf", pdf, document_id="delivery-report"
        )
        values = read_form_values(session.generate_document(template.id))
        assert values == {"NAME_FIRST": "JANE", "ADDRESS": "533 BELLEVIEW AVE"}

    @pytest.mark.asyncio
    async def test_scan_failure_notifies(self, chat_client):
        session = SalesSession(chat_client=chat_client, ocr_engine=FakeOcrEngine(fail=True))
        with pytest.raises(UpstreamServiceError):
            await session.scan_document(b"image-bytes")
        assert session.drain_notifications()[0].title == "Scan failed"


class TestDocuments:
    def test_generate_document_uses_records(self, session):
        pdf = make_form_pdf(["First Name", "VIN"])
        template = template_store.create_template("Form", "form.pdf", pdf)
        session.records.apply_extracted_fields({"firstName": "Jane", "vehicle_vin": "4T1B11HK5RU123456"})
        values = read_form_values(session.generate_document(template.id))
        assert values == {"First Name": "Jane", "VIN": "4T1B11HK5RU123456"}

    def test_generate_document_failure_notifies(self, session):
        with pytest.raises(TemplateNotFoundError):
            session.generate_document("TPL-NONE")
        assert session.drain_notifications()[-1].title == "Document generation failed"

    def test_generate_required_documents(self, session):
        session.select_scenario("used-no-trade")
        template_store.create_template(
            "Broken", "b.pdf", b"broken", document_id="delivery-report"
        )
        report = session.generate_required_documents()
        assert report.summary() == {"generated": 0, "missing_template": 2, "failed": 1}
        assert "Delivery Report" in session.drain_notifications()[-1].message


class TestSaveAndSnapshot:
    def test_save_then_update_same_row(self, session):
        session.records.apply_extracted_fields({"firstName": "Jane"})
        first = session.save_customer()
        session.records.apply_extracted_fields({"vehicle_make": "Toyota"})
        second = session.save_customer()

        assert first["id"] == second["id"] == session.customer_id
        assert len(customers.list_customers()) == 1
        stored = customers.get_customer(session.customer_id)
        assert stored["customer"] == {"firstName": "Jane"}
        assert stored["vehicle"] == {"make": "Toyota"}

    def test_snapshot_shape(self, session):
        session.select_scenario("new-no-trade")
        snap = session.snapshot()
        assert snap["session_id"] == "SES-TEST"
        assert snap["stage"] == "introduction"
        assert snap["stage_trace"] == ["introduction"]
        assert snap["agreements"] == {"count": 0, "topics": []}
        assert snap["message_count"] == 0
        assert snap["customer_id"] is None
        assert "First Name" in snap["missing_fields"]


class TestSessionRegistry:
    def test_add_get_remove(self, session):
        registry = SessionRegistry()
        registry.add(session)
        assert registry.get("SES-TEST") is session
        assert len(registry) == 1
        assert registry.remove("SES-TEST") is True
        assert registry.remove("SES-TEST") is False
        assert registry.get("SES-TEST") is None

    def test_sessions_are_isolated(self, chat_client, ocr_engine):
        a = SalesSession(chat_client=chat_client, ocr_engine=ocr_engine)
        b = SalesSession(chat_client=chat_client, ocr_engine=ocr_engine)
        a.records.apply_extracted_fields({"firstName": "Jane"})
        assert b.records.customer.first_name is None
        assert a.session_id != b.session_id
