"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""


class TestSchemaImports:
    def test_import_customer_schema(self):
        from cardealpro.schemas.customer_schema import CustomerInfo, LenderInfo
        assert CustomerInfo().is_empty()
        assert LenderInfo(payoff_amount="$1").flatten("lender_") == {"lender_payoffAmount": "$1"}

    def test_import_conversation_schema(self):
        from cardealpro.schemas.conversation_schema import NotificationLevel, Role
        assert Role.USER == "user"
        assert NotificationLevel.ERROR == "error"

    def test_import_document_schema(self):
        from cardealpro.schemas.document_schema import DocumentTemplate
        template = DocumentTemplate(id="TPL-1", name="x", filename="x.pdf")
        assert not template.has_analysis()


class TestPackageReExports:
    def test_conversation_package(self):
        from cardealpro.conversation import SalesStage, SalesStageMachine, field_registry
        assert SalesStageMachine().current_stage == SalesStage.INTRODUCTION
        assert "firstName" in field_registry

    def test_documents_package(self):
        from cardealpro.documents import PdfFormFiller, TemplateNotFoundError
        assert issubclass(TemplateNotFoundError, Exception)
        assert PdfFormFiller is not None

    def test_scanning_package(self):
        from cardealpro.scanning import parse_ohio_license
        assert callable(parse_ohio_license)

    def test_api_package(self):
        from cardealpro.api import create_app
        assert callable(create_app)


class TestEntryPoints:
    def test_import_console_demo(self):
        from console_demo import ConsoleSession, ScriptedChatClient
        assert "new-no-trade" in ConsoleSession.SCENARIOS
        assert ScriptedChatClient is not None

    def test_import_main(self):
        import main
        assert callable(main._run_server)
