"""Tests for the field registry and scenario resolver."""

import pytest

from cardealpro.conversation.field_registry import (
    FieldRegistry,
    UnknownFieldError,
    field_registry,
)
from cardealpro.conversation.scenarios import ScenarioResolver, scenario_resolver
from cardealpro.data.dealer_data import DOCUMENTS, FIELD_DEFINITIONS, SCENARIOS
from cardealpro.schemas.catalog_schema import (
    FieldDefinition,
    ScenarioDefinition,
    ScenarioFeatures,
)

TRADE_FIELDS = ["tradeVin", "tradeYear", "tradeMake", "tradeModel", "tradeMiles"]
LENDER_FIELDS = [
    "lenderName", "lenderPhone", "lenderAddress",
    "accountNumber", "payoffAmount", "perDiemAmount",
]


class TestRegistryLookup:
    def test_get_known_field(self):
        defn = field_registry.get("firstName")
        assert defn is not None
        assert defn.display_name == "First Name"

    def test_get_unknown_field_returns_none(self):
        assert field_registry.get("randomKey") is None

    def test_all_preserves_registration_order(self):
        assert [d.id for d in field_registry.all()] == [d.id for d in FIELD_DEFINITIONS]

    def test_by_record_path(self):
        defn = field_registry.by_record_path("vehicle", "vin")
        assert defn is not None
        assert defn.id == "vehicleVin"

    def test_duplicate_ids_rejected(self):
        defn = FieldDefinition(id="x", display_name="X", record_path=("customer", "city"))
        other = FieldDefinition(id="x", display_name="X2", record_path=("customer", "state"))
        with pytest.raises(ValueError, match="Duplicate field id"):
            FieldRegistry([defn, other])

    def test_shared_record_path_rejected(self):
        a = FieldDefinition(id="a", display_name="A", record_path=("customer", "city"))
        b = FieldDefinition(id="b", display_name="B", record_path=("customer", "city"))
        with pytest.raises(ValueError, match="share record path"):
            FieldRegistry([a, b])


class TestRequiredness:
    def test_constant_required(self):
        assert field_registry.is_required("firstName", "new-no-trade") is True

    def test_constant_optional(self):
        assert field_registry.is_required("homePhone", "new-no-trade") is False

    def test_nothing_required_without_scenario(self):
        assert field_registry.is_required("firstName", None) is False

    def test_unknown_field_raises(self):
        with pytest.raises(UnknownFieldError):
            field_registry.is_required("randomKey", "new-no-trade")

    @pytest.mark.parametrize("field_id", TRADE_FIELDS)
    def test_trade_fields_required_for_unpaid_trade(self, field_id):
        assert field_registry.is_required(field_id, "used-unpaid-trade") is True

    @pytest.mark.parametrize("field_id", TRADE_FIELDS)
    def test_trade_fields_not_required_for_no_trade(self, field_id):
        assert field_registry.is_required(field_id, "used-no-trade") is False

    @pytest.mark.parametrize("field_id", LENDER_FIELDS)
    def test_lender_fields_only_for_unpaid_trade(self, field_id):
        assert field_registry.is_required(field_id, "new-unpaid-trade") is True
        assert field_registry.is_required(field_id, "new-paid-trade") is False

    def test_accepts_features_directly(self):
        features = ScenarioFeatures(has_trade_in=True)
        assert field_registry.is_required("tradeVin", features) is True
        assert field_registry.is_required("lenderName", features) is False


class TestAdvisoryValidation:
    def test_valid_zip(self):
        assert field_registry.validate("zipCode", "45601") is True
        assert field_registry.validate("zipCode", "45601-1234") is True

    def test_invalid_zip(self):
        assert field_registry.validate("zipCode", "4560") is False

    def test_phone_format(self):
        assert field_registry.validate("cellPhone", "(614) 555-1234") is True
        assert field_registry.validate("cellPhone", "614-555-1234") is False

    def test_field_without_pattern_passes(self):
        assert field_registry.validate("vehicleMake", "anything at all") is True

    def test_unknown_field_passes(self):
        assert field_registry.validate("randomKey", "x") is True


class TestScenarioResolver:
    def test_required_documents_ordered(self):
        assert scenario_resolver.required_documents("new-unpaid-trade") == [
            "deal-check-list",
            "delivery-report",
            "privacy-policy",
            "oil-change-intervals",
            "payoff-authorization",
        ]

    def test_used_scenarios_skip_oil_change(self):
        assert "oil-change-intervals" not in scenario_resolver.required_documents("used-paid-trade")

    def test_unknown_scenario_has_no_documents(self):
        assert scenario_resolver.required_documents("lease-return") == []

    def test_no_scenario_has_no_documents(self):
        assert scenario_resolver.required_documents(None) == []

    def test_catalog_features_are_explicit(self):
        assert scenario_resolver.features("used-no-trade") == ScenarioFeatures()
        assert scenario_resolver.features("new-unpaid-trade") == ScenarioFeatures(
            has_trade_in=True, trade_is_unpaid=True
        )

    def test_unknown_id_uses_naming_convention(self):
        assert scenario_resolver.features("cpo-unpaid-trade") == ScenarioFeatures(
            has_trade_in=True, trade_is_unpaid=True
        )
        assert scenario_resolver.features("cpo-no-trade").has_trade_in is False
        assert scenario_resolver.features("cpo-paid-trade").trade_is_unpaid is False

    def test_every_scenario_document_exists(self):
        for scenario in scenario_resolver.all():
            for document_id in scenario.required_documents:
                assert scenario_resolver.document(document_id) is not None

    def test_unknown_document_reference_rejected(self):
        bad = ScenarioDefinition(
            id="bad", name="Bad", required_documents=("nope",), features=ScenarioFeatures()
        )
        with pytest.raises(ValueError, match="unknown documents"):
            ScenarioResolver([*SCENARIOS, bad], DOCUMENTS)

    def test_duplicate_scenario_rejected(self):
        with pytest.raises(ValueError, match="Duplicate scenario"):
            ScenarioResolver([SCENARIOS[0], SCENARIOS[0]], DOCUMENTS)
