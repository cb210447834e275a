"""Tests for the customer record store."""

import pytest

from cardealpro.conversation.record_store import CustomerRecordStore, form_data_key


class TestApplyExtractedFields:
    def test_identity_fields_written(self, record_store):
        written = record_store.apply_extracted_fields({"firstName": "Jane", "lastName": "Doe"})
        assert written == 2
        assert record_store.customer.first_name == "Jane"
        assert record_store.customer.last_name == "Doe"

    def test_address_alias_writes_street_address(self, record_store):
        before = record_store.missing_required_fields("new-no-trade")
        written = record_store.apply_extracted_fields({"address": "533 BELLEVIEW AVE"})
        assert written == 1
        assert record_store.customer.street_address == "533 BELLEVIEW AVE"
        assert record_store.to_form_data() == {"streetAddress": "533 BELLEVIEW AVE"}
        assert "Street Address" in before
        assert "Street Address" not in record_store.missing_required_fields("new-no-trade")

    def test_unknown_key_dropped(self, record_store, notifications):
        written = record_store.apply_extracted_fields({"randomKey": "x"})
        assert written == 0
        assert record_store.snapshot() == {"customer": {}, "vehicle": {}, "tradeIn": {}, "lender": {}}
        assert notifications == []

    def test_registry_id_routes_to_record(self, record_store):
        record_store.apply_extracted_fields({"vehicleVin": "4T1B11HK5RU123456", "payoffAmount": "$8,500.00"})
        assert record_store.vehicle.vin == "4T1B11HK5RU123456"
        assert record_store.lender.payoff_amount == "$8,500.00"

    def test_namespaced_keys_route_to_records(self, record_store):
        record_store.apply_extracted_fields({
            "vehicle_make": "Toyota",
            "tradeIn_miles": "45000",
            "lender_name": "First Ohio Bank",
            "lender_perDiemAmount": "$1.25",
        })
        assert record_store.vehicle.make == "Toyota"
        assert record_store.trade_in.miles == "45000"
        assert record_store.lender.name == "First Ohio Bank"
        assert record_store.lender.per_diem_amount == "$1.25"

    def test_namespaced_unknown_attribute_dropped(self, record_store):
        assert record_store.apply_extracted_fields({"vehicle_color": "Red"}) == 0

    def test_later_value_overwrites(self, record_store):
        record_store.apply_extracted_fields({"city": "Columbus"})
        record_store.apply_extracted_fields({"city": "Chillicothe"})
        assert record_store.customer.city == "Chillicothe"

    def test_invalid_value_still_written(self, record_store):
        record_store.apply_extracted_fields({"zipCode": "4560"})
        assert record_store.customer.zip_code == "4560"
        assert record_store.validation_report() == {"zipCode": "4560"}

    def test_notification_counts_written_fields(self, record_store, notifications):
        record_store.apply_extracted_fields({"firstName": "Jane", "randomKey": "x", "city": "Columbus"})
        assert len(notifications) == 1
        assert notifications[0].title == "Customer information updated"
        assert notifications[0].message == "Extracted 2 field(s) from conversation"

    def test_value_of(self, record_store):
        record_store.apply_extracted_fields({"tradeMake": "Honda"})
        assert record_store.value_of("tradeMake") == "Honda"
        assert record_store.value_of("tradeIn_make") == "Honda"
        assert record_store.value_of("randomKey") is None


class TestMissingRequiredFields:
    def test_end_to_end_new_no_trade(self, record_store):
        record_store.apply_extracted_fields({"firstName": "Jane", "lastName": "Doe"})
        missing = record_store.missing_required_fields("new-no-trade")
        assert "First Name" not in missing
        assert "Last Name" not in missing
        assert missing[:3] == ["Street Address", "City", "State"]
        assert "Trade-in VIN" not in missing
        assert "Bank/Lender Name" not in missing

    def test_optional_field_never_missing(self, record_store):
        assert "Home Phone" not in record_store.missing_required_fields("new-no-trade")

    def test_unpaid_trade_requires_trade_and_lender(self, record_store):
        missing = record_store.missing_required_fields("used-unpaid-trade")
        assert "Trade-in VIN" in missing
        assert "Payoff Amount" in missing

    def test_paid_trade_requires_trade_only(self, record_store):
        missing = record_store.missing_required_fields("new-paid-trade")
        assert "Trade-in Make" in missing
        assert "Payoff Amount" not in missing

    def test_no_scenario_nothing_missing(self, record_store):
        assert record_store.missing_required_fields(None) == []

    def test_filled_fields_leave_list(self, record_store):
        before = record_store.missing_required_fields("used-no-trade")
        record_store.apply_extracted_fields({"vehicle_vin": "4T1B11HK5RU123456"})
        after = record_store.missing_required_fields("used-no-trade")
        assert "VIN" in before
        assert "VIN" not in after
        assert len(after) == len(before) - 1


class TestUpdateNamespace:
    def test_typed_update(self, record_store):
        record_store.update_namespace("vehicle", vin="4T1B11HK5RU123456", year="2024")
        assert record_store.vehicle.vin == "4T1B11HK5RU123456"
        assert record_store.vehicle.year == "2024"

    def test_unknown_namespace(self, record_store):
        with pytest.raises(ValueError, match="Unknown record namespace"):
            record_store.update_namespace("spouse", name="Sam")

    def test_unknown_attribute(self, record_store):
        with pytest.raises(ValueError, match="Unknown attributes"):
            record_store.update_namespace("vehicle", color="Red")


class TestFormData:
    def test_flattened_keys(self, record_store):
        record_store.apply_extracted_fields({
            "firstName": "Jane",
            "zipCode": "45601",
            "vehicle_vin": "4T1B11HK5RU123456",
            "tradeIn_year": "2018",
            "lender_name": "First Ohio Bank",
        })
        assert record_store.to_form_data() == {
            "firstName": "Jane",
            "zipCode": "45601",
            "vehicle_vin": "4T1B11HK5RU123456",
            "tradeIn_year": "2018",
            "lender_name": "First Ohio Bank",
        }

    def test_empty_store_has_no_form_data(self):
        assert CustomerRecordStore().to_form_data() == {}

    def test_snapshot_uses_camel_case(self, record_store):
        record_store.apply_extracted_fields({"cellPhone": "(614) 555-1234"})
        assert record_store.snapshot()["customer"] == {"cellPhone": "(614) 555-1234"}

    @pytest.mark.parametrize("namespace,attribute,expected", [
        ("customer", "first_name", "firstName"),
        ("vehicle", "stock_number", "vehicle_stockNumber"),
        ("tradeIn", "vin", "tradeIn_vin"),
        ("lender", "payoff_amount", "lender_payoffAmount"),
    ])
    def test_form_data_key(self, namespace, attribute, expected):
        assert form_data_key(namespace, attribute) == expected
