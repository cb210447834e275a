"""
Customer record store for one sales conversation.

Holds the typed customer, vehicle, trade-in, and lender records and merges
extracted fields into them. Only known keys are ever written:

- a registry field ID (``vehicleVin``, ``payoffAmount``, ...)
- a core identity key (``firstName``, ``address``, ...)
- a namespaced key whose attribute belongs to a registry field
  (``vehicle_make``, ``tradeIn_miles``, ``lender_name``, ...)

Anything else is dropped. Validation patterns are reported, never enforced.

Usage:
    store = CustomerRecordStore()
    store.apply_extracted_fields({"firstName": "Jane", "lastName": "Doe"})
    store.missing_required_fields("new-no-trade")  # ["Street Address", ...]
"""

import logging
from typing import Any, Callable, Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel, to_snake

from cardealpro.conversation.field_registry import FieldRegistry, field_registry
from cardealpro.conversation.scenarios import ScenarioResolver, scenario_resolver
from cardealpro.data.dealer_data import (
    CUSTOMER,
    IDENTITY_FIELDS,
    LENDER,
    NAMESPACE_PREFIXES,
    TRADE_IN,
    VEHICLE,
)
from cardealpro.schemas.conversation_schema import Notification
from cardealpro.schemas.customer_schema import (
    CustomerInfo,
    LenderInfo,
    TradeInInfo,
    VehicleInfo,
)

logger = logging.getLogger(__name__)

NotificationSink = Callable[[Notification], None]


def form_data_key(namespace: str, attribute: str) -> str:
    """Flattened form-data key for a record attribute.

    Examples:
        >>> form_data_key("customer", "zip_code")
        'zipCode'
        >>> form_data_key("tradeIn", "miles")
        'tradeIn_miles'
    """
    return NAMESPACE_PREFIXES.get(namespace, "") + to_camel(attribute)


class CustomerRecordStore:
    """Typed, incrementally merged records for the customer under conversation."""

    def __init__(
        self,
        registry: FieldRegistry = field_registry,
        resolver: ScenarioResolver = scenario_resolver,
        notify: Optional[NotificationSink] = None,
    ) -> None:
        self._registry = registry
        self._resolver = resolver
        self._notify = notify
        self.customer = CustomerInfo()
        self.vehicle = VehicleInfo()
        self.trade_in = TradeInInfo()
        self.lender = LenderInfo()

    def _records(self) -> dict[str, BaseModel]:
        return {
            CUSTOMER: self.customer,
            VEHICLE: self.vehicle,
            TRADE_IN: self.trade_in,
            LENDER: self.lender,
        }

    def _resolve_key(self, key: str) -> Optional[tuple[str, str]]:
        defn = self._registry.get(key)
        if defn is not None:
            return defn.record_path
        if key in IDENTITY_FIELDS:
            return CUSTOMER, IDENTITY_FIELDS[key]
        for namespace, prefix in NAMESPACE_PREFIXES.items():
            if key.startswith(prefix):
                attribute = to_snake(key[len(prefix):])
                if self._registry.by_record_path(namespace, attribute) is not None:
                    return namespace, attribute
        return None

    def _value_at(self, record_path: tuple[str, str]) -> Optional[str]:
        namespace, attribute = record_path
        return getattr(self._records()[namespace], attribute, None)

    def value_of(self, field_id: str) -> Optional[str]:
        """Current value for a registry field or identity key."""
        path = self._resolve_key(field_id)
        return self._value_at(path) if path else None

    def apply_extracted_fields(self, fields: dict[str, str]) -> int:
        """
        Merge extracted fields into the records.

        Returns:
            The number of fields written. Unknown keys are not counted.
        """
        records = self._records()
        written = 0
        for key, value in fields.items():
            path = self._resolve_key(key)
            if path is None:
                logger.debug("Dropping unknown extracted field '%s'", key)
                continue
            namespace, attribute = path
            setattr(records[namespace], attribute, value)
            written += 1

        if written:
            logger.info("Merged %d extracted field(s)", written)
            self._emit(
                Notification(
                    title="Customer information updated",
                    message=f"Extracted {written} field(s) from conversation",
                )
            )
        return written

    def update_namespace(self, namespace: str, **values: Optional[str]) -> None:
        """
        Explicit typed update of one record, e.g. ``update_namespace("vehicle", vin=...)``.

        Raises:
            ValueError: If the namespace or an attribute is unknown.
        """
        records = self._records()
        record = records.get(namespace)
        if record is None:
            raise ValueError(f"Unknown record namespace: {namespace!r}")
        unknown = [name for name in values if name not in type(record).model_fields]
        if unknown:
            raise ValueError(f"Unknown attributes for {namespace}: {unknown}")
        for attribute, value in values.items():
            setattr(record, attribute, value)

    def missing_required_fields(self, scenario_id: Optional[str]) -> list[str]:
        """Display names of required fields without a value, in registry order."""
        if not scenario_id:
            return []
        features = self._resolver.features(scenario_id)
        return [
            defn.display_name
            for defn in self._registry.all()
            if defn.is_required(features) and not self._value_at(defn.record_path)
        ]

    def to_form_data(self) -> dict[str, str]:
        """Flatten all records into one dict, prefixing non-customer namespaces."""
        data: dict[str, str] = {}
        for namespace, record in self._records().items():
            data.update(record.flatten(NAMESPACE_PREFIXES.get(namespace, "")))
        return data

    def validation_report(self) -> dict[str, str]:
        """Registry fields whose current value does not match its pattern."""
        report: dict[str, str] = {}
        for defn in self._registry.all():
            value = self._value_at(defn.record_path)
            if value and not defn.is_valid(value):
                report[defn.id] = value
        return report

    def snapshot(self) -> dict[str, Any]:
        """JSON-ready copy of every record, camelCase keys, unset values omitted."""
        return {
            namespace: record.model_dump(by_alias=True, exclude_none=True)
            for namespace, record in self._records().items()
        }

    def _emit(self, notification: Notification) -> None:
        if self._notify is not None:
            self._notify(notification)
