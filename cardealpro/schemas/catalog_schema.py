"""Static catalog entries: field definitions, scenarios, and documents."""

import re
from dataclasses import dataclass, field
from typing import Callable, Optional, Union


@dataclass(frozen=True)
class ScenarioFeatures:
    """Capabilities of a sales scenario that drive field requiredness."""

    has_trade_in: bool = False
    trade_is_unpaid: bool = False

    @classmethod
    def from_scenario_id(cls, scenario_id: str) -> "ScenarioFeatures":
        """Derive features from the ID naming convention.

        ``trade`` marks a trade-in unless the ID says ``no-trade``;
        ``unpaid`` marks an outstanding loan on the trade-in.
        """
        lower = scenario_id.lower()
        has_trade_in = "trade" in lower and "no-trade" not in lower
        return cls(
            has_trade_in=has_trade_in,
            trade_is_unpaid=has_trade_in and "unpaid" in lower,
        )


Requirement = Union[bool, Callable[[ScenarioFeatures], bool]]


def requires_trade_in(features: ScenarioFeatures) -> bool:
    return features.has_trade_in


def requires_unpaid_trade(features: ScenarioFeatures) -> bool:
    return features.trade_is_unpaid


@dataclass(frozen=True)
class FieldDefinition:
    """Schema for one piece of customer, vehicle, trade-in, or lender data."""

    id: str
    display_name: str
    record_path: tuple[str, str]
    required: Requirement = False
    validation: Optional[re.Pattern[str]] = None
    document_mapping: dict[str, str] = field(default_factory=dict)

    def is_required(self, features: ScenarioFeatures) -> bool:
        if callable(self.required):
            return self.required(features)
        return self.required

    def is_valid(self, value: str) -> bool:
        """Advisory check against the validation pattern. Never enforced on write."""
        if self.validation is None:
            return True
        return self.validation.fullmatch(value) is not None


@dataclass(frozen=True)
class ScenarioDefinition:
    """A named sales situation and the documents it needs."""

    id: str
    name: str
    required_documents: tuple[str, ...]
    features: ScenarioFeatures


@dataclass(frozen=True)
class DocumentDefinition:
    """A dealership document in the catalog."""

    id: str
    name: str
    description: str
    sections: tuple[str, ...] = ()
