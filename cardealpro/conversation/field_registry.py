"""
Field schema registry.

Read-only view over the static field definitions. Loaded once at import;
duplicate IDs are rejected before anything can use the catalog.
"""

import logging
from typing import Iterable, Optional, Union

from cardealpro.conversation.scenarios import scenario_resolver
from cardealpro.data.dealer_data import FIELD_DEFINITIONS
from cardealpro.schemas.catalog_schema import FieldDefinition, ScenarioFeatures

logger = logging.getLogger(__name__)

ScenarioRef = Union[str, ScenarioFeatures, None]


class UnknownFieldError(KeyError):
    """Raised when a field ID is not in the registry."""


class FieldRegistry:
    """Lookup of field definitions by ID, in registration order."""

    def __init__(self, definitions: Iterable[FieldDefinition]) -> None:
        self._fields: dict[str, FieldDefinition] = {}
        self._by_path: dict[tuple[str, str], FieldDefinition] = {}
        for defn in definitions:
            if defn.id in self._fields:
                raise ValueError(f"Duplicate field id in registry: {defn.id!r}")
            if defn.record_path in self._by_path:
                raise ValueError(
                    f"Fields {self._by_path[defn.record_path].id!r} and {defn.id!r} "
                    f"share record path {defn.record_path}"
                )
            self._fields[defn.id] = defn
            self._by_path[defn.record_path] = defn

    def __contains__(self, field_id: object) -> bool:
        return field_id in self._fields

    def __len__(self) -> int:
        return len(self._fields)

    def get(self, field_id: str) -> Optional[FieldDefinition]:
        return self._fields.get(field_id)

    def all(self) -> list[FieldDefinition]:
        return list(self._fields.values())

    def by_record_path(self, namespace: str, attribute: str) -> Optional[FieldDefinition]:
        """Reverse lookup: which field lives at ``namespace.attribute``."""
        return self._by_path.get((namespace, attribute))

    def is_required(self, field_id: str, scenario: ScenarioRef) -> bool:
        """
        Evaluate a field's requiredness for a scenario.

        ``scenario`` may be a scenario ID, precomputed features, or None.
        With no scenario, nothing is required.

        Raises:
            UnknownFieldError: If ``field_id`` is not registered.
        """
        defn = self._fields.get(field_id)
        if defn is None:
            raise UnknownFieldError(field_id)
        if scenario is None:
            return False
        return defn.is_required(_as_features(scenario))

    def validate(self, field_id: str, value: str) -> bool:
        """Advisory pattern check. Unknown fields and fields without a pattern pass."""
        defn = self._fields.get(field_id)
        if defn is None:
            return True
        return defn.is_valid(value)


def _as_features(scenario: Union[str, ScenarioFeatures]) -> ScenarioFeatures:
    if isinstance(scenario, ScenarioFeatures):
        return scenario
    return scenario_resolver.features(scenario)


# Singleton instance
field_registry = FieldRegistry(FIELD_DEFINITIONS)
logger.debug("Field registry loaded with %d definitions", len(field_registry))
