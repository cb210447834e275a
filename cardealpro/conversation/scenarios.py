"""
Scenario resolver: sales scenario -> required documents and feature flags.

Unknown or unset scenarios degrade to "nothing required" rather than raising.
"""

import logging
from typing import Iterable, Optional

from cardealpro.data.dealer_data import DOCUMENTS, SCENARIOS
from cardealpro.schemas.catalog_schema import (
    DocumentDefinition,
    ScenarioDefinition,
    ScenarioFeatures,
)

logger = logging.getLogger(__name__)


class ScenarioResolver:
    """Catalog of sales scenarios and the documents they reference."""

    def __init__(
        self,
        scenarios: Iterable[ScenarioDefinition],
        documents: dict[str, DocumentDefinition],
    ) -> None:
        self._documents = dict(documents)
        self._scenarios: dict[str, ScenarioDefinition] = {}
        for scenario in scenarios:
            if scenario.id in self._scenarios:
                raise ValueError(f"Duplicate scenario id: {scenario.id!r}")
            unknown = [d for d in scenario.required_documents if d not in self._documents]
            if unknown:
                raise ValueError(
                    f"Scenario {scenario.id!r} references unknown documents: {unknown}"
                )
            self._scenarios[scenario.id] = scenario

    def get(self, scenario_id: Optional[str]) -> Optional[ScenarioDefinition]:
        if not scenario_id:
            return None
        return self._scenarios.get(scenario_id)

    def all(self) -> list[ScenarioDefinition]:
        return list(self._scenarios.values())

    def required_documents(self, scenario_id: Optional[str]) -> list[str]:
        """Ordered document IDs for a scenario; empty when unset or unknown."""
        scenario = self.get(scenario_id)
        if scenario is None:
            if scenario_id:
                logger.debug("Unknown scenario '%s', no documents required", scenario_id)
            return []
        return list(scenario.required_documents)

    def features(self, scenario_id: Optional[str]) -> ScenarioFeatures:
        """
        Feature flags for a scenario.

        Catalog scenarios carry explicit features. IDs outside the catalog
        fall back to the naming convention in ScenarioFeatures.from_scenario_id.
        """
        if not scenario_id:
            return ScenarioFeatures()
        scenario = self._scenarios.get(scenario_id)
        if scenario is not None:
            return scenario.features
        return ScenarioFeatures.from_scenario_id(scenario_id)

    def document(self, document_id: str) -> Optional[DocumentDefinition]:
        return self._documents.get(document_id)


# Singleton instance
scenario_resolver = ScenarioResolver(SCENARIOS, DOCUMENTS)
