from cardealpro.conversation.extractor import ExtractionResult, extract_structured_data
from cardealpro.conversation.field_registry import FieldRegistry, field_registry
from cardealpro.conversation.record_store import CustomerRecordStore
from cardealpro.conversation.scenarios import ScenarioResolver, scenario_resolver
from cardealpro.conversation.state_machine import SalesStage, SalesStageMachine
from cardealpro.conversation.techniques import AgreementTracker, select_technique

__all__ = [
    "extract_structured_data",
    "ExtractionResult",
    "FieldRegistry",
    "field_registry",
    "CustomerRecordStore",
    "ScenarioResolver",
    "scenario_resolver",
    "SalesStage",
    "SalesStageMachine",
    "AgreementTracker",
    "select_technique",
]
