"""Dynamic prompt construction for context-aware model instructions."""

from typing import Optional

from cardealpro.conversation.state_machine import SalesStage
from cardealpro.conversation.techniques import STAGE_TECHNIQUE_HINTS
from cardealpro.prompts.system_prompts import (
    DEALERSHIP_CONTEXT,
    FIELD_TAG_INSTRUCTIONS,
    SALES_ASSISTANT_PROMPT,
    TEMPLATE_ANALYSIS_PROMPT,
)
from cardealpro.schemas.conversation_schema import Message


def build_sales_system_prompt(
    scenario_id: Optional[str],
    stage: SalesStage,
    missing_fields: list[str],
    extract_info: bool = True,
) -> str:
    """System instructions for one chat turn."""
    return SALES_ASSISTANT_PROMPT.format(
        context=DEALERSHIP_CONTEXT,
        scenario=scenario_id or "Not selected",
        stage=stage.value,
        missing=", ".join(missing_fields) if missing_fields else "None",
        field_instructions=FIELD_TAG_INSTRUCTIONS if extract_info else "",
        technique=STAGE_TECHNIQUE_HINTS.get(stage, "General"),
    )


def build_chat_messages(system_prompt: str, history: list[Message]) -> list[dict[str, str]]:
    """Ordered chat-completion messages: system first, then the conversation."""
    messages = [{"role": "system", "content": system_prompt}]
    for message in history:
        messages.append({"role": message.role.value, "content": message.content})
    return messages


def build_template_analysis_prompt(allowed_keys: list[str]) -> str:
    return TEMPLATE_ANALYSIS_PROMPT.format(allowed_keys=", ".join(allowed_keys))


def build_template_analysis_request(template_name: str, field_names: list[str]) -> str:
    """User message listing a template's widget names for analysis."""
    lines = [f"Form name: {template_name}", "Fillable fields:"]
    lines.extend(f"- {name}" for name in field_names)
    return "\n".join(lines)
