"""
Sales conversation stage machine.

Six stages in a fixed order. After each salesperson message the machine
checks the one transition leaving the current stage; message-count
thresholds and keyword triggers decide whether it fires. Stages never move
backward and FOLLOW_UP is terminal.

Usage:
    sm = SalesStageMachine()
    sm.advance(message_count=5, text="We need a family car")
    assert sm.current_stage == SalesStage.NEEDS_ASSESSMENT
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from cardealpro.config import SalesFlowConfig, settings
from cardealpro.utils import contains_any

logger = logging.getLogger(__name__)

CONCERN_KEYWORDS = ["concern", "worry", "price", "expensive"]
POSITIVE_KEYWORDS = ["fine", "good", "great", "agree"]
COMMITMENT_KEYWORDS = ["sign", "paperwork", "take it", "deal done"]


class SalesStage(str, Enum):
    """Stages of a sales conversation, in progression order."""
    INTRODUCTION = "introduction"
    NEEDS_ASSESSMENT = "needs_assessment"
    PRESENTATION = "presentation"
    HANDLING_OBJECTIONS = "handling_objections"
    CLOSING = "closing"
    FOLLOW_UP = "follow_up"

    @property
    def order(self) -> int:
        return _STAGE_ORDER.index(self)


_STAGE_ORDER = list(SalesStage)

Guard = Callable[[int, str], bool]


@dataclass
class StageTransition:
    """Forward move out of a stage, taken when the guard passes."""
    from_stage: SalesStage
    to_stage: SalesStage
    guard: Guard
    reason: str


@dataclass
class StageEntry:
    """Recorded history entry for a stage visit."""
    stage: SalesStage
    entered_at: datetime
    message_count: int = 0
    reason: Optional[str] = None


def build_transitions(config: SalesFlowConfig) -> list[StageTransition]:
    """Transition table for the configured thresholds."""
    return [
        StageTransition(
            SalesStage.INTRODUCTION, SalesStage.NEEDS_ASSESSMENT,
            lambda count, text: count > config.needs_assessment_after,
            "message count",
        ),
        StageTransition(
            SalesStage.NEEDS_ASSESSMENT, SalesStage.PRESENTATION,
            lambda count, text: count > config.presentation_after,
            "message count",
        ),
        StageTransition(
            SalesStage.PRESENTATION, SalesStage.HANDLING_OBJECTIONS,
            lambda count, text: (
                count > config.objections_after and contains_any(text, CONCERN_KEYWORDS)
            ),
            "customer concern",
        ),
        StageTransition(
            SalesStage.HANDLING_OBJECTIONS, SalesStage.CLOSING,
            lambda count, text: (
                count > config.closing_after or contains_any(text, POSITIVE_KEYWORDS)
            ),
            "message count or positive response",
        ),
        StageTransition(
            SalesStage.CLOSING, SalesStage.FOLLOW_UP,
            lambda count, text: (
                count > config.follow_up_after or contains_any(text, COMMITMENT_KEYWORDS)
            ),
            "message count or commitment",
        ),
    ]


class SalesStageMachine:
    """
    Monotonic stage tracker for one conversation.

    At most one transition fires per message, so a long silence followed by
    a burst of messages still walks through each stage in order.
    """

    def __init__(self, config: Optional[SalesFlowConfig] = None) -> None:
        self._transitions = build_transitions(config or settings.sales)
        self._current_stage = SalesStage.INTRODUCTION
        self._history: list[StageEntry] = [
            StageEntry(stage=SalesStage.INTRODUCTION, entered_at=datetime.now(timezone.utc))
        ]

    @property
    def current_stage(self) -> SalesStage:
        return self._current_stage

    def advance(self, message_count: int, text: str) -> SalesStage:
        """
        Evaluate the transition out of the current stage.

        Args:
            message_count: Messages in the conversation so far.
            text: The salesperson message that was just sent.

        Returns:
            The (possibly unchanged) current stage.
        """
        for t in self._transitions:
            if t.from_stage != self._current_stage:
                continue
            if not t.guard(message_count, text):
                break

            old_stage = self._current_stage
            self._current_stage = t.to_stage
            self._history.append(StageEntry(
                stage=self._current_stage,
                entered_at=datetime.now(timezone.utc),
                message_count=message_count,
                reason=t.reason,
            ))
            logger.debug(
                "Stage transition: %s -> %s (%s, %d messages)",
                old_stage.value, self._current_stage.value, t.reason, message_count,
            )
            break
        return self._current_stage

    def get_history(self) -> list[StageEntry]:
        """Return the full stage history."""
        return list(self._history)

    def get_stage_trace(self) -> list[str]:
        """Return ordered list of stage names visited."""
        return [entry.stage.value for entry in self._history]

    def is_terminal(self) -> bool:
        return self._current_stage == SalesStage.FOLLOW_UP
