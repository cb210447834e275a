"""
Sales-technique selection.

Picks a suggested phrase for the salesperson from the current stage, the
message just sent, and how many times the customer has agreed so far.
Keyword checks are case-insensitive substring matches against fixed
vocabularies. The only nondeterminism, the gift phrase, draws from an
injectable ``random.Random``.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Optional

from cardealpro.config import SalesFlowConfig, settings
from cardealpro.conversation.state_machine import SalesStage
from cardealpro.schemas.conversation_schema import (
    SalesTechnique,
    SalesTechniqueType,
    TechniqueSuggestion,
)
from cardealpro.utils import contains_any, first_match, truncate_snippet

logger = logging.getLogger(__name__)

OBJECTION_KEYWORDS = [
    "price", "expensive", "cost", "afford", "interest", "payments",
    "trade", "worth", "warranty", "features", "time",
]
AGREEMENT_KEYWORDS = ["yes", "agree", "sure", "definitely", "absolutely", "ok", "okay", "sounds good"]

# Ordered: the first keyword found in the objection picks the rebuttal
WHAT_IF_RESPONSES: dict[str, str] = {
    "price": "What if we could find a financing option that fits within your monthly budget?",
    "expensive": "What if we could show you the long-term value that outweighs the initial investment?",
    "interest": "What if we could get you a lower interest rate than you expected?",
    "payments": "What if we could structure the payments to fit your current financial situation?",
    "trade": "What if we could give you more for your trade-in than you anticipated?",
    "warranty": "What if we could include an extended warranty at no additional cost?",
    "features": (
        "What if this vehicle has features you haven't even considered "
        "that would improve your daily drive?"
    ),
    "time": "What if we could complete all the paperwork in half the time you expected?",
}
WHAT_IF_FALLBACK = "What if we could address your specific concerns to make this work for you?"

YES_LADDER_QUESTIONS = [
    "Would you agree that reliability is important in a vehicle?",
    "Do you feel that having good safety features is valuable?",
    "Would you say that fuel efficiency matters to you?",
    "Is a comfortable driving experience something you value?",
    "Do you think having the right financing options is essential?",
    "Would you agree that getting good service after the sale is important?",
    "Do you believe that the right vehicle can make your daily commute more enjoyable?",
]

ADVANCED_YES_LADDER_QUESTIONS = [
    "Since you value reliability, would you agree that this model's track record is impressive?",
    "Given your interest in safety, do you see how these features would protect your family?",
    "Since fuel efficiency matters to you, can you see how this vehicle would save you money over time?",
    "As someone who values comfort, do you feel this vehicle provides the experience you're looking for?",
    "Now that we've found financing that works for you, would you say we've addressed your budget concerns?",
    "Since we've covered all your main requirements, would you agree this vehicle checks all your boxes?",
]

GIFT_PHRASES = [
    "As a special bonus, we're including the extended warranty package as a gift. "
    "This means you get 3 years of worry-free driving.",
    "Because we value your business, we're throwing in our premium detailing package "
    "as a gift with your purchase today.",
    "I'm pleased to let you know that we're including the first year of maintenance "
    "as our gift to you.",
    "As a token of our appreciation, we're including the all-weather floor mats and "
    "cargo package as a gift.",
    "Great news! The finance manager has approved including the theft protection system "
    "as a complimentary gift.",
]


def _suggest(text: str, kind: SalesTechniqueType, description: str) -> TechniqueSuggestion:
    return TechniqueSuggestion(
        suggestion=text,
        technique=SalesTechnique(type=kind, description=description),
    )


# Fixed guidance for stages (and fallbacks) that need no keyword logic
STAGE_GUIDANCE: dict[SalesStage, TechniqueSuggestion] = {
    SalesStage.INTRODUCTION: _suggest(
        "Focus on building rapport with personalized questions about their needs and preferences.",
        SalesTechniqueType.GENERAL,
        "Rapport building - personalized questions",
    ),
    SalesStage.NEEDS_ASSESSMENT: _suggest(
        "Ask open-ended questions to explore what features matter most to the customer.",
        SalesTechniqueType.GENERAL,
        "Needs assessment - open-ended questions",
    ),
    SalesStage.PRESENTATION: _suggest(
        "Connect vehicle features specifically to the needs they've mentioned.",
        SalesTechniqueType.GENERAL,
        "Feature-benefit connection",
    ),
    SalesStage.HANDLING_OBJECTIONS: _suggest(
        "Acknowledge their concerns and provide specific evidence to address them.",
        SalesTechniqueType.GENERAL,
        "Objection handling - evidence-based reassurance",
    ),
    SalesStage.CLOSING: _suggest(
        "Summarize all the benefits they've agreed are important and ask for the decision.",
        SalesTechniqueType.GENERAL,
        "Benefit summary - decision request",
    ),
    SalesStage.FOLLOW_UP: _suggest(
        "Express appreciation for their time and confirm next steps with a specific timeframe.",
        SalesTechniqueType.GENERAL,
        "Follow-up - clear next steps",
    ),
}

# Short technique name for each stage, used in prompt hints
STAGE_TECHNIQUE_HINTS: dict[SalesStage, str] = {
    SalesStage.HANDLING_OBJECTIONS: "What if",
    SalesStage.CLOSING: "Gift letter",
    SalesStage.PRESENTATION: "Yes ladder",
}


def has_objection(text: str) -> bool:
    return contains_any(text, OBJECTION_KEYWORDS)


def has_agreement(text: str) -> bool:
    return contains_any(text, AGREEMENT_KEYWORDS)


def generate_what_if(objection: str) -> str:
    """Rebuttal for the first objection keyword found, or a general fallback."""
    keyword = first_match(objection, list(WHAT_IF_RESPONSES))
    return WHAT_IF_RESPONSES[keyword] if keyword else WHAT_IF_FALLBACK


def generate_yes_ladder_question(agreement_count: int) -> str:
    """
    Question for the current rung of the yes ladder.

    Base questions are used in order; after the last one the advanced
    questions are cycled.
    """
    if agreement_count < len(YES_LADDER_QUESTIONS):
        return YES_LADDER_QUESTIONS[max(agreement_count, 0)]
    index = (agreement_count - len(YES_LADDER_QUESTIONS)) % len(ADVANCED_YES_LADDER_QUESTIONS)
    return ADVANCED_YES_LADDER_QUESTIONS[index]


def gift_phrase_at(index: int) -> str:
    """Deterministic gift phrase lookup, wrapping around the list."""
    return GIFT_PHRASES[index % len(GIFT_PHRASES)]


def generate_gift_letter(rng: Optional[random.Random] = None) -> str:
    """Random gift phrase drawn from ``rng`` (module RNG when omitted)."""
    chooser = rng or random
    return gift_phrase_at(chooser.randrange(len(GIFT_PHRASES)))


def select_technique(
    text: str,
    stage: SalesStage,
    agreement_count: int,
    rng: Optional[random.Random] = None,
    config: Optional[SalesFlowConfig] = None,
) -> TechniqueSuggestion:
    """
    Choose the suggestion for a salesperson message.

    Pure apart from the gift draw, which uses ``rng``.
    """
    config = config or settings.sales

    if stage == SalesStage.PRESENTATION and agreement_count >= config.yes_ladder_min_agreements:
        return _suggest(
            generate_yes_ladder_question(agreement_count),
            SalesTechniqueType.YES_LADDER,
            "Yes ladder - sequential agreement",
        )

    if stage == SalesStage.HANDLING_OBJECTIONS and has_objection(text):
        return _suggest(
            generate_what_if(text),
            SalesTechniqueType.WHAT_IF,
            "What-if technique for objection handling",
        )

    if stage == SalesStage.CLOSING and agreement_count >= config.gift_letter_min_agreements:
        return _suggest(
            generate_gift_letter(rng),
            SalesTechniqueType.GIFT_LETTER,
            "Gift letter - added value offering",
        )

    return STAGE_GUIDANCE[stage].model_copy(deep=True)


@dataclass
class AgreementTracker:
    """Running count of customer agreements plus a snippet of each one."""

    count: int = 0
    topics: list[str] = field(default_factory=list)
    snippet_length: int = settings.sales.topic_snippet_length

    def observe(self, text: str) -> bool:
        """Record the message if it contains an agreement keyword."""
        if not has_agreement(text):
            return False
        self.count += 1
        self.topics.append(truncate_snippet(text, self.snippet_length))
        logger.debug("Agreement #%d recorded", self.count)
        return True
