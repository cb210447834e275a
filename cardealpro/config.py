"""
Centralized configuration with environment variable overrides.

Dealership details, model settings, and the sales-flow thresholds are
configurable here. Nothing is hardcoded in the conversation or document logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class DealershipConfig:
    """Dealership-specific settings loaded from environment or defaults."""

    name: str = os.getenv("DEALERSHIP_NAME", "CarDealPro Motors")
    home_state: str = os.getenv("DEALERSHIP_STATE", "OH")


@dataclass(frozen=True)
class ModelConfig:
    """Chat, vision, and analysis model settings."""

    api_key: str = os.getenv("OPENAI_API_KEY", "")
    chat_model: str = os.getenv("CHAT_MODEL", "gpt-4o-mini")
    chat_temperature: float = _safe_float("CHAT_TEMPERATURE", "0.7")
    vision_model: str = os.getenv("VISION_MODEL", "gpt-4o")
    analysis_model: str = os.getenv("ANALYSIS_MODEL", "gpt-4o")


@dataclass(frozen=True)
class SalesFlowConfig:
    """Message-count thresholds and agreement gates for the sales flow."""

    needs_assessment_after: int = _safe_int("NEEDS_ASSESSMENT_AFTER", "4")
    presentation_after: int = _safe_int("PRESENTATION_AFTER", "8")
    objections_after: int = _safe_int("OBJECTIONS_AFTER", "12")
    closing_after: int = _safe_int("CLOSING_AFTER", "16")
    follow_up_after: int = _safe_int("FOLLOW_UP_AFTER", "24")
    yes_ladder_min_agreements: int = _safe_int("YES_LADDER_MIN_AGREEMENTS", "2")
    gift_letter_min_agreements: int = _safe_int("GIFT_LETTER_MIN_AGREEMENTS", "4")
    topic_snippet_length: int = _safe_int("TOPIC_SNIPPET_LENGTH", "20")


@dataclass(frozen=True)
class ServerConfig:
    """HTTP server settings."""

    host: str = os.getenv("SERVER_HOST", "127.0.0.1")
    port: int = _safe_int("SERVER_PORT", "8000")
    max_message_length: int = _safe_int("MAX_MESSAGE_LENGTH", "2000")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    dealership: DealershipConfig = field(default_factory=DealershipConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    sales: SalesFlowConfig = field(default_factory=SalesFlowConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if not 0.0 <= config.model.chat_temperature <= 2.0:
        raise ValueError(
            f"CHAT_TEMPERATURE must be between 0.0 and 2.0, got {config.model.chat_temperature}"
        )

    sales = config.sales
    thresholds = [
        ("NEEDS_ASSESSMENT_AFTER", sales.needs_assessment_after),
        ("PRESENTATION_AFTER", sales.presentation_after),
        ("OBJECTIONS_AFTER", sales.objections_after),
        ("CLOSING_AFTER", sales.closing_after),
        ("FOLLOW_UP_AFTER", sales.follow_up_after),
    ]
    for name, value in thresholds:
        if value < 0:
            raise ValueError(f"{name} must be >= 0, got {value}")
    for (prev_name, prev), (name, value) in zip(thresholds, thresholds[1:]):
        if value < prev:
            raise ValueError(f"{name} ({value}) must not be below {prev_name} ({prev})")

    if sales.yes_ladder_min_agreements < 0:
        raise ValueError(
            f"YES_LADDER_MIN_AGREEMENTS must be >= 0, got {sales.yes_ladder_min_agreements}"
        )
    if sales.gift_letter_min_agreements < 0:
        raise ValueError(
            f"GIFT_LETTER_MIN_AGREEMENTS must be >= 0, got {sales.gift_letter_min_agreements}"
        )
    if sales.topic_snippet_length < 1:
        raise ValueError(
            f"TOPIC_SNIPPET_LENGTH must be >= 1, got {sales.topic_snippet_length}"
        )
    if not 1 <= config.server.port <= 65535:
        raise ValueError(f"SERVER_PORT must be between 1 and 65535, got {config.server.port}")
    if config.server.max_message_length < 1:
        raise ValueError(
            f"MAX_MESSAGE_LENGTH must be >= 1, got {config.server.max_message_length}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.dealership.name)
    return config


# Singleton instance
settings = load_config()
