"""Configuration management with environment variable support."""

import os
from dataclasses import dataclass, field


def _env_float(name: str, default: str) -> float:
    return float(os.getenv(name, default))


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class GameConfig:
    """Table payout configuration."""

    blackjack_payout: float = field(
        default_factory=lambda: _env_float("BLACKJACK_PAYOUT", "1.5")
    )

    def __post_init__(self) -> None:
        if self.blackjack_payout < 1.0:
            raise ValueError("blackjack_payout must be at least 1.0")


@dataclass(frozen=True)
class PresentationConfig:
    """Delays (in seconds) the coordinator waits before each rule step."""

    step_delay: float = field(
        default_factory=lambda: _env_float("BLACKJACK_STEP_DELAY", "0.4")
    )
    dealer_draw_delay: float = field(
        default_factory=lambda: _env_float("BLACKJACK_DEALER_DRAW_DELAY", "0.6")
    )
    settle_delay: float = field(
        default_factory=lambda: _env_float("BLACKJACK_SETTLE_DELAY", "0.5")
    )
    gated: bool = field(default_factory=lambda: _env_bool("BLACKJACK_GATED", "true"))

    def __post_init__(self) -> None:
        for name in ("step_delay", "dealer_draw_delay", "settle_delay"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    debug: bool = field(default_factory=lambda: _env_bool("DEBUG", "false"))
    auto_save: bool = field(default_factory=lambda: _env_bool("BLACKJACK_AUTO_SAVE", "true"))

    game: GameConfig = field(default_factory=GameConfig)
    presentation: PresentationConfig = field(default_factory=PresentationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# Global configuration instance
config = AppConfig()
