"""Settings read from the environment (a .env file in the working directory is picked up as well)."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from src.core.shared_types import FinishRule

load_dotenv()


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(slots=True)
class Settings:
    DATABASE_URL: str = os.getenv("LUDO_DATABASE_URL", "sqlite:///./ludo.db")
    DB_ECHO: bool = _env_flag("LUDO_DB_ECHO")

    # Rule variant used for newly created matches
    FINISH_RULE: str = os.getenv("LUDO_FINISH_RULE", FinishRule.OVERSHOOT.value)

    # --- Pacing (seconds) ---
    # Only the scheduler and the presentation layer wait. The engine never does.
    TURN_TIMEOUT_SECONDS: float = float(os.getenv("LUDO_TURN_TIMEOUT_SECONDS", 15))
    DICE_SETTLE_SECONDS: float = float(os.getenv("LUDO_DICE_SETTLE_SECONDS", 0.6))
    HOP_SECONDS: float = float(os.getenv("LUDO_HOP_SECONDS", 0.3))
    BOT_THINK_SECONDS: float = float(os.getenv("LUDO_BOT_THINK_SECONDS", 1.0))
    NO_MOVE_DELAY_SECONDS: float = float(os.getenv("LUDO_NO_MOVE_DELAY_SECONDS", 1.0))

    def __post_init__(self) -> None:
        if self.FINISH_RULE not in list(FinishRule):
            raise ValueError(
                f"LUDO_FINISH_RULE must be one of {', '.join(FinishRule)}, got {self.FINISH_RULE!r}"
            )
        delays = {
            "TURN_TIMEOUT_SECONDS": self.TURN_TIMEOUT_SECONDS,
            "DICE_SETTLE_SECONDS": self.DICE_SETTLE_SECONDS,
            "HOP_SECONDS": self.HOP_SECONDS,
            "BOT_THINK_SECONDS": self.BOT_THINK_SECONDS,
            "NO_MOVE_DELAY_SECONDS": self.NO_MOVE_DELAY_SECONDS,
        }
        for name, value in delays.items():
            if value < 0:
                raise ValueError(f"{name} cannot be negative, got {value}")

    @property
    def finish_rule(self) -> FinishRule:
        return FinishRule(self.FINISH_RULE)


settings = Settings()
