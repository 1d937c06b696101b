"""Game rule configuration."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict, Literal

from pydantic import BaseModel, Field, field_validator

from seabattle.engine.placement import FLEET, PlacementPolicy
from seabattle.engine.ship import ShipKind


class GameConfig(BaseModel):
    """Tunable rules and pacing for a match."""

    grid_size: Literal[10] = 10
    fleet: tuple[ShipKind, ...] = FLEET
    allow_adjacent: bool = False
    max_random_placement_attempts: int = Field(default=1000, ge=0)
    computer_delay_seconds: float = Field(default=0.0, ge=0.0)
    rng_seed: int | None = None

    @field_validator("fleet")
    @classmethod
    def _fleet_kinds_unique(cls, value: tuple[ShipKind, ...]) -> tuple[ShipKind, ...]:
        if not value:
            raise ValueError("A fleet needs at least one ship.")
        if len(set(value)) != len(value):
            raise ValueError("Each ship kind may appear only once in a fleet.")
        return value

    @classmethod
    def from_env(cls, **overrides: Any) -> "GameConfig":
        """Construct config from `SEABATTLE_*` environment variables."""

        data: Dict[str, Any] = {}
        allow_adjacent = os.getenv("SEABATTLE_ALLOW_ADJACENT")
        if allow_adjacent is not None:
            data["allow_adjacent"] = allow_adjacent.strip().lower() in {"1", "true", "yes", "on"}

        env_fields = {
            "max_random_placement_attempts": "SEABATTLE_MAX_PLACEMENT_ATTEMPTS",
            "computer_delay_seconds": "SEABATTLE_COMPUTER_DELAY",
            "rng_seed": "SEABATTLE_SEED",
        }
        for field_name, env_name in env_fields.items():
            value = os.getenv(env_name)
            if value is not None and value.strip():
                data[field_name] = value.strip()

        fleet = os.getenv("SEABATTLE_FLEET")
        if fleet:
            data["fleet"] = tuple(part.strip().lower() for part in fleet.split(",") if part.strip())

        data.update(overrides)
        return cls(**data)

    def placement_policy(self) -> PlacementPolicy:
        return PlacementPolicy(
            allow_adjacent=self.allow_adjacent,
            max_random_attempts=self.max_random_placement_attempts,
        )


@lru_cache(maxsize=1)
def load_game_config() -> GameConfig:
    """Load and cache game config from the environment."""

    return GameConfig.from_env()
