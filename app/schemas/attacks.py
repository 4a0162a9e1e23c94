"""Pydantic schemas for the attack catalogue and stats."""
from app.schemas.game import GameModel


class AttackType(GameModel):
    id: str
    name: str
    description: str
    cooldown: int  # milliseconds
    icon: str


class AttackStatusSchema(GameModel):
    id: str
    name: str
    description: str
    cooldown: int
    icon: str
    success_chance: int
    on_cooldown: bool
    cooldown_remaining_ms: int


class StatsOutSchema(GameModel):
    vulnerability_score: int
    security_level: int
    level: str
    attacks_attempted: int
    attacks_successful: int
    account_compromised: bool
    active_measures: int
    vault_entries: int


class GeneratedPasswordSchema(GameModel):
    password: str
    strength: int
