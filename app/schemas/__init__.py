from app.schemas.attacks import AttackStatusSchema, AttackType, StatsOutSchema
from app.schemas.game import GameState, Notification, SecurityMeasure

__all__ = [
    "AttackStatusSchema",
    "AttackType",
    "GameState",
    "Notification",
    "SecurityMeasure",
    "StatsOutSchema",
]
