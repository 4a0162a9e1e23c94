from app.services.attacks import get_attack_success_chance
from app.services.passwords import calculate_password_strength
from app.services.scoring import calculate_vulnerability, compute_level

__all__ = [
    "calculate_password_strength",
    "calculate_vulnerability",
    "compute_level",
    "get_attack_success_chance",
]
