"""Vulnerability score from the enabled security measures, and security level labels."""
from app.schemas.game import CasualUser

MIN_SCORE = 0
MAX_SCORE = 100

# Vault bonus (and vault auto-activation) needs at least this many entries.
VAULT_MIN_ENTRIES = 3

# Reduction per measure, applied only when the flag is on and the
# configuration condition below holds.
MEASURE_REDUCTIONS = {
    "strong_password": 10,
    "two_factor_auth": 15,
    "email_verification": 10,
    "security_questions": 10,
    "backup_email": 5,
    "authenticator_app": 20,
    "sms_backup": 12,         # sms verified
    "trusted_devices": 15,    # at least one device
    "login_alerts": 10,       # email or sms alerts
    "session_management": 12,
    "ip_whitelist": 18,       # enabled with at least one IP
    "password_vault": 8,      # vault has 3+ entries
}

# Security level = 100 - vulnerability
LEVEL_BANDS = [
    (0, 20, "Exposed"),
    (21, 40, "Weak"),
    (41, 60, "Fair"),
    (61, 80, "Strong"),
    (81, 100, "Fortified"),
]


def _measure_counts(user: CasualUser, field: str) -> bool:
    measures = user.security_measures
    config = user.security_config
    if not getattr(measures, field):
        return False
    if field == "sms_backup":
        return config.sms_verified
    if field == "trusted_devices":
        return config.has_trusted_devices
    if field == "login_alerts":
        return config.any_login_alert
    if field == "ip_whitelist":
        return config.ip_whitelist_active
    if field == "password_vault":
        return len(user.password_vault) >= VAULT_MIN_ENTRIES
    return True


def total_reduction(user: CasualUser) -> int:
    """Sum of reductions of all counting measures (uncapped)."""
    return sum(amount for field, amount in MEASURE_REDUCTIONS.items() if _measure_counts(user, field))


def clamp_score(value: int) -> int:
    return max(MIN_SCORE, min(MAX_SCORE, value))


def calculate_vulnerability(user: CasualUser) -> int:
    """Return vulnerability 0..100 (100 = fully exposed)."""
    return clamp_score(MAX_SCORE - total_reduction(user))


def compute_security_level(vulnerability: int) -> int:
    return MAX_SCORE - clamp_score(vulnerability)


def compute_level(vulnerability: int) -> str:
    """Return level label for the security level derived from vulnerability."""
    level = compute_security_level(vulnerability)
    for low, high, label in LEVEL_BANDS:
        if low <= level <= high:
            return label
    return "Fair"  # fallback
