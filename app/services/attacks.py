"""Attack catalogue and per-attack success probability.

Two independent layers decide the chance of an attack:

1. A fully hardened account (all 12 measures on and completely configured)
   cannot be hacked: the chance is 0 whatever the attack.
2. Otherwise each attack starts from its base chance and loses a fixed
   amount for every protection that counters it.
"""
from typing import Callable

from app.schemas.attacks import AttackStatusSchema, AttackType
from app.schemas.game import CasualUser, GameState, Hacker
from app.services.passwords import STRONG_PASSWORD_THRESHOLD, calculate_password_strength
from app.services.scoring import VAULT_MIN_ENTRIES, clamp_score

ATTACK_TYPES: list[AttackType] = [
    AttackType(
        id="social_engineering",
        name="Social Engineering",
        description="Manipulate the user into revealing information",
        cooldown=15000,
        icon="Users",
    ),
    AttackType(
        id="phishing",
        name="Phishing Email",
        description="Send a fake email to steal credentials",
        cooldown=20000,
        icon="Mail",
    ),
    AttackType(
        id="brute_force",
        name="Brute Force",
        description="Try to guess the password",
        cooldown=30000,
        icon="Lock",
    ),
    AttackType(
        id="keylogger",
        name="Keylogger",
        description="Capture the user's keystrokes",
        cooldown=25000,
        icon="Keyboard",
    ),
    AttackType(
        id="password_leak",
        name="Database Leak",
        description="Exploit a leaked credentials database",
        cooldown=35000,
        icon="Database",
    ),
    AttackType(
        id="session_hijacking",
        name="Session Hijacking",
        description="Steal the user's active session token",
        cooldown=28000,
        icon="Cookie",
    ),
    AttackType(
        id="man_in_the_middle",
        name="Man-in-the-Middle",
        description="Intercept traffic between the user and the server",
        cooldown=32000,
        icon="Network",
    ),
    AttackType(
        id="credential_stuffing",
        name="Credential Stuffing",
        description="Reuse credentials leaked from other sites",
        cooldown=26000,
        icon="KeyRound",
    ),
    AttackType(
        id="sim_swap",
        name="SIM Swap",
        description="Clone the SIM card to intercept SMS codes",
        cooldown=40000,
        icon="Smartphone",
    ),
    AttackType(
        id="malware_injection",
        name="Malware Injection",
        description="Infect the user's device with malicious software",
        cooldown=33000,
        icon="Bug",
    ),
    AttackType(
        id="dns_spoofing",
        name="DNS Spoofing",
        description="Redirect the user to a fake site through DNS",
        cooldown=29000,
        icon="Globe",
    ),
    AttackType(
        id="zero_day_exploit",
        name="Zero-Day Exploit",
        description="Exploit an unknown vulnerability",
        cooldown=50000,
        icon="Zap",
    ),
]

_ATTACKS_BY_ID = {attack.id: attack for attack in ATTACK_TYPES}

DEFAULT_BASE_CHANCE = 50


def get_attack_type(attack_id: str) -> AttackType | None:
    return _ATTACKS_BY_ID.get(attack_id)


# ---------- deduction predicates ----------
# Each takes (user, password_strength).

Predicate = Callable[[CasualUser, int], bool]


def _on(field: str) -> Predicate:
    return lambda user, strength: getattr(user.security_measures, field)


def _strong_password(user: CasualUser, strength: int) -> bool:
    return user.security_measures.strong_password or strength >= STRONG_PASSWORD_THRESHOLD


def _ip_whitelist_enabled(user: CasualUser, strength: int) -> bool:
    return user.security_measures.ip_whitelist and user.security_config.ip_whitelist_enabled


def _ip_whitelist_active(user: CasualUser, strength: int) -> bool:
    return user.security_measures.ip_whitelist and user.security_config.ip_whitelist_active


def _email_alerts(user: CasualUser, strength: int) -> bool:
    return user.security_measures.login_alerts and user.security_config.email_alerts


def _any_login_alert(user: CasualUser, strength: int) -> bool:
    return user.security_measures.login_alerts and user.security_config.any_login_alert


def _trusted_devices(user: CasualUser, strength: int) -> bool:
    return user.security_measures.trusted_devices and user.security_config.has_trusted_devices


def _sms_verified(user: CasualUser, strength: int) -> bool:
    return user.security_measures.sms_backup and user.security_config.sms_verified


def _vault_filled(user: CasualUser, strength: int) -> bool:
    return user.security_measures.password_vault and len(user.password_vault) >= VAULT_MIN_ENTRIES


# attack id -> (base chance, [(predicate, deduction), ...])
ATTACK_RULES: dict[str, tuple[int, list[tuple[Predicate, int]]]] = {
    "brute_force": (80, [
        (_on("authenticator_app"), 70),
        (_on("two_factor_auth"), 60),
        (_strong_password, 40),
        (_ip_whitelist_enabled, 20),
        (_on("session_management"), 15),
    ]),
    "phishing": (70, [
        (_on("authenticator_app"), 40),
        (_on("two_factor_auth"), 30),
        (_on("email_verification"), 25),
        (_email_alerts, 20),
        (_trusted_devices, 15),
    ]),
    "social_engineering": (65, [
        (_on("two_factor_auth"), 25),
        (_on("security_questions"), 20),
        (_any_login_alert, 20),
    ]),
    "keylogger": (60, [
        (_on("authenticator_app"), 30),
        (_on("two_factor_auth"), 25),
        (_on("session_management"), 15),
    ]),
    "password_leak": (75, [
        (_on("authenticator_app"), 50),
        (_on("two_factor_auth"), 40),
        (_on("strong_password"), 20),
        (_sms_verified, 15),
    ]),
    "session_hijacking": (50, [
        (_any_login_alert, 25),
        (_on("session_management"), 20),
        (_trusted_devices, 15),
        (_on("authenticator_app"), 10),
    ]),
    "man_in_the_middle": (50, [
        (_trusted_devices, 30),
        (_on("authenticator_app"), 20),
        (_on("two_factor_auth"), 10),
    ]),
    "credential_stuffing": (50, [
        (_vault_filled, 25),
        (_on("authenticator_app"), 15),
        (_on("two_factor_auth"), 10),
        (_on("strong_password"), 5),
    ]),
    "sim_swap": (50, [
        (_on("authenticator_app"), 40),
        (_on("two_factor_auth"), 10),
    ]),
    "malware_injection": (50, [
        (_trusted_devices, 30),
        (_on("authenticator_app"), 20),
        (_on("session_management"), 15),
    ]),
    "dns_spoofing": (50, [
        (_trusted_devices, 25),
        (_any_login_alert, 15),
        (_on("authenticator_app"), 10),
        (_on("email_verification"), 5),
    ]),
    "zero_day_exploit": (50, [
        (_on("authenticator_app"), 25),
        (_on("two_factor_auth"), 20),
        (_ip_whitelist_active, 10),
        (_on("session_management"), 5),
    ]),
}


def is_perfect_defense(user: CasualUser, strength: int | None = None) -> bool:
    """All 12 measures on and every one of them fully configured."""
    if strength is None:
        strength = calculate_password_strength(user.password)
    config = user.security_config
    return (
        user.security_measures.all_enabled()
        and strength >= STRONG_PASSWORD_THRESHOLD
        and config.ip_whitelist_active
        and config.has_trusted_devices
        and config.any_login_alert
        and config.sms_verified
        and len(user.password_vault) >= VAULT_MIN_ENTRIES
    )


def get_attack_success_chance(attack_id: str, user: CasualUser) -> int:
    """Return success probability 0..100 of attack_id against user."""
    strength = calculate_password_strength(user.password)
    if is_perfect_defense(user, strength):
        return 0

    base, deductions = ATTACK_RULES.get(attack_id, (DEFAULT_BASE_CHANCE, []))
    chance = base
    for applies, amount in deductions:
        if applies(user, strength):
            chance -= amount
    return clamp_score(chance)


# ---------- cooldowns ----------

def cooldown_remaining_ms(hacker: Hacker, attack_id: str, now: int) -> int:
    until = hacker.cooldowns.get(attack_id)
    if until is None:
        return 0
    return max(0, until - now)


def is_on_cooldown(hacker: Hacker, attack_id: str, now: int) -> bool:
    """Usable only when no entry exists or now >= the stored timestamp."""
    until = hacker.cooldowns.get(attack_id)
    return until is not None and until > now


def describe_attacks(state: GameState, now: int) -> list[AttackStatusSchema]:
    """Catalogue with the live success chance and cooldown of every attack."""
    return [
        AttackStatusSchema(
            id=attack.id,
            name=attack.name,
            description=attack.description,
            cooldown=attack.cooldown,
            icon=attack.icon,
            success_chance=get_attack_success_chance(attack.id, state.casual_user),
            on_cooldown=is_on_cooldown(state.hacker, attack.id, now),
            cooldown_remaining_ms=cooldown_remaining_ms(state.hacker, attack.id, now),
        )
        for attack in ATTACK_TYPES
    ]
