"""Game state transitions.

Every public function here takes the current immutable ``GameState`` plus the
request arguments and a ``GameContext`` (clock, random source, id factory) and
returns the next ``GameState``. Nothing is written anywhere: persisting the
result is the caller's job. Operations either return a complete new snapshot
with the vulnerability score recomputed, or raise a ``GameError`` and leave
the caller holding the unchanged prior state.
"""
import logging
import random
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from app.core.errors import InvalidRequestError, NotFoundError, PreconditionError
from app.schemas.attacks import StatsOutSchema
from app.schemas.game import (
    Actor,
    ActivityLogEntry,
    AttackFlow,
    AuthenticatorAppConfig,
    BackupEmailFlow,
    CasualUser,
    CtaType,
    GameState,
    IpWhitelistConfig,
    LoginAlertsConfig,
    MEASURE_FIELDS,
    Notification,
    NotificationType,
    PasswordVaultEntry,
    RecoveryEmailConfig,
    SecurityMeasure,
    SecurityQuestionConfig,
    SecurityQuestionsFlow,
    SessionManagementConfig,
    SmsBackupConfig,
    StrongPasswordConfig,
    TrustedDevicesConfig,
    TwoFactorFlow,
)
from app.schemas.requests import (
    ConfigureAuthenticatorApp,
    ConfigureIpWhitelist,
    ConfigureLoginAlerts,
    ConfigureSessionManagement,
    ConfigureSmsBackup,
    ConfigureStrongPassword,
    ConfigureTrustedDevices,
)
from app.services.attacks import get_attack_success_chance, get_attack_type, is_on_cooldown
from app.services.notifications import (
    create_attack_notification,
    create_email_verification_confirmation,
    create_recovery_email_confirmation,
    create_two_factor_confirmation,
    create_weak_password_warning,
)
from app.services.passwords import STRONG_PASSWORD_THRESHOLD, calculate_password_strength
from app.services.scoring import (
    VAULT_MIN_ENTRIES,
    calculate_vulnerability,
    compute_level,
    compute_security_level,
)

logger = logging.getLogger(__name__)

MEASURE_NAMES = {
    SecurityMeasure.TWO_FACTOR_AUTH: "Two-Factor Authentication",
    SecurityMeasure.STRONG_PASSWORD: "Strong Password",
    SecurityMeasure.EMAIL_VERIFICATION: "Email Verification",
    SecurityMeasure.SECURITY_QUESTIONS: "Security Questions",
    SecurityMeasure.BACKUP_EMAIL: "Recovery Email",
    SecurityMeasure.AUTHENTICATOR_APP: "Authenticator App",
    SecurityMeasure.SMS_BACKUP: "SMS Backup",
    SecurityMeasure.TRUSTED_DEVICES: "Trusted Devices",
    SecurityMeasure.LOGIN_ALERTS: "Login Alerts",
    SecurityMeasure.SESSION_MANAGEMENT: "Session Management",
    SecurityMeasure.IP_WHITELIST: "IP Whitelist",
    SecurityMeasure.PASSWORD_VAULT: "Password Vault",
}

# Notification types that hand the account to the attacker when accepted
COMPROMISING_TYPES = {
    NotificationType.PHISHING,
    NotificationType.SOCIAL_ENGINEERING,
    NotificationType.SUSPICIOUS_LOGIN,
}

SCENARIO_COUNT = 3


def _epoch_ms() -> int:
    return int(time.time() * 1000)


def _uuid() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class GameContext:
    """Everything a transition needs from the outside world."""

    now: Callable[[], int] = field(default=_epoch_ms)
    random: Callable[[], float] = field(default=random.random)
    new_id: Callable[[], str] = field(default=_uuid)


# ---------- helpers ----------

def new_game_state() -> GameState:
    return GameState()


def _log(
    state: GameState,
    ctx: GameContext,
    actor: Actor,
    action: str,
    detail: str | None = None,
    now: int | None = None,
) -> list[ActivityLogEntry]:
    """Return the activity log with one more entry appended."""
    entry = ActivityLogEntry(
        id=ctx.new_id(),
        timestamp=ctx.now() if now is None else now,
        actor=actor,
        action=action,
        detail=detail,
    )
    return [*state.activity_log, entry]


def _commit(state: GameState, **update) -> GameState:
    """Apply update and recompute the vulnerability score from the resulting user."""
    new_state = state.model_copy(update=update)
    return new_state.model_copy(
        update={"vulnerability_score": calculate_vulnerability(new_state.casual_user)}
    )


def _with_user(state: GameState, **update) -> CasualUser:
    return state.casual_user.model_copy(update=update)


def _with_measure(user: CasualUser, measure: SecurityMeasure, enabled: bool) -> dict:
    return {"security_measures": user.security_measures.with_flag(measure, enabled)}


def _with_config(user: CasualUser, **update) -> dict:
    return {"security_config": user.security_config.model_copy(update=update)}


def _find_notification(state: GameState, notification_id: str) -> Notification:
    for notification in state.notifications:
        if notification.id == notification_id:
            return notification
    logger.warning(f"Unknown notification id {notification_id}")
    raise NotFoundError("Notification not found")


def _merge_flow(current, data: dict | None, **fixed) -> dict:
    """Current wizard fields overlaid with fixed values then client data, all keyed by wire name."""
    merged = current.model_dump(by_alias=True)
    merged.update(fixed)
    for key, value in (data or {}).items():
        merged[to_camel(key) if "_" in key else key] = value
    return merged


def _has_pending(state: GameState, cta_type: CtaType) -> bool:
    return any(
        n.is_active and n.requires_action and n.cta_type == cta_type
        for n in state.notifications
    )


# ---------- game lifecycle ----------

def start_game(state: GameState, ctx: GameContext) -> GameState:
    """Start a new round from a clean slate; the round counter carries over."""
    fresh = new_game_state()
    return _commit(
        fresh,
        game_started=True,
        tutorial_completed=True,
        round_id=state.round_id + 1,
    )


def complete_tutorial(state: GameState, ctx: GameContext) -> GameState:
    return _commit(state, tutorial_completed=True)


def reset_game(state: GameState, ctx: GameContext) -> GameState:
    """Replace the whole snapshot. The only way account_compromised goes back to False."""
    return _commit(new_game_state())


# ---------- account ----------

def create_account(state: GameState, name: str, email: str, password: str, ctx: GameContext) -> GameState:
    strength = calculate_password_strength(password)
    user = state.casual_user
    user = _with_user(
        state,
        name=name,
        email=email,
        password=password,
        account_created=True,
        account_creation_step=3,
        **_with_measure(user, SecurityMeasure.STRONG_PASSWORD, strength >= STRONG_PASSWORD_THRESHOLD),
    )
    log = _log(
        state, ctx, "user", "Account created",
        f"Name: {name}, Email: {email}, Password strength: {strength}%",
    )
    notifications = list(state.notifications)
    if strength < STRONG_PASSWORD_THRESHOLD:
        notifications.append(create_weak_password_warning(strength, ctx.new_id))
    return _commit(state, casual_user=user, activity_log=log, notifications=notifications)


def set_account_step(
    state: GameState,
    step: int,
    ctx: GameContext,
    name: str | None = None,
    email: str | None = None,
    password: str | None = None,
) -> GameState:
    """Move the account wizard to step, keeping any profile field supplied."""
    update = {"account_creation_step": step}
    for key, value in (("name", name), ("email", email), ("password", password)):
        if value is not None:
            update[key] = value
    return _commit(state, casual_user=_with_user(state, **update))


# ---------- security measures ----------

def update_security(state: GameState, measure: SecurityMeasure, enabled: bool, ctx: GameContext) -> GameState:
    """Toggle a measure.

    Two-factor auth, email verification and the recovery email only turn on
    through their confirmation notification, so enabling them stages that
    notification instead of flipping the flag.
    """
    if enabled and measure == SecurityMeasure.TWO_FACTOR_AUTH:
        return request_two_factor(state, ctx)
    if enabled and measure == SecurityMeasure.EMAIL_VERIFICATION:
        return request_email_verification(state, ctx)
    if enabled and measure == SecurityMeasure.BACKUP_EMAIL:
        recovery = state.casual_user.security_config.recovery_email
        if recovery is None or not recovery.email:
            logger.warning("Recovery email requested before an address was configured")
            raise PreconditionError("Configure a recovery email first")
        return configure_recovery_email(state, recovery.email, ctx)

    user = _with_user(state, **_with_measure(state.casual_user, measure, enabled))
    log = _log(
        state, ctx, "user",
        "Protection enabled" if enabled else "Protection disabled",
        MEASURE_NAMES[measure],
    )
    return _commit(state, casual_user=user, activity_log=log)


def configure_strong_password(state: GameState, password: str, ctx: GameContext) -> GameState:
    """Change the password. Strength is always computed here, never taken from the client."""
    strength = calculate_password_strength(password)
    user = state.casual_user
    user = _with_user(
        state,
        password=password,
        **_with_measure(user, SecurityMeasure.STRONG_PASSWORD, strength >= STRONG_PASSWORD_THRESHOLD),
        **_with_config(user, strong_password=StrongPasswordConfig(password=password, strength=strength)),
    )
    log = _log(state, ctx, "user", "Password changed", f"Password strength: {strength}%")
    return _commit(state, casual_user=user, activity_log=log)


def configure_security_question(state: GameState, question: str, answer: str, ctx: GameContext) -> GameState:
    user = state.casual_user
    user = _with_user(
        state,
        **_with_measure(user, SecurityMeasure.SECURITY_QUESTIONS, True),
        **_with_config(user, security_question=SecurityQuestionConfig(question=question, answer=answer)),
    )
    log = _log(state, ctx, "user", "Protection enabled", MEASURE_NAMES[SecurityMeasure.SECURITY_QUESTIONS])
    return _commit(state, casual_user=user, activity_log=log)


def request_two_factor(state: GameState, ctx: GameContext) -> GameState:
    """Stage a 2FA confirmation; no-op while one is already pending."""
    if _has_pending(state, CtaType.CONFIRM_2FA):
        return _commit(state)
    notification = create_two_factor_confirmation(ctx.new_id)
    return _commit(state, notifications=[*state.notifications, notification])


def request_email_verification(state: GameState, ctx: GameContext) -> GameState:
    """Stage an email verification confirmation; no-op while one is already pending."""
    if _has_pending(state, CtaType.CONFIRM_EMAIL_VERIFICATION):
        return _commit(state)
    notification = create_email_verification_confirmation(state.casual_user.email, ctx.new_id)
    return _commit(state, notifications=[*state.notifications, notification])


def configure_recovery_email(state: GameState, email: str, ctx: GameContext) -> GameState:
    """Store the recovery address unverified and stage its confirmation.

    The backup email measure stays off until the new address is confirmed.
    """
    user = _with_user(
        state,
        **_with_measure(state.casual_user, SecurityMeasure.BACKUP_EMAIL, False),
        **_with_config(state.casual_user, recovery_email=RecoveryEmailConfig(email=email, verified=False)),
    )
    notification = create_recovery_email_confirmation(email, ctx.new_id)
    return _commit(state, casual_user=user, notifications=[*state.notifications, notification])


def _merge_devices(current: TrustedDevicesConfig | None, request: ConfigureTrustedDevices) -> TrustedDevicesConfig:
    existing = list(current.devices) if current else []
    known = {device.id for device in existing}
    added = [device for device in request.config.devices if device.id not in known]
    return TrustedDevicesConfig(devices=existing + added)


def _merge_ips(current: IpWhitelistConfig | None, request: ConfigureIpWhitelist) -> IpWhitelistConfig:
    ips = list(current.allowed_ips) if current else []
    for ip in request.config.allowed_ips:
        if ip not in ips:
            ips.append(ip)
    return IpWhitelistConfig(enabled=request.config.enabled, allowed_ips=ips)


def configure_measure(state: GameState, request, ctx: GameContext) -> GameState:
    """Apply a typed configuration payload to its measure.

    Trusted devices are merged by id and whitelisted IPs are merged as a set.
    The measure flag follows the payload for the IP whitelist (``enabled``)
    and login alerts (any alert kind on); every other measure turns on.
    """
    if isinstance(request, ConfigureStrongPassword):
        return configure_strong_password(state, request.config.password, ctx)

    user = state.casual_user
    config = user.security_config
    enabled = True
    if isinstance(request, ConfigureAuthenticatorApp):
        update = {"authenticator_app": AuthenticatorAppConfig(
            secret=request.config.secret,
            recovery_codes=request.config.recovery_codes,
        )}
    elif isinstance(request, ConfigureSmsBackup):
        update = {"sms_backup": SmsBackupConfig(
            phone_number=request.config.phone_number,
            verified=request.config.verified,
        )}
    elif isinstance(request, ConfigureTrustedDevices):
        update = {"trusted_devices": _merge_devices(config.trusted_devices, request)}
    elif isinstance(request, ConfigureLoginAlerts):
        alerts = LoginAlertsConfig(
            email_alerts=request.config.email_alerts,
            sms_alerts=request.config.sms_alerts,
            new_location_alerts=request.config.new_location_alerts,
        )
        update = {"login_alerts": alerts}
        enabled = alerts.email_alerts or alerts.sms_alerts or alerts.new_location_alerts
    elif isinstance(request, ConfigureSessionManagement):
        update = {"session_management": SessionManagementConfig(
            max_sessions=request.config.max_sessions,
            auto_logout_minutes=request.config.auto_logout_minutes,
            active_sessions=request.config.active_sessions,
        )}
    elif isinstance(request, ConfigureIpWhitelist):
        update = {"ip_whitelist": _merge_ips(config.ip_whitelist, request)}
        enabled = request.config.enabled
    else:
        raise InvalidRequestError(f"Unsupported measure: {getattr(request, 'measure', request)}")

    measure = SecurityMeasure(request.measure)
    user = _with_user(state, **_with_measure(user, measure, enabled), **_with_config(user, **update))
    log = _log(
        state, ctx, "user",
        "Protection configured" if enabled else "Protection disabled",
        MEASURE_NAMES[measure],
    )
    return _commit(state, casual_user=user, activity_log=log)


# ---------- attacks ----------

def execute_attack(state: GameState, attack_id: str, ctx: GameContext) -> GameState:
    """Resolve one attack attempt into the next snapshot."""
    attack = get_attack_type(attack_id)
    if attack is None:
        logger.warning(f"Unknown attack id {attack_id}")
        raise NotFoundError("Attack not found")

    now = ctx.now()
    hacker = state.hacker
    if is_on_cooldown(hacker, attack_id, now):
        logger.warning(f"Attack {attack_id} rejected: on cooldown until {hacker.cooldowns[attack_id]}")
        raise PreconditionError("Attack on cooldown")

    chance = get_attack_success_chance(attack_id, state.casual_user)
    successful = ctx.random() * 100 < chance

    notification = create_attack_notification(attack_id, hacker, ctx.new_id)

    cursor = hacker.social_engineering_scenario_cursor
    if attack_id == "social_engineering":
        cursor = (cursor + 1) % SCENARIO_COUNT

    hacker = hacker.model_copy(update={
        "attacks_attempted": hacker.attacks_attempted + 1,
        "attacks_successful": hacker.attacks_successful + (1 if successful else 0),
        "cooldowns": {**hacker.cooldowns, attack_id: now + attack.cooldown},
        "social_engineering_scenario_cursor": cursor,
    })
    user = _with_user(state, account_compromised=state.casual_user.account_compromised or successful)
    log = _log(
        state, ctx, "hacker",
        f"Attack executed: {attack.name}",
        f"{'Success!' if successful else 'Failed.'} Success chance: {round(chance)}%",
        now=now,
    )
    logger.info(f"Attack {attack_id} resolved: chance={chance}% successful={successful}")

    return _commit(
        state,
        casual_user=user,
        hacker=hacker,
        notifications=[*state.notifications, notification],
        activity_log=log,
    )


def update_attack_flow(state: GameState, attack_id: str, step: int, data: dict | None, ctx: GameContext) -> GameState:
    """Advance an attack wizard; progress restarts at 0 unless data sets it."""
    if get_attack_type(attack_id) is None:
        raise NotFoundError("Attack not found")
    current = state.hacker.attack_flows.get(attack_id, AttackFlow())
    try:
        flow = AttackFlow.model_validate(_merge_flow(current, data, step=step, progress=0))
    except ValidationError as e:
        raise InvalidRequestError(f"Invalid attack flow data: {e.errors()[0]['msg']}") from e
    hacker = state.hacker.model_copy(update={"attack_flows": {**state.hacker.attack_flows, attack_id: flow}})
    return _commit(state, hacker=hacker)


# ---------- notifications ----------

def respond_to_notification(
    state: GameState,
    notification_id: str,
    accepted: bool,
    ctx: GameContext,
) -> GameState:
    """Record the user's answer to a notification.

    Accepting a phishing, social engineering or suspicious login notification
    compromises the account. Accepting a confirmation turns on its measure.
    """
    notification = _find_notification(state, notification_id)
    if not notification.is_active:
        raise PreconditionError("Notification already answered")

    notifications = [
        n.model_copy(update={"is_active": False, "user_fell_for": accepted}) if n.id == notification_id else n
        for n in state.notifications
    ]

    user = state.casual_user
    compromised = user.account_compromised or (accepted and notification.type in COMPROMISING_TYPES)
    update = {"account_compromised": compromised}

    if accepted and notification.cta_type == CtaType.CONFIRM_EMAIL:
        recovery = user.security_config.recovery_email
        if recovery is not None:
            update.update(_with_measure(user, SecurityMeasure.BACKUP_EMAIL, True))
            update.update(_with_config(user, recovery_email=recovery.model_copy(update={"verified": True})))
    elif accepted and notification.cta_type == CtaType.CONFIRM_2FA:
        update.update(_with_measure(user, SecurityMeasure.TWO_FACTOR_AUTH, True))
    elif accepted and notification.cta_type == CtaType.CONFIRM_EMAIL_VERIFICATION:
        update.update(_with_measure(user, SecurityMeasure.EMAIL_VERIFICATION, True))

    log = _log(
        state, ctx, "user",
        "Notification accepted" if accepted else "Notification dismissed",
        notification.title,
    )
    if compromised and not user.account_compromised:
        logger.info(f"Account compromised through {notification.type.value} notification")
    return _commit(state, casual_user=_with_user(state, **update), notifications=notifications, activity_log=log)


def delete_notification(state: GameState, notification_id: str, ctx: GameContext) -> GameState:
    _find_notification(state, notification_id)
    notifications = [n for n in state.notifications if n.id != notification_id]
    return _commit(state, notifications=notifications)


# ---------- setup wizards ----------

FLOW_MODELS = {
    "twoFactorAuth": ("two_factor_auth", TwoFactorFlow),
    "securityQuestions": ("security_questions", SecurityQuestionsFlow),
    "backupEmail": ("backup_email", BackupEmailFlow),
}


def update_security_flow(state: GameState, flow_type: str, step: int, data: dict | None, ctx: GameContext) -> GameState:
    try:
        field_name, model = FLOW_MODELS[flow_type]
    except KeyError:
        raise InvalidRequestError(f"Unknown security flow: {flow_type}") from None

    flows = state.casual_user.security_setup_flows
    current = getattr(flows, field_name) or model()
    try:
        flow = model.model_validate(_merge_flow(current, data, step=step))
    except ValidationError as e:
        raise InvalidRequestError(f"Invalid security flow data: {e.errors()[0]['msg']}") from e
    user = _with_user(state, security_setup_flows=flows.model_copy(update={field_name: flow}))
    return _commit(state, casual_user=user)


# ---------- password vault ----------

def save_password(
    state: GameState,
    title: str,
    password: str,
    ctx: GameContext,
    website: str | None = None,
    username: str | None = None,
    category: str | None = None,
) -> GameState:
    """Add a vault entry. With 3 or more entries the vault measure is turned on."""
    user = state.casual_user
    now = ctx.now()
    entry = PasswordVaultEntry(
        id=ctx.new_id(),
        title=title,
        website=website,
        username=username,
        password=password,
        created_at=now,
        category=category,
    )
    vault = [*user.password_vault, entry]
    activate = (
        len(vault) >= VAULT_MIN_ENTRIES
        and not user.security_measures.password_vault
    )

    update = {"password_vault": vault}
    log = _log(state, ctx, "user", "Password saved to vault", f'"{title}" added to the password vault', now=now)
    if activate:
        update.update(_with_measure(user, SecurityMeasure.PASSWORD_VAULT, True))
        log.append(ActivityLogEntry(
            id=ctx.new_id(),
            timestamp=now,
            actor="system",
            action="Password Vault activated",
            detail=f"{VAULT_MIN_ENTRIES} or more passwords stored - security bonus applied",
        ))
    return _commit(state, casual_user=_with_user(state, **update), activity_log=log)


def delete_password(state: GameState, entry_id: str, ctx: GameContext) -> GameState:
    """Remove a vault entry. Below 3 entries the vault measure is turned off."""
    user = state.casual_user
    removed = next((entry for entry in user.password_vault if entry.id == entry_id), None)
    if removed is None:
        raise NotFoundError("Password not found")

    now = ctx.now()
    vault = [entry for entry in user.password_vault if entry.id != entry_id]
    deactivate = (
        len(vault) < VAULT_MIN_ENTRIES
        and user.security_measures.password_vault
    )

    update = {"password_vault": vault}
    log = _log(state, ctx, "user", "Password removed from vault", f'"{removed.title}" removed', now=now)
    if deactivate:
        update.update(_with_measure(user, SecurityMeasure.PASSWORD_VAULT, False))
        log.append(ActivityLogEntry(
            id=ctx.new_id(),
            timestamp=now,
            actor="system",
            action="Password Vault deactivated",
            detail=f"Fewer than {VAULT_MIN_ENTRIES} passwords - security bonus removed",
        ))
    return _commit(state, casual_user=_with_user(state, **update), activity_log=log)


# ---------- read models ----------

def summarize(state: GameState) -> StatsOutSchema:
    measures = state.casual_user.security_measures
    return StatsOutSchema(
        vulnerability_score=state.vulnerability_score,
        security_level=compute_security_level(state.vulnerability_score),
        level=compute_level(state.vulnerability_score),
        attacks_attempted=state.hacker.attacks_attempted,
        attacks_successful=state.hacker.attacks_successful,
        account_compromised=state.casual_user.account_compromised,
        active_measures=sum(1 for f in MEASURE_FIELDS.values() if getattr(measures, f)),
        vault_entries=len(state.casual_user.password_vault),
    )
