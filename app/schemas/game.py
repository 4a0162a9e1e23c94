"""Pydantic schemas for the game state snapshot.

Attributes are snake_case in Python and camelCase on the wire. Every model is
frozen: transitions in app.services.game build new snapshots with
``model_copy(update=...)`` and never touch a previous one.
"""
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class GameModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True


# ---------- enums ----------

class SecurityMeasure(str, Enum):
    TWO_FACTOR_AUTH = "twoFactorAuth"
    STRONG_PASSWORD = "strongPassword"
    EMAIL_VERIFICATION = "emailVerification"
    SECURITY_QUESTIONS = "securityQuestions"
    BACKUP_EMAIL = "backupEmail"
    AUTHENTICATOR_APP = "authenticatorApp"
    SMS_BACKUP = "smsBackup"
    TRUSTED_DEVICES = "trustedDevices"
    LOGIN_ALERTS = "loginAlerts"
    SESSION_MANAGEMENT = "sessionManagement"
    IP_WHITELIST = "ipWhitelist"
    PASSWORD_VAULT = "passwordVault"


class NotificationType(str, Enum):
    PHISHING = "phishing"
    SOCIAL_ENGINEERING = "social_engineering"
    PASSWORD_RESET = "password_reset"
    SUSPICIOUS_LOGIN = "suspicious_login"
    SECURITY_ALERT = "security_alert"
    TWO_FA_CONFIRM = "2fa_confirm"
    EMAIL_VERIFY_CONFIRM = "email_verify_confirm"
    WEAK_PASSWORD_WARNING = "weak_password_warning"


class CtaType(str, Enum):
    PHISHING_LEARN_MORE = "phishing_learn_more"
    CONFIRM_2FA = "confirm_2fa"
    CONFIRM_EMAIL = "confirm_email"
    CONFIRM_EMAIL_VERIFICATION = "confirm_email_verification"


Actor = Literal["user", "hacker", "system"]


# ---------- security measures ----------

class SecurityMeasures(GameModel):
    two_factor_auth: bool = False
    strong_password: bool = False
    email_verification: bool = False
    security_questions: bool = False
    backup_email: bool = False
    authenticator_app: bool = False
    sms_backup: bool = False
    trusted_devices: bool = False
    login_alerts: bool = False
    session_management: bool = False
    ip_whitelist: bool = False
    password_vault: bool = False

    def with_flag(self, measure: SecurityMeasure, enabled: bool) -> "SecurityMeasures":
        return self.model_copy(update={MEASURE_FIELDS[measure]: enabled})

    def all_enabled(self) -> bool:
        return all(getattr(self, field) for field in MEASURE_FIELDS.values())


MEASURE_FIELDS: dict[SecurityMeasure, str] = {
    SecurityMeasure.TWO_FACTOR_AUTH: "two_factor_auth",
    SecurityMeasure.STRONG_PASSWORD: "strong_password",
    SecurityMeasure.EMAIL_VERIFICATION: "email_verification",
    SecurityMeasure.SECURITY_QUESTIONS: "security_questions",
    SecurityMeasure.BACKUP_EMAIL: "backup_email",
    SecurityMeasure.AUTHENTICATOR_APP: "authenticator_app",
    SecurityMeasure.SMS_BACKUP: "sms_backup",
    SecurityMeasure.TRUSTED_DEVICES: "trusted_devices",
    SecurityMeasure.LOGIN_ALERTS: "login_alerts",
    SecurityMeasure.SESSION_MANAGEMENT: "session_management",
    SecurityMeasure.IP_WHITELIST: "ip_whitelist",
    SecurityMeasure.PASSWORD_VAULT: "password_vault",
}


# ---------- per-measure configuration variants ----------

class StrongPasswordConfig(GameModel):
    password: str | None = None
    strength: int | None = None


class SecurityQuestionConfig(GameModel):
    question: str | None = None
    answer: str | None = None


class RecoveryEmailConfig(GameModel):
    email: str | None = None
    verified: bool = False


class AuthenticatorAppConfig(GameModel):
    secret: str | None = None
    recovery_codes: list[str] = Field(default_factory=list)


class SmsBackupConfig(GameModel):
    phone_number: str | None = None
    verified: bool = False


class TrustedDevice(GameModel):
    id: str
    name: str
    fingerprint: str
    added_at: int


class TrustedDevicesConfig(GameModel):
    devices: list[TrustedDevice] = Field(default_factory=list)

    @property
    def has_devices(self) -> bool:
        return len(self.devices) > 0


class LoginAlertsConfig(GameModel):
    email_alerts: bool = False
    sms_alerts: bool = False
    new_location_alerts: bool = False

    @property
    def any_channel(self) -> bool:
        """Email or SMS alerts; location alerts alone do not count as a channel."""
        return self.email_alerts or self.sms_alerts


class ActiveSession(GameModel):
    id: str
    device_name: str
    location: str
    last_active: int


class SessionManagementConfig(GameModel):
    max_sessions: int = 3
    auto_logout_minutes: int = 30
    active_sessions: list[ActiveSession] = Field(default_factory=list)


class IpWhitelistConfig(GameModel):
    enabled: bool = False
    allowed_ips: list[str] = Field(default_factory=list, alias="allowedIPs")

    @property
    def is_active(self) -> bool:
        return self.enabled and len(self.allowed_ips) > 0


class SecurityConfig(GameModel):
    strong_password: StrongPasswordConfig | None = None
    security_question: SecurityQuestionConfig | None = None
    recovery_email: RecoveryEmailConfig | None = None
    authenticator_app: AuthenticatorAppConfig | None = None
    sms_backup: SmsBackupConfig | None = None
    trusted_devices: TrustedDevicesConfig | None = None
    login_alerts: LoginAlertsConfig | None = None
    session_management: SessionManagementConfig | None = None
    ip_whitelist: IpWhitelistConfig | None = None

    # Predicates shared by the vulnerability and attack tables.

    @property
    def sms_verified(self) -> bool:
        return self.sms_backup is not None and self.sms_backup.verified

    @property
    def has_trusted_devices(self) -> bool:
        return self.trusted_devices is not None and self.trusted_devices.has_devices

    @property
    def email_alerts(self) -> bool:
        return self.login_alerts is not None and self.login_alerts.email_alerts

    @property
    def any_login_alert(self) -> bool:
        return self.login_alerts is not None and self.login_alerts.any_channel

    @property
    def ip_whitelist_enabled(self) -> bool:
        return self.ip_whitelist is not None and self.ip_whitelist.enabled

    @property
    def ip_whitelist_active(self) -> bool:
        return self.ip_whitelist is not None and self.ip_whitelist.is_active


# ---------- setup wizards ----------

class TwoFactorFlow(GameModel):
    # 0: not started, 1: choose method, 2: enter code, 3: save recovery codes, 4: complete
    step: int = 0
    method: Literal["app", "sms"] | None = None
    code: str | None = None
    completed: bool = False


class SecurityQuestionsFlow(GameModel):
    step: int = 0
    question: str | None = None
    answer: str | None = None
    completed: bool = False


class BackupEmailFlow(GameModel):
    step: int = 0
    email: str | None = None
    verification_code: str | None = None
    completed: bool = False


class SecuritySetupFlows(GameModel):
    two_factor_auth: TwoFactorFlow | None = None
    security_questions: SecurityQuestionsFlow | None = None
    backup_email: BackupEmailFlow | None = None


class AttackFlow(GameModel):
    step: int = 0  # 0: not started, 1: recon, 2: execution, 3: outcome
    tool: str | None = None
    command: str | None = None
    progress: int = 0


# ---------- vault, notifications, log ----------

class PasswordVaultEntry(GameModel):
    id: str
    title: str
    website: str | None = None
    username: str | None = None
    password: str
    created_at: int
    category: str | None = None


class Notification(GameModel):
    id: str
    type: NotificationType
    title: str
    message: str
    is_active: bool = True
    requires_action: bool = False
    user_fell_for: bool | None = None
    cta_label: str | None = None
    cta_type: CtaType | None = None
    scenario_index: int | None = Field(default=None, ge=0, le=2)
    password_strength: int | None = None


class ActivityLogEntry(GameModel):
    id: str
    timestamp: int
    actor: Actor
    action: str
    detail: str | None = None


# ---------- root ----------

class CasualUser(GameModel):
    name: str | None = None
    email: str | None = None
    password: str | None = None  # plaintext: this is a simulation, not a security model
    account_created: bool = False
    account_creation_step: int = Field(default=0, ge=0, le=3)
    security_measures: SecurityMeasures = Field(default_factory=SecurityMeasures)
    security_setup_flows: SecuritySetupFlows = Field(default_factory=SecuritySetupFlows)
    security_config: SecurityConfig = Field(default_factory=SecurityConfig)
    password_vault: list[PasswordVaultEntry] = Field(default_factory=list)
    account_compromised: bool = False


class Hacker(GameModel):
    attacks_attempted: int = 0
    attacks_successful: int = 0
    active_attacks: list[str] = Field(default_factory=list)
    cooldowns: dict[str, int] = Field(default_factory=dict)  # attack id -> epoch ms
    attack_flows: dict[str, AttackFlow] = Field(default_factory=dict)
    social_engineering_scenario_cursor: int = Field(default=0, ge=0, le=2)


class GameState(GameModel):
    casual_user: CasualUser = Field(default_factory=CasualUser)
    hacker: Hacker = Field(default_factory=Hacker)
    notifications: list[Notification] = Field(default_factory=list)
    vulnerability_score: int = Field(default=100, ge=0, le=100)
    game_started: bool = False
    tutorial_completed: bool = False
    activity_log: list[ActivityLogEntry] = Field(default_factory=list)
    round_id: int = 0
