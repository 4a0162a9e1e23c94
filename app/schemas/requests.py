"""Pydantic request schemas. FastAPI rejects malformed payloads before they reach the engine."""
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, RootModel
from pydantic.alias_generators import to_camel

from app.schemas.game import (
    ActiveSession,
    SecurityMeasure,
    TrustedDevice,
)


class RequestModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "ignore"


class ExecuteAttackRequest(RequestModel):
    attack_id: str = Field(min_length=1)


class UpdateSecurityRequest(RequestModel):
    measure: SecurityMeasure
    enabled: bool


class CreateAccountRequest(RequestModel):
    name: str = Field(min_length=1)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(min_length=1)


class AccountStepData(RequestModel):
    name: str | None = None
    email: str | None = None
    password: str | None = None


class AccountCreationStepRequest(RequestModel):
    step: int = Field(ge=0, le=3)
    data: AccountStepData | None = None


class StrongPasswordRequest(RequestModel):
    password: str = Field(min_length=1)
    # Accepted for compatibility with clients that estimate strength; always recomputed.
    strength: int | None = None


class SecurityQuestionRequest(RequestModel):
    question: str = Field(min_length=1)
    answer: str = Field(min_length=1)


class RecoveryEmailRequest(RequestModel):
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class RespondToNotificationRequest(RequestModel):
    notification_id: str = Field(min_length=1)
    accepted: bool


class DeleteNotificationRequest(RequestModel):
    notification_id: str = Field(min_length=1)


class SecurityFlowStepRequest(RequestModel):
    flow_type: Literal["twoFactorAuth", "securityQuestions", "backupEmail"]
    step: int = Field(ge=0)
    data: dict | None = None


class AttackFlowStepRequest(RequestModel):
    attack_id: str = Field(min_length=1)
    step: int = Field(ge=0)
    data: dict | None = None


class SavePasswordRequest(RequestModel):
    title: str = Field(min_length=1)
    website: str | None = None
    username: str | None = None
    password: str = Field(min_length=1)
    category: str | None = None


class DeletePasswordRequest(RequestModel):
    id: str = Field(min_length=1)


class GeneratePasswordRequest(RequestModel):
    length: int = Field(default=16, ge=4, le=128)
    include_symbols: bool = True
    include_numbers: bool = True


# ---------- /api/security/configure: one variant per configurable measure ----------

class StrongPasswordSettings(RequestModel):
    password: str = Field(min_length=1)
    strength: int = Field(ge=0, le=100)


class AuthenticatorAppSettings(RequestModel):
    secret: str = Field(min_length=1)
    recovery_codes: list[str] = Field(min_length=4)


class SmsBackupSettings(RequestModel):
    phone_number: str = Field(min_length=10)
    verified: bool


class TrustedDevicesSettings(RequestModel):
    devices: list[TrustedDevice]


class LoginAlertsSettings(RequestModel):
    email_alerts: bool
    sms_alerts: bool
    new_location_alerts: bool


class SessionManagementSettings(RequestModel):
    max_sessions: int = Field(ge=1, le=10)
    auto_logout_minutes: int = Field(ge=5, le=120)
    active_sessions: list[ActiveSession]


class IpWhitelistSettings(RequestModel):
    enabled: bool
    allowed_ips: list[str] = Field(alias="allowedIPs")


class ConfigureStrongPassword(RequestModel):
    measure: Literal["strongPassword"]
    config: StrongPasswordSettings


class ConfigureAuthenticatorApp(RequestModel):
    measure: Literal["authenticatorApp"]
    config: AuthenticatorAppSettings


class ConfigureSmsBackup(RequestModel):
    measure: Literal["smsBackup"]
    config: SmsBackupSettings


class ConfigureTrustedDevices(RequestModel):
    measure: Literal["trustedDevices"]
    config: TrustedDevicesSettings


class ConfigureLoginAlerts(RequestModel):
    measure: Literal["loginAlerts"]
    config: LoginAlertsSettings


class ConfigureSessionManagement(RequestModel):
    measure: Literal["sessionManagement"]
    config: SessionManagementSettings


class ConfigureIpWhitelist(RequestModel):
    measure: Literal["ipWhitelist"]
    config: IpWhitelistSettings


class ConfigureSecurityRequest(RootModel[Annotated[
    Union[
        ConfigureStrongPassword,
        ConfigureAuthenticatorApp,
        ConfigureSmsBackup,
        ConfigureTrustedDevices,
        ConfigureLoginAlerts,
        ConfigureSessionManagement,
        ConfigureIpWhitelist,
    ],
    Field(discriminator="measure"),
]]):
    """One configuration variant per measure, selected by the `measure` field."""
