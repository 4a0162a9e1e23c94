"""Notification templates for attacks, confirmations and warnings."""
from typing import Callable

from app.schemas.game import CtaType, Hacker, Notification, NotificationType

# attack id -> template; the social engineering scenario index is filled in at creation
ATTACK_TEMPLATES: dict[str, dict] = {
    "phishing": {
        "type": NotificationType.PHISHING,
        "title": "New Email Received",
        "message": "You won a prize! Click here to claim it now. Confirm your details to receive it.",
        "requires_action": True,
        "cta_label": "Learn More",
        "cta_type": CtaType.PHISHING_LEARN_MORE,
    },
    "social_engineering": {
        "type": NotificationType.SOCIAL_ENGINEERING,
        "title": "New Conversation",
        "message": "You have a new message. Click to view it.",
        "requires_action": True,
    },
    "brute_force": {
        "type": NotificationType.SECURITY_ALERT,
        "title": "Security Alert",
        "message": "Multiple login attempts detected. Your access may be at risk.",
        "requires_action": False,
    },
    "keylogger": {
        "type": NotificationType.SUSPICIOUS_LOGIN,
        "title": "Automatic Download",
        "message": "A program is trying to install itself on your computer. Allow it?",
        "requires_action": True,
    },
    "password_leak": {
        "type": NotificationType.SECURITY_ALERT,
        "title": "Data Breach",
        "message": "Your password may have been exposed in a recent data breach. Consider changing it.",
        "requires_action": False,
    },
}

FALLBACK_TEMPLATE = "phishing"


def create_attack_notification(attack_id: str, hacker: Hacker, new_id: Callable[[], str]) -> Notification:
    """Build the notification the user sees when attack_id is executed.

    Social engineering notifications carry the scenario cursor as it is
    before the attack rotates it.
    """
    template = dict(ATTACK_TEMPLATES.get(attack_id, ATTACK_TEMPLATES[FALLBACK_TEMPLATE]))
    if template["type"] == NotificationType.SOCIAL_ENGINEERING:
        template["scenario_index"] = hacker.social_engineering_scenario_cursor
    return Notification(id=new_id(), is_active=True, user_fell_for=None, **template)


def create_two_factor_confirmation(new_id: Callable[[], str]) -> Notification:
    return Notification(
        id=new_id(),
        type=NotificationType.TWO_FA_CONFIRM,
        title="Enable Two-Factor Authentication",
        message=(
            "You are about to enable Two-Factor Authentication (2FA). It adds an extra layer of "
            "security by requiring a verification code in addition to your password. "
            "Click Confirm to enable it."
        ),
        requires_action=True,
        cta_label="Confirm",
        cta_type=CtaType.CONFIRM_2FA,
    )


def create_email_verification_confirmation(email: str | None, new_id: Callable[[], str]) -> Notification:
    return Notification(
        id=new_id(),
        type=NotificationType.EMAIL_VERIFY_CONFIRM,
        title="Enable Email Verification",
        message=(
            f"We sent a verification code to {email or 'your email'}. "
            "Confirm to verify your identity and raise your account security."
        ),
        requires_action=True,
        cta_label="Confirm",
        cta_type=CtaType.CONFIRM_EMAIL_VERIFICATION,
    )


def create_recovery_email_confirmation(email: str, new_id: Callable[[], str]) -> Notification:
    return Notification(
        id=new_id(),
        type=NotificationType.EMAIL_VERIFY_CONFIRM,
        title="Confirm Recovery Email",
        message=(
            f"We sent a verification code to {email}. "
            "Click Confirm to activate the recovery email."
        ),
        requires_action=True,
        cta_label="Confirm",
        cta_type=CtaType.CONFIRM_EMAIL,
    )


def create_weak_password_warning(strength: int, new_id: Callable[[], str]) -> Notification:
    return Notification(
        id=new_id(),
        type=NotificationType.WEAK_PASSWORD_WARNING,
        title="Warning: Weak Password Detected",
        message=(
            f"Your account was created, but your password is vulnerable to attacks. "
            f"Current strength: {strength}%. We recommend improving it in the security settings."
        ),
        requires_action=False,
        password_strength=strength,
    )
