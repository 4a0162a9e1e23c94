"""Tests for the vulnerability score."""

import itertools

import pytest

from app.schemas.game import (
    CasualUser,
    IpWhitelistConfig,
    LoginAlertsConfig,
    SecurityConfig,
    SecurityMeasures,
    SmsBackupConfig,
)
from app.services.scoring import (
    MEASURE_REDUCTIONS,
    calculate_vulnerability,
    compute_level,
    compute_security_level,
)
from tests.factories import ALL_ON, full_config, hardened_user, user_with, vault_entries


def test_all_off_is_100():
    assert calculate_vulnerability(CasualUser()) == 100


def test_all_on_and_configured_is_0():
    assert calculate_vulnerability(hardened_user()) == 0


@pytest.mark.parametrize(
    "field,reduction",
    [
        ("strong_password", 10),
        ("two_factor_auth", 15),
        ("email_verification", 10),
        ("security_questions", 10),
        ("backup_email", 5),
        ("authenticator_app", 20),
        ("session_management", 12),
    ],
)
def test_flag_only_measures(field, reduction):
    assert calculate_vulnerability(user_with(field)) == 100 - reduction


@pytest.mark.parametrize(
    "field",
    ["sms_backup", "trusted_devices", "login_alerts", "ip_whitelist", "password_vault"],
)
def test_config_gated_measures_need_config(field):
    assert calculate_vulnerability(user_with(field)) == 100


def test_config_gated_measures_with_config():
    config = full_config()
    assert calculate_vulnerability(user_with("sms_backup", security_config=config)) == 88
    assert calculate_vulnerability(user_with("trusted_devices", security_config=config)) == 85
    assert calculate_vulnerability(user_with("login_alerts", security_config=config)) == 90
    assert calculate_vulnerability(user_with("ip_whitelist", security_config=config)) == 82
    assert calculate_vulnerability(user_with("password_vault", password_vault=vault_entries(3))) == 92


def test_sms_unverified_does_not_count():
    config = SecurityConfig(sms_backup=SmsBackupConfig(phone_number="5551234567", verified=False))
    assert calculate_vulnerability(user_with("sms_backup", security_config=config)) == 100


def test_location_alerts_alone_do_not_count():
    config = SecurityConfig(login_alerts=LoginAlertsConfig(new_location_alerts=True))
    assert calculate_vulnerability(user_with("login_alerts", security_config=config)) == 100


def test_ip_whitelist_disabled_or_empty_does_not_count():
    disabled = SecurityConfig(ip_whitelist=IpWhitelistConfig(enabled=False, allowed_ips=["1.2.3.4"]))
    empty = SecurityConfig(ip_whitelist=IpWhitelistConfig(enabled=True, allowed_ips=[]))
    assert calculate_vulnerability(user_with("ip_whitelist", security_config=disabled)) == 100
    assert calculate_vulnerability(user_with("ip_whitelist", security_config=empty)) == 100


def test_vault_needs_three_entries():
    assert calculate_vulnerability(user_with("password_vault", password_vault=vault_entries(2))) == 100


def test_config_without_flag_does_not_count():
    user = CasualUser(security_config=full_config(), password_vault=vault_entries(5))
    assert calculate_vulnerability(user) == 100


def test_total_reductions_exceed_100():
    assert sum(MEASURE_REDUCTIONS.values()) > 100
    assert calculate_vulnerability(
        CasualUser(security_measures=ALL_ON, security_config=full_config(), password_vault=vault_entries(3))
    ) == 0


def test_score_in_range_for_every_flag_combination():
    fields = list(SecurityMeasures.model_fields)
    config = full_config()
    for bits in itertools.product([False, True], repeat=len(fields)):
        measures = SecurityMeasures(**dict(zip(fields, bits)))
        for user_config in (SecurityConfig(), config):
            user = CasualUser(security_measures=measures, security_config=user_config)
            assert 0 <= calculate_vulnerability(user) <= 100


class TestLevels:
    def test_security_level_is_inverse(self):
        assert compute_security_level(100) == 0
        assert compute_security_level(30) == 70

    @pytest.mark.parametrize(
        "vulnerability,label",
        [(100, "Exposed"), (70, "Weak"), (50, "Fair"), (30, "Strong"), (0, "Fortified")],
    )
    def test_level_bands(self, vulnerability, label):
        assert compute_level(vulnerability) == label
