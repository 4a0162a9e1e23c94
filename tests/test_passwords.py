"""Tests for password strength scoring and generation."""

import pytest

from app.services.passwords import (
    NUMBERS,
    STRONG_PASSWORD_THRESHOLD,
    SYMBOLS,
    calculate_password_strength,
    generate_password,
    is_strong,
)


class TestPasswordStrength:
    @pytest.mark.parametrize("password", ["Abcdefgh1!xy", "Sup3r$ecretPass", "ZZzz99!!ZZzz99!!"])
    def test_all_classes_and_long_is_100(self, password):
        assert calculate_password_strength(password) == 100

    @pytest.mark.parametrize(
        "password",
        [
            "abcdefgh1!xyzabc",   # no uppercase
            "ABCDEFGH1!XYZABC",   # no lowercase
            "Abcdefghij!xyzab",   # no digit
            "Abcdefghij1xyzab",   # no special
        ],
    )
    def test_missing_class_never_strong(self, password):
        strength = calculate_password_strength(password)
        assert strength <= 79
        assert not is_strong(password)

    def test_missing_class_clamped_exactly_to_79(self):
        # 40 (length) + 20 + 20 + 10 = 90 before the clamp
        assert calculate_password_strength("Abcdefghij1xyzab") == 79

    def test_short_password_scores_classes_only(self):
        # length < 8: lower 20 + upper 20 + digit 10 + special 10
        assert calculate_password_strength("Ab1!") == 60

    def test_length_thresholds(self):
        assert calculate_password_strength("abcdefg") == 20
        assert calculate_password_strength("abcdefgh") == 40
        assert calculate_password_strength("abcdefghijkl") == 60

    def test_empty_and_none(self):
        assert calculate_password_strength("") == 0
        assert calculate_password_strength(None) == 0

    def test_eight_chars_all_classes_is_strong(self):
        assert calculate_password_strength("Abcde1!x") == 80
        assert is_strong("Abcde1!x")
        assert STRONG_PASSWORD_THRESHOLD == 80


class TestGeneratePassword:
    def test_length_and_one_draw_per_char(self):
        calls = []

        def rand():
            calls.append(1)
            return 0.0

        password = generate_password(length=10, rand=rand)
        assert password == "a" * 10
        assert len(calls) == 10

    def test_excludes_numbers_and_symbols(self):
        values = iter([i / 40 for i in range(40)])
        password = generate_password(length=40, include_symbols=False, include_numbers=False, rand=lambda: next(values))
        assert not any(c in NUMBERS or c in SYMBOLS for c in password)

    def test_highest_draw_picks_last_symbol(self):
        assert generate_password(length=1, rand=lambda: 0.999999) == SYMBOLS[-1]
