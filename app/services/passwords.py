"""Password strength scoring and password generation."""
import random
import re
from typing import Callable

STRONG_PASSWORD_THRESHOLD = 80
# A password missing any character class never reaches the strong threshold.
MAX_WITHOUT_ALL_CLASSES = STRONG_PASSWORD_THRESHOLD - 1

LOWERCASE = "abcdefghijklmnopqrstuvwxyz"
UPPERCASE = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
NUMBERS = "0123456789"
SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"

_LOWER_RE = re.compile(r"[a-z]")
_UPPER_RE = re.compile(r"[A-Z]")
_DIGIT_RE = re.compile(r"[0-9]")
_SPECIAL_RE = re.compile(r"[^a-zA-Z0-9]")


def calculate_password_strength(password: str | None) -> int:
    """Return password strength 0..100.

    Length gives up to 40 (20 at 8 chars, 20 more at 12), lowercase and
    uppercase 20 each, digit and special character 10 each. Unless all four
    character classes are present the score is clamped to 79.
    """
    password = password or ""
    has_lower = bool(_LOWER_RE.search(password))
    has_upper = bool(_UPPER_RE.search(password))
    has_digit = bool(_DIGIT_RE.search(password))
    has_special = bool(_SPECIAL_RE.search(password))

    strength = 0
    if len(password) >= 8:
        strength += 20
    if len(password) >= 12:
        strength += 20
    if has_lower:
        strength += 20
    if has_upper:
        strength += 20
    if has_digit:
        strength += 10
    if has_special:
        strength += 10

    if not (has_lower and has_upper and has_digit and has_special):
        strength = min(strength, MAX_WITHOUT_ALL_CLASSES)
    return min(strength, 100)


def is_strong(password: str | None) -> bool:
    return calculate_password_strength(password) >= STRONG_PASSWORD_THRESHOLD


def generate_password(
    length: int = 16,
    include_symbols: bool = True,
    include_numbers: bool = True,
    rand: Callable[[], float] = random.random,
) -> str:
    """Random password over letters (+ digits, + symbols); one draw per character."""
    chars = LOWERCASE + UPPERCASE
    if include_numbers:
        chars += NUMBERS
    if include_symbols:
        chars += SYMBOLS
    return "".join(chars[int(rand() * len(chars))] for _ in range(length))
