"""
Hashing & Validation Utilities

Pure functions used across the recovery pipeline:
- National identifier (CPF) checksum validation and one-way hashing
- One-time code, temporary password and opaque token generation
- Input sanitation and contact masking for responses and logs
"""

import hashlib
import re
import secrets

NATIONAL_ID_LENGTH = 11
OTP_MIN = 100000
OTP_MAX = 999999

TEMPORARY_SECRET_LENGTH = 12
# Visually confusable characters (I, O, l, o, 0, 1) are excluded
UPPERCASE = "ABCDEFGHJKLMNPQRSTUVWXYZ"
LOWERCASE = "abcdefghijkmnpqrstuvwxyz"
DIGITS = "23456789"
SYMBOLS = "!@#$%&*"
SECRET_ALPHABET = UPPERCASE + LOWERCASE + DIGITS + SYMBOLS

OPAQUE_TOKEN_BYTES = 32
SANITIZE_MAX_LENGTH = 1000

_NON_DIGITS = re.compile(r"\D")
_system_random = secrets.SystemRandom()


class InvalidFormatError(ValueError):
    """Raised when an identifier cannot be normalized to the expected shape"""


def only_digits(raw: str) -> str:
    return _NON_DIGITS.sub("", raw or "")


def _check_digit(digits: str) -> int:
    # Weights run from len+1 down to 2
    weight = len(digits) + 1
    total = sum(int(d) * (weight - i) for i, d in enumerate(digits))
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def validate_national_id(raw: str) -> bool:
    """
    Validate a national identifier (CPF) by its two check digits.

    Args:
        raw: Identifier in any punctuation (e.g. "529.982.247-25")

    Returns:
        True if it has 11 digits, is not a repeated digit, and both
        check digits match
    """
    digits = only_digits(raw)

    if len(digits) != NATIONAL_ID_LENGTH:
        return False
    if len(set(digits)) == 1:
        return False

    first = _check_digit(digits[:9])
    if first != int(digits[9]):
        return False

    second = _check_digit(digits[:10])
    return second == int(digits[10])


def hash_identifier(raw: str) -> str:
    """
    Hash a national identifier with SHA-256.

    The plaintext is never stored; only this hex digest is persisted and
    compared.

    Raises:
        InvalidFormatError: if the normalized value is not 11 digits
    """
    digits = only_digits(raw)
    if len(digits) != NATIONAL_ID_LENGTH:
        raise InvalidFormatError("National identifier must contain 11 digits")
    return hashlib.sha256(digits.encode()).hexdigest()


def generate_otp() -> str:
    """Generate a uniformly distributed 6-digit one-time code"""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


def generate_temporary_secret() -> str:
    """
    Generate a 12-character temporary password.

    Guarantees at least one uppercase letter, one lowercase letter, one
    digit and one symbol, then shuffles the characters.
    """
    chars = [
        secrets.choice(UPPERCASE),
        secrets.choice(LOWERCASE),
        secrets.choice(DIGITS),
        secrets.choice(SYMBOLS),
    ]
    chars.extend(
        secrets.choice(SECRET_ALPHABET)
        for _ in range(TEMPORARY_SECRET_LENGTH - len(chars))
    )
    _system_random.shuffle(chars)
    return "".join(chars)


def generate_opaque_token() -> str:
    """Generate a URL-safe token carrying 32 bytes of entropy"""
    return secrets.token_urlsafe(OPAQUE_TOKEN_BYTES)


def sanitize_string(value: str) -> str:
    """Strip angle brackets, trim whitespace and cap the length"""
    return re.sub(r"[<>]", "", value or "").strip()[:SANITIZE_MAX_LENGTH]


def mask_email(email: str) -> str:
    """Mask an email for display: "maria@example.com" -> "ma***@example.com" """
    if not email or "@" not in email:
        return ""
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"


def mask_phone(phone: str) -> str:
    """Mask a phone number keeping only the last 4 digits"""
    digits = only_digits(phone)
    if not digits:
        return ""
    return "*" * max(len(digits) - 4, 0) + digits[-4:]
