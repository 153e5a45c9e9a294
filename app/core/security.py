import hmac
import secrets

from app.core.config import OTP_CODE_LENGTH, settings


def generate_otp() -> str:
    """Uniform over [10**(n-1), 10**n - 1], so the code never has a leading zero."""
    low = 10 ** (OTP_CODE_LENGTH - 1)
    high = 10**OTP_CODE_LENGTH - 1
    return str(low + secrets.randbelow(high - low + 1))


def codes_match(expected: str, presented: str) -> bool:
    return hmac.compare_digest(expected.encode("utf-8"), presented.encode("utf-8"))


def is_valid_admin_key(presented: str | None) -> bool:
    if not presented or not settings.BLOG_ADMIN_KEY:
        return False
    return hmac.compare_digest(presented.encode("utf-8"), settings.BLOG_ADMIN_KEY.encode("utf-8"))


def mask_identity(identity: str) -> str:
    """Keep log lines free of the full recipient address: owner@example.com -> o***@example.com."""
    local, sep, domain = identity.partition("@")
    if not local:
        return "***"
    return f"{local[0]}***{sep}{domain}"
