"""
Input hygiene helpers shared by public endpoints
"""
import re

MAX_INPUT_LENGTH = 1000

_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_IFRAME_RE = re.compile(r"<iframe\b[^<]*(?:(?!</iframe>)<[^<]*)*</iframe>", re.IGNORECASE)
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# Kuwait and Gulf numbers: optional +, 8 to 15 digits
_PHONE_RE = re.compile(r"^\+?[0-9]{8,15}$")


def sanitize_input(text) -> str:
    """Strip script/iframe blocks and angle brackets, trim, truncate."""
    if not text:
        return ""
    cleaned = _SCRIPT_RE.sub("", str(text))
    cleaned = _IFRAME_RE.sub("", cleaned)
    cleaned = cleaned.replace("<", "").replace(">", "")
    return cleaned.strip()[:MAX_INPUT_LENGTH]


def is_valid_email(email) -> bool:
    if not email:
        return False
    return bool(_EMAIL_RE.match(email.strip()))


def is_valid_phone(phone) -> bool:
    if not phone:
        return False
    compact = re.sub(r"[\s\-()]", "", phone)
    return bool(_PHONE_RE.match(compact))
