import re

from rxpad.core.config import settings

_NON_DIGITS = re.compile(r"\D")


def digits_only(value: str | None) -> str:
    return _NON_DIGITS.sub("", value or "")


def whatsapp_number(cell_number: str | None, country_code: str | None = None) -> str:
    """Bare international digits (no `+`) for a WhatsApp link, or "" when unknown."""
    cc = country_code or settings.DEFAULT_COUNTRY_CODE
    digits = digits_only(cell_number)
    if not digits:
        return ""
    if digits.startswith(cc):
        return digits
    if digits.startswith("0"):
        return cc + digits[1:]
    if len(digits) == 9:
        return cc + digits
    return digits


def format_cell_number(cell_number: str | None, country_code: str | None = None) -> str:
    """Normalise a local or international cell number to `+<cc><number>`.

    Numbers that don't look local or international are returned unchanged.
    """
    cc = country_code or settings.DEFAULT_COUNTRY_CODE
    raw = cell_number or ""
    digits = digits_only(raw)
    if not digits:
        return raw
    if digits.startswith(cc):
        return f"+{digits}"
    if digits.startswith("0"):
        return f"+{cc}{digits[1:]}"
    if len(digits) == 9:
        return f"+{cc}{digits}"
    return raw
