import re

_NON_DIGITS = re.compile(r"\D")


def format_phone_number(phone: str) -> str:
    """Best-effort E.164 formatting, assuming North America for bare 10-digit numbers."""
    digits = _NON_DIGITS.sub("", phone)

    if len(digits) == 11 and digits.startswith("1"):
        return f"+{digits}"

    if len(digits) == 10:
        return f"+1{digits}"

    if not phone.startswith("+"):
        return f"+{digits}"

    return phone
