import re
from typing import Any, Optional

PHONE_PATTERN = re.compile(r"^1[3-9]\d{9}$")


def is_integer(value: Any) -> bool:
    """Положительное целое либо строка из цифр."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value > 0
    if isinstance(value, str):
        return value.isdigit() and int(value) > 0
    return False


def as_id(value: Any) -> Optional[int]:
    return int(value) if is_integer(value) else None


def is_phone(value: Any) -> bool:
    return isinstance(value, str) and PHONE_PATTERN.match(value) is not None
