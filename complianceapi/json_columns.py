"""JSON text columns.

Tag lists, field option lists and submission payloads live in plain ``Text``
columns. Callers hand in Python values; these helpers serialise on write and
parse on read so the rest of the code never sees the encoded form.
"""
import json
import logging
from datetime import date, datetime
from typing import Any, Optional

logger = logging.getLogger(__name__)


def dump_str_list(values: Optional[list[str]]) -> Optional[str]:
    """Encode a string list; empty or missing lists are stored as NULL."""
    if not values:
        return None
    return json.dumps(list(values), ensure_ascii=False)


def load_str_list(raw: Optional[str]) -> list[str]:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except ValueError:
        logger.warning("Unreadable list column", extra={"raw": raw})
        return []
    if not isinstance(value, list):
        return []
    return [str(v) for v in value]


def load_optional_str_list(raw: Optional[str]) -> Optional[list[str]]:
    if raw is None:
        return None
    return load_str_list(raw)


def _default(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def dump_payload(data: dict[str, Any]) -> str:
    return json.dumps(data, ensure_ascii=False, default=_default)


def load_payload(raw: Optional[str]) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except ValueError:
        logger.warning("Unreadable submission payload", extra={"raw": raw})
        return {}
    return value if isinstance(value, dict) else {}
