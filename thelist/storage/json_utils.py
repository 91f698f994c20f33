"""JSON helpers for record payloads that never raise."""

import json
from typing import Any

from thelist.logging import get_logger

logger = get_logger(__name__)


def safe_json_dumps(data: Any, default: str = "{}") -> str:
    """Serialize data to a compact JSON string, returning default on failure."""
    if data is None:
        return default

    try:
        return json.dumps(data, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError, OverflowError) as e:
        logger.warning(f"Failed to serialize JSON: {e}")
        return default


def load_payload(text: str | None) -> dict[str, Any]:
    """Parse a stored record payload.

    Corrupt or non-object payloads come back as an empty dict so one bad
    row cannot break a whole list snapshot.

    Args:
        text: JSON text from payload_json

    Returns:
        Record dict (possibly empty)
    """
    if not text:
        return {}

    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError, ValueError) as e:
        logger.warning(f"Failed to parse record payload: {e}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Record payload is {type(data).__name__}, expected object")
        return {}
    return data
