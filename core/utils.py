import json
import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

PROBLEM_NUMBER_PREFIX = "problem-"


def parse_int(value: Any, default: int = 0) -> int:
    """Parse an untrusted upstream value as int, falling back to ``default``.

    Accepts ints, floats, numeric strings (including "1,234" and "12.0").
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    try:
        if isinstance(value, str):
            value = value.replace(",", "").strip()
        return int(float(value))
    except (ValueError, TypeError, OverflowError):
        return default


def parse_float(value: Any, default: float = 0.0) -> float:
    """Parse an untrusted upstream value as float, falling back to ``default``.

    Percent strings like "52.3%" are accepted.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        if isinstance(value, str):
            value = value.replace("%", "").replace(",", "").strip()
        result = float(value)
    except (ValueError, TypeError):
        return default
    if math.isnan(result) or math.isinf(result):
        return default
    return result


def round_half_up(value: float, digits: int = 0) -> float:
    """Round half away from zero for positive values (Python's round() is banker's)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def parse_identifier(identifier: Union[int, str]) -> Union[int, str]:
    """Normalize a problem identifier.

    Returns an int for numeric ids ("1", 1, "problem-1") and the stripped,
    lower-cased slug otherwise; stored slugs are always lower case.
    """
    if isinstance(identifier, bool):
        raise ValueError(f"Invalid problem identifier: {identifier!r}")
    if isinstance(identifier, int):
        return identifier
    text = str(identifier).strip().lower()
    if text.isdecimal():
        return int(text)
    number = text[len(PROBLEM_NUMBER_PREFIX):]
    if text.startswith(PROBLEM_NUMBER_PREFIX) and number.isdecimal():
        return int(number)
    if not text:
        raise ValueError("Problem identifier must not be empty")
    return text


def as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on read)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def tag_name(tag: Any) -> str:
    """Upstream tags arrive either as {name, slug} dicts or bare strings."""
    if isinstance(tag, dict):
        return str(tag.get("name") or tag.get("slug") or "").strip()
    if tag is None:
        return ""
    return str(tag).strip()


def dedupe_tags(tags: Any) -> List[Dict[str, str]]:
    """Deduplicate a tag list by name, keeping first-seen order.

    Output entries are always {"name", "slug"} dicts.
    """
    if not isinstance(tags, list):
        return []

    seen = set()
    result = []
    for tag in tags:
        name = tag_name(tag)
        if not name or name in seen:
            continue
        seen.add(name)
        slug = tag.get("slug") if isinstance(tag, dict) else None
        result.append({"name": name, "slug": slug or name.lower().replace(" ", "-")})
    return result


def parse_json_list(value: Any) -> List[Any]:
    """Upstream sometimes ships lists JSON-encoded as strings."""
    if isinstance(value, list):
        return value
    if isinstance(value, str) and value.strip():
        try:
            decoded = json.loads(value)
        except ValueError:
            logger.debug(f"Could not decode JSON list: {value[:80]}")
            return []
        return decoded if isinstance(decoded, list) else []
    return []
