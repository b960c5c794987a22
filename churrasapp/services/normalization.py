"""
Pre-persist normalization.

These run on the full field set of a record right before it is written,
in place of save hooks. They are pure and idempotent: running one twice
gives the same result as running it once.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from churrasapp.schemas.fields import utcnow


def normalize_item(values: Dict[str, Any]) -> Dict[str, Any]:
    """A purchased item without an actual cost is assumed to have cost the estimate."""
    result = dict(values)
    if result.get("is_purchased") and result.get("actual_cost") is None:
        result["actual_cost"] = result.get("estimated_cost")
    return result


def normalize_guest(values: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
    """confirmed_at is set when the RSVP is "yes" and cleared otherwise."""
    result = dict(values)
    if result.get("rsvp_status") == "yes":
        if result.get("confirmed_at") is None:
            result["confirmed_at"] = now or utcnow()
    else:
        result["confirmed_at"] = None
    return result


def strip_protected(data: Dict[str, Any], protected) -> Dict[str, Any]:
    """Drop keys callers may not change through an update"""
    return {key: value for key, value in data.items() if key not in protected}
