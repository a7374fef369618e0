"""
Kennel API - Payload Validation
=================================

What:  Presence checks applied to request bodies before they reach a store.
How:   Plain functions raising ValidationError; CollectionService decides
       which operations call them (create and replace, never merge).
       Body shape checks (JSON object, finite numbers) apply to every write.
"""

import math
from typing import Any, Dict, Optional, Sequence

from kennel.exceptions import ValidationError


def _non_finite_path(value: Any, path: str) -> Optional[str]:
    """Dotted path of the first NaN/Infinity inside value, or None."""
    if isinstance(value, float) and not math.isfinite(value):
        return path
    if isinstance(value, dict):
        children = ((f"{path}.{key}" if path else str(key), item) for key, item in value.items())
    elif isinstance(value, list):
        children = ((f"{path}[{index}]", item) for index, item in enumerate(value))
    else:
        return None
    for child_path, item in children:
        found = _non_finite_path(item, child_path)
        if found is not None:
            return found
    return None


def ensure_record_payload(payload: Optional[Any]) -> Dict[str, Any]:
    """
    Normalize a request body into a record dict.

    An absent body counts as an empty object; anything other than a JSON
    object (array, string, number) is rejected. The JSON parser accepts
    NaN and Infinity, which no store can round-trip, so those are rejected
    wherever they appear.
    """
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError(
            message="request body must be a JSON object",
            field="body",
            context={"received": type(payload).__name__},
        )
    bad_field = _non_finite_path(payload, "")
    if bad_field is not None:
        raise ValidationError(
            message=f"{bad_field} must be a finite number",
            field=bad_field,
        )
    return payload


def validate_required_fields(record: Dict[str, Any], required_fields: Sequence[str]) -> None:
    """
    Fail when any required field is missing or falsy.

    Falsy values (0, "", [], null) count as missing, so a dog with weight 0
    is rejected the same way as one without a weight.

    Raises:
        ValidationError: message "must include <f1> and <f2>", e.g.
                         "must include name and weight"
    """
    if not required_fields:
        return
    missing = [field for field in required_fields if not record.get(field)]
    if missing:
        raise ValidationError(
            message="must include " + " and ".join(required_fields),
            context={"missing": missing, "required": list(required_fields)},
        )
