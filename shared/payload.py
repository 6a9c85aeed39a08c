"""
Client payload decoding and merging.

A payload is a JSON object kept as an ordered ``dict``. Decoding enforces the
request size ceiling and rejects anything the document store could not hold
verbatim, so every failure surfaces as a 400 before the store is touched.
"""

from __future__ import annotations

import json
import math
from typing import Any

from errors import PayloadTooLargeError, ValidationError

ID_FIELD = "_id"

# BSON stores integers as signed 64-bit
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# MongoDB refuses documents nested deeper than 100 levels and the payload sits
# one level inside the stored record
MAX_DEPTH = 99


def utf16_length(text: str) -> int:
    """Length of *text* in UTF-16 code units (astral characters count twice)."""
    return len(text.encode("utf-16-le")) // 2


def _reject_constant(name: str) -> Any:
    raise ValidationError(f"{name} is not a valid JSON value")


def _check_storable(value: Any, path: str = "$", depth: int = 1) -> None:
    if isinstance(value, bool) or value is None:
        return
    if isinstance(value, float):
        # json reads literals such as 1e400 as inf
        if not math.isfinite(value):
            raise ValidationError(f"number out of range at {path}")
        return
    if isinstance(value, int):
        if not INT64_MIN <= value <= INT64_MAX:
            raise ValidationError(f"number out of range at {path}")
        return
    if isinstance(value, str):
        _check_text(value, path)
        return
    if isinstance(value, (list, dict)) and depth > MAX_DEPTH:
        raise ValidationError(f"nesting deeper than {MAX_DEPTH} levels at {path}")
    if isinstance(value, list):
        for index, item in enumerate(value):
            _check_storable(item, f"{path}[{index}]", depth + 1)
        return
    if isinstance(value, dict):
        for key, item in value.items():
            _check_text(key, path)
            if "\x00" in key:
                raise ValidationError(f"field names cannot contain NUL at {path}")
            _check_storable(item, f"{path}.{key}", depth + 1)


def _check_text(text: str, path: str) -> None:
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        raise ValidationError(f"unpaired surrogate in string at {path}") from None


def parse_payload(raw: bytes, max_units: int) -> dict[str, Any]:
    """Decode a request body into a payload mapping.

    Raises:
        PayloadTooLargeError: the body is longer than *max_units* UTF-16 code units.
        ValidationError: the body is not a storable JSON object.
    """
    # A UTF-16 code unit takes at most three UTF-8 bytes
    if len(raw) > 3 * max_units:
        raise PayloadTooLargeError("Input size is too large")

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise ValidationError("Body must be UTF-8 encoded JSON") from None

    if utf16_length(text) > max_units:
        raise PayloadTooLargeError("Input size is too large")

    try:
        data = json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Json is not valid: {exc.msg}") from None
    except RecursionError:
        raise ValidationError(f"nesting deeper than {MAX_DEPTH} levels") from None

    if not isinstance(data, dict):
        raise ValidationError("Input body must be a JSON object")

    _check_storable(data)
    return data


def with_id(document_id: str, data: dict[str, Any]) -> dict[str, Any]:
    """Return *data* with ``_id`` set to *document_id* as its first key.

    The server-assigned id always wins over a client-supplied ``_id``.
    """
    payload: dict[str, Any] = {ID_FIELD: document_id}
    payload.update((k, v) for k, v in data.items() if k != ID_FIELD)
    return payload


def merge_payload(existing: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    """Field-level merge: keys in *patch* overwrite or extend *existing*.

    Keys absent from *patch* are preserved and ``_id`` never changes.
    """
    merged = dict(existing)
    for key, value in patch.items():
        if key == ID_FIELD:
            continue
        merged[key] = value
    return merged
