"""Deterministic canonicalization helpers for Egress."""

from __future__ import annotations

import json
import math
from typing import Any


def canonicalize(value: Any) -> Any:
    """Normalize JSON-compatible values to a deterministic representation."""
    if isinstance(value, dict):
        return {
            str(key): canonicalize(value[key])
            for key in sorted(value.keys(), key=lambda raw: str(raw))
        }

    if isinstance(value, (list, tuple)):
        return [canonicalize(item) for item in value]

    if isinstance(value, str):
        return value.replace("\r\n", "\n").replace("\r", "\n")

    if isinstance(value, bool) or value is None:
        return value

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise ValueError("NaN and infinity are not supported in canonical JSON")
        return float(f"{value:.12g}")

    return value


def canonical_json(value: Any) -> str:
    """Serialize a value to stable compact JSON (used for checksums)."""
    return json.dumps(
        canonicalize(value),
        ensure_ascii=True,
        separators=(",", ":"),
        sort_keys=True,
    )


def pretty_json(value: Any) -> str:
    """Serialize a value to stable, human-diffable JSON.

    Lossless: floats keep their shortest round-trip repr and strings are
    left byte-for-byte, so any change in the data changes the text. Only
    key order is normalized. NaN and infinity raise `ValueError`.
    """
    return json.dumps(
        value,
        ensure_ascii=True,
        indent=2,
        sort_keys=True,
        allow_nan=False,
    )
