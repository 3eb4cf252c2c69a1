"""Canonical text and structured codecs for scores.

Text form, seven space-separated fields:

    <strength> <time, hex epoch seconds> <host> <port, hex> <invoice prefix> <invoice suffix> <suffixes...>

e.g. ``8 5b332d31 b2.zold.io 1000 THdonv1E abcdabcdabcdabcd 3a934b 1421217``.
This is the wire representation and must stay byte-for-byte stable.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from .chain import iso8601
from .errors import ScoreParseError

if TYPE_CHECKING:
    from .models import Score


def to_text(score: Score) -> str:
    """Render the canonical text form. Parse it back with ``parse_text``."""
    pfx, bnf = score.invoice.split("@")
    return " ".join([
        str(score.strength),
        format(math.floor(score.time.timestamp()), "x"),
        score.host,
        format(score.port, "x"),
        pfx,
        bnf,
        " ".join(score.suffixes),
    ])


def parse_text(text: str | None) -> Score:
    """Parse the canonical text form produced by ``to_text``.

    Time is restored at second precision in UTC and ``created`` is now.

    Raises:
        ScoreParseError: on missing input, too few fields or bad numbers.
        ScoreValidationError: if a parsed field violates its constraint.
    """
    from .models import Score

    if text is None:
        raise ScoreParseError("Can't parse None")
    parts = text.split(None, 6)
    if len(parts) < 6:
        raise ScoreParseError(f'Invalid score, not enough parts in "{text}"')
    try:
        strength = int(parts[0], 10)
        epoch = int(parts[1], 16)
        port = int(parts[3], 16)
    except ValueError as e:
        raise ScoreParseError(f'Invalid score, malformed number in "{text}": {e}') from e
    try:
        time = datetime.fromtimestamp(epoch, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise ScoreParseError(f'Invalid score, bad time in "{text}": {e}') from e
    return Score(
        time=time,
        host=parts[2],
        port=port,
        invoice=f"{parts[4]}@{parts[5]}",
        suffixes=tuple(parts[6].split()) if len(parts) > 6 else (),
        strength=strength,
    )


def to_dict(score: Score) -> dict[str, Any]:
    """Diagnostic structured form; only partly consumed by ``parse_json``."""
    return {
        "value": score.value,
        "host": score.host,
        "port": score.port,
        "invoice": score.invoice,
        "time": iso8601(score.time),
        "suffixes": list(score.suffixes),
        "strength": score.strength,
        "hash": None if score.is_zero else score.hash,
        "expired": score.is_expired(),
        "valid": score.is_valid(),
        "age": round(score.age.total_seconds() / 60),
        "created": iso8601(score.created),
    }


def _parse_time(raw: Any) -> datetime:
    if not isinstance(raw, str):
        raise ScoreParseError(f"Score time must be an ISO-8601 string, while {raw!r} is provided")
    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise ScoreParseError(f"Score time is not ISO-8601: {raw!r}") from e


def parse_json(data: Any) -> Score:
    """Build a score from the structured form (a mapping or a JSON string)."""
    from .models import Score

    if data is None:
        raise ScoreParseError("JSON can't be None")
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except ValueError as e:
            raise ScoreParseError(f"Score JSON is malformed: {e}") from e
    if not isinstance(data, Mapping):
        raise ScoreParseError(f"Score JSON must be an object, while {type(data).__name__} is provided")
    suffixes = data.get("suffixes")
    return Score(
        time=_parse_time(data.get("time")),
        host=data.get("host"),
        port=data.get("port"),
        invoice=data.get("invoice"),
        suffixes=tuple(suffixes) if isinstance(suffixes, list) else suffixes,
        strength=data.get("strength"),
    )


__all__ = ["parse_json", "parse_text", "to_dict", "to_text"]
