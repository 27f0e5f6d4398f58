import json
import math
import re

from podclip.errors import ScoringFailure

LIST_FIELDS = ("reasons", "emotions", "keywords")


def _parse_json_payload(text: str) -> dict | list:
    """Parse JSON from a raw model response, including markdown-wrapped JSON."""
    try:
        return json.loads(text)
    except json.JSONDecodeError as direct_error:
        code_blocks = re.findall(r"```(?:json)?\s*([\s\S]*?)```", text, flags=re.IGNORECASE)
        for block in code_blocks:
            try:
                return json.loads(block)
            except json.JSONDecodeError:
                continue

        decoder = json.JSONDecoder()
        for match in re.finditer(r"[\[{]", text):
            try:
                payload, _ = decoder.raw_decode(text[match.start() :])
                return payload
            except json.JSONDecodeError:
                continue

        raise ValueError(f"Invalid JSON: {direct_error.msg}") from direct_error


def _coerce_score(value: object) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(score):
        return 0.0
    return max(0.0, min(1.0, score))


def _coerce_list(value: object) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(str(item).strip() for item in value if str(item).strip())


def parse_score_response(raw: str | dict) -> dict:
    """Normalize a scorer response into score/reasons/emotions/keywords/summary.

    Missing or non-numeric scores become 0 and missing lists become empty;
    a response that is not a JSON object raises ScoringFailure.
    """
    if isinstance(raw, dict):
        payload = raw
    else:
        if not isinstance(raw, str) or not raw.strip():
            raise ScoringFailure("Empty scoring response")
        try:
            payload = _parse_json_payload(raw)
        except ValueError as error:
            raise ScoringFailure(str(error)) from error

    if not isinstance(payload, dict):
        raise ScoringFailure("Scoring response must be a JSON object.")

    summary = payload.get("summary")
    normalized = {
        "score": _coerce_score(payload.get("score")),
        "summary": summary.strip() if isinstance(summary, str) else "",
    }
    for field in LIST_FIELDS:
        normalized[field] = _coerce_list(payload.get(field))
    return normalized
