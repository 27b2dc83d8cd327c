"""
JSON parsing and result reconciliation for vision-model output.

This module turns per-section model text into vehicle lists, tolerating
markdown fences and common JSON damage, then flattens all sections and
deduplicates vehicles by identity key.
"""

import re
import json
from typing import Any, Dict, List, Optional, Sequence, Tuple

import json5
from pydantic import ValidationError

from dealer_vision.core.logging import get_logger
from dealer_vision.core.error_logger import get_error_logger
from dealer_vision.core.error_models import ErrorComponent, ErrorSeverity, ErrorType, ErrorStage
from dealer_vision.llm.models import VehicleRecord

logger = get_logger(__name__)

# ---------------- JSON Repair Utilities ----------------

_FENCE_RE = re.compile(r"```(?:json)?[ \t]*\n?", re.IGNORECASE)
_SMART_QUOTES = {
    "‘": "'",
    "’": "'",
    "“": '"',
    "”": '"',
    "«": '"',
    "»": '"'
}
_CTRL_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F]")


def strip_code_fences(text: str) -> str:
    """
    Remove markdown code-fence markers (```json / ```) and trim.

    Example:
        >>> strip_code_fences('```json\\n{"vehicles": []}\\n```')
        '{"vehicles": []}'
    """
    return _FENCE_RE.sub("", text).strip()


def sanitize_json_text(text: str) -> str:
    """
    Best-effort cleanups for common JSON issues.

    Removes markdown code fences, replaces smart quotes,
    removes control characters, and fixes trailing commas.

    Example:
        >>> sanitize_json_text('```json\\n{"key": "value",}\\n```')
        '{"key": "value"}'
    """
    t = strip_code_fences(text)

    for k, v in _SMART_QUOTES.items():
        t = t.replace(k, v)

    t = _CTRL_RE.sub("", t)

    # Remove trailing commas before ] or }
    t = re.sub(r",(\s*[\]\}])", r"\1", t)

    return t.strip()


def parse_json_robust(text: str) -> Any:
    """
    Parse JSON text with multiple fallback strategies.

    Tries in order:
    1. Fence-stripped json.loads()
    2. Sanitize + json.loads()
    3. json5.loads()
    4. Brace-slice + retry parse

    Raises:
        ValueError: If all parsing strategies fail
    """
    t1 = strip_code_fences(text)
    try:
        return json.loads(t1)
    except ValueError:
        pass

    t2 = sanitize_json_text(text)
    try:
        return json.loads(t2)
    except ValueError:
        pass

    try:
        return json5.loads(t2)
    except ValueError:
        pass

    # Content between first { and last }
    start = t2.find("{")
    end = t2.rfind("}")
    if start >= 0 and end > start:
        sliced = t2[start:end + 1]
        try:
            return json.loads(sliced)
        except ValueError:
            try:
                return json5.loads(sliced)
            except ValueError:
                pass

    raise ValueError("Unparseable JSON after all fallback strategies")


def parse_vehicle_list(text: Optional[str]) -> Optional[List[Any]]:
    """
    Best-effort extraction of the "vehicles" array from model text.

    Never raises.

    Returns:
        The vehicles list ([] when the field is absent or not a list),
        or None when the text cannot be parsed at all
    """
    if text is None:
        return None
    try:
        parsed = parse_json_robust(text)
    except (ValueError, TypeError, RecursionError):
        return None

    if not isinstance(parsed, dict):
        return []
    vehicles = parsed.get("vehicles")
    return vehicles if isinstance(vehicles, list) else []


# ---------------- Reconciliation ----------------

def _key_part(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def identity_key(vehicle: Dict[str, Any]) -> Optional[str]:
    """
    Deduplication key: stock_number + "-" + title.

    Returns None when both parts are blank; such records are never merged
    with each other.

    Example:
        >>> identity_key({"title": "2019 Ford E450", "specifications": {"stock_number": "A12"}})
        'A12-2019 Ford E450'
    """
    specs = vehicle.get("specifications") or {}
    stock = _key_part(specs.get("stock_number") if isinstance(specs, dict) else None)
    title = _key_part(vehicle.get("title"))
    if not stock and not title:
        return None
    return f"{stock}-{title}"


def _is_vehicle_object(raw: Any) -> bool:
    """Only non-object entries are rejected; field values are never checked."""
    try:
        VehicleRecord.model_validate(raw)
    except ValidationError:
        return False
    return True


def reconcile(
    raw_outputs: Sequence[Optional[str]],
    domain: str = "unknown",
) -> Tuple[Dict[str, Any], Dict[str, int]]:
    """
    Merge per-section model outputs into one deduplicated vehicle list.

    None entries are skipped; unparseable entries are logged and contribute
    no vehicles. Every object entry is kept unchanged, whatever its field
    values; non-object entries are logged and dropped. On identity-key
    collisions the last record wins but keeps the position of the first.
    Never raises.

    Args:
        raw_outputs: Section outputs in capture order
        domain: Target domain, for error records

    Returns:
        Tuple of ({"vehicles": [...]}, stats) where stats has sections,
        failed_sections, input_vehicles, rejected, duplicates_removed,
        unique_vehicles
    """
    merged: Dict[str, Dict[str, Any]] = {}
    stats = {
        "sections": 0,
        "failed_sections": 0,
        "input_vehicles": 0,
        "rejected": 0,
        "duplicates_removed": 0,
        "unique_vehicles": 0,
    }

    for idx, raw in enumerate(raw_outputs):
        if raw is None:
            continue
        stats["sections"] += 1

        vehicles = parse_vehicle_list(raw)
        if vehicles is None:
            stats["failed_sections"] += 1
            logger.error(f"Error parsing result {idx + 1}. Raw result: {str(raw)[:200]}...")
            get_error_logger().log_error(
                component=ErrorComponent.RECONCILER,
                stage=ErrorStage.PARSE_JSON,
                error_type=ErrorType.JSON_ERROR,
                domain=domain,
                severity=ErrorSeverity.WARNING,
                message=f"Unparseable model output for result {idx + 1}",
                metadata={"response_preview": str(raw)[:500], "response_length": len(str(raw))},
            )
            continue

        for vehicle in vehicles:
            stats["input_vehicles"] += 1
            if not _is_vehicle_object(vehicle):
                stats["rejected"] += 1
                logger.warning(f"Skipping non-object vehicle entry in result {idx + 1}: {str(vehicle)[:120]}")
                get_error_logger().log_error(
                    component=ErrorComponent.RECONCILER,
                    stage=ErrorStage.PARSE_JSON,
                    error_type=ErrorType.VALIDATION_ERROR,
                    domain=domain,
                    severity=ErrorSeverity.WARNING,
                    message=f"Non-object vehicle entry in result {idx + 1}",
                    metadata={"entry_preview": str(vehicle)[:500], "entry_type": type(vehicle).__name__},
                )
                continue

            key = identity_key(vehicle) or f"idx::{len(merged)}"
            if key in merged:
                stats["duplicates_removed"] += 1
            merged[key] = vehicle

    stats["unique_vehicles"] = len(merged)
    logger.info(
        f"Merge stats: sections={stats['sections']} (failed {stats['failed_sections']}), "
        f"in={stats['input_vehicles']} → out={stats['unique_vehicles']} "
        f"(removed {stats['duplicates_removed']}, rejected {stats['rejected']})"
    )
    return {"vehicles": list(merged.values())}, stats


def merge_results(raw_outputs: Sequence[Optional[str]], domain: str = "unknown") -> Dict[str, Any]:
    """
    Merge section outputs into {"vehicles": [...]}.

    Example:
        >>> merge_results([None, '{"vehicles": [{"title": "A"}]}', "not json"])
        {'vehicles': [{'title': 'A'}]}
    """
    merged, _ = reconcile(raw_outputs, domain=domain)
    return merged
