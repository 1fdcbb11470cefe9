#!/usr/bin/env python3
"""
APXGUARD LABEL RULES
--------------------
Loads the precomputed semantic diff and derives pull-request labels and
the blocking-security signal from it, and condenses the optional
semantic-debt scan. JSON documents are read through ruamel.yaml's safe
loader, since JSON is a subset of YAML; duplicate keys keep the last value.

Author: APX Guard Team
Date: 2026-10-19
"""

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from ruamel.yaml import YAML, YAMLError
from ruamel.yaml.constructor import SafeConstructor

logger = logging.getLogger("apxguard.labels")

MAX_LABEL_LENGTH = 100
BLOCKING_SEVERITIES = {"high", "critical", "block"}
MAX_CONFLICTS = 3


class DiffLoadError(RuntimeError):
    """Raised when the semantic diff cannot be read or parsed."""


class LastKeyWinsConstructor(SafeConstructor):
    """
    Safe constructor that resolves duplicate mapping keys like a JSON
    parser does: the last value for a key replaces earlier ones.
    """

    def check_mapping_key(self, node: Any, key_node: Any, mapping: Any, key: Any, value: Any) -> bool:
        return True


def _load_document(path: Path) -> Any:
    raw = path.read_text(encoding='utf-8')
    yaml = YAML(typ='safe', pure=True)
    yaml.Constructor = LastKeyWinsConstructor
    yaml.allow_duplicate_keys = True
    return yaml.load(raw)


def load_semantic_diff(path: Union[str, Path]) -> Dict[str, Any]:
    resolved = Path(path).resolve()
    try:
        data = _load_document(resolved)
    except (OSError, YAMLError) as e:
        raise DiffLoadError(f'Unable to read semantic diff from "{resolved}": {e}')
    return data if isinstance(data, dict) else {}


def load_scan_payload(path: Optional[Union[str, Path]]) -> Optional[Dict[str, Any]]:
    """Optional semantic-debt scan. Missing or unreadable payloads yield None."""
    if not path:
        return None
    resolved = Path(path).resolve()
    if not resolved.exists():
        return None
    try:
        data = _load_document(resolved)
    except (OSError, YAMLError) as e:
        logger.info(f'Unable to read semantic debt scan from "{resolved}": {e}')
        return None
    return data if isinstance(data, dict) else None


def to_list(value: Any) -> List[Any]:
    if not value:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _nested(data: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _ident(item: Any) -> Any:
    if isinstance(item, dict):
        return item.get("id") or item.get("name")
    return None


def collect_labels(diff: Dict[str, Any]) -> List[str]:
    """
    Derives 'apx:<prefix>=<value>' labels from a semantic diff.
    Order follows first appearance; duplicates are dropped.
    """
    labels: Dict[str, None] = {}

    def add(prefix: str, values: Iterable[Any]):
        for value in values:
            if not value:
                continue
            labels[f"{prefix}{str(value).strip()}"[:MAX_LABEL_LENGTH]] = None

    # A mapping of packs has no scalar entries of its own
    packs = [] if isinstance(diff.get("packs"), dict) else to_list(diff.get("packs"))
    packs += to_list(_nested(diff, "packs", "touched"))
    packs += to_list(_nested(diff, "packs", "changed"))
    summary_packs = _nested(diff, "summary", "packs")
    if isinstance(summary_packs, dict):
        packs += list(summary_packs)
    add("apx:pack=", packs)

    impacts = diff.get("impacts")
    add("apx:impact=", [] if isinstance(impacts, dict) else to_list(impacts))
    add("apx:impact=", to_list(_nested(diff, "impacts", "domains")))
    add("apx:trait=", to_list(diff.get("traits")))
    add("apx:trait=", to_list(diff.get("labels")))
    add("apx:constraint=", [_ident(item) for item in to_list(_nested(diff, "extensions", "constraints"))])

    return list(labels)


def has_blocking_security(diff: Dict[str, Any]) -> bool:
    for alert in to_list(diff.get("alerts")):
        if not isinstance(alert, dict):
            continue
        kind = str(alert.get("kind") or alert.get("type") or "").lower()
        severity = str(alert.get("severity") or alert.get("level") or "").lower()
        if "security" in kind and severity in BLOCKING_SEVERITIES:
            return True
    return False


@dataclass(frozen=True)
class ScanSummary:
    """Headline figures of a semantic-debt scan."""
    debt_score: Optional[float] = None
    annual_cost: Optional[float] = None
    conflicts: Tuple[Tuple[str, str], ...] = ()  # (key, SEVERITY), at most MAX_CONFLICTS


def _first_present(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def _finite(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def summarize_scan_result(scan: Optional[Dict[str, Any]]) -> Optional[ScanSummary]:
    """
    Extracts the debt score, the estimated annual cost and the first
    conflicts from a scan payload. Snake and camel case keys are accepted.
    """
    if not scan:
        return None

    conflicts = []
    raw_conflicts = scan.get("conflicts")
    for conflict in (raw_conflicts if isinstance(raw_conflicts, list) else [])[:MAX_CONFLICTS]:
        if not isinstance(conflict, dict):
            conflicts.append(("?", "?"))
            continue
        key = conflict.get("key") or conflict.get("normalized_key") or conflict.get("normalizedKey") or "?"
        severity = str(conflict.get("severity") or "").upper() or "?"
        conflicts.append((str(key), severity))

    return ScanSummary(
        debt_score=_finite(_first_present(scan, "debt_score", "debtScore", "debt")),
        annual_cost=_finite(_first_present(scan, "expected_annual_cost", "expectedAnnualCost", "annualCost")),
        conflicts=tuple(conflicts),
    )
