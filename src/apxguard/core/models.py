#!/usr/bin/env python3
"""
APXGUARD CORE MODELS
--------------------
Defines the fundamental data structures used by the Config Guard extractor.
Scanned lines and context frames live only for the duration of one file scan;
summaries and reports are the immutable products handed to callers.

Author: APX Guard Team
Date: 2026-10-19
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class ScannedLine:
    """
    The atomic unit of a config-guard spec.

    One physical, non-blank, non-comment line with its leading whitespace
    measured and its content trimmed.
    """
    line_no: int            # The original line number in the source file
    indent: int             # Count of leading whitespace characters
    content: str            # The trimmed line text


class FrameRole(Enum):
    GENERIC = "generic"
    ENV_ITEM = "env"
    ROTATION_ITEM = "rotation"


@dataclass
class RotationEntry:
    """Rotation window of one secret. Unset fields never count toward staleness."""
    last_rotated_days: Optional[float] = None
    max_days: Optional[float] = None

    @property
    def is_stale(self) -> bool:
        if self.last_rotated_days is None or self.max_days is None:
            return False
        return self.last_rotated_days > self.max_days


@dataclass
class ContextFrame:
    """One open level of nesting, named by its mapping key or '<parent>-item'."""
    name: str
    indent: int
    role: FrameRole = FrameRole.GENERIC
    rotation: Optional[RotationEntry] = None  # Set only on ROTATION_ITEM frames


@dataclass
class ParserState:
    """
    Accumulators for a single file scan.

    Identity fields are first-write-wins; counters only grow.
    """
    pack_id: Optional[str] = None
    pack_version: Optional[str] = None
    namespace: Optional[str] = None
    environment: Optional[str] = None
    missing_env: int = 0
    env_count: int = 0
    secrets_count: int = 0
    rotations: List[RotationEntry] = field(default_factory=list)


@dataclass(frozen=True)
class PackGuardSummary:
    """Typed summary of one config-guard pack. Identity is (id, version)."""
    id: str
    version: str
    namespace: Optional[str]
    environment: Optional[str]
    env_count: int
    missing_env: int
    secrets_count: int
    stale_secrets: int

    @property
    def key(self) -> Tuple[str, str]:
        return (self.id, self.version)

    @property
    def severity(self) -> int:
        return self.missing_env + self.stale_secrets


@dataclass(frozen=True)
class AggregateReport:
    """Cross-pack totals plus packs ordered by severity, highest first."""
    total_packs: int
    missing_env: int
    stale_secrets: int
    packs: Tuple[PackGuardSummary, ...] = ()
