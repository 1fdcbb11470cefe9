#!/usr/bin/env python3
"""
APXGUARD FIELD ROUTER
---------------------
Decides which accumulator a key/value pair updates, given the open context
path and the frame acting for the line. The rule set is closed: keys outside
it are ignored.

Author: APX Guard Team
Date: 2026-10-19
"""

import math
import re
from typing import List, Optional
from apxguard.core.models import ContextFrame, FrameRole, ParserState

FALSE_PATTERN = re.compile(r'false', re.IGNORECASE)


def parse_number(value: str) -> Optional[float]:
    """Returns a finite float, or None when the value is not numeric."""
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


class FieldRouter:
    """
    The rule table for config-guard keys.

    Identity rules fire only while their block is open anywhere in the path
    and only while the target field is still unset (first write wins).
    Env and rotation rules fire only for the acting list-item frame.
    """

    # (key, required open block, ParserState attribute)
    IDENTITY_RULES = (
        ("id", "pack", "pack_id"),
        ("version", "pack", "pack_version"),
        ("namespace", "spec", "namespace"),
        ("environment", "spec", "environment"),
    )

    ROTATION_FIELDS = ("last_rotated_days", "max_days")

    def route(self, state: ParserState, key: str, value: str,
              path: List[str], acting: Optional[ContextFrame]):
        for rule_key, block, attr in self.IDENTITY_RULES:
            if key == rule_key and block in path and not getattr(state, attr):
                setattr(state, attr, value)

        if acting is None:
            return

        if acting.role is FrameRole.ENV_ITEM:
            if key == "present" and FALSE_PATTERN.search(value):
                state.missing_env += 1

        elif acting.role is FrameRole.ROTATION_ITEM and key in self.ROTATION_FIELDS:
            setattr(acting.rotation, key, parse_number(value))
