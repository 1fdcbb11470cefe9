#!/usr/bin/env python3
"""
APXGUARD CONTEXT STACK
----------------------
Tracks the nesting path of a config-guard spec as lines are scanned.
Frames are popped on dedent and pushed on mapping keys and list items.

Author: APX Guard Team
Date: 2026-10-19
"""

from typing import List, Optional
from apxguard.core.models import ContextFrame, FrameRole, RotationEntry

# Block names whose list items carry env / rotation semantics
ITEM_ROLES = {
    "required_env": FrameRole.ENV_ITEM,
    "rotations": FrameRole.ROTATION_ITEM,
}


class ContextStack:
    """
    Ordered stack of open ContextFrames, outermost first.

    Owned by a single file scan; never shared between invocations.
    """

    def __init__(self):
        self.frames: List[ContextFrame] = []

    @property
    def top(self) -> Optional[ContextFrame]:
        return self.frames[-1] if self.frames else None

    @property
    def path(self) -> List[str]:
        """Names of every open frame, bottom to top."""
        return [frame.name for frame in self.frames]

    def dedent(self, indent: int):
        """
        Closes every frame at the same or deeper indentation.
        A sibling at equal depth closes its predecessor too.
        """
        while self.frames and self.frames[-1].indent >= indent:
            self.frames.pop()

    def open_mapping(self, name: str, indent: int) -> ContextFrame:
        frame = ContextFrame(name=name, indent=indent)
        self.frames.append(frame)
        return frame

    def open_item(self, indent: int) -> ContextFrame:
        """
        Pushes a list-item frame named after its parent block.
        Items under 'rotations' get a fresh RotationEntry attached.
        """
        parent = self.top.name if self.top else None
        role = ITEM_ROLES.get(parent, FrameRole.GENERIC)

        frame = ContextFrame(
            name=f"{parent}-item" if parent else "list-item",
            indent=indent,
            role=role,
            rotation=RotationEntry() if role is FrameRole.ROTATION_ITEM else None,
        )
        self.frames.append(frame)
        return frame
