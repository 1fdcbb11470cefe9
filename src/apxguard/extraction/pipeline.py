#!/usr/bin/env python3
"""
APXGUARD EXTRACTION PIPELINE - Per-File Summarizer
--------------------------------------------------
Central coordinator for a single config-guard spec. Drives the lexer,
context stack and field router over every line and condenses the
accumulated state into a PackGuardSummary.

Files without the config_guard_spec marker are rejected before any
line is scanned. Read failures never escape: the file simply
contributes nothing.

Author: APX Guard Team
Date: 2026-10-19
"""

import logging
import re
from pathlib import Path
from typing import Optional, Union

from apxguard.core.models import FrameRole, PackGuardSummary, ParserState, ScannedLine
from apxguard.extraction.context import ContextStack
from apxguard.extraction.lexer import GuardLexer
from apxguard.extraction.router import FieldRouter

logger = logging.getLogger("apxguard.pipeline")

MARKER_PATTERN = re.compile(r'\bconfig_guard_spec\b')
MARKUP_SUFFIX = re.compile(r'\.ya?ml$', re.IGNORECASE)
DEFAULT_VERSION = "0.0.0"


def _split_pair(text: str):
    key, _, value = text.partition(':')
    return key.strip(), value.strip()


class GuardPipeline:
    """
    The Orchestrator: ensures scanning, context tracking and field routing
    happen in a strictly defined order for every line.
    """

    def __init__(self):
        self.lexer = GuardLexer()
        self.router = FieldRouter()

    def is_guard_spec(self, raw_text: str) -> bool:
        return MARKER_PATTERN.search(raw_text) is not None

    def _process_line(self, line: ScannedLine, stack: ContextStack, state: ParserState):
        stack.dedent(line.indent)
        content = line.content

        # Mapping key: opens a named block, carries no value
        if content.endswith(':') and not content.startswith('- '):
            stack.open_mapping(content[:-1].strip(), line.indent)
            return

        # List item: the new frame acts for any inline pair
        if content.startswith('- '):
            frame = stack.open_item(line.indent)
            if frame.rotation is not None:
                state.rotations.append(frame.rotation)
                state.secrets_count += 1
            elif frame.role is FrameRole.ENV_ITEM:
                state.env_count += 1

            remainder = content[2:].strip()
            if ':' in remainder:
                key, value = _split_pair(remainder)
                self.router.route(state, key, value, stack.path, frame)
            return

        # Plain key/value: attributed to the innermost open frame
        if ':' in content:
            key, value = _split_pair(content)
            self.router.route(state, key, value, stack.path, stack.top)

    def run(self, raw_text: str, source_name: str) -> Optional[PackGuardSummary]:
        """
        Summarizes already-loaded text. `source_name` supplies the fallback id.
        """
        if not self.is_guard_spec(raw_text):
            return None

        stack = ContextStack()
        state = ParserState()
        for line in self.lexer.scan(raw_text):
            self._process_line(line, stack, state)

        return PackGuardSummary(
            id=state.pack_id or MARKUP_SUFFIX.sub('', source_name),
            version=state.pack_version or DEFAULT_VERSION,
            namespace=state.namespace,
            environment=state.environment,
            env_count=state.env_count,
            missing_env=state.missing_env,
            secrets_count=state.secrets_count,
            stale_secrets=sum(1 for entry in state.rotations if entry.is_stale),
        )

    def summarize_file(self, path: Union[str, Path]) -> Optional[PackGuardSummary]:
        path = Path(path)
        try:
            raw_text = path.read_text(encoding='utf-8-sig', errors='replace')
        except OSError as e:
            logger.debug(f"Skipping unreadable pack {path}: {e}")
            return None

        summary = self.run(raw_text, path.name)
        if summary is None:
            logger.debug(f"No config_guard_spec marker in {path}")
        return summary


def summarize_file(path: Union[str, Path]) -> Optional[PackGuardSummary]:
    """Convenience wrapper returning a summary, or None if the file does not qualify."""
    return GuardPipeline().summarize_file(path)
