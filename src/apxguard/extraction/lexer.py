#!/usr/bin/env python3
"""
APXGUARD LEXER - Indentation Scanner
------------------------------------
Decomposes raw config-guard text into ScannedLine models. No quoting,
escaping or continuation rules apply: each physical line stands alone.

Author: APX Guard Team
Date: 2026-10-19
"""

from typing import Iterator
from apxguard.core.models import ScannedLine


class GuardLexer:
    """
    Turns raw text into a lazy stream of (indent, content) lines,
    dropping blanks and full-line comments.
    """

    def _clean_artifacts(self, text: str) -> str:
        """
        Removes invisible UTF-8 BOM markers and standardizes line endings.
        """
        text = text.lstrip('\ufeff')
        return text.replace('\r\n', '\n')

    def measure(self, line: str) -> int:
        """Counts the leading whitespace characters of a raw line."""
        return len(line) - len(line.lstrip())

    def scan(self, raw_text: str) -> Iterator[ScannedLine]:
        """
        Yields one ScannedLine per meaningful line, in file order.
        The stream is not resumable; call scan() again to restart.
        """
        lines = self._clean_artifacts(raw_text).split('\n')

        for i, line in enumerate(lines, 1):
            content = line.strip()
            if not content or content.startswith('#'):
                continue

            yield ScannedLine(line_no=i, indent=self.measure(line), content=content)
