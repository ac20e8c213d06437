"""
Line Locator — forward-only line-number lookup inside a block of text.

Suppression comments are reported by the tool adapters as bare substrings,
in document order.  The locator finds each one after the previous match, so
two identical comments in a file resolve to two different lines.
"""

import bisect
import re
from typing import List, Optional, Pattern, Union

NOT_FOUND = -1


class LineLocator:
    def __init__(self, text: str):
        self.text = text
        self._breaks: List[int] = [i for i, ch in enumerate(text) if ch == "\n"]
        self._pos = 0
        self._last_empty = False
        self.last_match: Optional[re.Match] = None

    def find_next(self, needle: str, start: Optional[int] = None) -> int:
        """Line of the next literal occurrence of ``needle``, or NOT_FOUND.

        ``start`` moves the search position forward to that offset first; it
        never moves it back.
        """
        return self.find_next_pattern(re.compile(re.escape(needle)), start)

    def find_next_pattern(self, pattern: Union[str, Pattern], start: Optional[int] = None) -> int:
        if isinstance(pattern, str):
            pattern = re.compile(pattern)
        if start is not None and start > self._pos:
            self._pos = start
            self._last_empty = False
        pos = self._pos
        if self._last_empty:
            pos += 1
        if pos > len(self.text):
            return NOT_FOUND
        match = pattern.search(self.text, pos)
        if match is None:
            return NOT_FOUND
        self.last_match = match
        self._pos = match.end()
        self._last_empty = match.start() == match.end()
        return self.line_at(match.start())

    def line_at(self, offset: int) -> int:
        """1-based line containing ``offset``; a newline belongs to the line it ends."""
        return bisect.bisect_left(self._breaks, offset) + 1
