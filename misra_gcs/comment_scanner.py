"""
Comment Scanner — finds C/C++ comments with tree-sitter.

Using the parse tree instead of a regex keeps comment markers inside string
literals (``"// not a comment"``) out of the result.  Each comment is returned
with its delimiters stripped, together with the character offset where its
body starts in the source text.  Adapters hand bodies on as ``CommentText``
so the engine can place each one on the line of the real comment instead of
the first matching text.
"""

import logging
from dataclasses import dataclass
from typing import List

import tree_sitter_c as tsc
from tree_sitter import Language, Parser

logger = logging.getLogger(__name__)

C_LANGUAGE = Language(tsc.language())
_parser = Parser(C_LANGUAGE)


class CommentText(str):
    """A comment body that remembers where it starts in the source text."""

    def __new__(cls, text: str, offset: int):
        obj = super().__new__(cls, text)
        obj.offset = offset
        return obj


@dataclass
class SourceComment:
    body: str            # comment text without // or /* */
    is_block: bool       # True for /* ... */ comments
    offset: int          # character offset of body in the source text

    def text(self, skip: int = 0) -> CommentText:
        """``body[skip:]`` as CommentText."""
        return CommentText(self.body[skip:], self.offset + skip)


def scan_comments(source: str) -> List[SourceComment]:
    """All comments of ``source`` in document order."""
    data = source.encode("utf-8")
    tree = _parser.parse(data)
    nodes = []
    stack = [tree.root_node]
    while stack:
        node = stack.pop()
        if node.type == "comment":
            nodes.append(node)
            continue
        # Reversed so the left-most child is visited first.
        stack.extend(reversed(node.children))

    # tree-sitter reports byte offsets; convert to str offsets incrementally.
    comments: List[SourceComment] = []
    byte_pos = char_pos = 0
    for node in nodes:
        char_pos += len(data[byte_pos:node.start_byte].decode("utf-8"))
        byte_pos = node.start_byte
        comments.append(_to_comment(node, char_pos))
    return comments


def _to_comment(node, start: int) -> SourceComment:
    text = node.text.decode("utf-8", errors="replace")
    if text.startswith("/*"):
        body = text[2:-2] if text.endswith("*/") and len(text) >= 4 else text[2:]
        return SourceComment(body=body, is_block=True, offset=start + 2)
    return SourceComment(body=text[2:], is_block=False, offset=start + 2)
