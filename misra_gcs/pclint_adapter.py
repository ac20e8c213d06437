"""
PC-lint / PC-lint Plus adapter.

Warning lines (with the MISRA author file enabled) look like

    src/main.c(42): Note 9029: mismatched essential type categories [MISRA 2012 Rule 10.4, required]

Suppressions are lint comments carrying error inhibition options:

    //lint -e9029
    /*lint -esym(9003, counter) !e534 */

PC-lint reports message numbers, not guideline ids, so the adapter maps
numbers to guidelines with the ``-append`` options of the selected MISRA
version's reference document.
"""

import logging
import re
from typing import Dict, List, Optional

from misra_gcs.comment_scanner import scan_comments
from misra_gcs.guideline_catalog import MisraVersion, load_reference_document
from misra_gcs.models import Violation
from misra_gcs.tool_adapter import ToolAdapter, register_adapter

logger = logging.getLogger(__name__)

_APPEND = re.compile(r"-append\((\d+),\[MISRA (?:2004 |2012 |C\+\+ )?([^,\]]+).*\]\)")
_WARNING_LINE = re.compile(
    r"(.*?)\((\d+)\): (?:Note|Info|Error|Warning) (\d+): [^\[]*"
    r"\[MISRA (?:2004 |2012 |C\+\+ )?([^,\]]*)(:?, advisory|, required|, mandatory)?\]"
)
_MISRA_TAG = re.compile(
    r"\[MISRA (?:2004 |2012 |C\+\+ )?([^,\]]*)(:?, advisory|, required|, mandatory)?\]"
)
_LINE_LINT = re.compile(r"lint\s*")
_BLOCK_LINT = re.compile(r"lint\s+")
# One inhibition option, e.g. "-e9029 ", "!e534", "-esym(9003, counter) "
_INHIBITION = re.compile(
    r"[-!]e(?:sym\(|func\(|macro\(|file\(|template\(|string\(|call\(|type\()?"
    r"(\d+)(:?,[^\)]*\)\s*|\s*)"
)


@register_adapter
class PcLintAdapter(ToolAdapter):

    def __init__(self):
        self.error_map: Dict[int, List[str]] = {}

    def on_version_selected(self, version: MisraVersion) -> None:
        self.error_map = build_error_map(load_reference_document(version))
        logger.info("PC-lint error map: %d message numbers for %s", len(self.error_map), version)

    def parse_warning_line(self, line: str) -> List[Violation]:
        match = _WARNING_LINE.search(line)
        if not match:
            return []
        file_name = match.group(1)
        line_number = int(match.group(2))
        return [
            Violation(file_name=file_name, line_number=line_number, guideline_id=tag.group(1))
            for tag in _MISRA_TAG.finditer(line)
        ]

    def find_suppression_comments(self, file_text: str) -> List[str]:
        comments = []
        for comment in scan_comments(file_text):
            lint = _BLOCK_LINT if comment.is_block else _LINE_LINT
            match = lint.match(comment.body)
            if match:
                comments.append(comment.text(match.end()))
        return comments

    def guideline_ids_from_comment(self, comment: str) -> Optional[List[str]]:
        ids: List[str] = []
        pos = 0
        while True:
            match = _INHIBITION.match(comment, pos)
            if match is None:
                break
            guidelines = self.error_map.get(int(match.group(1)))
            if guidelines is None:
                return None
            ids.extend(guidelines)
            pos = match.end()
        return list(dict.fromkeys(ids))

    def name(self) -> str:
        return "PC-Lint"


def build_error_map(reference_text: str) -> Dict[int, List[str]]:
    """Message number -> guideline ids, from ``-append`` options."""
    error_map: Dict[int, List[str]] = {}
    for match in _APPEND.finditer(reference_text):
        error_map.setdefault(int(match.group(1)), []).append(match.group(2))
    return error_map
