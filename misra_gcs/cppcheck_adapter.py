"""
Cppcheck adapter (MISRA addon).

Warning lines look like

    [src/main.c:42] (style) misra violation (use --rule-texts=...) [misra-c2012-10.4]

and suppressions are inline comments

    // cppcheck-suppress misra-c2012-10.4
    /* cppcheck-suppress misra-c2012-11.3 ; DEVIATION(DR-12) */
"""

import re
from typing import List, Optional, Set

from misra_gcs.comment_scanner import scan_comments
from misra_gcs.guideline_catalog import MisraVersion
from misra_gcs.models import Violation
from misra_gcs.tool_adapter import ToolAdapter, register_adapter

_WARNING_LINE = re.compile(r"\[([^:]*):(\d+)\][^\[]*\[misra-c2012-(\d+\.\d+)\]")
_GUIDELINE = re.compile(r"misra-c2012-(\d+\.\d+)")
_SUPPRESS = re.compile(r"\s*cppcheck-suppress\s")


@register_adapter
class CppcheckAdapter(ToolAdapter):

    def parse_warning_line(self, line: str) -> List[Violation]:
        match = _WARNING_LINE.search(line)
        if not match:
            return []
        return [Violation(
            file_name=match.group(1),
            line_number=int(match.group(2)),
            guideline_id="Rule " + match.group(3),
        )]

    def find_suppression_comments(self, file_text: str) -> List[str]:
        return [c.text() for c in scan_comments(file_text) if _SUPPRESS.match(c.body)]

    def guideline_ids_from_comment(self, comment: str) -> Optional[List[str]]:
        return ["Rule " + m.group(1) for m in _GUIDELINE.finditer(comment)]

    def name(self) -> str:
        return "Cppcheck"

    def supported_versions(self) -> Set[MisraVersion]:
        # The cppcheck MISRA addon only knows MISRA C:2012.
        return {MisraVersion.C_2012}
