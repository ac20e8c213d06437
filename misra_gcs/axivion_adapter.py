"""
Axivion Bauhaus Suite adapter.

Accepts two kinds of warning lines:

  • JSON lines — one issue object per line, as written by the Axivion
    Dashboard export or a CI wrapper.  Several key conventions are accepted
    ("ruleId" / "rule_id" / "rule" / "checkId", nested "location" or flat
    "file" / "line").
  • Text lines — ``path:line[:col]: ... MisraC2012-10.4 ...``

Axivion rule ids are mapped to catalog ids:

    MisraC2012-10.4           → Rule 10.4
    MisraC2012Directive-4.1   → Directive 4.1

Suppression comments start with the AXIVION keyword:

    // AXIVION Next Line MisraC2012-10.4: DEVIATION(DR-7)
    /* AXIVION Routine MisraC2012-15.5 */
"""

import json
import logging
import re
from typing import List, Optional, Set

from misra_gcs.comment_scanner import scan_comments
from misra_gcs.guideline_catalog import MisraVersion
from misra_gcs.models import Violation
from misra_gcs.tool_adapter import ToolAdapter, register_adapter

logger = logging.getLogger(__name__)

_RULE_ID = re.compile(r"\bMisraC2012(Directive)?-(\d+\.\d+)")
_TEXT_LINE = re.compile(r"^(.*?):(\d+):(?:\d+:)?")
_SUPPRESSION = re.compile(r"\s*AXIVION\b(?!\s+ENABLE\b)")


def to_guideline_id(rule_id: str) -> Optional[str]:
    """Translate an Axivion rule id to a catalog guideline id."""
    match = _RULE_ID.search(rule_id or "")
    if not match:
        return None
    kind = "Directive" if match.group(1) else "Rule"
    return f"{kind} {match.group(2)}"


@register_adapter
class AxivionAdapter(ToolAdapter):

    def parse_warning_line(self, line: str) -> List[Violation]:
        stripped = line.strip()
        if stripped.startswith("{"):
            return self._parse_json_line(stripped)
        return self._parse_text_line(stripped)

    def _parse_json_line(self, line: str) -> List[Violation]:
        try:
            item = json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning("Skipping malformed Axivion issue: %s (%s)", line, e)
            return []
        if not isinstance(item, dict):
            return []

        # ── Rule ID ──
        rule_id = (
            item.get("ruleId")
            or item.get("rule_id")
            or item.get("rule")
            or item.get("checkId")
            or ""
        )
        guideline_id = to_guideline_id(str(rule_id))
        if guideline_id is None:
            return []

        # ── Location ──
        loc = item.get("location")
        if isinstance(loc, dict) and loc:
            file_path = loc.get("path") or loc.get("file") or ""
            line_number = loc.get("startLine") or loc.get("line") or 0
        else:
            file_path = item.get("file") or item.get("path") or ""
            line_number = item.get("line") or item.get("startLine") or 0

        try:
            line_number = int(line_number)
        except (TypeError, ValueError):
            line_number = 0
        return [Violation(
            file_name=str(file_path),
            line_number=line_number,
            guideline_id=guideline_id,
        )]

    def _parse_text_line(self, line: str) -> List[Violation]:
        location = _TEXT_LINE.match(line)
        if not location:
            return []
        return [
            Violation(
                file_name=location.group(1),
                line_number=int(location.group(2)),
                guideline_id=to_guideline_id(m.group(0)),
            )
            for m in _RULE_ID.finditer(line, location.end())
        ]

    def find_suppression_comments(self, file_text: str) -> List[str]:
        return [c.text() for c in scan_comments(file_text) if _SUPPRESSION.match(c.body)]

    def guideline_ids_from_comment(self, comment: str) -> Optional[List[str]]:
        ids = [to_guideline_id(m.group(0)) for m in _RULE_ID.finditer(comment)]
        return list(dict.fromkeys(ids))

    def name(self) -> str:
        return "Axivion"

    def supported_versions(self) -> Set[MisraVersion]:
        return {MisraVersion.C_2012}
