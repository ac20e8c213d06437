"""
Annotation Grammar — tags inside tool suppression comments.

A suppression comment silences an analyzer warning.  Authors annotate it
with tags that tell the compliance engine what the suppression means:

  • GUIDELINE(<id>)                    which guideline(s) the comment suppresses
  • NONMISRA                           the suppressed warning is not MISRA related
  • FALSE_POSITIVE / FALSE_POSITIVE(<id>)
  • DEVIATION(<ref>) / DEVIATION(<ref>, <link>) / DEVIATION(<ref>, <link>, <id>)

Explicit GUIDELINE tags win over the ids a tool adapter infers from the
comment.  The grammar is tool agnostic; the patterns can be replaced as long
as their capture groups keep the same meaning.
"""

import logging
import re
from typing import Callable, Iterable, List, Optional

from misra_gcs.errors import ErrorCode, ErrorLog
from misra_gcs.models import CommentProperties, Suppression

logger = logging.getLogger(__name__)

DEFAULT_FALSE_POSITIVE_PATTERN = r"\bFALSE.?POSITIVE(?:\(([^\)]*)\))?"
DEFAULT_DEVIATION_PATTERN = (
    r"\bDEVIATION\(\s*([^,\(\)]*?)\s*(?:\)|(?:,\s*([^\(\)]*?)\s*"
    r"(?:\)|(?:,\s*([^\(\)]*?)\s*\)))))"
)
DEFAULT_NON_MISRA_PATTERN = r"\bNON.?MISRA"
DEFAULT_GUIDELINE_PATTERN = r"\bGUIDELINE\(([^\)]*)\)"

# A colon not followed by "//", with or without a single slash after it.
_PROTOCOL_PATTERN = re.compile(r":(?!/)|:/(?!/)")

IdMapper = Callable[[str], Optional[Iterable[str]]]


def repair_link(link: Optional[str]) -> Optional[str]:
    """Reinsert the "//" of a URL scheme.

    MISRA forbids "//" inside C comments, so links in deviation tags are
    written as ``http:host`` or ``http:/host``.
    """
    if link is None:
        return None
    return _PROTOCOL_PATTERN.sub("://", link, count=1)


class AnnotationGrammar:
    def __init__(self):
        self.false_positive_pattern = DEFAULT_FALSE_POSITIVE_PATTERN
        self.deviation_pattern = DEFAULT_DEVIATION_PATTERN
        self.non_misra_pattern = DEFAULT_NON_MISRA_PATTERN
        self.guideline_pattern = DEFAULT_GUIDELINE_PATTERN

    # ────────────────────────────────────────────────────────────────
    #  Pattern configuration
    # ────────────────────────────────────────────────────────────────

    @property
    def false_positive_pattern(self) -> str:
        return self._false_positive.pattern

    @false_positive_pattern.setter
    def false_positive_pattern(self, regex: str) -> None:
        self._false_positive = re.compile(regex)

    @property
    def deviation_pattern(self) -> str:
        return self._deviation.pattern

    @deviation_pattern.setter
    def deviation_pattern(self, regex: str) -> None:
        self._deviation = re.compile(regex)

    @property
    def non_misra_pattern(self) -> str:
        return self._non_misra.pattern

    @non_misra_pattern.setter
    def non_misra_pattern(self, regex: str) -> None:
        self._non_misra = re.compile(regex)

    @property
    def guideline_pattern(self) -> str:
        return self._guideline.pattern

    @guideline_pattern.setter
    def guideline_pattern(self, regex: str) -> None:
        self._guideline = re.compile(regex)

    # ────────────────────────────────────────────────────────────────
    #  Parsing
    # ────────────────────────────────────────────────────────────────

    def guideline_tags(self, comment: str) -> List[str]:
        ids = (m.group(1).strip() for m in self._guideline.finditer(comment))
        return list(dict.fromkeys(i for i in ids if i))

    def is_non_misra(self, comment: str) -> bool:
        return self._non_misra.search(comment) is not None

    def parse(
        self,
        comment: str,
        id_mapper: Optional[IdMapper] = None,
        errors: Optional[ErrorLog] = None,
        file_name: str = "",
    ) -> CommentProperties:
        """Parse one suppression comment.

        The returned properties carry no suppressions when no guideline id
        could be resolved; deciding what that means is left to the caller.
        """
        errors = errors if errors is not None else ErrorLog()
        ids = self.guideline_tags(comment)
        if not ids and id_mapper is not None:
            ids = list(dict.fromkeys(id_mapper(comment) or ()))

        props = CommentProperties(
            file_name=file_name,
            is_non_misra=self.is_non_misra(comment),
            suppressions={gid: Suppression(guideline_id=gid) for gid in ids},
        )
        self._mark_false_positives(props, comment, errors, file_name)
        self._mark_deviations(props, comment, errors, file_name)
        return props

    def _mark_false_positives(self, props, comment, errors, file_name) -> None:
        for match in self._false_positive.finditer(comment):
            guideline_id = _group(match, 1)
            if guideline_id is None:
                for s in props.suppressions.values():
                    s.is_false_positive = True
                break
            guideline_id = guideline_id.strip()
            s = props.suppressions.get(guideline_id)
            if s is not None:
                s.is_false_positive = True
            else:
                errors.record(
                    ErrorCode.GUIDELINE_NOT_FOUND,
                    f"{file_name}: False positive tag found for the guideline {guideline_id}, "
                    f"but this guideline is not suppressed by the comment \"{comment}\".",
                )

    def _mark_deviations(self, props, comment, errors, file_name) -> None:
        for match in self._deviation.finditer(comment):
            reference, link, guideline_id = (_group(match, i) for i in (1, 2, 3))
            if guideline_id is None:
                for s in props.suppressions.values():
                    _mark_deviation(s, reference, link)
                break
            s = props.suppressions.get(guideline_id)
            if s is not None:
                _mark_deviation(s, reference, link)
            else:
                errors.record(
                    ErrorCode.GUIDELINE_NOT_FOUND,
                    f"{file_name}: Deviation tag found for the guideline {guideline_id}, "
                    f"but this guideline is not suppressed by the comment \"{comment}\".",
                )


def _group(match: "re.Match", index: int) -> Optional[str]:
    # Replacement patterns may leave out the optional groups.
    return match.group(index) if index <= match.re.groups else None


def _mark_deviation(s: Suppression, reference: Optional[str], link: Optional[str]) -> None:
    s.is_deviation = True
    s.deviation_reference = reference
    s.deviation_link = repair_link(link)
