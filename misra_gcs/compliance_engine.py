"""
Compliance Engine

Correlates two independent evidence streams into a MISRA Guideline
Compliance Summary:

  • warnings from a static analysis tool (via its ToolAdapter), and
  • suppression comments in the source code, annotated with the
    GUIDELINE / NONMISRA / FALSE_POSITIVE / DEVIATION grammar.

Operations are meant to be called in the order apply_grp → ingest_warnings
→ ingest_source_files, then queried with is_compliant / summary /
write_audit_log.  None of them raises on bad input: problems are collected
in ``errors`` and make the run non-compliant.

Precedence per guideline:
  1. Disapplied (by GRP) pins the status.
  2. A raw violation always sets Violations.
  3. A deviation sets Deviations unless the guideline already has Violations.
  4. A false positive changes nothing.
"""

import logging
import os
from typing import Callable, Iterable, Iterator, List, Optional

from misra_gcs.annotations import AnnotationGrammar
from misra_gcs.errors import ErrorCode, ErrorLog
from misra_gcs.guideline import (
    Category,
    ComplianceStatus,
    Guideline,
    is_recategorization_legal,
)
from misra_gcs.guideline_catalog import GuidelineCatalog, MisraVersion
from misra_gcs.line_locator import LineLocator
from misra_gcs.models import CommentProperties, Suppression
from misra_gcs.report import audit_lines, gcs_table, status_summary
from misra_gcs.tool_adapter import ToolAdapter

logger = logging.getLogger(__name__)

AUDIT_LOG_ENCODING = "iso-8859-1"

ReadFile = Callable[[str], str]


class ComplianceEngine:

    def __init__(
        self,
        adapter: ToolAdapter,
        version: MisraVersion = MisraVersion.C_2012,
        guidelines: Optional[List[Guideline]] = None,
    ):
        """
        Args:
            adapter:    Tool adapter for the analyzer whose output is ingested.
            version:    MISRA version whose catalog is loaded.
            guidelines: Use these guidelines instead of the embedded catalog.
        """
        self.adapter = adapter
        self.grammar = AnnotationGrammar()
        self.errors = ErrorLog()
        self.comments: List[CommentProperties] = []
        self._current_file = ""
        if guidelines is not None:
            self.version = version
            self.catalog = GuidelineCatalog(guidelines)
            self.adapter.on_version_selected(version)
        else:
            self.initialize(version)

    def initialize(self, version: MisraVersion) -> None:
        """(Re)load the catalog for ``version`` and reset all run state.

        Raises CatalogError when the version's reference document is missing.
        """
        self.version = version
        self.catalog = GuidelineCatalog.for_version(version)
        self.errors.reset()
        self.comments = []
        self.adapter.on_version_selected(version)

    @property
    def error_code(self) -> ErrorCode:
        return self.errors.code

    @property
    def guidelines(self) -> List[Guideline]:
        return self.catalog.guidelines

    # ────────────────────────────────────────────────────────────────
    #  Guideline recategorization plan
    # ────────────────────────────────────────────────────────────────

    def apply_grp(self, lines: Iterable[str]) -> None:
        """Apply ``"<guideline id>, <category>"`` lines, e.g. ``"Rule 1.1, mandatory"``."""
        for line in lines:
            fields = line.split(",")
            guideline_id = fields[0].strip()
            if not guideline_id:
                continue
            guideline = self.catalog.get(guideline_id)
            if guideline is None:
                self.errors.record(
                    ErrorCode.GRP_ERROR,
                    f"The guideline \"{guideline_id}\" was found in the guideline "
                    f"recategorization plan (GRP), but no corresponding guideline was "
                    f"found in the current MISRA rule set.",
                )
                continue
            if len(fields) < 2 or not fields[1].strip():
                self.errors.record(
                    ErrorCode.GRP_ERROR,
                    f"The line \"{line}\" in the GRP file is not a valid recategorization. "
                    f"Each line should contain a guideline ID followed by the new category, "
                    f"separated by a comma, e.g \"Rule 1.1, required\"",
                )
                continue
            token = fields[1].strip()
            new_category = Category.from_string(token)
            if new_category is Category.UNKNOWN:
                self.errors.record(
                    ErrorCode.GRP_ERROR,
                    f"\"{token}\" in the guideline recategorization plan (GRP) was not "
                    f"recognized as a valid MISRA compliance category",
                )
                continue
            if not is_recategorization_legal(guideline.category, new_category):
                self.errors.record(
                    ErrorCode.GRP_ERROR,
                    f"Illegal recategorization of {guideline.id}: Cannot recategorize "
                    f"{guideline.category} guideline to {new_category}",
                )
                continue
            guideline.recategorization = new_category
            logger.debug("Recategorized %s as %s", guideline.id, new_category)

    # ────────────────────────────────────────────────────────────────
    #  Tool warnings
    # ────────────────────────────────────────────────────────────────

    def ingest_warnings(self, lines: Iterable[str]) -> None:
        count = 0
        for line in lines:
            for violation in self.adapter.parse_warning_line(line) or ():
                if violation is None or not violation.guideline_id:
                    continue
                guideline = self.catalog.get(violation.guideline_id)
                if guideline is None:
                    self.errors.record(
                        ErrorCode.GUIDELINE_NOT_FOUND,
                        f"{self.adapter.name()} warns about the guideline "
                        f"\"{violation.guideline_id}\" in file \"{violation.file_name}\", "
                        f"but no such guideline is found in the selected MISRA version.",
                    )
                elif not guideline.is_disapplied:
                    guideline.status = ComplianceStatus.VIOLATIONS
                    count += 1
        logger.info("Ingested %d guideline violations from %s output", count, self.adapter.name())

    # ────────────────────────────────────────────────────────────────
    #  Suppression comments
    # ────────────────────────────────────────────────────────────────

    def ingest_source_files(self, file_ids: Iterable[str], read_file: ReadFile) -> None:
        """Scan each file for suppression comments and apply them.

        ``read_file`` returns the full text of a file and raises OSError
        when the file cannot be read.
        """
        for file_id in file_ids:
            self._current_file = file_id
            try:
                text = read_file(file_id)
            except (OSError, UnicodeDecodeError) as e:
                self.errors.record(
                    ErrorCode.FILE_READ_ERROR, f"Unable to open file \"{file_id}\": {e}"
                )
                continue
            comments = self.parse_source_text(file_id, text)
            for props in comments:
                if not props.is_non_misra:
                    for suppression in props.suppressions.values():
                        self._apply_suppression(suppression)
            self.comments.extend(comments)
        self._current_file = ""

    def parse_source_text(self, file_id: str, text: str) -> List[CommentProperties]:
        """Parse the suppression comments of one file without touching guidelines."""
        self._current_file = file_id
        locator = LineLocator(text)
        retained = []
        for comment in self.adapter.find_suppression_comments(text):
            props = self.grammar.parse(
                comment,
                id_mapper=self.adapter.guideline_ids_from_comment,
                errors=self.errors,
                file_name=file_id,
            )
            # Comments located by the adapter carry their offset in the text.
            props.line_number = locator.find_next(comment, getattr(comment, "offset", None))
            if not props.suppressions and not props.is_non_misra:
                self.errors.record(
                    ErrorCode.UNRESOLVED_SUPPRESSION,
                    f"{file_id}: Could not determine which guideline is suppressed by the "
                    f"comment \"{comment}\". Please add a tag in the style "
                    f"GUIDELINE(<guideline id>) or NONMISRA to the comment in order to "
                    f"avoid this error.",
                )
                continue
            retained.append(props)
        return retained

    def _apply_suppression(self, suppression: Suppression) -> None:
        guideline = self.catalog.get(suppression.guideline_id)
        if guideline is None:
            self.errors.record(
                ErrorCode.GUIDELINE_NOT_FOUND,
                f"{self._current_file}: Suppression comment for the guideline "
                f"{suppression.guideline_id}, but the guideline was not found.",
            )
            return
        if suppression.is_false_positive:
            return
        if guideline.is_disapplied:
            guideline.status = ComplianceStatus.DISAPPLIED
            return
        if not suppression.is_deviation:
            guideline.status = ComplianceStatus.VIOLATIONS
            return
        if guideline.status is not ComplianceStatus.VIOLATIONS:
            guideline.status = ComplianceStatus.DEVIATIONS
            guideline.add_deviation_reference(
                suppression.deviation_reference, suppression.deviation_link
            )
        if guideline.active_category() is Category.MANDATORY:
            self.errors.record(
                ErrorCode.ILLEGAL_DEVIATION,
                f"{self._current_file}: {guideline.id} is mandatory, and deviations are illegal",
            )

    # ────────────────────────────────────────────────────────────────
    #  Queries
    # ────────────────────────────────────────────────────────────────

    def is_compliant(self) -> bool:
        if self.errors:
            return False
        return all(g.is_compliant() for g in self.catalog)

    def summary(self) -> str:
        violations = status_summary(
            self.catalog.count_by_category(ComplianceStatus.VIOLATIONS), "violations"
        )
        deviations = status_summary(
            self.catalog.count_by_category(ComplianceStatus.DEVIATIONS), "deviations"
        )
        return f"{violations} {deviations}"

    def audit_log_lines(self) -> Iterator[str]:
        return audit_lines(self.comments, self.catalog, self.adapter.name())

    def write_audit_log(self, path) -> bool:
        """Write the suppression audit log to ``path``.  Returns False on failure."""
        try:
            with open(path, "w", encoding=AUDIT_LOG_ENCODING, errors="replace", newline="\n") as f:
                for line in self.audit_log_lines():
                    f.write(line + "\n")
        except OSError as e:
            self.errors.record(
                ErrorCode.FILE_WRITE_ERROR, f"Unable to write to logfile \"{os.fspath(path)}\": {e}"
            )
            return False
        logger.info("Wrote logfile \"%s\"", os.fspath(path))
        return True

    def gcs_table(self) -> str:
        return gcs_table(self.catalog)
