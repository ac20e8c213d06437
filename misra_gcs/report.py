"""
Report text — compliance summary sentences, suppression audit lines and the
markdown Guideline Compliance Summary (GCS).
"""

from typing import Dict, Iterable, Iterator, List, Optional

from misra_gcs.guideline import Category, ComplianceStatus, Guideline
from misra_gcs.models import CommentProperties

_SUMMARY_CATEGORIES = (
    (Category.MANDATORY, "mandatory"),
    (Category.REQUIRED, "required"),
    (Category.ADVISORY, "advisory"),
)


def join_list(items: Iterable[str]) -> str:
    """"a", "a and b", "a, b and c", always terminated by a period."""
    items = list(items)
    text = ""
    remaining = len(items)
    for item in items:
        remaining -= 1
        text += item
        if remaining > 1:
            text += ", "
        elif remaining == 1:
            text += " and "
    return text + "."


def status_summary(counts: Dict[Category, int], kind: str) -> str:
    """One sentence counting guidelines with ``kind`` ("violations" / "deviations")."""
    parts = []
    for category, word in _SUMMARY_CATEGORIES:
        n = counts.get(category, 0)
        if n > 0:
            parts.append(f"{n} {word} {'guideline' if n == 1 else 'guidelines'}")
    if not parts:
        return f"There were no {kind}."
    return f"There were {kind} of " + join_list(parts)


def audit_lines(
    comments: Iterable[CommentProperties],
    catalog,
    tool_name: str,
) -> Iterator[str]:
    """Audit log lines (without newline) for the retained suppression comments."""
    for props in comments:
        where = f"{props.file_name}:{props.line_number}"
        if props.is_non_misra:
            yield _non_misra_line(where, props, tool_name)
            continue
        for suppression in props.suppressions.values():
            guideline: Optional[Guideline] = catalog.get(suppression.guideline_id)
            if guideline is None:
                # Already reported as an unknown guideline.
                continue
            category = guideline.active_category()
            label = f"{suppression.guideline_id} ({category})"
            if suppression.is_false_positive:
                yield f"{where}: info: Suppression of {label} tagged as false positive"
            elif suppression.is_deviation:
                yield f"{where}: info: Deviation of {label}"
            elif category is not Category.DISAPPLIED:
                severity = "info" if category is Category.ADVISORY else "error"
                yield f"{where}: {severity}: Violation of {label}"


def _non_misra_line(where: str, props: CommentProperties, tool_name: str) -> str:
    if not props.suppressions:
        return f"{where}: info: Tool suppression comment tagged as not MISRA relevant"
    return (
        f"{where}: warning: Tool suppression comment tagged as not MISRA relevant, "
        f"but {tool_name} indicates that this comment suppresses "
        + join_list(props.suppressions)
    )


def gcs_table(guidelines: Iterable[Guideline]) -> str:
    """Markdown Guideline Compliance Summary, one row per guideline."""
    rows: List[str] = [
        "| Guideline | Category | Recategorization | Compliance | Deviation references |",
        "|-----------|----------|------------------|------------|----------------------|",
    ]
    for g in guidelines:
        refs = "; ".join(
            (ref.reference or "") + (f" <{ref.link}>" if ref.link else "")
            for ref in g.deviation_references
        )
        recat = str(g.recategorization) if g.recategorization is not None else ""
        status = g.status
        cell = f"**{status}**" if status is ComplianceStatus.VIOLATIONS and not g.is_compliant() else str(status)
        rows.append(f"| {g.id} | {g.category} | {recat} | {cell} | {refs} |")
    return "\n".join(rows)
