"""
MISRA Guideline Compliance Summary — MCP Server

Exposes the compliance engine through the Model Context Protocol:

  1. list_tools          — supported analysis tools and MISRA versions
  2. start_run           — pick workspace, tool and MISRA version; load the catalog
  3. apply_grp           — apply a guideline recategorization plan
  4. ingest_warnings     — read the analysis tool's output
  5. ingest_sources      — scan source files for suppression comments
  6. compliance_summary  — verdict, summary and the full GCS table
  7. explain_guideline   — compliance record of one guideline
  8. write_audit_log     — write the suppression audit log
  9. run_gcs             — all of the above in one call
"""

import logging
import os
import sys

from mcp.server.fastmcp import FastMCP

# Ensure the package is importable when run as a script
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from misra_gcs.errors import CatalogError
from misra_gcs.gcs_run import GcsSettings, build_engine, run_gcs as _run_gcs
from misra_gcs.guideline_catalog import available_versions, format_guideline
from misra_gcs.tool_adapter import available_adapters, get_adapter
from misra_gcs.workspace import WorkspaceFiles

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════
#  Server Setup
# ═══════════════════════════════════════════════════════════════════════

mcp = FastMCP("MISRA Guideline Compliance Summary")

engine = None
workspace = None

_NO_RUN = "Error: No run started. Call start_run first."


def _errors_since(mark: int) -> str:
    """Error messages recorded after ``mark``, as a markdown list."""
    new = engine.errors.messages[mark:]
    if not new:
        return ""
    return "\n\n**Errors:**\n" + "\n".join(f"- {m}" for m in new)


# ═══════════════════════════════════════════════════════════════════════
#  Tool 1: List Tools
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def list_tools() -> str:
    """Lists the static analysis tools whose output can be ingested."""
    lines = ["| Tool | MISRA versions |", "|------|----------------|"]
    for name in available_adapters():
        usable = get_adapter(name).supported_versions() & available_versions()
        versions = sorted(str(v) for v in usable)
        lines.append(f"| {name} | {', '.join(versions)} |")
    return "\n".join(lines)


# ═══════════════════════════════════════════════════════════════════════
#  Tool 2: Start Run
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def start_run(workspace_root: str, tool: str, misra_version: str = "2012") -> str:
    """
    Starts a new compliance run and loads the guideline catalog.

    Args:
        workspace_root: Root directory holding sources and tool output.
        tool:           Analysis tool name, see list_tools (e.g. "Cppcheck").
        misra_version:  "2012"; list_tools shows the versions with a shipped reference.
    """
    global engine, workspace

    if not os.path.isdir(workspace_root):
        return f"Error: Workspace root not found at {workspace_root}"
    settings = GcsSettings(
        workspace_root=workspace_root,
        tool=tool,
        misra_version=misra_version,
        warnings_file="",
        source_list_file="",
    )
    try:
        engine = build_engine(settings)
    except (KeyError, ValueError, CatalogError) as e:
        engine = None
        return f"Error: {e}"
    workspace = WorkspaceFiles(workspace_root)
    return (
        f"Started {engine.adapter.name()} run for {engine.version}. "
        f"Catalog holds {len(engine.catalog)} guidelines."
    )


# ═══════════════════════════════════════════════════════════════════════
#  Tool 3: Apply GRP
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def apply_grp(grp_file: str) -> str:
    """
    Applies a guideline recategorization plan.

    Args:
        grp_file: Workspace-relative file with one "<guideline>, <category>"
                  per line, e.g. "Rule 15.5, disapplied".
    """
    if engine is None:
        return _NO_RUN
    try:
        lines = workspace.read_lines(grp_file)
    except OSError as e:
        return f"Error: Cannot read {grp_file}: {e}"
    mark = len(engine.errors.messages)
    engine.apply_grp(lines)
    recategorized = [g for g in engine.catalog if g.recategorization is not None]
    return f"GRP applied. {len(recategorized)} guidelines recategorized." + _errors_since(mark)


# ═══════════════════════════════════════════════════════════════════════
#  Tool 4: Ingest Warnings
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def ingest_warnings(warnings_file: str) -> str:
    """
    Reads the analysis tool's output, one warning per line.

    Args:
        warnings_file: Workspace-relative path of the tool output.
    """
    if engine is None:
        return _NO_RUN
    try:
        lines = workspace.read_lines(warnings_file)
    except OSError as e:
        return f"Error: Cannot read {warnings_file}: {e}"
    mark = len(engine.errors.messages)
    engine.ingest_warnings(lines)
    return f"Read {len(lines)} lines of {engine.adapter.name()} output.\n{engine.summary()}" + _errors_since(mark)


# ═══════════════════════════════════════════════════════════════════════
#  Tool 5: Ingest Sources
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def ingest_sources(source_list_file: str) -> str:
    """
    Scans source files for suppression comments.

    Args:
        source_list_file: Workspace-relative file listing one source file per line.
    """
    if engine is None:
        return _NO_RUN
    try:
        sources = workspace.relative_paths(workspace.read_lines(source_list_file))
    except OSError as e:
        return f"Error: Cannot read {source_list_file}: {e}"
    mark = len(engine.errors.messages)
    before = len(engine.comments)
    engine.ingest_source_files(sources, workspace.read_file)
    found = len(engine.comments) - before
    return (
        f"Scanned {len(sources)} files, {found} suppression comments retained.\n"
        f"{engine.summary()}" + _errors_since(mark)
    )


# ═══════════════════════════════════════════════════════════════════════
#  Tool 6: Compliance Summary
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def compliance_summary() -> str:
    """Returns the compliance verdict, the summary and the full GCS table."""
    if engine is None:
        return _NO_RUN
    verdict = "COMPLIANT" if engine.is_compliant() else "NOT COMPLIANT"
    report = f"# MISRA Guideline Compliance Summary ({engine.version})\n\n"
    report += f"**Tool**: {engine.adapter.name()}\n"
    report += f"**Verdict**: {verdict}\n\n{engine.summary()}\n"
    if engine.errors:
        report += f"\n**Error code**: {int(engine.error_code)}"
        report += "\n" + "\n".join(f"- {m}" for m in engine.errors.messages) + "\n"
    report += "\n" + engine.gcs_table()
    return report


# ═══════════════════════════════════════════════════════════════════════
#  Tool 7: Explain Guideline
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def explain_guideline(guideline_id: str) -> str:
    """
    Shows category, recategorization, status and deviations of one guideline.

    Args:
        guideline_id: Catalog id, e.g. "Rule 10.4" or "Directive 4.1".
    """
    if engine is None:
        return _NO_RUN
    guideline = engine.catalog.get(guideline_id)
    if guideline is None:
        return f"Unknown guideline: {guideline_id}"
    return format_guideline(guideline)


# ═══════════════════════════════════════════════════════════════════════
#  Tool 8: Write Audit Log
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def write_audit_log(log_file: str) -> str:
    """
    Writes the suppression audit log, one line per suppression.

    Args:
        log_file: Workspace-relative output path.
    """
    if engine is None:
        return _NO_RUN
    if not engine.write_audit_log(workspace.resolve(log_file)):
        return f"Error: {engine.errors.messages[-1]}"
    return f"Wrote {sum(1 for _ in engine.audit_log_lines())} audit lines to {log_file}"


# ═══════════════════════════════════════════════════════════════════════
#  Tool 9: Full Run
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
def run_gcs(
    workspace_root: str,
    tool: str,
    warnings_file: str,
    source_list_file: str,
    misra_version: str = "2012",
    grp_file: str = "",
    log_file: str = "",
    project_name: str = "",
    software_version: str = "",
) -> str:
    """
    Runs GRP, warning and source ingestion in one go and returns the GCS.

    Args:
        workspace_root:   Root directory holding sources and tool output.
        tool:             Analysis tool name (see list_tools).
        warnings_file:    Workspace-relative tool output.
        source_list_file: Workspace-relative list of source files.
        misra_version:    "2012"; list_tools shows the versions with a shipped reference.
        grp_file:         Optional workspace-relative GRP.
        log_file:         Optional workspace-relative audit log output.
    """
    settings = GcsSettings(
        workspace_root=workspace_root,
        tool=tool,
        misra_version=misra_version,
        warnings_file=warnings_file,
        source_list_file=source_list_file,
        grp_file=grp_file or None,
        log_file=log_file or None,
        project_name=project_name,
        software_version=software_version,
    )
    result = _run_gcs(settings)
    if result.failure_reason and not result.summary:
        return f"Error: {result.failure_reason}"

    verdict = "COMPLIANT" if result.compliant else "NOT COMPLIANT"
    report = f"# MISRA Guideline Compliance Summary ({result.misra_version})\n\n"
    if result.project_name:
        report += f"**Project**: {result.project_name} {result.software_version}\n"
    report += f"**Tool**: {result.tool}\n**Verdict**: {verdict}\n\n{result.summary}\n"
    if result.notes:
        report += f"\n{result.notes}\n" + "\n".join(f"- {m}" for m in result.messages) + "\n"
    report += "\n" + result.gcs_table
    return report


if __name__ == "__main__":
    # stdout carries the MCP transport; log to stderr only.
    logging.basicConfig(stream=sys.stderr, level=logging.INFO)
    mcp.run()
