"""
GCS Run — one complete compliance run over a workspace.

Reads the GRP, the tool output and the source list from the workspace,
feeds them through a ComplianceEngine and decides whether the run should
fail the build.
"""

import logging
from typing import List, Optional

from pydantic import BaseModel

from misra_gcs.compliance_engine import ComplianceEngine
from misra_gcs.errors import CatalogError
from misra_gcs.guideline_catalog import MisraVersion, available_versions
from misra_gcs.tool_adapter import get_adapter
from misra_gcs.workspace import WorkspaceFiles

logger = logging.getLogger(__name__)

INVALID_REPORT_NOTE = (
    "Errors occurred during processing. This report is not valid. "
    "See the error messages for details."
)


class GcsSettings(BaseModel):
    workspace_root: str
    tool: str
    misra_version: str = "2012"
    warnings_file: str
    source_list_file: str
    grp_file: Optional[str] = None
    log_file: Optional[str] = None
    fail_on_error: bool = False
    fail_on_incompliance: bool = False
    project_name: str = ""
    software_version: str = ""
    # Overrides for the suppression comment tags
    false_positive_pattern: Optional[str] = None
    deviation_pattern: Optional[str] = None
    non_misra_pattern: Optional[str] = None
    guideline_pattern: Optional[str] = None


class GcsResult(BaseModel):
    project_name: str = ""
    software_version: str = ""
    misra_version: str = ""
    tool: str = ""
    compliant: bool = False
    error_code: int = 0
    messages: List[str] = []
    summary: str = ""
    notes: str = ""
    gcs_table: str = ""
    build_failed: bool = False
    failure_reason: str = ""


def build_engine(settings: GcsSettings) -> ComplianceEngine:
    """Engine for the configured tool and MISRA version.

    Raises KeyError for an unknown tool, ValueError for an unsupported
    version and CatalogError when the guideline catalog is unavailable.
    """
    adapter = get_adapter(settings.tool)
    version = MisraVersion.from_string(settings.misra_version)
    if version not in adapter.supported_versions():
        raise ValueError(f"{adapter.name()} does not support {version}")
    if version not in available_versions():
        raise ValueError(f"No guideline reference is shipped for {version}")
    engine = ComplianceEngine(adapter, version)
    grammar = engine.grammar
    if settings.false_positive_pattern:
        grammar.false_positive_pattern = settings.false_positive_pattern
    if settings.deviation_pattern:
        grammar.deviation_pattern = settings.deviation_pattern
    if settings.non_misra_pattern:
        grammar.non_misra_pattern = settings.non_misra_pattern
    if settings.guideline_pattern:
        grammar.guideline_pattern = settings.guideline_pattern
    return engine


def run_gcs(settings: GcsSettings) -> GcsResult:
    result = GcsResult(
        project_name=settings.project_name,
        software_version=settings.software_version,
        tool=settings.tool,
    )
    try:
        engine = build_engine(settings)
    except (KeyError, ValueError, CatalogError) as e:
        result.build_failed = True
        result.failure_reason = str(e)
        return result
    result.misra_version = str(engine.version)

    files = WorkspaceFiles(settings.workspace_root)
    missing = []
    inputs = {}
    for key in ("grp_file", "warnings_file", "source_list_file"):
        path = getattr(settings, key)
        if not path:
            inputs[key] = []
            continue
        try:
            inputs[key] = files.read_lines(path)
        except OSError as e:
            logger.error("File not found: %s (%s)", path, e)
            missing.append(path)
    if missing:
        result.build_failed = True
        result.failure_reason = "File not found: " + ", ".join(missing)
        return result

    engine.apply_grp(inputs["grp_file"])
    engine.ingest_warnings(inputs["warnings_file"])
    engine.ingest_source_files(files.relative_paths(inputs["source_list_file"]), files.read_file)
    if settings.log_file:
        engine.write_audit_log(files.resolve(settings.log_file))

    result.compliant = engine.is_compliant()
    result.error_code = int(engine.error_code)
    result.messages = list(engine.errors.messages)
    result.summary = engine.summary()
    result.gcs_table = engine.gcs_table()
    if engine.errors:
        result.notes = INVALID_REPORT_NOTE

    if engine.errors and settings.fail_on_error:
        result.build_failed = True
        result.failure_reason = "an error occurred during creation of the GCS"
    elif not result.compliant and settings.fail_on_incompliance:
        result.build_failed = True
        result.failure_reason = "the code is not MISRA compliant"
    logger.info("GCS for %s: %s", settings.project_name or settings.workspace_root, result.summary)
    return result
