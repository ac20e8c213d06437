"""
Error taxonomy for a compliance run.

Recoverable problems never abort a run.  They are logged, remembered in
``ErrorLog.messages`` and OR-ed into a single bitfield.  A non-zero bitfield
makes the whole run non-compliant, since the report can no longer be trusted.

The only fatal condition is a missing guideline catalog (``CatalogError``).
"""

import enum
import logging
from typing import List

logger = logging.getLogger(__name__)


class ErrorCode(enum.IntFlag):
    NONE = 0
    GUIDELINE_NOT_FOUND = 1
    UNRESOLVED_SUPPRESSION = 2
    GRP_ERROR = 4
    ILLEGAL_DEVIATION = 8
    FILE_READ_ERROR = 16
    FILE_WRITE_ERROR = 32


class CatalogError(RuntimeError):
    """The reference document for a MISRA version could not be loaded."""


class ErrorLog:
    """Accumulates errors for one run."""

    def __init__(self):
        self.code = ErrorCode.NONE
        self.messages: List[str] = []

    def record(self, code: ErrorCode, message: str) -> None:
        self.code |= code
        self.messages.append(message)
        logger.error("%s (%s)", message, code.name)

    def has(self, code: ErrorCode) -> bool:
        return bool(self.code & code)

    def reset(self) -> None:
        self.code = ErrorCode.NONE
        self.messages = []

    def __bool__(self) -> bool:
        return self.code != ErrorCode.NONE
