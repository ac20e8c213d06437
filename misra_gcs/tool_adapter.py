"""
Tool Adapter — the contract between the compliance engine and one static
analysis tool.

An adapter knows three things about its tool:

  1. how to turn one line of tool output into Violations,
  2. how to find the tool's suppression comments in a source file,
  3. (optionally) which guidelines a suppression comment silences.

New tools are supported by subclassing ToolAdapter and registering the
class with ``register_adapter``.
"""

import abc
import logging
from typing import Callable, Dict, List, Optional, Set, Type

from misra_gcs.guideline_catalog import MisraVersion
from misra_gcs.models import Violation

logger = logging.getLogger(__name__)


class ToolAdapter(abc.ABC):

    @abc.abstractmethod
    def parse_warning_line(self, line: str) -> List[Violation]:
        """Violations described by one line of tool output (possibly none)."""

    @abc.abstractmethod
    def find_suppression_comments(self, file_text: str) -> List[str]:
        """Suppression comment substrings of ``file_text``, in document order.

        Return ``CommentText`` items (see comment_scanner) to pin each comment
        to its own position; plain strings are located by text search.
        """

    def guideline_ids_from_comment(self, comment: str) -> Optional[List[str]]:
        """Guideline ids suppressed by ``comment``.

        Return None when the adapter cannot tell; the comment then needs an
        explicit GUIDELINE(...) tag.
        """
        return None

    @abc.abstractmethod
    def name(self) -> str:
        ...

    def supported_versions(self) -> Set[MisraVersion]:
        return set(MisraVersion)

    def on_version_selected(self, version: MisraVersion) -> None:
        """Called whenever the engine (re)loads its catalog."""


# ═══════════════════════════════════════════════════════════════════════
#  Registry
# ═══════════════════════════════════════════════════════════════════════

_REGISTRY: Dict[str, Callable[[], ToolAdapter]] = {}


def register_adapter(cls: Type[ToolAdapter]) -> Type[ToolAdapter]:
    """Class decorator adding an adapter to the registry under its name()."""
    _REGISTRY[cls().name()] = cls
    return cls


def get_adapter(name: str) -> ToolAdapter:
    _load_builtin_adapters()
    try:
        factory = _REGISTRY[name]
    except KeyError:
        raise KeyError(
            f"Unknown tool '{name}'. Available tools: {', '.join(available_adapters())}"
        ) from None
    return factory()


def available_adapters() -> List[str]:
    _load_builtin_adapters()
    return sorted(_REGISTRY)


def _load_builtin_adapters() -> None:
    # Imported lazily: the adapter modules import this one.
    from misra_gcs import axivion_adapter, cppcheck_adapter, pclint_adapter  # noqa: F401
