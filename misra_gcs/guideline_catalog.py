"""
MISRA Guideline Catalog

Builds the list of guidelines for a MISRA version from its embedded
reference document.  The document is treated as opaque text: every header
marker of the form

    /**** Rule 10.4 (req) ****/
    /**** Dir 4.1 (req) ****/

yields one Guideline.  ``doc`` categories map to Unknown and ``Dir`` is
normalised to ``Directive``.  Entries that do not match are skipped.

Parsing is done once per version; each catalog load hands out fresh,
mutable Guideline objects.
"""

import enum
import functools
import logging
import os
import re
from typing import Dict, Iterator, List, Optional, Set, Tuple

from misra_gcs.errors import CatalogError
from misra_gcs.guideline import Category, ComplianceStatus, Guideline

logger = logging.getLogger(__name__)

REFERENCE_ENCODING = "iso-8859-1"
_REFERENCE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "references")

_HEADER_PATTERN = re.compile(
    r"/\*+ ((?:Rule|Dir(?:ective)?) (?:\d+-\d+-\d+|\d+\.\d+|\d+)) +"
    r"\(((?i:req|adv|mand|doc))\) +\*"
)


class MisraVersion(enum.Enum):
    C_2012 = "C_2012"
    CPP_2008 = "CPP_2008"
    C_1998 = "C_1998"
    C_2004 = "C_2004"

    def __str__(self):
        return "MISRA " + self.value.replace("_", " ", 1).replace("PP", "++", 1)

    @classmethod
    def from_string(cls, token: str) -> "MisraVersion":
        """Map a loose version token ("2012", "C++", "MISRA C 2004" ...) to a version."""
        token = token or ""
        if "1998" in token:
            return cls.C_1998
        if "CPP" in token.upper() or "C++" in token:
            return cls.CPP_2008
        if "2004" in token:
            return cls.C_2004
        return cls.C_2012


_REFERENCE_FILES = {
    MisraVersion.C_1998: "misra_c1998.lnt",
    MisraVersion.C_2004: "misra_c2004.lnt",
    MisraVersion.CPP_2008: "misra_cpp2008.lnt",
    MisraVersion.C_2012: "misra_c2012.lnt",
}


# ═══════════════════════════════════════════════════════════════════════
#  Reference documents
# ═══════════════════════════════════════════════════════════════════════

def reference_document_path(version: MisraVersion) -> str:
    return os.path.join(_REFERENCE_DIR, _REFERENCE_FILES[version])


def available_versions() -> Set[MisraVersion]:
    """Versions whose reference document is shipped."""
    return {v for v in MisraVersion if os.path.isfile(reference_document_path(v))}


@functools.lru_cache(maxsize=None)
def load_reference_document(version: MisraVersion) -> str:
    """Return the full reference text for ``version``.

    Raises CatalogError if the document is not shipped or cannot be read;
    no compliance checking is possible without it.
    """
    path = reference_document_path(version)
    try:
        with open(path, "r", encoding=REFERENCE_ENCODING) as f:
            return f.read()
    except OSError as e:
        raise CatalogError(f"No guideline reference available for {version}: {e}") from e


# ═══════════════════════════════════════════════════════════════════════
#  Parsing
# ═══════════════════════════════════════════════════════════════════════

def parse_guideline_headers(text: str) -> List[Tuple[str, Category]]:
    """Extract (id, category) pairs in document order, first occurrence wins."""
    entries: List[Tuple[str, Category]] = []
    seen = set()
    for match in _HEADER_PATTERN.finditer(text):
        guideline_id = re.sub(r"^Dir(?:ective)? ", "Directive ", match.group(1))
        if guideline_id in seen:
            logger.debug("Duplicate guideline header %s ignored", guideline_id)
            continue
        seen.add(guideline_id)
        entries.append((guideline_id, Category.from_string(match.group(2))))
    return entries


@functools.lru_cache(maxsize=None)
def _headers_for_version(version: MisraVersion) -> Tuple[Tuple[str, Category], ...]:
    return tuple(parse_guideline_headers(load_reference_document(version)))


class GuidelineCatalog:
    """Guidelines keyed by id, iterable in document order."""

    def __init__(self, guidelines: Optional[List[Guideline]] = None):
        self._list: List[Guideline] = []
        self._by_id: Dict[str, Guideline] = {}
        for guideline in guidelines or []:
            self.add(guideline)

    @classmethod
    def from_text(cls, text: str) -> "GuidelineCatalog":
        return cls([Guideline(gid, cat) for gid, cat in parse_guideline_headers(text)])

    @classmethod
    def for_version(cls, version: MisraVersion) -> "GuidelineCatalog":
        catalog = cls([Guideline(gid, cat) for gid, cat in _headers_for_version(version)])
        if not catalog:
            raise CatalogError(f"The reference document for {version} lists no guidelines")
        logger.info("Loaded %d guidelines for %s", len(catalog), version)
        return catalog

    def add(self, guideline: Guideline) -> None:
        if guideline.id in self._by_id:
            return
        self._by_id[guideline.id] = guideline
        self._list.append(guideline)

    def get(self, guideline_id: str) -> Optional[Guideline]:
        return self._by_id.get(guideline_id)

    def __contains__(self, guideline_id) -> bool:
        return guideline_id in self._by_id

    def __iter__(self) -> Iterator[Guideline]:
        return iter(self._list)

    def __len__(self) -> int:
        return len(self._list)

    @property
    def guidelines(self) -> List[Guideline]:
        return list(self._list)

    def by_status(self, status: ComplianceStatus) -> List[Guideline]:
        return [g for g in self._list if g.status is status]

    def count_by_category(self, status: ComplianceStatus) -> Dict[Category, int]:
        """Number of guidelines with ``status``, per active category."""
        counts = {Category.MANDATORY: 0, Category.REQUIRED: 0, Category.ADVISORY: 0}
        for guideline in self.by_status(status):
            category = guideline.active_category()
            if category in counts:
                counts[category] += 1
        return counts


def format_guideline(guideline: Guideline) -> str:
    """Human-readable compliance record for one guideline."""
    text = f"## {guideline.id}\n**Category**: {guideline.category}"
    if guideline.recategorization is not None:
        text += f"\n**Recategorized as**: {guideline.recategorization}"
    text += f"\n**Compliance**: {guideline.status}"
    if guideline.deviation_references:
        text += "\n\n### Deviations"
        for ref in guideline.deviation_references:
            line = f"\n- {ref.reference or '(no reference)'}"
            if ref.link:
                line += f" <{ref.link}>"
            text += line
    return text
