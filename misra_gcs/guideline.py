"""
Guideline — compliance record for one MISRA rule or directive.

A Guideline is created once per catalog load and mutated during a run by
recategorization (GRP), tool warnings and suppression comments.
"""

import enum
from dataclasses import dataclass
from typing import List, Optional


class Category(enum.Enum):
    MANDATORY = "Mandatory"
    REQUIRED = "Required"
    ADVISORY = "Advisory"
    DISAPPLIED = "Disapplied"
    UNKNOWN = "Unknown"

    def __str__(self):
        return self.value

    @classmethod
    def from_string(cls, value: Optional[str]) -> Optional["Category"]:
        if value is None:
            return None
        return _CATEGORY_TOKENS.get(value.strip().upper(), cls.UNKNOWN)


_CATEGORY_TOKENS = {
    "MANDATORY": Category.MANDATORY,
    "MAND": Category.MANDATORY,
    "REQUIRED": Category.REQUIRED,
    "REQ": Category.REQUIRED,
    "ADVISORY": Category.ADVISORY,
    "ADV": Category.ADVISORY,
    "DISAPPLIED": Category.DISAPPLIED,
    "DIS": Category.DISAPPLIED,
}


class ComplianceStatus(enum.Enum):
    COMPLIANT = "Compliant"
    VIOLATIONS = "Violations"
    DEVIATIONS = "Deviations"
    DISAPPLIED = "Disapplied"

    def __str__(self):
        return self.value


@dataclass
class DeviationReference:
    reference: Optional[str] = None
    link: Optional[str] = None


class Guideline:
    """Mutable compliance state of a single guideline.

    ``category`` is fixed when the catalog is loaded.  ``recategorization`` is
    only set through a GRP.  Once a guideline is recategorized as Disapplied
    its status stays Disapplied for the rest of the run.
    """

    def __init__(self, guideline_id: str, category=None, recategorization=None):
        self.id = guideline_id
        if isinstance(category, str):
            category = Category.from_string(category)
        self.category: Optional[Category] = category
        self._status = ComplianceStatus.COMPLIANT
        self._recategorization: Optional[Category] = None
        self.deviation_references: List[DeviationReference] = []
        if recategorization is not None:
            self.recategorization = recategorization

    def __repr__(self):
        return f"Guideline({self.id!r}, {self.category}, status={self._status})"

    def __str__(self):
        return self.id

    @property
    def recategorization(self) -> Optional[Category]:
        return self._recategorization

    @recategorization.setter
    def recategorization(self, value) -> None:
        if isinstance(value, str):
            value = Category.from_string(value)
        self._recategorization = value
        if value is Category.DISAPPLIED:
            self._status = ComplianceStatus.DISAPPLIED

    @property
    def status(self) -> ComplianceStatus:
        return self._status

    @status.setter
    def status(self, value: ComplianceStatus) -> None:
        if self.is_disapplied:
            self._status = ComplianceStatus.DISAPPLIED
        else:
            self._status = value

    @property
    def is_disapplied(self) -> bool:
        # Only an explicit recategorization disapplies a guideline.
        return self._recategorization is Category.DISAPPLIED

    def active_category(self) -> Optional[Category]:
        if self._recategorization is not None:
            return self._recategorization
        return self.category

    def add_deviation_reference(self, reference: Optional[str], link: Optional[str]) -> None:
        self.deviation_references.append(DeviationReference(reference, link))

    def is_compliant(self) -> bool:
        """Only violations of Required or Mandatory guidelines break compliance."""
        if self._status is ComplianceStatus.VIOLATIONS:
            return self.active_category() not in (Category.REQUIRED, Category.MANDATORY)
        return True


def is_recategorization_legal(original: Optional[Category], new: Category) -> bool:
    """MISRA Compliance rules for moving a guideline to another category."""
    if original is Category.MANDATORY:
        return new is Category.MANDATORY
    if original is Category.REQUIRED:
        return new not in (Category.ADVISORY, Category.DISAPPLIED)
    return True
