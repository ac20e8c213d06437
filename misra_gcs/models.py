"""
Transient records exchanged between tool adapters, the annotation grammar
and the compliance engine.  None of them outlive a single run.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field


class Violation(BaseModel):
    """One guideline violation reported by the analysis tool."""
    guideline_id: Optional[str] = None
    file_name: str = ""
    line_number: int = 0


class Suppression(BaseModel):
    guideline_id: str
    is_false_positive: bool = False
    is_deviation: bool = False
    deviation_reference: Optional[str] = None
    deviation_link: Optional[str] = None


class CommentProperties(BaseModel):
    """A parsed suppression comment.

    ``suppressions`` keeps insertion order so audit output is stable.
    """
    file_name: str = ""
    line_number: int = 0
    is_non_misra: bool = False
    suppressions: Dict[str, Suppression] = Field(default_factory=dict)
