"""
Correction Schemas

Structured output expected from the LLMs. Anything that fails these models is
treated as a model/schema error for the run.
"""
from enum import Enum
from typing import List

from pydantic import BaseModel, Field


class IssueType(str, Enum):
    spelling = "spelling"
    grammar = "grammar"
    style = "style"
    consistency = "consistency"


class Severity(str, Enum):
    critical = "critical"
    important = "important"
    minor = "minor"


class Correction(BaseModel):
    """A candidate correction proposed by the model, before any filtering."""
    issue_type: IssueType
    original_text: str = Field(description="Original text, verbatim")
    corrected_text: str = Field(description="Corrected text to replace the original text")
    surrounding_text: str = Field(
        description="Surrounding text containing the original text, limit to 100 characters"
    )
    explanation_for_correction: str
    probability_of_correctness: float = Field(
        description="Probability of correctness, between 0.0 and 1.0"
    )
    severity: Severity


class CorrectionsResponse(BaseModel):
    corrections: List[Correction]


class CorrectionForReview(BaseModel):
    """Correction sent to the validator, without the confidence score."""
    issue_type: IssueType
    original_text: str
    corrected_text: str
    surrounding_text: str
    explanation_for_correction: str
    severity: Severity
