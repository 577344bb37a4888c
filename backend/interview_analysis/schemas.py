"""
Schemas for the Results Analysis Pipeline

Pydantic models validate each LLM step's output. Every model's defaults are
the documented fallback values, so ``Model()`` is the degraded result for
that step. The LangGraph state is a TypedDict; the four parallel analyzers
write disjoint keys and only ``node_timings`` is merged.
"""

import operator
from typing import Annotated, List, Literal, Optional, TypedDict

from pydantic import BaseModel, BeforeValidator, Field


def _clamp_score(value):
    if isinstance(value, str):
        value = float(value.strip().rstrip("%"))
    return max(0, min(100, round(float(value))))


Score = Annotated[int, BeforeValidator(_clamp_score)]

# =============================================================================
# Step outputs (validated LLM JSON; defaults are the degraded values)
# =============================================================================


class ResponseAnalysis(BaseModel):
    """Quality assessment of one answer."""
    question: str = Field(default="")
    question_type: Optional[str] = Field(default=None)
    answer: str = Field(default="")
    quality_score: Score = Field(default=75)
    strengths: List[str] = Field(default_factory=lambda: ["Answered the question directly"])
    weaknesses: List[str] = Field(default_factory=lambda: ["Could include more specific details"])
    suggestions: List[str] = Field(default_factory=lambda: ["Use the STAR method to structure examples"])
    keyword_alignment: List[str] = Field(default_factory=list)
    missed_opportunities: List[str] = Field(default_factory=list)


class ResumeAnalysis(BaseModel):
    """How much of the resume the candidate actually brought up."""
    utilization_score: Score = Field(default=70)
    skills_mentioned: List[str] = Field(default_factory=list)
    skills_missed: List[str] = Field(default_factory=list)
    experiences_mentioned: List[str] = Field(default_factory=list)
    experiences_missed: List[str] = Field(default_factory=list)
    summary: str = Field(default="Resume utilization could not be assessed in detail.")


class JobFitAnalysis(BaseModel):
    """Coverage of the job's requirements in the candidate's answers."""
    fit_score: Score = Field(default=75)
    requirements_covered: List[str] = Field(default_factory=list)
    requirements_missed: List[str] = Field(default_factory=list)
    keyword_matches: List[str] = Field(default_factory=list)
    summary: str = Field(default="Job fit could not be assessed in detail.")


class PreparationAnalysis(BaseModel):
    """Evidence of company research and structured problem solving."""
    preparation_score: Score = Field(default=70)
    problem_solving_score: Score = Field(default=70)
    research_evidence: List[str] = Field(default_factory=list)
    problem_solving_examples: List[str] = Field(default_factory=list)
    summary: str = Field(default="Preparation could not be assessed in detail.")


class CoachingFeedback(BaseModel):
    """Overall coaching feedback built from the other four steps."""
    communication_score: Score = Field(default=82)
    content_score: Score = Field(default=74)
    confidence_score: Score = Field(default=80)
    overall_feedback: str = Field(
        default=(
            "Great job on completing your interview! You showed good communication skills "
            "and provided thoughtful responses."
        )
    )
    strengths: List[str] = Field(
        default_factory=lambda: ["Clear communication", "Good examples", "Professional demeanor"]
    )
    areas_for_improvement: List[str] = Field(
        default_factory=lambda: ["More specific metrics", "Company research", "Technical depth"]
    )
    suggested_next_steps: List[str] = Field(
        default_factory=lambda: [
            "Practice answering with specific examples",
            "Research the company's values and mission",
            'Try a "Hard" difficulty interview next',
        ]
    )


# =============================================================================
# Step result wrapper
# =============================================================================


class AnalysisOutcome(BaseModel):
    """Result of one pipeline step, flagged as analyzed or degraded to defaults."""
    step: str
    status: Literal["analyzed", "degraded"]
    data: dict | list
    reason: Optional[str] = None

    @classmethod
    def analyzed(cls, step: str, data) -> "AnalysisOutcome":
        return cls(step=step, status="analyzed", data=data)

    @classmethod
    def degraded(cls, step: str, data, reason: str) -> "AnalysisOutcome":
        return cls(step=step, status="degraded", data=data, reason=reason)

    @property
    def is_degraded(self) -> bool:
        return self.status == "degraded"


class QAPair(BaseModel):
    question: str
    question_type: str
    answer: str


# =============================================================================
# LangGraph State
# =============================================================================


class ResultsAnalysisState(TypedDict):
    # Input
    session_id: str
    position: str
    pairs: List[dict]  # QAPair dicts
    candidate_transcript: str
    preparation_context: str
    resume_text: str
    job_text: str

    # Step outputs (AnalysisOutcome dicts)
    response_outcome: Optional[dict]
    resume_outcome: Optional[dict]
    job_fit_outcome: Optional[dict]
    preparation_outcome: Optional[dict]
    coaching_outcome: Optional[dict]

    # Metadata, merged across parallel nodes
    node_timings: Annotated[List[dict], operator.add]
