"""Pydantic schemas for per-dimension scoring.

Every scorer, templated or not, consumes a ScoringContext and returns an
AgentOutput, so the assessment worker never depends on how a score is made.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from readiness_engine.core.dimensions import MAX_LEVEL, MIN_LEVEL, is_dimension


class RecommendationItem(BaseModel):
    """One actionable suggestion produced by a scorer."""

    action: str = Field(..., description="What the venture should do")
    impact: Literal["low", "medium", "high"] = Field(..., description="Expected impact")
    eta_weeks: Optional[int] = Field(None, ge=0, description="Estimated weeks to complete")
    dependency: Optional[str] = Field(None, description="What this depends on, if anything")
    reasoning: Optional[str] = Field(None, description="Why this is recommended")


class AgentOutput(BaseModel):
    """Result of scoring one dimension."""

    dimension: str
    level: int = Field(..., ge=MIN_LEVEL, le=MAX_LEVEL, description="Readiness level 1-9")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Confidence 0-1")
    justification: str = ""
    evidence: list[str] = Field(default_factory=list)
    next_steps: list[str] = Field(default_factory=list)
    recommendations: list[RecommendationItem] = Field(default_factory=list)

    @field_validator("dimension")
    @classmethod
    def _known_dimension(cls, value: str) -> str:
        if not is_dimension(value):
            raise ValueError(f"Unknown dimension: {value}")
        return value

    def to_output_json(self) -> dict[str, Any]:
        """Shape stored in agent_runs.output_json."""
        return {
            "level": self.level,
            "confidence": self.confidence,
            "justification": self.justification,
            "evidence": self.evidence,
            "nextSteps": self.next_steps,
            "recommendations": [
                r.model_dump(exclude_none=True) for r in self.recommendations
            ],
        }


class ScoringContext(BaseModel):
    """Everything a scorer may look at."""

    venture_id: str
    venture: dict[str, Any] = Field(default_factory=dict, description="Venture row with intake fields")
    submission: Optional[dict[str, Any]] = Field(None, description="Latest submission, if any")
    document_chunks: dict[str, list[dict[str, Any]]] = Field(
        default_factory=dict, description="Chunks tagged with each dimension"
    )

    @property
    def stage(self) -> Optional[str]:
        return self.venture.get("stage")

    def chunks_for(self, dimension: str) -> list[dict[str, Any]]:
        return self.document_chunks.get(dimension, [])
