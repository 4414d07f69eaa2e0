"""
Evaluation models for AssignScore.

This module defines the data structures produced by the grader, the
similarity engine, and the evaluation orchestrator.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .submission import EvaluationRecord
from ..utils.numbers import to_percent_label


@dataclass(frozen=True)
class TextMetrics:
    """
    Surface-level writing metrics of a single text.

    Attributes:
        word_count: Number of tokens
        sentence_count: Number of non-empty sentence segments
        unique_word_count: Number of distinct tokens
        vocabulary_richness: unique_word_count / max(word_count, 1)
        avg_words_per_sentence: word_count / max(sentence_count, 1)
        has_introduction: Mentions "introduction" or "overview"
        has_conclusion: Mentions "conclusion" or "summary"
    """
    word_count: int
    sentence_count: int
    unique_word_count: int
    vocabulary_richness: float
    avg_words_per_sentence: float
    has_introduction: bool
    has_conclusion: bool


@dataclass(frozen=True)
class DetailedFeedback:
    """
    Structured feedback surfaced to callers and persisted with an evaluation.

    Attributes:
        word_count: Number of tokens
        sentence_count: Number of sentences
        vocabulary_richness: Richness rounded to 2 decimals
        avg_words_per_sentence: Average rounded to 1 decimal
        strengths: Feedback points at even positions
        improvements: Feedback points at odd positions
    """
    word_count: int
    sentence_count: int
    vocabulary_richness: float
    avg_words_per_sentence: float
    strengths: List[str] = field(default_factory=list)
    improvements: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "word_count": self.word_count,
            "sentence_count": self.sentence_count,
            "vocabulary_richness": self.vocabulary_richness,
            "avg_words_per_sentence": self.avg_words_per_sentence,
            "strengths": list(self.strengths),
            "improvements": list(self.improvements),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> DetailedFeedback:
        return cls(
            word_count=int(data.get("word_count", 0)),
            sentence_count=int(data.get("sentence_count", 0)),
            vocabulary_richness=float(data.get("vocabulary_richness", 0.0)),
            avg_words_per_sentence=float(data.get("avg_words_per_sentence", 0.0)),
            strengths=list(data.get("strengths", [])),
            improvements=list(data.get("improvements", [])),
        )


@dataclass(frozen=True)
class GradeResult:
    """
    Output of the heuristic grader.

    Attributes:
        score: Rubric score clamped to the assignment's maximum
        feedback_summary: Feedback points joined into one paragraph
        detailed_feedback: Structured feedback
        feedback_points: Feedback points in rubric order
        metrics: Raw metrics the score was derived from
    """
    score: int
    feedback_summary: str
    detailed_feedback: DetailedFeedback
    feedback_points: List[str]
    metrics: TextMetrics


@dataclass(frozen=True)
class PlagiarismAssessment:
    """
    Plagiarism risk of a target document against its peers.

    Attributes:
        risk: Unrounded risk in [0, 100]
        rounded_risk: Risk rounded for persistence
        closest_document_id: Peer with the highest similarity, if any
        similarities: Cosine similarity per peer document id
    """
    risk: float
    rounded_risk: float
    closest_document_id: Optional[str] = None
    similarities: Dict[str, float] = field(default_factory=dict)

    @property
    def percent_label(self) -> str:
        """Risk rendered as an integer percentage, e.g. ``"42%"``."""
        return to_percent_label(self.risk)


@dataclass(frozen=True)
class EvaluationResult:
    """
    Result of evaluating one submission.

    Each evaluation gets a fresh id and timestamp; results are never
    updated in place.

    Attributes:
        submission_id: Evaluated submission
        score: Score in [0, max_score]
        plagiarism_risk: Risk in [0, 100], rounded to 2 decimals
        plagiarism_risk_percent: Risk rounded to the nearest integer
        feedback_summary: Feedback paragraph
        detailed_feedback: Structured feedback
        evaluation_id: Unique id of this evaluation
        created_at: UTC creation time
    """
    submission_id: str
    score: int
    plagiarism_risk: float
    plagiarism_risk_percent: int
    feedback_summary: str
    detailed_feedback: DetailedFeedback
    evaluation_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if not (0.0 <= self.plagiarism_risk <= 100.0):
            raise ValueError("plagiarism_risk must be between 0 and 100")
        if self.score < 0:
            raise ValueError("score must be non-negative")

    @classmethod
    def assemble(cls, submission_id: str, assessment: PlagiarismAssessment,
                 grade: GradeResult) -> EvaluationResult:
        """Combine a plagiarism assessment and a grade into one result."""
        return cls(
            submission_id=submission_id,
            score=grade.score,
            plagiarism_risk=assessment.rounded_risk,
            plagiarism_risk_percent=int(assessment.percent_label.rstrip("%")),
            feedback_summary=grade.feedback_summary,
            detailed_feedback=grade.detailed_feedback,
        )

    def to_response(self) -> Dict[str, Any]:
        """Caller-facing representation with the risk as an integer percentage."""
        return {
            "submission_id": self.submission_id,
            "plagiarism_risk": f"{self.plagiarism_risk_percent}%",
            "score": self.score,
            "feedback_summary": self.feedback_summary,
            "detailed_feedback": self.detailed_feedback.to_dict(),
        }

    def to_record(self) -> EvaluationRecord:
        """Persisted representation linked to the submission."""
        return EvaluationRecord(
            submission_id=self.submission_id,
            score=self.score,
            plagiarism_risk=self.plagiarism_risk,
            feedback_summary=self.feedback_summary,
            detailed_feedback=self.detailed_feedback.to_dict(),
            evaluation_id=self.evaluation_id,
            created_at=self.created_at,
        )
