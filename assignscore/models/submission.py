"""
Submission models for AssignScore.

This module defines the records read from and written to the
external content store.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class SubmissionStatus(str, Enum):
    """Lifecycle of a submission. This package only moves pending -> evaluated."""
    PENDING = "pending"
    EVALUATED = "evaluated"
    REVIEWED = "reviewed"


@dataclass
class Assignment:
    """
    An assignment that submissions belong to.

    Attributes:
        assignment_id: Unique identifier
        max_score: Upper bound for evaluation scores
        title: Human-readable title
    """
    assignment_id: str
    max_score: int = 100
    title: str = ""

    def __post_init__(self) -> None:
        if not self.assignment_id or not str(self.assignment_id).strip():
            raise ValueError("Assignment ID cannot be empty")
        if isinstance(self.max_score, bool) or not isinstance(self.max_score, int):
            raise ValueError("max_score must be an integer")
        if self.max_score <= 0:
            raise ValueError("max_score must be positive")

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.assignment_id, "max_score": self.max_score, "title": self.title}


@dataclass
class Submission:
    """
    A student's submission for an assignment.

    Attributes:
        submission_id: Unique identifier
        assignment_id: Parent assignment identifier
        content: Free-text content that gets evaluated
        status: Current lifecycle status
        student_id: Identifier of the submitting student
        submitted_at: Submission timestamp
    """
    submission_id: str
    assignment_id: str
    content: str = ""
    status: SubmissionStatus = SubmissionStatus.PENDING
    student_id: str = ""
    submitted_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not self.submission_id or not str(self.submission_id).strip():
            raise ValueError("Submission ID cannot be empty")
        if not self.assignment_id or not str(self.assignment_id).strip():
            raise ValueError("Assignment ID cannot be empty")
        if self.content is None:
            self.content = ""
        self.status = SubmissionStatus(self.status)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.submission_id,
            "assignment_id": self.assignment_id,
            "student_id": self.student_id,
            "content": self.content,
            "status": self.status.value,
            "submitted_at": self.submitted_at.isoformat() if self.submitted_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Submission:
        """Build a submission from a store row (``id``, ``assignment_id``, ...)."""
        submitted_at = data.get("submitted_at")
        if isinstance(submitted_at, str) and submitted_at:
            submitted_at = datetime.fromisoformat(submitted_at.replace("Z", "+00:00"))
        return cls(
            submission_id=str(data["id"]),
            assignment_id=str(data["assignment_id"]),
            content=data.get("content") or "",
            status=SubmissionStatus(data.get("status") or "pending"),
            student_id=data.get("student_id") or "",
            submitted_at=submitted_at or None,
        )


@dataclass(frozen=True)
class EvaluationRecord:
    """
    Persisted form of an evaluation.

    Records are append-only: re-evaluating a submission produces a new
    record with its own id and timestamp.
    """
    submission_id: str
    score: int
    plagiarism_risk: float
    feedback_summary: str
    detailed_feedback: Dict[str, Any]
    evaluation_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.evaluation_id,
            "submission_id": self.submission_id,
            "score": self.score,
            "plagiarism_risk": self.plagiarism_risk,
            "feedback_summary": self.feedback_summary,
            "detailed_feedback": dict(self.detailed_feedback),
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> EvaluationRecord:
        created_at = data.get("created_at")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
        return cls(
            submission_id=str(data["submission_id"]),
            score=int(data["score"]),
            plagiarism_risk=float(data["plagiarism_risk"]),
            feedback_summary=data.get("feedback_summary", ""),
            detailed_feedback=dict(data.get("detailed_feedback") or {}),
            evaluation_id=str(data.get("id") or uuid.uuid4().hex),
            created_at=created_at or datetime.now(timezone.utc),
        )
