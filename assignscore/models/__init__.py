"""
Data models for AssignScore.

This package contains the request-scoped documents, the store records,
and the evaluation results.
"""

from .document import Document, Corpus
from .submission import Assignment, Submission, SubmissionStatus, EvaluationRecord
from .evaluation import (
    TextMetrics,
    DetailedFeedback,
    GradeResult,
    PlagiarismAssessment,
    EvaluationResult,
)

__all__ = [
    "Document",
    "Corpus",
    "Assignment",
    "Submission",
    "SubmissionStatus",
    "EvaluationRecord",
    "TextMetrics",
    "DetailedFeedback",
    "GradeResult",
    "PlagiarismAssessment",
    "EvaluationResult",
]
