"""
AssignScore - automated evaluation of free-text student submissions.

This package estimates a plagiarism-risk score for a submission against
the other submissions of the same assignment, using TF-IDF vectors and
cosine similarity, and grades it with a heuristic writing rubric.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"

from .core.evaluator import SubmissionEvaluator
from .core.grader import HeuristicGrader, grade
from .core.similarity import SimilarityEngine, build_tfidf, cosine, plagiarism_risk
from .core.tokenizer import tokenize
from .models.evaluation import EvaluationResult, DetailedFeedback
from .models.submission import Submission, Assignment, SubmissionStatus

__all__ = [
    "SubmissionEvaluator",
    "HeuristicGrader",
    "SimilarityEngine",
    "tokenize",
    "build_tfidf",
    "cosine",
    "plagiarism_risk",
    "grade",
    "EvaluationResult",
    "DetailedFeedback",
    "Submission",
    "Assignment",
    "SubmissionStatus",
]
