"""
Core package for AssignScore.

This package provides the tokenizer, the TF-IDF similarity engine,
the heuristic grader and the evaluation orchestrator.
"""

from .tokenizer import tokenize
from .similarity import SimilarityEngine, build_tfidf, cosine, plagiarism_risk
from .grader import HeuristicGrader, compute_metrics, grade
from .evaluator import SubmissionEvaluator, BatchReport

__all__ = [
    "tokenize",
    "build_tfidf",
    "cosine",
    "plagiarism_risk",
    "SimilarityEngine",
    "HeuristicGrader",
    "compute_metrics",
    "grade",
    "SubmissionEvaluator",
    "BatchReport",
]
