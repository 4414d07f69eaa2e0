"""
Heuristic grader for AssignScore.

Scores a submission from surface-level writing metrics using a fixed
additive rubric and turns the rubric outcome into feedback.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

from .tokenizer import tokenize
from ..models.evaluation import DetailedFeedback, GradeResult, TextMetrics
from ..utils.config import Config
from ..utils.numbers import round_half_up
from ..utils.validators import InputValidator


log = logging.getLogger(__name__)


_SENTENCE_BREAK = re.compile(r"[.!?]+")

INTRODUCTION_MARKERS = ("introduction", "overview")
CONCLUSION_MARKERS = ("conclusion", "summary")


def compute_metrics(text: str) -> TextMetrics:
    """
    Compute the writing metrics of a text.

    Args:
        text: Raw submission text

    Returns:
        TextMetrics for the text; empty text yields zero counts
    """
    text = text or ""
    words = tokenize(text)
    word_count = len(words)
    sentence_count = sum(1 for segment in _SENTENCE_BREAK.split(text) if segment.strip())
    unique_word_count = len(set(words))
    lowered = text.lower()

    return TextMetrics(
        word_count=word_count,
        sentence_count=sentence_count,
        unique_word_count=unique_word_count,
        vocabulary_richness=unique_word_count / max(word_count, 1),
        avg_words_per_sentence=word_count / max(sentence_count, 1),
        has_introduction=any(marker in lowered for marker in INTRODUCTION_MARKERS),
        has_conclusion=any(marker in lowered for marker in CONCLUSION_MARKERS),
    )


class HeuristicGrader:
    """
    Rubric-based grader.

    The rubric starts at BASE_SCORE and adds points for length, vocabulary
    richness, sentence structure and organization. Each rule emits exactly
    one feedback point, in rule order.
    """

    BASE_SCORE = 50

    # (minimum word count, points, feedback)
    LENGTH_RULES: List[Tuple[int, int, str]] = [
        (500, 15, "Good length and depth of content"),
        (300, 10, "Adequate length, could be more detailed"),
        (0, 5, "Content is too brief, needs more elaboration"),
    ]

    # (richness must exceed, points, feedback)
    VOCABULARY_RULES: List[Tuple[float, int, str]] = [
        (0.5, 15, "Excellent vocabulary diversity"),
        (0.3, 10, "Good vocabulary usage"),
        (float("-inf"), 5, "Limited vocabulary, try using more varied terms"),
    ]

    SENTENCE_RANGE = (15, 25)

    def __init__(self, config: Optional[Config] = None) -> None:
        """
        Initialize the grader.

        Args:
            config: Optional configuration object
        """
        self.config = config
        self.default_max_score = 100
        if self.config is not None:
            self.default_max_score = int(self.config.get_grading_config().get("default_max_score", 100))

    def grade(self, text: str, max_score: Optional[int] = None) -> GradeResult:
        """
        Grade a text against the rubric.

        Args:
            text: Raw submission text
            max_score: Assignment maximum; the rubric total is clamped to it

        Returns:
            GradeResult with score, summary and structured feedback

        Raises:
            ValidationError: If max_score is not a positive integer
        """
        if max_score is None:
            max_score = self.default_max_score
        max_score = InputValidator.validate_max_score(max_score)

        metrics = compute_metrics(text)
        score = self.BASE_SCORE
        points: List[str] = []

        for rule in (self._length_rule, self._vocabulary_rule,
                     self._sentence_rule, self._organization_rule):
            gained, feedback = rule(metrics)
            score += gained
            points.append(feedback)

        final_score = min(score, max_score)
        log.debug(f"Rubric total {score}, clamped to {final_score} (max {max_score})")

        return GradeResult(
            score=final_score,
            feedback_summary=". ".join(points) + ".",
            detailed_feedback=DetailedFeedback(
                word_count=metrics.word_count,
                sentence_count=metrics.sentence_count,
                vocabulary_richness=round_half_up(metrics.vocabulary_richness, 2),
                avg_words_per_sentence=round_half_up(metrics.avg_words_per_sentence, 1),
                # split by position, not by wording
                strengths=points[0::2],
                improvements=points[1::2],
            ),
            feedback_points=points,
            metrics=metrics,
        )

    def _length_rule(self, metrics: TextMetrics) -> Tuple[int, str]:
        return next((gained, feedback) for minimum, gained, feedback in self.LENGTH_RULES
                    if metrics.word_count >= minimum)

    def _vocabulary_rule(self, metrics: TextMetrics) -> Tuple[int, str]:
        return next((gained, feedback) for threshold, gained, feedback in self.VOCABULARY_RULES
                    if metrics.vocabulary_richness > threshold)

    def _sentence_rule(self, metrics: TextMetrics) -> Tuple[int, str]:
        low, high = self.SENTENCE_RANGE
        avg = metrics.avg_words_per_sentence
        if low <= avg <= high:
            return 10, "Well-structured sentences"
        if avg < low:
            return 5, "Sentences are too short, add more complexity"
        return 5, "Sentences are too long, break them down for clarity"

    def _organization_rule(self, metrics: TextMetrics) -> Tuple[int, str]:
        if metrics.has_introduction and metrics.has_conclusion:
            return 10, "Good structure with clear introduction and conclusion"
        if metrics.has_introduction or metrics.has_conclusion:
            return 5, "Partial structure, missing either introduction or conclusion"
        return 0, "Lacks clear structure, add introduction and conclusion"


def grade(text: str, max_score: int) -> GradeResult:
    """Grade ``text`` with the default rubric. See HeuristicGrader.grade."""
    return HeuristicGrader().grade(text, max_score)
