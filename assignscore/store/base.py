"""
Content store interface.

The content store owns persisted assignments, submissions and
evaluations. AssignScore only reads submissions and appends
evaluations through this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models.submission import Assignment, EvaluationRecord, Submission, SubmissionStatus


class ContentStore(ABC):
    """
    Abstract content store.

    Implementations raise NotFoundError for missing rows and StoreError
    for any backend failure. Nothing is retried.
    """

    @abstractmethod
    def get_submission(self, submission_id: str) -> Submission:
        """Fetch one submission or raise NotFoundError."""

    @abstractmethod
    def get_assignment(self, assignment_id: str) -> Assignment:
        """Fetch one assignment or raise NotFoundError."""

    @abstractmethod
    def list_submissions(self, assignment_id: str, exclude_id: Optional[str] = None,
                         status: Optional[SubmissionStatus] = None) -> List[Submission]:
        """
        List the submissions of an assignment.

        Args:
            assignment_id: Parent assignment
            exclude_id: Submission to leave out (the evaluation target)
            status: Only return submissions with this status
        """

    @abstractmethod
    def insert_evaluation(self, record: EvaluationRecord,
                          reject_existing: bool = False) -> EvaluationRecord:
        """
        Append an evaluation record and return it as stored.

        Args:
            record: Evaluation to append
            reject_existing: Refuse the insert if the submission already has an
                evaluation. The check and the insert are one atomic step.

        Raises:
            AlreadyEvaluatedError: If ``reject_existing`` and an evaluation exists
        """

    @abstractmethod
    def update_submission_status(self, submission_id: str, status: SubmissionStatus) -> None:
        """Set the status of a submission."""

    @abstractmethod
    def list_evaluations(self, submission_id: str) -> List[EvaluationRecord]:
        """All evaluations of a submission, oldest first."""

    def latest_evaluation(self, submission_id: str) -> Optional[EvaluationRecord]:
        """Most recent evaluation of a submission, or None."""
        evaluations = self.list_evaluations(submission_id)
        return evaluations[-1] if evaluations else None

    def close(self) -> None:
        """Release backend resources."""

    def __enter__(self) -> ContentStore:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
