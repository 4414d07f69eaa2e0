"""
In-memory content store.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from collections import defaultdict
from typing import Dict, List, Optional

from .base import ContentStore
from ..models.submission import Assignment, EvaluationRecord, Submission, SubmissionStatus
from ..utils.exceptions import AlreadyEvaluatedError, NotFoundError


log = logging.getLogger(__name__)


class MemoryContentStore(ContentStore):
    """
    Dict-backed content store.

    Used by tests and by offline CLI runs. All operations hold a lock so
    concurrent evaluations see consistent state.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._assignments: Dict[str, Assignment] = {}
        self._submissions: Dict[str, Submission] = {}
        self._evaluations: Dict[str, List[EvaluationRecord]] = defaultdict(list)

    def add_assignment(self, assignment: Assignment) -> Assignment:
        with self._lock:
            self._assignments[assignment.assignment_id] = assignment
        return assignment

    def add_submission(self, submission: Submission) -> Submission:
        with self._lock:
            self._submissions[submission.submission_id] = submission
        return submission

    def get_submission(self, submission_id: str) -> Submission:
        with self._lock:
            submission = self._submissions.get(submission_id)
            if submission is None:
                raise NotFoundError("Submission not found", "submission", submission_id)
            return dataclasses.replace(submission)

    def get_assignment(self, assignment_id: str) -> Assignment:
        with self._lock:
            assignment = self._assignments.get(assignment_id)
            if assignment is None:
                raise NotFoundError("Assignment not found", "assignment", assignment_id)
            return assignment

    def list_submissions(self, assignment_id: str, exclude_id: Optional[str] = None,
                         status: Optional[SubmissionStatus] = None) -> List[Submission]:
        with self._lock:
            return [
                dataclasses.replace(s) for s in self._submissions.values()
                if s.assignment_id == assignment_id
                and s.submission_id != exclude_id
                and (status is None or s.status == status)
            ]

    def insert_evaluation(self, record: EvaluationRecord,
                          reject_existing: bool = False) -> EvaluationRecord:
        with self._lock:
            if reject_existing and self._evaluations.get(record.submission_id):
                raise AlreadyEvaluatedError(record.submission_id)
            self._evaluations[record.submission_id].append(record)
        log.debug(f"Stored evaluation {record.evaluation_id} for {record.submission_id}")
        return record

    def update_submission_status(self, submission_id: str, status: SubmissionStatus) -> None:
        with self._lock:
            submission = self._submissions.get(submission_id)
            if submission is None:
                raise NotFoundError("Submission not found", "submission", submission_id)
            self._submissions[submission_id] = dataclasses.replace(submission, status=status)

    def list_evaluations(self, submission_id: str) -> List[EvaluationRecord]:
        with self._lock:
            return list(self._evaluations.get(submission_id, []))
