"""
Submission evaluator for AssignScore.

This module provides the SubmissionEvaluator class that orchestrates one
evaluation: read the submission and its peers from the content store, run
the similarity engine and the grader, and persist the result.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from tqdm import tqdm

from .grader import HeuristicGrader
from .similarity import SimilarityEngine
from ..models.document import Document
from ..models.evaluation import EvaluationResult
from ..models.submission import Assignment, Submission, SubmissionStatus
from ..store.base import ContentStore
from ..utils.config import Config, REEVALUATION_POLICIES
from ..utils.exceptions import (
    AlreadyEvaluatedError,
    AssignScoreError,
    ConfigurationError,
    EvaluationWriteError,
    NotFoundError,
    ProcessingError,
    StoreError,
    ValidationError,
    log_exception,
)
from ..utils.validators import InputValidator


log = logging.getLogger(__name__)


@dataclass
class BatchReport:
    """
    Outcome of evaluating several submissions.

    Attributes:
        results: Successful evaluations by submission id
        errors: Failures by submission id
    """
    results: Dict[str, EvaluationResult] = field(default_factory=dict)
    errors: Dict[str, AssignScoreError] = field(default_factory=dict)

    @property
    def succeeded(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return len(self.errors)

    def to_dict(self) -> Dict[str, object]:
        return {
            "succeeded": self.succeeded,
            "failed": self.failed,
            "results": {sid: r.to_response() for sid, r in self.results.items()},
            "errors": {sid: str(e) for sid, e in self.errors.items()},
        }


class SubmissionEvaluator:
    """
    Evaluation orchestrator.

    Reads are idempotent; every successful call appends a new evaluation
    record. Whether a second evaluation of the same submission is allowed
    is decided by the ``evaluation.reevaluation_policy`` setting.

    Attributes:
        store: Content store to read from and write to
        config: Application configuration
        similarity_engine: Plagiarism-risk engine
        grader: Heuristic grader
    """

    def __init__(self, store: ContentStore, config: Optional[Config] = None) -> None:
        """
        Initialize the evaluator.

        Args:
            store: Content store
            config: Optional configuration object. If not provided,
                   default configuration will be used.

        Raises:
            ConfigurationError: If the re-evaluation policy is unknown
        """
        self.store = store
        self.config = config or Config()
        self.similarity_engine = SimilarityEngine(self.config)
        self.grader = HeuristicGrader(self.config)

        evaluation_config = self.config.get_evaluation_config()
        self.policy = self.config.reevaluation_policy
        if self.policy not in REEVALUATION_POLICIES:
            raise ConfigurationError("Unknown re-evaluation policy",
                                     "evaluation.reevaluation_policy", self.policy)
        self.max_workers = int(evaluation_config.get("max_workers", 4))
        self.timeout_seconds = float(evaluation_config.get("timeout_seconds", 30))

        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()

        log.info(f"Submission evaluator initialized (policy={self.policy}, workers={self.max_workers})")

    def evaluate(self, submission_id: str) -> EvaluationResult:
        """
        Evaluate one submission and persist the result.

        Args:
            submission_id: Submission to evaluate

        Returns:
            The persisted EvaluationResult

        Raises:
            InvalidRequestError: If the id is missing
            NotFoundError: If the submission or its assignment does not exist
            AlreadyEvaluatedError: If the policy is ``reject`` and an evaluation exists
            StoreError: If reading from the store fails
            ProcessingError: If the computation fails
            EvaluationWriteError: If persisting fails; carries the computed result
        """
        submission_id = InputValidator.validate_submission_id(submission_id)
        log.info(f"Evaluating submission {submission_id}")

        submission, assignment, peers = self._load(submission_id)
        self._check_policy(submission_id)
        result = self._compute(submission, assignment, peers)
        self._persist(result)

        log.info(f"Submission {submission_id} evaluated: score {result.score}/{assignment.max_score}, "
                 f"plagiarism risk {result.plagiarism_risk:.2f}%")
        return result

    def _load(self, submission_id: str) -> Tuple[Submission, Assignment, List[Submission]]:
        try:
            submission = self.store.get_submission(submission_id)
            assignment = self.store.get_assignment(submission.assignment_id)
            peers = self.store.list_submissions(assignment.assignment_id, exclude_id=submission_id)
        except (NotFoundError, StoreError):
            raise
        except Exception as e:
            raise StoreError("Failed to read submission data", "read", str(e))

        log.debug(f"Loaded submission {submission_id} with {len(peers)} peers "
                  f"from assignment {assignment.assignment_id}")
        return submission, assignment, peers

    def _check_policy(self, submission_id: str) -> None:
        if self.policy != "reject":
            return
        try:
            existing = self.store.latest_evaluation(submission_id)
        except StoreError:
            raise
        except Exception as e:
            raise StoreError("Failed to read existing evaluations", "read", str(e))
        if existing is not None:
            raise AlreadyEvaluatedError(submission_id)

    def _compute(self, submission: Submission, assignment: Assignment,
                 peers: List[Submission]) -> EvaluationResult:
        try:
            target = Document(submission.submission_id, submission.content)
            peer_documents = [Document(p.submission_id, p.content) for p in peers]

            assessment = self.similarity_engine.assess(target, peer_documents)
            grade = self.grader.grade(submission.content, assignment.max_score)

            if assessment.closest_document_id:
                log.debug(f"Closest peer of {submission.submission_id}: "
                          f"{assessment.closest_document_id} ({assessment.rounded_risk:.2f}%)")

            return EvaluationResult.assemble(submission.submission_id, assessment, grade)
        except ValidationError:
            raise
        except Exception as e:
            raise ProcessingError("Failed to evaluate submission", "compute", str(e))

    def _persist(self, result: EvaluationResult) -> None:
        operation = "insert evaluation"
        try:
            stored = self.store.insert_evaluation(result.to_record(),
                                                  reject_existing=self.policy == "reject")
            operation = "update submission status"
            self.store.update_submission_status(result.submission_id, SubmissionStatus.EVALUATED)
        except AlreadyEvaluatedError:
            # a concurrent evaluation of the same submission won the insert
            raise
        except Exception as e:
            error = EvaluationWriteError(result, operation, str(e))
            log_exception(log, error, f"Submission {result.submission_id}")
            raise error from e

        log.debug(f"Stored evaluation {stored.evaluation_id} for {result.submission_id}")

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=self.max_workers,
                                                    thread_name_prefix="assignscore")
            return self._executor

    def submit(self, submission_id: str) -> Future:
        """
        Run ``evaluate`` on the worker pool.

        Returns:
            Future resolving to the EvaluationResult
        """
        return self._get_executor().submit(self.evaluate, submission_id)

    def evaluate_many(self, submission_ids: Iterable[str], show_progress: bool = True) -> BatchReport:
        """
        Evaluate several submissions concurrently.

        Failures are collected per submission; one failing submission does
        not stop the others.

        Args:
            submission_ids: Submissions to evaluate
            show_progress: Whether to display a progress bar

        Returns:
            BatchReport with results and errors by submission id
        """
        ids = list(dict.fromkeys(submission_ids))
        report = BatchReport()
        if not ids:
            return report

        futures = {self.submit(sid): sid for sid in ids}
        for future in tqdm(as_completed(futures), total=len(futures),
                           desc="Evaluating submissions", unit="submission",
                           disable=not show_progress):
            sid = futures[future]
            try:
                report.results[sid] = future.result()
            except AssignScoreError as e:
                log_exception(log, e, f"Submission {sid}")
                report.errors[sid] = e
            except Exception as e:
                error = ProcessingError("Failed to evaluate submission", "evaluate", str(e))
                log_exception(log, error, f"Submission {sid}")
                report.errors[sid] = error

        log.info(f"Batch evaluation finished: {report.succeeded} succeeded, {report.failed} failed")
        return report

    def evaluate_pending(self, assignment_id: str, show_progress: bool = True) -> BatchReport:
        """
        Evaluate every pending submission of an assignment.

        Args:
            assignment_id: Assignment whose pending submissions are evaluated
            show_progress: Whether to display a progress bar
        """
        self.store.get_assignment(assignment_id)
        pending = self.store.list_submissions(assignment_id, status=SubmissionStatus.PENDING)
        log.info(f"Found {len(pending)} pending submissions for assignment {assignment_id}")
        return self.evaluate_many([s.submission_id for s in pending], show_progress)

    def close(self) -> None:
        """Shut down the worker pool."""
        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None

    def __enter__(self) -> SubmissionEvaluator:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
