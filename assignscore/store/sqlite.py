"""
SQLite-backed content store.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from .base import ContentStore
from ..models.submission import Assignment, EvaluationRecord, Submission, SubmissionStatus
from ..utils.exceptions import AlreadyEvaluatedError, NotFoundError, StoreError


log = logging.getLogger(__name__)


SCHEMA = """
CREATE TABLE IF NOT EXISTS assignments (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL DEFAULT '',
    max_score INTEGER NOT NULL DEFAULT 100
);
CREATE TABLE IF NOT EXISTS submissions (
    id TEXT PRIMARY KEY,
    assignment_id TEXT NOT NULL REFERENCES assignments(id),
    student_id TEXT NOT NULL DEFAULT '',
    content TEXT NOT NULL DEFAULT '',
    status TEXT NOT NULL DEFAULT 'pending',
    submitted_at TEXT
);
CREATE TABLE IF NOT EXISTS evaluations (
    id TEXT PRIMARY KEY,
    submission_id TEXT NOT NULL REFERENCES submissions(id),
    score INTEGER NOT NULL,
    plagiarism_risk REAL NOT NULL,
    feedback_summary TEXT NOT NULL,
    detailed_feedback TEXT NOT NULL,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_submissions_assignment ON submissions(assignment_id);
CREATE INDEX IF NOT EXISTS idx_evaluations_submission ON evaluations(submission_id);
"""


class SQLiteContentStore(ContentStore):
    """
    Content store on a local SQLite database.

    A new connection is opened for every operation, so one store can be
    shared by the evaluator's worker threads.
    """

    def __init__(self, db_path: Union[str, Path] = "assignscore.db") -> None:
        """
        Initialize the store and create the schema if needed.

        Args:
            db_path: Path of the SQLite database file
        """
        self.db_path = str(db_path)
        with self._connection("create schema") as conn:
            conn.executescript(SCHEMA)
        log.info(f"SQLite content store ready at {self.db_path}")

    @contextmanager
    def _connection(self, operation: str) -> Iterator[sqlite3.Connection]:
        try:
            with closing(sqlite3.connect(self.db_path)) as conn:
                conn.row_factory = sqlite3.Row
                with conn:
                    yield conn
        except sqlite3.Error as e:
            raise StoreError(f"SQLite {operation} failed", operation, str(e))

    def add_assignment(self, assignment: Assignment) -> Assignment:
        with self._connection("insert assignment") as conn:
            conn.execute(
                "INSERT OR REPLACE INTO assignments (id, title, max_score) VALUES (?, ?, ?)",
                (assignment.assignment_id, assignment.title, assignment.max_score),
            )
        return assignment

    def add_submission(self, submission: Submission) -> Submission:
        with self._connection("insert submission") as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO submissions
                    (id, assignment_id, student_id, content, status, submitted_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    submission.submission_id,
                    submission.assignment_id,
                    submission.student_id,
                    submission.content,
                    submission.status.value,
                    submission.submitted_at.isoformat() if submission.submitted_at else None,
                ),
            )
        return submission

    def load_json(self, json_path: Union[str, Path]) -> Dict[str, int]:
        """
        Seed the store from a JSON dump.

        The file holds ``{"assignments": [...], "submissions": [...]}`` with
        rows shaped like the content store tables.

        Returns:
            Number of assignments and submissions loaded
        """
        with open(json_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        assignments = [
            Assignment(str(row["id"]), int(row.get("max_score", 100)), row.get("title", ""))
            for row in data.get("assignments", [])
        ]
        submissions = [Submission.from_dict(row) for row in data.get("submissions", [])]

        for assignment in assignments:
            self.add_assignment(assignment)
        for submission in submissions:
            self.add_submission(submission)

        log.info(f"Loaded {len(assignments)} assignments and {len(submissions)} submissions "
                 f"from {json_path}")
        return {"assignments": len(assignments), "submissions": len(submissions)}

    def get_submission(self, submission_id: str) -> Submission:
        with self._connection("read submission") as conn:
            row = conn.execute("SELECT * FROM submissions WHERE id = ?", (submission_id,)).fetchone()
        if row is None:
            raise NotFoundError("Submission not found", "submission", submission_id)
        return Submission.from_dict(dict(row))

    def get_assignment(self, assignment_id: str) -> Assignment:
        with self._connection("read assignment") as conn:
            row = conn.execute("SELECT * FROM assignments WHERE id = ?", (assignment_id,)).fetchone()
        if row is None:
            raise NotFoundError("Assignment not found", "assignment", assignment_id)
        return Assignment(row["id"], int(row["max_score"]), row["title"])

    def list_submissions(self, assignment_id: str, exclude_id: Optional[str] = None,
                         status: Optional[SubmissionStatus] = None) -> List[Submission]:
        query = "SELECT * FROM submissions WHERE assignment_id = ?"
        params: List[Any] = [assignment_id]
        if exclude_id is not None:
            query += " AND id != ?"
            params.append(exclude_id)
        if status is not None:
            query += " AND status = ?"
            params.append(SubmissionStatus(status).value)
        query += " ORDER BY rowid"

        with self._connection("list submissions") as conn:
            rows = conn.execute(query, params).fetchall()
        return [Submission.from_dict(dict(row)) for row in rows]

    def insert_evaluation(self, record: EvaluationRecord,
                          reject_existing: bool = False) -> EvaluationRecord:
        values = (
            record.evaluation_id,
            record.submission_id,
            record.score,
            record.plagiarism_risk,
            record.feedback_summary,
            json.dumps(record.detailed_feedback),
            record.created_at.isoformat(),
        )
        query = """
            INSERT INTO evaluations
                (id, submission_id, score, plagiarism_risk, feedback_summary,
                 detailed_feedback, created_at)
        """
        if reject_existing:
            # single statement, so the existence check and the insert are atomic
            query += """
            SELECT ?, ?, ?, ?, ?, ?, ?
            WHERE NOT EXISTS (SELECT 1 FROM evaluations WHERE submission_id = ?)
            """
            values += (record.submission_id,)
        else:
            query += "VALUES (?, ?, ?, ?, ?, ?, ?)"

        with self._connection("insert evaluation") as conn:
            inserted = conn.execute(query, values).rowcount
        if inserted == 0:
            raise AlreadyEvaluatedError(record.submission_id)
        return record

    def update_submission_status(self, submission_id: str, status: SubmissionStatus) -> None:
        with self._connection("update submission status") as conn:
            cursor = conn.execute(
                "UPDATE submissions SET status = ? WHERE id = ?",
                (SubmissionStatus(status).value, submission_id),
            )
            updated = cursor.rowcount
        if updated == 0:
            raise NotFoundError("Submission not found", "submission", submission_id)

    def list_evaluations(self, submission_id: str) -> List[EvaluationRecord]:
        with self._connection("list evaluations") as conn:
            rows = conn.execute(
                "SELECT * FROM evaluations WHERE submission_id = ? ORDER BY created_at, rowid",
                (submission_id,),
            ).fetchall()
        evaluations = []
        for row in rows:
            data = dict(row)
            data["detailed_feedback"] = json.loads(data["detailed_feedback"])
            evaluations.append(EvaluationRecord.from_dict(data))
        return evaluations

