"""
REST content store for PostgREST-style backends (e.g. Supabase).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from .base import ContentStore
from ..models.submission import Assignment, EvaluationRecord, Submission, SubmissionStatus
from ..utils.exceptions import AlreadyEvaluatedError, NotFoundError, StoreError


log = logging.getLogger(__name__)


class RestContentStore(ContentStore):
    """
    Content store backed by the ``submissions``, ``assignments`` and
    ``evaluations`` tables of a PostgREST API.

    Every call is made once with a timeout; failures surface as StoreError.
    """

    API_PREFIX = "/rest/v1"

    def __init__(self, base_url: str, api_key: str, timeout: float = 10,
                 session: Optional[requests.Session] = None) -> None:
        """
        Initialize the REST store.

        Args:
            base_url: Project URL, e.g. ``https://xyz.supabase.co``
            api_key: Service key sent as ``apikey`` and bearer token
            timeout: Per-request timeout in seconds
            session: Optional preconfigured session
        """
        if not base_url:
            raise StoreError("REST store requires a base URL", "configure")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": "AssignScore/1.0",
        })

    def _request(self, method: str, table: str, operation: str,
                 params: Optional[Dict[str, str]] = None,
                 json_body: Any = None, prefer: Optional[str] = None,
                 conflict: Optional[Exception] = None) -> List[Dict[str, Any]]:
        url = f"{self.base_url}{self.API_PREFIX}/{table}"
        headers = {"Prefer": prefer} if prefer else None
        try:
            resp = self.session.request(method, url, params=params, json=json_body,
                                        headers=headers, timeout=self.timeout)
            if conflict is not None and resp.status_code == 409:
                raise conflict
            resp.raise_for_status()
        except requests.RequestException as e:
            raise StoreError(f"REST {operation} failed", operation, str(e))

        if not resp.content:
            return []
        try:
            data = resp.json()
        except ValueError as e:
            raise StoreError(f"REST {operation} returned invalid JSON", operation, str(e))
        return data if isinstance(data, list) else [data]

    def get_submission(self, submission_id: str) -> Submission:
        rows = self._request("GET", "submissions", "read submission",
                             params={"id": f"eq.{submission_id}", "select": "*"})
        if not rows:
            raise NotFoundError("Submission not found", "submission", submission_id)
        return Submission.from_dict(rows[0])

    def get_assignment(self, assignment_id: str) -> Assignment:
        rows = self._request("GET", "assignments", "read assignment",
                             params={"id": f"eq.{assignment_id}", "select": "id,title,max_score"})
        if not rows:
            raise NotFoundError("Assignment not found", "assignment", assignment_id)
        row = rows[0]
        max_score = row.get("max_score")
        return Assignment(str(row["id"]), 100 if max_score is None else int(max_score),
                          row.get("title") or "")

    def list_submissions(self, assignment_id: str, exclude_id: Optional[str] = None,
                         status: Optional[SubmissionStatus] = None) -> List[Submission]:
        params = {"assignment_id": f"eq.{assignment_id}", "select": "*"}
        if exclude_id is not None:
            params["id"] = f"neq.{exclude_id}"
        if status is not None:
            params["status"] = f"eq.{SubmissionStatus(status).value}"
        rows = self._request("GET", "submissions", "list submissions", params=params)
        return [Submission.from_dict(row) for row in rows]

    def insert_evaluation(self, record: EvaluationRecord,
                          reject_existing: bool = False) -> EvaluationRecord:
        """
        Insert an evaluation row.

        With ``reject_existing`` the backend is expected to carry a unique
        constraint on ``evaluations.submission_id``; the resulting 409 is
        reported as AlreadyEvaluatedError. The pre-check below only saves a
        write when the row is already visible.
        """
        conflict = None
        if reject_existing:
            if self.latest_evaluation(record.submission_id) is not None:
                raise AlreadyEvaluatedError(record.submission_id)
            conflict = AlreadyEvaluatedError(record.submission_id)
        rows = self._request("POST", "evaluations", "insert evaluation",
                             json_body=record.to_dict(), prefer="return=representation",
                             conflict=conflict)
        if rows:
            return EvaluationRecord.from_dict(rows[0])
        return record

    def update_submission_status(self, submission_id: str, status: SubmissionStatus) -> None:
        rows = self._request("PATCH", "submissions", "update submission status",
                             params={"id": f"eq.{submission_id}"},
                             json_body={"status": SubmissionStatus(status).value},
                             prefer="return=representation")
        if not rows:
            raise NotFoundError("Submission not found", "submission", submission_id)

    def list_evaluations(self, submission_id: str) -> List[EvaluationRecord]:
        rows = self._request("GET", "evaluations", "list evaluations",
                             params={"submission_id": f"eq.{submission_id}",
                                     "select": "*", "order": "created_at.asc"})
        return [EvaluationRecord.from_dict(row) for row in rows]

    def close(self) -> None:
        self.session.close()
