"""
Tests for the content store backends.
"""

import json
import time
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
import requests

from assignscore.core.evaluator import SubmissionEvaluator
from assignscore.models.submission import Assignment, EvaluationRecord, Submission, SubmissionStatus
from assignscore.store import (
    MemoryContentStore,
    RestContentStore,
    SQLiteContentStore,
    create_store,
)
from assignscore.utils.exceptions import (
    AlreadyEvaluatedError,
    ConfigurationError,
    NotFoundError,
    StoreError,
)
from tests.samples import ESSAY_CASTLES, ESSAY_PHOTOSYNTHESIS


class SlowCheckSQLiteStore(SQLiteContentStore):
    def latest_evaluation(self, submission_id):
        found = super().latest_evaluation(submission_id)
        time.sleep(0.2)
        return found


def make_record(submission_id="s1", score=70):
    return EvaluationRecord(
        submission_id=submission_id,
        score=score,
        plagiarism_risk=12.5,
        feedback_summary="Good length and depth of content.",
        detailed_feedback={"word_count": 10, "strengths": ["a"], "improvements": ["b"]},
    )


@pytest.fixture
def sqlite_store(temp_dir):
    store = SQLiteContentStore(temp_dir / "store.db")
    store.add_assignment(Assignment("hw1", max_score=80, title="Biology essay"))
    store.add_submission(Submission("s1", "hw1", ESSAY_PHOTOSYNTHESIS, student_id="alice"))
    store.add_submission(Submission("s2", "hw1", ESSAY_PHOTOSYNTHESIS, student_id="bob"))
    store.add_submission(Submission("s3", "hw1", ESSAY_CASTLES, student_id="carol"))
    return store


class TestMemoryContentStore:
    """Test cases for MemoryContentStore."""

    def test_get_returns_copy(self, seeded_store):
        submission = seeded_store.get_submission("s1")
        submission.status = SubmissionStatus.REVIEWED
        assert seeded_store.get_submission("s1").status == SubmissionStatus.PENDING

    def test_missing_rows(self):
        store = MemoryContentStore()
        with pytest.raises(NotFoundError):
            store.get_submission("s1")
        with pytest.raises(NotFoundError):
            store.get_assignment("hw1")
        with pytest.raises(NotFoundError):
            store.update_submission_status("s1", SubmissionStatus.EVALUATED)

    def test_list_filters(self, seeded_store):
        peers = seeded_store.list_submissions("hw1", exclude_id="s1")
        assert [s.submission_id for s in peers] == ["s2", "s3"]

        seeded_store.update_submission_status("s2", SubmissionStatus.EVALUATED)
        pending = seeded_store.list_submissions("hw1", status=SubmissionStatus.PENDING)
        assert [s.submission_id for s in pending] == ["s1", "s3"]

    def test_latest_evaluation(self, seeded_store):
        assert seeded_store.latest_evaluation("s1") is None
        seeded_store.insert_evaluation(make_record(score=10))
        second = seeded_store.insert_evaluation(make_record(score=20))
        assert seeded_store.latest_evaluation("s1") == second

    def test_insert_rejects_existing(self, seeded_store):
        seeded_store.insert_evaluation(make_record(), reject_existing=True)
        with pytest.raises(AlreadyEvaluatedError):
            seeded_store.insert_evaluation(make_record(), reject_existing=True)
        assert len(seeded_store.list_evaluations("s1")) == 1


class TestSQLiteContentStore:
    """Test cases for SQLiteContentStore."""

    def test_submission_round_trip(self, sqlite_store):
        submitted_at = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)
        sqlite_store.add_submission(Submission("s9", "hw1", "text", student_id="zoe",
                                               submitted_at=submitted_at))

        submission = sqlite_store.get_submission("s9")
        assert submission.assignment_id == "hw1"
        assert submission.content == "text"
        assert submission.student_id == "zoe"
        assert submission.status == SubmissionStatus.PENDING
        assert submission.submitted_at == submitted_at

    def test_assignment(self, sqlite_store):
        assignment = sqlite_store.get_assignment("hw1")
        assert assignment.max_score == 80
        assert assignment.title == "Biology essay"

    def test_missing_rows(self, sqlite_store):
        with pytest.raises(NotFoundError):
            sqlite_store.get_submission("missing")
        with pytest.raises(NotFoundError):
            sqlite_store.get_assignment("missing")
        with pytest.raises(NotFoundError):
            sqlite_store.update_submission_status("missing", SubmissionStatus.EVALUATED)

    def test_list_submissions(self, sqlite_store):
        peers = sqlite_store.list_submissions("hw1", exclude_id="s2")
        assert [s.submission_id for s in peers] == ["s1", "s3"]

        sqlite_store.update_submission_status("s1", SubmissionStatus.EVALUATED)
        pending = sqlite_store.list_submissions("hw1", status=SubmissionStatus.PENDING)
        assert [s.submission_id for s in pending] == ["s2", "s3"]
        assert sqlite_store.list_submissions("hw-unknown") == []

    def test_evaluations_append(self, sqlite_store):
        first = sqlite_store.insert_evaluation(make_record(score=10))
        second = sqlite_store.insert_evaluation(make_record(score=20))

        records = sqlite_store.list_evaluations("s1")
        assert [r.evaluation_id for r in records] == [first.evaluation_id, second.evaluation_id]
        assert records[0].detailed_feedback == first.detailed_feedback
        assert records[0].created_at == first.created_at
        assert sqlite_store.latest_evaluation("s1").score == 20
        assert sqlite_store.list_evaluations("s3") == []

    def test_insert_rejects_existing(self, sqlite_store):
        sqlite_store.insert_evaluation(make_record(), reject_existing=True)
        with pytest.raises(AlreadyEvaluatedError):
            sqlite_store.insert_evaluation(make_record(), reject_existing=True)

        # appending without the flag is still allowed
        sqlite_store.insert_evaluation(make_record())
        assert len(sqlite_store.list_evaluations("s1")) == 2

    def test_reject_policy_concurrent(self, temp_dir, reject_config):
        store = SlowCheckSQLiteStore(temp_dir / "race.db")
        store.add_assignment(Assignment("hw1"))
        store.add_submission(Submission("s1", "hw1", ESSAY_PHOTOSYNTHESIS))
        store.add_submission(Submission("s2", "hw1", ESSAY_CASTLES))

        outcomes = []
        with SubmissionEvaluator(store, reject_config) as evaluator:
            futures = [evaluator.submit("s1") for _ in range(2)]
            for future in futures:
                try:
                    outcomes.append(future.result(timeout=10))
                except AlreadyEvaluatedError as e:
                    outcomes.append(e)

        assert sum(isinstance(o, AlreadyEvaluatedError) for o in outcomes) == 1
        assert len(store.list_evaluations("s1")) == 1

    def test_load_json(self, temp_dir):
        dump = {
            "assignments": [{"id": "a1", "title": "Essay", "max_score": 50}],
            "submissions": [
                {"id": "x1", "assignment_id": "a1", "content": "first", "status": "pending"},
                {"id": "x2", "assignment_id": "a1", "content": "second",
                 "submitted_at": "2024-03-01T09:30:00Z"},
            ],
        }
        path = temp_dir / "dump.json"
        path.write_text(json.dumps(dump), encoding="utf-8")

        store = SQLiteContentStore(temp_dir / "loaded.db")
        counts = store.load_json(path)

        assert counts == {"assignments": 1, "submissions": 2}
        assert store.get_assignment("a1").max_score == 50
        assert store.get_submission("x2").submitted_at.tzinfo is not None

    def test_unusable_path(self, temp_dir):
        with pytest.raises(StoreError):
            SQLiteContentStore(temp_dir)

    def test_evaluator_end_to_end(self, sqlite_store, sample_config):
        with SubmissionEvaluator(sqlite_store, sample_config) as evaluator:
            result = evaluator.evaluate("s1")

        assert result.plagiarism_risk == pytest.approx(100.0)
        assert sqlite_store.get_submission("s1").status == SubmissionStatus.EVALUATED
        stored = sqlite_store.latest_evaluation("s1")
        assert stored.evaluation_id == result.evaluation_id
        assert stored.detailed_feedback == result.detailed_feedback.to_dict()


def mock_response(payload):
    response = MagicMock()
    response.content = json.dumps(payload).encode("utf-8") if payload is not None else b""
    response.status_code = 200
    response.json.return_value = payload
    return response


class TestRestContentStore:
    """Test cases for RestContentStore."""

    @pytest.fixture
    def session(self):
        return MagicMock(spec=requests.Session, headers={})

    @pytest.fixture
    def store(self, session):
        return RestContentStore("https://example.supabase.co/", "secret", timeout=3, session=session)

    def test_headers(self, store, session):
        assert session.headers["apikey"] == "secret"
        assert session.headers["Authorization"] == "Bearer secret"

    def test_get_submission(self, store, session):
        session.request.return_value = mock_response([
            {"id": "s1", "assignment_id": "hw1", "content": "text", "status": "pending"},
        ])

        submission = store.get_submission("s1")

        assert submission.submission_id == "s1"
        method, url = session.request.call_args[0]
        kwargs = session.request.call_args[1]
        assert method == "GET"
        assert url == "https://example.supabase.co/rest/v1/submissions"
        assert kwargs["params"]["id"] == "eq.s1"
        assert kwargs["timeout"] == 3

    def test_get_submission_missing(self, store, session):
        session.request.return_value = mock_response([])
        with pytest.raises(NotFoundError):
            store.get_submission("s1")

    def test_list_submissions_filters(self, store, session):
        session.request.return_value = mock_response([
            {"id": "s2", "assignment_id": "hw1", "content": "peer"},
        ])

        peers = store.list_submissions("hw1", exclude_id="s1", status=SubmissionStatus.PENDING)

        assert [p.submission_id for p in peers] == ["s2"]
        params = session.request.call_args[1]["params"]
        assert params["assignment_id"] == "eq.hw1"
        assert params["id"] == "neq.s1"
        assert params["status"] == "eq.pending"

    def test_insert_evaluation(self, store, session):
        record = make_record()
        session.request.return_value = mock_response([record.to_dict()])

        stored = store.insert_evaluation(record)

        assert stored.evaluation_id == record.evaluation_id
        kwargs = session.request.call_args[1]
        assert session.request.call_args[0][0] == "POST"
        assert kwargs["json"]["submission_id"] == "s1"
        assert kwargs["headers"] == {"Prefer": "return=representation"}

    def test_insert_conflict_is_already_evaluated(self, store, session):
        conflict = mock_response({"code": "23505", "message": "duplicate key value"})
        conflict.status_code = 409
        # existing-evaluation lookup comes back empty, then the insert hits the constraint
        session.request.side_effect = [mock_response([]), conflict]

        with pytest.raises(AlreadyEvaluatedError):
            store.insert_evaluation(make_record(), reject_existing=True)

    def test_insert_rejects_visible_evaluation(self, store, session):
        session.request.return_value = mock_response([make_record().to_dict()])

        with pytest.raises(AlreadyEvaluatedError):
            store.insert_evaluation(make_record(), reject_existing=True)
        assert session.request.call_count == 1
        assert session.request.call_args[0][0] == "GET"

    def test_conflict_without_reject_is_store_error(self, store, session):
        conflict = mock_response({"message": "duplicate key value"})
        conflict.status_code = 409
        conflict.raise_for_status.side_effect = requests.HTTPError("409 Conflict")
        session.request.return_value = conflict

        with pytest.raises(StoreError):
            store.insert_evaluation(make_record())

    def test_timestamps_with_trimmed_fraction(self, store, session):
        session.request.return_value = mock_response([{
            "id": "s1",
            "assignment_id": "hw1",
            "content": "text",
            "submitted_at": "2025-10-19T18:50:12.12345+00:00",
        }])

        submission = store.get_submission("s1")

        assert submission.submitted_at == datetime(2025, 10, 19, 18, 50, 12, 123450,
                                                   tzinfo=timezone.utc)

    def test_evaluation_timestamp_with_trimmed_fraction(self, store, session):
        row = make_record().to_dict()
        row["created_at"] = "2025-10-19T18:50:12.1+00:00"
        session.request.return_value = mock_response([row])

        record = store.list_evaluations("s1")[0]

        assert record.created_at == datetime(2025, 10, 19, 18, 50, 12, 100000, tzinfo=timezone.utc)

    def test_assignment_zero_max_score_is_rejected(self, store, session):
        session.request.return_value = mock_response([{"id": "hw1", "title": "", "max_score": 0}])
        with pytest.raises(ValueError, match="max_score must be positive"):
            store.get_assignment("hw1")

    def test_assignment_missing_max_score_defaults(self, store, session):
        session.request.return_value = mock_response([{"id": "hw1", "title": None, "max_score": None}])
        assignment = store.get_assignment("hw1")
        assert assignment.max_score == 100
        assert assignment.title == ""

    def test_update_status(self, store, session):
        session.request.return_value = mock_response([{"id": "s1", "status": "evaluated"}])
        store.update_submission_status("s1", SubmissionStatus.EVALUATED)

        kwargs = session.request.call_args[1]
        assert session.request.call_args[0][0] == "PATCH"
        assert kwargs["json"] == {"status": "evaluated"}

    def test_update_status_missing(self, store, session):
        session.request.return_value = mock_response([])
        with pytest.raises(NotFoundError):
            store.update_submission_status("s1", SubmissionStatus.EVALUATED)

    def test_transport_error(self, store, session):
        session.request.side_effect = requests.ConnectionError("connection refused")
        with pytest.raises(StoreError) as exc_info:
            store.get_assignment("hw1")
        assert exc_info.value.operation == "read assignment"

    def test_http_error(self, store, session):
        response = mock_response({"message": "bad"})
        response.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
        session.request.return_value = response
        with pytest.raises(StoreError):
            store.list_evaluations("s1")

    def test_invalid_json(self, store, session):
        response = MagicMock(content=b"<html>")
        response.json.side_effect = ValueError("no json")
        session.request.return_value = response
        with pytest.raises(StoreError):
            store.get_submission("s1")

    def test_requires_url(self):
        with pytest.raises(StoreError):
            RestContentStore("", "secret")


class TestCreateStore:
    """Test cases for create_store."""

    def test_memory_default(self, sample_config):
        assert isinstance(create_store(sample_config), MemoryContentStore)

    def test_sqlite(self, sample_config, temp_dir):
        sample_config.settings.store.update(backend="sqlite", sqlite_path=str(temp_dir / "c.db"))
        with create_store(sample_config) as store:
            assert isinstance(store, SQLiteContentStore)

    def test_rest(self, sample_config):
        sample_config.settings.store.update(backend="rest", rest_url="https://example.supabase.co",
                                            rest_key="secret")
        with create_store(sample_config) as store:
            assert isinstance(store, RestContentStore)

    def test_rest_requires_credentials(self, sample_config):
        sample_config.settings.store.update(backend="rest", rest_url="", rest_key="")
        with pytest.raises(ConfigurationError):
            create_store(sample_config)

    def test_unknown_backend(self, sample_config):
        sample_config.settings.store["backend"] = "redis"
        with pytest.raises(ConfigurationError):
            create_store(sample_config)
