"""
Test suite initialization for AssignScore.

This module provides the shared fixtures for the AssignScore test suite.
"""

import pytest
import tempfile
import logging
from pathlib import Path

from assignscore.models.submission import Assignment, Submission
from assignscore.store.memory import MemoryContentStore
from assignscore.utils.config import Config
from tests.samples import ESSAY_CASTLES, ESSAY_PHOTOSYNTHESIS


# Configure logging for tests
logging.basicConfig(
    level=logging.DEBUG,
    format='[TEST] %(levelname)s - %(name)s - %(message)s'
)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config(temp_dir):
    """Configuration with defaults, isolated from user files and the environment."""
    config = Config(temp_dir / "missing_config.json", use_environment=False)
    config.settings.evaluation["max_workers"] = 2
    config.settings.evaluation["timeout_seconds"] = 5
    return config


@pytest.fixture
def reject_config(sample_config):
    sample_config.set_reevaluation_policy("reject")
    return sample_config


@pytest.fixture
def seeded_store():
    """
    Memory store with two assignments.

    hw1: s1 and s2 are identical, s3 is unrelated.
    hw2: s4 repeats s1's text but belongs to another assignment.
    """
    store = MemoryContentStore()
    store.add_assignment(Assignment("hw1", max_score=80, title="Biology essay"))
    store.add_assignment(Assignment("hw2", max_score=100, title="Free topic"))
    store.add_submission(Submission("s1", "hw1", ESSAY_PHOTOSYNTHESIS, student_id="alice"))
    store.add_submission(Submission("s2", "hw1", ESSAY_PHOTOSYNTHESIS, student_id="bob"))
    store.add_submission(Submission("s3", "hw1", ESSAY_CASTLES, student_id="carol"))
    store.add_submission(Submission("s4", "hw2", ESSAY_PHOTOSYNTHESIS, student_id="dave"))
    return store


@pytest.fixture
def create_test_file(temp_dir):
    """Factory fixture to create test files."""
    def _create_file(filename: str, content: str) -> Path:
        file_path = temp_dir / filename
        file_path.write_text(content, encoding="utf-8")
        return file_path

    return _create_file
