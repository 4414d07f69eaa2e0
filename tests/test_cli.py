"""
Tests for the command line interface.
"""

import json

import pytest

from assignscore import __version__
from assignscore.cli import build_parser, main
from tests.samples import ESSAY_CASTLES, ESSAY_PHOTOSYNTHESIS


@pytest.fixture
def base_args(temp_dir):
    return ["--config", str(temp_dir / "no_config.json"), "--db", str(temp_dir / "cli.db")]


@pytest.fixture
def dump_file(create_test_file):
    dump = {
        "assignments": [{"id": "hw1", "title": "Biology essay", "max_score": 80}],
        "submissions": [
            {"id": "s1", "assignment_id": "hw1", "content": ESSAY_PHOTOSYNTHESIS},
            {"id": "s2", "assignment_id": "hw1", "content": ESSAY_PHOTOSYNTHESIS},
            {"id": "s3", "assignment_id": "hw1", "content": ESSAY_CASTLES},
        ],
    }
    return create_test_file("dump.json", json.dumps(dump))


class TestParser:
    """Test cases for the argument parser."""

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--version"])
        assert __version__ in capsys.readouterr().out

    def test_score_arguments(self):
        args = build_parser().parse_args(["score", "essay.txt", "--peers", "a.txt", "b.txt",
                                          "--max-score", "80"])
        assert args.command == "score"
        assert args.peers == ["a.txt", "b.txt"]
        assert args.max_score == 80


class TestScoreCommand:
    """Test cases for the score subcommand."""

    def test_score_against_peers(self, create_test_file, temp_dir, capsys):
        essay = create_test_file("essay.txt", ESSAY_PHOTOSYNTHESIS)
        copy = create_test_file("copy.txt", ESSAY_PHOTOSYNTHESIS)
        other = create_test_file("castles.md", ESSAY_CASTLES)

        code = main(["--config", str(temp_dir / "no_config.json"), "score", str(essay),
                     "--peers", str(copy), str(other), "--max-score", "80"])

        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["plagiarism_risk"] == "100%"
        assert output["closest_peer"] == "copy.txt"
        assert 0 <= output["score"] <= 80

    def test_score_without_peers(self, create_test_file, temp_dir, capsys):
        essay = create_test_file("essay.txt", "short text")

        code = main(["--config", str(temp_dir / "no_config.json"), "score", str(essay)])

        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["plagiarism_risk"] == "0%"
        assert output["score"] == 75
        assert output["closest_peer"] is None

    def test_score_rejects_unsupported_file(self, create_test_file, temp_dir):
        essay = create_test_file("essay.pdf", "binary")
        assert main(["--config", str(temp_dir / "no_config.json"), "score", str(essay)]) == 1


class TestStoreCommands:
    """Test cases for the store-backed subcommands."""

    def test_import_and_evaluate(self, base_args, dump_file, capsys):
        assert main(base_args + ["import-json", str(dump_file)]) == 0
        assert json.loads(capsys.readouterr().out) == {"assignments": 1, "submissions": 3}

        assert main(base_args + ["evaluate", "s1"]) == 0
        output = json.loads(capsys.readouterr().out)
        assert output["submission_id"] == "s1"
        assert output["plagiarism_risk"] == "100%"

    def test_evaluate_missing_submission(self, base_args, dump_file, capsys):
        main(base_args + ["--quiet", "import-json", str(dump_file)])
        assert main(base_args + ["evaluate", "missing"]) == 1
        assert capsys.readouterr().out == ""

    def test_evaluate_pending(self, base_args, dump_file, capsys):
        main(base_args + ["--quiet", "import-json", str(dump_file)])
        main(base_args + ["--quiet", "evaluate", "s1"])

        assert main(base_args + ["evaluate-pending", "hw1"]) == 0
        report = json.loads(capsys.readouterr().out)
        assert report["succeeded"] == 2
        assert report["failed"] == 0
        assert set(report["results"]) == {"s2", "s3"}

    def test_evaluate_pending_unknown_assignment(self, base_args, dump_file):
        main(base_args + ["--quiet", "import-json", str(dump_file)])
        assert main(base_args + ["--quiet", "evaluate-pending", "hw9"]) == 1
