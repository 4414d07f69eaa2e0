"""
Command line interface for AssignScore.

This module provides the command line interface for evaluating
submissions from the terminal.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .core.evaluator import SubmissionEvaluator
from .core.grader import HeuristicGrader
from .core.similarity import SimilarityEngine
from .models.document import Document
from .models.evaluation import EvaluationResult
from .store import SQLiteContentStore, create_store
from .utils.config import Config
from .utils.exceptions import (
    AssignScoreError,
    EvaluationWriteError,
    NotFoundError,
    ProcessingError,
    ValidationError,
)
from .utils.validators import InputValidator


def setup_logging(level: str = "INFO") -> None:
    """
    Set up logging for CLI.

    Args:
        level: Logging level
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format='[%(levelname)s] %(message)s',
        stream=sys.stderr
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="assignscore",
        description="AssignScore - plagiarism risk and heuristic feedback for student submissions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Score a text file against peer files, no store involved
  assignscore score essay.txt --peers peer1.txt peer2.txt --max-score 80

  # Seed a SQLite store and evaluate one submission
  assignscore --db grading.db import-json dump.json
  assignscore --db grading.db evaluate 4f1c2a

  # Evaluate every pending submission of an assignment
  assignscore --db grading.db evaluate-pending hw-3
        """
    )

    parser.add_argument("--config", help="Path to configuration file")
    parser.add_argument("--db", help="Use the SQLite store at this path")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose output")
    parser.add_argument("--quiet", "-q", action="store_true", help="Suppress non-error output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    score = subparsers.add_parser("score", help="Evaluate a text file without a store")
    score.add_argument("file", help="Submission text file (.txt or .md)")
    score.add_argument("--peers", nargs="*", default=[], help="Peer submission files")
    score.add_argument("--max-score", type=int, help="Assignment maximum score")

    evaluate = subparsers.add_parser("evaluate", help="Evaluate a stored submission")
    evaluate.add_argument("submission_id", help="Submission identifier")

    pending = subparsers.add_parser("evaluate-pending",
                                    help="Evaluate all pending submissions of an assignment")
    pending.add_argument("assignment_id", help="Assignment identifier")

    importer = subparsers.add_parser("import-json", help="Seed the SQLite store from a JSON dump")
    importer.add_argument("file", help="JSON file with assignments and submissions")

    return parser


def load_config(args: argparse.Namespace) -> Config:
    config = Config(args.config) if args.config else Config()
    if args.db:
        config.settings.store["backend"] = "sqlite"
        config.settings.store["sqlite_path"] = args.db
    if not config.validate_configuration():
        raise ValidationError("Invalid configuration", field=str(config.config_file))
    return config


def run_score(args: argparse.Namespace, config: Config) -> dict:
    """Evaluate local files with the similarity engine and the grader."""
    target_path = InputValidator.validate_text_file(args.file)
    peer_paths = [InputValidator.validate_text_file(p) for p in args.peers]

    target = Document(target_path.name, target_path.read_text(encoding="utf-8"))
    peers = [Document(p.name, p.read_text(encoding="utf-8")) for p in peer_paths]

    max_score = args.max_score
    if max_score is None:
        max_score = config.get_grading_config().get("default_max_score", 100)

    assessment = SimilarityEngine(config).assess(target, peers)
    grade = HeuristicGrader(config).grade(target.text, max_score)
    result = EvaluationResult.assemble(target.document_id, assessment, grade)

    output = result.to_response()
    output["closest_peer"] = assessment.closest_document_id
    return output


def run_command(args: argparse.Namespace) -> int:
    """
    Run the selected subcommand.

    Args:
        args: Parsed command line arguments

    Returns:
        Process exit code
    """
    logger = logging.getLogger(__name__)

    try:
        config = load_config(args)

        if args.command == "score":
            emit(run_score(args, config), args.quiet)
            return 0

        if args.command == "import-json":
            store = SQLiteContentStore(config.get_store_config()["sqlite_path"])
            counts = store.load_json(Path(args.file))
            emit(counts, args.quiet)
            return 0

        with create_store(config) as store, SubmissionEvaluator(store, config) as evaluator:
            if args.command == "evaluate":
                result = evaluator.evaluate(args.submission_id)
                emit(result.to_response(), args.quiet)
                return 0

            report = evaluator.evaluate_pending(args.assignment_id, show_progress=not args.quiet)
            emit(report.to_dict(), args.quiet)
            return 0 if report.failed == 0 else 1

    except EvaluationWriteError as e:
        logger.error(f"Store error: {e}")
        emit(e.result.to_response(), args.quiet)
        return 1
    except NotFoundError as e:
        logger.error(f"{e}")
        return 1
    except ValidationError as e:
        logger.error(f"Validation error: {e}")
        return 1
    except ProcessingError as e:
        logger.error(f"Processing error: {e}")
        return 1
    except AssignScoreError as e:
        logger.error(f"AssignScore error: {e}")
        return 1
    except Exception as e:
        logger.critical(f"Unexpected error: {e}", exc_info=args.verbose)
        return 1


def emit(data: dict, quiet: bool = False) -> None:
    """Print a JSON document to stdout."""
    if not quiet:
        print(json.dumps(data, indent=2, ensure_ascii=False))


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.
    """
    args = build_parser().parse_args(argv)

    if args.quiet:
        log_level = "ERROR"
    elif args.verbose:
        log_level = "DEBUG"
    else:
        log_level = "INFO"

    setup_logging(log_level)

    return run_command(args)


if __name__ == "__main__":
    sys.exit(main())
