"""
Input validation utilities for AssignScore.

This module provides validation for evaluation requests,
submission identifiers, scores, and input files.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

from ..utils.exceptions import InvalidRequestError, UnauthorizedError, ValidationError


log = logging.getLogger(__name__)


class InputValidator:
    """
    Input validation utilities for AssignScore.

    Provides validation methods for:
    - Evaluation request payloads
    - Authorization credentials
    - Submission identifiers
    - Maximum scores
    - Text file paths
    """

    SUPPORTED_TEXT_FORMATS = ['.txt', '.md']
    MAX_SUBMISSION_ID_LENGTH = 128

    @classmethod
    def validate_submission_id(cls, submission_id: Any) -> str:
        """
        Validate a submission identifier.

        Args:
            submission_id: Identifier to validate

        Returns:
            The identifier with surrounding whitespace removed

        Raises:
            InvalidRequestError: If the identifier is missing or not a string
        """
        if submission_id is None or (isinstance(submission_id, str) and not submission_id.strip()):
            raise InvalidRequestError("Missing submission_id", field="submission_id")

        if not isinstance(submission_id, str):
            raise InvalidRequestError("submission_id must be a string", field="submission_id",
                                      value=str(submission_id))

        submission_id = submission_id.strip()
        if len(submission_id) > cls.MAX_SUBMISSION_ID_LENGTH:
            raise InvalidRequestError("submission_id is too long", field="submission_id")

        return submission_id

    @classmethod
    def validate_request_payload(cls, payload: Any) -> str:
        """
        Validate an evaluation request body and extract the submission id.

        Args:
            payload: Decoded request body, expected ``{"submission_id": ...}``

        Returns:
            Validated submission identifier

        Raises:
            InvalidRequestError: If the payload is malformed
        """
        if not isinstance(payload, Mapping):
            raise InvalidRequestError("Request body must be a JSON object")
        return cls.validate_submission_id(payload.get("submission_id"))

    @classmethod
    def validate_authorization(cls, authorization: Optional[str]) -> str:
        """
        Check that a credential was forwarded.

        Raises:
            UnauthorizedError: If the credential is missing or blank
        """
        if not authorization or not str(authorization).strip():
            raise UnauthorizedError()
        return str(authorization).strip()

    @classmethod
    def validate_max_score(cls, max_score: Any) -> int:
        """
        Validate an assignment's maximum score.

        Args:
            max_score: Value to validate

        Returns:
            The maximum score as an integer

        Raises:
            ValidationError: If the value is not a positive integer
        """
        if isinstance(max_score, bool):
            raise ValidationError("max_score must be an integer", field="max_score", value=str(max_score))
        if isinstance(max_score, float) and max_score.is_integer():
            max_score = int(max_score)
        if not isinstance(max_score, int):
            raise ValidationError("max_score must be an integer", field="max_score", value=str(max_score))
        if max_score <= 0:
            raise ValidationError("max_score must be positive", field="max_score", value=str(max_score))
        return max_score

    @classmethod
    def validate_file_path(cls, file_path: Union[str, Path], must_exist: bool = True,
                           extensions: Optional[List[str]] = None) -> Path:
        """
        Validate a file path.

        Args:
            file_path: Path to validate
            must_exist: Whether the file must exist
            extensions: List of allowed extensions (with dots)

        Returns:
            Validated Path object

        Raises:
            ValidationError: If path is invalid
        """
        try:
            if isinstance(file_path, str):
                file_path = Path(file_path)

            if not isinstance(file_path, Path):
                raise ValidationError("File path must be a string or Path object")

            if not file_path.is_absolute():
                file_path = file_path.resolve()

            if must_exist:
                if not file_path.exists():
                    raise ValidationError(f"File does not exist: {file_path}")

                if not file_path.is_file():
                    raise ValidationError(f"Path is not a file: {file_path}")

            if extensions:
                if file_path.suffix.lower() not in [ext.lower() for ext in extensions]:
                    valid_exts = ', '.join(extensions)
                    raise ValidationError(f"File must have one of these extensions: {valid_exts}")

            return file_path

        except ValidationError:
            raise
        except Exception as e:
            raise ValidationError(f"Invalid file path: {e}")

    @classmethod
    def validate_text_file(cls, file_path: Union[str, Path]) -> Path:
        """Validate a submission text file (.txt or .md)."""
        return cls.validate_file_path(file_path, must_exist=True,
                                      extensions=cls.SUPPORTED_TEXT_FORMATS)

    @classmethod
    def is_valid_submission_id(cls, submission_id: Any) -> bool:
        try:
            cls.validate_submission_id(submission_id)
            return True
        except ValidationError:
            return False
