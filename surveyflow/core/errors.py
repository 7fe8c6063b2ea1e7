from __future__ import annotations

from typing import Iterable, Tuple

from pydantic import ValidationError as PydanticValidationError


class SurveyFlowError(RuntimeError):
    """Base class for errors surfaced to the person using the app."""


class ValidationError(SurveyFlowError):
    """Raised when survey authoring input or an answer is malformed."""

    def __init__(self, message: str, *, problems: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.problems: Tuple[str, ...] = tuple(problems)

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError, *, prefix: str) -> "ValidationError":
        """Flatten pydantic's error list into readable messages."""

        problems = []
        for error in exc.errors():
            message = str(error.get("msg", "invalid value"))
            # pydantic prefixes messages raised from validators with "Value error, ".
            message = message.removeprefix("Value error, ")
            location = ".".join(str(part) for part in error.get("loc", ()))
            problems.append(f"{location}: {message}" if location else message)
        detail = "; ".join(problems) or str(exc)
        return cls(f"{prefix}: {detail}", problems=problems)


class NotFoundError(SurveyFlowError):
    """Raised when a referenced survey or link does not exist."""


class SurveyClosedError(SurveyFlowError):
    """Raised when a response is submitted to a closed survey."""


class IncompleteSubmission(SurveyFlowError):
    """Raised when a submission leaves one or more questions unanswered."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing: Tuple[str, ...] = tuple(missing)
        super().__init__("Please answer all questions before submitting.")


class DuplicateSubmission(SurveyFlowError):
    """Raised when the fingerprint already answered the survey."""

    def __init__(self, survey_id: str) -> None:
        self.survey_id = survey_id
        super().__init__("You have already responded to this survey.")


__all__ = [
    "DuplicateSubmission",
    "IncompleteSubmission",
    "NotFoundError",
    "SurveyClosedError",
    "SurveyFlowError",
    "ValidationError",
]
