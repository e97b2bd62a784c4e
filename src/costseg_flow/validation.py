"""Answer validation for presentation adapters.

The flow engine stores whatever string it is given.  Adapters (the chat
service, the terminal simulator) call :func:`validate_answer` first so that
blank input, unparsable amounts, malformed dates, and off-list choices are
rejected before they reach the engine.
"""

from __future__ import annotations

import re
from datetime import datetime

from costseg_flow.constants import CHOICE_TYPES
from costseg_flow.models.question import Question

# Accepted date layouts: the prompts ask for MM/DD/YYYY, browser date
# pickers send ISO dates.
_DATE_FORMATS = ("%m/%d/%Y", "%Y-%m-%d")


class AnswerValidationError(ValueError):
    """The answer is not acceptable for the question it was given to."""


def parse_amount(raw: str) -> float | None:
    """Parse a user-typed amount ("$1,250,000", "25000.50"); None if not a number."""
    text = raw.replace(",", "").replace("$", "").strip()
    if not re.fullmatch(r"-?\d+(?:\.\d+)?", text):
        return None
    return float(text)


def validate_answer(question: Question, raw: str) -> str:
    """Return the trimmed answer if it is valid for ``question``.

    Raises:
        AnswerValidationError: with a message naming the question id.
    """
    if question.is_completion:
        raise AnswerValidationError(
            f"Invalid answer: question '{question.id}' does not accept answers"
        )

    answer = raw.strip() if isinstance(raw, str) else ""
    if not answer:
        raise AnswerValidationError(f"Invalid answer: '{question.id}' requires a response")

    qt = question.question_type
    if qt in CHOICE_TYPES:
        if answer not in question.options:
            raise AnswerValidationError(
                f"Invalid answer: '{answer}' is not an option for '{question.id}'"
            )
        return answer

    if qt == "numeric":
        amount = parse_amount(answer)
        if amount is None:
            raise AnswerValidationError(
                f"Invalid answer: '{question.id}' expects a number, got '{answer}'"
            )
        if amount < 0 or (amount == 0 and not question.allows_zero):
            raise AnswerValidationError(
                f"Invalid answer: '{question.id}' must be "
                f"{'zero or more' if question.allows_zero else 'greater than zero'}"
            )
        return answer

    if qt == "date":
        for fmt in _DATE_FORMATS:
            try:
                datetime.strptime(answer, fmt)
                return answer
            except ValueError:
                continue
        raise AnswerValidationError(
            f"Invalid answer: '{question.id}' expects a date as MM/DD/YYYY, got '{answer}'"
        )

    return answer
