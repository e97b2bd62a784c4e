"""ConditionEvaluator — turns declarative show-if predicates into skip conditions.

Catalog templates describe branches as data (``show_if`` lists in
``catalog.yaml``).  The catalog builder compiles each list into a plain
predicate over the response store snapshot, so the engine only ever sees
``Callable[[Mapping[str, str]], bool]`` and new conditions compose without
touching it.

A predicate whose field has not been answered yet evaluates to False
(except ``ne`` / ``not_contains``, which are also False: nothing to compare).
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Mapping

from costseg_flow.models.question import Predicate, SkipCondition

logger = logging.getLogger(__name__)


class ConditionEvaluator:
    """Evaluates show-if predicates against a response snapshot."""

    def compile(self, predicates: Iterable[Predicate]) -> SkipCondition:
        """Return a predicate that is True when ALL ``predicates`` hold."""
        preds = tuple(predicates)

        def condition(responses: Mapping[str, str]) -> bool:
            return all(self.evaluate(pred, responses) for pred in preds)

        return condition

    def evaluate(self, pred: Predicate, responses: Mapping[str, str]) -> bool:
        """Evaluate a single predicate against the snapshot."""
        answer = responses.get(pred.field)
        if pred.op == "present":
            return answer is not None and answer.strip() != ""
        if answer is None:
            return False
        return self._compare(pred.op, answer, pred.value)

    @staticmethod
    def _compare(op: str, answer: str, value: Any) -> bool:
        """Apply an operator to a raw answer and an expected value.

        Numeric operators coerce the answer to float and return False when
        it doesn't parse (answers are raw user text).
        """
        if op == "eq":
            return answer == str(value)

        if op == "ne":
            return answer != str(value)

        # --- Numeric comparisons ---
        if op in ("lt", "le", "gt", "ge", "between"):
            try:
                ans_num = float(answer.replace(",", "").replace("$", "").strip())
            except ValueError:
                return False

            if op == "lt":
                return ans_num < float(value)
            if op == "le":
                return ans_num <= float(value)
            if op == "gt":
                return ans_num > float(value)
            if op == "ge":
                return ans_num >= float(value)
            # between: value is [min, max]
            lo, hi = float(value[0]), float(value[1])
            return lo <= ans_num <= hi

        # --- Substring membership ---
        if op == "contains":
            return str(value) in answer

        if op == "not_contains":
            return str(value) not in answer

        if op == "contains_any":
            return any(str(v) in answer for v in value)

        if op == "matches":
            return bool(re.search(str(value), answer))

        logger.warning("Unknown predicate operator: %s", op)
        return False
