"""Question catalog — loads ``data/catalog.yaml`` and builds per-category catalogs.

``CatalogStore`` is the single source of truth for question wording and
option lists.  It is loaded once and shared; ``CatalogBuilder`` turns it into
an ordered list of runtime ``Question`` objects for one property category
and one flavor.

Usage::

    store = CatalogStore()      # defaults to the packaged data/catalog.yaml
    store.load()

    builder = CatalogBuilder(store)
    questions = builder.build("commercial", "tax_only", seed=7)

    # or the module-level shortcut using a cached default store
    questions = build_catalog("industrial")

Length and order depend only on (category, flavor); only the wording picked
from each variant list changes between builds.  Pass ``seed`` (or an ``rng``)
to pin the wording.
"""

from __future__ import annotations

import logging
import random
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml

from costseg_flow.conditions import ConditionEvaluator
from costseg_flow.constants import (
    CATEGORIES,
    DEFAULT_CATEGORY,
    DEFAULT_FLAVOR,
    FLAVORS,
    GENERIC_OPTION_KEY,
)
from costseg_flow.models.question import CatalogData, CategoryText, Question, QuestionTemplate

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).parent / "data" / "catalog.yaml"


def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def normalize_category(category: str | None) -> str:
    """Loosely normalise a category string ("Mixed_Use " -> "mixed-use").

    Unrecognised values are returned normalised but unchanged otherwise;
    callers decide how to fall back.
    """
    if not category:
        return DEFAULT_CATEGORY
    return category.strip().lower().replace("_", "-").replace(" ", "-")


# ---------------------------------------------------------------------------
# CatalogStore
# ---------------------------------------------------------------------------

class CatalogStore:
    """Loads the catalog YAML and exposes the parsed templates.

    Attributes populated after :meth:`load`:

        greeting    — QuestionTemplate (first question of every catalog)
        tax         — list[QuestionTemplate] for the tax phase
        transition  — QuestionTemplate between the tax and takeoffs phases
        takeoffs    — list[QuestionTemplate] for the takeoffs phase
        completion  — dict[flavor, QuestionTemplate]
    """

    def __init__(self, catalog_path: str | Path | None = None) -> None:
        self._path = Path(catalog_path) if catalog_path else DEFAULT_CATALOG_PATH
        self._data: CatalogData | None = None

    @property
    def loaded(self) -> bool:
        return self._data is not None

    def load(self) -> None:
        """Parse the YAML file into typed templates.

        Raises ``FileNotFoundError`` if the file is missing and pydantic's
        ``ValidationError`` (a ``ValueError``) for malformed entries, such as
        an unknown ``question_type``.
        """
        raw = load_yaml(self._path)
        self._data = CatalogData(**raw)
        self._check_unique_ids()
        logger.info(
            "CatalogStore loaded from %s: %d tax, %d takeoff templates",
            self._path, len(self._data.tax), len(self._data.takeoffs),
        )

    def _check_unique_ids(self) -> None:
        seen: set[str] = set()
        for tmpl in [self.greeting, *self.tax, self.transition, *self.takeoffs]:
            if tmpl.id in seen:
                raise ValueError(f"Duplicate question id '{tmpl.id}' in {self._path}")
            seen.add(tmpl.id)

    def _require(self) -> CatalogData:
        if self._data is None:
            raise ValueError("CatalogStore not loaded; call load() first")
        return self._data

    @property
    def greeting(self) -> QuestionTemplate:
        return self._require().greeting

    @property
    def tax(self) -> list[QuestionTemplate]:
        return self._require().tax

    @property
    def transition(self) -> QuestionTemplate:
        return self._require().transition

    @property
    def takeoffs(self) -> list[QuestionTemplate]:
        return self._require().takeoffs

    @property
    def completion(self) -> dict[str, QuestionTemplate]:
        data = self._require()
        return {"tax_only": data.completion.tax_only, "combined": data.completion.combined}


# ---------------------------------------------------------------------------
# CatalogBuilder
# ---------------------------------------------------------------------------

class CatalogBuilder:
    """Builds ordered question catalogs from a loaded :class:`CatalogStore`."""

    def __init__(self, store: CatalogStore) -> None:
        if not store.loaded:
            store.load()
        self._store = store
        self._evaluator = ConditionEvaluator()

    def build(
        self,
        category: str | None,
        flavor: str = DEFAULT_FLAVOR,
        *,
        seed: int | None = None,
        rng: random.Random | None = None,
    ) -> list[Question]:
        """Return the ordered question list for ``category`` and ``flavor``.

        Args:
            category: property category; unrecognised values use the
                residential wording and the generic option sets.
            flavor: "tax_only" or "combined".
            seed: seeds a private ``random.Random`` for wording selection.
            rng: caller-supplied generator (takes precedence over ``seed``).

        Raises:
            ValueError: if ``flavor`` is unknown.
        """
        if flavor not in FLAVORS:
            raise ValueError(f"Unknown catalog flavor '{flavor}', expected one of {FLAVORS}")
        if rng is None:
            rng = random.Random(seed)

        cat = normalize_category(category)
        if cat not in CATEGORIES:
            logger.debug("Unrecognised category %r, using %s wording", category, DEFAULT_CATEGORY)

        store = self._store
        questions = [self._materialize(store.greeting, cat, "tax", rng)]
        questions += [
            self._materialize(t, cat, "tax", rng)
            for t in store.tax
            if self._included(t, cat)
        ]

        last_phase = "tax"
        if flavor == "combined":
            questions.append(self._materialize(store.transition, cat, "takeoffs", rng))
            questions += [
                self._materialize(t, cat, "takeoffs", rng)
                for t in store.takeoffs
                if self._included(t, cat)
            ]
            last_phase = "takeoffs"

        questions.append(self._materialize(store.completion[flavor], cat, last_phase, rng))
        return questions

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _included(tmpl: QuestionTemplate, category: str) -> bool:
        return tmpl.categories is None or category in tmpl.categories

    def _materialize(
        self,
        tmpl: QuestionTemplate,
        category: str,
        phase: str,
        rng: random.Random,
    ) -> Question:
        """Fix wording and options for one template."""
        variants = _for_category(tmpl.variants, category, generic=False)
        text = rng.choice(variants)

        options: list[str] = []
        if tmpl.options is not None:
            options = list(_for_category(tmpl.options, category, generic=True))

        condition = None
        if tmpl.show_if:
            condition = self._evaluator.compile(tmpl.show_if)

        return Question(
            id=tmpl.id,
            text=text,
            question_type=tmpl.question_type,
            target_field=tmpl.field,
            options=options,
            allows_zero=tmpl.allows_zero,
            skip_condition=condition,
            phase=phase,
            label=tmpl.label,
            display=tmpl.display,
        )


def _for_category(value: CategoryText, category: str, *, generic: bool) -> list[str]:
    """Resolve a flat list or a category-keyed map to a list of strings.

    Lookup order for maps: the category itself, then the generic ``default``
    set when ``generic`` is True, then the default category (residential).
    """
    if isinstance(value, list):
        return value
    if category in value:
        return value[category]
    if generic and GENERIC_OPTION_KEY in value:
        return value[GENERIC_OPTION_KEY]
    return value[DEFAULT_CATEGORY]


# ---------------------------------------------------------------------------
# Module-level shortcut
# ---------------------------------------------------------------------------

@lru_cache(maxsize=None)
def _default_builder() -> CatalogBuilder:
    store = CatalogStore()
    store.load()
    return CatalogBuilder(store)


def build_catalog(
    category: str | None,
    flavor: str = DEFAULT_FLAVOR,
    *,
    seed: int | None = None,
    rng: random.Random | None = None,
    store: Optional[CatalogStore] = None,
) -> list[Question]:
    """Build a catalog using ``store`` or the packaged default catalog."""
    builder = CatalogBuilder(store) if store is not None else _default_builder()
    return builder.build(category, flavor, seed=seed, rng=rng)
