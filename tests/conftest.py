import pytest

from costseg_flow.allocation import AllocationCalculator
from costseg_flow.catalog import CatalogBuilder, CatalogStore
from costseg_flow.models.question import Question
from costseg_flow.render import RenderManager


@pytest.fixture(scope="session")
def catalog_store():
    store = CatalogStore()
    store.load()
    return store


@pytest.fixture(scope="session")
def builder(catalog_store):
    return CatalogBuilder(catalog_store)


@pytest.fixture(scope="session")
def calculator():
    return AllocationCalculator()


@pytest.fixture(scope="session")
def renderer():
    return RenderManager()


@pytest.fixture
def make_question():
    """Factory for hand-built runtime questions."""

    def _make(qid, question_type="free_text", *, field=None, options=None, **kwargs):
        if field is None and question_type in ("free_text", "numeric", "date", "single_select"):
            field = qid
        return Question(
            id=qid,
            text=f"Question {qid}?",
            question_type=question_type,
            target_field=field,
            options=options or [],
            **kwargs,
        )

    return _make
