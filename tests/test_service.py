"""End-to-end tests for the recommendation pipeline with fake collaborators."""

import asyncio

import pytest

from fakes import (
    DUNE,
    SCENARIO_A_TEXT,
    SCENARIO_B_TEXT,
    FakeCatalog,
    FakeLLM,
    make_service,
)
from shelfmate.domain.errors import InvocationError, ParseError
from shelfmate.domain.models import Recommendation
from shelfmate.ports.llm import LLMPort
from shelfmate.prompts.templates import EMPTY_CATALOG_LINE
from shelfmate.services.recommendation import normalize_query


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, "recommend me a book"),
        ("", "recommend me a book"),
        ("   ", "recommend me a book"),
        ("  sci-fi  ", "sci-fi"),
    ],
)
def test_normalize_query(raw, expected):
    assert normalize_query(raw) == expected


@pytest.mark.asyncio
async def test_scenario_a_catalog_match(catalog: FakeCatalog):
    llm = FakeLLM(SCENARIO_A_TEXT)
    result = await make_service(catalog, llm).recommend("fantasy adventure")

    assert len(result) == 3
    assert result[0] == Recommendation(
        title="Dune",
        author="Frank Herbert",
        reason="matches fantasy/adventure",
        confidence=0.9,
        catalog_id="b1",
    )
    assert [(r.title, r.author, r.confidence) for r in result[1:]] == [
        ("The Hobbit", "J.R.R. Tolkien", 0.85),
        ("Mistborn", "Brandon Sanderson", 0.8),
    ]
    assert 'User Query: "fantasy adventure"' in llm.prompts[0]
    assert "- ID: b1" in llm.prompts[0]
    assert catalog.limits == [20]


@pytest.mark.asyncio
async def test_scenario_b_fenced_reply(catalog: FakeCatalog):
    fenced = await make_service(catalog, FakeLLM(SCENARIO_B_TEXT)).recommend("fantasy adventure")
    bare = await make_service(catalog, FakeLLM(SCENARIO_A_TEXT)).recommend("fantasy adventure")
    assert fenced == bare


@pytest.mark.asyncio
async def test_scenario_c_prose_reply_fails(catalog: FakeCatalog):
    llm = FakeLLM("I recommend reading something by Tolkien.")
    with pytest.raises(ParseError):
        await make_service(catalog, llm).recommend("fantasy adventure")
    assert len(llm.prompts) == 1


@pytest.mark.asyncio
async def test_scenario_d_catalog_unreachable():
    catalog = FakeCatalog([DUNE], available=False)
    llm = FakeLLM('[{"title": "The Hobbit", "author": "J.R.R. Tolkien", "reason": "r", "confidence": 0.7}]')

    result = await make_service(catalog, llm).recommend("fantasy adventure")

    assert EMPTY_CATALOG_LINE in llm.prompts[0]
    assert result[0].title == "The Hobbit"


@pytest.mark.asyncio
async def test_blank_query_uses_default(catalog: FakeCatalog):
    llm = FakeLLM(SCENARIO_A_TEXT)
    await make_service(catalog, llm).recommend("  ")
    assert 'User Query: "recommend me a book"' in llm.prompts[0]


@pytest.mark.asyncio
async def test_configured_sample_size(catalog: FakeCatalog):
    await make_service(catalog, FakeLLM(SCENARIO_A_TEXT), sample_size=5).recommend("x")
    assert catalog.limits == [5]


# ── Catalog id validation ──────────────────────────


@pytest.mark.asyncio
async def test_unknown_catalog_ids_are_stripped(catalog: FakeCatalog):
    reply = '[{"bookId": "zz9", "title": "Invented", "author": "Nobody", "confidence": 0.4}]'
    result = await make_service(catalog, FakeLLM(reply)).recommend("x")
    assert result[0].catalog_id is None
    assert result[0].title == "Invented"


@pytest.mark.asyncio
async def test_unknown_catalog_ids_kept_when_disabled(catalog: FakeCatalog):
    reply = '[{"bookId": "zz9", "title": "Invented", "author": "Nobody"}]'
    result = await make_service(catalog, FakeLLM(reply), strip_unknown_ids=False).recommend("x")
    assert result[0].catalog_id == "zz9"


# ── Failures, retries, timeouts ────────────────────


@pytest.mark.asyncio
async def test_transient_failure_is_retried_once(catalog: FakeCatalog):
    llm = FakeLLM(InvocationError("throttled", transient=True), SCENARIO_A_TEXT)
    result = await make_service(catalog, llm).recommend("x")
    assert len(result) == 3
    assert len(llm.prompts) == 2


@pytest.mark.asyncio
async def test_retries_are_bounded(catalog: FakeCatalog):
    llm = FakeLLM(InvocationError("down", transient=True))
    with pytest.raises(InvocationError):
        await make_service(catalog, llm, max_retries=1).recommend("x")
    assert len(llm.prompts) == 2


@pytest.mark.asyncio
async def test_permanent_failure_is_not_retried(catalog: FakeCatalog):
    llm = FakeLLM(InvocationError("access denied"), SCENARIO_A_TEXT)
    with pytest.raises(InvocationError):
        await make_service(catalog, llm).recommend("x")
    assert len(llm.prompts) == 1


@pytest.mark.asyncio
async def test_parse_error_is_not_retried(catalog: FakeCatalog):
    llm = FakeLLM("no json", SCENARIO_A_TEXT)
    with pytest.raises(ParseError):
        await make_service(catalog, llm).recommend("x")
    assert len(llm.prompts) == 1


class SlowLLM(LLMPort):
    def __init__(self) -> None:
        self.cancelled = False

    async def invoke(self, prompt: str) -> str:
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return "[]"


@pytest.mark.asyncio
async def test_timeout_aborts_call(catalog: FakeCatalog):
    llm = SlowLLM()
    service = make_service(catalog, llm, max_retries=0)
    with pytest.raises(InvocationError, match="timed out"):
        await service.recommend("x", timeout=0.01)
    assert llm.cancelled


@pytest.mark.asyncio
async def test_explicit_zero_timeout_is_honoured(catalog: FakeCatalog):
    llm = SlowLLM()
    service = make_service(catalog, llm, timeout=None, max_retries=0)
    with pytest.raises(InvocationError, match="timed out"):
        await service.recommend("x", timeout=0)
