"""Tests for recommendation blending."""

import pytest

from artisan_discovery.domain.models.recommendation import (
    Recommendation,
    RecommendationContext,
    RecommendationRequest,
    StrategyType,
)
from artisan_discovery.domain.services.profile_svc import UserProfileBuilder
from artisan_discovery.domain.services.recommendation_svc import (
    RecommendationEngine,
    content_similarity,
    positional_score,
)
from conftest import FakeInteractionStore, FakeListingStore, interaction, make_item


@pytest.fixture
def interactions():
    return FakeInteractionStore(
        [
            interaction("u1", "mug", "view"),
            interaction("u1", "bowl", "view", minutes_ago=5),
            interaction("u2", "board", "favorite"),
            interaction("u2", "mug", "favorite"),
            interaction("u3", "ring", "favorite"),
        ],
        trending=["vase", "ring", "board"],
    )


@pytest.fixture
def engine(listings, interactions, analytics, clock):
    profiles = UserProfileBuilder(listings, interactions, analytics, clock=clock)
    return RecommendationEngine(listings, interactions, analytics, profiles, clock=clock)


def _request(context, **kwargs) -> RecommendationRequest:
    return RecommendationRequest(context=context, **kwargs)


def _ids(response):
    return [r.item.id for r in response.recommendations]


@pytest.mark.asyncio
async def test_homepage_known_user_blends_and_dedupes(engine, analytics) -> None:
    res = await engine.recommend(_request(RecommendationContext.HOMEPAGE, user_id="u1"))

    ids = _ids(res)
    assert len(ids) == len(set(ids))
    assert len(ids) <= 12
    # vase comes from both category affinity and trending; the first bucket wins
    vase = next(r for r in res.recommendations if r.item.id == "vase")
    assert vase.type == StrategyType.CONTENT_BASED
    assert vase.reason == "Popular in pottery"
    # board was favorited by another user and not viewed by u1
    assert "board" in ids
    assert [r.score for r in res.recommendations] == sorted((r.score for r in res.recommendations), reverse=True)

    assert len(analytics.recommendations) == 1
    assert analytics.recommendations[0].recommendation_id.startswith("rec_")
    assert analytics.recommendations[0].recommended_items == ids


@pytest.mark.asyncio
async def test_collaborative_skips_viewed_items(engine) -> None:
    profile = await engine.profiles.build("u1")
    recs = await engine.collaborative(profile, 10)

    ids = [r.item.id for r in recs]
    assert "mug" not in ids
    assert set(ids) == {"board", "ring"}
    assert all(r.type == StrategyType.COLLABORATIVE and r.confidence == 0.7 for r in recs)


@pytest.mark.asyncio
async def test_anonymous_homepage_is_trending(engine) -> None:
    res = await engine.recommend(_request(RecommendationContext.HOMEPAGE))

    assert _ids(res) == ["vase", "ring", "board"]
    assert all(r.type == StrategyType.TRENDING for r in res.recommendations)
    assert res.recommendations[0].score == 100


@pytest.mark.asyncio
async def test_failed_profile_falls_back_to_anonymous(engine, interactions) -> None:
    interactions.fail_history = True
    res = await engine.recommend(_request(RecommendationContext.HOMEPAGE, user_id="u1"))
    assert _ids(res) == ["vase", "ring", "board"]


@pytest.mark.asyncio
async def test_one_failing_bucket_keeps_the_others(engine, listings) -> None:
    listings.fail_category = True
    res = await engine.recommend(_request(RecommendationContext.HOMEPAGE, user_id="u1"))

    assert res.recommendations
    assert "vase" in _ids(res)
    assert all(r.type != StrategyType.CONTENT_BASED for r in res.recommendations)


@pytest.mark.asyncio
async def test_explicit_limit_truncates(engine) -> None:
    res = await engine.recommend(_request(RecommendationContext.HOMEPAGE, limit=2))
    assert _ids(res) == ["vase", "ring"]


@pytest.mark.asyncio
async def test_exclude_items_on_homepage(engine) -> None:
    res = await engine.recommend(_request(RecommendationContext.HOMEPAGE, exclude_items=["vase"]))
    assert "vase" not in _ids(res)


@pytest.mark.asyncio
async def test_product_page_similarity(engine) -> None:
    res = await engine.recommend(_request(RecommendationContext.PRODUCT_PAGE, current_item="mug"))

    assert _ids(res) == ["bowl", "vase"]
    bowl = res.recommendations[0]
    assert bowl.reason == "Similar to current item"
    assert bowl.score == pytest.approx(bowl.confidence * 100)


@pytest.mark.asyncio
async def test_product_page_without_current_item(engine) -> None:
    res = await engine.recommend(_request(RecommendationContext.PRODUCT_PAGE))
    assert res.recommendations == []


@pytest.mark.asyncio
async def test_search_results_context(engine) -> None:
    res = await engine.recommend(_request(RecommendationContext.SEARCH_RESULTS))
    assert _ids(res) == ["vase", "ring", "board"]


@pytest.mark.asyncio
async def test_checkout_never_returns_excluded_item(engine, monkeypatch) -> None:
    x = make_item("x")
    other = make_item("other")

    async def add_on(cart_items, limit):
        return [
            Recommendation(item=x, score=99, reason="Add-on", type=StrategyType.PERSONALIZED, confidence=0.5),
            Recommendation(item=other, score=50, reason="Add-on", type=StrategyType.PERSONALIZED, confidence=0.5),
        ]

    monkeypatch.setattr(engine, "add_on", add_on)
    res = await engine.recommend(_request(RecommendationContext.CHECKOUT, exclude_items=["x"]))

    assert _ids(res) == ["other"]


@pytest.mark.asyncio
async def test_cart_splits_limit_across_lines(engine, monkeypatch) -> None:
    calls = []

    async def complementary(item_id, limit):
        calls.append((item_id, limit))
        return []

    monkeypatch.setattr(engine, "complementary", complementary)
    res = await engine.recommend(_request(RecommendationContext.CART, exclude_items=["mug", "bowl", "ring"]))

    assert res.recommendations == []
    assert calls == [("mug", 2), ("bowl", 2), ("ring", 2)]


@pytest.mark.asyncio
async def test_top_level_failure_returns_empty(engine, monkeypatch) -> None:
    async def boom(*args):
        raise RuntimeError("unexpected")

    monkeypatch.setattr(engine, "_for_context", boom)
    res = await engine.recommend(_request(RecommendationContext.HOMEPAGE, session_id="s1"))

    assert res.recommendations == []
    assert res.analytics.recommended_items == []
    assert res.analytics.session_id == "s1"


@pytest.mark.asyncio
async def test_analytics_write_failure_is_ignored(engine, analytics) -> None:
    analytics.fail_writes = True
    res = await engine.recommend(_request(RecommendationContext.SEARCH_RESULTS))
    assert res.recommendations


@pytest.mark.asyncio
async def test_trending_refreshes_hourly(engine, interactions, clock) -> None:
    await engine.initialize()
    await engine.trending(3)
    assert interactions.trending_calls == 1

    clock.advance(3601)
    interactions.trending = ["board"]
    recs = await engine.trending(3)
    assert interactions.trending_calls == 2
    assert [r.item.id for r in recs] == ["board"]


@pytest.mark.asyncio
async def test_failed_trending_refresh_keeps_previous_list(engine, interactions, clock) -> None:
    await engine.initialize()
    clock.advance(3601)
    interactions.fail_trending = True

    recs = await engine.trending(3)
    assert [r.item.id for r in recs] == ["vase", "ring", "board"]


def test_content_similarity_weights() -> None:
    a = make_item("a", price=20, category="pottery", tags=["ceramic", "blue"])
    b = make_item("b", price=20, category="pottery", tags=["ceramic", "blue"])
    c = make_item("c", price=60, category="jewelry", tags=["silver"])

    assert content_similarity(a, b) == pytest.approx(1.0)
    # no category, no shared tag, |20-60| / 40 = 1 -> price term 0
    assert content_similarity(a, c) == pytest.approx(0.0)


def test_content_similarity_free_items() -> None:
    a = make_item("a", price=0, tags=[])
    b = make_item("b", price=0, tags=[])
    # same category, no tags to compare, identical (zero) price
    assert content_similarity(a, b) == pytest.approx(0.6)


def test_positional_score_band() -> None:
    band = (90.0, 10.0)
    assert positional_score(band, 0, 4) == 100
    assert positional_score(band, 3, 4) == 92.5


@pytest.mark.asyncio
async def test_failed_initial_trending_load_is_retried(engine, interactions, clock) -> None:
    interactions.fail_trending = True
    await engine.initialize()
    assert await engine.trending(3) == []

    interactions.fail_trending = False
    clock.advance(60)
    recs = await engine.trending(3)

    assert [r.item.id for r in recs] == ["vase", "ring", "board"]
    assert interactions.trending_calls == 3


@pytest.fixture
def busy_engine(analytics, clock):
    """Known user u1 with three affinity categories, five neighbours and five trending ids."""
    items = [make_item(f"c{c}-{n}", category=f"cat{c}") for c in range(3) for n in range(3)]
    items += [make_item(f"f{n}", category="misc") for n in range(5)]
    items += [make_item(f"t{n}", category="misc") for n in range(5)]
    listings = FakeListingStore(items)

    rows = [interaction("u1", f"c{c}-0", "view", minutes_ago=c) for c in range(3)]
    rows += [interaction(f"u{n + 2}", f"f{n}", "favorite") for n in range(5)]
    interactions = FakeInteractionStore(rows, trending=[f"t{n}" for n in range(5)])

    profiles = UserProfileBuilder(listings, interactions, analytics, clock=clock)
    return RecommendationEngine(listings, interactions, analytics, profiles, clock=clock)


@pytest.mark.asyncio
async def test_homepage_without_limit_returns_at_most_ten(busy_engine) -> None:
    res = await busy_engine.recommend(_request(RecommendationContext.HOMEPAGE, user_id="u1"))
    assert len(res.recommendations) == 10


@pytest.mark.asyncio
async def test_homepage_explicit_limit_caps_response(busy_engine) -> None:
    res = await busy_engine.recommend(_request(RecommendationContext.HOMEPAGE, user_id="u1", limit=12))
    assert len(res.recommendations) == 12
