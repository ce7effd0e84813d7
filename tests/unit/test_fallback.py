"""Unit tests for template fallback topics and off-the-table cards."""

import random

import pytest

from src.models.models import OffTableRecipe, TopicRequest, Vibe
from src.topics import fallback
from src.topics.fallback import build_fallback_topics
from src.topics.offtable import OFF_TABLE_FACT, build_cheeky_title, build_off_table_items, build_off_table_starters
from src.utils.cache import hash_string


def recipe_request(**kwargs) -> TopicRequest:
    return TopicRequest(
        recipe={"title": "Shakshuka", "cuisine": "Middle Eastern", "ingredients": ["eggs", "tomatoes", "cumin"]},
        **kwargs,
    )


class TestBuildFallbackTopics:
    """Test deterministic template selection and response shape."""

    def test_shape_and_source(self):
        topics = build_fallback_topics(recipe_request(), rng=random.Random(1))

        assert len(topics.starters) == 3
        assert len(set(topics.starters)) == 3
        assert topics.fact
        assert topics.source == "fallback"

    def test_hashes_cover_every_sentence(self):
        topics = build_fallback_topics(recipe_request(), rng=random.Random(1))

        assert topics.hashes == [hash_string(text) for text in [*topics.starters, topics.fact]]

    def test_seeded_rng_is_deterministic(self):
        first = build_fallback_topics(recipe_request(), rng=random.Random(42))
        second = build_fallback_topics(recipe_request(), rng=random.Random(42))

        assert first == second

    def test_recipe_templates_interpolated(self):
        topics = build_fallback_topics(recipe_request(vibe="Friends"), rng=random.Random(3))
        text = " ".join([*topics.starters, topics.fact])

        assert "{" not in text
        assert "Shakshuka" in text or "Middle Eastern" in text

    @pytest.mark.parametrize("vibe", list(Vibe))
    def test_known_vibe_uses_vibe_pool(self, vibe):
        topics = build_fallback_topics(TopicRequest(vibe=vibe.value), rng=random.Random(0))

        assert set(topics.starters) <= set(fallback.VIBE_STARTERS[vibe])
        assert topics.fact in fallback.VIBE_FACTS[vibe]

    def test_free_theme_interpolated(self):
        topics = build_fallback_topics(TopicRequest(vibe="Italian"), rng=random.Random(0))

        assert all("Italian" in starter for starter in topics.starters)
        assert "Italian" in topics.fact

    def test_word_cap_applied(self):
        topics = build_fallback_topics(TopicRequest(vibe="Italian"), rng=random.Random(0), max_words=5)

        assert all(len(starter.split()) <= 5 for starter in topics.starters)
        assert len(topics.fact.split()) <= 5

    def test_broken_template_pool_uses_generic(self, monkeypatch):
        monkeypatch.setattr(fallback, "THEME_STARTERS", ["only one {theme}"])

        topics = build_fallback_topics(TopicRequest(vibe="Italian"), rng=random.Random(0))

        assert len(topics.starters) == 3
        assert topics.fact == fallback.GENERIC_FACT
        assert all("{" not in starter for starter in topics.starters)


class TestOffTable:
    """Test off-the-table cards."""

    @pytest.mark.parametrize(
        "title,expected",
        [
            ("Lemon Herb Salmon", "Lemon Herb Salary Negotiation Salmon"),
            ("Chicken Tacos", "Politely Controversial Chicken Tacos"),
            ("Lentil Soup", "Lentil Spill-The-Tea Soup"),
        ],
    )
    def test_keyword_replacement(self, title, expected):
        assert build_cheeky_title(title, "Any") == expected

    def test_no_keyword_uses_cuisine_gossip(self):
        assert build_cheeky_title("Mushroom Risotto", "italian") == "Maybe Not Tonight Italian gossip"
        assert build_cheeky_title("Mushroom Risotto") == "Maybe Not Tonight Family gossip"

    def test_starters_mention_cuisine(self):
        starters = build_off_table_starters("Thai")

        assert len(starters) == 3
        assert "politics in thai" in starters[0]
        assert "politics in tonight" in build_off_table_starters(None)[0]

    def test_items_preserve_order(self):
        items = build_off_table_items(
            [
                OffTableRecipe(id="1", title="Beef Steak", cuisine="Argentine"),
                OffTableRecipe(id="2", title="Shakshuka"),
            ]
        )

        assert [item.id for item in items] == ["1", "2"]
        assert items[0].off_title == "Beef Steak of Questionable Topics"
        assert items[1].fact == OFF_TABLE_FACT
