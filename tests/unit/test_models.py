"""Unit tests for Pydantic models validation."""

import pytest
from pydantic import ValidationError

from src.models.models import (
    DietFlag,
    QuickTopicRequest,
    Recipe,
    SearchQuery,
    SubstitutionRequest,
    TopicRequest,
    TopicsPayload,
    Vibe,
    clean_hint,
    clean_string_list,
)


class TestDietFlag:
    """Test DietFlag parsing."""

    def test_parse_is_case_insensitive(self):
        assert DietFlag.parse("  gluten-free ") == DietFlag.GLUTEN_FREE
        assert DietFlag.parse("VEGAN") == DietFlag.VEGAN

    def test_parse_unknown_returns_none(self):
        assert DietFlag.parse("paleo") is None
        assert DietFlag.parse(42) is None


class TestRecipe:
    """Test Recipe model and its summary projection."""

    def test_defaults_applied(self):
        recipe = Recipe(id="r1", title="Soup")

        assert recipe.image == "/placeholder.jpg"
        assert recipe.time_minutes == 30
        assert recipe.cuisine == "Global"
        assert recipe.diet_flags == []

    def test_unknown_diet_flags_dropped_and_deduplicated(self):
        recipe = Recipe(id="r1", title="Soup", diet_flags=["vegan", "Paleo", "Vegan", "kosher"])
        assert recipe.diet_flags == [DietFlag.VEGAN, DietFlag.KOSHER]

    def test_negative_time_rejected(self):
        with pytest.raises(ValidationError):
            Recipe(id="r1", title="Soup", time_minutes=-1)

    def test_to_summary_drops_ingredients_and_steps(self):
        recipe = Recipe(id="r1", title="Soup", ingredients=["water"], steps=["boil"])
        summary = recipe.to_summary(match_score=0.5)

        assert summary.id == "r1"
        assert summary.match_score == 0.5
        assert "ingredients" not in summary.model_dump()
        assert "steps" not in summary.model_dump()

    def test_searchable_text_is_lowercase_concatenation(self):
        recipe = Recipe(
            id="r1",
            title="Green Curry",
            description="Spicy",
            cuisine="Thai",
            tags=["Dinner"],
            ingredients=["Coconut Milk"],
        )
        text = recipe.searchable_text()

        for part in ("green curry", "spicy", "thai", "dinner", "coconut milk"):
            assert part in text


class TestSearchQuery:
    """Test search input validation and list cleanup."""

    def test_empty_query_becomes_none(self):
        assert SearchQuery(q="   ").q is None

    def test_query_max_length(self):
        SearchQuery(q="a" * 80)
        with pytest.raises(ValidationError):
            SearchQuery(q="a" * 81)

    def test_lists_are_split_trimmed_and_deduplicated(self):
        query = SearchQuery(have=["tofu, soy sauce", " tofu ", ""], diet="Vegan,Gluten-Free")

        assert query.have == ["tofu", "soy sauce"]
        assert query.diet == ["Vegan", "Gluten-Free"]

    def test_list_bounds_checked_after_cleanup(self):
        SearchQuery(have=["salt"] * 50)  # duplicates collapse to one item
        with pytest.raises(ValidationError):
            SearchQuery(have=[f"item{i}" for i in range(31)])
        with pytest.raises(ValidationError):
            SearchQuery(diet=[f"diet{i}" for i in range(9)])

    @pytest.mark.parametrize("people", [0, 17])
    def test_people_out_of_range(self, people):
        with pytest.raises(ValidationError):
            SearchQuery(people=people)

    def test_clean_string_list_ignores_non_strings(self):
        assert clean_string_list(["a", 1, None, "b"]) == ["a", "b"]
        assert clean_string_list(None) == []


class TestHint:
    """Test dietary/ingredient hint normalization."""

    def test_edge_punctuation_stripped(self):
        assert clean_hint("  ,no peanuts!  ") == "no peanuts"

    def test_punctuation_only_becomes_none(self):
        assert clean_hint("...") is None
        assert clean_hint(None) is None

    def test_too_long_rejected(self):
        with pytest.raises(ValueError, match="60"):
            clean_hint("a" * 61)

    def test_disallowed_characters_rejected(self):
        with pytest.raises(ValueError):
            clean_hint("<script>")


class TestTopicRequest:
    """Test the recipe-bound topic request."""

    def test_defaults(self):
        request = TopicRequest()

        assert request.vibe == "Friends"
        assert request.people == 2
        assert request.known_vibe == Vibe.FRIENDS
        assert request.theme == "Friends"

    def test_free_text_theme(self):
        request = TopicRequest(vibe="Italian")

        assert request.known_vibe is None
        assert request.theme == "Italian"

    def test_recipe_title_is_theme(self):
        request = TopicRequest(recipe={"title": "Shakshuka", "cuisine": "Middle Eastern"}, vibe="Family")
        assert request.theme == "Shakshuka"

    @pytest.mark.parametrize("people", [1, 16])
    def test_people_bounds_accepted(self, people):
        assert TopicRequest(people=people).people == people

    @pytest.mark.parametrize("vibe", ["", "x" * 31])
    def test_vibe_length_rejected(self, vibe):
        with pytest.raises(ValidationError):
            TopicRequest(vibe=vibe)

    def test_previous_hashes_limits(self):
        with pytest.raises(ValidationError):
            TopicRequest(previous_hashes=["h" * 65])
        with pytest.raises(ValidationError):
            TopicRequest(previous_hashes=[f"h{i}" for i in range(25)])


class TestQuickTopicRequest:
    """Test the strict topic-only request."""

    @pytest.mark.parametrize("people", [2, 12])
    def test_accepts_party_size_bounds(self, people):
        assert QuickTopicRequest(vibe="Family", people=people).people == people

    @pytest.mark.parametrize("people", [1, 13])
    def test_rejects_party_size_outside_bounds(self, people):
        with pytest.raises(ValidationError):
            QuickTopicRequest(vibe="Family", people=people)

    @pytest.mark.parametrize("people", [2.5, "4", True])
    def test_rejects_non_integer_party_size(self, people):
        with pytest.raises(ValidationError):
            QuickTopicRequest(vibe="Family", people=people)

    def test_rejects_unknown_vibe(self):
        with pytest.raises(ValidationError):
            QuickTopicRequest(vibe="Italian", people=4)

    def test_rejects_extra_fields(self):
        with pytest.raises(ValidationError):
            QuickTopicRequest(vibe="Kids", people=4, surprise=True)

    def test_to_topic_request(self):
        request = QuickTopicRequest(vibe="Kids", people=4, dietary_or_ingredient="nut free.").to_topic_request()

        assert request.vibe == "Kids"
        assert request.people == 4
        assert request.dietary_or_ingredient == "nut free"


class TestTopicsPayload:
    """Test the strict generated-payload shape."""

    def test_valid_payload(self):
        payload = TopicsPayload(starters=["a", "b", "c"], fact="d")
        assert len(payload.starters) == 3

    @pytest.mark.parametrize("starters", [["a", "b"], ["a", "b", "c", "d"], ["a", " ", "c"]])
    def test_invalid_starters(self, starters):
        with pytest.raises(ValidationError):
            TopicsPayload(starters=starters, fact="d")

    def test_blank_fact_rejected(self):
        with pytest.raises(ValidationError):
            TopicsPayload(starters=["a", "b", "c"], fact="  ")


class TestSubstitutionRequest:
    """Test substitution request aliases and bounds."""

    def test_from_and_to_aliases(self):
        request = SubstitutionRequest.model_validate(
            {"from": "butter", "to": "olive oil", "recipe": {"title": "Risotto", "cuisine": "Italian", "steps": ["Stir"]}}
        )
        assert request.from_ingredient == "butter"
        assert request.to_ingredient == "olive oil"

    def test_steps_required(self):
        with pytest.raises(ValidationError):
            SubstitutionRequest.model_validate(
                {"from": "butter", "to": "oil", "recipe": {"title": "Risotto", "cuisine": "Italian", "steps": []}}
            )
