"""Data models and schemas for the Supper Club service.

Defines Pydantic models for request/response validation and domain objects.
All models use Pydantic v2 for strict validation and OpenAPI schema generation.
"""

import re
from enum import Enum
from typing import Annotated, Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DietFlag(str, Enum):
    """Closed set of dietary labels a recipe can carry or a search can require."""

    VEGETARIAN = "Vegetarian"
    VEGAN = "Vegan"
    GLUTEN_FREE = "Gluten-Free"
    DAIRY_FREE = "Dairy-Free"
    NUT_FREE = "Nut-Free"
    HALAL = "Halal"
    KOSHER = "Kosher"
    PESCATARIAN = "Pescatarian"

    @classmethod
    def parse(cls, value: Any) -> Optional["DietFlag"]:
        """Case-insensitive lookup. Returns None for anything outside the enum."""
        if isinstance(value, DietFlag):
            return value
        if not isinstance(value, str):
            return None
        wanted = value.strip().lower()
        for flag in cls:
            if flag.value.lower() == wanted:
                return flag
        return None


class Vibe(str, Enum):
    """Social context of a meal; shapes the tone of generated conversation."""

    FAMILY = "Family"
    FRIENDS = "Friends"
    COLLEAGUES = "Colleagues"
    DATE = "Date"
    KIDS = "Kids"

    @classmethod
    def parse(cls, value: Any) -> Optional["Vibe"]:
        if isinstance(value, Vibe):
            return value
        if not isinstance(value, str):
            return None
        wanted = value.strip().lower()
        for vibe in cls:
            if vibe.value.lower() == wanted:
                return vibe
        return None


def _coerce_diet_flags(values: Any) -> list:
    """Keep known diet flags (case-insensitive), drop the rest, preserve order without duplicates."""
    if not values:
        return []
    if isinstance(values, str):
        values = [values]
    flags: list[DietFlag] = []
    for value in values:
        flag = DietFlag.parse(value)
        if flag is not None and flag not in flags:
            flags.append(flag)
    return flags


def clean_string_list(values: Any) -> list[str]:
    """Trim, drop empties and de-duplicate (first occurrence wins).

    Accepts a list of strings or a single string; every string may itself be
    comma-separated (``?diet=Vegan&diet=Gluten-Free`` equals ``?diet=Vegan,Gluten-Free``).
    """
    if values is None:
        return []
    if isinstance(values, str):
        values = [values]
    cleaned: list[str] = []
    for value in values:
        if not isinstance(value, str):
            continue
        for part in value.split(","):
            part = part.strip()
            if part and part not in cleaned:
                cleaned.append(part)
    return cleaned


# ============================================================================
# Recipes
# ============================================================================


class RecipeBase(BaseModel):
    """Fields shared by full recipes and search summaries."""

    model_config = ConfigDict(str_strip_whitespace=True)

    id: Annotated[str, Field(min_length=1, description="Identifier, unique per source")]
    title: Annotated[str, Field(min_length=1, description="Recipe name")]
    description: Annotated[str, Field("", description="Plain-text description (markup stripped)")]
    image: Annotated[str, Field("/placeholder.jpg", description="Image URL or placeholder path")]
    time_minutes: Annotated[int, Field(30, ge=0, description="Preparation time in minutes")]
    cuisine: Annotated[str, Field("Global", description="Free-form cuisine label")]
    diet_flags: Annotated[List[DietFlag], Field(default_factory=list, description="Dietary labels")]
    tags: Annotated[List[str], Field(default_factory=list, description="Dish or meal type tags")]

    @field_validator("diet_flags", mode="before")
    @classmethod
    def normalize_diet_flags(cls, v: Any) -> list:
        return _coerce_diet_flags(v)


class RecipeSummary(RecipeBase):
    """Recipe card data returned by search. Always projected from a Recipe."""

    match_score: Annotated[
        Optional[float], Field(None, ge=0.0, le=1.0, description="Relevance score for the current search")
    ]


class Recipe(RecipeBase):
    """Canonical recipe with ingredient lines and instructions."""

    ingredients: Annotated[List[str], Field(default_factory=list, description="Ingredient lines")]
    steps: Annotated[List[str], Field(default_factory=list, description="Ordered instructions")]

    def to_summary(self, match_score: Optional[float] = None) -> RecipeSummary:
        """Project to a summary, dropping ingredients and steps."""
        data = self.model_dump(exclude={"ingredients", "steps"})
        return RecipeSummary(**data, match_score=match_score)

    def searchable_text(self) -> str:
        """Lowercase haystack used by exclusion matching and free-text filtering."""
        return " ".join(
            [
                self.title,
                self.description,
                self.cuisine,
                " ".join(self.tags),
                " ".join(self.ingredients),
            ]
        ).lower()


class ScoredRecipe(BaseModel):
    """A search candidate: full recipe plus its match score for the current filters."""

    recipe: Recipe
    score: Annotated[float, Field(ge=0.0, le=1.0)]


class SearchQuery(BaseModel):
    """Validated search input.

    List inputs accept repeated values or comma-separated strings; they are
    trimmed and de-duplicated before their length bounds are checked.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    q: Annotated[Optional[str], Field(None, max_length=80, description="Free-text query (max 80 chars)")]
    diet: Annotated[List[str], Field(default_factory=list, max_length=8, description="Diet filters (max 8)")]
    have: Annotated[List[str], Field(default_factory=list, max_length=30, description="Pantry items (max 30)")]
    exclude: Annotated[
        List[str], Field(default_factory=list, max_length=30, description="Ingredients to avoid (max 30)")
    ]
    people: Annotated[int, Field(2, ge=1, le=16, description="Party size (1-16)")]

    @field_validator("q", mode="before")
    @classmethod
    def normalize_query(cls, v: Any) -> Optional[str]:
        if not isinstance(v, str):
            return None
        v = v.strip()
        return v or None

    @field_validator("diet", "have", "exclude", mode="before")
    @classmethod
    def clean_lists(cls, v: Any) -> list[str]:
        return clean_string_list(v)


class SearchParams(BaseModel):
    """Search inputs after normalization, as handed to a recipe source.

    diets are canonical flags; have and exclude are lowercased.
    """

    q: Optional[str] = None
    diets: List[DietFlag] = Field(default_factory=list)
    have: List[str] = Field(default_factory=list)
    exclude: List[str] = Field(default_factory=list)
    people: int = 2


class RecipeSearchResponse(BaseModel):
    results: List[RecipeSummary]


class RecipeDetailResponse(BaseModel):
    recipe: Recipe


class ErrorResponse(BaseModel):
    error: str
    hint: Optional[str] = None


# ============================================================================
# Conversation topics
# ============================================================================

HINT_PATTERN = re.compile(r"^[a-zA-Z0-9\s,'-]+$")
_EDGE_PUNCTUATION = re.compile(r"^[,.;:!?-]+|[,.;:!?-]+$")


def clean_hint(value: Any) -> Optional[str]:
    """Normalize the optional dietary/ingredient hint.

    Strips whitespace and leading/trailing punctuation; empty becomes None.
    Raises ValueError when the result is too long or uses disallowed characters.
    """
    if not isinstance(value, str):
        return None
    stripped = _EDGE_PUNCTUATION.sub("", value.strip()).strip()
    if not stripped:
        return None
    if len(stripped) > 60:
        raise ValueError("Keep it under 60 characters.")
    if not HINT_PATTERN.match(stripped):
        raise ValueError("Use letters, numbers, spaces, commas, apostrophes, or hyphens.")
    return stripped


class RecipeContext(BaseModel):
    """Minimal recipe context a topic request can be tied to."""

    model_config = ConfigDict(str_strip_whitespace=True)

    id: Annotated[Optional[str], Field(None, max_length=200)]
    title: Annotated[str, Field(min_length=1, max_length=120)]
    description: Annotated[str, Field("", max_length=1000)]
    cuisine: Annotated[str, Field("Global", min_length=1, max_length=60)]
    diet_flags: Annotated[List[DietFlag], Field(default_factory=list)]
    tags: Annotated[List[str], Field(default_factory=list, max_length=30)]
    ingredients: Annotated[List[str], Field(default_factory=list, max_length=60)]

    @field_validator("diet_flags", mode="before")
    @classmethod
    def normalize_diet_flags(cls, v: Any) -> list:
        return _coerce_diet_flags(v)


class TopicRequest(BaseModel):
    """Topic generation request, optionally bound to a recipe.

    vibe is free text (1-30 chars); values matching a Vibe get tailored guidance,
    anything else is treated as a theme such as a cuisine name.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    recipe: Annotated[Optional[RecipeContext], Field(None, description="Recipe the talk should relate to")]
    vibe: Annotated[str, Field("Friends", min_length=1, max_length=30, description="Vibe or theme label")]
    people: Annotated[int, Field(2, ge=1, le=16, description="Party size (1-16)")]
    dietary_or_ingredient: Annotated[
        Optional[str], Field(None, description="Optional dietary or ingredient hint (max 60 chars)")
    ]
    previous_hashes: Annotated[
        List[str], Field(default_factory=list, max_length=24, description="Hashes of starters already shown")
    ]
    preview: Annotated[bool, Field(False, description="Return a 2-starter teaser instead of 3")]

    @field_validator("dietary_or_ingredient", mode="before")
    @classmethod
    def validate_hint(cls, v: Any) -> Optional[str]:
        return clean_hint(v)

    @field_validator("previous_hashes", mode="before")
    @classmethod
    def clean_hashes(cls, v: Any) -> list[str]:
        hashes = clean_string_list(v)
        for value in hashes:
            if len(value) > 64:
                raise ValueError("Hashes must be at most 64 characters")
        return hashes

    @property
    def known_vibe(self) -> Optional[Vibe]:
        return Vibe.parse(self.vibe)

    @property
    def theme(self) -> str:
        """What the conversation is about: the dish if given, else the vibe/theme label."""
        if self.recipe is not None:
            return self.recipe.title
        return self.vibe


class QuickTopicRequest(BaseModel):
    """Strict topic-only request: closed vibe set and 2-12 guests, no extra fields."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    vibe: Vibe
    people: Annotated[int, Field(strict=True, ge=2, le=12)]
    dietary_or_ingredient: Optional[str] = None

    @field_validator("people", mode="before")
    @classmethod
    def reject_non_integers(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("Whole numbers only.")
        return v

    @field_validator("dietary_or_ingredient", mode="before")
    @classmethod
    def validate_hint(cls, v: Any) -> Optional[str]:
        return clean_hint(v)

    def to_topic_request(self) -> TopicRequest:
        return TopicRequest(
            vibe=self.vibe.value,
            people=self.people,
            dietary_or_ingredient=self.dietary_or_ingredient,
        )


class TopicsPayload(BaseModel):
    """Exact shape required from the generation service: three starters and one fact."""

    starters: Annotated[List[str], Field(min_length=3, max_length=3)]
    fact: Annotated[str, Field(min_length=1)]

    @field_validator("starters")
    @classmethod
    def starters_not_blank(cls, v: list[str]) -> list[str]:
        if any(not isinstance(item, str) or not item.strip() for item in v):
            raise ValueError("Starters must be non-empty strings")
        return v

    @field_validator("fact")
    @classmethod
    def fact_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Fact must be a non-empty string")
        return v


class TopicsResponse(BaseModel):
    """Topics returned to the caller."""

    starters: List[str]
    fact: str
    hashes: List[str] = Field(default_factory=list)
    source: Literal["model", "cache", "fallback"] = "model"


# ============================================================================
# Substitutions and off-the-table mode
# ============================================================================


class SubstitutionRecipe(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Annotated[str, Field(min_length=1, max_length=120)]
    cuisine: Annotated[str, Field(min_length=1, max_length=60)]
    steps: Annotated[List[str], Field(min_length=1, max_length=30)]


class SubstitutionRequest(BaseModel):
    """Swap one ingredient for another within a recipe."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    from_ingredient: Annotated[str, Field(alias="from", min_length=1, max_length=60)]
    to_ingredient: Annotated[str, Field(alias="to", min_length=1, max_length=60)]
    recipe: SubstitutionRecipe


class SubstitutionResponse(BaseModel):
    delta: str


class SubstitutionOption(BaseModel):
    option: str
    hint: Optional[str] = None


class SubstitutionOptionsResponse(BaseModel):
    options: List[SubstitutionOption]


class OffTableRecipe(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Annotated[str, Field(min_length=1, max_length=200)]
    title: Annotated[str, Field("", max_length=200)]
    cuisine: Annotated[Optional[str], Field(None, max_length=60)]


class OffTableRequest(BaseModel):
    recipes: Annotated[List[OffTableRecipe], Field(default_factory=list, max_length=50)]


class OffTableItem(BaseModel):
    id: str
    off_title: str
    starters: List[str]
    fact: str


class OffTableResponse(BaseModel):
    items: List[OffTableItem]
