# Constants for query processing, ranking and recommendation blending.

# ---- Query processing -------------------------------------------------------
PRICE_PATTERN = r"\$?(\d+(?:\.\d{2})?)\s*(?:to|-)?\s*\$?(\d+(?:\.\d{2})?)?"

# Entity vocabularies and the fixed confidence each one yields
COLOR_TERMS = ("red", "blue", "green", "yellow", "black", "white", "brown", "pink", "purple", "orange")
MATERIAL_TERMS = ("wood", "metal", "ceramic", "glass", "fabric", "leather", "plastic", "stone")
SIZE_TERMS = ("small", "medium", "large", "tiny", "huge", "mini", "big")

PRICE_CONFIDENCE = 0.9
COLOR_CONFIDENCE = 0.8
MATERIAL_CONFIDENCE = 0.8
SIZE_CONFIDENCE = 0.7

# Ordered: first matching rule wins, otherwise "browse"
INTENT_RULES = (
    ("purchase", ("buy", "purchase", "order")),
    ("gift", ("gift", "present")),
    ("custom", ("custom", "personalized", "made to order")),
    ("budget", ("cheap", "affordable", "budget")),
    ("premium", ("premium", "luxury", "high quality")),
)

STOP_WORDS = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "is", "are", "was", "were",
})

SYNONYMS = {
    "handmade": ["artisan", "crafted", "handcrafted", "artisanal", "homemade"],
    "jewelry": ["jewellery", "accessories", "ornaments"],
    "art": ["artwork", "painting", "drawing", "sculpture"],
    "pottery": ["ceramics", "clay", "earthenware"],
    "wood": ["wooden", "timber", "lumber"],
    "beautiful": ["gorgeous", "stunning", "lovely", "attractive"],
    "unique": ["one-of-a-kind", "special", "distinctive", "original"],
    "vintage": ["retro", "antique", "classic", "old-fashioned"],
}

# ---- Ranking ----------------------------------------------------------------
RELEVANCE_WEIGHT = 0.5
POPULARITY_WEIGHT = 0.3
QUALITY_WEIGHT = 0.2
MAX_SCORE = 100

SUGGESTION_QUERY_LIMIT = 5
SUGGESTION_CATEGORY_LIMIT = 3
MAX_SUGGESTIONS = 8

# ---- User profiles ----------------------------------------------------------
PROFILE_INTERACTION_LIMIT = 100
PROFILE_SEARCH_LIMIT = 50
PROFILE_TOP_CATEGORIES = 5
PROFILE_TOP_TAGS = 10

STYLE_TAGS = frozenset({"vintage", "modern", "rustic", "minimalist", "bohemian"})
PROFILE_COLOR_TAGS = frozenset({"red", "blue", "green", "yellow", "black", "white", "brown", "pink"})
PROFILE_MATERIAL_TAGS = frozenset({"wood", "metal", "ceramic", "glass", "fabric", "leather"})

# ---- Recommendation blending -------------------------------------------------
# Bucket sizing base per context when the request does not carry a `limit`
DEFAULT_LIMITS = {
    "homepage": 12,
    "product_page": 6,
    "search_results": 4,
    "cart": 4,
    "checkout": 3,
}
# Response cap when the request does not carry a `limit`
DEFAULT_RESULT_LIMIT = 10

# Bucket shares of `limit` (each rounded up)
HOMEPAGE_KNOWN_WEIGHTS = {
    "category_affinity": 0.4,
    "collaborative": 0.3,
    "trending": 0.2,
    "recently_viewed_similar": 0.1,
}
HOMEPAGE_ANONYMOUS_WEIGHTS = {
    "trending": 0.6,
    "popular_by_category": 0.4,
}
PRODUCT_PAGE_WEIGHTS = {
    "similar_items": 0.5,
    "frequently_bought_together": 0.3,
    "same_seller": 0.2,
}

CATEGORY_AFFINITY_CATEGORIES = 3
SIMILAR_USERS_LIMIT = 20
SIMILAR_USERS_USED = 5

# Content similarity weights
SIMILARITY_CATEGORY_WEIGHT = 0.4
SIMILARITY_TAG_WEIGHT = 0.4
SIMILARITY_PRICE_WEIGHT = 0.2

# Score bands per strategy: (base, spread); first item gets base + spread
TRENDING_SCORE_BAND = (90.0, 10.0)
CATEGORY_SCORE_BAND = (80.0, 20.0)
COLLABORATIVE_SCORE_BAND = (70.0, 20.0)

TRENDING_CONFIDENCE = 0.9
CATEGORY_CONFIDENCE = 0.8
COLLABORATIVE_CONFIDENCE = 0.7
