from datetime import datetime, timezone
from enum import Enum
from typing import List
from pydantic import BaseModel, Field, field_validator


class InteractionType(str, Enum):
    VIEW = "view"
    PURCHASE = "purchase"
    FAVORITE = "favorite"


class Interaction(BaseModel):
    user_id: str
    listing_id: str
    interaction_type: InteractionType
    created_at: datetime
    model_config = {"frozen": True}

    @field_validator("created_at")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)


class PreferredPriceRange(BaseModel):
    min: float = 0
    max: float = 1000


class UserPreferences(BaseModel):
    categories: List[str] = []
    price_range: PreferredPriceRange = Field(default_factory=PreferredPriceRange)
    styles: List[str] = []
    colors: List[str] = []
    materials: List[str] = []


class UserBehavior(BaseModel):
    viewed_items: List[str] = []
    purchased_items: List[str] = []
    search_history: List[str] = []
    favorite_categories: List[str] = []
    avg_session_duration: float = 0
    click_through_rate: float = 0


class UserProfile(BaseModel):
    """
    Derived from one snapshot of the user's history. Never merged
    incrementally: a rebuild replaces the whole profile.
    """
    user_id: str
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    behavior: UserBehavior = Field(default_factory=UserBehavior)
