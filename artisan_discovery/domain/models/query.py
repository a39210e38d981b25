from enum import Enum
from typing import List
from pydantic import BaseModel, Field


class Intent(str, Enum):
    PURCHASE = "purchase"
    GIFT = "gift"
    CUSTOM = "custom"
    BUDGET = "budget"
    PREMIUM = "premium"
    BROWSE = "browse"


class QueryEntity(BaseModel):
    type: str
    value: str
    confidence: float = Field(ge=0, le=1)
    model_config = {"frozen": True}


class ProcessedQuery(BaseModel):
    original_query: str
    processed_query: str = ""
    entities: List[QueryEntity] = []
    intent: Intent = Intent.BROWSE
    keywords: List[str] = []
    synonyms: List[str] = []
    model_config = {"frozen": True}

    @property
    def expanded_terms(self) -> List[str]:
        return self.processed_query.split() if self.processed_query else []
