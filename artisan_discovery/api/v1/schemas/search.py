# artisan_discovery/api/v1/schemas/search.py
from pydantic import BaseModel, Field


class ClickIn(BaseModel):
    result_id: str
    position: int = Field(ge=0)


class AcceptedOut(BaseModel):
    ok: bool = True
