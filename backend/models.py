from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional

# Untyped upstream row: field name -> value, as returned by the table store.
Record = Dict[str, Any]


class HistoryTurn(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class AskRequest(BaseModel):
    # Presence is checked by the assistant so a missing field is a 400, not a 422.
    slug: Optional[str] = None
    message: Optional[str] = None
    history: List[HistoryTurn] = []


class AskResponse(BaseModel):
    ok: bool = True
    answer: str
    source: Literal["generated", "fallback"]


class PriceTiers(BaseModel):
    tiers: Dict[str, Optional[str]]
    summary: Optional[str] = None
    primary: Optional[str] = None


class MenuItem(BaseModel):
    """Normalized shape shared by dishes, pizzas, desserts, wines and daily specials."""
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    tags: Optional[List[str]] = None
    variety: Optional[str] = None
    note: Optional[str] = None
    price_tiers: Optional[Dict[str, Optional[str]]] = None
    price_summary: Optional[str] = None


class FaqEntry(BaseModel):
    question: Optional[str] = None
    answer: Optional[str] = None


class VenueProfile(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    web: Optional[str] = None
    hours: Optional[str] = None
    parking: Optional[str] = None
    # Remaining upstream columns (payment, pets, reservations, ...) keyed by their own names.
    extra: Dict[str, Any] = Field(default_factory=dict)


class Context(BaseModel):
    restaurant: Optional[VenueProfile] = None
    dishes: List[MenuItem] = Field(default_factory=list)
    pizzas: List[MenuItem] = Field(default_factory=list)
    desserts: List[MenuItem] = Field(default_factory=list)
    wines: List[MenuItem] = Field(default_factory=list)
    daily: List[MenuItem] = Field(default_factory=list)
    faq: List[FaqEntry] = Field(default_factory=list)

    def collection(self, category: str) -> List[MenuItem]:
        return getattr(self, category, None) or []
