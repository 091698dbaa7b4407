import os
from dataclasses import dataclass, field
from typing import Dict, Tuple

TIER_ORDER: Tuple[str, ...] = ("by_glass", "by_bottle", "half_bottle", "quarter_liter", "187ml")

DEFAULT_CORS_ORIGINS = (
    "https://konobamore.com",
    "https://www.konobamore.com",
    "https://pressmax.net",
    "https://ai.pressmax.net",
    "http://localhost:3000",
    "http://localhost:5173",
)


@dataclass(frozen=True)
class NormalizationConfig:
    """Read-only tables used to normalize upstream records.

    Keyword tables are ordered (tag, keywords) pairs evaluated first-match-wins.
    Field tables map an attribute name to its candidate upstream field names.
    """
    currency_symbol: str = "€"
    currency_code: str = "EUR"

    # Volume tiers precede the glass/bottle families: "Boca 0,5" is a half_bottle.
    tier_keywords: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
        ("half_bottle", ("0.5", "0,5", "half", "pola", "1/2")),
        ("quarter_liter", ("0.25", "0,25")),
        ("187ml", ("0.187", "0,187", "187ml", "187 ml")),
        ("by_glass", ("casa", "glass", "glas", "calice", "bicchiere")),
        ("by_bottle", ("butelj", "boca", "boce", "bottle", "bottiglia", "flasche", "flasa")),
    )
    tier_labels: Dict[str, str] = field(default_factory=lambda: {
        "by_glass": "by the glass",
        "by_bottle": "by the bottle",
        "half_bottle": "half bottle",
        "quarter_liter": "0.25 l",
        "187ml": "0.187 l",
    })
    summary_separator: str = " • "

    fields: Dict[str, Dict[str, Tuple[str, ...]]] = field(default_factory=lambda: {
        "dishes": {
            "name": ("Naziv jela", "Naziv", "Name"),
            "description": ("Opis", "Description"),
            "price": ("Cijena", "Price"),
            "category": ("Kategorija", "Category"),
            "subcategory": ("Podkategorija", "Subcategory"),
            "tags": ("PairingTagovi", "DijetalneOznake", "Tags"),
        },
        "pizzas": {
            "name": ("Naziv pizze", "Naziv", "Name"),
            "description": ("Opis", "Description"),
            "price": ("Cijena", "Price"),
            "category": ("Kategorija", "Category"),
            "subcategory": ("Podkategorija", "Subcategory"),
        },
        "desserts": {
            "name": ("Naziv deserta", "Naziv", "Name"),
            "description": ("Opis", "Description"),
            "price": ("Cijena", "Price"),
            "category": ("Kategorija", "Category"),
            "subcategory": ("Podkategorija", "Subcategory"),
        },
        "wines": {
            "name": ("Naziv vina", "Naziv", "Name"),
            "description": ("Opis", "Description"),
            "price": ("Cijena", "Price"),
            "category": ("Kategorija", "Category"),
            "variety": ("Sorta", "Variety", "Grape"),
        },
        "daily": {
            "name": ("Naziv", "Jelo", "Name"),
            "description": ("Opis", "Description"),
            "price": ("Cijena", "Price"),
            "note": ("Napomena", "Note"),
        },
        "faq": {
            "question": ("Pitanje", "Question"),
            "answer": ("Odgovor", "Answer"),
        },
        "venue": {
            "name": ("Naziv", "Ime restorana", "Name"),
            "phone": ("Telefon", "Phone"),
            "email": ("Email", "E-mail"),
            "address": ("Adresa", "Address"),
            "web": ("Web", "Website"),
            "hours": ("Radno vrijeme", "Opening hours", "Hours"),
            "parking": ("Parking",),
        },
    })
    # Venue columns never copied into VenueProfile.extra.
    venue_skip_fields: Tuple[str, ...] = ("id", "slug", "RestoranSlug")

    fallback_keywords: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
        ("pizzas", ("pizz",)),
        ("desserts", ("desert", "dessert", "dolce", "kolač", "kolac", "torta", "sweet", "nachspeise")),
        ("wines", ("wine", "vino", "vina", "vinsk", "wein")),
    )
    fallback_default: str = "dishes"
    fallback_labels: Dict[str, str] = field(default_factory=lambda: {
        "dishes": "Dishes",
        "pizzas": "Pizzas",
        "desserts": "Desserts",
        "wines": "Wines",
    })
    fallback_max_items: int = 8
    fallback_empty_text: str = "We have no items to show in this section right now."
    fallback_disclaimer: str = (
        "Our AI assistant is temporarily unavailable, so this is a shortened answer. "
        "Please try again a little later."
    )


@dataclass(frozen=True)
class Settings:
    gemini_api_key: str
    model_name: str
    temperature: float
    airtable_token: str
    airtable_base_id: str
    airtable_api_url: str
    airtable_timeout: float
    cors_origins: Tuple[str, ...]
    history_limit: int
    fallback_on_error: bool
    log_level: str
    normalization: NormalizationConfig = field(default_factory=NormalizationConfig)

    tables: Dict[str, str] = field(default_factory=lambda: {
        "venue": "RESTORANI",
        "dishes": "MENU",
        "pizzas": "PIZZE",
        "desserts": "DESERTI",
        "wines": "VINSKA KARTA",
        "daily": "DNEVNA PONUDA",
        "faq": "FAQ",
    })
    optional_tables: Tuple[str, ...] = ("daily",)
    view: str = "Grid view"

    @property
    def generation_configured(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def table_store_configured(self) -> bool:
        return bool(self.airtable_token and self.airtable_base_id)

    def missing_env(self) -> list:
        miss = []
        if not self.gemini_api_key:
            miss.append("GEMINI_API_KEY")
        if not self.airtable_token:
            miss.append("AIRTABLE_TOKEN")
        if not self.airtable_base_id:
            miss.append("AIRTABLE_BASE_ID")
        return miss


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_settings() -> Settings:
    """Build the process-wide Settings from environment variables."""
    cors = os.getenv("CORS_ORIGINS")
    if cors:
        origins = tuple(o.strip() for o in cors.split(",") if o.strip())
    else:
        origins = DEFAULT_CORS_ORIGINS

    normalization = NormalizationConfig(
        currency_symbol=os.getenv("CURRENCY_SYMBOL", "€"),
        currency_code=os.getenv("CURRENCY_CODE", "EUR"),
        fallback_max_items=int(os.getenv("FALLBACK_MAX_ITEMS", "8")),
    )

    return Settings(
        gemini_api_key=os.getenv("GEMINI_API_KEY", "").strip(),
        model_name=os.getenv("MODEL_NAME", "gemini-1.5-flash"),
        temperature=float(os.getenv("GEMINI_TEMPERATURE", "0.3")),
        airtable_token=os.getenv("AIRTABLE_TOKEN", "").strip(),
        airtable_base_id=os.getenv("AIRTABLE_BASE_ID", "").strip(),
        airtable_api_url=os.getenv("AIRTABLE_API_URL", "https://api.airtable.com/v0").rstrip("/"),
        airtable_timeout=float(os.getenv("AIRTABLE_TIMEOUT", "10")),
        cors_origins=origins,
        history_limit=int(os.getenv("HISTORY_LIMIT", "10")),
        fallback_on_error=_env_bool("FALLBACK_ON_ERROR", True),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        normalization=normalization,
    )
