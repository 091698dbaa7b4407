import pytest

from config import NormalizationConfig, Settings


def make_settings(**overrides) -> Settings:
    values = dict(
        gemini_api_key="",
        model_name="gemini-1.5-flash",
        temperature=0.3,
        airtable_token="tok",
        airtable_base_id="appTEST",
        airtable_api_url="https://airtable.test/v0",
        airtable_timeout=5.0,
        cors_origins=("http://localhost:3000",),
        history_limit=10,
        fallback_on_error=True,
        log_level="INFO",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def config():
    return NormalizationConfig()


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def raw_collections():
    return {
        "dishes": [
            {"id": "rec1", "Naziv jela": "Crni rižot", "Opis": "Rižot sa sipom", "Cijena": 14,
             "Kategorija": "Glavna jela", "PairingTagovi": ["riba", "bijelo"]},
            {"id": "rec2", "Naziv": "Pašticada", "Cijena": "18,50", "Kategorija": "Glavna jela"},
        ],
        "pizzas": [
            {"id": "rec3", "Naziv pizze": "Margherita", "Cijena": 9},
            {"id": "rec4", "Naziv pizze": "Capricciosa", "Cijena": "11 €"},
        ],
        "desserts": [
            {"id": "rec5", "Naziv deserta": "Rožata", "Cijena": 5},
        ],
        "wines": [
            {"id": "rec6", "Naziv vina": "Pošip", "Sorta": "Pošip", "Čaša": "4", "Butelja": "18"},
            {"id": "rec7", "Naziv vina": "Plavac Mali", "Cijena": 30},
        ],
        "daily": [
            {"id": "rec8", "Jelo": "Brudet", "Cijena": 16, "Napomena": "Samo danas"},
        ],
        "faq": [
            {"id": "rec9", "Pitanje": "Primate li kartice?", "Odgovor": "Da."},
        ],
    }


@pytest.fixture
def venue_record():
    return {"slug": "konoba-more", "Naziv": "Konoba More", "Phone": "+385 21 000 000",
            "Adresa": "Obala 1, Split", "Website": "https://konobamore.com"}
