from typing import Any, Dict, List, Mapping, Optional, Sequence

from config import NormalizationConfig
from models import Context, FaqEntry, MenuItem, Record, VenueProfile
from normalize import PriceNormalizer, PriceTierAggregator, is_blank, resolve

MENU_CATEGORIES = ("dishes", "pizzas", "desserts", "wines", "daily")


def _text(value: Any) -> Optional[str]:
    if is_blank(value):
        return None
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v).strip() for v in value if not is_blank(v))
    return str(value).strip()


def _tags(value: Any) -> Optional[List[str]]:
    if is_blank(value):
        return None
    if isinstance(value, (list, tuple)):
        items = [str(v).strip() for v in value if not is_blank(v)]
    else:
        items = [part.strip() for part in str(value).split(",") if part.strip()]
    return items or None


class ContextAssembler:
    """Turns raw per-category record collections into one normalized Context."""

    def __init__(self, config: NormalizationConfig):
        self.config = config
        self.prices = PriceNormalizer(config)
        self.tiers = PriceTierAggregator(config, self.prices)

    def _field(self, category: str, attribute: str, record: Record) -> Any:
        candidates = self.config.fields.get(category, {}).get(attribute)
        if not candidates:
            return None
        return resolve(record, candidates)

    def normalize_item(self, category: str, record: Record) -> MenuItem:
        item = MenuItem(
            name=_text(self._field(category, "name", record)),
            description=_text(self._field(category, "description", record)),
            price=self.prices.to_display(self._field(category, "price", record)),
            category=_text(self._field(category, "category", record)),
            subcategory=_text(self._field(category, "subcategory", record)),
            tags=_tags(self._field(category, "tags", record)),
            variety=_text(self._field(category, "variety", record)),
            note=_text(self._field(category, "note", record)),
        )
        if category == "wines":
            tiers = self.tiers.build_price_tiers(record)
            item.price_tiers = tiers.tiers
            item.price_summary = tiers.summary
            if tiers.primary is not None:
                item.price = tiers.primary
        return item

    def normalize_faq(self, record: Record) -> FaqEntry:
        return FaqEntry(
            question=_text(self._field("faq", "question", record)),
            answer=_text(self._field("faq", "answer", record)),
        )

    def normalize_venue(self, record: Optional[Record]) -> Optional[VenueProfile]:
        if not record:
            return None
        schema = self.config.fields.get("venue", {})
        values: Dict[str, Any] = {attr: _text(self._field("venue", attr, record)) for attr in schema}

        known = set(self.config.venue_skip_fields)
        for candidates in schema.values():
            known.update(candidates)
        values["extra"] = {k: v for k, v in record.items() if k not in known and not is_blank(v)}
        return VenueProfile(**values)

    def assemble(
        self,
        venue: Optional[Record],
        collections: Mapping[str, Optional[Sequence[Record]]],
    ) -> Context:
        data: Dict[str, Any] = {"restaurant": self.normalize_venue(venue)}
        for category in MENU_CATEGORIES:
            records = collections.get(category) or []
            data[category] = [self.normalize_item(category, r) for r in records]
        data["faq"] = [self.normalize_faq(r) for r in (collections.get("faq") or [])]
        return Context(**data)
