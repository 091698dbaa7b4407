import math
import re
import unicodedata
from typing import Any, Optional, Sequence, Union

from config import TIER_ORDER, NormalizationConfig
from models import PriceTiers, Record

Number = Union[int, float]

PLAIN_NUMBER_RE = re.compile(r"^-?\d+(?:[.,]\d+)?$")


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return not str(value).strip()


def resolve(record: Optional[Record], candidates: Sequence[str]) -> Any:
    """
    Returns the first non-blank value for the candidate field names.
    Exact names are tried first, in candidate order. Failing that, each record
    key (in its natural order) is tested case-insensitively for containing any
    candidate.
    """
    if not candidates:
        raise ValueError("candidates must not be empty")
    if not record:
        return None

    for name in candidates:
        if name in record and not is_blank(record[name]):
            return record[name]

    lowered = [c.lower() for c in candidates]
    for key, value in record.items():
        if is_blank(value):
            continue
        key_lower = str(key).lower()
        for cand in lowered:
            if cand in key_lower:
                return value
    return None


def fold(text: str) -> str:
    # Lowercase and drop diacritics: "Čaša" -> "casa"
    decomposed = unicodedata.normalize("NFD", str(text).lower())
    return "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class PriceNormalizer:
    def __init__(self, config: NormalizationConfig):
        self.symbol = config.currency_symbol
        self.code = config.currency_code.lower()

    def to_canonical_number(self, raw: Any) -> Optional[Number]:
        if raw is None:
            return None
        if _is_number(raw):
            return raw if math.isfinite(raw) else None
        if not isinstance(raw, str):
            return None

        text = raw.strip()
        negative = text.startswith("-")
        cleaned = re.sub(r"[^\d,.]", "", text).replace(",", ".")
        if not cleaned:
            return None
        try:
            value = float(("-" if negative else "") + cleaned)
        except ValueError:
            return None
        return value if math.isfinite(value) else None

    def format_number(self, value: Number) -> str:
        return f"{value:.2f} {self.symbol}"

    def has_currency(self, text: str) -> bool:
        return self.symbol in text or self.code in text.lower()

    def to_display(self, raw: Any) -> Optional[str]:
        if _is_number(raw):
            return self.format_number(raw) if math.isfinite(raw) else None
        if not isinstance(raw, str) or not raw.strip():
            return None

        text = raw.strip()
        if self.has_currency(text):
            return raw
        if PLAIN_NUMBER_RE.match(text):
            value = self.to_canonical_number(text)
            if value is not None:
                return self.format_number(value)
        return f"{text} {self.symbol}"


class PriceTierAggregator:
    def __init__(self, config: NormalizationConfig, prices: Optional[PriceNormalizer] = None):
        self.config = config
        self.prices = prices or PriceNormalizer(config)
        self.keywords = [(tier, tuple(fold(k) for k in words)) for tier, words in config.tier_keywords]

    def classify(self, key: str) -> Optional[str]:
        folded = fold(key)
        for tier, words in self.keywords:
            if any(w in folded for w in words):
                return tier
        return None

    def build_price_tiers(self, record: Optional[Record]) -> PriceTiers:
        raw = {}
        for key, value in (record or {}).items():
            if is_blank(value):
                continue
            tier = self.classify(key)
            if tier and tier not in raw:
                raw[tier] = value

        tiers = {tier: self.prices.to_display(raw.get(tier)) for tier in TIER_ORDER}

        parts = [
            f"{self.config.tier_labels.get(tier, tier)}: {tiers[tier]}"
            for tier in TIER_ORDER
            if tiers[tier] is not None
        ]
        summary = self.config.summary_separator.join(parts) if parts else None
        primary = tiers["by_bottle"] or tiers["by_glass"]
        return PriceTiers(tiers=tiers, summary=summary, primary=primary)
