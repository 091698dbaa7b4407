from config import NormalizationConfig
from models import Context


class FallbackResponder:
    """Deterministic answer built from the normalized context, used when no model is available."""

    def __init__(self, config: NormalizationConfig):
        self.config = config

    def pick_category(self, user_message: str) -> str:
        text = (user_message or "").lower()
        for category, keywords in self.config.fallback_keywords:
            if any(k in text for k in keywords):
                return category
        return self.config.fallback_default

    def build_fallback(self, user_message: str, context: Context) -> str:
        category = self.pick_category(user_message)
        label = self.config.fallback_labels.get(category, category.capitalize())

        names = [item.name for item in context.collection(category) if item.name]
        lines = [f"{label} on our menu:"]
        if names:
            lines.extend(f"• {name}" for name in names[: self.config.fallback_max_items])
        else:
            lines.append(self.config.fallback_empty_text)
        lines.append("")
        lines.append(self.config.fallback_disclaimer)
        return "\n".join(lines)
