import json
import logging
from typing import Dict, List, Optional, Sequence

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from config import Settings
from models import Context, HistoryTurn

logger = logging.getLogger(__name__)

NO_ANSWER_TEXT = "No answer."

SIMMER_SYSTEM_PROMPT = """
You are AI SIMMER, the digital assistant of the restaurant described in the CONTEXT.

Purpose:
- Help guests in a friendly, informative way.
- Answer only about the restaurant: menu, wines, desserts, daily specials, reservations,
  opening hours, payment, children, pets, parking.
- If a guest's message has a typo, do not claim it is outside your knowledge; ask briefly
  for clarification instead.

Tone:
- Warm and hospitable, short, clear and concrete answers.
- Speak as "we", not "I". No formal greetings or sign-offs.

Language:
- Detect the guest's language and answer in it (hr/en/it/de). If unsure, use Croatian.

Data:
- "restaurant" holds contact details and general info (address, phone, email, web, hours, parking).
- "dishes", "pizzas", "desserts": use names, descriptions and prices exactly as given.
  If the guest asks for "the menu", do not list everything at once: show categories and
  subcategories first, then the requested part.
- "wines": use names, varieties and prices. "price_summary" lists the price per serving
  (by the glass, by the bottle, ...). Only suggest wines that are in the CONTEXT.
- "daily": if present, show the current daily specials with prices.
- "faq": answer using these questions and answers.

Pairing:
- fish, shellfish, white meat -> white wines; red meat, stews, game -> red wines;
  desserts -> dessert wines. Prefer local and regional wines from our list.

Prices:
- Repeat prices exactly as they appear in the CONTEXT. If a price is null, say that we
  currently have no information about it.

Off-topic:
- If the question is not about the restaurant, reply that the assistant can only answer
  questions about our offer and the restaurant.
"""


class GenerationError(Exception):
    pass


class GenerationRateLimited(GenerationError):
    pass


def build_messages(
    slug: str,
    message: str,
    history: Optional[Sequence[HistoryTurn]],
    context: Context,
    history_limit: int = 10,
) -> List[Dict[str, str]]:
    """Instruction, trimmed caller history, then one user turn carrying the context."""
    messages = [{"role": "system", "content": SIMMER_SYSTEM_PROMPT}]
    turns = list(history or [])
    if history_limit > 0:
        for turn in turns[-history_limit:]:
            messages.append({"role": turn.role, "content": turn.content})

    payload = json.dumps(context.model_dump(), ensure_ascii=False)
    messages.append({
        "role": "user",
        "content": f"RESTAURANT_SLUG={slug}\nCONTEXT={payload}\n\nGUEST: {message}",
    })
    return messages


def to_gemini_contents(messages: Sequence[Dict[str, str]]):
    system_parts = []
    contents = []
    for m in messages:
        if m["role"] == "system":
            system_parts.append(m["content"])
            continue
        role = "model" if m["role"] == "assistant" else "user"
        part = {"text": m["content"]}
        # Gemini expects alternating roles; consecutive turns share one content.
        if contents and contents[-1]["role"] == role:
            contents[-1]["parts"].append(part)
        else:
            contents.append({"role": role, "parts": [part]})
    return "\n\n".join(system_parts), contents


class GenerationClient:
    def __init__(self, settings: Settings):
        if not settings.gemini_api_key:
            raise ValueError("GEMINI_API_KEY is required")
        genai.configure(api_key=settings.gemini_api_key)
        self.model_name = settings.model_name
        self.temperature = settings.temperature
        self._models: Dict[str, genai.GenerativeModel] = {}

    def _model(self, system_instruction: str) -> "genai.GenerativeModel":
        if system_instruction not in self._models:
            self._models[system_instruction] = genai.GenerativeModel(
                self.model_name,
                system_instruction=system_instruction or None,
            )
        return self._models[system_instruction]

    async def generate(self, messages: Sequence[Dict[str, str]]) -> str:
        system_instruction, contents = to_gemini_contents(messages)
        try:
            response = await self._model(system_instruction).generate_content_async(
                contents,
                generation_config={"temperature": self.temperature},
            )
        except (google_exceptions.ResourceExhausted, google_exceptions.TooManyRequests) as e:
            raise GenerationRateLimited(f"Gemini 429 - check billing/limits: {e}") from e
        except Exception as e:
            if "429" in str(e):
                raise GenerationRateLimited(f"Gemini 429 - check billing/limits: {e}") from e
            raise GenerationError(f"Gemini error: {e}") from e

        try:
            text = response.text
        except ValueError as e:
            # Blocked or empty candidates
            logger.warning(f"Gemini returned no text: {e}")
            text = ""
        return (text or "").strip() or NO_ANSWER_TEXT
