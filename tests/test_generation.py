import asyncio
import json

import pytest
from google.api_core import exceptions as google_exceptions

import generation
from conftest import make_settings
from context import ContextAssembler
from generation import (
    NO_ANSWER_TEXT,
    SIMMER_SYSTEM_PROMPT,
    GenerationClient,
    GenerationError,
    GenerationRateLimited,
    build_messages,
    to_gemini_contents,
)
from models import HistoryTurn


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModel:
    created = []
    outcome = None

    def __init__(self, name, system_instruction=None):
        self.name = name
        self.system_instruction = system_instruction
        self.requests = []
        FakeModel.created.append(self)

    async def generate_content_async(self, contents, generation_config=None):
        self.requests.append((contents, generation_config))
        if isinstance(FakeModel.outcome, Exception):
            raise FakeModel.outcome
        return FakeResponse(FakeModel.outcome)


@pytest.fixture
def client(monkeypatch):
    FakeModel.created = []
    FakeModel.outcome = "  Imamo Pošip.  "
    monkeypatch.setattr(generation.genai, "configure", lambda api_key: None)
    monkeypatch.setattr(generation.genai, "GenerativeModel", FakeModel)
    return GenerationClient(make_settings(gemini_api_key="key", temperature=0.3))


@pytest.fixture
def messages(config, raw_collections):
    context = ContextAssembler(config).assemble(None, raw_collections)
    history = [HistoryTurn(role="assistant", content="Dobro došli!")]
    return build_messages("konoba-more", "Koje vino?", history, context)


def test_build_messages_embeds_context(messages):
    assert messages[0] == {"role": "system", "content": SIMMER_SYSTEM_PROMPT}
    assert messages[1] == {"role": "assistant", "content": "Dobro došli!"}
    content = messages[-1]["content"]
    header, rest = content.split("\n", 1)
    assert header == "RESTAURANT_SLUG=konoba-more"
    payload = rest.split("\n\nGUEST: ")[0][len("CONTEXT="):]
    data = json.loads(payload)
    assert data["wines"][0]["price"] == "18.00 €"
    assert data["pizzas"][0]["name"] == "Margherita"


def test_zero_history_limit_drops_history(config):
    context = ContextAssembler(config).assemble(None, {})
    history = [HistoryTurn(role="user", content="earlier")]
    messages = build_messages("x", "now", history, context, history_limit=0)
    assert [m["role"] for m in messages] == ["system", "user"]


def test_to_gemini_contents_maps_roles(messages):
    system, contents = to_gemini_contents(messages)
    assert system == SIMMER_SYSTEM_PROMPT
    assert [c["role"] for c in contents] == ["model", "user"]
    assert contents[0]["parts"] == [{"text": "Dobro došli!"}]


def test_consecutive_turns_share_one_content(config):
    context = ContextAssembler(config).assemble(None, {})
    history = [
        HistoryTurn(role="user", content="Bok"),
        HistoryTurn(role="assistant", content="Izvolite."),
        HistoryTurn(role="user", content="Imate li ribu?"),
    ]
    _, contents = to_gemini_contents(build_messages("x", "A vino?", history, context))

    assert [c["role"] for c in contents] == ["user", "model", "user"]
    last = contents[-1]["parts"]
    assert len(last) == 2
    assert last[0] == {"text": "Imate li ribu?"}
    assert last[1]["text"].endswith("GUEST: A vino?")


def test_missing_key_is_rejected():
    with pytest.raises(ValueError):
        GenerationClient(make_settings(gemini_api_key=""))


def test_generate_returns_stripped_text(client, messages):
    assert asyncio.run(client.generate(messages)) == "Imamo Pošip."
    model = FakeModel.created[0]
    assert model.name == "gemini-1.5-flash"
    assert model.system_instruction == SIMMER_SYSTEM_PROMPT
    assert model.requests[0][1] == {"temperature": 0.3}


def test_model_is_reused(client, messages):
    asyncio.run(client.generate(messages))
    asyncio.run(client.generate(messages))
    assert len(FakeModel.created) == 1


def test_empty_text_becomes_no_answer(client, messages):
    FakeModel.outcome = "   "
    assert asyncio.run(client.generate(messages)) == NO_ANSWER_TEXT


def test_resource_exhausted_is_rate_limit(client, messages):
    FakeModel.outcome = google_exceptions.ResourceExhausted("quota exceeded")
    with pytest.raises(GenerationRateLimited):
        asyncio.run(client.generate(messages))


def test_other_failures_are_generation_errors(client, messages):
    FakeModel.outcome = RuntimeError("connection reset")
    with pytest.raises(GenerationError) as exc:
        asyncio.run(client.generate(messages))
    assert not isinstance(exc.value, GenerationRateLimited)
