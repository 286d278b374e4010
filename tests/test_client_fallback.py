import base64
import json
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

import agentmon.client as client_module
from agentmon.client import GenerationRequest
from agentmon.errors import ConfigurationError, UpstreamFormatError
from agentmon.models import SkillRecord
from agentmon.signals import prepare_submission


class FakeChatMessage(SimpleNamespace):
    pass


class FakeChoice(SimpleNamespace):
    pass


class FakeChatResponse(SimpleNamespace):
    pass


class FallbackClient:
    def __init__(self, response_text: str):
        self.responses = SimpleNamespace(create=self._raise_type_error)
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._chat_create))
        self._response_text = response_text
        self.chat_calls = []

    def _raise_type_error(self, **_):
        raise TypeError("Unexpected keyword argument 'response_format'")

    def _chat_create(self, **kwargs):
        self.chat_calls.append(kwargs)
        message = FakeChatMessage(content=self._response_text)
        choice = FakeChoice(message=message)
        return FakeChatResponse(choices=[choice])


class FallbackClientWithListContent(FallbackClient):
    def _chat_create(self, **kwargs):
        self.chat_calls.append(kwargs)
        message = FakeChatMessage(content=[{"type": "text", "text": self._response_text}])
        choice = FakeChoice(message=message)
        return FakeChatResponse(choices=[choice])


class ResponsesClient:
    def __init__(self, response_text: str):
        self.responses = SimpleNamespace(create=self._create)
        self._response_text = response_text
        self.calls = []

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        content = SimpleNamespace(type="output_text", text=self._response_text)
        return SimpleNamespace(output=[SimpleNamespace(type="message", content=[content])])


def _request(agent_files, matched_skills=None, rarity="Rare"):
    return GenerationRequest(
        sanitized=prepare_submission(agent_files),
        rarity=rarity,
        matched_skills=matched_skills or [],
    )


def test_profile_generator_uses_responses_api(agent_files):
    client = ResponsesClient(json.dumps({"name": "Card"}))
    generator = client_module.OpenAIProfileGenerator(client, model="dummy", seed=7)

    result = generator(_request(agent_files))

    assert json.loads(result) == {"name": "Card"}
    sent = client.calls[0]
    assert sent["model"] == "dummy"
    assert sent["seed"] == 7
    assert sent["input"][0]["role"] == "system"


def test_profile_generator_falls_back_to_chat_completion(agent_files):
    client = FallbackClient(json.dumps({"name": "Card"}))
    generator = client_module.OpenAIProfileGenerator(client, model="dummy")

    result = generator(_request(agent_files))

    assert json.loads(result) == {"name": "Card"}
    messages = client.chat_calls[0]["messages"]
    assert [m["role"] for m in messages] == ["system", "user"]
    assert messages[1]["content"].endswith("Return a single JSON object.")
    assert client.chat_calls[0]["max_tokens"] == 4096


def test_fallback_joins_list_content(agent_files):
    client = FallbackClientWithListContent(json.dumps({"name": "Card"}))
    generator = client_module.OpenAIProfileGenerator(client, model="dummy")

    assert json.loads(generator(_request(agent_files))) == {"name": "Card"}


def test_unrelated_type_error_is_not_swallowed(agent_files):
    def explode(**_):
        raise TypeError("something else entirely")

    client = SimpleNamespace(responses=SimpleNamespace(create=explode))
    generator = client_module.OpenAIProfileGenerator(client, model="dummy")

    with pytest.raises(TypeError):
        generator(_request(agent_files))


def test_empty_chat_content_is_a_format_error(agent_files):
    client = FallbackClient("")
    generator = client_module.OpenAIProfileGenerator(client, model="dummy")

    with pytest.raises(UpstreamFormatError):
        generator(_request(agent_files))


def test_user_message_lists_signals_and_rarity(agent_files):
    message = client_module.build_user_message(_request(agent_files, rarity="Legendary"))

    assert 'This card\'s rarity is: "Legendary"' in message
    assert "- Files uploaded: SOUL.md, TOOLS.md" in message
    assert "- Has memory system: true" in message
    assert 'Use this name for the card: "Sentinel"' in message
    assert "No skills matched the public database" in message
    assert "sk-proj" not in message


def test_user_message_lists_matched_skills(agent_files):
    skill = SkillRecord(
        slug="web-search",
        name="Web Search",
        description="Search the web.",
        category="research",
        primary_type="Ground",
        complexity="low",
    )

    message = client_module.build_user_message(_request(agent_files, matched_skills=[skill]))

    assert "## Matched Skills from Database (1 skills)" in message
    assert "**Web Search** (research -> Ground, complexity: low)" in message


def test_require_api_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(ConfigurationError):
        client_module.require_api_key()

    monkeypatch.setenv("OPENAI_API_KEY", "PLACEHOLDER_KEY")
    with pytest.raises(ConfigurationError) as excinfo:
        client_module.require_api_key()
    assert excinfo.value.status_code == 503

    monkeypatch.setenv("OPENAI_API_KEY", "  sk-test-value  ")
    assert client_module.require_api_key() == "sk-test-value"


def test_image_generator_decodes_payload():
    calls = []

    def generate(**kwargs):
        calls.append(kwargs)
        return SimpleNamespace(data=[SimpleNamespace(b64_json=base64.b64encode(b"png-bytes").decode())])

    client = SimpleNamespace(images=SimpleNamespace(generate=generate))
    generator = client_module.OpenAIImageGenerator(client, model="dummy-image")

    assert generator("a card") == b"png-bytes"
    assert calls[0]["size"] == client_module.PORTRAIT_SIZE


def test_image_generator_without_payload_raises():
    client = SimpleNamespace(
        images=SimpleNamespace(generate=lambda **_: SimpleNamespace(data=[SimpleNamespace(b64_json=None)]))
    )

    with pytest.raises(UpstreamFormatError):
        client_module.OpenAIImageGenerator(client)("a card")
