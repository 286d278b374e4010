import base64
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from openai import OpenAI

from .errors import ConfigurationError, UpstreamFormatError
from .models import SkillRecord
from .prompts import SYSTEM_PROMPT
from .signals import SanitizedInput
from .utils import get_logger

LOGGER = get_logger(__name__)

API_KEY_ENV = "OPENAI_API_KEY"
DEFAULT_TEXT_MODEL = "gpt-4o"
DEFAULT_IMAGE_MODEL = "gpt-image-1"
PORTRAIT_SIZE = "1024x1536"


@dataclass(frozen=True)
class GenerationRequest:
    """Everything the text generator receives for one card."""

    sanitized: SanitizedInput
    rarity: str
    matched_skills: List[SkillRecord] = field(default_factory=list)


def require_api_key(env_var: str = API_KEY_ENV) -> str:
    """Return the API key from the environment or raise :class:`ConfigurationError`."""
    api_key = os.environ.get(env_var, "").strip()
    if not api_key or "PLACEHOLDER" in api_key:
        raise ConfigurationError(f"{env_var} is not configured. Set it in the environment.")
    return api_key


def build_user_message(request: GenerationRequest) -> str:
    sanitized = request.sanitized
    rarity = request.rarity

    parts = [f"## Agent Configuration Files\n\n{sanitized.raw_text}\n"]

    parts.append(
        "## Assigned Rarity (DO NOT CHANGE)\n"
        f'This card\'s rarity is: "{rarity}"\n'
        "Use this EXACT rarity in your JSON response. Rarity is cosmetic only.\n"
    )

    parts.append(
        "## Parser Signals\n"
        f"- Files uploaded: {', '.join(sanitized.file_names)}\n"
        f"- File count: {sanitized.file_count}\n"
        f"- Total content length: {sanitized.total_content_length} characters\n"
        f"- Content depth: **{sanitized.content_depth}**\n"
        f"- Tool count: {sanitized.tool_count}\n"
        f"- Has security rules: {str(sanitized.has_security_rules).lower()}\n"
        f"- Has cron/scheduled tasks: {str(sanitized.has_cron_tasks).lower()}\n"
        f"- Has memory system: {str(sanitized.has_memory_system).lower()}\n"
        f"- Has subagent orchestration: {str(sanitized.has_subagent_orchestration).lower()}\n"
        f"- Has multi-machine setup: {str(sanitized.has_multi_machine_setup).lower()}\n"
    )

    parts.append(f'## Agent Name\nUse this name for the card: "{sanitized.display_name}"\n')

    if request.matched_skills:
        lines = [f"## Matched Skills from Database ({len(request.matched_skills)} skills)\n"]
        for skill in request.matched_skills:
            lines.append(
                f"- **{skill.name}** ({skill.category} -> {skill.primary_type}, "
                f"complexity: {skill.complexity}): {skill.description}"
            )
        parts.append("\n".join(lines) + "\n")
    else:
        parts.append(
            "## Matched Skills\nNo skills matched the public database. "
            "The agent may use custom or proprietary skills.\n"
        )

    parts.append(
        "Generate the card profile JSON now. Remember:\n"
        f'- Rarity is "{rarity}"; use it exactly\n'
        f'- Content depth is "{sanitized.content_depth}"; match card STATS to it, not to rarity\n'
        "- Compute and include stat_budget\n"
        "- Return ONLY valid JSON, no markdown code blocks."
    )
    return "\n".join(parts)


def _extract_text_from_responses(response: Any) -> str:
    """Extract the text blob from a Responses API response."""
    try:
        output = response.output
        text = None
        for item in output:
            if item.type == "message":
                for content in item.content:
                    if content.type == "output_text":
                        text = content.text
                        break
            if text is not None:
                break
    except (AttributeError, TypeError) as exc:
        raise UpstreamFormatError(
            "Unexpected response structure from OpenAI Responses API.", raw_text=repr(response)
        ) from exc

    if not text:
        raise UpstreamFormatError("Model returned no text.", raw_text="")
    return text


def _extract_text_from_chat(response: Any) -> str:
    """Extract the text blob from a Chat Completions response."""
    try:
        choice = response.choices[0]
        content = choice.message.content
        if isinstance(content, list):
            # Multi-part message; concatenate any text parts
            content = "".join(part.get("text", "") for part in content if isinstance(part, dict))
    except (AttributeError, IndexError, TypeError) as exc:
        raise UpstreamFormatError(
            "Unexpected response structure from OpenAI Chat API.", raw_text=repr(response)
        ) from exc

    if not content:
        raise UpstreamFormatError("Model returned no text.", raw_text="")
    return content


def _is_response_format_error(exc: Exception) -> bool:
    """Return True if an exception appears to be from response_format incompatibility."""

    message = str(exc)
    return "response_format" in message or "responses" in message


def _responses_input_to_messages(request_input: Any, *, force_json_hint: bool) -> List[Dict[str, Any]]:
    messages = []
    for item in request_input:
        text = "".join(
            content["text"] for content in item["content"] if content["type"] == "input_text"
        )
        if force_json_hint and item["role"] == "user":
            text += "\nReturn a single JSON object."
            force_json_hint = False
        messages.append({"role": item["role"], "content": text})
    return messages


def _create_response_with_fallback(client: OpenAI, request_kwargs: Dict[str, Any]) -> str:
    """Attempt Responses API call, falling back to Chat Completions when unsupported."""

    try:
        response = client.responses.create(**request_kwargs)
        return _extract_text_from_responses(response)
    except (TypeError, AttributeError) as exc:
        if not _is_response_format_error(exc):
            raise
        LOGGER.debug("Responses API rejected request (%s); falling back to chat", exc)

    messages = _responses_input_to_messages(
        request_kwargs["input"], force_json_hint="response_format" in request_kwargs
    )

    chat_kwargs: Dict[str, Any] = {
        "model": request_kwargs["model"],
        "messages": messages,
        "temperature": request_kwargs.get("temperature", 0.7),
    }

    if "max_output_tokens" in request_kwargs:
        chat_kwargs["max_tokens"] = request_kwargs["max_output_tokens"]
    if "seed" in request_kwargs:
        chat_kwargs["seed"] = request_kwargs["seed"]

    response = client.chat.completions.create(**chat_kwargs)
    return _extract_text_from_chat(response)


class OpenAIProfileGenerator:
    """Text-generation collaborator: request in, raw model text out."""

    def __init__(
        self,
        client: OpenAI,
        model: str = DEFAULT_TEXT_MODEL,
        *,
        temperature: float = 0.7,
        seed: Optional[int] = None,
        max_output_tokens: int = 4096,
    ) -> None:
        self.client = client
        self.model = model
        self.temperature = temperature
        self.seed = seed
        self.max_output_tokens = max_output_tokens

    def __call__(self, request: GenerationRequest) -> str:
        request_kwargs: Dict[str, Any] = {
            "model": self.model,
            "input": [
                {
                    "role": "system",
                    "content": [{"type": "input_text", "text": SYSTEM_PROMPT}],
                },
                {
                    "role": "user",
                    "content": [{"type": "input_text", "text": build_user_message(request)}],
                },
            ],
            "max_output_tokens": self.max_output_tokens,
            "temperature": self.temperature,
            "response_format": {"type": "json_object"},
        }
        if self.seed is not None:
            request_kwargs["seed"] = self.seed

        LOGGER.info("Requesting card profile from %s", self.model)
        return _create_response_with_fallback(self.client, request_kwargs)


class OpenAIImageGenerator:
    """Image-generation collaborator: rendered prompt in, image bytes out."""

    def __init__(self, client: OpenAI, model: str = DEFAULT_IMAGE_MODEL, size: str = PORTRAIT_SIZE) -> None:
        self.client = client
        self.model = model
        self.size = size

    def __call__(self, prompt: str) -> bytes:
        LOGGER.info("Requesting card image from %s", self.model)
        response = self.client.images.generate(model=self.model, prompt=prompt, size=self.size, n=1)
        try:
            payload = response.data[0].b64_json
        except (AttributeError, IndexError, TypeError) as exc:
            raise UpstreamFormatError("Image response had no data.", raw_text=repr(response)) from exc
        if not payload:
            raise UpstreamFormatError("Image response had no base64 payload.", raw_text=repr(response))
        return base64.b64decode(payload)


def create_client(api_key: Optional[str] = None) -> OpenAI:
    return OpenAI(api_key=api_key or require_api_key())
