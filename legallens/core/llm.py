from typing import Any, List, Optional, Tuple
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage, AIMessage, SystemMessage
from langchain_core.outputs import ChatGeneration, ChatResult
from google import genai
from google.genai import types

from legallens.core.config import settings, require_api_key
from legallens.core.errors import TransportError


class GeminiChatModel(BaseChatModel):
    """Chat model wrapper around an explicitly constructed Gemini client.

    The underlying ``google.genai.Client`` is exposed as ``client`` so agents that
    need provider features (inline file parts, response schemas) can call it
    directly. Pass ``client`` to inject a test double; otherwise one is built
    from ``api_key`` or the configured ``GEMINI_API_KEY``.
    """

    client: Any = None
    api_key: Optional[str] = None
    model_name: str = settings.CHAT_MODEL
    temperature: Optional[float] = None
    thinking_budget: Optional[int] = None

    def __init__(self, **kwargs):
        """Initialize the Gemini chat model."""
        super().__init__(**kwargs)
        if self.client is None:
            self.client = genai.Client(api_key=self.api_key or require_api_key(settings))

    @classmethod
    def for_analysis(cls, **kwargs) -> "GeminiChatModel":
        """Model configured for structured contract analysis."""
        kwargs.setdefault("model_name", settings.GEMINI_MODEL)
        kwargs.setdefault("thinking_budget", settings.THINKING_BUDGET)
        return cls(**kwargs)

    @classmethod
    def for_chat(cls, **kwargs) -> "GeminiChatModel":
        """Model configured for follow-up questions."""
        kwargs.setdefault("model_name", settings.CHAT_MODEL)
        kwargs.setdefault("temperature", settings.CHAT_TEMPERATURE)
        return cls(**kwargs)

    def _convert_messages_to_contents(
        self, messages: List[BaseMessage]
    ) -> Tuple[Optional[str], List[types.Content]]:
        """Convert messages to Gemini chat format.

        Args:
            messages: List of messages

        Returns:
            System instruction (if any) and the list of Gemini contents
        """
        system_parts = []
        contents = []
        for message in messages:
            if isinstance(message, SystemMessage):
                system_parts.append(message.content)
                continue
            role = "model" if isinstance(message, AIMessage) else "user"
            contents.append(
                types.Content(role=role, parts=[types.Part.from_text(text=message.content)])
            )
        system_instruction = "\n\n".join(system_parts) if system_parts else None
        return system_instruction, contents

    def build_config(self, **overrides: Any) -> types.GenerateContentConfig:
        """Generation config carrying this model's defaults plus ``overrides``."""
        options = dict(overrides)
        if self.temperature is not None:
            options.setdefault("temperature", self.temperature)
        if self.thinking_budget is not None:
            options.setdefault(
                "thinking_config", types.ThinkingConfig(thinking_budget=self.thinking_budget)
            )
        return types.GenerateContentConfig(**options)

    def _generate(
        self,
        messages: List[BaseMessage],
        stop: Optional[List[str]] = None,
        run_manager: Optional[Any] = None,
        **kwargs: Any,
    ) -> ChatResult:
        """Generate a response using Gemini."""
        system_instruction, contents = self._convert_messages_to_contents(messages)
        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=contents,
                config=self.build_config(system_instruction=system_instruction, stop_sequences=stop),
            )
        except Exception as e:
            raise TransportError(f"Error in Gemini chat completion: {str(e)}") from e
        return self._to_chat_result(response)

    async def _agenerate(
        self,
        messages: List[BaseMessage],
        stop: Optional[List[str]] = None,
        run_manager: Optional[Any] = None,
        **kwargs: Any,
    ) -> ChatResult:
        """Generate a response using Gemini without blocking the event loop."""
        system_instruction, contents = self._convert_messages_to_contents(messages)
        try:
            response = await self.client.aio.models.generate_content(
                model=self.model_name,
                contents=contents,
                config=self.build_config(system_instruction=system_instruction, stop_sequences=stop),
            )
        except Exception as e:
            raise TransportError(f"Error in Gemini chat completion: {str(e)}") from e
        return self._to_chat_result(response)

    @staticmethod
    def _to_chat_result(response: Any) -> ChatResult:
        message = AIMessage(content=(getattr(response, "text", None) or "").strip())
        return ChatResult(generations=[ChatGeneration(message=message)])

    @property
    def _llm_type(self) -> str:
        """Return the type of LLM."""
        return "gemini"
