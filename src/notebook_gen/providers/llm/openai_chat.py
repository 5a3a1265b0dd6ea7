import logging
from typing import Any, Protocol

from notebook_gen.config import Settings
from notebook_gen.content.models import ChatChoice, ChatMessage, ChatResponse, ChoiceMessage

logger = logging.getLogger(__name__)


class ChatApiClient(Protocol):
    async def chat_completion(self, model: str, messages: list[ChatMessage]) -> ChatResponse: ...


class OpenAIChatClient:
    """OpenAI-compatible chat completions through langchain-openai.

    One underlying client is built lazily per model and shared read-only by
    every request afterwards. Retries are disabled: a failed call is reported,
    not repeated.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._llms: dict[str, Any] = {}

    async def chat_completion(self, model: str, messages: list[ChatMessage]) -> ChatResponse:
        from langchain_core.messages import HumanMessage

        llm = self._get_llm(model)
        result = await llm.agenerate([[HumanMessage(content=message.content) for message in messages]])
        generations = result.generations[0] if result.generations else []
        logger.info("openai.response model=%s choices=%d", model, len(generations))
        return ChatResponse(
            choices=[
                ChatChoice(message=ChoiceMessage(content=self._message_text(generation.message.content)))
                for generation in generations
            ]
        )

    def _get_llm(self, model: str):
        if model not in self._llms:
            from langchain_openai import ChatOpenAI

            self._llms[model] = ChatOpenAI(
                model=model,
                api_key=self.settings.openai_api_key or None,
                base_url=self.settings.openai_base_url,
                timeout=self.settings.llm_timeout_seconds,
                max_retries=0,
            )
        return self._llms[model]

    @staticmethod
    def _message_text(content: Any) -> str:
        if isinstance(content, str):
            return content
        if isinstance(content, list):
            parts: list[str] = []
            for item in content:
                if isinstance(item, dict) and "text" in item:
                    parts.append(str(item["text"]))
                else:
                    parts.append(str(item))
            return "\n".join(parts)
        return str(content)
