import logging

from notebook_gen.config import DEFAULT_MODEL
from notebook_gen.content.models import ChatMessage
from notebook_gen.errors import ApiFailure, EmptyResponse
from notebook_gen.providers.llm.openai_chat import ChatApiClient

logger = logging.getLogger(__name__)
ERROR_LOG_LIMIT = 1000

PYTHON_FENCE = "```python"
CODE_FENCE = "```code"

PROMPT_PREFIX = (
    "You are a large language model embedded in a desktop application. Your job is to write the "
    "complete content of a Jupyter Notebook as Pandoc Markdown, with Python code in fenced code "
    "blocks. Produce well-structured, high-quality Markdown that follows Pandoc conventions so it "
    "converts cleanly into notebook cells. The description of the notebook is "
)
PROMPT_SUFFIX = "."


def build_prompt(description: str) -> str:
    return f"{PROMPT_PREFIX}{description}{PROMPT_SUFFIX}"


def build_messages(description: str) -> list[ChatMessage]:
    return [ChatMessage(role="user", content=build_prompt(description))]


def adapt_code_fences(text: str) -> str:
    """Retag Python fences as generic ``code`` fences.

    Pandoc only turns ``code``-classed blocks into notebook code cells.
    """
    return text.replace(PYTHON_FENCE, CODE_FENCE)


async def generate(description: str, client: ChatApiClient, model: str | None = None) -> str:
    """Ask the chat API for notebook Markdown describing ``description``."""
    model = model or DEFAULT_MODEL
    messages = build_messages(description)
    logger.info("llm.request model=%s description=%s", model, _clip(description, 80))
    try:
        response = await client.chat_completion(model, messages)
    except Exception as exc:
        detail = _extract_error_detail(exc)
        logger.error("llm.error model=%s type=%s detail=%s", model, exc.__class__.__name__, detail)
        raise ApiFailure(f"chat completion failed: {detail}", cause=exc) from exc

    if not response.choices:
        logger.error("llm.empty_response model=%s", model)
        raise EmptyResponse()

    content = response.choices[0].message.content
    logger.info("llm.response model=%s chars=%d choices=%d", model, len(content), len(response.choices))
    return adapt_code_fences(content)


def _clip(text: str, limit: int) -> str:
    normalized = " ".join(text.split()).strip()
    if len(normalized) <= limit:
        return normalized
    return f"{normalized[:limit]}...(truncated)"


def _extract_error_detail(exc: Exception) -> str:
    status_code = getattr(exc, "status_code", None)
    message = getattr(exc, "message", None) or str(exc) or exc.__class__.__name__
    body = getattr(exc, "body", None)
    details = [f"status_code={status_code}" if status_code is not None else ""]
    if body is not None:
        details.append(f"body={body}")
    details.append(f"message={message}")
    return _clip(" ".join([part for part in details if part]).strip(), ERROR_LOG_LIMIT)
