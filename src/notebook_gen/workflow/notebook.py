import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypedDict

from notebook_gen.config import Settings, get_settings
from notebook_gen.content.generator import generate
from notebook_gen.document.materializer import materialize
from notebook_gen.providers.llm.openai_chat import ChatApiClient, OpenAIChatClient

logger = logging.getLogger(__name__)


class NotebookState(TypedDict):
    description: str
    output_path: str
    markdown: str


@dataclass
class NotebookResult:
    output_path: Path
    markdown: str


class NotebookWorkflow:
    """Generate Markdown, then convert it, as a two-step LangGraph graph.

    The chat client is built once and shared by every run; each run owns its
    own transient file.
    """

    def __init__(self, settings: Settings | None = None, client: ChatApiClient | None = None) -> None:
        self.settings = settings or get_settings()
        self.client = client or OpenAIChatClient(self.settings)
        self._app: Any | None = None

    async def run(self, output_path: str | Path, description: str) -> NotebookResult:
        logger.info("notebook.start output=%s", output_path)
        final_state = await self._get_app().ainvoke(
            {
                "description": description,
                "output_path": str(output_path),
                "markdown": "",
            }
        )
        logger.info("notebook.done output=%s", final_state["output_path"])
        return NotebookResult(output_path=Path(final_state["output_path"]), markdown=final_state["markdown"])

    def _get_app(self):
        if self._app is None:
            from langgraph.graph import END, START, StateGraph

            graph = StateGraph(NotebookState)
            graph.add_node("generate_step", self._generate_node)
            graph.add_node("materialize_step", self._materialize_node)
            graph.add_edge(START, "generate_step")
            graph.add_edge("generate_step", "materialize_step")
            graph.add_edge("materialize_step", END)
            self._app = graph.compile()
        return self._app

    async def _generate_node(self, state: NotebookState) -> dict[str, str]:
        logger.info("generate")
        markdown = await generate(state["description"], self.client, model=self.settings.openai_model)
        return {"markdown": markdown}

    async def _materialize_node(self, state: NotebookState) -> dict[str, str]:
        logger.info("materialize")
        path = await materialize(
            state["markdown"],
            state["output_path"],
            converter=self.settings.converter_executable,
            workdir=self.settings.transient_path(),
            timeout=self.settings.converter_timeout_seconds,
        )
        return {"output_path": str(path)}
