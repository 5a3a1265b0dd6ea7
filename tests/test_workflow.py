import asyncio
import logging
from pathlib import Path

import pytest

from notebook_gen.config import Settings
from notebook_gen.content.models import ChatChoice, ChatResponse, ChoiceMessage
from notebook_gen.document.materializer import TRANSIENT_PREFIX
from notebook_gen.errors import ApiFailure, ConversionFailed, EmptyResponse
from notebook_gen.workflow.notebook import NotebookWorkflow


class _StubClient:
    def __init__(self, *contents: str, error: Exception | None = None) -> None:
        self.contents = contents
        self.error = error
        self.prompts: list[str] = []

    async def chat_completion(self, model: str, messages: list) -> ChatResponse:
        self.prompts.append(messages[0].content)
        if self.error is not None:
            raise self.error
        return ChatResponse(choices=[ChatChoice(message=ChoiceMessage(content=text)) for text in self.contents])


def _settings(converter: Path, workdir: Path) -> Settings:
    return Settings(
        _env_file=None,
        OPENAI_TOKEN="sk-test",
        NOTEBOOK_CONVERTER=str(converter),
        NOTEBOOK_TRANSIENT_DIR=str(workdir),
        CONVERTER_TIMEOUT_SECONDS=10,
    )


def test_end_to_end_writes_adapted_markdown_and_cleans_up(make_converter, tmp_path) -> None:
    seen_inputs = tmp_path / "inputs.log"
    # The output doubles as a snapshot of the transient file as the converter saw it.
    converter = make_converter(f'echo "$1" >> "{seen_inputs}"\ncp "$1" "$3"')
    client = _StubClient("# Title\n```python\nprint(1)\n```")
    workflow = NotebookWorkflow(_settings(converter, tmp_path), client=client)
    output = tmp_path / "lists.ipynb"

    result = asyncio.run(workflow.run(output, "a tutorial on list comprehensions"))

    assert result.output_path == output
    assert result.markdown == "# Title\n```code\nprint(1)\n```"
    assert output.read_text(encoding="utf-8") == "# Title\n```code\nprint(1)\n```"
    transient = Path(seen_inputs.read_text(encoding="utf-8").strip())
    assert transient.name.startswith(TRANSIENT_PREFIX)
    assert not transient.exists()
    assert len(client.prompts) == 1
    assert client.prompts[0].count("a tutorial on list comprehensions") == 1


def test_steps_log_in_order(make_converter, tmp_path, caplog) -> None:
    converter = make_converter('cp "$1" "$3"')
    workflow = NotebookWorkflow(_settings(converter, tmp_path), client=_StubClient("body"))

    with caplog.at_level(logging.INFO):
        asyncio.run(workflow.run(tmp_path / "out.ipynb", "topic"))

    messages = [record.getMessage() for record in caplog.records]
    assert messages.index("generate") < messages.index("materialize")


def test_empty_response_stops_before_converter(make_converter, tmp_path) -> None:
    marker = tmp_path / "converter-ran"
    converter = make_converter(f'touch "{marker}"')
    workflow = NotebookWorkflow(_settings(converter, tmp_path), client=_StubClient())

    with pytest.raises(EmptyResponse):
        asyncio.run(workflow.run(tmp_path / "out.ipynb", "topic"))

    assert not marker.exists()


def test_api_failure_propagates(make_converter, tmp_path) -> None:
    converter = make_converter('cp "$1" "$3"')
    client = _StubClient(error=TimeoutError("Request timed out."))
    workflow = NotebookWorkflow(_settings(converter, tmp_path), client=client)

    with pytest.raises(ApiFailure):
        asyncio.run(workflow.run(tmp_path / "out.ipynb", "topic"))


def test_conversion_failure_propagates_without_leftovers(make_converter, tmp_path) -> None:
    converter = make_converter("exit 1")
    workflow = NotebookWorkflow(_settings(converter, tmp_path), client=_StubClient("body"))

    with pytest.raises(ConversionFailed):
        asyncio.run(workflow.run(tmp_path / "out.ipynb", "topic"))

    assert list(tmp_path.glob(f"{TRANSIENT_PREFIX}*.md")) == []


def test_concurrent_runs_share_client_without_cross_contamination(make_converter, tmp_path) -> None:
    converter = make_converter('case "$(head -n 1 "$1")" in *slow*) sleep 0.5 ;; esac\ncp "$1" "$3"')

    class _EchoClient:
        async def chat_completion(self, model: str, messages: list) -> ChatResponse:
            topic = messages[0].content.rsplit(" ", 1)[-1].rstrip(".")
            return ChatResponse(choices=[ChatChoice(message=ChoiceMessage(content=f"# {topic}\n```python\n{topic}\n```"))])

    workflow = NotebookWorkflow(_settings(converter, tmp_path), client=_EchoClient())

    async def scenario():
        return await asyncio.gather(
            workflow.run(tmp_path / "slow.ipynb", "slow"),
            workflow.run(tmp_path / "fast.ipynb", "fast"),
        )

    asyncio.run(scenario())

    assert (tmp_path / "slow.ipynb").read_text(encoding="utf-8") == "# slow\n```code\nslow\n```"
    assert (tmp_path / "fast.ipynb").read_text(encoding="utf-8") == "# fast\n```code\nfast\n```"
    assert list(tmp_path.glob(f"{TRANSIENT_PREFIX}*.md")) == []
