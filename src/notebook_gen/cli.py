from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from pydantic import ValidationError

from notebook_gen.config import Settings, get_settings
from notebook_gen.content.models import GenerationRequest
from notebook_gen.errors import CredentialMissing
from notebook_gen.service.notebook import NotebookService
from notebook_gen.workflow.notebook import NotebookWorkflow

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_NO_CREDENTIAL = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="notebook-gen",
        description="Generate a Jupyter notebook from a short description.",
    )
    parser.add_argument("output", help="Notebook path to write, e.g. tutorial.ipynb.")
    parser.add_argument("description", help="What the notebook should be about.")
    parser.add_argument("--converter", default="", help="Converter executable. Default: NOTEBOOK_CONVERTER or pandoc.")
    parser.add_argument("--timeout", type=float, default=0.0, help="Converter timeout in seconds (0 keeps the default).")
    return parser.parse_args(argv)


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    updates: dict[str, object] = {}
    if args.converter:
        updates["converter_executable"] = args.converter
    if args.timeout > 0:
        updates["converter_timeout_seconds"] = args.timeout
    return settings.model_copy(update=updates) if updates else settings


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        request = GenerationRequest(description=args.description, output_path=args.output)
    except ValidationError as exc:
        fields = ", ".join(str(error["loc"][0]) for error in exc.errors())
        print(f"error: invalid arguments: {fields} must not be empty", file=sys.stderr)
        return EXIT_FAILED

    settings = _apply_overrides(get_settings(), args)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    try:
        settings.require_api_key()
    except CredentialMissing as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return EXIT_NO_CREDENTIAL

    service = NotebookService(workflow=NotebookWorkflow(settings))
    result = asyncio.run(service.generate_notebook(request.output_path, request.description))
    if not result["success"]:
        error = result["error"]
        print(f"error: {error['message']}\nhint: {error['hint']}", file=sys.stderr)
        return EXIT_FAILED
    print(result["output_path"])
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
