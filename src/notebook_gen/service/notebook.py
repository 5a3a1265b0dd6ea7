import logging
from typing import Any

from notebook_gen.errors import (
    ApiFailure,
    ConversionFailed,
    CredentialMissing,
    EmptyResponse,
    NotebookGenError,
    WriteFailed,
)
from notebook_gen.workflow.notebook import NotebookWorkflow

logger = logging.getLogger(__name__)

HINTS: dict[type[NotebookGenError], str] = {
    CredentialMissing: "Set OPENAI_TOKEN (or OPENAI_API_KEY) before starting the application.",
    ApiFailure: "Could not reach the model. Check network access and OPENAI_TOKEN/OPENAI_BASE_URL.",
    EmptyResponse: "The model returned nothing. Try again or rephrase the description.",
    WriteFailed: "Could not write the temporary file. Check permissions and free space in the working directory.",
    ConversionFailed: "The conversion tool failed. Check that the configured converter (NOTEBOOK_CONVERTER, pandoc by default) is installed and on PATH.",
}


class NotebookService:
    def __init__(self, workflow: NotebookWorkflow | None = None) -> None:
        self.workflow = workflow or NotebookWorkflow()

    async def generate_notebook(self, output_path: str, description: str) -> dict:
        try:
            result = await self.workflow.run(output_path, description)
        except NotebookGenError as exc:
            logger.error("notebook.failed code=%s output=%s message=%s", exc.code, output_path, exc.message)
            return {"success": False, "output_path": None, "error": self._error_payload(exc)}
        except Exception as exc:
            logger.exception("notebook.failed code=internal_error output=%s", output_path)
            return {"success": False, "output_path": None, "error": self._error_payload(exc)}
        logger.info("notebook.generated output=%s markdown_chars=%d", result.output_path, len(result.markdown))
        return {"success": True, "output_path": str(result.output_path), "error": None}

    @staticmethod
    def _error_payload(exc: Exception) -> dict[str, Any]:
        if isinstance(exc, NotebookGenError):
            hint = next(
                (text for kind, text in HINTS.items() if isinstance(exc, kind)),
                "See the application log for details.",
            )
            return {
                "type": exc.__class__.__name__,
                "code": exc.code,
                "message": exc.message,
                "hint": hint,
            }
        return {
            "type": exc.__class__.__name__,
            "code": "internal_error",
            "message": str(exc),
            "hint": "See the application log for details.",
        }
