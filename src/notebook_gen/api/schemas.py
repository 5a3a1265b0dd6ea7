from pydantic import BaseModel

from notebook_gen.content.models import GenerationRequest

__all__ = ["GenerationRequest", "NotebookError", "NotebookResponse"]


class NotebookError(BaseModel):
    type: str
    code: str
    message: str
    hint: str


class NotebookResponse(BaseModel):
    success: bool
    output_path: str | None = None
    error: NotebookError | None = None
