"""Failures a notebook generation can end with.

Every class carries a stable ``code`` so the surfaces (HTTP, CLI) can report
which stage failed without matching on messages.
"""


class NotebookGenError(Exception):
    code = "notebook_gen_error"

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class CredentialMissing(NotebookGenError):
    code = "credential_missing"


class GenerationError(NotebookGenError):
    code = "generation_error"


class ApiFailure(GenerationError):
    """The chat API could not be reached or answered with an error."""

    code = "api_failure"


class EmptyResponse(GenerationError):
    """The chat API answered with zero choices."""

    code = "empty_response"

    def __init__(self, message: str = "chat completion returned no choices") -> None:
        super().__init__(message)


class MaterializeError(NotebookGenError):
    code = "materialize_error"


class WriteFailed(MaterializeError):
    """The transient Markdown file could not be written."""

    code = "write_failed"


class ConversionFailed(MaterializeError):
    """The converter could not be launched, timed out or exited non-zero."""

    code = "conversion_failed"

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message, cause)
        self.returncode = returncode
        self.stderr = stderr
