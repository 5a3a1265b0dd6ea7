import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from notebook_gen.api.schemas import GenerationRequest, NotebookResponse
from notebook_gen.config import get_settings
from notebook_gen.service.notebook import NotebookService

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    settings = get_settings()
    settings.require_api_key()
    logger.info("startup model=%s converter=%s", settings.openai_model, settings.converter_executable)
    yield


app = FastAPI(title="notebook-gen", version="0.1.0", lifespan=lifespan)
service = NotebookService()


@app.get("/healthz")
async def healthz() -> dict:
    return {"status": "ok"}


@app.post("/notebooks", response_model=NotebookResponse)
async def generate_notebook(req: GenerationRequest) -> NotebookResponse:
    result = await service.generate_notebook(req.output_path, req.description)
    return NotebookResponse(**result)
