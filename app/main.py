# app/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from app.api.routes import router as api_router
from app.config import get_settings
from app.errors import InputValidationError, SeoAnalyzerError
from app.logging_config import setup_logging
from models.report_models import INVALID_REQUEST_MESSAGE

setup_logging(get_settings().log_level)

logger = logging.getLogger(__name__)

app = FastAPI(title="SEO Site Analyzer")

app.include_router(api_router, prefix="/api")


@app.exception_handler(InputValidationError)
async def input_validation_error_handler(request: Request, exc: InputValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": INVALID_REQUEST_MESSAGE})


@app.exception_handler(SeoAnalyzerError)
async def seo_analyzer_error_handler(request: Request, exc: SeoAnalyzerError) -> JSONResponse:
    logger.error("[main] unhandled error path=%s error=%s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/", response_class=PlainTextResponse)
def root() -> str:
    return "SEO AI Backend is running"


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("[main] unexpected error path=%s", request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})
