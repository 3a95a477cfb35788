from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Callable, Dict, Tuple

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from .config import Settings, configure_logging, load_settings
from .errors import ErrorResponse, ValidationError
from .models import (
    ForecastRequest,
    ForecastResponse,
    PredictRequest,
    PredictResponse,
    SummaryRequest,
    SummaryResponse,
)
from .provider import CompletionProvider, OpenAIProvider
from .services.forecast_service import ForecastService
from .services.predict_service import PredictiveService
from .services.summary_service import SummaryService

logger = logging.getLogger(__name__)

BANNER = "AI Predictive Alert and Forecast API is running."

# Response field and text used when a request body cannot be read at all.
_INVALID_BODY: Dict[str, Tuple[str, str]] = {
    "/forecast": ("error", "Invalid glucose value"),
    "/predict": ("error", "Invalid request"),
    "/summarize": ("message", "No values provided"),
}


def create_app(
    settings: Settings | None = None,
    provider: CompletionProvider | None = None,
    rng: random.Random | None = None,
    clock: Callable[[], datetime] | None = None,
) -> FastAPI:
    cfg = settings or load_settings()
    completions = provider or OpenAIProvider(cfg)
    forecasts = ForecastService(completions, cfg, rng=rng)
    predictions = PredictiveService(completions, cfg, clock=clock)
    summaries = SummaryService(completions, cfg)

    app = FastAPI(title="Glucose Predictive Alert API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cfg.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ErrorResponse)
    async def error_response_handler(_: Request, exc: ErrorResponse) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={exc.field: exc.message})

    @app.exception_handler(RequestValidationError)
    async def invalid_body_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        field, message = _INVALID_BODY.get(request.url.path, ("error", "Invalid request"))
        logger.info("Rejected request body for %s: %s", request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={field: message})

    @app.get("/", response_class=PlainTextResponse)
    def root() -> str:
        return BANNER

    @app.post("/forecast", response_model=ForecastResponse)
    def forecast_endpoint(payload: ForecastRequest) -> ForecastResponse:
        try:
            return forecasts.forecast(payload)
        except ValidationError as exc:
            raise ErrorResponse(400, str(exc)) from exc
        except Exception as exc:
            logger.error("Forecast error: %s", exc)
            raise ErrorResponse(500, "Forecast failed") from exc

    @app.post("/predict", response_model=PredictResponse)
    def predict_endpoint(payload: PredictRequest) -> PredictResponse:
        try:
            return predictions.predict(payload)
        except ValidationError as exc:
            raise ErrorResponse(400, str(exc)) from exc
        except Exception as exc:
            logger.error("Prediction error: %s", exc)
            raise ErrorResponse(500, "Prediction failed") from exc

    @app.post("/summarize", response_model=SummaryResponse)
    def summarize_endpoint(payload: SummaryRequest) -> SummaryResponse:
        try:
            return summaries.summarize(payload)
        except ValidationError as exc:
            raise ErrorResponse(400, str(exc), field="message") from exc
        except Exception as exc:
            logger.error("Summary error: %s", exc)
            raise ErrorResponse(500, "Error generating summary", field="message") from exc

    return app


def run() -> None:
    settings = load_settings()
    configure_logging(settings)
    app = create_app(settings)
    logger.info("AI server listening at http://localhost:%d", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
