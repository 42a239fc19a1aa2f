# perkscan/main.py

import time
import uuid
import logging
from contextlib import asynccontextmanager
from typing import List

import sentry_sdk
from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from perkscan.config import settings
from perkscan.parsing.main_parser import (
    InputTooLargeError,
    PerkExtractor,
    UnsupportedCardTypeError,
    get_extractor,
)
from perkscan.schemas import HealthCheckResponse, IssuerInfo, ParseRequest, ParseResponse

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Wire up monitoring and log the parser line-up once per process."""
    logger.info(
        f"{settings.PROJECT_NAME} v{settings.VERSION} starting "
        f"(environment={settings.ENVIRONMENT}, debug={settings.DEBUG})"
    )

    if settings.SENTRY_DSN:
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            environment=settings.ENVIRONMENT,
            release=f"perkscan@{settings.VERSION}",
            traces_sample_rate=0.1 if settings.ENVIRONMENT == "production" else 1.0,
        )
        logger.info("Sentry monitoring enabled")

    extractor = get_extractor()
    logger.info(f"Dispatch order: {' > '.join(parser.name for parser in extractor.parsers)}")
    logger.info(
        f"Input bounds: {settings.MAX_OCR_LINES} lines, "
        f"{settings.MAX_LINE_LENGTH} characters per line"
    )

    yield

    logger.info(f"{settings.PROJECT_NAME} stopped")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Extracts merchant offers from OCR text of credit card issuer app screens",
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
    expose_headers=[REQUEST_ID_HEADER, "X-Process-Time"],
)
# Offer lists for a full screen compress well; tiny health payloads are left alone.
app.add_middleware(GZipMiddleware, minimum_size=1000)


@app.middleware("http")
async def tag_and_time_requests(request: Request, call_next):
    """Attach a request id and log each request with its duration."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
    request.state.request_id = request_id
    started = time.perf_counter()

    response = await call_next(request)

    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        f"[Request {request_id}] {request.method} {request.url.path} "
        f"-> {response.status_code} in {elapsed_ms:.2f}ms"
    )
    response.headers[REQUEST_ID_HEADER] = request_id
    response.headers["X-Process-Time"] = f"{elapsed_ms:.2f}"
    return response


# ========== ERROR MAPPING ==========

@app.exception_handler(InputTooLargeError)
async def input_too_large_handler(request: Request, exc: InputTooLargeError):
    logger.warning(f"[Request {_request_id(request)}] {exc}")
    return JSONResponse(
        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        content={"detail": str(exc)},
    )


@app.exception_handler(UnsupportedCardTypeError)
async def unsupported_card_type_handler(request: Request, exc: UnsupportedCardTypeError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc)},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Anything the parsers did not anticipate ends up here as a 500."""
    logger.error(f"[Request {_request_id(request)}] Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Offer extraction failed unexpectedly."},
    )


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "-")


# ========== ROUTES ==========

@app.get(
    "/health",
    response_model=HealthCheckResponse,
    tags=["Health"],
    summary="Liveness and parser line-up",
)
async def health_check(extractor: PerkExtractor = Depends(get_extractor)):
    parsers = [parser.name for parser in extractor.parsers]
    return HealthCheckResponse(
        status="healthy" if parsers else "unhealthy",
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
        parsers=parsers,
    )


@app.get("/", include_in_schema=False)
def read_root():
    return {
        "message": f"Welcome to {settings.PROJECT_NAME} v{settings.VERSION}",
        "parse": f"{settings.API_V1_STR}/perks/parse",
        "issuers": f"{settings.API_V1_STR}/issuers",
        "health": "/health",
    }


@app.get(
    f"{settings.API_V1_STR}/issuers",
    response_model=List[IssuerInfo],
    summary="List issuer parsers in dispatch order",
    tags=["Parsing"],
)
async def list_issuers(extractor: PerkExtractor = Depends(get_extractor)):
    return [
        IssuerInfo(
            card_type=parser.card_type,
            name=parser.name,
            identifiers=list(parser.config.identifiers),
        )
        for parser in extractor.parsers
    ]


@app.post(
    f"{settings.API_V1_STR}/perks/parse",
    response_model=ParseResponse,
    summary="Extract offers from OCR text",
    tags=["Parsing"],
)
def parse_perks(
    payload: ParseRequest,
    request: Request,
    extractor: PerkExtractor = Depends(get_extractor),
):
    """
    Extract offers from the OCR text of one issuer app screen.

    Send either `text` or `lines`. Pass `card_type` to skip issuer detection;
    an oversized capture is rejected with 413.
    """
    return extractor.extract_perks_from_text(
        payload.as_text(),
        card_type=payload.card_type,
        request_id=_request_id(request),
    )
