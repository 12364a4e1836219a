import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import get_settings
from .db import get_session, get_session_factory, init_db
from .errors import CatalogError
from .models import Book, BookIn, ErrorResponse
from .otel import configure_logging, configure_otel, shutdown_otel
from .seed import seed_sample_books
from .service import BookService

settings = get_settings()
configure_logging(settings.log_level)

logger = logging.getLogger("library_backend.app")


def get_book_service(session=Depends(get_session)) -> BookService:
    return BookService(session)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    if settings.seed_sample_data:
        session = get_session_factory()()
        try:
            seed_sample_books(session)
        finally:
            session.close()
    yield
    otel = getattr(app.state, "otel", None)
    if otel is not None:
        shutdown_otel(otel)


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Library catalog: CRUD over books with ISBN uniqueness.",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)
if settings.otel_enabled:
    app.state.otel = configure_otel(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

router = APIRouter(prefix="/api/books", tags=["books"])


@app.get("/health", tags=["health"])
def health() -> dict:
    return {"status": "ok"}


@router.post("", response_model=Book, status_code=status.HTTP_201_CREATED)
def create_book(payload: BookIn, service: BookService = Depends(get_book_service)) -> Book:
    return service.create(payload)


@router.get("", response_model=List[Book])
def list_books(service: BookService = Depends(get_book_service)) -> List[Book]:
    return service.list()


@router.get("/{book_id}", response_model=Book)
def get_book(book_id: int, service: BookService = Depends(get_book_service)) -> Book:
    return service.get(book_id)


@router.put("/{book_id}", response_model=Book)
def update_book(book_id: int, payload: BookIn, service: BookService = Depends(get_book_service)) -> Book:
    return service.update(book_id, payload)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_book(book_id: int, service: BookService = Depends(get_book_service)) -> None:
    service.delete(book_id)


app.include_router(router)


def error_response(status_code: int, message: str, errors: Optional[dict[str, str]] = None) -> JSONResponse:
    body = ErrorResponse(status=status_code, message=message, errors=errors, timestamp=datetime.now())
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def _field_name(loc) -> str:
    # ("body", "isbn") -> "isbn"; ("body", 17) for malformed JSON -> "body"
    return next((part for part in reversed(loc) if isinstance(part, str)), "body")


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: dict[str, str] = {}
    for error in exc.errors():
        errors.setdefault(_field_name(error["loc"]), error["msg"])
    return error_response(status.HTTP_400_BAD_REQUEST, "Validation failed", errors)


@app.exception_handler(CatalogError)
async def handle_catalog_error(request: Request, exc: CatalogError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request.unhandled", extra={"path": request.url.path, "method": request.method})
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected error occurred")


request_logger = logging.getLogger("library_backend.requests")


@app.middleware("http")
async def request_logging_middleware(request, call_next):
    request_logger.info("request.start", extra={"path": request.url.path, "method": request.method})
    response = await call_next(request)
    request_logger.info(
        "request.end",
        extra={"path": request.url.path, "method": request.method, "status": response.status_code},
    )
    return response


@app.middleware("http")
async def request_id_middleware(request, call_next):
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response
