import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from wellbeing_chat.config import Settings, get_settings
from wellbeing_chat.database import Database
from wellbeing_chat.errors import ChatServiceError
from wellbeing_chat.routers import auth, chat
from wellbeing_chat.services.conversation_resolver import ConversationResolver
from wellbeing_chat.services.llm_client import LLMClient

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(
    settings: Settings | None = None,
    *,
    database: Database | None = None,
    llm_client: LLMClient | None = None,
    conversation_resolver: ConversationResolver | None = None,
) -> FastAPI:
    """Build the app. Database and LLM client are created once here and released on shutdown."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.database.create_all()
        logger.info("Database ready")
        try:
            yield
        finally:
            await app.state.llm_client.aclose()
            app.state.database.dispose()
            logger.info("Shutdown complete")

    app = FastAPI(title="Well-being Chat API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database or Database(settings.database_url)
    app.state.llm_client = llm_client or LLMClient(settings)
    app.state.conversation_resolver = conversation_resolver

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ChatServiceError)
    async def chat_service_error_handler(request: Request, exc: ChatServiceError):
        return _error(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
            return _error(exc.status_code, "Not found")
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        field = ".".join(str(p) for p in errors[0]["loc"] if p != "body") if errors else ""
        message = f"Invalid field: {field}" if field else "Invalid request"
        return _error(status.HTTP_400_BAD_REQUEST, message)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    app.include_router(auth.router)
    app.include_router(chat.router)

    @app.get("/api/health")
    def health():
        return {"status": "ok"}

    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
