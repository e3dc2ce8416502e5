from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend.app.api.chat import router as chat_router
from backend.app.api.drafts import router as drafts_router
from backend.app.api.emails import router as emails_router
from backend.app.api.prompts import router as prompts_router
from backend.app.deps import Services
from backend.app.sessions import ChatSessionStore
from inbox_assistant.config.logging import get_logger
from inbox_assistant.config.paths import DATA_DIR
from inbox_assistant.llm.gateway import OpenAIGateway
from inbox_assistant.storage.records import RecordNotFoundError, open_storage

logger = get_logger(__name__)


def build_services() -> Services:
    # Constructed once per process and shared by reference through app.state.
    gateway = OpenAIGateway()
    return Services(
        storage=open_storage(DATA_DIR),
        gateway=gateway,
        sessions=ChatSessionStore(gateway),
    )


def create_app(services: Optional[Services] = None) -> FastAPI:
    app = FastAPI(title="inbox-assistant API")
    app.state.services = services or build_services()

    app.include_router(emails_router, prefix="/api")
    app.include_router(drafts_router, prefix="/api")
    app.include_router(prompts_router, prefix="/api")
    app.include_router(chat_router, prefix="/api")

    @app.exception_handler(RecordNotFoundError)
    def not_found(_request: Request, exc: RecordNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": f"Not found: {exc.args[0]}"})

    # Covers EmptyMessageError, ReservedPromptError and invalid ids.
    @app.exception_handler(ValueError)
    def bad_request(_request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(OSError)
    def storage_error(_request: Request, exc: OSError) -> JSONResponse:
        logger.error("Storage error: %s", exc)
        return JSONResponse(status_code=500, content={"detail": "Storage unavailable"})

    return app


def main() -> None:
    import uvicorn

    # Factory mode: services are only built when the server starts, not on import.
    uvicorn.run("backend.app.main:create_app", factory=True, host="127.0.0.1", port=8000)


if __name__ == "__main__":
    main()
