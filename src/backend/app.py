import logging
from contextlib import asynccontextmanager

# FastAPI imports
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Local imports
from src.backend.ledger.api.dependencies import get_settings
from src.backend.ledger.api.router import ledger_router
from src.backend.ledger.config.settings import configure_logging
from src.backend.ledger.integrations.row_store_client import RowStoreError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage FastAPI application lifecycle - startup and shutdown."""

    settings = app.dependency_overrides.get(get_settings, get_settings)()
    configure_logging(settings)

    # Startup
    logger.info(f"Starting ledger backend (row store: {settings.row_store_url})")
    yield

    # Shutdown
    logger.info("Ledger backend shutdown complete")


# Initialize the FastAPI app
app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins for development; restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(ledger_router)


@app.exception_handler(RowStoreError)
async def row_store_error_handler(request: Request, exc: RowStoreError):
    logger.error(f"{request.method} {request.url.path} failed at the row store: {exc}")
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.get("/health")
async def health():
    return {"status": "ok"}


# Run the app
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.backend.app:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
        log_level="info",
        access_log=False,
    )
