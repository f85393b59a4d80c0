from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from dotenv import load_dotenv
from pathlib import Path
import os
import sys
import logging
from routers import notes, transcribe
from routers.notes import error_response

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent

# Validate required environment variables
REQUIRED_ENV_VARS = ["SCOUT_API_KEY", "SCOUT_WORKFLOW_ID"]

def validate_environment():
    """Validate that all required environment variables are set."""
    missing = [var for var in REQUIRED_ENV_VARS if not os.getenv(var)]
    if missing:
        logger.error(f"Missing required environment variables: {missing}")
        sys.exit(1)
    logger.info("Environment validation passed")

def validate_transcription_credentials():
    """
    Log whether the transcription proxy is available.

    Without DEEPGRAM_API_KEY the /api/transcribe endpoint answers 503 but
    note formatting keeps working.
    """
    if os.getenv("DEEPGRAM_API_KEY"):
        logger.info("=" * 60)
        logger.info("Transcription proxy ENABLED")
        logger.info(f"  Deepgram model: {os.getenv('DEEPGRAM_MODEL', 'nova-2')}")
        logger.info("=" * 60)
    else:
        logger.warning("=" * 60)
        logger.warning("Transcription proxy DISABLED")
        logger.warning("Missing DEEPGRAM_API_KEY")
        logger.warning("Note formatting will continue without transcription")
        logger.warning("=" * 60)

# Call validation at startup
validate_environment()
validate_transcription_credentials()

# Browser-side abort timeout; the workflow itself may take minutes
FORMAT_TIMEOUT_SECONDS = int(os.getenv("FORMAT_TIMEOUT_SECONDS", "300"))

app = FastAPI(title="Notes Formatter")

cors_origins = [o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(notes.router)
app.include_router(transcribe.router)

app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")

templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report body validation failures as a 400 {error, message} envelope."""
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    message = message.removeprefix("Value error, ")
    if errors and errors[0].get("type") == "missing" and request.url.path == "/api/format":
        message = "Missing raw_notes in request body"
    logger.warning(f"Request validation failed: path={request.url.path}, error={message}")
    return error_response(400, message, message)


@app.get("/", response_class=HTMLResponse)
def get(request: Request):
    return templates.TemplateResponse(
        request,
        "index.html",
        {"client_timeout_ms": FORMAT_TIMEOUT_SECONDS * 1000}
    )


@app.get("/health")
def health():
    return {"status": "ok"}
