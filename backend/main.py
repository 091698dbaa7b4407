from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from typing import Optional
import logging
import time
from dotenv import load_dotenv

from assistant import RestaurantAssistant
from config import load_settings
from data_loader import AirtableClient
from errors import AssistantError, RequestValidationFailed
from generation import GenerationClient
from models import AskRequest, AskResponse

load_dotenv()

settings = load_settings()

logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(title="AI Simmer Restaurant Assistant API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

assistant: Optional[RestaurantAssistant] = None
started_at = time.monotonic()


def build_assistant(settings) -> RestaurantAssistant:
    generator = None
    if settings.generation_configured:
        try:
            generator = GenerationClient(settings)
            logger.info(f"Using Gemini Model: {settings.model_name}")
        except Exception as e:
            logger.error(f"Error configuring Gemini, answers will use the fallback: {e}")
    else:
        logger.warning("GEMINI_API_KEY not found, answers will use the fallback.")
    return RestaurantAssistant(settings, AirtableClient(settings), generator)


@app.on_event("startup")
def startup_event():
    global assistant

    missing = settings.missing_env()
    if missing:
        logger.error(f"[ENV] Missing: {', '.join(missing)}")
    if assistant is None:
        assistant = build_assistant(settings)


@app.exception_handler(AssistantError)
async def assistant_error_handler(request: Request, exc: AssistantError):
    if exc.status_code >= 500:
        logger.error(f"[API ERROR] {exc.category}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "category": exc.category, "error": exc.message},
    )


def _describe(err: dict) -> str:
    loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body") or "body"
    return f"{loc}: {err.get('msg')}"


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    problems = "; ".join(_describe(err) for err in exc.errors())
    return JSONResponse(
        status_code=RequestValidationFailed.status_code,
        content={"ok": False, "category": RequestValidationFailed.category, "error": problems or "invalid request"},
    )


@app.get("/")
def root():
    return PlainTextResponse("AI Simmer up")


@app.get("/api/health")
def health_check():
    return {
        "status": "ok",
        "message": "AI Simmer server is healthy",
        "uptime": round(time.monotonic() - started_at, 3),
        "generation_configured": settings.generation_configured,
        "table_store_configured": settings.table_store_configured,
    }


@app.post("/api/ask", response_model=AskResponse)
async def ask(request: AskRequest):
    global assistant
    if assistant is None:
        assistant = build_assistant(settings)
    return await assistant.answer(request.slug, request.message, request.history)
