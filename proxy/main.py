"""
Monday Write Proxy - FastAPI Application

Receives call-intake webhooks from Zoom Virtual Agent and creates one item on
the Fingerprint monday.com board per request. No storage, no retries.
"""

import hmac
import json
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from intake import IntakeResult, normalize_intake
from .models import WriteResponse
from .monday_service import MondayService, OutcomeKind, WriteOutcome, get_monday_service

# Load environment variables from the project .env, then the working directory
env_paths = [
    Path(__file__).parent.parent / ".env",
    Path.cwd() / ".env",
]
for env_path in env_paths:
    if env_path.exists():
        load_dotenv(env_path)
        break
else:
    load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if os.getenv("DEBUG", "false").lower() == "true" else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Proxy-Token",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}

LOG_PREVIEW_LIMIT = 500


def _mask_key(key: Optional[str]) -> str:
    """Mask API key showing only last 4 chars."""
    if not key:
        return "(not set)"
    if len(key) <= 4:
        return "****"
    return f"****{key[-4:]}"


def _truncate(value: Any) -> Any:
    if isinstance(value, str) and len(value) > LOG_PREVIEW_LIMIT:
        return value[:LOG_PREVIEW_LIMIT] + "…"
    if isinstance(value, dict):
        return {k: _truncate(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_truncate(v) for v in value]
    return value


def _preview(value: Any) -> str:
    """JSON for log lines, long strings cut at LOG_PREVIEW_LIMIT."""
    try:
        return json.dumps(_truncate(value), ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)


def respond(response: WriteResponse, status_code: int = 200) -> JSONResponse:
    payload = response.to_payload()
    logger.info(f"Returning {status_code}: {_preview(payload)}")
    return JSONResponse(content=payload, status_code=status_code, headers=CORS_HEADERS)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - report configuration."""
    api_key = os.getenv("MONDAY_API_KEY")
    logger.info("=" * 60)
    logger.info("Starting Monday Write Proxy")
    logger.info(f"MONDAY_API_KEY present: {bool(api_key)} ({_mask_key(api_key)})")
    logger.info(f"WRITE_PROXY_TOKEN enforced: {bool(os.getenv('WRITE_PROXY_TOKEN'))}")
    if not api_key:
        logger.warning("MONDAY_API_KEY missing - /write will return 500 until it is set")
    logger.info("=" * 60)

    yield

    logger.info("Shutting down Monday Write Proxy")


app = FastAPI(
    title="Monday Write Proxy",
    description="Writes Zoom Virtual Agent call intake to a monday.com board",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Unknown paths and unsupported methods both answer 404 Not found."""
    if exc.status_code in (404, 405):
        return respond(WriteResponse(ok=False, message="Not found"), 404)
    return respond(WriteResponse(ok=False, message=str(exc.detail)), exc.status_code)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return respond(WriteResponse(ok=True, message="Monday write worker live"))


@app.options("/{path:path}")
async def preflight(path: str):
    """CORS pre-flight: empty 204 for any path and any requested headers."""
    return Response(status_code=204, headers=CORS_HEADERS)


def _authorized(request: Request) -> bool:
    """Check the optional static inbound token (WRITE_PROXY_TOKEN)."""
    expected = os.getenv("WRITE_PROXY_TOKEN")
    if not expected:
        return True

    supplied = request.headers.get("X-Proxy-Token", "")
    auth = request.headers.get("Authorization", "")
    if not supplied and auth.lower().startswith("bearer "):
        supplied = auth[len("bearer "):].strip()

    return hmac.compare_digest(supplied.encode(), expected.encode())


def outcome_response(outcome: WriteOutcome, intake: IntakeResult, board_id: str) -> JSONResponse:
    """Map a WriteOutcome to the response envelope and status code."""
    if outcome.kind == OutcomeKind.SUCCESS:
        return respond(
            WriteResponse(
                ok=True,
                message="Monday item created successfully.",
                boardId=board_id,
                mondayItemId=outcome.item_id,
                mondayItemName=outcome.item_name,
                columnValuesSent=intake.column_values,
                mondayRaw=outcome.body,
            ),
            200,
        )

    if outcome.kind == OutcomeKind.CONFIG_ERROR:
        return respond(WriteResponse(ok=False, message=outcome.error or "Not configured."), 500)

    if outcome.kind == OutcomeKind.NETWORK_ERROR:
        return respond(
            WriteResponse(ok=False, message="Network error calling Monday.com", error=outcome.error),
            502,
        )

    if outcome.kind == OutcomeKind.MALFORMED_RESPONSE:
        return respond(
            WriteResponse(
                ok=False,
                message="Non-JSON response from Monday.com",
                http_status=outcome.http_status,
                raw=outcome.raw,
            ),
            500,
        )

    return respond(
        WriteResponse(
            ok=False,
            message="Monday.com returned an error",
            http_status=outcome.http_status,
            monday=outcome.body,
        ),
        outcome.http_status or 500,
    )


@app.post("/write")
@app.post("/monday/write")
async def monday_write(request: Request, monday: MondayService = Depends(get_monday_service)):
    """
    Create a monday item from a call-intake webhook.

    The body may be the bare record or wrapped in a payload/json/data/body
    envelope. Field problems (bad date, short phone, unknown division) are
    normalized away; only configuration, inbound JSON and upstream failures
    produce ok=false.
    """
    if not _authorized(request):
        logger.warning("Rejected write: bad or missing proxy token")
        return respond(WriteResponse(ok=False, message="Unauthorized"), 401)

    if not monday.is_configured:
        return respond(
            WriteResponse(ok=False, message="MONDAY_API_KEY env var is not set on the proxy."),
            500,
        )

    raw_body = await request.body()
    try:
        body = json.loads(raw_body)
    except ValueError as e:
        return respond(WriteResponse(ok=False, message="Invalid JSON body.", error=str(e)), 400)

    intake = normalize_intake(body, monday.board)
    logger.info(
        f"Intake unwrapped via {intake.shape.value}: itemName={intake.item_name!r} "
        f"columns={_preview(intake.column_values)}"
    )

    outcome = await monday.create_item(intake.column_values, intake.item_name)
    return outcome_response(outcome, intake, monday.board.board_id)
