"""
Franklin billing backend.
Subscription sync, Stripe diagnostics and checkout for the Franklin app.
"""
from dotenv import load_dotenv
load_dotenv()

import logging
import os
import sys
from pathlib import Path

import stripe
from alembic import command
from alembic.config import Config

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

stripe.api_key = os.getenv("STRIPE_SECRET_KEY")


def run_migrations() -> None:
    """Run Alembic migrations on startup. Fails startup if a migration fails."""
    project_root = Path(__file__).resolve().parent.parent
    alembic_ini = project_root / "alembic.ini"
    if not alembic_ini.exists():
        logger.warning("alembic.ini not found, skipping Alembic migrations")
        return
    if not os.getenv("DATABASE_URL"):
        logger.error("DATABASE_URL is not set. Alembic migrations will not run.")
        return
    try:
        alembic_cfg = Config(str(alembic_ini))
        alembic_cfg.set_main_option("script_location", str(project_root / "alembic"))
        command.upgrade(alembic_cfg, "head")
        logger.info("Alembic migrations completed successfully")
    except Exception as e:
        logger.exception("Alembic migration failed: %s", e)
        raise


from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from franklin.api.routes import functions, rest
from franklin.core.cors import error_response
from franklin.db.base import Base
from franklin.db.session import engine
# Import all models to ensure they're registered with Base
from franklin.models import StripeCustomer, StripeSubscription  # noqa: F401

app = FastAPI(title="Franklin Billing")


@app.on_event("startup")
async def startup_event():
    """Create tables, then run Alembic migrations (the view lives in a migration)."""
    logger.info("🔄 Creating database tables...")
    Base.metadata.create_all(bind=engine)
    run_migrations()
    if not stripe.api_key:
        logger.warning("⚠️ STRIPE_SECRET_KEY is not set; Stripe calls will fail")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Every error leaves as {"error": message} with CORS headers."""
    response = error_response(str(exc.detail), exc.status_code)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info("Rejected request body on %s: %s", request.url.path, exc.errors())
    return error_response("Invalid request body", 400)


@app.get("/health")
def health():
    return {"ok": True}


app.include_router(functions.router, prefix="/functions/v1", tags=["Functions"])
app.include_router(rest.router, prefix="/api/stripe", tags=["Billing"])
