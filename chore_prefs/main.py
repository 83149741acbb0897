"""Main application entry point with FastAPI."""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, ValidationError, field_validator

from .catalog import load_chores, seed_chores
from .config import get_settings
from .database import check_database_health, dispose_engine, get_session_factory
from .errors import RemoteLookupError, RemoteWriteError
from .identity import IdentityResolver
from .preference_store import PreferenceStore, fill_defaults, validate_score
from .session import SAVE_ERROR_MESSAGE

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def validate_environment():
    """Validate all required environment variables on startup."""
    try:
        settings = get_settings()
        logger.info("Environment variables validated successfully")
        return settings
    except ValidationError as e:
        logger.error("ERROR: Missing or invalid environment variables:")
        logger.error(str(e))
        sys.exit(1)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown."""
    settings = validate_environment()
    logging.getLogger().setLevel(settings.log_level.upper())
    logger.info("Starting Chore Preferences...")

    if settings.seed_chore_names:
        seed_chores(settings.seed_chore_names)

    logger.info("Chore Preferences started successfully")

    yield

    logger.info("Shutting down Chore Preferences...")
    dispose_engine()
    logger.info("Chore Preferences shutdown complete")


# =============================================================================
# Dependencies
# =============================================================================


def get_identity_resolver() -> IdentityResolver:
    return IdentityResolver(get_session_factory())


def get_preference_store() -> PreferenceStore:
    return PreferenceStore(get_session_factory())


def get_catalog_loader():
    return lambda: load_chores(get_session_factory())


def get_health_check():
    return check_database_health


# =============================================================================
# Schemas
# =============================================================================


class ChoreOut(BaseModel):
    id: int
    name: str


class RoommateOut(BaseModel):
    id: int
    name: str


class PreferencesOut(BaseModel):
    roommate: RoommateOut | None
    scores: dict[int, int]


class PreferencesIn(BaseModel):
    scores: dict[int, int] = {}

    @field_validator("scores")
    @classmethod
    def check_scores(cls, v: dict[int, int]) -> dict[int, int]:
        for score in v.values():
            validate_score(score)
        return v


# =============================================================================
# App
# =============================================================================

app = FastAPI(
    title="Chore Preferences",
    description="Roommates rate household chores from 1 to 5",
    version=VERSION,
    lifespan=lifespan,
)


@app.get("/health")
def health_check(check=Depends(get_health_check)):
    """Health check endpoint.

    Verifies database connection and returns status.
    """
    if check():
        return {
            "status": "healthy",
            "database": "connected",
        }
    else:
        return {
            "status": "unhealthy",
            "database": "disconnected",
        }


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "name": "Chore Preferences",
        "status": "running",
        "version": VERSION,
    }


@app.get("/chores", response_model=list[ChoreOut])
def list_chores(catalog_loader=Depends(get_catalog_loader)):
    try:
        chores = catalog_loader()
    except RemoteLookupError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return [ChoreOut(id=chore.id, name=chore.name) for chore in chores]


def _require_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise HTTPException(status_code=422, detail="Roommate name is required")
    return name


@app.get("/roommates/{name}/preferences", response_model=PreferencesOut)
def get_preferences(
    name: str,
    resolver: IdentityResolver = Depends(get_identity_resolver),
    store: PreferenceStore = Depends(get_preference_store),
    catalog_loader=Depends(get_catalog_loader),
):
    """Return a roommate's scores with defaults filled for every chore.

    An unknown name is not an error: the roommate is null and every chore
    shows the default score.
    """
    name = _require_name(name)
    try:
        catalog = catalog_loader()
        roommate = resolver.resolve(name)
        scores = store.load_preferences(roommate.id if roommate else None)
    except RemoteLookupError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return PreferencesOut(
        roommate=RoommateOut(id=roommate.id, name=roommate.name) if roommate else None,
        scores=fill_defaults(catalog, scores),
    )


@app.put("/roommates/{name}/preferences", response_model=PreferencesOut)
def put_preferences(
    name: str,
    body: PreferencesIn,
    resolver: IdentityResolver = Depends(get_identity_resolver),
    store: PreferenceStore = Depends(get_preference_store),
    catalog_loader=Depends(get_catalog_loader),
):
    """Create the roommate if needed and save a score for every chore."""
    name = _require_name(name)
    try:
        catalog = catalog_loader()
    except RemoteLookupError as e:
        raise HTTPException(status_code=503, detail=str(e))

    known = {chore.id for chore in catalog}
    unknown = sorted(set(body.scores) - known)
    if unknown:
        raise HTTPException(status_code=422, detail=f"Unknown chore ids: {unknown}")

    try:
        roommate = resolver.get_or_create(name)
        store.save_preferences(roommate.id, catalog, body.scores)
    except RemoteWriteError as e:
        logger.error(f"Error saving preferences for '{name}': {e}")
        raise HTTPException(status_code=502, detail=SAVE_ERROR_MESSAGE)

    return PreferencesOut(
        roommate=RoommateOut(id=roommate.id, name=roommate.name),
        scores=fill_defaults(catalog, body.scores),
    )
