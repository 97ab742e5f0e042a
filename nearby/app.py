from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Query, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .auth.config import DEFAULT_AUTH_CONFIG
from .auth.dependencies import require_user
from .auth.models import CredentialsRequest
from .auth.sessions import SessionGate
from .auth.users import CredentialStore
from .discovery.config import CATEGORIES, DEFAULT_DISCOVERY_CONFIG
from .discovery.geocoder import Geocoder
from .discovery.models import SearchQuery, SearchResult, SortKey, SuggestResponse
from .discovery.pipeline import DiscoveryPipeline
from .discovery.poi_provider import POIProvider
from .errors import NearbyError

logger = logging.getLogger(__name__)

app = FastAPI(title="Nearby Connect API", version="1.0.0")

credential_store = CredentialStore(DEFAULT_AUTH_CONFIG)
session_gate = SessionGate(DEFAULT_AUTH_CONFIG)
pipeline = DiscoveryPipeline(
    Geocoder(DEFAULT_DISCOVERY_CONFIG),
    POIProvider(DEFAULT_DISCOVERY_CONFIG),
    DEFAULT_DISCOVERY_CONFIG,
)

current_user = require_user(session_gate)


# ── Error rendering ──────────────────────────────────────────────────────


@app.exception_handler(NearbyError)
async def nearby_error_handler(request: Request, exc: NearbyError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "fields": jsonable_encoder(exc.errors())},
    )


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    return {
        "categories": CATEGORIES,
        "sort_keys": [key.value for key in SortKey],
        "anchor": pipeline.anchor.model_dump(),
    }


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/api/register", status_code=201)
def register(body: CredentialsRequest) -> dict:
    try:
        credential_store.register(body.email, body.password)
    except NearbyError:
        raise
    except Exception:
        logger.exception("Registration failed")
        raise NearbyError("Server error")
    return {"status": "ok"}


@app.post("/api/login")
def login(body: CredentialsRequest, response: Response) -> dict:
    try:
        account = credential_store.login(body.email, body.password)
    except NearbyError:
        raise
    except Exception:
        logger.exception("Login failed")
        raise NearbyError("Internal error")

    session_gate.attach(response, session_gate.issue(account.id))
    logger.info("Issued session for %s", account.email)
    return {"status": "ok"}


@app.get("/api/verify")
def verify(user_id: str = Depends(current_user)) -> dict:
    return {"status": "ok", "userId": user_id}


@app.post("/api/logout")
def logout(response: Response) -> dict:
    session_gate.revoke(response)
    return {"status": "logged out"}


# ── Discovery endpoints ──────────────────────────────────────────────────


@app.get("/api/suggest", response_model=SuggestResponse)
async def suggest(
    q: str = Query(default="", max_length=200),
    user_id: str = Depends(current_user),
) -> SuggestResponse:
    names = await pipeline.suggest(user_id, q)
    return SuggestResponse(suggestions=list(names))


@app.post("/api/search", response_model=SearchResult)
async def search(
    body: SearchQuery,
    user_id: str = Depends(current_user),
) -> SearchResult:
    return await pipeline.run(user_id, body)


@app.get("/api/places", response_model=SearchResult)
async def places(
    sort: SortKey = SortKey.rating,
    user_id: str = Depends(current_user),
) -> SearchResult:
    result = pipeline.resort(user_id, sort)
    if result is None:
        return SearchResult(status="", city="", category="", sort=sort, total=0, places=[])
    return result
