"""
FastAPI web backend for the provably fair casino.
Nonce issuance, bet placement, settlement and proof verification.
"""
import asyncio
import logging
import sqlite3
from collections import defaultdict
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

import config
from auth import get_bearer_token
from database import Database, User, Bet
from game import (
    BetService,
    NonceRegistry,
    SettlementEngine,
    GameParameters,
    build_proof,
    verify_bet,
    get_game,
    get_games_by_category,
    list_games,
    CasinoError,
    ConflictError,
    InternalError,
    NonceError,
    NotFoundError,
    OwnershipError,
    ValidationError,
)
from game.catalog import CATEGORIES
from security import AuditLogger, AuditEventType, AuditSeverity
from utils import format_timestamp, truncate_nonce

# Logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Services
db = Database(config.DB_PATH, timeout=config.DB_TIMEOUT_SECONDS)
audit_logger = AuditLogger(config.DB_PATH)
nonce_registry = NonceRegistry(ttl_seconds=config.NONCE_TTL_SECONDS)
bet_service = BetService(db, nonce_registry)
settlement_engine = SettlementEngine(db, house_edge=config.HOUSE_EDGE)

# SECURITY: Simple in-memory rate limiter
# Format: {ip_address: {endpoint: [timestamp1, timestamp2, ...]}}
rate_limit_store = defaultdict(lambda: defaultdict(list))


def check_rate_limit(request: Request, endpoint: str, max_requests: int, window_seconds: int):
    """Simple rate limiter using IP address.

    Raises:
        HTTPException: If rate limit exceeded
    """
    client_ip = request.client.host if request.client else "unknown"
    now = datetime.now(timezone.utc)
    window_start = now - timedelta(seconds=window_seconds)

    requests = [ts for ts in rate_limit_store[client_ip][endpoint] if ts > window_start]
    rate_limit_store[client_ip][endpoint] = requests

    if len(requests) >= max_requests:
        audit_logger.log(
            event_type=AuditEventType.RATE_LIMIT_EXCEEDED,
            severity=AuditSeverity.WARNING,
            ip_address=client_ip,
            details=f"endpoint={endpoint}",
        )
        raise HTTPException(
            status_code=429,
            detail=f"Rate limit exceeded. Max {max_requests} requests per {window_seconds} seconds."
        )

    requests.append(now)


@asynccontextmanager
async def lifespan(app):
    """Run the nonce sweeper for the lifetime of the app."""
    sweeper = asyncio.create_task(nonce_registry.run_sweeper(config.NONCE_SWEEP_INTERVAL_SECONDS))
    try:
        yield
    finally:
        sweeper.cancel()
        try:
            await sweeper
        except asyncio.CancelledError:
            pass


# FastAPI app
app = FastAPI(title="Provably Fair Casino API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.exception_handler(CasinoError)
async def casino_error_handler(request: Request, exc: CasinoError):
    """Map the casino error taxonomy onto HTTP responses."""
    if isinstance(exc, InternalError):
        audit_logger.log(
            event_type=AuditEventType.INTERNAL_ERROR,
            severity=AuditSeverity.CRITICAL,
            ip_address=request.client.host if request.client else None,
            details=f"{request.method} {request.url.path}: {exc.message}",
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# ===== MODELS =====

class PlaceBetRequest(BaseModel):
    game_id: str
    bet_amount: float
    client_seed: str
    nonce: Optional[str] = None  # From POST /api/nonce; issued on the spot if omitted


class NonceResponse(BaseModel):
    nonce: str
    expires_in: int
    issued_at: str


class NonceStatusResponse(BaseModel):
    nonce: str
    valid: bool


class ProofResponse(BaseModel):
    """Inputs and derived values for independent verification."""
    nonce: str
    client_seed: str
    hash: str
    derived_number: int
    algorithm: str


class GameResponse(BaseModel):
    game_id: str
    name: str
    category: str
    rtp: float
    volatility: str
    min_bet: float
    max_bet: float
    lines: Optional[int] = None
    reels: Optional[int] = None


class BetResponse(BaseModel):
    bet_id: str
    user_id: int
    game_id: str
    game_name: str
    game_category: str
    bet_amount: float
    nonce: str
    client_seed: str
    status: str
    outcome: Optional[str]
    win_amount: Optional[float]
    rtp: float
    volatility: str
    min_bet: float
    max_bet: float
    proof: ProofResponse
    created_at: str
    settled_at: Optional[str]


class BetListResponse(BaseModel):
    bets: List[BetResponse]
    total: int
    limit: int
    offset: int


class VerifyResponse(BaseModel):
    bet_id: str
    status: str
    outcome: Optional[str]
    win_amount: Optional[float]
    proof: ProofResponse
    is_fair: bool
    message: str


class AuditEventResponse(BaseModel):
    event_type: str
    severity: str
    user_id: Optional[int]
    details: Optional[str]
    timestamp: str


class BetEventsResponse(BaseModel):
    bet_id: str
    events: List[AuditEventResponse]


# ===== HELPERS =====

def require_auth(request: Request) -> User:
    """Require authenticated user, raise 401 if not."""
    token = get_bearer_token(request.headers.get("Authorization"))
    user = db.get_user_by_session(token) if token else None
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated. Please login.")
    return user


def _game_for(bet: Bet) -> GameParameters:
    game = get_game(bet.game_id)
    if not game:
        raise NotFoundError("Game not found")
    return game


def _proof_response(bet: Bet) -> ProofResponse:
    return ProofResponse(**build_proof(bet.nonce, bet.client_seed).to_dict())


def bet_to_response(bet: Bet, game: GameParameters) -> BetResponse:
    """Bet fields plus game metadata and proof bundle."""
    return BetResponse(
        bet_id=bet.bet_id,
        user_id=bet.user_id,
        game_id=bet.game_id,
        game_name=game.name,
        game_category=game.category,
        bet_amount=bet.bet_amount,
        nonce=bet.nonce,
        client_seed=bet.client_seed,
        status=bet.status.value,
        outcome=bet.outcome.value if bet.outcome else None,
        win_amount=bet.win_amount,
        rtp=game.rtp,
        volatility=game.volatility.value,
        min_bet=game.min_bet,
        max_bet=game.max_bet,
        proof=_proof_response(bet),
        created_at=format_timestamp(bet.created_at),
        settled_at=format_timestamp(bet.settled_at),
    )


def _audit_denied(request: Request, user: User, bet_id: Optional[str], exc: CasinoError):
    audit_logger.log(
        event_type=AuditEventType.UNAUTHORIZED_ACCESS,
        severity=AuditSeverity.WARNING,
        user_id=user.user_id,
        ip_address=request.client.host if request.client else None,
        bet_id=bet_id,
        details=f"{request.method} {request.url.path}: {exc.message}",
    )


# ===== API ENDPOINTS =====

@app.get("/")
async def root():
    """API root."""
    return {
        "name": "Provably Fair Casino API",
        "version": "1.0.0",
        "status": "online"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "active_nonces": len(nonce_registry),
    }


@app.get("/db-check")
def db_check():
    """Database connectivity check with row counts."""
    try:
        counts = db.get_counts()
    except sqlite3.Error as e:
        logger.error(f"Database check failed: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"database": "error"})

    return {
        "database": "connected",
        "users": counts["users"],
        "games": len(list_games()),
        "bets": counts["bets"],
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# === NONCE ENDPOINTS ===

@app.post("/api/nonce")
def issue_nonce(http_request: Request) -> NonceResponse:
    """Issue a single-use server nonce for the next bet."""
    check_rate_limit(http_request, "issue_nonce", max_requests=30, window_seconds=60)

    nonce = nonce_registry.issue()
    audit_logger.log(
        event_type=AuditEventType.NONCE_ISSUED,
        ip_address=http_request.client.host if http_request.client else None,
        details=f"nonce={truncate_nonce(nonce.value)}",
    )

    return NonceResponse(
        nonce=nonce.value,
        expires_in=nonce.expires_in,
        issued_at=nonce.created_at.isoformat(),
    )


@app.get("/api/nonce/{nonce}")
def get_nonce_status(nonce: str) -> NonceStatusResponse:
    """Check whether a nonce is still live."""
    return NonceStatusResponse(nonce=nonce, valid=nonce_registry.validate(nonce))


# === GAME CATALOG ENDPOINTS ===

@app.get("/api/games")
def get_games(category: Optional[str] = None) -> List[GameResponse]:
    """List the game catalog, optionally by category."""
    if category:
        if category not in CATEGORIES:
            raise ValidationError(f"Unknown category: {category}")
        games = get_games_by_category(category)
    else:
        games = list_games()
    return [GameResponse(**game.to_dict()) for game in games]


@app.get("/api/games/{game_id}")
def get_game_details(game_id: str) -> GameResponse:
    """Get one game's parameters."""
    game = get_game(game_id)
    if not game:
        raise NotFoundError("Game not found")
    return GameResponse(**game.to_dict())


# === BET ENDPOINTS ===

@app.post("/api/bets/place", status_code=201)
def place_bet(request: PlaceBetRequest, http_request: Request) -> BetResponse:
    """Place a new PENDING bet bound to a server nonce and a client seed."""
    user = require_auth(http_request)
    check_rate_limit(http_request, "place_bet", max_requests=30, window_seconds=60)

    try:
        bet, game = bet_service.place_bet(
            user_id=user.user_id,
            game_id=request.game_id,
            bet_amount=request.bet_amount,
            client_seed=request.client_seed,
            nonce=request.nonce,
        )
    except NonceError as e:
        audit_logger.log(
            event_type=AuditEventType.NONCE_REJECTED,
            severity=AuditSeverity.WARNING,
            user_id=user.user_id,
            ip_address=http_request.client.host if http_request.client else None,
            details=e.message,
        )
        raise

    audit_logger.log(
        event_type=AuditEventType.BET_PLACED,
        user_id=user.user_id,
        bet_id=bet.bet_id,
        details=f"game={game.game_id} amount={bet.bet_amount}",
    )
    return bet_to_response(bet, game)


@app.get("/api/bets/user/{user_id}")
def list_user_bets(user_id: int, http_request: Request, status: Optional[str] = None,
                   limit: int = 20, offset: int = 0) -> BetListResponse:
    """Get a user's bet history, newest first. Users can only read their own."""
    user = require_auth(http_request)

    if user_id != user.user_id:
        exc = OwnershipError("Unauthorized")
        _audit_denied(http_request, user, None, exc)
        raise exc

    bets, total = bet_service.list_bets(user.user_id, status=status, limit=limit, offset=offset)

    return BetListResponse(
        bets=[bet_to_response(bet, _game_for(bet)) for bet in bets],
        total=total,
        limit=limit,
        offset=offset,
    )


@app.get("/api/bets/{bet_id}")
def get_bet(bet_id: str, http_request: Request) -> BetResponse:
    """Get bet details with proof data (available before and after settlement)."""
    user = require_auth(http_request)

    try:
        bet = bet_service.get_bet(bet_id, user.user_id)
    except OwnershipError as e:
        _audit_denied(http_request, user, bet_id, e)
        raise

    return bet_to_response(bet, _game_for(bet))


@app.post("/api/bets/{bet_id}/settle")
def settle_bet(bet_id: str, http_request: Request) -> BetResponse:
    """Settle a PENDING bet. Exactly one settlement per bet succeeds."""
    user = require_auth(http_request)

    try:
        bet = settlement_engine.settle(bet_id, user.user_id)
    except ConflictError:
        audit_logger.log(
            event_type=AuditEventType.SETTLEMENT_CONFLICT,
            severity=AuditSeverity.WARNING,
            user_id=user.user_id,
            bet_id=bet_id,
            details="Settlement attempted on a non-PENDING bet",
        )
        raise
    except OwnershipError as e:
        _audit_denied(http_request, user, bet_id, e)
        raise

    audit_logger.log(
        event_type=AuditEventType.BET_SETTLED,
        user_id=user.user_id,
        bet_id=bet.bet_id,
        details=f"outcome={bet.outcome.value} win_amount={bet.win_amount}",
    )
    return bet_to_response(bet, _game_for(bet))


@app.get("/api/bets/{bet_id}/verify")
def verify_bet_endpoint(bet_id: str, http_request: Request) -> VerifyResponse:
    """Recompute a bet's outcome from its nonce and client seed."""
    user = require_auth(http_request)
    bet = bet_service.get_bet(bet_id, user.user_id)
    game = _game_for(bet)

    is_fair = verify_bet(bet, game, settlement_engine.house_edge)
    if not bet.is_settled:
        message = "Bet is not settled yet"
    elif is_fair:
        message = "Bet result is provably fair!"
    else:
        message = "Bet result verification failed!"

    return VerifyResponse(
        bet_id=bet.bet_id,
        status=bet.status.value,
        outcome=bet.outcome.value if bet.outcome else None,
        win_amount=bet.win_amount,
        proof=_proof_response(bet),
        is_fair=is_fair,
        message=message,
    )


@app.get("/api/bets/{bet_id}/events")
def get_bet_events(bet_id: str, http_request: Request) -> BetEventsResponse:
    """Audit trail of a bet (placement, settlement, conflicts), for its owner."""
    user = require_auth(http_request)

    try:
        bet = bet_service.get_bet(bet_id, user.user_id)
    except OwnershipError as e:
        _audit_denied(http_request, user, bet_id, e)
        raise

    try:
        events = audit_logger.get_bet_events(bet.bet_id)
    except sqlite3.Error as e:
        logger.error(f"Failed to read audit trail for bet {bet_id}: {e}", exc_info=True)
        raise InternalError("Failed to read audit trail") from e

    return BetEventsResponse(
        bet_id=bet.bet_id,
        events=[AuditEventResponse(**event) for event in events],
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
