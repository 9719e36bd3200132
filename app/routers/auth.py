"""
BotLab v1.0 - Authentication Router
Learners sign in with a 4-digit PIN and get a JWT bearer token.

Wrong PINs are counted per PIN: after MAX_LOGIN_ATTEMPTS misses inside
LOGIN_LOCKOUT_MINUTES the PIN is paused. Messages are written for kids.
"""

import logging
from datetime import datetime, timezone, timedelta

import jwt
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session as DBSession

from app.config import JWT_SECRET, JWT_ALGORITHM, JWT_EXPIRY_HOURS, MAX_LOGIN_ATTEMPTS, LOGIN_LOCKOUT_MINUTES
from app.database import get_db
from app.models import Learner, LoginAttempt

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])

LEARNER_ROLE = "learner"


# ─── Request/Response Models ─────────────────────────────────────────────────

class LoginRequest(BaseModel):
    pin: str

class LearnerLoginResponse(BaseModel):
    learner_id: str
    name: str
    avatar: str
    token: str

class LearnerProfile(BaseModel):
    learner_id: str
    name: str
    avatar: str
    age_group: str
    preferred_language: str


# ─── Tokens ──────────────────────────────────────────────────────────────────

def create_token(learner_id: str, role: str = LEARNER_ROLE) -> str:
    issued = datetime.now(timezone.utc)
    return jwt.encode(
        {"sub": learner_id, "role": role, "iat": issued,
         "exp": issued + timedelta(hours=JWT_EXPIRY_HOURS)},
        JWT_SECRET,
        algorithm=JWT_ALGORITHM,
    )


def verify_token(token: str) -> dict:
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(401, "Your session ended. Please log in with your PIN again.")
    except jwt.InvalidTokenError:
        raise HTTPException(401, "Please log in with your PIN.")


def _bearer(request: Request) -> str:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(401, "Please log in with your PIN.")
    return token


def get_current_user(request: Request) -> dict:
    """FastAPI dependency: verified JWT claims."""
    return verify_token(_bearer(request))


def get_current_learner(
    claims: dict = Depends(get_current_user),
    db: DBSession = Depends(get_db),
) -> Learner:
    """FastAPI dependency: the Learner row behind a learner token."""
    if claims.get("role") != LEARNER_ROLE:
        raise HTTPException(403, "Learner access only")
    learner = db.query(Learner).filter(Learner.id == claims.get("sub")).first()
    if not learner:
        raise HTTPException(404, "Learner not found")
    return learner


# ─── Wrong-PIN Pause ─────────────────────────────────────────────────────────

def _recent_failures(db: DBSession, pin: str) -> int:
    # Stored timestamps are naive UTC on SQLite
    since = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(minutes=LOGIN_LOCKOUT_MINUTES)
    return (
        db.query(LoginAttempt)
        .filter(
            LoginAttempt.pin == pin,
            LoginAttempt.success.is_(False),
            LoginAttempt.attempted_at >= since,
        )
        .count()
    )


def _tries_left_message(tries_left: int) -> str:
    if tries_left <= 0:
        return f"Wrong PIN. Take a break and try again in {LOGIN_LOCKOUT_MINUTES} minutes."
    if tries_left == 1:
        return "Wrong PIN. 1 try left before a short break."
    return f"Wrong PIN. {tries_left} tries left before a short break."


# ─── Endpoints ───────────────────────────────────────────────────────────────

@router.post("/learner", response_model=LearnerLoginResponse)
def login_learner(req: LoginRequest, request: Request, db: DBSession = Depends(get_db)):
    ip = request.client.host if request.client else "unknown"
    failures = _recent_failures(db, req.pin)
    if failures >= MAX_LOGIN_ATTEMPTS:
        logger.warning(f"PIN login paused after {failures} misses from {ip}")
        raise HTTPException(
            429,
            f"Too many wrong PINs. Take a break and try again in {LOGIN_LOCKOUT_MINUTES} minutes.",
        )

    learner = db.query(Learner).filter(Learner.pin == req.pin).first()
    db.add(LoginAttempt(pin=req.pin, success=learner is not None, ip_address=ip))
    db.commit()

    if not learner:
        raise HTTPException(401, _tries_left_message(MAX_LOGIN_ATTEMPTS - failures - 1))

    logger.info(f"Learner {learner.id} logged in")
    return LearnerLoginResponse(
        learner_id=learner.id,
        name=learner.name,
        avatar=learner.avatar,
        token=create_token(learner.id),
    )


@router.get("/me", response_model=LearnerProfile)
def me(learner: Learner = Depends(get_current_learner)):
    return LearnerProfile(
        learner_id=learner.id,
        name=learner.name,
        avatar=learner.avatar,
        age_group=learner.age_group,
        preferred_language=learner.preferred_language,
    )
