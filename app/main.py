"""
BotLab v1.0 - Main Application
FastAPI app. Mounts routers, CORS, serves the web builder if present.
Database initialization and demo data seeding on startup.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.responses import FileResponse

from app.config import CORS_ORIGINS, LOG_LEVEL, BASE_DIR, SEED_DEMO_DATA
from app.database import init_db, SessionLocal
from app.models import Learner

logger = logging.getLogger("botlab")

VERSION = "1.0.0"


# ─── Lifespan (startup/shutdown) ─────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: init DB + seed demo data. Shutdown: cleanup."""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    logger.info("Initializing database...")
    init_db()

    if SEED_DEMO_DATA:
        db = SessionLocal()
        try:
            _seed_demo_data(db)
        finally:
            db.close()

    logger.info(f"BotLab v{VERSION} ready")
    yield
    logger.info("Shutting down")


def _seed_demo_data(db):
    """Default tribes plus a test learner for local development."""
    from app.community.tribes import seed_tribes

    added = seed_tribes(db)
    if added:
        logger.info(f"Seeded {added} tribes")

    if db.query(Learner).count() == 0:
        db.add(Learner(name="Amani", pin="1234", age_group="8-10", avatar="robot"))
        db.commit()
        logger.info("Test learner created (PIN: 1234)")


# ─── App ─────────────────────────────────────────────────────────────────────

app = FastAPI(
    title="BotLab",
    description="Chatbot builder and AI lessons for young learners",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
from app.routers import auth, bots, learning, tribes, assistant
app.include_router(auth.router)
app.include_router(bots.router)
app.include_router(learning.router)
app.include_router(tribes.router)
app.include_router(assistant.router)

# Serve web UI
web_dir = BASE_DIR / "web"
static_dir = web_dir / "static"
if web_dir.exists():
    if static_dir.exists():
        app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

    @app.get("/")
    async def serve_builder():
        return FileResponse(str(web_dir / "index.html"))


@app.get("/health")
@app.get("/healthz")
async def health():
    return {"status": "ok", "version": VERSION}


@app.get("/ping")
async def ping():
    return {"status": "awake"}
