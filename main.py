import argparse
import logging
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

import sys
from pathlib import Path

# Add project root to path for package imports
base_dir = Path(__file__).parent
sys.path.insert(0, str(base_dir))

from db.database import init_db
from config import load_config, configure_logging
from routes import progress, stats, mastery, recitations, attendance, cycles, users  # Import routers
from utils.validation import InvalidInputError

logger = logging.getLogger(__name__)


# First-run init
@asynccontextmanager
async def lifespan(app: FastAPI):
    config = load_config()  # Ensures config exists
    configure_logging(config)
    init_db()
    yield


app = FastAPI(
    title="HifzTrack",
    description="Verse coverage, mastery and attendance tracking for study circles",
    lifespan=lifespan,
)

# Include routers
app.include_router(progress.router, prefix="/progress", tags=["progress"])
app.include_router(stats.router, prefix="/stats", tags=["stats"])
app.include_router(mastery.router, prefix="/mastery", tags=["mastery"])
app.include_router(recitations.router, prefix="/recitations", tags=["recitations"])
app.include_router(attendance.router, prefix="/attendance", tags=["attendance"])
app.include_router(cycles.router, prefix="/cycles", tags=["cycles"])
app.include_router(users.router, prefix="/users", tags=["users"])


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    logger.info("Rejected input on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="HifzTrack App")
    parser.add_argument("--init", action="store_true", help="Initialize DB and config")
    parser.add_argument("--dev", action="store_true", help="Run in dev mode with reload")
    parser.add_argument("--port", type=int, default=8000, help="Port to listen on")
    args = parser.parse_args()
    config = load_config()
    log_level = configure_logging(config)
    if args.init:
        init_db()
        print("DB initialized and config copied to ~/.hifztrack/")
        sys.exit(0)
    uvicorn.run("main:app", host="127.0.0.1", port=args.port, reload=args.dev, log_level=log_level)
