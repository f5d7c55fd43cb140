"""FastAPI server exposing the interaction driver over HTTP.

One POST per action (or action list); every reply is the driver envelope
{"status": "success"|"error", "content": [...]}. Requests are executed one
at a time against the single driver session.
"""
import logging
import threading
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool

from browser_driver import Browser, create_browser
from driver_config import config

logging.basicConfig(
    level=config.server.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_app(driver: Optional[Browser] = None) -> FastAPI:
    """Build the app around ``driver``, created from config on startup when omitted."""
    lock = threading.Lock()
    holder: Dict[str, Browser] = {}

    def shutdown_driver() -> None:
        with lock:
            holder["driver"].shutdown()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        holder["driver"] = driver or create_browser()
        logger.info(f"Driver ready: {type(holder['driver']).__name__}")
        yield
        # The driver runs its own loop; drive it from a worker thread like /actions does.
        await run_in_threadpool(shutdown_driver)
        logger.info("Driver stopped")

    app = FastAPI(title="Browser Interaction Driver", version="1.0.0", lifespan=lifespan)

    @app.get("/ping")
    def ping():
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.post("/actions")
    def run_actions(body: Dict[str, Any]):
        """Execute {"action": {...}} or {"action": [...]} and return the envelope.

        Sync endpoint: FastAPI runs it in a worker thread, and the lock keeps
        one action in flight against the driver loop at a time.
        """
        with lock:
            return holder["driver"].run(body)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    # Use asyncio loop instead of uvloop to avoid conflict with nest_asyncio in browser code
    uvicorn.run(app, host=config.server.host, port=config.server.port, loop="asyncio")
