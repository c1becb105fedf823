"""
Vendor Processor - store image deployment service

Receives integration events from the bus adapter and deploys each built
store image as a new container.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import Body, FastAPI, Request
from fastapi.concurrency import run_in_threadpool

from .config import config
from .core.logging_config import setup_logging
from .exceptions import register_exception_handlers
from .lifecycle import manage_lifespan

# Logger setup
setup_logging()
logger = logging.getLogger("vendor_processor.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with manage_lifespan(app, config):
        yield


app = FastAPI(title="Vendor Processor", lifespan=lifespan)
register_exception_handlers(app)


@app.get("/health")
async def health_check():
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.post("/integration-events/{event_name}")
async def receive_integration_event(
    event_name: str, request: Request, payload: Dict[str, Any] = Body(...)
):
    """
    Deliver one integration event to its subscribed handlers.

    A non-2xx response tells the bus adapter the delivery failed.
    """
    bus = request.app.state.event_bus
    # Handlers make blocking docker calls
    results = await run_in_threadpool(bus.dispatch, event_name, payload)
    return {"event": event_name, "results": results}


def run() -> None:
    import uvicorn

    host, _, port = config.UVICORN_BIND_ADDR.rpartition(":")
    uvicorn.run(app, host=host or "0.0.0.0", port=int(port), log_config=None)


if __name__ == "__main__":
    run()
