"""
Survey Backend — Server Entrypoint
===================================

What:  Starts uvicorn with the configured app and owns the process exit code.
Who:   `python -m app` or the `survey-backend` console script.

Process lifecycle:
    1. Configure logging; a missing DATABASE_URL is logged and exits 1
    2. Serve; the lifespan connects to the store, a failure aborts startup → exit 1
    3. SIGTERM / SIGINT: uvicorn closes the listening socket and drains open
       connections, then the lifespan closes the pool → exit 0, or 1 if
       closing failed
    4. Any unhandled failure reported by the event loop is logged and the
       process terminates at once with code 1
"""

import asyncio
import contextlib
import logging
import os
import signal
import sys
import threading
from typing import Any, Dict, Generator, Optional

import uvicorn

from app.config import Settings, settings as default_settings
from app.main import create_app, setup_logging

logger = logging.getLogger(__name__)

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class GracefulServer(uvicorn.Server):
    """
    uvicorn server whose exit code is decided by run(), not by the signal.

    uvicorn re-raises a captured SIGTERM/SIGINT once it has shut down, which
    kills the process with the signal's default action before run() can
    report a failed shutdown. Here the signal only requests the shutdown.
    """

    @contextlib.contextmanager
    def capture_signals(self) -> Generator[None, None, None]:
        if threading.current_thread() is not threading.main_thread():
            yield
            return
        original = {sig: signal.signal(sig, self.handle_exit) for sig in HANDLED_SIGNALS}
        try:
            yield
        finally:
            for sig, handler in original.items():
                signal.signal(sig, handler)


def handle_unhandled_error(loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
    """
    Event-loop exception handler: log and terminate immediately.

    A task failing with nobody awaiting it leaves the process in an unknown
    state, so no attempt is made to keep serving.
    """
    exc = context.get("exception")
    logger.critical(
        "Unhandled asynchronous failure: %s",
        context.get("message", "unknown error"),
        exc_info=(type(exc), exc, exc.__traceback__) if exc is not None else None,
    )
    logging.shutdown()
    os._exit(1)


async def serve(server: uvicorn.Server) -> None:
    asyncio.get_running_loop().set_exception_handler(handle_unhandled_error)
    await server.serve()


def run(settings: Optional[Settings] = None) -> None:
    """Run the API until a termination signal arrives, then exit."""
    settings = settings or default_settings
    setup_logging(settings.log_level)

    missing = settings.missing_required()
    if missing:
        logger.critical("Missing required configuration: %s", ", ".join(missing))
        sys.exit(1)

    app = create_app(settings)
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None,
        proxy_headers=True,
    )
    server = GracefulServer(config)

    asyncio.run(serve(server))

    if not server.started:
        logger.critical("Server did not start; exiting")
        sys.exit(1)
    if getattr(app.state, "shutdown_failed", False):
        logger.critical("Shutdown did not complete cleanly; exiting")
        sys.exit(1)
    logger.info("Server stopped cleanly")


if __name__ == "__main__":
    run()
