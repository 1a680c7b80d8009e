import uvicorn

from app.core.app_factory import create_app
from app.core.config import settings

app = create_app()


def run() -> None:
    """Serve the app with uvicorn.

    On SIGTERM/SIGINT uvicorn stops accepting connections, lets in-flight
    requests finish (bounded by the graceful shutdown timeout) and then runs
    the lifespan shutdown.
    """
    uvicorn.run(
        app,
        host=settings.app.host,
        port=settings.app.port,
        timeout_graceful_shutdown=settings.app.graceful_shutdown_timeout_seconds,
        log_config=None,
    )


if __name__ == "__main__":
    run()
