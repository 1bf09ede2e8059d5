import uvicorn

from gateway.core.app_factory import create_app
from gateway.core.config import settings
from gateway.core.logging import configure_logging

configure_logging(settings.log)

app = create_app(settings)


def run() -> None:
    """Serve the gateway until SIGINT/SIGTERM, then drain in-flight requests."""
    uvicorn.run(
        app,
        host=settings.server.host,
        port=settings.server.port,
        timeout_keep_alive=settings.server.keep_alive_seconds,
        timeout_graceful_shutdown=settings.server.graceful_shutdown_seconds,
        log_config=None,
    )


if __name__ == "__main__":
    run()
