"""Application entry point.

Usage:
    # Development with auto-reload
    uvicorn dishes_api.main:app --reload

    # Installed console script
    dishes-api
"""

from dishes_api.core.config import get_settings
from dishes_api.factory import create_app


# Create the application instance
app = create_app()


def run() -> None:
    """Serve the application with uvicorn using the configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "dishes_api.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.is_development,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    run()
