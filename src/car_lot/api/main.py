"""FastAPI application factory and configuration."""

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from car_lot import __version__
from car_lot.api.routes import admin, listings, seller
from car_lot.config import load_settings
from car_lot.models.pydantic_models import Settings
from car_lot.storage.photo_store import PhotoStore


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings. Loaded from config/settings.yaml if None.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or load_settings()
    photo_store = PhotoStore.from_settings(settings)
    photo_store.ensure_dirs()

    app = FastAPI(
        title="car-lot API",
        description="Vehicle listing moderation and financing applications",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.photo_store = photo_store

    # Committed photos only; staging is never served. An absolute
    # public_photo_url means a CDN or proxy serves them instead.
    if settings.public_photo_url.startswith("/"):
        app.mount(
            settings.public_photo_url.rstrip("/"),
            StaticFiles(directory=str(photo_store.public_dir)),
            name="photos",
        )

    app.include_router(listings.router, prefix="/api/listings", tags=["listings"])
    app.include_router(seller.router, prefix="/api/me", tags=["seller"])
    app.include_router(admin.router, prefix="/api/admin/listings", tags=["admin"])

    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app
