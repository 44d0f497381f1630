"""
pkgretire API - crate retirement endpoints.
"""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI

from pkgretire import __version__
from pkgretire.api.errors import install_error_handlers
from pkgretire.api.routes import crates
from pkgretire.config.settings import configure_logging, get_settings
from pkgretire.core.di.bootstrap import bootstrap_dependencies
from pkgretire.core.di.container import Container


def create_app(container: Optional[Container] = None) -> FastAPI:
    app = FastAPI(
        title="pkgretire API",
        description="Retire (delete) published crates and schedule downstream cleanup",
        version=__version__,
    )
    app.state.container = container
    install_error_handlers(app)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "version": __version__}

    app.include_router(crates.router, prefix="/api", tags=["Crates"])

    @app.on_event("startup")
    async def _startup_container():
        if app.state.container is None:
            settings = get_settings()
            configure_logging(settings.logging)
            app.state.container = bootstrap_dependencies(settings)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
