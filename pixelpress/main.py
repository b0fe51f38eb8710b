"""Main FastAPI application."""

import logging

from fastapi import FastAPI, Request

from pixelpress import __version__
from pixelpress.config import config
from pixelpress.logging_config import configure_logging

configure_logging(debug=config.DEBUG)


app = FastAPI(
    title="Pixelpress",
    description="Resize images to pixel bounds or a target file size",
    version=__version__,
)


access_logger = logging.getLogger("pixelpress.access")


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log incoming requests similar to the access log."""

    response = await call_next(request)
    client_host = "-"
    if request.client is not None:
        client_host = request.client.host or "-"

    access_logger.info(
        '%s - "%s %s" %s',
        client_host,
        request.method,
        request.url.path,
        response.status_code,
    )
    return response


# Health check endpoint
@app.get("/healthz")
async def healthz() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


# Import routes
from pixelpress.routes import resize  # noqa: E402

app.include_router(resize.router)
