"""Entry point for the Pixelpress HTTP server."""

import uvicorn

from pixelpress.config import config


def main() -> None:
    """Serve the resize API with uvicorn.

    Uvicorn's own access log is off; the app middleware already writes one
    line per request to ``pixelpress.access``.
    """
    uvicorn.run(
        "pixelpress.main:app",
        host=config.BIND_HOST,
        port=config.BIND_PORT,
        access_log=False,
        reload=False,
    )


if __name__ == "__main__":
    main()
