"""Entrypoint: run the TraceGuard API server."""

import uvicorn

from traceguard.api.app import create_app
from traceguard.config.settings import Settings


def main() -> None:
    settings = Settings()
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
