"""Run the API server with `python -m poolkeeper`."""

import uvicorn

from poolkeeper.config.settings import get_settings
from poolkeeper.main import app


def main() -> None:
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
