"""
Container entrypoint for the PoolKeeper API.

Binds to HOST/PORT from the environment (default 0.0.0.0:8787) so hosting
platforms that inject PORT can run the service without a settings file.
"""
import os
import uvicorn

from poolkeeper.main import app


def main() -> None:
    port = int(os.environ.get("PORT", "8787"))
    uvicorn.run(app, host=os.environ.get("HOST", "0.0.0.0"), port=port)


if __name__ == "__main__":
    main()
