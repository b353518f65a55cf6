"""Serve the connector on the configured local port: ``python -m betterpaste``."""

import uvicorn

from betterpaste.config import load_settings
from betterpaste.main import app


def main() -> None:
    settings = load_settings()
    uvicorn.run(app, host="127.0.0.1", port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
