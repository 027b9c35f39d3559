"""Run the service with uvicorn: ``python -m app``."""

from __future__ import annotations

import uvicorn

from app.core.config import SETTINGS


def main() -> None:
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=SETTINGS.port,
        log_config=None,  # keep the handlers installed by setup_logging
    )


if __name__ == "__main__":
    main()
