"""
Entry point — start the LockIn companion service.

Usage:
    python -m lockin.main
    uvicorn lockin.api.app:app --host 127.0.0.1 --port 8766 --reload
"""

import logging

import uvicorn

from .config import config


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )


def main():
    configure_logging(config.log_level)
    uvicorn.run(
        "lockin.api.app:app",
        host=config.api_host,
        port=config.api_port,
        reload=False,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
