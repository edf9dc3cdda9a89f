"""
Run one forum service.

Usage:
  python -m forum.main posts [--host 0.0.0.0] [--port 3000]
"""
from __future__ import annotations

import argparse
import logging

import uvicorn

from forum.app import create_app
from forum.core.config import get_settings
from forum.core.log import configure_logging
from forum.domain.entities import ENTITIES

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()
    ap = argparse.ArgumentParser(description="Run a forum microservice")
    ap.add_argument("entity", choices=sorted(ENTITIES), help="which service to run")
    ap.add_argument("--host", default="0.0.0.0")
    ap.add_argument("--port", type=int, default=settings.port)
    args = ap.parse_args()

    configure_logging(settings.log_level)
    app = create_app(args.entity, settings=settings)
    logger.info("%s starting on port %d", ENTITIES[args.entity].service_name, args.port)
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()
