"""Run the HTTP server: ``python -m content_assistant``."""

import argparse
import logging

from dotenv import load_dotenv
import uvicorn

from content_assistant.api import create_app
from content_assistant.config import resolve_config

logger = logging.getLogger("content_assistant")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="content_assistant",
        description="Serve the content assistant over HTTP with SSE streaming",
    )
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=3000)
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["debug", "info", "warning", "error"],
    )
    parser.add_argument(
        "--env-file", default=".env", help="dotenv file loaded before start-up"
    )
    args = parser.parse_args(argv)

    load_dotenv(args.env_file)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = resolve_config()
    logger.info(
        "Starting on %s:%d (model=%s, real_api=%s)",
        args.host,
        args.port,
        settings.model,
        settings.use_real_api,
    )
    uvicorn.run(
        create_app(settings=settings),
        host=args.host,
        port=args.port,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
