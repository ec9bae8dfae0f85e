"""CLI entry point for funcall-server.

This module provides the command-line interface for starting the server.
It can be invoked as `funcall-server` (via the script entry point) or
`python -m funcall_server`.
"""

import argparse
import logging
import sys

import uvicorn

from funcall_server import __version__, create_app
from funcall_server.config import FuncallServerSettings


def _init_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main() -> None:
    """Main entry point for the funcall-server CLI.

    Parses command-line arguments and starts the uvicorn server with the
    FastAPI application.
    """
    parser = argparse.ArgumentParser(
        prog="funcall-server",
        description="Chat server dispatching LLM function calls to Python capabilities",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"funcall-server {__version__}",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind the server to (default: 127.0.0.1, can be set via FUNCALL_HOST)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind the server to (default: 8000, can be set via FUNCALL_PORT)",
    )

    parser.add_argument(
        "--model-backend",
        type=str,
        default=None,
        choices=["openai", "ollama"],
        help="Model service backend (default: openai, can be set via FUNCALL_MODEL_BACKEND)",
    )

    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Model name (default: gpt-4o-mini, can be set via FUNCALL_MODEL)",
    )

    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Base directory holding functions/ and tools/ (default: ., can be set via FUNCALL_DATA_DIR)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO, can be set via FUNCALL_LOG_LEVEL)",
    )

    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development (uvicorn --reload)",
    )

    args = parser.parse_args()

    # Build settings, CLI args override environment variables
    settings_kwargs = {}
    if args.host is not None:
        settings_kwargs["host"] = args.host
    if args.port is not None:
        settings_kwargs["port"] = args.port
    if args.model_backend is not None:
        settings_kwargs["model_backend"] = args.model_backend
    if args.model is not None:
        settings_kwargs["model"] = args.model
    if args.data_dir is not None:
        settings_kwargs["data_dir"] = args.data_dir
    if args.log_level is not None:
        settings_kwargs["log_level"] = args.log_level

    settings = FuncallServerSettings(**settings_kwargs)
    _init_logging(settings.log_level)

    if args.reload:
        # Reload needs an import string; the worker rebuilds settings from the environment
        uvicorn.run(
            "funcall_server.app:create_app",
            factory=True,
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower(),
            reload=True,
        )
        return

    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    sys.exit(main())
