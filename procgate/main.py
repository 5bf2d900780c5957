"""Main module entrypoint for local runtime execution.

This module validates startup configuration and launches the FastAPI service.
"""

import argparse

import uvicorn

from procgate.bootstrap import bootstrap_create_application, bootstrap_create_engine
from procgate.config import config_configure_logging, config_load_settings
from procgate.db import db_ensure_schema


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
    """

    argument_parser = argparse.ArgumentParser(description="Procgate runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "init-schema"),
        help="Runtime command: `api` starts server, `init-schema` creates the job and audit tables",
        type=str,
    )
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    config_configure_logging(settings.log_level)

    if parsed_arguments.command == "init-schema":
        engine = bootstrap_create_engine(settings)
        try:
            db_ensure_schema(engine)
        finally:
            engine.dispose()
        return

    application = bootstrap_create_application(settings)
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
        timeout_graceful_shutdown=settings.shutdown_grace_seconds,
    )


if __name__ == "__main__":
    main()
