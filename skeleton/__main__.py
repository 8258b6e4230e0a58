import logging
import sys

import uvicorn

from skeleton.app import create_app
from skeleton.core.config import load_settings
from skeleton.core.exceptions import ConfigError
from skeleton.core.logger import configure_logging

logger = logging.getLogger("skeleton")


def main() -> None:
    configure_logging()

    try:
        settings = load_settings()
    except ConfigError as e:
        logger.critical(e.message)
        sys.exit(1)

    configure_logging(settings.LOG_LEVEL)

    try:
        app = create_app(settings)
    except Exception as e:
        logger.critical(f"failed to connect database: {e}")
        sys.exit(1)

    try:
        uvicorn.run(app, host=settings.host, port=settings.port_number, lifespan="on", log_config=None)
    except Exception as e:
        logger.critical(f"failed to start server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
