"""Application entry point."""

from __future__ import annotations

import logging
import os

from config import load_config
from core import setup_logger
from web import create_app


def main() -> None:
    """Load configuration and serve the admin API."""
    config = load_config()

    logger = setup_logger(
        level=logging.DEBUG if config.debug else logging.INFO,
        log_file=os.path.join(config.log_folder, "backoffice.log"),
        colored=True,
    )

    app = create_app(config)
    logger.info(
        "Starting back-office on %s:%s (%s)",
        config.web_host, config.web_port, config.environment,
    )
    app.run(host=config.web_host, port=config.web_port, debug=config.debug)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        logging.getLogger("backoffice").info("Application stopped by user")
    except Exception as e:
        logging.getLogger("backoffice").error(f"Application failed: {e}", exc_info=True)
        raise
