"""
Run the TimeKiosk server.

Start with:  python serve.py
Serves HTTPS when SSL_CERTFILE and SSL_KEYFILE point at existing files
(e.g. certificates obtained with certbot), plain HTTP otherwise.
"""
import logging
import os
import sys

import uvicorn

# Add backend directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import load_config  # noqa: E402

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    config = load_config()
    options = {"host": config.host, "port": config.port, "log_level": config.log_level.lower()}

    if config.tls_enabled:
        logger.info(f"Serving HTTPS on {config.host}:{config.port}")
        options.update(ssl_certfile=config.ssl_certfile, ssl_keyfile=config.ssl_keyfile)
    else:
        if config.ssl_certfile or config.ssl_keyfile:
            logger.warning("TLS certificate or key not found, falling back to HTTP")
        logger.info(f"Serving HTTP on {config.host}:{config.port}")

    uvicorn.run("app:app", reload=False, **options)


if __name__ == "__main__":
    main()
