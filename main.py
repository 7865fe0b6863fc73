"""
Entry Point for Cloud Server Deployment

Starts the ad wall API under uvicorn. Cloud hosts set the PORT
environment variable; everything else is read by adwall.core.config.
"""

import logging
import sys

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)


def main():
    """Run the FastAPI server in this process."""
    import uvicorn
    from adwall.core.config import settings
    from adwall.main import app

    port = settings.server_port
    logger.info(f"Starting ad wall API on 0.0.0.0:{port} ({settings.storage.backend} store)...")

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=port,
        log_level="info",
        access_log=True
    )


if __name__ == "__main__":
    main()
