"""
Entry Point for Deployment

Starts the Pizza Hunt API with uvicorn. Hosting platforms set the PORT
environment variable; locally the server listens on 3001.
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
    """Run the API server in this process."""
    import uvicorn
    from pizza_hunt.core.config import settings

    port = settings.server_port

    print("=" * 60)
    print("PIZZA HUNT API")
    print("=" * 60)
    print(f"Binding to 0.0.0.0:{port}")
    print(f"Docs: http://localhost:{port}/docs")
    print("=" * 60)

    uvicorn.run(
        "pizza_hunt.main:app",
        host="0.0.0.0",
        port=port,
        log_level="info",
        access_log=True
    )


if __name__ == "__main__":
    main()
