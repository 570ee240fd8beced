# capacity_engine/run_api.py
"""Run the capacity monitoring API."""

import logging

import uvicorn

from capacity_engine.api.main import app
from capacity_engine.container import get_monitor_service

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

HOST = "0.0.0.0"
PORT = 8000


def main():
    """Main entry point."""
    config = get_monitor_service().config

    logger.info("=" * 80)
    logger.info("🚀 CAPACITY ENGINE API")
    logger.info("=" * 80)
    logger.info(f"Node cache TTL: {config.cache_ttl_seconds}s")
    logger.info(f"Full update interval: {config.full_update_interval_seconds}s")
    logger.info(f"Memory per workload: {config.memory_per_workload_mb}MB")
    logger.info(f"📍 Listening on {HOST}:{PORT}")
    logger.info("=" * 80)

    uvicorn.run(
        app,
        host=HOST,
        port=PORT,
        log_level="info"
    )


if __name__ == "__main__":
    main()
