"""
Daily job completing missions whose closure proposal went unanswered for 3 days.

Meant to be run by cron:
    0 3 * * * cd /srv/shieldmate && python scripts/enforce_mission_closure.py
"""

import sys
import os
import asyncio

# Add project root to path to allow imports
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from shieldmate.services.closure import run_enforcement_sweep  # noqa: E402
from shieldmate.utils.logger import logger, setup_logging  # noqa: E402


def run_sweep() -> int:
    """
    Run one closure sweep against the configured database.

    Returns:
        int: Number of missions completed.
    """
    setup_logging()
    logger.info("Starting mission closure sweep...")

    try:
        closed_ids = asyncio.run(run_enforcement_sweep())
    except Exception:
        logger.exception("A critical error occurred during the closure sweep")
        sys.exit(1)

    logger.info(f"Mission closure sweep completed: {len(closed_ids)} mission(s) closed.")
    return len(closed_ids)


if __name__ == "__main__":
    run_sweep()
