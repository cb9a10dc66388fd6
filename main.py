#!/usr/bin/env python3
"""Main entry point for SessionSentinel."""

import uvicorn

from session_sentinel.common.logging import get_logger
from session_sentinel.common.config import get_config

logger = get_logger(__name__)


def main():
    """Run the API server."""
    config = get_config()
    logger.info(f"SessionSentinel starting in {config.environment.value} mode")
    logger.info(f"Risk rules: {config.resolved_risk_rules_file}")
    uvicorn.run(
        "session_sentinel.api.gateway:app",
        host=config.api_host,
        port=config.api_port,
        log_level=config.log_level.value.lower(),
    )


if __name__ == "__main__":
    main()
