#!/usr/bin/env python3
"""Trigger a generation run through the HTTP endpoint.

Reads API_SECRET from the environment (or .env) and calls
``/api/generate-content`` for one series or one batch.

Usage:
    # Batch 1 against a local server
    python scripts/trigger_generation.py --local 1

    # One series against the deployed service
    python scripts/trigger_generation.py 550e8400-e29b-41d4-a716-446655440000
"""

import argparse
import json
import logging
import os
import sys
import uuid
from typing import Any

import httpx
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

LOCAL_BASE_URL = "http://localhost:8000"
DEFAULT_REMOTE_BASE_URL = "https://shadowcast.example.com"

# Generation of a full batch can run up to the ten-minute ceiling
REQUEST_TIMEOUT_SECONDS = 660.0


def build_payload(target: str) -> dict[str, Any]:
    """Turn a CLI target into a request body.

    Args:
        target: Series UUID or batch number

    Returns:
        ``{"series_ids": [...]}`` or ``{"batch": n}``

    Raises:
        ValueError: If target is neither a UUID nor an integer
    """
    try:
        return {"series_ids": [str(uuid.UUID(target))]}
    except ValueError:
        pass
    try:
        return {"batch": int(target)}
    except ValueError as e:
        raise ValueError(f"Expected a series id (UUID) or batch number, got {target!r}") from e


def trigger(base_url: str, api_secret: str, payload: dict[str, Any]) -> httpx.Response:
    """POST the payload to the trigger endpoint."""
    url = f"{base_url.rstrip('/')}/api/generate-content"
    logger.info(f"Calling {url} with {payload}")
    return httpx.post(
        url,
        json=payload,
        headers={"x-api-secret": api_secret},
        timeout=REQUEST_TIMEOUT_SECONDS,
    )


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Trigger lesson generation for a series or batch",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/trigger_generation.py --local 1
  python scripts/trigger_generation.py 550e8400-e29b-41d4-a716-446655440000
        """,
    )
    parser.add_argument("target", help="Series id (UUID) or batch number")
    parser.add_argument(
        "--local",
        action="store_true",
        help=f"Call the local server ({LOCAL_BASE_URL})",
    )
    parser.add_argument(
        "--base-url",
        default=os.environ.get("SHADOWCAST_BASE_URL", DEFAULT_REMOTE_BASE_URL),
        help="Remote base URL (default: $SHADOWCAST_BASE_URL)",
    )
    args = parser.parse_args()

    api_secret = os.environ.get("API_SECRET")
    if not api_secret:
        logger.error("API_SECRET is not set (environment or .env)")
        sys.exit(1)

    try:
        payload = build_payload(args.target)
    except ValueError as e:
        logger.error(str(e))
        sys.exit(2)

    base_url = LOCAL_BASE_URL if args.local else args.base_url
    try:
        response = trigger(base_url, api_secret, payload)
    except httpx.HTTPError as e:
        logger.error(f"Request failed: {e}")
        sys.exit(1)

    try:
        body = response.json()
    except ValueError:
        body = response.text
    print(json.dumps(body, indent=2) if not isinstance(body, str) else body)

    if response.status_code != 200:
        sys.exit(1)


if __name__ == "__main__":
    main()
