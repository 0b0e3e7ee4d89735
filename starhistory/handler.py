"""
Event-driven entrypoint for star-history runs

Direct function invocation from a scheduler or serverless trigger; no HTTP
server logic.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from starhistory.exceptions import InvalidRepositoryIdentifierError, InvalidRequestError
from starhistory.jobs.star_history import parse_reference_instant, run_star_history

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def lambda_handler(event: Optional[Dict[str, Any]], context: Any) -> Dict[str, Any]:
    """
    Reconstruct and compare star histories for the requested repositories.

    Expected event payloads:
    - {"repositories": "facebook/react,vuejs/core"}
    - {"repositories": ["https://github.com/pallets/flask"], "now": "2024-06-01T00:00:00Z"}

    Args:
        event: Event payload with `repositories` and an optional ISO `now`
        context: Invocation context object (unused)

    Returns:
        Dictionary with statusCode and result, or statusCode and error
    """
    payload = event or {}
    repositories = payload.get("repositories")
    logger.info(f"Star history invoked for: {repositories}")

    try:
        if not repositories:
            raise InvalidRepositoryIdentifierError("No repositories requested")

        now = parse_reference_instant(payload.get("now"))
        result = asyncio.run(run_star_history(repositories, now=now))

        logger.info(f"Star history run finished: success={result.get('success')}")
        return {
            "statusCode": 200,
            "result": result,
        }

    except InvalidRequestError as e:
        logger.warning(f"Rejected star history request: {e}")
        return {
            "statusCode": 400,
            "error": str(e),
        }

    except Exception as e:
        logger.error(f"Star history execution failed: {e}", exc_info=True)
        return {
            "statusCode": 500,
            "error": str(e),
        }


# Allow local testing via `python -m starhistory.handler`
if __name__ == "__main__":
    print("=" * 60)
    print("Star History - Local Test")
    print("=" * 60)

    test_event = {"repositories": "pallets/flask,psf/requests"}
    print(f"\nTesting with event: {test_event}")
    print("-" * 60)

    result = lambda_handler(test_event, None)

    print("\nResult:")
    print({key: value for key, value in result.items() if key != "result"})
    print("=" * 60)
