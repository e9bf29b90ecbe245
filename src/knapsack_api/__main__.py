"""Entry point for the demo API."""

import uvicorn

from mh_knapsack.config import DEFAULT_API_HOST, DEFAULT_API_PORT
from mh_knapsack.logs import configure_logging_from_env


def main():
    """Start the demo API server."""
    configure_logging_from_env()
    uvicorn.run("knapsack_api.api:app", host=DEFAULT_API_HOST, port=DEFAULT_API_PORT, reload=True)


if __name__ == "__main__":
    main()
