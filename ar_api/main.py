"""
Serve the AR dashboard API with uvicorn.

    AR_METRICS_HOST (default 127.0.0.1), AR_METRICS_PORT (default 8000)
"""

import os

import uvicorn

from ar_api.app import create_app

app = create_app()


def main() -> None:
    host = os.getenv("AR_METRICS_HOST", "127.0.0.1")
    port = int(os.getenv("AR_METRICS_PORT", "8000"))
    uvicorn.run("ar_api.main:app", host=host, port=port, log_level="info")


if __name__ == "__main__":
    main()
