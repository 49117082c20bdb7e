"""Process entry point — `python -m reviewhub` serves the API with uvicorn."""

import uvicorn

from reviewhub.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "reviewhub.main:app",
        host=settings.http_host,
        port=settings.http_port,
        log_config=None,
        timeout_graceful_shutdown=int(settings.shutdown_timeout_seconds),
    )


if __name__ == "__main__":
    main()
