import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once per process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # Access logs are noisy for the websocket push loop.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
