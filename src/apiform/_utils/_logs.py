import logging
import sys

LOGGER_NAME = "apiform"

logger = logging.getLogger(LOGGER_NAME)


def setup_logging(should_debug: bool = False) -> None:
    """Attach a stream handler to the ``apiform`` logger.

    Calling it again only adjusts the level, so clients created repeatedly
    do not stack handlers.
    """
    level = logging.DEBUG if should_debug else logging.WARNING
    logger.setLevel(level)

    if not any(getattr(h, "_apiform_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
        handler._apiform_handler = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(level)
