import uvicorn

from .config import get_settings
from .logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def main() -> None:
    settings = get_settings()
    setup_logging(log_level=settings.log_level, log_file=settings.log_file)
    logger.info("Starting Dead Zone relay on %s:%d", settings.host, settings.port)
    uvicorn.run("deadzone.app:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
