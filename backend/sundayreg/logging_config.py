import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging once for the API process."""
    root = logging.getLogger()
    root.setLevel(level)

    # uvicorn --reload imports twice; don't stack handlers
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(handler)

    # SQL echo is far too chatty at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
