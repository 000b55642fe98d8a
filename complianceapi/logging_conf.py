import logging
import sys

from complianceapi.config import config


def configure_logging() -> None:
    """Route application and uvicorn logs to a single stdout handler."""
    logging.basicConfig(
        format="%(asctime)s %(levelname)-4s %(name)s : %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        level=config.LOG_LEVEL.upper(),
        force=True,
    )

    for name in ["uvicorn", "uvicorn.error", "fastapi"]:
        logging.getLogger(name).handlers.clear()
        logging.getLogger(name).propagate = True

    # bcrypt backend version probing is noisy
    logging.getLogger("passlib").setLevel(logging.ERROR)
