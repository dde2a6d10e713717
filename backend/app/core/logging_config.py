import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once at startup.

    Every module logs through logging.getLogger(__name__); this decides
    where those records go and how they look.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-request access and SQL echo lines are too noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
