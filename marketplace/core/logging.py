import logging


def setup_logging(level: str = "INFO", *, debug: bool = False) -> None:
    """
    Configure the root logger once per process.

    Debug mode forces DEBUG regardless of `level`.
    """
    root = logging.getLogger()
    if root.handlers:
        # uvicorn or pytest got there first
        root.setLevel(logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO))
        return

    logging.basicConfig(
        level=logging.DEBUG if debug else getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
