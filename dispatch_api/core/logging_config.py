# dispatch_api/core/logging_config.py
import logging


def setup_logging(level: str = "INFO") -> None:
    """
    Configurar el root logger una sola vez.

    Si el root logger ya tiene handlers (uvicorn, pytest) no se toca.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)
