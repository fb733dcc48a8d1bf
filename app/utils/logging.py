import logging
import sys


def setup_logging(level: str | int = "INFO") -> None:
    """Attach one stdout handler to the root logger and set its level.

    ``level`` is a level name in any case or a number; unknown names fall
    back to INFO.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
        root.addHandler(handler)
    root.setLevel(level)
