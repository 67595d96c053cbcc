import logging

_FORMAT = "[pydummy] %(levelname)s: %(message)s"


def configure_logger(level: int | str = logging.WARNING, name: str = "pydummy") -> logging.Logger:
    """
    Attach one stderr handler to the 'pydummy' logger (idempotent), set its
    level and return the logger called ``name``. ``level`` may be a number or
    a level name such as "DEBUG".
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    root = logging.getLogger("pydummy")
    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
    root.setLevel(level)
    return logging.getLogger(name)
