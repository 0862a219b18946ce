import logging


class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    FG_RED = "\033[31m"
    FG_GREEN = "\033[32m"
    FG_YELLOW = "\033[33m"
    FG_CYAN = "\033[36m"


class ColorFormatter(logging.Formatter):
    COLOR_MAP = {
        logging.DEBUG: Colors.FG_CYAN,
        logging.INFO: Colors.FG_GREEN,
        logging.WARNING: Colors.FG_YELLOW,
        logging.ERROR: Colors.FG_RED,
        logging.CRITICAL: Colors.FG_RED + Colors.BOLD,
    }

    def format(self, record):
        color = self.COLOR_MAP.get(record.levelno, Colors.RESET)
        message = super().format(record)
        return f"{color}{message}{Colors.RESET}"


def setup_logger(name="idxmirror", level=logging.INFO):
    logger = logging.getLogger(name)
    logger.setLevel(level)
    # Only the first call configures the handler; later calls reuse it
    if not logger.handlers:
        ch = logging.StreamHandler()
        ch.setLevel(logging.DEBUG)
        ch.setFormatter(ColorFormatter("%(message)s"))
        logger.addHandler(ch)
    return logger


def set_level(level: int, name: str = "idxmirror") -> None:
    """Change verbosity of an already configured logger (used by ``--verbose``)."""
    logging.getLogger(name).setLevel(level)
