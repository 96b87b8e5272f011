import logging


class CustomFormatter(logging.Formatter):
    grey = "\x1b[38;21m"
    yellow = "\x1b[33;21m"
    red = "\x1b[31;21m"
    bold_red = "\x1b[31;1m"
    reset = "\x1b[0m"
    format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s (%(filename)s:%(lineno)d)"

    FORMATS = {
        logging.DEBUG: grey + format_str + reset,
        logging.INFO: grey + format_str + reset,
        logging.WARNING: yellow + format_str + reset,
        logging.ERROR: red + format_str + reset,
        logging.CRITICAL: bold_red + format_str + reset
    }

    def format(self, record):
        log_fmt = self.FORMATS.get(record.levelno)
        formatter = logging.Formatter(log_fmt)
        return formatter.format(record)


def initLoggingSetting(level="INFO") -> logging.Logger:
    """Install the colored stream handler on the root logger once.

    Args:
        level (str|int): logging level name or number.
    """
    logger = logging.getLogger()
    logger.setLevel(level if isinstance(level, int) else logging.getLevelName(str(level).upper()))
    # calling twice must not duplicate every record
    for handler in logger.handlers:
        if isinstance(handler.formatter, CustomFormatter):
            return logger
    ch = logging.StreamHandler()
    ch.setFormatter(CustomFormatter())
    logger.addHandler(ch)
    return logger
