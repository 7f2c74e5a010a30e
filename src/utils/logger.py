import logging

from rich.logging import RichHandler

from utils import config


class CenteredFormatter(logging.Formatter):
    """Pads logger names so messages from different modules line up."""

    width = 12

    def format(self, record):
        CenteredFormatter.width = max(CenteredFormatter.width, len(record.name))
        record.name = record.name.center(CenteredFormatter.width)
        return super().format(record)


def get_logger(name=None) -> logging.Logger:
    """
    Return a logger writing through RichHandler.
    Level is DEBUG when the DEBUG env var is set, INFO otherwise.
    """
    logger = logging.getLogger(name or "valencire")
    level = logging.DEBUG if config.DEBUG else logging.INFO
    logger.setLevel(level)

    if not logger.handlers:
        handler = RichHandler(
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        handler.setFormatter(CenteredFormatter("[%(name)s]  %(message)s"))
        handler.setLevel(level)
        logger.addHandler(handler)
        logger.propagate = False

    return logger
