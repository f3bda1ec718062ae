import logging

from core.config import settings

# Configure the logger
logger = logging.getLogger("stock_ledger")

logger.setLevel(settings.log_level)

if not logger.handlers:
    console_handler = logging.StreamHandler()
    console_handler.setLevel(settings.log_level)

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    console_handler.setFormatter(formatter)

    logger.addHandler(console_handler)


def get_child_logger(name):
    """Get a child logger with the given name."""
    return logger.getChild(name)
