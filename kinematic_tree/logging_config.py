"""logging_config.py - Package Logging Setup"""
from __future__ import annotations

import logging
import sys

from kinematic_tree.config import LOG_LEVEL

__all__ = ['setup_logging']

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%H:%M:%S'

def _attach(logger: logging.Logger, handler: logging.Handler, level: int):
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logger.addHandler(handler)

def setup_logging(level: int = LOG_LEVEL, log_file: str | None = None) -> logging.Logger:
    """Routes records of the :code:`kinematic_tree` loggers to stdout and,
    optionally, a log file. Handlers installed by earlier calls are replaced.

    :param level: Logging level, defaults to :code:`config.LOG_LEVEL`
    :type level: int, optional

    :param log_file: Path of a log file to overwrite, defaults to :code:`None`
    :type log_file: str | None, optional

    :return: Package namespace logger
    :rtype: logging.Logger
    """
    logger = logging.getLogger('kinematic_tree')
    logger.setLevel(level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    _attach(logger, logging.StreamHandler(sys.stdout), level)
    if log_file is not None:
        _attach(logger, logging.FileHandler(log_file, mode='w', encoding='utf-8'), level)

    logger.debug('Logging to stdout%s at level %s',
                 f" and '{log_file}'" if log_file else '', logging.getLevelName(level))
    return logger
