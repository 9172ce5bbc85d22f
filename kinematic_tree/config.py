"""config.py - Package Constants and Environment Configuration

Exports:
    WORLD_FRAME_NAME (str): Name given to every World frame.
    DEFAULT_SEQUENCE (str): Euler angle sequence used by :code:`Isometry.from_euler`.
    DEFAULT_DEGREES (bool): Unit flag used by :code:`Isometry.from_euler`.
    LOG_LEVEL (int): Logging level read from :code:`KINEMATIC_TREE_LOG_LEVEL`.
"""
import logging
import os

WORLD_FRAME_NAME: str = 'World'

DEFAULT_SEQUENCE: str = 'ZYX'
DEFAULT_DEGREES: bool = True


def get_log_level(default: int = logging.WARNING) -> int:
    """Reads the package log level from :code:`KINEMATIC_TREE_LOG_LEVEL`,
    given as a level name such as 'DEBUG' or as an integer

    :param default: Level used when the variable is unset or unrecognized,
        defaults to :code:`logging.WARNING`
    :type default: int, optional

    :return: Logging level
    :rtype: int
    """
    value = os.environ.get('KINEMATIC_TREE_LOG_LEVEL')
    if value is None:
        return default

    if value.strip().isdigit():
        return int(value)

    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else default


LOG_LEVEL: int = get_log_level()
