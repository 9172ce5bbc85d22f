"""Logging and configuration tests"""
import pytest
import logging

from kinematic_tree.config import get_log_level
from kinematic_tree.logging_config import setup_logging

@pytest.fixture
def restore_logger():
    logger = logging.getLogger('kinematic_tree')
    level, handlers = logger.level, logger.handlers[:]
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)

def test_setup_logging(restore_logger):
    logger = setup_logging(logging.DEBUG)
    setup_logging(logging.DEBUG)

    assert logger is restore_logger
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1

def test_log_file(restore_logger, tmp_path):
    path = tmp_path / 'kinematic_tree.log'
    logger = setup_logging(logging.INFO, str(path))
    logging.getLogger('kinematic_tree.frame').warning('circular dependency')

    for handler in logger.handlers:
        handler.flush()

    assert len(logger.handlers) == 2
    assert 'circular dependency' in path.read_text(encoding='utf-8')

def test_handlers_replaced(restore_logger, tmp_path):
    logger = setup_logging(logging.INFO, str(tmp_path / 'first.log'))
    file_handler = logger.handlers[-1]
    setup_logging(logging.INFO)

    assert file_handler not in logger.handlers
    assert file_handler.stream is None
    assert len(logger.handlers) == 1

@pytest.mark.parametrize('value, expected', [
    (None, logging.WARNING), ('DEBUG', logging.DEBUG), ('info', logging.INFO),
    ('15', 15), ('bogus', logging.WARNING)])
def test_log_level(monkeypatch, value, expected):
    if value is None:
        monkeypatch.delenv('KINEMATIC_TREE_LOG_LEVEL', raising=False)
    else:
        monkeypatch.setenv('KINEMATIC_TREE_LOG_LEVEL', value)

    assert get_log_level() == expected
