"""Unit tests for logging initialization in logging.py

Test coverage includes:

1. JsonFormatter output
   - Standard fields, extras, exceptions and non-JSON values.

2. initialize_logging()
   - Installs the JSON handler at the level given by LOG_LEVEL.
"""

import sys
import json
import logging
from datetime import datetime, UTC

import pytest

from kvshortener.constants import ErrorCode
from kvshortener.utils.logging import JsonFormatter, initialize_logging


def make_record(msg='Created mapping.', level=logging.INFO, exc_info=None, **extra):
    record = logging.LogRecord('kvshortener.service', level, __file__, 1, msg, (), exc_info)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


# -------------------------------
# 1. JsonFormatter output
# -------------------------------


def test_format_standard_fields():
    record = make_record()
    record.created = datetime(2025, 12, 26, 12, 0, 0, tzinfo=UTC).timestamp()

    log = json.loads(JsonFormatter().format(record))

    assert log == {
        'timestamp': '2025-12-26T12:00:00.000Z',
        'level': 'INFO',
        'logger': 'kvshortener.service',
        'message': 'Created mapping.',
    }


def test_format_extras():
    log = json.loads(JsonFormatter().format(make_record(key='abcxyz', event=ErrorCode.KEY_TAKEN)))

    assert log['key'] == 'abcxyz'
    assert log['event'] == 'KEY_TAKEN'


def test_format_interpolates_args():
    record = logging.LogRecord('kvshortener', logging.DEBUG, __file__, 1, 'Client requested %s.', ('http://sho.rt/a1',), None)

    assert json.loads(JsonFormatter().format(record))['message'] == 'Client requested http://sho.rt/a1.'


def test_format_exception():
    try:
        raise ValueError('bad record')
    except ValueError:
        record = make_record(level=logging.ERROR, exc_info=sys.exc_info())

    log = json.loads(JsonFormatter().format(record))
    assert 'ValueError: bad record' in log['exception']
    assert 'exc_info' not in log


def test_format_non_json_extras():
    log = json.loads(JsonFormatter().format(make_record(error=KeyError('gone'))))

    assert log['error'] == "'gone'"


# -------------------------------
# 2. initialize_logging()
# -------------------------------


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.parametrize('env_level, expected', [(None, logging.INFO), ('debug', logging.DEBUG), ('WARNING', logging.WARNING)])
def test_initialize_logging(monkeypatch, restore_root_logger, env_level, expected):
    if env_level is None:
        monkeypatch.delenv('LOG_LEVEL', raising=False)
    else:
        monkeypatch.setenv('LOG_LEVEL', env_level)

    initialize_logging()

    root = restore_root_logger
    assert root.level == expected
    assert any(isinstance(h.formatter, JsonFormatter) for h in root.handlers)
