"""
Tests for the JSON log formatter and the shared logger
"""
import json
import logging
import sys

from database_file_controls.logger import JsonFormatter, get_logger


def make_record(message='Saved %s', args=('report.pdf',), exc_info=None):
    return logging.LogRecord(
        name='database_file_controls', level=logging.INFO, pathname=__file__,
        lineno=10, msg=message, args=args, exc_info=exc_info,
    )


def test_record_formatted_as_json():
    formatter = JsonFormatter({'level': 'levelname', 'message': 'message'})

    output = json.loads(formatter.format(make_record()))

    assert output == {'level': 'INFO', 'message': 'Saved report.pdf'}


def test_exception_text_included():
    formatter = JsonFormatter()
    try:
        raise ValueError('bad slot')
    except ValueError:
        record = make_record(exc_info=sys.exc_info())

    output = json.loads(formatter.format(record))

    assert 'ValueError: bad slot' in output['exc_info']


def test_every_module_shares_one_logger():
    assert get_logger('database_file_controls.a') is get_logger('database_file_controls.b')
