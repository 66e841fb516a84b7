import json

import pytest

from vika.logging import StructuredLogger, configure_logging, get_logger


def test_structured_logger_json_format(capsys):
    """Structured logger produces JSON output when configured."""
    logger = StructuredLogger(name='test', json_logging=True, level='INFO')
    logger.log_operation('test_operation', param1='value1', param2=42)

    captured = capsys.readouterr()
    log_lines = [line for line in captured.err.strip().split('\n') if line]

    assert len(log_lines) == 1
    log_data = json.loads(log_lines[0])

    assert log_data['level'] == 'INFO'
    assert log_data['operation'] == 'test_operation'
    assert log_data['param1'] == 'value1'
    assert log_data['param2'] == 42
    assert 'timestamp' in log_data


def test_structured_logger_regular_format(capsys):
    """Structured logger produces plain text output when JSON is disabled."""
    logger = StructuredLogger(name='test', json_logging=False, level='INFO')
    logger.log_operation('test_operation', param1='value1')

    captured = capsys.readouterr()
    assert 'Operation: test_operation' in captured.err
    assert 'INFO' in captured.err


def test_issue_action_fields(capsys):
    logger = StructuredLogger(name='test', json_logging=True, level='INFO')
    logger.log_issue_action('saved', 'login-bug', path='.issues/login-bug.md')

    log_data = json.loads(capsys.readouterr().err.strip())
    assert log_data['message'] == 'issue saved login-bug'
    assert log_data['operation'] == 'issue_saved'
    assert log_data['issue_id'] == 'login-bug'
    assert log_data['path'] == '.issues/login-bug.md'


def test_level_filters_info(capsys):
    logger = StructuredLogger(name='test', json_logging=True, level='WARNING')
    logger.log_operation('hidden')
    logger.warning('shown')
    out = capsys.readouterr().err
    assert 'hidden' not in out
    assert 'shown' in out


def test_timed_operation_logs_performance(capsys):
    logger = StructuredLogger(name='test', json_logging=True, level='INFO')
    with logger.timed_operation('parse', issue_id='x'):
        pass
    entries = [json.loads(line) for line in capsys.readouterr().err.splitlines() if line]
    perf = [e for e in entries if e['operation'] == 'parse']
    assert perf and 'duration_ms' in perf[0]


def test_timed_operation_logs_and_reraises(capsys):
    logger = StructuredLogger(name='test', json_logging=True, level='INFO')
    with pytest.raises(RuntimeError):
        with logger.timed_operation('parse'):
            raise RuntimeError('boom')
    entries = [json.loads(line) for line in capsys.readouterr().err.splitlines() if line]
    assert entries[-1]['level'] == 'ERROR'
    assert entries[-1]['error'] == 'boom'


def test_configure_logging_replaces_global():
    configured = configure_logging(json_logging=True, level='DEBUG')
    assert get_logger() is configured
    configure_logging(level='WARNING')
