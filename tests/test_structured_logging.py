import json

from issueimport import logging as ii_logging
from issueimport.diagnostics import LoggerSink
from issueimport.logging import StructuredLogger, configure_logging, get_logger


def _json_lines(text: str) -> list[dict]:
    return [json.loads(line) for line in text.strip().split('\n') if line]


def test_structured_logger_json_format(capsys):
    """Structured logger produces JSON on stderr when configured."""
    logger = StructuredLogger(name='test', json_logging=True, level='INFO')
    logger.log_operation('test_operation', param1='value1', param2=42)

    captured = capsys.readouterr()
    assert captured.out == ''
    log_lines = _json_lines(captured.err)

    assert len(log_lines) == 1
    log_data = log_lines[0]
    assert log_data['level'] == 'INFO'
    assert log_data['operation'] == 'test_operation'
    assert log_data['param1'] == 'value1'
    assert log_data['param2'] == 42
    assert 'timestamp' in log_data


def test_structured_logger_regular_format(capsys):
    """Plain text output when JSON is disabled."""
    logger = StructuredLogger(name='test', json_logging=False, level='INFO')
    logger.log_operation('test_operation', param1='value1')

    captured = capsys.readouterr()
    assert 'Operation: test_operation' in captured.err
    assert 'INFO' in captured.err


def test_issue_action_message(capsys):
    logger = StructuredLogger(name='test', json_logging=True, level='INFO')
    logger.log_issue_action('create', 'Fix login', issue_number=12)

    entry = _json_lines(capsys.readouterr().err)[0]
    assert entry['message'] == "issue create 'Fix login' #12"
    assert entry['operation'] == 'issue_create'
    assert entry['issue_number'] == 12
    assert entry['dry_run'] is False


def test_duplicate_json_entries_suppressed(capsys):
    logger = StructuredLogger(name='test', json_logging=True, level='INFO')
    logger.log_operation('same', n=1)
    logger.log_operation('same', n=1)
    logger.log_operation('same', n=2)

    expected_entries = 2
    assert len(_json_lines(capsys.readouterr().err)) == expected_entries


def test_level_filters_debug(capsys):
    logger = StructuredLogger(name='test', json_logging=False, level='INFO')
    logger.debug('hidden detail')
    logger.warning('visible warning')

    err = capsys.readouterr().err
    assert 'hidden detail' not in err
    assert 'visible warning' in err


def test_timed_operation_logs_performance(capsys):
    logger = StructuredLogger(name='test', json_logging=True, level='INFO')
    with logger.timed_operation('parse_csv', path='x.csv'):
        pass

    entries = _json_lines(capsys.readouterr().err)
    assert entries[0]['operation'] == 'parse_csv_start'
    assert entries[-1]['operation'] == 'parse_csv'
    assert 'duration_ms' in entries[-1]


def test_timed_operation_logs_failure(capsys):
    logger = StructuredLogger(name='test', json_logging=True, level='INFO')
    try:
        with logger.timed_operation('submit_batch'):
            raise RuntimeError('kaboom')
    except RuntimeError:
        pass

    entries = _json_lines(capsys.readouterr().err)
    assert entries[-1]['level'] == 'ERROR'
    assert entries[-1]['error'] == 'kaboom'


def test_configure_logging_replaces_global(monkeypatch):
    monkeypatch.setattr(ii_logging, '_GLOBAL', None)
    first = get_logger()
    configured = configure_logging(json_logging=True, level='DEBUG')
    assert configured is get_logger()
    assert configured is not first


def test_logger_sink_forwards_warnings(capsys):
    logger = StructuredLogger(name='test', json_logging=True, level='INFO')
    sink = LoggerSink(logger)
    sink.warn('Warning: Row 1: odd label')

    assert sink.messages == ['Warning: Row 1: odd label']
    entry = _json_lines(capsys.readouterr().err)[0]
    assert entry['level'] == 'WARNING'
    assert entry['operation'] == 'diagnostic'
