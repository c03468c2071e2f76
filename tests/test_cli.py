"""Test command-line handling and logger setup."""
import logging
import socket

import pytest

from userlistener import OFF, TRACE, get_logger, parse_level
from userlistener import cli
from userlistener.config import DEFAULT_ADDRESS, DEFAULT_PORT


def test_defaults():
    args = cli.parse_args([])
    assert args.address == DEFAULT_ADDRESS == '127.0.0.1'
    assert args.port == DEFAULT_PORT == 6142
    assert args.level == 'info'
    assert args.read_timeout is None
    assert args.log_file is None


def test_short_options():
    args = cli.parse_args(['-a', '0.0.0.0', '-p', '9000', '-l', 'trace'])
    assert (args.address, args.port, args.level) == ('0.0.0.0', 9000, 'trace')


@pytest.mark.parametrize("argv", [
    ['-l', 'verbose'],
    ['-p', '70000'],
    ['-p', 'http'],
    ['--read-timeout', '0'],
    ['--read-timeout', 'soon'],
])
def test_invalid_arguments_exit(argv):
    with pytest.raises(SystemExit) as err:
        cli.parse_args(argv)
    assert err.value.code == 2


@pytest.mark.parametrize("name, level", [
    ('off', OFF),
    ('error', logging.ERROR),
    ('warn', logging.WARNING),
    ('INFO', logging.INFO),
    ('debug', logging.DEBUG),
    ('trace', TRACE),
])
def test_parse_level(name, level):
    assert parse_level(name) == level


def test_parse_level_invalid():
    with pytest.raises(ValueError, match="invalid log level"):
        parse_level('loud')


def test_logger_format(tmp_path, capsys):
    """Test that log lines carry the program name, pid and level."""
    log_file = tmp_path / "log" / "listener.log"
    log = get_logger('fmt-check', 'debug', str(log_file))
    log.debug("hello there")
    for handler in log.handlers:
        handler.flush()

    err = capsys.readouterr().err
    assert "fmt-check[" in err
    assert ": DEBUG - hello there" in err
    assert "hello there" in log_file.read_text()


def test_logger_off(capsys):
    log = get_logger('silent-check', 'off')
    log.error("should not appear")
    assert capsys.readouterr().err == ""


def test_main_bind_failure_exits_nonzero():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(('127.0.0.1', 0))
        sock.listen()
        port = sock.getsockname()[1]
        assert cli.main(['-a', '127.0.0.1', '-p', str(port), '-l', 'off']) == 1
