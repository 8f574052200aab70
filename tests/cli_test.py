import argparse
import io
import logging
import os
from unittest.mock import Mock, call

import pytest

from scgirpc import __version__, cli, constants, errors, scgi


@pytest.fixture
def client_mock(mocker):
    ScgiClient_mock = mocker.patch('scgirpc.cli.ScgiClient')
    return ScgiClient_mock

@pytest.fixture
def config_file(tmp_path):
    return str(tmp_path / 'config.ini')


def test_main_exits_with_exit_code(mocker):
    mocker.patch('scgirpc.cli._main', return_value=123)
    with pytest.raises(SystemExit) as excinfo:
        cli.main(['methods'])
    assert excinfo.value.code == 123
    assert cli._main.call_args_list == [call(['methods'])]


def test_version(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.parse(['--version'])
    assert excinfo.value.code == 0
    assert capsys.readouterr().out == f'scgirpc {__version__}\n'

def test_missing_command(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.parse([])
    assert excinfo.value.code == 2

@pytest.mark.parametrize('timeout', ('0', '-1', 'foo'))
def test_invalid_timeout(timeout, capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.parse(['--timeout', timeout, 'methods'])
    assert excinfo.value.code == 2
    assert 'timeout' in capsys.readouterr().err.lower()

def test_help_keeps_line_breaks(mocker, capsys):
    mocker.patch('shutil.get_terminal_size', return_value=os.terminal_size((80, 24)))
    with pytest.raises(SystemExit) as excinfo:
        cli.parse(['--help'])
    assert excinfo.value.code == 0
    lines = [line.strip() for line in capsys.readouterr().out.splitlines()]
    assert all(len(line) <= 80 for line in lines)
    assert any(line.endswith('Where to send requests') for line in lines)
    assert any(line.startswith('Formats: scgi://<host>:<port>') for line in lines)
    assert f'Default: {constants.DEFAULT_URL}' in lines

@pytest.mark.parametrize(
    argnames='string, exp_timeout',
    argvalues=(('1', 1.0), ('0.5', 0.5), ('30', 30.0)),
)
def test_TIMEOUT_valid(string, exp_timeout):
    assert cli.TIMEOUT(string) == exp_timeout

@pytest.mark.parametrize(
    argnames='string, exp_message',
    argvalues=(
        ('foo', "Invalid timeout: 'foo'"),
        ('0', "Timeout must be positive: '0'"),
        ('-1', "Timeout must be positive: '-1'"),
        ('nan', "Timeout must be positive: 'nan'"),
    ),
)
def test_TIMEOUT_invalid(string, exp_message):
    with pytest.raises(argparse.ArgumentTypeError) as excinfo:
        cli.TIMEOUT(string)
    assert str(excinfo.value) == exp_message

def test_default_arguments():
    args = cli.parse(['methods'])
    assert args.config_file == constants.CONFIG_FILEPATH
    assert args.url is None
    assert args.timeout is None
    assert args.debug is None
    assert args.command is cli._methods


def test_client_gets_config_from_file(client_mock, config_file, tmp_path):
    with open(config_file, 'w') as f:
        f.write('[client]\nurl = scgi:///rpc.socket\ntimeout = 3\n')
    assert cli._main(['--config-file', config_file, 'methods']) == 0
    assert client_mock.call_args_list == [call(config={'url': 'scgi:///rpc.socket', 'timeout': 3.0})]

def test_client_gets_config_from_arguments(client_mock, config_file):
    with open(config_file, 'w') as f:
        f.write('[client]\nurl = scgi:///rpc.socket\ntimeout = 3\n')
    exit_code = cli._main(['--config-file', config_file, '--url', 'scgi://foo:123', '--timeout', '1.5', 'methods'])
    assert exit_code == 0
    assert client_mock.call_args_list == [call(config={'url': 'scgi://foo:123', 'timeout': 1.5})]

def test_client_gets_default_config(client_mock, config_file):
    assert cli._main(['--config-file', config_file, 'methods']) == 0
    assert client_mock.call_args_list == [call(config={
        'url': constants.DEFAULT_URL,
        'timeout': constants.DEFAULT_TIMEOUT,
    })]

def test_invalid_config_file(client_mock, config_file, capsys):
    with open(config_file, 'w') as f:
        f.write('[client]\nfoo = bar\n')
    assert cli._main(['--config-file', config_file, 'methods']) == 1
    assert capsys.readouterr().err == f'{config_file}: client.foo: Unknown option\n'
    assert client_mock.call_args_list == []


def test_debug(client_mock, config_file, tmp_path, mocker):
    basicConfig_mock = mocker.patch('logging.basicConfig')
    logfile = str(tmp_path / 'debug.log')
    assert cli._main(['--debug', logfile, '--config-file', config_file, 'methods']) == 0
    assert basicConfig_mock.call_args_list == [call(
        format='%(asctime)s: %(name)s: %(message)s',
        filename=logfile,
    )]
    assert logging.getLogger('scgirpc').level == logging.DEBUG


def test_call_prints_sequence(client_mock, config_file, capsys):
    client_mock.return_value.call.return_value = ['foo', 'bar']
    assert cli._main(['--config-file', config_file, 'call', 'download_list']) == 0
    assert client_mock.return_value.call.call_args_list == [call('download_list')]
    assert capsys.readouterr().out == 'foo\nbar\n'

def test_call_prints_scalar(client_mock, config_file, capsys):
    client_mock.return_value.call.return_value = '0.9.8'
    assert cli._main(['--config-file', config_file, 'call', 'system.client_version']) == 0
    assert capsys.readouterr().out == '0.9.8\n'

def test_call_converts_integer_arguments(client_mock, config_file):
    client_mock.return_value.call.return_value = 0
    args = ['--config-file', config_file, 'call', 'd.priority.set', 'd34db33f', '3', '-1', '1.5']
    assert cli._main(args) == 0
    assert client_mock.return_value.call.call_args_list == [
        call('d.priority.set', 'd34db33f', 3, -1, '1.5'),
    ]

def test_call_fails(client_mock, config_file, capsys):
    client_mock.return_value.call.side_effect = errors.RequestError('Connection refused')
    assert cli._main(['--config-file', config_file, 'call', 'download_list']) == 1
    assert capsys.readouterr() == ('', 'Connection refused\n')


def test_raw_reads_payload_from_file(client_mock, config_file, tmp_path, capsys):
    payload_file = tmp_path / 'request.xml'
    payload_file.write_bytes(b'<xml/>')
    client_mock.return_value.send.return_value = scgi.Response(
        headers=(scgi.Header('Status', ' 200 OK'), scgi.Header('Content-Type', ' text/xml')),
        body='<response/>',
    )
    assert cli._main(['--config-file', config_file, 'raw', str(payload_file)]) == 0
    assert client_mock.return_value.send.call_args_list == [call(b'<xml/>')]
    assert capsys.readouterr().out == (
        'Status: 200 OK\n'
        'Content-Type: text/xml\n'
        '\n'
        '<response/>'
    )

def test_raw_reads_payload_from_stdin(client_mock, config_file, mocker, capsys):
    mocker.patch('sys.stdin', Mock(buffer=io.BytesIO(b'<stdin/>')))
    client_mock.return_value.send.return_value = scgi.Response(
        headers=(scgi.Header('A', '1'),),
        body='body',
    )
    assert cli._main(['--config-file', config_file, 'raw']) == 0
    assert client_mock.return_value.send.call_args_list == [call(b'<stdin/>')]
    assert capsys.readouterr().out == 'A:1\n\nbody'

def test_raw_with_nonexisting_file(client_mock, config_file, tmp_path, capsys):
    payload_file = tmp_path / 'nonexisting.xml'
    assert cli._main(['--config-file', config_file, 'raw', str(payload_file)]) == 1
    assert capsys.readouterr().err == f'{payload_file}: No such file or directory\n'
    assert client_mock.return_value.send.call_args_list == []

def test_raw_with_malformed_response(client_mock, config_file, tmp_path, capsys):
    payload_file = tmp_path / 'request.xml'
    payload_file.write_bytes(b'<xml/>')
    client_mock.return_value.send.side_effect = errors.ResponseError('Malformed response')
    assert cli._main(['--config-file', config_file, 'raw', str(payload_file)]) == 1
    assert capsys.readouterr().err == 'Malformed response\n'


def test_methods(client_mock, config_file, capsys):
    client_mock.return_value.list_methods.return_value = ['d.name', 'system.listMethods']
    assert cli._main(['--config-file', config_file, 'methods']) == 0
    assert capsys.readouterr().out == 'd.name\nsystem.listMethods\n'


def test_url_with_port_out_of_range(config_file, tmp_path, mocker, capsys):
    socket_mock = mocker.patch('socket.socket')
    payload_file = tmp_path / 'request.xml'
    payload_file.write_bytes(b'<xml/>')
    args = ['--config-file', config_file, '--url', 'scgi://localhost:70000', 'raw', str(payload_file)]
    assert cli._main(args) == 1
    assert capsys.readouterr().err == 'Invalid port: 70000\n'
    assert socket_mock.call_args_list == []
