"""
Entry point
"""

import argparse
import shutil
import sys
import textwrap

from . import __description__, __project_name__, __version__, config, constants, errors
from .client import ScgiClient

import logging  # isort:skip
_log = logging.getLogger(__name__)


def main(args=None):
    sys.exit(_main(args))


def _main(args=None):
    args = parse(sys.argv[1:] if args is None else args)

    if args.debug:
        logging.basicConfig(
            format='%(asctime)s: %(name)s: %(message)s',
            filename=args.debug,
        )
        logging.getLogger(__project_name__).setLevel(level=logging.DEBUG)

    try:
        cfg = config.read(args.config_file, ignore_missing=True)
        if args.url:
            cfg['client']['url'] = args.url
        if args.timeout:
            cfg['client']['timeout'] = args.timeout
        client = ScgiClient(config=cfg['client'])
        args.command(client, args)
    except errors.ScgirpcError as e:
        print(e, file=sys.stderr)
        return 1
    else:
        return 0


def _call(client, args):
    result = client.call(args.method, *(_argument(arg) for arg in args.arguments))
    if isinstance(result, (list, tuple)):
        for item in result:
            print(item)
    else:
        print(result)


def _argument(string):
    # Send numbers as <int> instead of <string>
    try:
        return int(string)
    except ValueError:
        return string


def _raw(client, args):
    if args.file:
        try:
            with open(args.file, 'rb') as f:
                payload = f.read()
        except OSError as e:
            raise errors.ScgirpcError(f'{args.file}: {e.strerror}')
    else:
        payload = sys.stdin.buffer.read()

    response = client.send(payload)
    for header in response.headers:
        print(f'{header.name}:{header.value}')
    print()
    sys.stdout.flush()
    sys.stdout.buffer.write(response.body.encode('latin-1'))
    sys.stdout.flush()


def _methods(client, args):
    for method in client.list_methods():
        print(method)


def TIMEOUT(string):
    try:
        return config.timeout(string)
    except ValueError as e:
        raise argparse.ArgumentTypeError(e)


def parse(args):
    """
    Parse CLI arguments

    :param args: Sequence of strings (`sys.argv[1:]`)

    :return: :class:`argparse.Namespace` instance
    """
    parser = argparse.ArgumentParser(
        prog=__project_name__,
        description=__description__,
        formatter_class=MyHelpFormatter,
    )
    parser.add_argument('--version',
                        action='version',
                        version=f'{__project_name__} {__version__}')
    parser.add_argument('--debug', '-d',
                        metavar='FILE',
                        help='Write debugging messages to FILE')
    parser.add_argument('--config-file', '-f',
                        help='Configuration file path',
                        default=constants.CONFIG_FILEPATH)
    parser.add_argument('--url', '-u',
                        help=('Where to send requests\n'
                              'Formats: scgi://<host>:<port> or scgi:///path/to/rpc.socket\n'
                              f'Default: {constants.DEFAULT_URL}'))
    parser.add_argument('--timeout', '-t',
                        type=TIMEOUT,
                        help='Maximum number of seconds to wait for the server')

    subparsers = parser.add_subparsers(title='commands', dest='command_name', required=True)

    call = subparsers.add_parser('call', help='Call XML-RPC method and print the result',
                                 formatter_class=MyHelpFormatter)
    call.add_argument('method', help='Method name, e.g. "system.client_version"')
    call.add_argument('arguments', nargs='*', metavar='ARGUMENT',
                      help='Method argument; integers are sent as integers')
    call.set_defaults(command=_call)

    raw = subparsers.add_parser('raw', help='Send raw payload and print headers and body',
                                formatter_class=MyHelpFormatter)
    raw.add_argument('file', nargs='?',
                     help='Read payload from FILE instead of stdin')
    raw.set_defaults(command=_raw)

    methods = subparsers.add_parser('methods', help='List available XML-RPC methods',
                                    formatter_class=MyHelpFormatter)
    methods.set_defaults(command=_methods)

    return parser.parse_args(args)


class MyHelpFormatter(argparse.HelpFormatter):
    """Keep line breaks in help texts and don't exceed :attr:`MAX_WIDTH` columns"""

    MAX_WIDTH = 90

    def __init__(self, *args, **kwargs):
        kwargs.setdefault('width', min(shutil.get_terminal_size().columns, self.MAX_WIDTH))
        super().__init__(*args, **kwargs)

    def _split_lines(self, text, width):
        lines = []
        for line in text.splitlines():
            lines.extend(textwrap.wrap(line, width) or [''])
        return lines

    def _fill_text(self, text, width, indent):
        return '\n'.join(indent + line for line in self._split_lines(text, width - len(indent)))
