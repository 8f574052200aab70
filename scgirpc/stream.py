"""
Blocking socket connections to SCGI servers
"""

import socket
import urllib.parse

from . import constants, errors

import logging  # isort:skip
_log = logging.getLogger(__name__)


def parse_url(url):
    """
    Return socket address family and address for `url`

    Supported formats:

        scgi://<host>:<port>
        scgi://[<IPv6 address>]:<port>
        scgi:///path/to/rpc.socket
        scgi://relative/path/to/rpc.socket

    :raise RequestError: if `url` is not a valid SCGI URL

    :return: Tuple of :attr:`socket.AF_INET` (or :attr:`socket.AF_INET6`) and
        ``(host, port)`` or :attr:`socket.AF_UNIX` and the socket path
    """
    if not url:
        raise errors.RequestError('No URL provided')

    try:
        parts = urllib.parse.urlsplit(url)
    except ValueError:
        raise errors.RequestError(f'Invalid URL: {url}', url=url)
    if parts.scheme != 'scgi':
        raise errors.RequestError(f'Unsupported scheme: {parts.scheme or url}', url=url)

    if parts.netloc and ':' in parts.netloc:
        # If there is a port in netloc, it's a host.
        if parts.netloc.endswith(']'):
            raise errors.RequestError('Missing port', url=url)
        port = parts.netloc.rpartition(':')[2]
        if not (port.isascii() and port.isdigit()) or not 0 <= int(port) <= 65535:
            raise errors.RequestError(f'Invalid port: {port}', url=url)
        port = int(port)

        # IPv6 addresses are enclosed in brackets which urlsplit() removes.
        host = parts.hostname
        if not host:
            raise errors.RequestError('Missing host', url=url)
        elif ':' in host:
            return socket.AF_INET6, (host, port)
        else:
            return socket.AF_INET, (host, port)
    else:
        # If there is no port in the host, it's the first segment of a
        # relative path. For absolute paths, netloc is empty.
        socket_path = parts.netloc + parts.path
        if not socket_path:
            raise errors.RequestError('Missing host or socket path', url=url)
        return socket.AF_UNIX, socket_path


def connect(url, timeout=None):
    """
    Connect to SCGI server

    :param str url: See :func:`parse_url`
    :param timeout: Socket timeout in seconds or `None` to block forever

    :raise RequestError: if `url` is invalid
    :raise OSError: if the connection cannot be established

    :return: :class:`SocketStream` instance
    """
    family, address = parse_url(url)
    _log.debug('Connecting to %r', address)
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.settimeout(timeout)
        sock.connect(address)
    except OSError:
        sock.close()
        raise
    return SocketStream(sock)


class SocketStream:
    """
    Connected socket with the stream interface that
    :func:`~.scgi.make_request` expects

    A stream must not be shared between concurrent requests.

    :param sock: Connected :class:`socket.socket` instance
    """

    def __init__(self, sock):
        self._sock = sock

    def write(self, data):
        """
        Send all of `data`

        :raise OSError: if sending fails

        :return: Number of bytes sent
        """
        self._sock.sendall(data)
        return len(data)

    def read_until_close(self):
        """
        Read until the server closes the connection

        :raise OSError: if receiving fails

        :return: :class:`bytes`
        """
        chunks = []
        while True:
            chunk = self._sock.recv(constants.READ_CHUNK_SIZE)
            if not chunk:
                break
            chunks.append(chunk)
        return b''.join(chunks)

    def close(self):
        """Close the underlying socket"""
        self._sock.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def __repr__(self):
        return f'{type(self).__name__}({self._sock!r})'
