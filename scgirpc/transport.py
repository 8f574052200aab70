"""
SCGI XMLRPC Transport

XMLRPC in Python only supports HTTP(S). This module extends the transport to
also support SCGI. SCGI is required by rTorrent if you want to communicate
directly with an instance.

Example:

    >>> from xmlrpc.client import ServerProxy
    >>> transport = ScgiTransport('scgi://127.0.0.1:5000')
    >>> proxy = ServerProxy('http://1', transport=transport)
    >>> proxy.system.listMethods()
"""

import io
import xmlrpc.client

from . import scgi, stream

import logging  # isort:skip
_log = logging.getLogger(__name__)


class ScgiTransport(xmlrpc.client.Transport):
    """
    :class:`xmlrpc.client.Transport` that sends requests via SCGI

    The URI passed to :class:`xmlrpc.client.ServerProxy` is ignored. The
    server is specified by `url`.

    :param str url: SCGI URL (see :func:`~.stream.parse_url`)
    :param timeout: Socket timeout in seconds or `None`

    Any other arguments are passed to :class:`xmlrpc.client.Transport`.
    """

    def __init__(self, url, *args, timeout=None, **kwargs):
        self.url = url
        self.timeout = timeout
        super().__init__(*args, **kwargs)

    def request(self, host, handler, request_body, verbose=False):
        # The parent class retries once if the connection was reset.
        return self.single_request(host, handler, request_body, verbose=verbose)

    def single_request(self, host, handler, request_body, verbose=False):
        self.verbose = verbose
        buffer = bytearray()
        with stream.connect(self.url, timeout=self.timeout) as s:
            scgi.make_request(s, request_body, buffer)

        response = scgi.parse_response(buffer)
        if response is None:
            raise xmlrpc.client.ProtocolError(self.url, 0, 'Malformed response', {})

        headers = {header.name: header.value.strip() for header in response.headers}
        self._check_status(headers)
        return self.parse_response(io.BytesIO(response.body.encode('latin-1')))

    def _check_status(self, headers):
        # "Status" is optional. Without it, the request succeeded.
        status = headers.get('Status', '')
        if status:
            code, _, reason = status.partition(' ')
            try:
                code = int(code)
            except ValueError:
                raise xmlrpc.client.ProtocolError(self.url, 0, f'Invalid status: {status}', headers)
            if code != 200:
                _log.debug('Server replied with status %r', status)
                raise xmlrpc.client.ProtocolError(self.url, code, reason, headers)

    def __repr__(self):
        return f'{type(self).__name__}(url={self.url!r}, timeout={self.timeout!r})'
