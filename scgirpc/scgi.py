"""
SCGI request framing and response parsing

https://python.ca/scgi/protocol.txt

A request is a header block prefixed with its length, followed by the payload:

    <header block length>:CONTENT_LENGTH<NUL><payload length><NUL>SCGI<NUL>1<NUL><payload>

The response is expected to be CGI-style header lines, an empty line and the
body. Nothing in here opens connections. :func:`make_request` talks to any
object that provides ``write(bytes)`` and ``read_until_close()``, e.g.
:class:`~.stream.SocketStream`.
"""

import collections

import logging  # isort:skip
_log = logging.getLogger(__name__)

_HEADER_SEPARATOR = '\r\n\r\n'
_LINE_SEPARATOR = '\r\n'


Header = collections.namedtuple('Header', ('name', 'value'))
"""Name and value of a single header field"""

Response = collections.namedtuple('Response', ('headers', 'body'))
"""
Parsed SCGI response

:attr:`headers` is a tuple of :class:`Header` instances in the order they
appeared in the response. :attr:`body` is a :class:`str` where every character
represents one byte of the raw response (see :func:`parse_response`).
"""


def _as_bytes(payload):
    if isinstance(payload, str):
        return payload.encode('utf-8')
    else:
        return bytes(payload)


def encode_header(name, value):
    """Return `name` and `value` as NUL-terminated :class:`bytes`"""
    return name.encode('ascii') + b'\x00' + value.encode('ascii') + b'\x00'


def encode_headers(payload):
    """
    Return SCGI header block for `payload`

    ``CONTENT_LENGTH`` must be the first header and ``SCGI`` follows it.

    :param payload: :class:`str` (encoded as UTF-8) or :class:`bytes`
    """
    return (
        encode_header('CONTENT_LENGTH', str(len(_as_bytes(payload))))
        + encode_header('SCGI', '1')
    )


def encode_request(payload):
    """
    Return complete SCGI request as :class:`bytes`

    :param payload: :class:`str` (encoded as UTF-8) or :class:`bytes`, usually
        an XML-RPC method call
    """
    payload = _as_bytes(payload)
    headers = encode_headers(payload)
    return str(len(headers)).encode('ascii') + b':' + headers + payload


def make_request(stream, payload, buffer):
    """
    Send `payload` to `stream` and read the response into `buffer`

    :param stream: Connected stream with a ``write(bytes)`` method that writes
        all bytes and a ``read_until_close()`` method that returns everything
        the server sends until it closes the connection
    :param payload: :class:`str` or :class:`bytes`
    :param bytearray buffer: Receives the raw response

    :raise OSError: if writing or reading fails

    :return: Number of bytes read into `buffer`
    """
    request = encode_request(payload)
    _log.debug('Sending %d bytes', len(request))
    stream.write(request)
    response = stream.read_until_close()
    _log.debug('Received %d bytes', len(response))
    buffer.extend(response)
    return len(response)


def parse_response(raw_response):
    """
    Split `raw_response` into headers and body

    Every byte is mapped to the character with the same code point (latin-1),
    so the body survives even if it isn't valid UTF-8. Use
    ``body.encode('latin-1')`` to get the original bytes back.

    Header lines must contain exactly one ":". Values that contain ":" are not
    supported.

    :param raw_response: :class:`bytes` as received from the server

    :return: :class:`Response` or `None` if `raw_response` is malformed
    """
    response = bytes(raw_response).decode('latin-1')

    parts = response.split(_HEADER_SEPARATOR)
    if len(parts) != 2:
        _log.debug('Expected 1 header separator, found %d', len(parts) - 1)
        return None
    head, body = parts

    headers = []
    for line in head.split(_LINE_SEPARATOR):
        fields = line.split(':')
        if len(fields) != 2:
            _log.debug('Invalid header line: %r', line)
            return None
        headers.append(Header(name=fields[0], value=fields[1]))

    return Response(headers=tuple(headers), body=body)
