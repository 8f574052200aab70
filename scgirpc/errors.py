"""
Exception classes

Abstraction layers should raise one of these exceptions if an error message
should be displayed to the user. If the programmer made a mistake, any
appropriate builtin exception (e.g. :class:`ValueError`, :class:`TypeError`) or
:class:`RuntimeError` should be raised.

The SCGI functions in :mod:`~.scgi` never raise these. Transport errors are
passed through as :class:`OSError` and unparseable responses are reported as
`None`. :class:`~.client.ScgiClient` turns both into :class:`RequestError`.
"""

class ScgirpcError(Exception):
    """Base class for all exceptions raised by scgirpc"""

    def __eq__(self, other):
        if isinstance(other, type(self)) and str(other) == str(self):
            return True
        else:
            return NotImplemented


class ConfigError(ScgirpcError):
    """Error while reading config file or setting config file option"""


class RequestError(ScgirpcError):
    """Network request failed"""
    def __init__(self, msg, url=''):
        super().__init__(msg)
        self._url = url

    @property
    def url(self):
        """URL that produced this exception"""
        return self._url


class ResponseError(RequestError):
    """Server response is not usable"""
