"""
XML-RPC client for SCGI servers like rTorrent
"""

import copy
import functools
import xml.parsers.expat
import xmlrpc.client

import natsort

from . import constants, errors, scgi, stream
from .transport import ScgiTransport

import logging  # isort:skip
_log = logging.getLogger(__name__)


class ScgiClient:
    """
    XML-RPC API of an SCGI server

    References:
        https://github.com/rakshasa/rtorrent/wiki/RPC-Setup-XMLRPC
        https://docs.python.org/3/library/xmlrpc.client.html

    :param dict config: User configuration that is applied on top of
        :attr:`default_config`
    """

    default_config = {
        'url': constants.DEFAULT_URL,
        'timeout': constants.DEFAULT_TIMEOUT,
    }

    def __init__(self, config=None):
        self._config = copy.deepcopy(self.default_config)
        if config is not None:
            self._config.update(config.items())

    @property
    def config(self):
        """
        User configuration

        This is a deep copy of :attr:`default_config` that is updated with the
        `config` argument from initialization.
        """
        return self._config

    @functools.cached_property
    def _proxy(self):
        # ServerProxy insists on an HTTP URI. ScgiTransport ignores it.
        transport = ScgiTransport(self.config['url'], timeout=self.config['timeout'])
        return xmlrpc.client.ServerProxy('http://1', transport=transport)

    def call(self, method, *args):
        """
        Call XML-RPC method

        :param str method: Method name, e.g. ``"system.listMethods"``
        :param args: Method arguments

        :raise RequestError: if the request fails for any reason

        :return: Unmarshalled return value of `method`
        """
        _log.debug('Calling %s%r', method, args)
        attr = self._proxy
        for name in method.split('.'):
            attr = getattr(attr, name)

        try:
            return attr(*args)
        except xmlrpc.client.Fault as e:
            raise errors.RequestError(e.faultString, url=self.config['url'])
        except xmlrpc.client.ProtocolError as e:
            raise errors.RequestError(e.errmsg, url=self.config['url'])
        except xmlrpc.client.ResponseError as e:
            # xmlrpc.client.Error uses repr() for str()
            msg = e.args[0] if e.args else str(e)
            raise errors.RequestError(msg, url=self.config['url'])
        except xml.parsers.expat.ExpatError as e:
            raise errors.RequestError(str(e), url=self.config['url'])
        except OSError as e:
            msg = e.strerror if e.strerror else str(e)
            raise errors.RequestError(msg, url=self.config['url'])

    def send(self, payload):
        """
        Send raw `payload` and return the server's response

        :param payload: :class:`str` or :class:`bytes`

        :raise RequestError: if the connection fails
        :raise ResponseError: if the response is malformed

        :return: :class:`~.scgi.Response` instance
        """
        url = self.config['url']
        buffer = bytearray()
        try:
            with stream.connect(url, timeout=self.config['timeout']) as s:
                scgi.make_request(s, payload, buffer)
        except OSError as e:
            msg = e.strerror if e.strerror else str(e)
            raise errors.RequestError(msg, url=url)

        response = scgi.parse_response(buffer)
        if response is None:
            raise errors.ResponseError('Malformed response', url=url)
        return response

    def list_methods(self):
        """Return naturally sorted sequence of available method names"""
        return natsort.natsorted(self.call('system.listMethods'))

    def __repr__(self):
        return f'{type(self).__name__}(config={self.config!r})'
