"""
Configuration file

Example:

    [client]
    url = scgi:///home/user/.rtorrent/rpc.socket
    timeout = 30
"""

import configparser
import copy
import os

from . import errors
from .client import ScgiClient

import logging  # isort:skip
_log = logging.getLogger(__name__)


def timeout(value):
    """Return positive :class:`float` from `value` or raise :class:`ValueError`"""
    try:
        seconds = float(value)
    except (ValueError, TypeError):
        raise ValueError(f'Invalid timeout: {value!r}')
    if not seconds > 0:
        raise ValueError(f'Timeout must be positive: {value!r}')
    return seconds


defaults = {
    'client': copy.deepcopy(ScgiClient.default_config),
}
"""Nested dictionary of sections, options and default values"""

_types = {
    'client': {
        'url': str,
        'timeout': timeout,
    },
}


def read(filepath, ignore_missing=False):
    """
    Read INI file and return configuration as nested dictionary

    :param str filepath: Path to INI file
    :param bool ignore_missing: Whether to return :attr:`defaults` if
        `filepath` doesn't exist

    :raise ConfigError: if reading, parsing or validating `filepath` fails
    """
    config = copy.deepcopy(defaults)
    if ignore_missing and not os.path.exists(filepath):
        _log.debug('Ignoring missing config file: %s', filepath)
        return config

    try:
        with open(filepath, 'r') as f:
            string = f.read()
    except OSError as e:
        raise errors.ConfigError(f'{filepath}: {e.strerror}')

    for section_name, section in _parse(string, filepath).items():
        if section_name not in config:
            raise errors.ConfigError(f'{filepath}: {section_name}: Unknown section')
        for option, value in section.items():
            if option not in config[section_name]:
                raise errors.ConfigError(f'{filepath}: {section_name}.{option}: Unknown option')
            try:
                config[section_name][option] = _types[section_name][option](value)
            except ValueError as e:
                raise errors.ConfigError(f'{filepath}: {section_name}.{option}: {e}')
    return config


def _parse(string, filepath):
    cfg = configparser.ConfigParser(
        default_section=None,
        interpolation=None,
    )
    try:
        cfg.read_string(string, source=filepath)
    except configparser.MissingSectionHeaderError as e:
        raise errors.ConfigError(f'{filepath}: Line {e.lineno}: {e.line.strip()}: Option outside of section')
    except configparser.ParsingError as e:
        lineno, msg = e.errors[0]
        raise errors.ConfigError(f'{filepath}: Line {lineno}: {msg}: Invalid syntax')
    except configparser.DuplicateSectionError as e:
        raise errors.ConfigError(f'{filepath}: Line {e.lineno}: {e.section}: Duplicate section')
    except configparser.DuplicateOptionError as e:
        raise errors.ConfigError(f'{filepath}: Line {e.lineno}: {e.option}: Duplicate option')
    except configparser.Error as e:
        raise errors.ConfigError(f'{filepath}: {e}')
    else:
        # Make normal dictionary from ConfigParser instance
        return {s: dict(cfg.items(s)) for s in cfg.sections()}
