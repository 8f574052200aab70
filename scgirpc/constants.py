"""
Fixed values that do not change during runtime
"""

import os

from xdg.BaseDirectory import xdg_config_home as XDG_CONFIG_HOME

from . import __project_name__

CONFIG_FILEPATH = os.path.join(XDG_CONFIG_HOME, __project_name__, 'config.ini')
"""Path to general configuration file"""

DEFAULT_URL = 'scgi://localhost:5000'
"""Where to connect to if the user doesn't specify a URL"""

DEFAULT_TIMEOUT = 10.0
"""Socket timeout in seconds"""

READ_CHUNK_SIZE = 4096
"""Maximum number of bytes to receive at once"""
