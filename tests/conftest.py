import logging

import pytest


# Format all debugging messages from scgirpc
@pytest.fixture(autouse=True)
def debug_logging(caplog):
    caplog.set_level(logging.DEBUG, logger='scgirpc')
