"""Root pytest configuration for all tests."""

import logging

# atlassian-python-api logs at ERROR level for expected failures such as
# missing pages, which the mirror reports itself.
logging.getLogger("atlassian").setLevel(logging.WARNING)
