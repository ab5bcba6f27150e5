"""
Package-wide logger. Messages are written to stderr without propagating to the root logger.
"""

import logging

_handler = logging.StreamHandler()
_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

logger = logging.getLogger("lendrecon")
logger.propagate = False
logger.setLevel(logging.INFO)
logger.addHandler(_handler)
