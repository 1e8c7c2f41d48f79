"""
Restify - declarative schemas mapped onto relational tables.

Declare collections and one-sided relations; Restify derives the inverse
side of every relation, then creates, drops and queries the matching
tables.
"""

__version__ = "0.1.0"

from restify.core import *  # noqa
from restify.service import Restify  # noqa: E402
