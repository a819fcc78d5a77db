"""
The entire public API is available at root level::

    from rested import Resource, Representation, JSON, ResponseError, ...
"""
from . import clients, http
from .__about__ import __version__  # noqa
from .clients import *  # noqa
from .errors import *  # noqa
from .http import *  # noqa
from .middleware import *  # noqa
from .representation import *  # noqa
from .resource import *  # noqa
from .wrapper import *  # noqa

__all__ = ["clients", "http"]
