"""
Root module of the library. This module re-exports the most commonly used types
to reduce the verbosity of the imports statements.
"""

__version__ = "1.0.0"

from .application import Application as Application
from .contents import Content as Content
from .contents import JSONContent as JSONContent
from .contents import TextContent as TextContent
from .exceptions import HTTPException as HTTPException
from .groups import Group as Group
from .groups import new as new
from .groups import params_of as params_of
from .messages import Request as Request
from .messages import Response as Response
from .middlewares import Handler as Handler
from .middlewares import Middleware as Middleware
from .routing import Params as Params
from .routing import RouteDuplicate as RouteDuplicate
from .routing import RouteException as RouteException
from .routing import RouteMethod as RouteMethod
from .routing import Router as Router
