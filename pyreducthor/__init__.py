"""
PyReducthor：從宣告式 action 描述符生成 reducer 與可等待的 action 函數。
"""

from .errors import (
    ReducthorError, ActionError, SynchronousActionError, InsufficientArgumentsError,
    TransportError, ConfigurationError, ActionRejected, ErrorHandler, global_error_handler
)
from .actions import Action, DerivedNames, derive_action_names, to_callable_name
from .paths import resolve_path
from .descriptors import ActionDescriptor, AuthConfig, ReducthorConfig, ActionResult
from .action_handlers import LifecycleStatus, build_request_handlers, build_simple_handler
from .reducers import create_action_table, create_reducer, combine_reducers
from .middleware import BaseMiddleware, LoggerMiddleware, ThunkMiddleware, DevToolsMiddleware
from .store import Store, create_store
from .transport import HttpxTransport, RequestConfig
from .callables import FileUpload
from .immutable_utils import to_immutable, to_dict
from .reducthor import Reducthor, ActionSurface, create_reducthor

# 匯出所有公開 API
__all__ = [
    # Errors
    "ReducthorError", "ActionError", "SynchronousActionError", "InsufficientArgumentsError",
    "TransportError", "ConfigurationError", "ActionRejected", "ErrorHandler", "global_error_handler",

    # Actions
    "Action", "DerivedNames", "derive_action_names", "to_callable_name", "resolve_path",

    # Descriptors
    "ActionDescriptor", "AuthConfig", "ReducthorConfig", "ActionResult",

    # Handlers & Reducers
    "LifecycleStatus", "build_request_handlers", "build_simple_handler",
    "create_action_table", "create_reducer", "combine_reducers",

    # Middleware
    "BaseMiddleware", "LoggerMiddleware", "ThunkMiddleware", "DevToolsMiddleware",

    # Store
    "Store", "create_store",

    # Transport
    "HttpxTransport", "RequestConfig", "FileUpload",

    # Immutable Utils
    "to_immutable", "to_dict",

    # Reducthor
    "Reducthor", "ActionSurface", "create_reducthor",
]
