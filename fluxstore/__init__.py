"""
FluxStore：以 Flux 架構為基礎的最小狀態容器。

Store 管理應用狀態、接收 Dispatcher 分發的 actions，並透過 helpers 對外公開衍生值。
"""
from .errors import (
    FluxStoreError, ActionError, DispatchError, DispatcherError, StoreError, HookError,
    ConfigurationError, ErrorHandler, global_error_handler, handle_error
)
from .actions import Action, create_action
from .config import StoreConfig
from .dispatcher import Dispatcher
from .registry import HelperRegistry, global_helper_registry
from .store import Store, create_store

__version__ = "0.1.0"

# 匯出所有公開 API
__all__ = [
    # Errors
    "FluxStoreError", "ActionError", "DispatchError", "DispatcherError",
    "StoreError", "HookError", "ConfigurationError",
    "ErrorHandler", "global_error_handler", "handle_error",

    # Actions
    "Action", "create_action",

    # Config
    "StoreConfig",

    # Dispatcher
    "Dispatcher",

    # Helper registry
    "HelperRegistry", "global_helper_registry",

    # Store
    "Store", "create_store",
]
