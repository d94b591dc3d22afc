"""
FluxStore 的共用型別定義。
"""
from typing import TYPE_CHECKING, Any, Callable, Hashable, Mapping

from typing_extensions import Protocol, runtime_checkable

if TYPE_CHECKING:
    from .actions import Action
    from .store import Store

# Dispatcher 回傳的不透明 token
DispatchToken = Hashable

# Dispatcher 回調：接收 (action 名稱, *參數)
DispatchCallback = Callable[..., None]

# 宣告時的 action / helper / hook 都以 Store 作為第一個參數
ActionFn = Callable[..., Any]
HelperFn = Callable[..., Any]
Hook = Callable[["Store"], Any]

ActionTable = Mapping[str, ActionFn]
HelperTable = Mapping[str, HelperFn]

ActionCreator = Callable[..., "Action"]


@runtime_checkable
class DispatcherLike(Protocol):
    """Store 需要的 Dispatcher 最小介面。"""

    def register(self, callback: DispatchCallback) -> DispatchToken:
        ...

    def unregister(self, token: DispatchToken) -> None:
        ...
