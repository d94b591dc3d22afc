"""
FluxStore 的參考 Dispatcher 實作。

Store 只依賴 register / unregister 兩個方法（見 types.DispatcherLike），
任何符合該介面的物件都能使用；這裡提供一個單一通道、同步分發的版本。
"""
import itertools
import logging
from collections import OrderedDict
from typing import Any, Dict, Union

from reactivex import Observable
from reactivex.subject import Subject

from .actions import Action
from .errors import DispatcherError
from .types import DispatchCallback, DispatchToken

logger = logging.getLogger(__name__)

_PREFIX = "ID_"


class Dispatcher:
    """
    將 action 廣播給所有已註冊的回調。

    - 每個回調對應一個不透明的 token（"ID_1"、"ID_2"...）
    - 每次分發中，每個 token 的回調最多被呼叫一次，依註冊順序執行
    - 不允許在分發過程中再次分發
    """

    def __init__(self):
        # token -> 回調，保持註冊順序
        self._callbacks: Dict[str, DispatchCallback] = OrderedDict()
        self._counter = itertools.count(1)
        self._is_dispatching = False
        # 已完成分發的 action 流
        self._action_subject = Subject()

    @property
    def actions(self) -> Observable:
        """每次分發完成後發出對應 Action 的 Observable。"""
        return self._action_subject

    def register(self, callback: DispatchCallback) -> DispatchToken:
        """
        註冊一個回調，回調會以 (action 名稱, *參數) 被呼叫。

        Returns:
            用於之後註銷的 token。
        """
        if not callable(callback):
            raise DispatcherError("Dispatcher.register expects a callable", operation="register")

        token = f"{_PREFIX}{next(self._counter)}"
        self._callbacks[token] = callback
        logger.debug("Registered callback %s", token)
        return token

    def unregister(self, token: DispatchToken) -> None:
        """
        註銷指定 token 的回調。

        Raises:
            DispatcherError: token 為 None 或不存在。
        """
        if token not in self._callbacks:
            raise DispatcherError(
                f"Dispatcher.unregister(...): '{token}' does not map to a registered callback",
                operation="unregister",
                token=token,
            )
        del self._callbacks[token]
        logger.debug("Unregistered callback %s", token)

    def dispatch(self, action: Union[str, Action], *args: Any) -> None:
        """
        同步分發一個 action 給所有回調。

        Args:
            action: action 名稱，或由 create_action 產生的 Action。
            *args: 附加的參數，當 action 是 Action 時會接在其 args 後面。
        """
        if self._is_dispatching:
            raise DispatcherError("Cannot dispatch in the middle of a dispatch", operation="dispatch")

        if isinstance(action, Action):
            action = Action(action.type, action.args + args)
        else:
            action = Action(action, args)

        self._is_dispatching = True
        try:
            for token, callback in list(self._callbacks.items()):
                # 分發途中被註銷的回調不再執行
                if token not in self._callbacks:
                    continue
                callback(action.type, *action.args)
        finally:
            self._is_dispatching = False

        self._action_subject.on_next(action)

    def is_dispatching(self) -> bool:
        return self._is_dispatching

    def __len__(self) -> int:
        return len(self._callbacks)

    def __contains__(self, token: object) -> bool:
        return token in self._callbacks
