"""
基於 FluxStore 的 Action 定義模組。

此模組提供 Action 類別以及創建 Action 的功能。
Action 是描述「使用者做了什麼」的不可變對象（例如 select-page，而不是 set-page-id），
由 Dispatcher 以 (action 名稱, *參數) 的形式分發給各個 Store。
"""
from typing import Any, Tuple

from .types import ActionCreator


class Action:
    """
    表示一個有名稱和可選參數的動作。

    屬性:
        type: 動作的名稱字串，對應 Store 的 action table 鍵名
        args: 分發時附帶的位置參數
    """
    __slots__ = ('type', 'args')

    def __init__(self, type: str, args: Tuple[Any, ...] = ()):
        super().__setattr__('type', type)
        super().__setattr__('args', tuple(args))

    def __setattr__(self, name, value):
        if name not in self.__slots__:
            raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")
        if hasattr(self, name):
            raise AttributeError(f"Cannot modify immutable instance attribute '{name}'")
        super().__setattr__(name, value)

    def __iter__(self):
        # 允許 dispatcher.dispatch(*action) 的寫法
        yield self.type
        yield from self.args

    def __eq__(self, other):
        if not isinstance(other, Action):
            return False
        return self.type == other.type and self.args == other.args

    def __hash__(self):
        try:
            return hash((self.type, self.args))
        except TypeError:
            # 參數不可哈希時退回以名稱計算
            return hash((self.type, len(self.args)))

    def __repr__(self):
        return f"Action(type='{self.type}', args={self.args!r})"


def create_action(action_type: str) -> ActionCreator:
    """
    創建一個 Action 生成器函數。

    Args:
        action_type: Action 的名稱

    Returns:
        一個可調用的函數，將傳入的位置參數包裝成指定名稱的 Action

    範例:
        >>> increment = create_action("increment")
        >>> increment()  # 返回 Action(type='increment', args=())
        >>>
        >>> increment_by = create_action("incrementBy")
        >>> increment_by(5)  # 返回 Action(type='incrementBy', args=(5,))
    """
    if not isinstance(action_type, str) or not action_type:
        raise TypeError("action_type must be a non-empty string")

    def action_creator(*args: Any) -> Action:
        return Action(action_type, args)

    # 添加 type 屬性以便於識別
    action_creator.type = action_type  # type: ignore
    action_creator.__name__ = f"create_{action_type}"

    return action_creator
