"""
Helper registry：以 Store 名稱為鍵，保存各 Store 目前對外公開的 helper 集合。

視圖層（模板等）透過名稱查詢 helper，而不是依賴 Store 上動態掛載的屬性。
Store 在 create() 時發佈、在 destroy() 時清除。
"""
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from immutables import Map
from reactivex import Observable
from reactivex.subject import Subject

logger = logging.getLogger(__name__)

HelperSnapshot = Map


class HelperRegistry:
    """
    程序內的 helper 註冊表。

    每個名稱對應一個不可變的 immutables.Map 快照，並記錄是哪個 Store 發佈的，
    避免一個 Store 的 destroy() 清掉另一個同名 Store 的 helpers。
    """

    def __init__(self):
        # 名稱 -> (擁有者, helper 快照)
        self._entries: Dict[str, Tuple[Any, HelperSnapshot]] = {}
        # 每次 publish / clear 都會發出 (名稱, 快照或 None)
        self._changes = Subject()

    @property
    def changes(self) -> Observable:
        """發出 (store 名稱, helper 快照或 None) 的 Observable。"""
        return self._changes

    def publish(self, name: str, helpers: Mapping[str, Callable[..., Any]], owner: Any = None) -> HelperSnapshot:
        """
        發佈（或覆蓋）一個 Store 的完整 helper 集合。

        Args:
            name: Store 名稱。
            helpers: helper 名稱到已綁定函數的映射。
            owner: 發佈者，通常是 Store 本身。

        Returns:
            儲存的不可變快照。
        """
        current = self._entries.get(name)
        if current is not None and current[0] is not owner:
            logger.warning("Helper set '%s' is already published by another owner; replacing it", name)

        snapshot = Map(helpers)
        self._entries[name] = (owner, snapshot)
        self._changes.on_next((name, snapshot))
        return snapshot

    def clear(self, name: str, owner: Any = None) -> bool:
        """
        清除一個 Store 的 helper 集合。

        只有在 owner 與發佈者相同時才會清除。

        Returns:
            是否真的清除了條目。
        """
        current = self._entries.get(name)
        if current is None or current[0] is not owner:
            return False

        del self._entries[name]
        self._changes.on_next((name, None))
        return True

    def get(self, name: str) -> Optional[HelperSnapshot]:
        entry = self._entries.get(name)
        return entry[1] if entry is not None else None

    def lookup(self, name: str, helper_name: str) -> Optional[Callable[..., Any]]:
        """以 (store 名稱, helper 名稱) 查詢單一 helper。"""
        snapshot = self.get(name)
        if snapshot is None:
            return None
        return snapshot.get(helper_name)

    def names(self) -> List[str]:
        return list(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def reset(self) -> None:
        """清除所有條目，主要用於測試。"""
        for name in list(self._entries):
            del self._entries[name]
            self._changes.on_next((name, None))


# 程序共用的預設註冊表
global_helper_registry = HelperRegistry()
