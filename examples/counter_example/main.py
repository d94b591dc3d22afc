import json
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from fluxstore import global_helper_registry

from counter_store import dispatcher, store
from counter_actions import decrement, increment, increment_by, reset

if __name__ == "__main__":
    # 訂閱 helper 集合的變化（模擬視圖層）
    global_helper_registry.changes.subscribe(
        on_next=lambda change: print(
            f"helpers 更新: {change[0]} -> {'cleared' if change[1] is None else sorted(change[1].keys())}"
        )
    )
    # 記錄每個分發的 action
    dispatcher.actions.subscribe(on_next=lambda action: print(f"[Log] Action: {action!r}"))

    store.create()

    print("\n==== 開始測試基本操作 ====")
    dispatcher.dispatch(increment())
    dispatcher.dispatch(increment_by(5))
    dispatcher.dispatch(decrement())
    print(f"計數: {store.get_count()}")

    dispatcher.dispatch(reset(10))
    dispatcher.dispatch("incrementBy", 99)

    # 透過 registry 以名稱查詢 helper
    info = global_helper_registry.lookup("counter", "get_counter_info")()
    print(f"計數器信息: {json.dumps(info, ensure_ascii=False, indent=2)}")

    print("\n==== 銷毀 Store ====")
    store.destroy()
    print(f"已建立: {store.created()}, 有 get_count: {hasattr(store, 'get_count')}")
