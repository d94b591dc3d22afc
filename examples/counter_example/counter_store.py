import time

from fluxstore import Dispatcher, Store

from counter_actions import decrement, increment, increment_by, reset

# 創建 Dispatcher 與 Store（先宣告，之後手動 create）
dispatcher = Dispatcher()
store = Store("counter", dispatcher, autocreate=False)


@store.on_created
def init_counter(self):
    self.count = 0
    self.last_updated = None


@store.on_destroyed
def report(self):
    print(f"Store 銷毀前的計數: {self.count}")


def _touch(self, count):
    self.count = count
    self.last_updated = time.time()


store.actions({
    increment.type: lambda self: _touch(self, self.count + 1),
    decrement.type: lambda self: _touch(self, self.count - 1),
    increment_by.type: lambda self, n: _touch(self, self.count + n),
    reset.type: lambda self, value=0: _touch(self, value),
})

store.helpers(
    get_count=lambda self: self.count,
    get_counter_info=lambda self: {"count": self.count, "last_updated": self.last_updated},
)
