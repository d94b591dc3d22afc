# tests/conftest.py
import pytest

from fluxstore import HelperRegistry


class CountingDispatcher:
    """記錄註冊次數的假 Dispatcher，只保留最後一個回調。"""

    def __init__(self):
        self.registered = 0
        self.register_calls = 0
        self.unregistered_tokens = []
        self.action_callback = None

    def register(self, callback):
        self.action_callback = callback
        self.registered += 1
        self.register_calls += 1
        return self.register_calls

    def unregister(self, token):
        self.unregistered_tokens.append(token)
        self.registered -= 1

    def dispatch(self, *args):
        self.action_callback(*args)


def increment(self):
    self.count += 1


def increment_by(self, n):
    self.count = self.count + n


def get_count(self):
    return self.count


def init_count(self):
    self.count = 0


COUNTER_ACTIONS = {"increment": increment, "incrementBy": increment_by}
COUNTER_HELPERS = {"getCount": get_count}


@pytest.fixture
def dispatcher():
    return CountingDispatcher()


@pytest.fixture
def registry():
    return HelperRegistry()


@pytest.fixture
def destroyed():
    # 以 list 記錄 onDestroyed 被呼叫的次數
    return []


@pytest.fixture
def make_store(dispatcher, registry, destroyed):
    """
    建立一個計數器 Store。

    autocreate=True 時與原始測試相同：先 create()，之後才宣告鉤子、helpers 與 actions。
    """
    from fluxstore import Store

    def factory(autocreate=True, declare=True, name="testStore", **kwargs):
        store = Store(name, dispatcher, autocreate, registry=registry, **kwargs)
        store.on_created(init_count)
        if declare:
            store.helpers(COUNTER_HELPERS)
            store.actions(COUNTER_ACTIONS)
        store.on_destroyed(lambda s: destroyed.append(s.name))
        return store

    return factory
