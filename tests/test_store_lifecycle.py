import pytest

from fluxstore import Store, HookError, create_store

from conftest import COUNTER_ACTIONS, COUNTER_HELPERS, init_count


def test_store_is_instance_of_store(make_store):
    assert isinstance(make_store(), Store)


def test_not_created_when_autocreate_is_false(make_store, dispatcher):
    store = make_store(autocreate=False)

    assert not hasattr(store, "count")
    assert not hasattr(store, "getCount")
    assert store.created() is False
    assert store.get_dispatch_token() is None
    assert dispatcher.registered == 0


def test_created_correctly(make_store, dispatcher):
    store = make_store()

    assert store.count == 0
    assert callable(store.getCount)
    assert store.created() is True
    assert dispatcher.registered == 1


def test_create_after_declarations(make_store, dispatcher):
    store = make_store(autocreate=False)
    assert dispatcher.registered == 0

    store.create()

    assert store.count == 0
    assert store.getCount() == 0
    assert store.created() is True
    assert dispatcher.registered == 1
    assert store.get_dispatch_token() == 1


def test_declarations_after_create_register_once(make_store, dispatcher):
    store = make_store(declare=False)

    assert store.count == 0
    assert not hasattr(store, "getCount")
    assert store.created() is True
    assert dispatcher.registered == 0

    store.helpers(COUNTER_HELPERS)
    store.actions(COUNTER_ACTIONS)

    assert callable(store.getCount)
    assert dispatcher.registered == 1

    # 再次宣告 actions 不會重複註冊
    store.actions({"decrement": lambda self: setattr(self, "count", self.count - 1)})
    assert dispatcher.register_calls == 1


def test_store_without_actions_never_registers(dispatcher, registry):
    store = Store("noActions", dispatcher, registry=registry)
    store.helpers(answer=lambda self: 42)

    assert store.answer() == 42
    assert dispatcher.registered == 0

    store.destroy()
    assert dispatcher.unregistered_tokens == []
    assert dispatcher.registered == 0


def test_create_twice_is_noop(make_store, dispatcher):
    calls = []
    store = make_store(autocreate=False)
    store.on_created(lambda s: calls.append("created"))

    store.create()
    store.create()

    assert calls == ["created"]
    assert dispatcher.register_calls == 1


def test_on_created_hooks_run_in_order(dispatcher, registry):
    order = []
    store = Store("ordered", dispatcher, autocreate=False, registry=registry)
    store.on_created(lambda s: order.append(1))
    store.on_created(lambda s: order.append(2))
    store.on_created(lambda s: order.append(3))

    store.create()

    assert order == [1, 2, 3]


def test_on_created_after_create_fires_immediately_once(make_store):
    calls = []
    store = make_store()

    store.on_created(lambda s: calls.append(s.name))
    assert calls == ["testStore"]

    store.destroy()
    store.create()
    assert calls == ["testStore", "testStore"]


def test_on_created_works_as_decorator(dispatcher, registry):
    store = Store("decorated", dispatcher, autocreate=False, registry=registry)

    @store.on_created
    def setup(self):
        self.items = []

    assert callable(setup)
    store.create()
    assert store.items == []


def test_destroy_runs_on_destroyed(make_store, destroyed):
    store = make_store()
    assert destroyed == []

    store.destroy()

    assert destroyed == ["testStore"]


def test_destroy_runs_multiple_on_destroyed(make_store, destroyed):
    store = make_store()
    store.on_destroyed(lambda s: destroyed.append("second"))

    store.destroy()

    assert destroyed == ["testStore", "second"]


def test_destroy_unregisters_from_dispatcher(make_store, dispatcher):
    store = make_store()
    token = store.get_dispatch_token()
    assert dispatcher.registered == 1

    store.destroy()

    assert dispatcher.registered == 0
    assert dispatcher.unregistered_tokens == [token]
    assert store.get_dispatch_token() is None


def test_destroy_removes_helpers_and_fields(make_store):
    store = make_store()
    assert store.getCount() == 0

    store.destroy()

    assert store.created() is False
    assert not hasattr(store, "getCount")
    assert not hasattr(store, "count")
    with pytest.raises(AttributeError):
        store.getCount()


def test_destroy_twice_is_noop(make_store, dispatcher, destroyed):
    store = make_store()

    store.destroy()
    store.destroy()

    assert destroyed == ["testStore"]
    assert dispatcher.registered == 0
    assert len(dispatcher.unregistered_tokens) == 1


def test_destroy_before_create_is_noop(make_store, dispatcher, destroyed):
    store = make_store(autocreate=False)

    store.destroy()

    assert destroyed == []
    assert dispatcher.unregistered_tokens == []


def test_recreate_after_destroy(make_store, dispatcher, destroyed):
    store = make_store()
    store.count = 10

    store.destroy()
    store.create()

    # 宣告保留，執行期狀態重新初始化
    assert store.count == 0
    assert store.getCount() == 0
    assert dispatcher.registered == 1
    assert dispatcher.register_calls == 2

    store.destroy()
    assert destroyed == ["testStore", "testStore"]
    assert dispatcher.registered == 0


def test_declarations_survive_destroy(make_store):
    store = make_store()

    store.destroy()

    assert store.name == "testStore"
    assert set(store._declarations.actions) == {"increment", "incrementBy"}
    assert set(store._declarations.helpers) == {"getCount"}
    assert len(store._declarations.on_created) == 1
    assert len(store._declarations.on_destroyed) == 1


def test_failing_on_created_hook_aborts_create(dispatcher, registry):
    calls = []
    store = Store("broken", dispatcher, autocreate=False, registry=registry)

    def explode(self):
        raise RuntimeError("boom")

    store.on_created(explode)
    store.on_created(lambda s: calls.append("after"))
    store.actions(increment=lambda self: None)

    with pytest.raises(HookError) as exc_info:
        store.create()

    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert exc_info.value.hook_name == "explode"
    assert exc_info.value.operation == "create"
    assert calls == []
    assert store.created() is False
    assert dispatcher.registered == 0


def test_failing_on_destroyed_hook_propagates(make_store, dispatcher):
    store = make_store()

    def explode(self):
        raise ValueError("nope")

    store.on_destroyed(explode)

    with pytest.raises(HookError):
        store.destroy()

    # 沒有回滾：仍處於已建立狀態
    assert store.created() is True
    assert dispatcher.registered == 1


def test_context_manager_creates_and_destroys(dispatcher, registry):
    store = Store("scoped", dispatcher, autocreate=False, registry=registry)
    store.on_created(init_count)
    store.actions(COUNTER_ACTIONS)

    with store as entered:
        assert entered is store
        assert store.created() is True
        assert dispatcher.registered == 1

    assert store.created() is False
    assert dispatcher.registered == 0


def test_create_store_declares_before_creating(dispatcher, registry):
    destroyed = []
    store = create_store(
        "factory",
        dispatcher,
        actions=COUNTER_ACTIONS,
        helpers=COUNTER_HELPERS,
        on_created=[init_count],
        on_destroyed=[lambda s: destroyed.append(s.count)],
        registry=registry,
    )

    assert store.created() is True
    assert store.getCount() == 0
    assert dispatcher.register_calls == 1

    dispatcher.dispatch("incrementBy", 3)
    store.destroy()
    assert destroyed == [3]


def test_create_store_without_autocreate(dispatcher, registry):
    store = create_store("lazy", dispatcher, actions=COUNTER_ACTIONS, autocreate=False, registry=registry)

    assert store.created() is False
    assert dispatcher.registered == 0


def test_get_dispatcher_returns_bound_dispatcher(make_store, dispatcher):
    assert make_store().get_dispatcher() is dispatcher
