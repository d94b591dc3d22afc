import logging
from dataclasses import dataclass, field
from types import MethodType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from .actions import Action
from .config import StoreConfig, build_config
from .errors import (
    ActionError, ConfigurationError, DispatchError, FluxStoreError, HookError, handle_error
)
from .registry import HelperRegistry, global_helper_registry
from .types import ActionFn, DispatchToken, DispatcherLike, HelperFn, Hook

logger = logging.getLogger(__name__)


@dataclass
class _Declarations:
    """Store 的宣告部分，destroy() 之後仍然保留。"""
    actions: Dict[str, ActionFn] = field(default_factory=dict)
    helpers: Dict[str, HelperFn] = field(default_factory=dict)
    on_created: List[Hook] = field(default_factory=list)
    on_destroyed: List[Hook] = field(default_factory=list)


@dataclass
class _RuntimeState:
    """Store 的執行期狀態，每次 destroy() 都會整個換成新的。"""
    created: bool = False
    token: Optional[DispatchToken] = None
    # 已綁定並掛載在 Store 上的 helpers
    helpers: Dict[str, Callable[..., Any]] = field(default_factory=dict)
    # 鉤子與 actions 設定的應用狀態，例如 self.count
    fields: Dict[str, Any] = field(default_factory=dict)


_STORE_SLOTS = ("name", "_dispatcher", "_config", "_registry", "_declarations", "_runtime")


class Store:
    """
    狀態容器，管理私有狀態、接收 Dispatcher 分發的 actions，並透過 helpers 對外公開衍生值。

    生命週期：建構 -> create() -> destroy() -> create() ...
    每次 create() / destroy() 都會重新執行鉤子，並獨立地向 Dispatcher 註冊 / 註銷。

    鉤子、actions 與 helpers 的第一個參數都是 Store 本身：

        store = Store("counter", dispatcher, autocreate=False)

        @store.on_created
        def init(self):
            self.count = 0

        store.actions(increment=lambda self: setattr(self, "count", self.count + 1))
        store.helpers(get_count=lambda self: self.count)
        store.create()

    在 Store 上設定的任意屬性（如 self.count）屬於執行期狀態，destroy() 後會被清除。
    """
    __slots__ = _STORE_SLOTS

    def __init__(self, name: str, dispatcher: DispatcherLike, autocreate: Optional[bool] = None, *,
                 config: Optional[StoreConfig] = None, registry: Optional[HelperRegistry] = None):
        """
        初始化 Store。

        Args:
            name: Store 名稱，也是 helper registry 中的鍵名。
            dispatcher: 具有 register / unregister 的 Dispatcher。
            autocreate: 為 False 時需要手動呼叫 create()；為 None 時使用 config.autocreate（預設 True）。
            config: 其他選項，見 StoreConfig。
            registry: helper registry，預設為程序共用的 global_helper_registry。
        """
        if not isinstance(dispatcher, DispatcherLike):
            raise ConfigurationError(
                "Store dispatcher must provide register() and unregister()",
                component="Store", config_key="dispatcher",
            )
        self._config = build_config(name, autocreate=autocreate, config=config)
        self.name = self._config.name
        self._dispatcher = dispatcher
        self._registry = registry if registry is not None else global_helper_registry
        self._declarations = _Declarations()
        self._runtime = _RuntimeState()

        if self._config.autocreate:
            self.create()

    # ———— 屬性存取 ————

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _STORE_SLOTS:
            object.__setattr__(self, name, value)
        elif name in _RESERVED:
            raise AttributeError(f"Cannot overwrite Store attribute '{name}'")
        else:
            self._runtime.fields[name] = value

    def __getattr__(self, name: str) -> Any:
        # 只有在一般查找失敗時才會進來
        if name in _STORE_SLOTS or name.startswith("__"):
            raise AttributeError(name)
        runtime = object.__getattribute__(self, "_runtime")
        if name in runtime.helpers:
            return runtime.helpers[name]
        if name in runtime.fields:
            return runtime.fields[name]
        raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")

    def __delattr__(self, name: str) -> None:
        if name in _STORE_SLOTS or name in _RESERVED:
            raise AttributeError(f"Cannot delete Store attribute '{name}'")
        try:
            del self._runtime.fields[name]
        except KeyError:
            raise AttributeError(name) from None

    def __dir__(self) -> Iterable[str]:
        return sorted(set(super().__dir__()) | set(self._runtime.helpers) | set(self._runtime.fields))

    def __repr__(self) -> str:
        return f"Store(name='{self.name}', created={self._runtime.created})"

    # ———— Actions ————

    def actions(self, new_actions: Optional[Mapping[str, ActionFn]] = None, **named: ActionFn) -> None:
        """
        註冊此 Store 處理的 actions。

        Actions 描述使用者的動作，而不是 setter（例如 select_page 而不是 set_page_id）。
        依照 Flux 的慣例，actions 不應直接呼叫，只應透過 Dispatcher 分發。

        多次呼叫會合併，同名的 action 以後宣告者為準。每個 action 在宣告時就綁定到 Store。
        若 Store 已經 create() 但尚未註冊，會在此時向 Dispatcher 註冊。

        Args:
            new_actions: action 名稱到函數的映射。
            **named: 以關鍵字參數宣告的 actions。
        """
        items = _merge_mapping(new_actions, named, "actions")
        for key, action in items:
            self._declarations.actions[key] = MethodType(action, self)

        # create() 先於 actions 宣告時，在這裡補上註冊
        if self._runtime.created and self._runtime.token is None and self._declarations.actions:
            self._register_actions()

    def _register_actions(self) -> None:
        """向 Dispatcher 註冊分發回調並保存 token。"""
        self._runtime.token = self._dispatcher.register(self._handle_dispatch)
        logger.debug("Store '%s' registered with dispatcher as %r", self.name, self._runtime.token)

    @handle_error
    def _handle_dispatch(self, *args: Any) -> None:
        """
        Dispatcher 的回調，參數為 (action 名稱, *參數)。

        名稱不存在於 action table 時不做任何事。
        第一個參數不是字串時，依 strict_dispatch 決定靜默忽略或拋出 DispatchError。
        """
        action_type, action_args = _split_dispatch_args(args)
        if action_type is None:
            if self._config.strict_dispatch:
                raise DispatchError(
                    f"Store '{self.name}' received a dispatch without an action name",
                    action_type=args[0] if args else None,
                    payload=args[1:],
                    store_name=self.name,
                )
            logger.debug("Store '%s' ignored malformed dispatch %r", self.name, args)
            return

        action = self._declarations.actions.get(action_type)
        if action is None:
            return

        try:
            action(*action_args)
        except FluxStoreError:
            raise
        except Exception as err:
            raise ActionError(
                f"Action '{action_type}' of store '{self.name}' failed: {err}",
                action_type=action_type,
                payload=action_args,
                store_name=self.name,
            ) from err

    def get_dispatcher(self) -> DispatcherLike:
        """返回此 Store 綁定的 Dispatcher。"""
        return self._dispatcher

    def get_dispatch_token(self) -> Optional[DispatchToken]:
        """
        返回 Dispatcher 識別此 Store 的 token。

        只有在 Store 已 create() 且宣告過 actions 時才會有值，否則為 None。
        """
        return self._runtime.token

    # ———— Helpers ————

    def helpers(self, new_helpers: Optional[Mapping[str, HelperFn]] = None, **named: HelperFn) -> None:
        """
        指定此 Store 的 helpers。

        與 actions() 不同，每次呼叫都會整組替換。
        若 Store 已經 create()，立即重新綁定並發佈新的 helper 集合。

        Args:
            new_helpers: helper 名稱到函數的映射。
            **named: 以關鍵字參數宣告的 helpers。
        """
        self._declarations.helpers = dict(_merge_mapping(new_helpers, named, "helpers"))

        if self._runtime.created:
            self._attach_helpers()

    def _attach_helpers(self) -> None:
        """綁定 helpers、掛載到 Store 上，並發佈到 helper registry。"""
        self._runtime.helpers = {
            key: MethodType(helper, self) for key, helper in self._declarations.helpers.items()
        }
        if self._config.publish_helpers:
            self._registry.publish(self.name, self._runtime.helpers, owner=self)

    def _detach_helpers(self) -> None:
        self._runtime.helpers = {}
        if self._config.publish_helpers:
            self._registry.clear(self.name, owner=self)

    # ———— 生命週期 ————

    @handle_error
    def create(self) -> None:
        """
        初始化 Store：執行 onCreated 鉤子、有 actions 時向 Dispatcher 註冊、並公開 helpers。

        已經 create() 過的 Store 再次呼叫不會有任何效果。
        任何鉤子拋出異常都會中止後續步驟，並以 HookError 傳回給呼叫者。
        """
        if self._runtime.created:
            return

        self._run_hooks(self._declarations.on_created, "create")

        # 只有宣告過 actions 才註冊
        registered_here = False
        if self._declarations.actions and self._runtime.token is None:
            self._register_actions()
            registered_here = True

        try:
            self._attach_helpers()
        except Exception:
            # 發佈失敗時撤回本次註冊，不留下懸空的 token
            if registered_here:
                self._dispatcher.unregister(self._runtime.token)
                self._runtime.token = None
            self._runtime.helpers = {}
            raise
        self._runtime.created = True
        logger.debug("Store '%s' created", self.name)

    @handle_error
    def destroy(self) -> None:
        """
        銷毀 Store：執行 onDestroyed 鉤子、移除 helpers、向 Dispatcher 註銷，並清除執行期狀態。

        宣告（actions、helpers、鉤子）會保留，之後可以再次 create()。
        對尚未 create() 的 Store 呼叫不會有任何效果。
        """
        if not self._runtime.created:
            logger.debug("Store '%s' is not created; destroy() ignored", self.name)
            return

        self._run_hooks(self._declarations.on_destroyed, "destroy")

        self._detach_helpers()

        token = self._runtime.token
        if token is not None:
            self._dispatcher.unregister(token)
            self._runtime.token = None

        # 清除鉤子設定的欄位與其餘執行期狀態
        self._runtime = _RuntimeState()
        logger.debug("Store '%s' destroyed", self.name)

    def created(self) -> bool:
        """
        檢查 Store 是否已 create()。

        範例:
            if not counter_store.created():
                counter_store.create()
        """
        return self._runtime.created

    @handle_error
    def on_created(self, hook: Hook) -> Hook:
        """
        註冊 Store 建立時執行的函數，適合在這裡初始化狀態。

        若 Store 已經建立，鉤子會立即執行一次。可作為裝飾器使用。
        """
        _ensure_callable(hook, "on_created")
        self._declarations.on_created.append(hook)

        if self._runtime.created:
            self._run_hooks([hook], "on_created")
        return hook

    def on_destroyed(self, hook: Hook) -> Hook:
        """註冊 Store 銷毀時執行的函數。可作為裝飾器使用。"""
        _ensure_callable(hook, "on_destroyed")
        self._declarations.on_destroyed.append(hook)
        return hook

    def _run_hooks(self, hooks: List[Hook], operation: str) -> None:
        # 迭代副本，鉤子執行期間新增的鉤子不在本輪執行
        for hook in list(hooks):
            try:
                hook(self)
            except Exception as err:
                hook_name = getattr(hook, "__name__", repr(hook))
                raise HookError(
                    f"Hook '{hook_name}' failed during {operation} of store '{self.name}': {err}",
                    operation=operation,
                    store_name=self.name,
                    hook_name=hook_name,
                ) from err

    def __enter__(self) -> "Store":
        self.create()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.destroy()


_RESERVED = frozenset(name for name in dir(Store) if name not in _STORE_SLOTS)


def _ensure_callable(fn: Any, where: str) -> None:
    if not callable(fn):
        raise ConfigurationError(f"{where} expects a callable, got {type(fn).__name__}",
                                 component="Store", config_key=where)


def _merge_mapping(mapping: Optional[Mapping[str, Callable[..., Any]]],
                   named: Dict[str, Callable[..., Any]], where: str) -> List[Tuple[str, Callable[..., Any]]]:
    """合併映射與關鍵字參數，並驗證鍵名與函數。"""
    if mapping is not None and not isinstance(mapping, Mapping):
        raise ConfigurationError(f"{where}() expects a mapping of name to callable",
                                 component="Store", config_key=where)

    items = list((mapping or {}).items()) + list(named.items())
    for key, fn in items:
        if not isinstance(key, str) or not key:
            raise ConfigurationError(f"{where}() names must be non-empty strings, got {key!r}",
                                     component="Store", config_key=where)
        if where == "helpers" and (key in _RESERVED or key in _STORE_SLOTS):
            raise ConfigurationError(f"Helper '{key}' would shadow the Store API",
                                     component="Store", config_key=key)
        _ensure_callable(fn, f"{where}.{key}")
    return items


def _split_dispatch_args(args: Tuple[Any, ...]) -> Tuple[Optional[str], Tuple[Any, ...]]:
    """將分發參數拆成 (action 名稱, 其餘參數)；名稱無效時返回 (None, ())。"""
    if not args:
        return None, ()
    first = args[0]
    if isinstance(first, Action):
        return first.type, first.args + tuple(args[1:])
    if isinstance(first, str):
        return first, tuple(args[1:])
    return None, ()


def create_store(name: str, dispatcher: DispatcherLike, *,
                 actions: Optional[Mapping[str, ActionFn]] = None,
                 helpers: Optional[Mapping[str, HelperFn]] = None,
                 on_created: Optional[Iterable[Hook]] = None,
                 on_destroyed: Optional[Iterable[Hook]] = None,
                 autocreate: Optional[bool] = None,
                 config: Optional[StoreConfig] = None,
                 registry: Optional[HelperRegistry] = None) -> Store:
    """
    創建一個 Store，先完成所有宣告再決定是否 create()。

    Args:
        name: Store 名稱。
        dispatcher: 要綁定的 Dispatcher。
        actions: action 名稱到函數的映射。
        helpers: helper 名稱到函數的映射。
        on_created: 建立時依序執行的鉤子。
        on_destroyed: 銷毀時依序執行的鉤子。
        autocreate: 是否在宣告完成後立即 create()；為 None 時使用 config.autocreate。

    Returns:
        Store: 新創建的 Store 實例。
    """
    resolved = build_config(name, autocreate=autocreate, config=config)
    store = Store(name, dispatcher, autocreate=False, config=resolved, registry=registry)
    for hook in on_created or ():
        store.on_created(hook)
    for hook in on_destroyed or ():
        store.on_destroyed(hook)
    if actions:
        store.actions(actions)
    if helpers:
        store.helpers(helpers)
    if resolved.autocreate:
        store.create()
    return store
