"""
FluxStore 錯誤處理模組。

定義 Store 生命週期、Action 分發與 Dispatcher 相關的異常類別，
並提供集中式的錯誤處理器，用於日誌記錄與錯誤回報。
"""
import functools
import logging
import traceback
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union

T = TypeVar("T")

logger = logging.getLogger("fluxstore")


class FluxStoreError(Exception):
    """所有 FluxStore 異常的基礎類。"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.traceback = traceback.format_exc()

    def to_dict(self) -> Dict[str, Any]:
        """
        將錯誤轉換為字典，便於序列化或上報。

        Returns:
            包含錯誤類型、訊息與細節的字典。
        """
        return {
            "type": type(self).__name__,
            "message": self.message,
            "details": dict(self.details),
        }

    def __str__(self) -> str:
        if not self.details:
            return self.message
        extra = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        return f"{self.message} ({extra})"


class ConfigurationError(FluxStoreError):
    """配置相關的錯誤。"""

    def __init__(self, message: str, component: str, config_key: Optional[str] = None, **kwargs: Any):
        details = {"component": component, **kwargs}
        if config_key is not None:
            details["config_key"] = config_key
        super().__init__(message, details)
        self.component = component
        self.config_key = config_key


class StoreError(FluxStoreError):
    """與 Store 生命週期相關的錯誤。"""

    def __init__(self, message: str, operation: str, store_name: Optional[str] = None, **kwargs: Any):
        super().__init__(message, {"operation": operation, "store_name": store_name, **kwargs})
        self.operation = operation
        self.store_name = store_name


class HookError(StoreError):
    """onCreated / onDestroyed 鉤子執行失敗。原始異常保存在 __cause__。"""

    def __init__(self, message: str, operation: str, store_name: Optional[str] = None,
                 hook_name: Optional[str] = None, **kwargs: Any):
        super().__init__(message, operation, store_name, hook_name=hook_name, **kwargs)
        self.hook_name = hook_name


class ActionError(FluxStoreError):
    """與 Action 相關的錯誤。"""

    def __init__(self, message: str, action_type: Any, payload: Any = None, **kwargs: Any):
        super().__init__(message, {"action_type": action_type, "payload": payload, **kwargs})
        self.action_type = action_type
        self.payload = payload


class DispatchError(ActionError):
    """分發參數格式錯誤，例如第一個參數不是 action 名稱字串。"""


class DispatcherError(FluxStoreError):
    """違反 Dispatcher 不變條件，例如註銷未知的 token 或巢狀分發。"""

    def __init__(self, message: str, operation: str, **kwargs: Any):
        super().__init__(message, {"operation": operation, **kwargs})
        self.operation = operation


class ErrorHandler:
    """集中式錯誤處理器，用於捕獲、日誌記錄和錯誤報告。"""

    def __init__(self, log_to_console: bool = True, log_to_file: bool = False, log_file: Optional[str] = None):
        """
        初始化錯誤處理器。

        Args:
            log_to_console: 是否透過 logging 輸出錯誤。
            log_to_file: 是否額外寫入日誌檔案。
            log_file: 日誌檔案路徑，log_to_file 為 True 時必填。
        """
        if log_to_file and not log_file:
            raise ConfigurationError("log_file is required when log_to_file is enabled",
                                     component="ErrorHandler", config_key="log_file")
        self.log_to_console = log_to_console
        self.log_to_file = log_to_file
        self.log_file = log_file
        self.handlers: List[Callable[[FluxStoreError], None]] = []
        self._file_handler: Optional[logging.Handler] = None

    def register_handler(self, handler: Callable[[FluxStoreError], None]) -> None:
        """註冊額外的錯誤回調，例如上報到外部監控服務。"""
        self.handlers.append(handler)

    def unregister_handler(self, handler: Callable[[FluxStoreError], None]) -> None:
        if handler in self.handlers:
            self.handlers.remove(handler)

    def handle(self, error: Union[FluxStoreError, Exception]) -> None:
        """
        處理一個錯誤：記錄日誌並通知所有已註冊的回調。

        非 FluxStoreError 的異常會先包裝成 FluxStoreError 再傳給回調。

        Args:
            error: 要處理的錯誤。
        """
        if not isinstance(error, FluxStoreError):
            wrapped = FluxStoreError(str(error), {"original_type": type(error).__name__})
            wrapped.__cause__ = error
            error = wrapped

        if self.log_to_console:
            logger.error("%s: %s", type(error).__name__, error)
        if self.log_to_file:
            self._file_logger().error("%s: %s", type(error).__name__, error)

        for handler in list(self.handlers):
            handler(error)

    def _file_logger(self) -> logging.Logger:
        file_logger = logging.getLogger("fluxstore.errors.file")
        if self._file_handler is None:
            self._file_handler = logging.FileHandler(self.log_file, encoding="utf-8")
            self._file_handler.setFormatter(
                logging.Formatter("[%(asctime)s] %(levelname)s %(name)s | %(message)s")
            )
            file_logger.addHandler(self._file_handler)
            # 避免重複輸出到 root logger
            file_logger.propagate = False
        return file_logger


# 單例錯誤處理器
global_error_handler = ErrorHandler()


def handle_error(func: Callable[..., T]) -> Callable[..., T]:
    """
    裝飾器：將函數拋出的異常交給 global_error_handler 處理後再重新拋出。

    錯誤仍會同步傳遞給呼叫者，這裡只負責回報。
    """
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return func(*args, **kwargs)
        except Exception as err:
            global_error_handler.handle(err)
            raise
    return wrapper
