"""
Store 的配置模型。

使用 Pydantic 驗證建構 Store 時傳入的選項，驗證失敗時統一轉換成 ConfigurationError。
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigurationError


class StoreConfig(BaseModel):
    """
    Store 的選項。

    Attributes:
        name: Store 名稱，同時是 helper registry 的鍵名，不可為空。
        autocreate: 建構後是否立即呼叫 create()。
        strict_dispatch: 分發的第一個參數不是字串時，是否拋出 DispatchError（否則靜默忽略）。
        publish_helpers: create() 時是否將 helpers 發佈到 helper registry。
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    autocreate: bool = True
    strict_dispatch: bool = False
    publish_helpers: bool = True


def build_config(name: Any, autocreate: Optional[bool] = None,
                 config: Optional[StoreConfig] = None, **overrides: Any) -> StoreConfig:
    """
    合併建構參數與既有配置，產生驗證過的 StoreConfig。

    Args:
        name: Store 名稱。
        autocreate: 若不為 None，覆寫配置中的 autocreate。
        config: 既有的配置物件，可選。
        **overrides: 其他要覆寫的欄位。

    Returns:
        新的 StoreConfig。

    Raises:
        ConfigurationError: 任一欄位驗證失敗。
    """
    values: Dict[str, Any] = config.model_dump() if config is not None else {}
    values.update(overrides)
    values["name"] = name
    if autocreate is not None:
        values["autocreate"] = autocreate

    try:
        return StoreConfig(**values)
    except ValidationError as err:
        first = err.errors()[0]
        key = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ConfigurationError(
            f"Invalid store configuration: {first.get('msg')}",
            component="StoreConfig",
            config_key=key,
        ) from err
