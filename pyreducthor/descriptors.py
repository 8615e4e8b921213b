"""
宣告式配置模型。

使用 Pydantic 驗證 action 描述符、認證配置與整體配置。
描述符可直接以字典提供，原始配置格式中的 camelCase 鍵名亦可作為別名使用。
"""
from typing import Any, Callable, Dict, List, Literal, Optional, Tuple, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_AUTH_HEADER = "Authentication"

HttpMethod = Literal["delete", "get", "head", "options", "patch", "post", "put"]
Callback = Optional[Callable[..., Any]]


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class ActionDescriptor(BaseModel):
    """
    單一 action 的宣告式描述。

    kind 為 "simple" 時只使用 action 回調；為 "request" 時
    使用 method、path 與各個 lifecycle 回調。
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, arbitrary_types_allowed=True)

    name: str
    kind: Literal["request", "simple"] = Field("simple", validation_alias=_alias("kind", "type"))
    method: HttpMethod = "get"
    path: Optional[str] = None
    is_private: bool = Field(False, validation_alias=_alias("is_private", "private", "isPrivate"))
    form_encoding: Literal["multipart", "urlencoded"] = Field(
        "multipart", validation_alias=_alias("form_encoding", "formEncoding")
    )

    action: Callback = None
    on_action: Callback = Field(None, validation_alias=_alias("on_action", "onAction"))
    on_upload_progress: Callback = Field(None, validation_alias=_alias("on_upload_progress", "onUploadProgress"))
    on_download_progress: Callback = Field(
        None, validation_alias=_alias("on_download_progress", "onDownloadProgress")
    )
    on_request_ok: Callback = Field(None, validation_alias=_alias("on_request_ok", "onRequestOk"))
    on_request_error: Callback = Field(None, validation_alias=_alias("on_request_error", "onRequestError"))
    on_finish: Callback = Field(None, validation_alias=_alias("on_finish", "onFinish"))

    @field_validator("method", mode="before")
    @classmethod
    def _lower_method(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    @field_validator("kind", mode="before")
    @classmethod
    def _default_kind(cls, value: Any) -> Any:
        # 原始格式中省略 type 等同於 simple
        return "simple" if value is None else value

    @model_validator(mode="after")
    def _request_needs_path(self) -> "ActionDescriptor":
        if self.kind == "request" and not self.path:
            raise ValueError(f"request action {self.name!r} needs a path")
        return self


class AuthConfig(BaseModel):
    """私有 request 所附加的認證 header 配置。"""
    header: Optional[str] = None
    token: Optional[str] = None

    @property
    def header_name(self) -> str:
        return self.header or DEFAULT_AUTH_HEADER

    def merge(self, partial: Union["AuthConfig", Dict[str, Any]]) -> "AuthConfig":
        """淺層合併，partial 中明確給出的欄位覆蓋目前的值。"""
        if isinstance(partial, AuthConfig):
            partial = partial.model_dump(exclude_unset=True)
        return self.model_validate({**self.model_dump(exclude_unset=True), **partial})


ActionList = List[ActionDescriptor]


class ReducthorConfig(BaseModel):
    """
    Reducthor 的整體配置。

    屬性:
        base_url: 所有 request 的基礎 URL
        auth_config: 認證配置，可之後透過 config_auth 更新
        actions: 描述符列表（單一 reducer），或 命名空間 -> 描述符列表 的映射
        initial_state: 初始狀態，字典會被轉為不可變 Map
        middleware: 附加在 thunk 中介軟體之後的中介軟體（類或實例）
        transport: 實作 request(config) 的傳輸層，預設使用 HttpxTransport
    """
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    base_url: Optional[str] = Field(None, validation_alias=_alias("base_url", "baseUrl"))
    auth_config: Optional[AuthConfig] = Field(None, validation_alias=_alias("auth_config", "authConfig"))
    actions: Union[ActionList, Dict[str, ActionList]]
    initial_state: Any = Field(None, validation_alias=_alias("initial_state", "initialState"))
    middleware: List[Any] = Field(default_factory=list)
    transport: Any = None

    @field_validator("middleware", mode="before")
    @classmethod
    def _listify_middleware(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return list(value)
        return [value]

    @property
    def namespaced(self) -> bool:
        return isinstance(self.actions, dict)


class ActionResult(BaseModel):
    """生成的 action 函數成功時的結果。simple action 的 response 為 None。"""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    args: Tuple[Any, ...] = ()
    response: Any = None
