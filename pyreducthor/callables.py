"""
生成使用者呼叫的 action 函數。

每個描述符對應一個函數。函數本身是同步的：它 dispatch 一個 thunk，
thunk 立即完成所有同步步驟（例如 requesting 狀態），並返回一個
asyncio.Future。future 成功時的結果是 ActionResult，失敗時拋出
ActionRejected，其中帶有原始錯誤與呼叫參數。

生成的函數必須在事件迴圈運行中被呼叫；否則在任何 dispatch 之前
拋出 RuntimeError，state 不會改變。
"""
import asyncio
import logging
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from .actions import Action, DerivedNames, to_callable_name
from .descriptors import ActionDescriptor, ActionResult, AuthConfig
from .errors import ActionRejected, SynchronousActionError, global_error_handler
from .paths import resolve_path
from .store import Store
from .transport import RequestConfig
from .types import DispatchFunction, GetState, ProgressCallback, ProgressEvent, ThunkFunction

logger = logging.getLogger(__name__)

BODY_METHODS = ("post", "patch", "put")

ActionCallable = Callable[..., "asyncio.Future[ActionResult]"]


def _settled(
    loop: asyncio.AbstractEventLoop,
    result: Optional[ActionResult] = None,
    error: Optional[BaseException] = None,
) -> "asyncio.Future[ActionResult]":
    """在指定的事件迴圈上建立一個已經完成的 future。"""
    future = loop.create_future()
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(result)
    return future


class FileUpload(NamedTuple):
    """
    multipart 表單中的檔案欄位。

    bytes 與可讀取的物件本身也會被當成檔案；需要指定檔名或
    content type 時使用這個類型。
    """
    filename: Optional[str]
    content: Any
    content_type: Optional[str] = None


def _file_field(value: Any) -> Any:
    """返回 httpx 的檔案欄位；不是檔案時返回 None。"""
    if isinstance(value, FileUpload):
        if value.content_type is None:
            return (value.filename, value.content)
        return tuple(value)
    if isinstance(value, (bytes, bytearray)) or hasattr(value, "read"):
        return value
    return None


def encode_payload(method: str, payload: Any, form_encoding: str) -> Dict[str, Any]:
    """
    依 HTTP 方法決定 payload 的傳送方式。

    post / patch / put 且有 payload 時作為表單送出：multipart 時每個欄位
    都放進 files（非檔案欄位以 (None, str(value)) 表示，列表與元組會重複
    同一個欄位），urlencoded 時放進 data。其他情況 payload 作為查詢參數。

    Returns:
        可直接展開到 RequestConfig 的 data / files / params 字典

    Raises:
        TypeError: 表單 payload 不是映射
    """
    if payload is None or method not in BODY_METHODS:
        return {"params": payload}

    if not isinstance(payload, Mapping):
        raise TypeError(f"form payload must be a mapping, got {type(payload).__name__}")

    if form_encoding == "urlencoded":
        return {"data": dict(payload)}

    files: List[Tuple[str, Any]] = []
    for field_name, value in payload.items():
        values = value if isinstance(value, (list, tuple)) and not isinstance(value, FileUpload) else [value]
        for item in values:
            file_field = _file_field(item)
            files.append((field_name, file_field if file_field is not None else (None, str(item))))
    return {"files": files}


def auth_headers(descriptor: ActionDescriptor, auth_config: Optional[AuthConfig]) -> Dict[str, str]:
    """私有描述符且有 token 時返回認證 header，否則返回空字典。"""
    if not descriptor.is_private or auth_config is None or auth_config.token is None:
        return {}
    return {auth_config.header_name: auth_config.token}


def build_request_config(
    descriptor: ActionDescriptor,
    url: str,
    payload: Any,
    base_url: Optional[str],
    auth_config: Optional[AuthConfig],
) -> RequestConfig:
    """組合傳輸層所需的請求配置（不含進度回調）。"""
    return RequestConfig(
        base_url=base_url,
        method=descriptor.method,
        url=url,
        headers=auth_headers(descriptor, auth_config),
        **encode_payload(descriptor.method, payload, descriptor.form_encoding),
    )


def _report(action_type: str, error: BaseException, args: Sequence[Any]) -> None:
    global_error_handler.handle(SynchronousActionError(action_type, error, args))


def _name_callable(func: Callable[..., Any], name: str) -> None:
    func.__name__ = name
    func.__qualname__ = name


def create_simple_callable(store: Store, descriptor: ActionDescriptor, namespace: Optional[str] = None) -> ActionCallable:
    """
    生成 simple 描述符的 action 函數。

    函數 dispatch Action(descriptor.name, args)；成功時 future 的結果為
    ActionResult(args=args)，action 回調拋出異常時 future 以 ActionRejected
    失敗，state 不變。
    """
    def thunk_for(args: Tuple[Any, ...]) -> ThunkFunction:
        def thunk(dispatch: DispatchFunction, get_state: GetState) -> "asyncio.Future[ActionResult]":
            # 沒有事件迴圈時在 dispatch 之前就失敗，state 保持不變
            loop = asyncio.get_running_loop()
            try:
                dispatch(Action(descriptor.name, args, namespace))
            except Exception as err:
                logger.warning("%s rejected: %s", descriptor.name, err)
                return _settled(loop, error=ActionRejected(err, args))
            return _settled(loop, ActionResult(args=args))
        return thunk

    def action_callable(*args: Any) -> "asyncio.Future[ActionResult]":
        return store.dispatch(thunk_for(args))

    _name_callable(action_callable, to_callable_name(descriptor.name))
    return action_callable


def create_request_callable(
    store: Store,
    descriptor: ActionDescriptor,
    names: DerivedNames,
    transport: Any,
    base_url: Optional[str],
    get_auth_config: Callable[[], Optional[AuthConfig]],
    namespace: Optional[str] = None,
) -> ActionCallable:
    """
    生成 request 描述符的 action 函數。

    呼叫順序：
    1. 展開路徑並組合請求；參數不足時 future 立即以 ActionRejected 失敗，
       不 dispatch 任何 action，也不發送請求。
    2. 同步 dispatch requesting action。
    3. 在事件迴圈中發送請求，進度回調 dispatch 進度 action。
    4. 成功時 dispatch ok 與 finished；失敗時 dispatch error 與 finished。

    ok 的回調拋出異常時視同請求失敗。

    Args:
        store: 要 dispatch 的 Store
        descriptor: request 描述符
        names: 推導出的 action 名稱
        transport: 實作 `await request(RequestConfig)` 的傳輸層
        base_url: 請求的基礎 URL
        get_auth_config: 返回目前認證配置的函數（每次呼叫時讀取）
        namespace: 所屬命名空間，dispatch 的 action 只會交給該命名空間的 reducer

    Returns:
        action 函數，返回 asyncio.Future[ActionResult]
    """
    def lifecycle(action_type: str, args: Tuple[Any, ...]) -> Action:
        return Action(action_type, args, namespace)

    def dispatch_failure(dispatch: DispatchFunction, error: BaseException, args: Tuple[Any, ...]) -> ActionRejected:
        # error 與 finished 都必須嘗試；回調的異常只回報，不覆蓋原始錯誤
        for action in (lifecycle(names.error_type, (error, *args)), lifecycle(names.finished_type, args)):
            try:
                dispatch(action)
            except Exception as err:
                _report(action.type, err, args)
        return ActionRejected(error, args)

    def progress_reporter(dispatch: DispatchFunction, action_type: str, args: Tuple[Any, ...]) -> ProgressCallback:
        # 回調的異常先回報，再由傳輸層往外拋，最後視同請求失敗
        def report_progress(event: ProgressEvent) -> None:
            try:
                dispatch(lifecycle(action_type, (event, *args)))
            except Exception as err:
                _report(action_type, err, args)
                raise
        return report_progress

    async def perform(dispatch: DispatchFunction, config: RequestConfig, args: Tuple[Any, ...]) -> ActionResult:
        config.on_upload_progress = progress_reporter(dispatch, names.upload_progress_type, args)
        config.on_download_progress = progress_reporter(dispatch, names.download_progress_type, args)

        logger.debug("%s %s %s", descriptor.name, config.method.upper(), config.url)
        try:
            response = await transport.request(config)
        except Exception as err:
            logger.warning("%s failed: %s", descriptor.name, err)
            raise dispatch_failure(dispatch, err, args) from err

        try:
            dispatch(lifecycle(names.ok_type, (response, *args)))
        except Exception as err:
            _report(names.ok_type, err, args)
            raise dispatch_failure(dispatch, err, args) from err

        try:
            dispatch(lifecycle(names.finished_type, args))
        except Exception as err:
            _report(names.finished_type, err, args)
            raise ActionRejected(err, args) from err

        return ActionResult(response=response, args=args)

    def thunk_for(args: Tuple[Any, ...]) -> ThunkFunction:
        def thunk(dispatch: DispatchFunction, get_state: GetState) -> "asyncio.Future[ActionResult]":
            loop = asyncio.get_running_loop()
            try:
                url, remaining = resolve_path(descriptor.path, args)
                payload = remaining[0] if remaining else None
                config = build_request_config(descriptor, url, payload, base_url, get_auth_config())
            except Exception as err:
                logger.warning("%s rejected: %s", descriptor.name, err)
                return _settled(loop, error=ActionRejected(err, args))

            try:
                dispatch(lifecycle(names.requesting_type, args))
            except Exception as err:
                _report(names.requesting_type, err, args)
                return _settled(loop, error=ActionRejected(err, args))

            return loop.create_task(perform(dispatch, config, args))
        return thunk

    def action_callable(*args: Any) -> "asyncio.Future[ActionResult]":
        return store.dispatch(thunk_for(args))

    _name_callable(action_callable, names.callable_name)
    return action_callable
