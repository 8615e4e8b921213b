"""
由描述符生成 state 轉換處理函數的模組。

request 描述符會生成一整組 lifecycle 處理函數
（requesting、上傳進度、下載進度、成功、失敗、完成），
simple 描述符只生成一個處理函數。所有處理函數的簽名皆為
(state, *args) -> state，並且不會修改傳入的 state。
"""
from enum import Enum
from typing import Any, Dict

from .actions import DerivedNames
from .descriptors import ActionDescriptor
from .types import Handler


class LifecycleStatus(str, Enum):
    """寫入 `<NAME>_STATUS` 的 request 狀態。"""
    REQUESTING = "REQUESTING"
    OK = "OK"
    ERROR = "ERROR"


def status_key(name: str) -> str:
    return f"{name}_STATUS"


def _with_status(descriptor: ActionDescriptor, status: LifecycleStatus, callback_name: str) -> Handler:
    """先寫入狀態，再把更新後的 state 交給回調（若有提供）。"""
    key = status_key(descriptor.name)
    callback = getattr(descriptor, callback_name)

    def handler(state: Any, *args: Any) -> Any:
        statused_state = state.set(key, status.value)
        if callback is None:
            return statused_state
        return callback(statused_state, *args)

    handler.__name__ = f"{descriptor.name.lower()}_{status.value.lower()}"
    return handler


def _pass_through(descriptor: ActionDescriptor, callback_name: str) -> Handler:
    """不改變狀態鍵；有回調時交給回調，否則原樣返回 state。"""
    callback = getattr(descriptor, callback_name)

    def handler(state: Any, *args: Any) -> Any:
        if callback is None:
            return state
        return callback(state, *args)

    handler.__name__ = f"{descriptor.name.lower()}_{callback_name}"
    return handler


def build_request_handlers(descriptor: ActionDescriptor, names: DerivedNames) -> Dict[str, Handler]:
    """
    為 request 描述符建立完整的 lifecycle 處理函數。

    進度、成功與失敗的處理函數所收到的第一個參數分別是
    進度事件、回應與錯誤，其後才是原始呼叫參數。

    Args:
        descriptor: request 類型的描述符
        names: 由 derive_action_names 推導出的名稱

    Returns:
        action 類型 -> 處理函數 的字典
    """
    return {
        names.requesting_type: _with_status(descriptor, LifecycleStatus.REQUESTING, "on_action"),
        names.upload_progress_type: _pass_through(descriptor, "on_upload_progress"),
        names.download_progress_type: _pass_through(descriptor, "on_download_progress"),
        names.ok_type: _with_status(descriptor, LifecycleStatus.OK, "on_request_ok"),
        names.error_type: _with_status(descriptor, LifecycleStatus.ERROR, "on_request_error"),
        names.finished_type: _pass_through(descriptor, "on_finish"),
    }


def build_simple_handler(descriptor: ActionDescriptor) -> Dict[str, Handler]:
    """為 simple 描述符建立處理函數；未提供 action 回調時為恆等函數。"""
    return {descriptor.name: _pass_through(descriptor, "action")}
