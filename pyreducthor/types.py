"""
PyReducthor 共用的類型定義。

集中放置 dispatch、thunk、中介軟體與 handler 的型別別名，
讓各模組的簽名保持一致。
"""
from typing import Any, Callable, Optional, Protocol

from typing_extensions import TypedDict

# handler 接收 (state, *args) 並返回新的 state
Handler = Callable[..., Any]

DispatchFunction = Callable[[Any], Any]
NextDispatch = Callable[[Any], Any]
GetState = Callable[[], Any]
ThunkFunction = Callable[[DispatchFunction, GetState], Any]
MiddlewareFunction = Callable[[NextDispatch], DispatchFunction]


class ProgressEvent(TypedDict):
    """上傳 / 下載進度事件。total 在伺服器未提供長度時為 None。"""
    loaded: int
    total: Optional[int]


ProgressCallback = Callable[[ProgressEvent], None]


class ActionContext(TypedDict, total=False):
    """中介軟體在一次 dispatch 生命週期內共享的上下文。"""
    action: Any
    prev_state: Any
    next_state: Any
    result: Any
    error: Optional[Exception]
    timestamp: Any


class Store(Protocol):
    """中介軟體所需要的最小 Store 介面。"""

    def dispatch(self, action: Any) -> Any: ...

    def get_state(self) -> Any: ...

