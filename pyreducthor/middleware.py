"""
Store 的中介軟體。

支援兩種形式：
- 可呼叫的工廠 (store) -> (next_dispatch) -> dispatch，例如 ThunkMiddleware；
- 實作 on_next / on_complete / on_error 的物件，由 Store 以
  action_context 包在 dispatch 外層。

生成的 action 函數只依賴 ThunkMiddleware，其他中介軟體僅用於觀察。
"""

import contextlib
import datetime
import logging
from typing import Any, Iterator, List, Tuple

from .actions import Action
from .immutable_utils import to_dict
from .types import (
    ActionContext, DispatchFunction, MiddlewareFunction, NextDispatch, Store
)

logger = logging.getLogger(__name__)


class BaseMiddleware:
    """
    物件型中介軟體的基類，三個 hook 預設都不做事。

    子類只需覆寫關心的 hook：on_next 在 reducer 執行前、on_complete
    在 state 更新後、on_error 在 reducer（也就是使用者回調）拋出異常時。
    """

    def on_next(self, action: Any, prev_state: Any) -> None:
        """
        Args:
            action: 即將交給 reducer 的 Action
            prev_state: 這次 dispatch 前的 state
        """

    def on_complete(self, next_state: Any, action: Any) -> None:
        """
        Args:
            next_state: reducer 處理後的 state
            action: 已處理的 Action
        """

    def on_error(self, error: Exception, action: Any) -> None:
        """
        Args:
            error: reducer 拋出的異常，之後會繼續往外拋
            action: 處理失敗的 Action
        """

    @contextlib.contextmanager
    def action_context(self, action: Any, prev_state: Any) -> Iterator[ActionContext]:
        """
        把一次 dispatch 包成上下文。

        Store 在區塊內填入 context['result'] 與 context['next_state']；
        正常離開時呼叫 on_complete，出錯時呼叫 on_error 後重新拋出。
        """
        context: ActionContext = {
            'action': action,
            'prev_state': prev_state,
            'next_state': None,
            'result': None,
            'error': None,
            'timestamp': datetime.datetime.now(),
        }
        self.on_next(action, prev_state)
        try:
            yield context
        except Exception as err:
            context['error'] = err
            self.on_error(err, action)
            raise
        self.on_complete(context['next_state'], action)


class LoggerMiddleware(BaseMiddleware):
    """
    以 logging 記錄每個 action 以及前後的 state。

    適合用來確認一次 request 的 lifecycle action 依序出現，
    以及每個回調對 state 做了什麼。

    Args:
        level: 一般訊息的日誌等級，錯誤固定以 WARNING 記錄
    """

    def __init__(self, level: int = logging.DEBUG):
        self.level = level

    def on_next(self, action: Action, prev_state: Any) -> None:
        logger.log(self.level, "▶️ dispatching %s args=%r", action.type, action.args)
        logger.log(self.level, "🔄 state before %s: %s", action.type, to_dict(prev_state))

    def on_complete(self, next_state: Any, action: Action) -> None:
        logger.log(self.level, "✅ state after %s: %s", action.type, to_dict(next_state))

    def on_error(self, error: Exception, action: Action) -> None:
        logger.warning("❌ error in %s: %s", action.type, error)


class ThunkMiddleware:
    """
    讓 dispatch 接受函數 (thunk)。

    thunk 以 (dispatch, get_state) 呼叫，dispatch 返回 thunk 的返回值；
    其他值照常交給下一層。Store 永遠把它放在最外層。

    範例:
        ```python
        def rename(name):
            def thunk(dispatch, get_state):
                dispatch(Action("RENAME", (name,)))
                return get_state()["name"]
            return thunk

        store.dispatch(rename("ana"))
        ```
    """

    def __call__(self, store: Store) -> MiddlewareFunction:
        def middleware(next_dispatch: NextDispatch) -> DispatchFunction:
            def dispatch(action: Any) -> Any:
                if callable(action):
                    return action(store.dispatch, store.get_state)
                return next_dispatch(action)
            return dispatch
        return middleware


class DevToolsMiddleware(BaseMiddleware):
    """
    保存每次成功 dispatch 的 (prev_state, action, next_state)。

    reducer 拋出異常的 action 不會被記錄，因此 history 只反映
    實際套用到 state 上的轉換。
    """

    def __init__(self) -> None:
        self.history: List[Tuple[Any, Action, Any]] = []
        self._prev_state: Any = None

    def on_next(self, action: Action, prev_state: Any) -> None:
        self._prev_state = prev_state

    def on_complete(self, next_state: Any, action: Action) -> None:
        self.history.append((self._prev_state, action, next_state))

    def get_history(self) -> List[Tuple[Any, Action, Any]]:
        """返回 history 的複本。"""
        return list(self.history)

    @property
    def action_types(self) -> List[str]:
        """依 dispatch 順序返回已記錄的 action 類型。"""
        return [action.type for _, action, _ in self.history]
