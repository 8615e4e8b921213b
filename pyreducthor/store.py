import functools
import inspect
from typing import Any, Callable, Generic, Iterable, Optional, TypeVar

from reactivex import Observable, Subject
from reactivex import operators as ops

from .actions import Action, init_store
from .middleware import BaseMiddleware, ThunkMiddleware
from .reducers import Reducer
from .types import DispatchFunction

S = TypeVar("S")


class Store(Generic[S]):
    """
    保存根 state，把每個 action 交給根 reducer。

    dispatch 經過中介軟體鏈；ThunkMiddleware 永遠在最外層，
    因此 dispatch 一個函數時會以 (dispatch, get_state) 呼叫它並返回其結果。
    state 的變化透過 reactivex 的 Subject 發布。
    """

    def __init__(self, reducer: Reducer, initial_state: Optional[S] = None, middleware: Iterable[Any] = ()):
        """
        Args:
            reducer: 根 reducer
            initial_state: 初始 state；None 時使用 reducer 自己的初始 state
            middleware: 接在 ThunkMiddleware 之後的中介軟體，類會先被實例化
        """
        self._reducer = reducer
        self._action_subject = Subject()
        # 發布 (舊 state, 新 state)
        self._state_subject = Subject()
        self._middleware = [ThunkMiddleware()]
        self._middleware.extend(self._instantiate(m) for m in middleware)
        self.dispatch: DispatchFunction = self._apply_middleware_chain()

        self._state = reducer(initial_state, init_store)

    @staticmethod
    def _instantiate(middleware: Any) -> Any:
        return middleware() if inspect.isclass(middleware) else middleware

    def _update_state(self, new_state: S) -> None:
        old_state = self._state
        self._state = new_state
        self._state_subject.on_next((old_state, new_state))

    def _dispatch_core(self, action: Action) -> Action:
        """
        在呼叫端同步執行 reducer。

        reducer（或其中的使用者回調）拋出的異常直接傳回呼叫端，
        state 保持不變，也不會發布任何東西。
        """
        new_state = self._reducer(self._state, action)
        if new_state is not self._state:
            self._update_state(new_state)
        self._action_subject.on_next(action)
        return action

    def _apply_middleware_chain(self) -> DispatchFunction:
        """由內而外包裹 _dispatch_core，列表中越前面的中介軟體越外層。"""
        dispatch = self._dispatch_core
        for mw in reversed(self._middleware):
            if callable(mw):
                dispatch = mw(self)(dispatch)
            elif hasattr(mw, "on_next"):
                dispatch = self._wrap_hooks(mw, dispatch)
            else:
                raise TypeError(f"Unsupported middleware: {mw!r}")
        return dispatch

    def _wrap_hooks(self, mw: BaseMiddleware, next_dispatch: DispatchFunction) -> DispatchFunction:
        # 只實作 hook、沒有繼承 BaseMiddleware 的物件借用基類的 action_context
        action_context = getattr(mw, "action_context", None)
        if action_context is None:
            action_context = functools.partial(BaseMiddleware.action_context, mw)

        def dispatch(action: Action) -> Any:
            with action_context(action, self._state) as context:
                context['result'] = next_dispatch(action)
                context['next_state'] = self._state
            return context['result']

        return dispatch

    def apply_middleware(self, *middlewares: Any) -> None:
        """追加中介軟體（類或實例）並重建 dispatch。"""
        self._middleware.extend(self._instantiate(m) for m in middlewares)
        self.dispatch = self._apply_middleware_chain()

    def select(self, selector: Optional[Callable[[S], Any]] = None) -> Observable:
        """
        觀察 state 的一部分。

        Args:
            selector: 從根 state 取出要觀察的值；None 時觀察整個 state

        Returns:
            發送 (舊值, 新值) 的 Observable；有 selector 時只在新值改變時發送
        """
        if selector is None:
            return self._state_subject.pipe(ops.as_observable())

        return self._state_subject.pipe(
            ops.map(lambda pair: (selector(pair[0]), selector(pair[1]))),
            ops.distinct_until_changed(lambda pair: pair[1]),
        )

    @property
    def actions(self) -> Observable:
        """已經過 reducer 處理的 action。"""
        return self._action_subject.pipe(ops.as_observable())

    @property
    def state(self) -> S:
        return self._state

    def get_state(self) -> S:
        return self._state


def create_store(reducer: Reducer, initial_state: Any = None, middleware: Iterable[Any] = ()) -> Store:
    """以根 reducer 建立 Store，參數同 Store。"""
    return Store(reducer, initial_state, middleware)
