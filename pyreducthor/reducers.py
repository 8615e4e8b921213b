from typing import Any, Callable, Dict, Mapping, Optional

from immutables import Map

from .actions import Action
from .types import Handler

Reducer = Callable[[Any, Optional[Action]], Any]


def create_action_table(*handler_maps: Mapping[str, Handler]) -> Map:
    """
    將多個 {action_type: handler} 映射合併為不可變的 action 表。

    後出現的同名類型會覆蓋先前的處理函數。
    """
    table: Dict[str, Handler] = {}
    for handlers in handler_maps:
        table.update(handlers)
    return Map(table)


def create_reducer(action_table: Mapping[str, Handler], initial_state: Any = None) -> Reducer:
    """
    創建一個 reducer 函式，根據 action 類型把 action 的參數交給對應的處理函式。

    Args:
        action_table: action 類型與處理函式的對應表。
        initial_state: 初始狀態，默認為空的 Map。

    Returns:
        一個 reducer 函式 (state, action) -> state。
    """
    if initial_state is None:
        initial_state = Map()

    def reducer(state: Any = None, action: Action = None) -> Any:
        """
        Reducer 函式，根據 action 處理狀態變更。

        Args:
            state: 當前狀態，None 時使用初始狀態。
            action: 要處理的 action，默認為 None。

        Returns:
            新的狀態，如果沒有對應的處理器則返回原狀態。
        """
        if state is None:
            state = initial_state
        if action is None:
            return state

        handler = action_table.get(action.type)
        if handler is None:
            return state
        # handler 的參數永遠是 (state, *action.args)
        return handler(state, *action.args)

    # 設置 reducer 的初始狀態和處理器映射
    reducer.initial_state = initial_state
    reducer.handlers = action_table

    return reducer


def _routes_to(action: Optional[Action], feature_key: str) -> bool:
    namespace = getattr(action, "namespace", None)
    return namespace is None or namespace == feature_key


def combine_reducers(reducers: Mapping[str, Reducer]) -> Reducer:
    """
    把每個命名空間的 reducer 組合成一個根 reducer。

    根狀態是以命名空間為鍵的 Map；每個 reducer 只看得到自己的子狀態。
    帶有 namespace 的 action 只交給該命名空間的 reducer，其他 action 則廣播給全部。

    Args:
        reducers: 命名空間鍵與 reducer 的映射。

    Returns:
        根 reducer，其 initial_state 為各命名空間初始狀態組成的 Map。
    """
    reducers = dict(reducers)
    initial_state = Map({key: r.initial_state for key, r in reducers.items()})

    def reducer(state: Any = None, action: Action = None) -> Any:
        if state is None:
            state = initial_state

        changes = {}
        for feature_key, feature_reducer in reducers.items():
            # 獲取當前命名空間的狀態，若不存在則使用初始狀態
            prev_substate = state.get(feature_key, feature_reducer.initial_state)
            routed = action if _routes_to(action, feature_key) else None
            next_substate = feature_reducer(prev_substate, routed)

            if feature_key not in state or next_substate is not prev_substate:
                changes[feature_key] = next_substate

        # 沒有任何子狀態變化時保留原本的根狀態物件
        return state.update(changes) if changes else state

    reducer.initial_state = initial_state
    reducer.reducers = reducers
    return reducer
