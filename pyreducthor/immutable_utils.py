# pyreducthor/immutable_utils.py
"""
State 容器的轉換工具。

reducer 只透過 get / set 操作 immutables.Map；這裡負責把使用者提供的
初始狀態轉為 Map，以及把 Map 轉回普通字典以便檢查或序列化。
"""
import functools
from typing import Any, Mapping, Union

from immutables import Map
from pydantic import BaseModel


@functools.singledispatch
def to_immutable(obj: Any) -> Any:
    """將任何對象轉換為不可變形式；無法轉換的類型原樣返回。"""
    return obj


@to_immutable.register(Map)
@to_immutable.register(dict)
def _(obj: Mapping[Any, Any]) -> Map:
    return Map({k: to_immutable(v) for k, v in obj.items()})


@to_immutable.register(BaseModel)
def _(obj: BaseModel) -> Map:
    return to_immutable(obj.model_dump())


@to_immutable.register(list)
def _(obj: list) -> tuple:
    return tuple(to_immutable(i) for i in obj)


@to_immutable.register(frozenset)
@to_immutable.register(set)
def _(obj: Union[set, frozenset]) -> frozenset:
    return frozenset(to_immutable(i) for i in obj)


@functools.singledispatch
def to_dict(obj: Any) -> Any:
    """將 Map 及其巢狀結構轉換為普通字典，元組轉為列表，凍結集合轉為集合。"""
    return obj


@to_dict.register(Map)
def _(obj: Map) -> dict:
    return {k: to_dict(v) for k, v in obj.items()}


@to_dict.register(tuple)
def _(obj: tuple) -> list:
    return [to_dict(i) for i in obj]


@to_dict.register(frozenset)
def _(obj: frozenset) -> set:
    return {to_dict(i) for i in obj}
