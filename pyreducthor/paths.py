"""
URL 路徑模板展開。

路徑中以冒號開頭的識別字（例如 /items/:id）會依序被呼叫時的
前幾個位置參數取代，剩下的參數則作為請求的 payload。

映射類型的參數（dict、Map）永遠被視為 payload 的開始，
不會被代入路徑，因此 `(10, {"limit": 8})` 對於有兩個佔位符的
路徑來說是參數不足。
"""
import re
from collections.abc import Mapping
from typing import Any, List, Sequence, Tuple

from .errors import InsufficientArgumentsError

PLACEHOLDER = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")


def placeholders(path: str) -> List[str]:
    """返回路徑中所有佔位符的名稱（由左至右）。"""
    return PLACEHOLDER.findall(path)


def _path_values(args: Sequence[Any]) -> int:
    """計算開頭有幾個可以代入路徑的參數（遇到第一個映射為止）。"""
    for index, arg in enumerate(args):
        if isinstance(arg, Mapping):
            return index
    return len(args)


def resolve_path(path: str, args: Sequence[Any]) -> Tuple[str, Tuple[Any, ...]]:
    """
    以位置參數展開路徑模板。

    Args:
        path: 含有零個或多個佔位符的路徑
        args: 呼叫 action 函數時的位置參數

    Returns:
        (展開後的路徑, 未被使用的剩餘參數)

    Raises:
        InsufficientArgumentsError: 可代入的參數數量少於佔位符數量
    """
    required = len(placeholders(path))
    if _path_values(args) < required:
        raise InsufficientArgumentsError(path, args, required)

    consumed = iter(args[:required])
    resolved = PLACEHOLDER.sub(lambda _: str(next(consumed)), path)
    return resolved, tuple(args[required:])
