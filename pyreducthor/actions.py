"""
PyReducthor 的 Action 定義模組。

此模組提供不可變的 Action 類別，以及從描述符名稱推導出
各種 action 類型與函數名稱的工具。
"""
import re
from typing import Any, Iterable, NamedTuple, Optional, Tuple

_UNDERSCORE_LETTER = re.compile(r"_([a-z])")

SET_REQUESTING_SUFFIX = "_SET_REQUESTING"
UPLOAD_PROGRESS_SUFFIX = "_UPLOAD_PROGRESS"
DOWNLOAD_PROGRESS_SUFFIX = "_DOWNLOAD_PROGRESS"
REQUEST_OK_SUFFIX = "_REQUEST_OK"
REQUEST_ERROR_SUFFIX = "_REQUEST_ERROR"
FINISHED_SUFFIX = "_FINISHED"


class Action:
    """
    表示一個有類型和位置參數的動作。

    屬性:
        type: 動作的類型字符串
        args: 呼叫 action 函數時的位置參數（元組）
        namespace: 發出此動作的命名空間；None 表示廣播給所有 reducer
    """
    __slots__ = ('type', 'args', 'namespace')

    def __init__(self, type: str, args: Iterable[Any] = (), namespace: Optional[str] = None):
        super().__setattr__('type', type)
        super().__setattr__('args', tuple(args))
        super().__setattr__('namespace', namespace)

    def __setattr__(self, name, value):
        if name not in self.__slots__:
            raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")
        if hasattr(self, name):
            raise AttributeError(f"Cannot modify immutable instance attribute '{name}'")
        super().__setattr__(name, value)

    def __eq__(self, other):
        if not isinstance(other, Action):
            return False
        return (self.type, self.args, self.namespace) == (other.type, other.args, other.namespace)

    def __hash__(self):
        return hash(self.type)

    def __repr__(self):
        if self.namespace is None:
            return f"Action(type='{self.type}', args={self.args!r})"
        return f"Action(type='{self.type}', args={self.args!r}, namespace='{self.namespace}')"


class DerivedNames(NamedTuple):
    """由一個描述符名稱推導出的函數名稱與 lifecycle action 類型。"""
    callable_name: str
    requesting_type: str
    upload_progress_type: str
    download_progress_type: str
    ok_type: str
    error_type: str
    finished_type: str

    @property
    def lifecycle_types(self) -> Tuple[str, ...]:
        return self[1:]


def to_callable_name(name: str) -> str:
    """
    將大寫蛇形命名轉換為小駝峰函數名稱。

    範例:
        >>> to_callable_name("FETCH_ITEM")
        'fetchItem'
    """
    return _UNDERSCORE_LETTER.sub(lambda match: match.group(1).upper(), name.lower())


def derive_action_names(name: str) -> DerivedNames:
    """
    推導一個 request 描述符所需的全部名稱。

    Args:
        name: 描述符名稱，慣例為大寫蛇形，例如 FETCH_ITEM

    Returns:
        DerivedNames，其中 lifecycle 類型為原始名稱加上固定後綴
    """
    return DerivedNames(
        callable_name=to_callable_name(name),
        requesting_type=f"{name}{SET_REQUESTING_SUFFIX}",
        upload_progress_type=f"{name}{UPLOAD_PROGRESS_SUFFIX}",
        download_progress_type=f"{name}{DOWNLOAD_PROGRESS_SUFFIX}",
        ok_type=f"{name}{REQUEST_OK_SUFFIX}",
        error_type=f"{name}{REQUEST_ERROR_SUFFIX}",
        finished_type=f"{name}{FINISHED_SUFFIX}",
    )


# 根 Actions
init_store = Action("[Root] Init Store")
