"""
PyReducthor 錯誤處理模組。

定義所有 PyReducthor 異常的層級結構，以及集中式的錯誤處理器。
"""
import logging
import traceback as tb
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

logger = logging.getLogger(__name__)


class ReducthorError(Exception):
    """所有 PyReducthor 異常的基礎類。"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.traceback = "".join(tb.format_stack()[:-1])

    def to_dict(self) -> Dict[str, Any]:
        """
        將錯誤轉換為可序列化的字典。

        Returns:
            包含錯誤類型、訊息、細節與堆疊的字典
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "traceback": self.traceback,
        }

    def __str__(self) -> str:
        if not self.details:
            return self.message
        details = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
        return f"{self.message} ({details})"


class ActionError(ReducthorError):
    """與 Action 相關的錯誤。"""

    def __init__(self, message: str, action_type: str, payload: Any = None, **kwargs: Any):
        details = {"action_type": action_type, "payload": payload}
        details.update(kwargs)
        super().__init__(message, details)
        self.action_type = action_type


class SynchronousActionError(ActionError):
    """使用者提供的 action / lifecycle 回調在 dispatch 時拋出異常。"""

    def __init__(self, action_type: str, cause: BaseException, args: Sequence[Any] = ()):
        super().__init__(
            f"Callback for {action_type} raised {cause.__class__.__name__}: {cause}",
            action_type,
            payload=tuple(args),
        )
        self.cause = cause
        self.__cause__ = cause


class InsufficientArgumentsError(ReducthorError):
    """路徑佔位符的數量多於呼叫時提供的位置參數。"""

    def __init__(self, path: str, args: Sequence[Any], required: int):
        super().__init__(
            f"Path {path!r} needs {required} positional argument(s), got {len(args)}",
            {"path": path, "args": tuple(args), "required": required},
        )
        self.path = path
        self.call_args = tuple(args)
        self.required = required


class TransportError(ReducthorError):
    """HTTP 回應狀態不是 2xx，或網路層發生錯誤。"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Any = None,
        request: Any = None,
    ):
        super().__init__(message, {"status_code": status_code})
        self.status_code = status_code
        self.response = response
        self.request = request


class ConfigurationError(ReducthorError):
    """配置相關的錯誤。"""

    def __init__(self, message: str, component: str, config_key: Optional[str] = None, **kwargs: Any):
        details = {"component": component, "config_key": config_key}
        details.update(kwargs)
        super().__init__(message, details)
        self.component = component
        self.config_key = config_key


class ActionRejected(ReducthorError):
    """
    生成的 action 函數被拒絕時攜帶的異常。

    屬性:
        error: 導致拒絕的原始異常
        call_args: 呼叫 action 函數時的原始位置參數
    """

    def __init__(self, error: BaseException, call_args: Sequence[Any]):
        super().__init__(str(error), {"error_type": error.__class__.__name__})
        self.error = error
        self.call_args = tuple(call_args)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ActionRejected):
            return NotImplemented
        return self.error is other.error and self.call_args == other.call_args

    __hash__ = ReducthorError.__hash__


class ErrorHandler:
    """集中式錯誤處理器，用於捕獲、日誌記錄和錯誤報告。"""

    def __init__(self, log_to_console: bool = True, log_to_file: bool = False, log_file: Optional[str] = None):
        self.log_to_console = log_to_console
        self.log_to_file = log_to_file
        self.log_file = log_file
        self.handlers: List[Callable[[ReducthorError], None]] = []
        self._file_logger: Optional[logging.Logger] = None
        if log_to_file and log_file:
            self._file_logger = logging.getLogger(f"{__name__}.file")
            self._file_logger.addHandler(logging.FileHandler(log_file, encoding="utf-8"))

    def register_handler(self, handler: Callable[[ReducthorError], None]) -> None:
        """註冊一個在每次錯誤時被呼叫的處理函數。"""
        self.handlers.append(handler)

    def handle(self, error: Union[ReducthorError, Exception]) -> None:
        """
        處理錯誤：記錄日誌並通知所有註冊的處理函數。

        非 ReducthorError 的異常會先包裝為 ReducthorError。

        Args:
            error: 要處理的異常
        """
        if not isinstance(error, ReducthorError):
            wrapped = ReducthorError(str(error), {"original_type": error.__class__.__name__})
            wrapped.__cause__ = error
            error = wrapped

        if self.log_to_console:
            logger.error("%s: %s", error.__class__.__name__, error, exc_info=error.__cause__ or error)
        if self._file_logger is not None:
            self._file_logger.error("%s", error.to_dict())

        for handler in self.handlers:
            try:
                handler(error)
            except Exception:
                logger.exception("Error handler %r failed", handler)


# 單例錯誤處理器
global_error_handler = ErrorHandler()
