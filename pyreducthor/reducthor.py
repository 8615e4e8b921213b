"""
Reducthor：從宣告式描述符自動生成 reducer 與 action 函數。

描述符可以是單一列表（整個 state 由一個 reducer 處理），也可以是
命名空間 -> 列表 的映射（每個命名空間有自己的 reducer、子狀態與 action 函數）。

範例:
    >>> api = Reducthor({
    ...     "base_url": "https://api.example.com",
    ...     "actions": [
    ...         {"name": "SET_FILTER", "action": lambda state, f: state.set("filter", f)},
    ...         {"name": "FETCH_ITEM", "kind": "request", "method": "get", "path": "/items/:id"},
    ...     ],
    ... })
    >>> await api.actions.setFilter("open")
    >>> result = await api.actions.fetchItem(10)
"""
import logging
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from immutables import Map
from pydantic import ValidationError

from .action_handlers import build_request_handlers, build_simple_handler
from .actions import derive_action_names, to_callable_name
from .callables import create_request_callable, create_simple_callable
from .descriptors import ActionDescriptor, AuthConfig, ReducthorConfig
from .errors import ConfigurationError
from .immutable_utils import to_immutable
from .reducers import Reducer, combine_reducers, create_action_table, create_reducer
from .store import Store, create_store
from .transport import HttpxTransport

logger = logging.getLogger(__name__)


class ActionSurface(Mapping[str, Any]):
    """
    生成的 action 函數集合，以函數名稱（或命名空間名稱）為鍵。

    除了映射介面外也支援屬性存取，例如 `surface.fetchItem(10)`
    或 `surface.users.fetchItem(10)`。內容在建立後不可變。
    """

    def __init__(self, members: Mapping[str, Any]):
        object.__setattr__(self, "_members", Map(members))

    def __getitem__(self, key: str) -> Any:
        return self._members[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._members)

    def __len__(self) -> int:
        return len(self._members)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._members[name]
        except KeyError:
            raise AttributeError(f"No generated action named {name!r}") from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("ActionSurface is read-only")

    def __dir__(self) -> List[str]:
        return sorted(set(super().__dir__()) | set(self._members.keys()))

    def __repr__(self) -> str:
        return f"ActionSurface({list(self._members.keys())!r})"


def _build_group(descriptors: List[ActionDescriptor]) -> Tuple[Map, List[Tuple[ActionDescriptor, Any]]]:
    """
    為一組描述符建立 action 表，並返回每個描述符與其推導名稱。

    request 描述符附帶 DerivedNames，simple 描述符附帶函數名稱。
    """
    handler_maps = []
    plan: List[Tuple[ActionDescriptor, Any]] = []
    for descriptor in descriptors:
        if descriptor.kind == "request":
            names = derive_action_names(descriptor.name)
            handler_maps.append(build_request_handlers(descriptor, names))
            plan.append((descriptor, names))
        else:
            handler_maps.append(build_simple_handler(descriptor))
            plan.append((descriptor, to_callable_name(descriptor.name)))
    return create_action_table(*handler_maps), plan


class Reducthor:
    """
    自動生成 reducer 與 action 函數的入口。

    屬性:
        store: 底層 Store
        actions: 生成的 ActionSurface
        auth_config: 目前的認證配置（可能為 None）
    """

    def __init__(self, config: Union[ReducthorConfig, Mapping[str, Any]]):
        """
        Args:
            config: ReducthorConfig 或等價的字典

        Raises:
            ConfigurationError: 配置無法通過驗證
        """
        if not isinstance(config, ReducthorConfig):
            try:
                config = ReducthorConfig.model_validate(dict(config))
            except ValidationError as err:
                raise ConfigurationError(
                    f"Invalid Reducthor configuration: {err}", component="Reducthor"
                ) from err

        self._config = config
        self._auth_config: Optional[AuthConfig] = config.auth_config
        self._transport = config.transport if config.transport is not None else HttpxTransport()

        groups = config.actions if config.namespaced else {None: config.actions}
        plans: Dict[Optional[str], List[Tuple[ActionDescriptor, Any]]] = {}
        reducers: Dict[Optional[str], Reducer] = {}
        for namespace, descriptors in groups.items():
            table, plans[namespace] = _build_group(descriptors)
            reducers[namespace] = create_reducer(table)

        if config.namespaced:
            root_reducer = combine_reducers(reducers)
        else:
            root_reducer = reducers[None]

        initial_state = to_immutable(config.initial_state) if config.initial_state is not None else None
        if initial_state is not None and not isinstance(initial_state, Map):
            raise ConfigurationError(
                "initial_state must be a mapping", component="Reducthor", config_key="initial_state"
            )
        self.store: Store = create_store(root_reducer, initial_state, config.middleware)

        if config.namespaced:
            self.actions = ActionSurface({
                namespace: ActionSurface(self._generate_callables(plan, namespace))
                for namespace, plan in plans.items()
            })
        else:
            self.actions = ActionSurface(self._generate_callables(plans[None]))

        logger.debug(
            "Reducthor created with %d action(s)%s",
            sum(len(plan) for plan in plans.values()),
            f" in namespaces {list(plans)}" if config.namespaced else "",
        )

    def _generate_callables(
        self, plan: List[Tuple[ActionDescriptor, Any]], namespace: Optional[str] = None
    ) -> Dict[str, Callable[..., Any]]:
        callables: Dict[str, Callable[..., Any]] = {}
        for descriptor, names in plan:
            if descriptor.kind == "request":
                callables[names.callable_name] = create_request_callable(
                    self.store,
                    descriptor,
                    names,
                    self._transport,
                    self._config.base_url,
                    lambda: self._auth_config,
                    namespace,
                )
            else:
                callables[names] = create_simple_callable(self.store, descriptor, namespace)
        return callables

    @property
    def auth_config(self) -> Optional[AuthConfig]:
        return self._auth_config

    def config_auth(self, auth_config: Union[AuthConfig, Mapping[str, Any]]) -> None:
        """
        隨時重新配置 request 使用的認證 token。

        已有認證配置時進行淺層合併，否則直接設定。之後的呼叫才會使用新配置。

        Args:
            auth_config: 完整或部分的認證配置
        """
        partial = auth_config if isinstance(auth_config, AuthConfig) else dict(auth_config)
        if self._auth_config is None:
            self._auth_config = (
                partial if isinstance(partial, AuthConfig) else AuthConfig.model_validate(partial)
            )
        else:
            self._auth_config = self._auth_config.merge(partial)

    def get_state(self) -> Any:
        return self.store.get_state()


def create_reducthor(**options: Any) -> Reducthor:
    """
    以關鍵字參數創建 Reducthor。

    Returns:
        Reducthor: 新創建的實例
    """
    return Reducthor(options)
