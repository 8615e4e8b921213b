"""
PyReducthor 範例：以模擬的 HTTP 後端瀏覽項目，展示 simple / request action、
命名空間、認證與中介軟體的使用
"""

import asyncio
import json
import logging
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import httpx

from pyreducthor import (
    ActionRejected, DevToolsMiddleware, HttpxTransport, LoggerMiddleware, create_reducthor, to_dict
)

ITEMS = {
    "10": {"id": 10, "title": "Mostro", "category": "mostros"},
    "11": {"id": 11, "title": "Gremlin", "category": "mostros"},
}


# ====== 1. 模擬後端 ======
def backend(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/me":
        if request.headers.get("Authentication") != "secret-token":
            return httpx.Response(401, json={"detail": "unauthenticated"})
        return httpx.Response(200, json={"name": "ana"})

    parts = request.url.path.strip("/").split("/")
    if parts[0] == "items" and len(parts) == 2:
        item = ITEMS.get(parts[1])
        if item is None:
            return httpx.Response(404, json={"detail": "not found"})
        return httpx.Response(200, json=item)
    if parts[0] == "items" and request.method == "POST":
        return httpx.Response(201, json={"id": 12, "received": request.content.decode(errors="replace")[:40]})
    return httpx.Response(404)


# ====== 2. 定義描述符 ======
def set_filter(state, value):
    return state.set("filter", value)


def store_item(state, response, item_id):
    return state.set("selected", response.json())


def store_error(state, error, item_id):
    return state.set("error", f"item {item_id}: {error.status_code}")


devtools = DevToolsMiddleware()

api = create_reducthor(
    base_url="https://api.example.com",
    transport=HttpxTransport(httpx.MockTransport(backend)),
    middleware=[LoggerMiddleware, devtools],
    actions={
        "items": [
            {"name": "SET_FILTER", "action": set_filter},
            {
                "name": "FETCH_ITEM",
                "kind": "request",
                "path": "/items/:id",
                "on_request_ok": store_item,
                "on_request_error": store_error,
            },
            {
                "name": "CREATE_ITEM",
                "kind": "request",
                "method": "post",
                "path": "/items",
                "on_upload_progress": lambda state, event, form: state.set("uploaded", event["loaded"]),
                "on_request_ok": lambda state, response, form: state.set("created", response.json()["id"]),
            },
        ],
        "session": [
            {
                "name": "FETCH_ME",
                "kind": "request",
                "path": "/me",
                "private": True,
                "on_request_ok": lambda state, response: state.set("user", response.json()["name"]),
            },
        ],
    },
)


async def main():
    # 訂閱選中的項目
    api.store.select(lambda state: state["items"].get("selected")).subscribe(
        on_next=lambda pair: print(f"選中項目變化: {pair[0]} -> {pair[1]}")
    )

    print("\n==== simple action ====")
    await api.actions.items.setFilter("mostros")

    print("\n==== request action ====")
    pending = api.actions.items.fetchItem(10)
    print("請求中狀態:", api.get_state()["items"]["FETCH_ITEM_STATUS"])
    result = await pending
    print("回應:", result.response.json())

    try:
        await api.actions.items.fetchItem(99)
    except ActionRejected as rejected:
        print("請求失敗:", rejected.error, "參數:", rejected.call_args)

    await api.actions.items.createItem({"title": "Kraken", "size": 3})

    print("\n==== 認證 ====")
    try:
        await api.actions.session.fetchMe()
    except ActionRejected as rejected:
        print("未認證:", rejected.error.status_code)
    api.config_auth({"token": "secret-token"})
    await api.actions.session.fetchMe()

    print("\n==== 最終狀態 ====")
    print(json.dumps(to_dict(api.get_state()), ensure_ascii=False, indent=2))
    print("action 順序:", devtools.action_types)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
