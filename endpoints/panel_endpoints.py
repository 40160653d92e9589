from __future__ import annotations

from html import escape
from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from endpoints.collection_endpoints import get_store
from persistence import AsyncStore

router = APIRouter(tags=["panel"])


@router.get("/", response_class=HTMLResponse)
async def panel(store: AsyncStore = Depends(get_store)) -> HTMLResponse:
    sizes = await store.collection_sizes()
    items = "\n".join(
        f'      <li><a href="/{quote(name, safe="")}">/{escape(name)}</a> ({count})</li>'
        for name, count in sizes.items()
    )
    return HTMLResponse(
        f"""
<!doctype html>
<html>
  <head><meta charset="utf-8"><title>JSML Server</title></head>
  <body>
    <h1>Welcome to JSML Server Panel !</h1>
    <p>Identifier field: <code>{escape(store.id_key)}</code></p>
    <ul>
{items}
    </ul>
  </body>
</html>
""".strip(),
        status_code=200,
    )
