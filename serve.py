import asyncio
import functools
import json
import logging
import os
import sys
from dataclasses import asdict, dataclass
from typing import Any, Callable, Mapping, Sequence

from http_server.request import Request
from http_server.response import Response, response
from http_server.server import HTTPServer
from kvlists import (
    ListStore,
    LMDBListStore,
    Row,
    auto_format_value,
    get_db_info,
    get_list_page,
    num_pages,
    search,
)

logger = logging.getLogger()


@dataclass
class ServeConfig:
    """
    Service settings.

    Resolved from positional arguments first (``serve.py [db_path] [port]``),
    then KVLISTS_* environment variables, then defaults.
    """

    db_path: str = "data.lmdb"
    host: str = "0.0.0.0"
    port: int = 8080
    page_size: int = 10
    log_level: str = "INFO"

    @classmethod
    def load(cls, argv: Sequence[str], environ: Mapping[str, str]) -> "ServeConfig":
        config = cls(
            db_path=environ.get("KVLISTS_DB_PATH", cls.db_path),
            host=environ.get("KVLISTS_HOST", cls.host),
            port=int(environ.get("KVLISTS_PORT", cls.port)),
            page_size=int(environ.get("KVLISTS_PAGE_SIZE", cls.page_size)),
            log_level=environ.get("LOG_LEVEL", cls.log_level).upper(),
        )
        if len(argv) >= 1:
            config.db_path = argv[0]
        if len(argv) >= 2:
            config.port = int(argv[1])

        if config.page_size <= 0:
            raise ValueError(f"KVLISTS_PAGE_SIZE must be positive, got {config.page_size}")
        return config


async def run_blocking(fn: Callable[..., Any], *args: Any) -> Any:
    """Run a blocking store call in the default thread pool."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(fn, *args))


def require(request: Request, *fields: str) -> list[Any]:
    missing = [f for f in fields if request.get(f) in (None, "")]
    if missing:
        raise ValueError(f"Missing {', '.join(repr(f) for f in missing)} parameter")
    return [request.get(f) for f in fields]


def row_payload(row: Row) -> dict[str, str]:
    return {
        "key": row.key_str,
        "value": row.value_str,
        "display_value": auto_format_value(row.value),
    }


def value_text(value: Any) -> str:
    """JSON bodies may carry structured values; store them as JSON text."""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


async def main():
    config = ServeConfig.load(sys.argv[1:], os.environ)
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    store = LMDBListStore(config.db_path)
    server = HTTPServer(host=config.host, port=config.port)
    await register_routes(server, store, page_size=config.page_size)
    logger.debug(f"Registered routes: {sorted(server.routes)}")
    try:
        await server.start()
    finally:
        store.close()


async def register_routes(server: HTTPServer, store: ListStore, page_size: int = 10):

    def overview() -> dict[str, Any]:
        return {
            "path": store.disk_path(),
            "disk_size": store.disk_size(),
            "lists": {name: store.num_rows(name) for name in list(store.read_each_list())},
        }

    @server.route('/', ['GET'])
    async def home(request: Request) -> dict:
        return await run_blocking(overview)

    @server.route('/info', ['GET'])
    async def db_info(request: Request) -> dict:
        info = await run_blocking(get_db_info, store)
        payload = asdict(info)
        payload["total_rows"] = info.total_rows
        payload["total_row_size"] = info.total_row_size
        return payload

    @server.route('/lists', ['GET'])
    async def read_lists(request: Request) -> dict:
        names = await run_blocking(lambda: list(store.read_each_list()))
        return {"lists": names}

    @server.route('/lists', ['POST'])
    async def create_list(request: Request) -> Response:
        (name,) = require(request, "name")
        await run_blocking(store.create_list, str(name))
        return response(status_code=201).json({"name": name})

    @server.route('/lists', ['DELETE'])
    async def delete_list(request: Request) -> dict:
        (name,) = require(request, "list")
        await run_blocking(store.delete_list, str(name))
        return {"success": True}

    @server.route('/list', ['GET'])
    async def read_list_page(request: Request) -> dict:
        (name,) = require(request, "list")
        page = request.get_int("page", 0)

        info, rows = await run_blocking(get_list_page, store, str(name), page, page_size)
        return {
            "list": name,
            "info": asdict(info),
            "page": page,
            "num_pages": num_pages(info.num_rows, page_size),
            "rows": [row_payload(row) for row in rows],
        }

    @server.route('/list/rows', ['POST'])
    async def create_row(request: Request) -> Response:
        name, key = require(request, "list", "key")
        value = request.get("value")
        if value is None:
            raise ValueError("Missing 'value' parameter")

        row = Row(str(key), value_text(value))
        await run_blocking(store.create_row, str(name), row)
        return response(status_code=201).json({"list": name, "key": row.key_str})

    @server.route('/list/row', ['GET'])
    async def read_row(request: Request) -> dict:
        name, key = require(request, "list", "key")
        row = await run_blocking(store.read_row, str(name), str(key))
        return {"list": name, **row_payload(row)}

    @server.route('/list/row', ['PUT'])
    async def update_row(request: Request) -> dict:
        name, key = require(request, "list", "key")
        value = request.get("value")
        if value is None:
            raise ValueError("Missing 'value' parameter")

        await run_blocking(store.update_row, str(name), str(key), value_text(value))
        return {"success": True}

    @server.route('/list/row', ['DELETE'])
    async def delete_row(request: Request) -> dict:
        name, key = require(request, "list", "key")
        await run_blocking(store.delete_row, str(name), str(key))
        return {"success": True}

    @server.route('/search', ['GET'])
    async def search_rows(request: Request) -> dict:
        lists = request.get_list("lists")
        pattern = request.get("q") or None
        exclude = request.get_bool("exclude")
        page = request.get_int("page", 0)
        size = request.get_int("page_size", page_size)

        result = await run_blocking(search, store, lists, pattern, exclude, page, size)
        return {
            "total_results": result.total_results,
            "page": page,
            "num_pages": num_pages(result.total_results, size),
            "rows": [
                {
                    "list": r.list_name,
                    "key": r.row.key_str,
                    "value": r.row.value_str,
                    "match": r.match,
                    "display_value": r.display_value,
                }
                for r in result.rows
            ],
        }


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
