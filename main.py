"""
Main API module for Keylink.

Responsibilities:
    - Expose REST endpoints to register, resolve and list short keys
    - Map handler outcomes and errors onto HTTP status codes
    - Bootstrap the server from SERVER_ADDR (see `run`)

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - One mapping store per app, opened once and shared by every request.
    - LinkManager does the bytes/str translation; routes only render results.

Endpoints:
    GET  /get_url?key=...   -> 303 redirect, 404 if missing/unknown, 500 on store failure
    POST /set_url           -> 200 empty body, 400 on store failure
    GET  /list_urls         -> 200 {key: url, ...}, 500 on store failure
    GET  /health            -> 200 {"status": "ok"}

LLM Prompt Example:
    "Explain how to structure a FastAPI service with an application factory,
    injected dependencies, and a clean separation between API and storage."
"""

import logging
from typing import Optional

import uvicorn
from dotenv import find_dotenv, load_dotenv
from fastapi import FastAPI, HTTPException, Query, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from pydantic import BaseModel

from keylink.config import settings
from keylink.errors import DecodeError, StartupError, StoreIOError, ValidationError
from keylink.manager.link_manager import LinkManager
from keylink.storage.base import BaseMappingStore
from keylink.storage.storage_factory import get_storage

SET_URL_FAILURE = "Key is already taken or there was an issue getting the url."

log = logging.getLogger("keylink")


class SetUrlRequest(BaseModel):
    """Request payload for registering or deleting a key. A null/absent url deletes."""
    key: str
    url: Optional[str] = None


def create_app(storage: Optional[BaseMappingStore] = None) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        storage (Optional[BaseMappingStore]): Store handle to serve from. When
            omitted, the backend is chosen from the environment.

    Returns:
        FastAPI: A configured application bound to exactly one store.

    Raises:
        StartupError: If the configured backend is unknown or cannot open
            its table.

    Why an app factory?
        - Tests inject a store on a temporary path and get full isolation.
        - No global store handle leaks across workers or test cases.
    """
    # basic console logging unless the host process configured it already
    if not logging.getLogger().handlers:
        logging.basicConfig(level=settings.LOG_LEVEL)

    if storage is None:
        try:
            storage = get_storage()
        except (StoreIOError, ValueError) as exc:
            raise StartupError(f"cannot open mapping store: {exc}") from exc

    app = FastAPI(
        title="Keylink",
        description="Key to URL shortener backed by a durable mapping table",
        docs_url="/docs",
    )
    manager = LinkManager(storage=storage)
    app.state.storage = storage
    app.state.manager = manager
    log.info("Keylink storage backend: %s", storage.name)

    @app.exception_handler(RequestValidationError)
    async def _bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Malformed bodies are a client error, reported as 400 instead of 422.
        return JSONResponse({"detail": jsonable_encoder(exc.errors())}, status_code=400)

    # Health check
    @app.get("/health")
    def health():
        return {"status": "ok"}

    # ----------------------------------------------------------------
    # Routes
    # ----------------------------------------------------------------
    @app.get("/get_url")
    def get_url(key: Optional[str] = Query(None, description="Short key to resolve.")) -> Response:
        """
        Redirect to the URL registered under `key`.

        Raises:
            HTTPException: 404 if key is missing or unknown, 500 if the store
                fails or holds an undecodable URL.
        """
        try:
            url = manager.resolve(key)
        except ValidationError:
            raise HTTPException(status_code=404, detail="Key not found")
        except StoreIOError:
            log.exception("get_url failed for key=%r", key)
            raise HTTPException(status_code=500, detail="Storage error")
        except DecodeError:
            log.exception("get_url found an undecodable url for key=%r", key)
            raise HTTPException(status_code=500, detail="Stored url is corrupted")

        if url is None:
            raise HTTPException(status_code=404, detail="Key not found")
        return RedirectResponse(url=url, status_code=303)

    @app.post("/set_url")
    def set_url(req: SetUrlRequest) -> Response:
        """
        Register `req.url` under `req.key`, or delete the key when url is null.

        Returns an empty 200 on success, a 400 text message on any failure.
        """
        try:
            manager.upsert_or_delete(req.key, req.url)
        except (StoreIOError, ValidationError) as exc:
            log.warning("set_url failed for key=%r: %s", req.key, exc)
            return PlainTextResponse(SET_URL_FAILURE, status_code=400)
        return Response(status_code=200)

    @app.get("/list_urls")
    def list_urls() -> Response:
        """
        Return every registered mapping as a JSON object.

        Raises:
            HTTPException: 500 if the table cannot be read in full.
        """
        try:
            mapping = manager.list_all()
        except (StoreIOError, DecodeError):
            log.exception("list_urls failed")
            raise HTTPException(status_code=500, detail="Storage error")
        return JSONResponse(mapping)

    return app


def run() -> None:
    """
    Start the server on SERVER_ADDR.

    Loads `.env` from the working directory first. Missing configuration or
    an unopenable store aborts before anything is served.
    """
    load_dotenv(find_dotenv(usecwd=True))
    try:
        host, port = settings.server_addr()
        app = create_app()
    except StartupError as exc:
        logging.basicConfig(level=logging.INFO)
        log.critical("startup aborted: %s", exc)
        raise SystemExit(1) from exc
    uvicorn.run(app, host=host, port=port, log_level=settings.LOG_LEVEL)


if __name__ == "__main__":
    run()
