# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from zenbatu.auth.accounts import AccountManager
from zenbatu.auth.session import InMemorySessionStore, SessionStore
from zenbatu.auth.tokens import SessionSigner
from zenbatu.auth.users import CredentialStore
from zenbatu.config import Settings, load_settings
from zenbatu.core.logging import setup_logging
from zenbatu.errors import (
    DuplicateAccount,
    HashingError,
    LoginError,
    RecordNotFound,
    SessionNotFound,
    StoreUnavailable,
    ValidationError,
    ZenbatuError,
)
from zenbatu.infra.accounts_repo import SqlCredentialStore
from zenbatu.infra.database import Database
from zenbatu.infra.inventory_repo import SqlInventoryGateway
from zenbatu.permissions import cookie_settings, current_user_optional, require_user, session_id_from_cookie
from zenbatu.schemas import AssetIn, AssetLookup, CategoryIn, Credentials, LocationIn, SessionBody, SiteIn
from zenbatu.services.inventory_service import InventoryService

logger = logging.getLogger(__name__)


def _fail(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"success": False, "err": message}, status_code=status_code)


def _ok(data=None) -> JSONResponse:
    return JSONResponse({"success": True, "data": data})


def _set_session_cookie(response: Response, settings: Settings, signer: SessionSigner, session_id: str) -> None:
    kwargs = cookie_settings(settings)
    if settings.session_max_age:
        kwargs["max_age"] = settings.session_max_age
    response.set_cookie(settings.cookie_name, signer.sign(session_id), **kwargs)


def _sets_cookie(response: Response, name: str) -> bool:
    prefix = f"{name}=".encode("latin-1")
    return any(k == b"set-cookie" and v.startswith(prefix) for k, v in response.raw_headers)


async def _zenbatu_error_handler(request: Request, exc: ZenbatuError) -> JSONResponse:
    if isinstance(exc, LoginError):
        logger.info("Login failure (%s) on %s", type(exc).__name__, request.url.path)
        return _fail(401, LoginError.public_message)
    if isinstance(exc, ValidationError):
        return _fail(400, str(exc))
    if isinstance(exc, DuplicateAccount):
        return _fail(409, exc.public_message)
    if isinstance(exc, SessionNotFound):
        return _fail(401, exc.public_message)
    if isinstance(exc, RecordNotFound):
        return _fail(404, exc.public_message)
    if isinstance(exc, (StoreUnavailable, HashingError)):
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc, exc_info=exc)
        return _fail(500, exc.public_message)
    logger.error("Unhandled %s on %s: %s", type(exc).__name__, request.url.path, exc, exc_info=exc)
    return _fail(500, ZenbatuError.public_message)


def create_app(
    settings: Optional[Settings] = None,
    *,
    credentials: Optional[CredentialStore] = None,
    sessions: Optional[SessionStore] = None,
) -> FastAPI:
    settings = settings or load_settings()
    setup_logging(settings.log_level, settings.log_file)

    db = Database(settings.db_path)
    db.initialize()

    app = FastAPI(title="zenbatu")
    app.state.settings = settings
    app.state.db = db
    app.state.signer = SessionSigner(settings.require_secret_key(), salt=settings.session_salt)
    app.state.accounts = AccountManager(
        credentials if credentials is not None else SqlCredentialStore(db),
        sessions if sessions is not None else InMemorySessionStore(max_age=settings.session_max_age),
    )
    app.state.inventory = InventoryService(SqlInventoryGateway(db))
    app.add_exception_handler(ZenbatuError, _zenbatu_error_handler)

    @app.middleware("http")
    async def _auth_middleware(request: Request, call_next):
        user = current_user_optional(request)
        request.state.user = user
        response = await call_next(request)
        # sliding expiry: a cookie session that is still active gets a fresh cookie
        if (
            user is not None
            and settings.session_max_age
            and not _sets_cookie(response, settings.cookie_name)
            and app.state.accounts.is_session_active(user.session_id)
        ):
            _set_session_cookie(response, settings, app.state.signer, user.session_id)
        return response

    _register_routes(app)
    logger.info("zenbatu app created (db=%s)", settings.db_path)
    return app


def _register_routes(app: FastAPI) -> None:
    settings: Settings = app.state.settings
    accounts: AccountManager = app.state.accounts
    inventory: InventoryService = app.state.inventory
    signer: SessionSigner = app.state.signer

    async def _log_in(username: str, password: str) -> JSONResponse:
        session_id = await accounts.log_in(username, password)
        try:
            data = await inventory.get_user_data(username=username)
        except ZenbatuError:
            accounts.log_out(session_id)
            raise
        data["sessionId"] = session_id
        resp = _ok(data)
        _set_session_cookie(resp, settings, signer, session_id)
        return resp

    @app.get("/connection_state")
    def connection_state():
        return _ok(app.state.db.state())

    # --- accounts & sessions ---

    @app.post("/sign_up", status_code=204)
    async def sign_up(body: Credentials):
        await accounts.sign_up(body.username, body.password)
        return Response(status_code=204)

    @app.post("/create_user")
    async def create_user(body: Credentials):
        await accounts.sign_up(body.username, body.password)
        return await _log_in(body.username, body.password)

    @app.post("/login")
    async def login(body: Credentials):
        return await _log_in(body.username, body.password)

    @app.post("/logged_in")
    def logged_in(request: Request, body: SessionBody):
        sid = body.sessionId or session_id_from_cookie(request)
        return _ok(bool(sid) and accounts.is_session_active(sid))

    @app.post("/log_out", status_code=204)
    def log_out(request: Request, body: Optional[SessionBody] = None):
        cookie_sid = session_id_from_cookie(request)
        sid = (body.sessionId if body else None) or cookie_sid
        if sid:
            accounts.log_out(sid)
        resp = Response(status_code=204)
        # a cookie for a different, still active session stays usable
        if cookie_sid is None or cookie_sid == sid:
            resp.delete_cookie(settings.cookie_name)
        return resp

    # --- inventory (tenant = session owner) ---

    @app.get("/dashboard")
    async def dashboard(request: Request):
        user = require_user(request)
        return _ok(await inventory.get_user_data(username=user.username))

    @app.post("/get_asset")
    async def get_asset(request: Request, body: AssetLookup):
        user = require_user(request, body.sessionId)
        return _ok(await inventory.get_asset(username=user.username, asset_id=body.id, name=body.name))

    @app.post("/add_asset")
    async def add_asset(request: Request, body: AssetIn):
        user = require_user(request, body.sessionId)
        return _ok(await inventory.add_asset(body.payload(), username=user.username))

    @app.post("/add_category")
    async def add_category(request: Request, body: CategoryIn):
        user = require_user(request, body.sessionId)
        return _ok(await inventory.add_category(body.payload(), username=user.username))

    @app.post("/add_site")
    async def add_site(request: Request, body: SiteIn):
        user = require_user(request, body.sessionId)
        return _ok(await inventory.add_site(body.payload(), username=user.username))

    @app.post("/add_location")
    async def add_location(request: Request, body: LocationIn):
        user = require_user(request, body.sessionId)
        return _ok(await inventory.add_location(body.payload(), username=user.username))
