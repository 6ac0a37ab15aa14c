# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable, Optional

from fastapi import Depends, FastAPI, Form, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from portal.auth.session import SessionSnapshot
from portal.config import Settings
from portal.context import AppContext, build_context, get_context
from portal.errors import AuthenticationError, NotFoundError, ValidationError
from portal.permissions import cookie_settings, current_session_optional, require_admin, require_user
from portal.schemas import LoginForm, SignupForm, parse_form
from portal.services import accounts, roles


BASE_DIR = Path(__file__).resolve().parent

templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

MEMBER_IMAGES = ["cat1.svg", "cat2.svg", "cat3.svg"]


def _render(request: Request, template_name: str, ctx: Optional[dict] = None, *, status_code: int = 200):
    """TemplateResponse wrapper injecting the current session."""
    base_ctx = {"current_user": current_session_optional(request)}
    merged = {**base_ctx, **(ctx or {})}
    return templates.TemplateResponse(request, template_name, merged, status_code=status_code)


def _retry(request: Request, message: str, retry_url: str):
    # Input and credential problems are shown inline with a 200.
    return _render(request, "message.html", {"message": message, "retry_url": retry_url})


def _start_session(ctx: AppContext, token: str, url: str) -> RedirectResponse:
    resp = RedirectResponse(url=url, status_code=303)
    resp.set_cookie(
        ctx.settings.cookie_name,
        ctx.signer.sign(token),
        max_age=ctx.settings.session_ttl_seconds,
        **cookie_settings(ctx.settings.cookie_secure),
    )
    return resp


def create_app(settings: Optional[Settings] = None, *, clock: Callable[[], float] = time.time) -> FastAPI:
    settings = settings or Settings.from_env()
    app = FastAPI()
    app.state.ctx = build_context(settings, clock=clock)

    @app.middleware("http")
    async def _session_middleware(request: Request, call_next):
        ctx: AppContext = request.app.state.ctx
        token = ctx.signer.unsign(request.cookies.get(ctx.settings.cookie_name))
        request.state.session_token = token
        request.state.session = await run_in_threadpool(ctx.sessions.load_session, token)
        return await call_next(request)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        # 405 is folded into 404: any unmatched method/path pair is "not found".
        if exc.status_code in (404, 405):
            return _render(request, "404.html", status_code=404)
        if exc.status_code == 403:
            return _render(request, "403.html", status_code=403)
        return await http_exception_handler(request, exc)

    app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")

    # ------------------ Routes ------------------

    @app.get("/", response_class=HTMLResponse)
    def home(request: Request):
        return _render(request, "index.html")

    @app.get("/signup", response_class=HTMLResponse)
    def signup_get(request: Request):
        return _render(request, "signup.html")

    @app.post("/signup")
    def signup_post(
        request: Request,
        name: str = Form(""),
        email: str = Form(""),
        password: str = Form(""),
        role: str = Form(""),
        ctx: AppContext = Depends(get_context),
    ):
        try:
            form = parse_form(SignupForm, {"name": name, "email": email, "password": password, "role": role})
            _, token = accounts.signup(ctx, form)
        except ValidationError as e:
            return _retry(request, e.message, "/signup")
        return _start_session(ctx, token, "/members")

    @app.get("/login", response_class=HTMLResponse)
    def login_get(request: Request):
        return _render(request, "login.html")

    @app.post("/login")
    def login_post(
        request: Request,
        email: str = Form(""),
        password: str = Form(""),
        ctx: AppContext = Depends(get_context),
    ):
        try:
            form = parse_form(LoginForm, {"email": email, "password": password})
            _, token = accounts.login(ctx, form)
        except (ValidationError, NotFoundError, AuthenticationError) as e:
            return _retry(request, e.message, "/login")
        return _start_session(ctx, token, "/members")

    @app.get("/members", response_class=HTMLResponse)
    def members(request: Request, user: SessionSnapshot = Depends(require_user)):
        return _render(request, "members.html", {"user": user, "images": MEMBER_IMAGES})

    @app.get("/admin", response_class=HTMLResponse)
    def admin(
        request: Request,
        user: SessionSnapshot = Depends(require_user),
        ctx: AppContext = Depends(get_context),
    ):
        # Decided on the session snapshot, not on a fresh lookup.
        if not user.is_admin:
            return _render(request, "index.html")
        return _render(request, "admin.html", {"users": ctx.users.list_users()})

    @app.get("/promote/{user_id}", dependencies=[Depends(require_user), Depends(require_admin)])
    def promote(user_id: str, ctx: AppContext = Depends(get_context)):
        roles.promote(ctx, user_id)
        return RedirectResponse(url="/admin", status_code=303)

    @app.get("/demote/{user_id}", dependencies=[Depends(require_user), Depends(require_admin)])
    def demote(user_id: str, ctx: AppContext = Depends(get_context)):
        roles.demote(ctx, user_id)
        return RedirectResponse(url="/admin", status_code=303)

    @app.get("/logout")
    def logout(request: Request, ctx: AppContext = Depends(get_context)):
        accounts.logout(ctx, getattr(request.state, "session_token", None))
        resp = RedirectResponse(url="/", status_code=303)
        resp.delete_cookie(ctx.settings.cookie_name)
        return resp

    return app
