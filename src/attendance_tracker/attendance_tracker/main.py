from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from typing import Any, Mapping, Optional

import click
from dotenv import load_dotenv
from flask import Flask
from flask.logging import default_handler

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .attendance.work_calendar import WorkShift
from .common.auth import init_jwt
from .common.errors import register_error_handlers
from .container import Container, build_container
from .core.constants import DEFAULT_TIMEZONE, DEFAULT_TOKEN_HOURS
from .core.exceptions import DomainError
from .database.bootstrap import apply_schema, list_tables
from .requests.controller import register as register_requests
from .users.controller import register as register_users


def _load_settings(settings_override: Optional[Mapping[str, Any]]) -> dict:
    settings_module = get_settings_module()
    module = importlib.import_module(settings_module)
    settings = {k: getattr(module, k) for k in dir(module) if k.isupper()}
    settings["SETTINGS_MODULE"] = settings_module
    if settings_override:
        settings.update(settings_override)
    return settings


def _register_cli(app: Flask, container: Container) -> None:
    @app.cli.command("accrue-leave")
    @click.option("--month", default=None, help="Tháng cần cộng phép, dạng YYYY-MM (mặc định: tháng hiện tại)")
    def accrue_leave(month: Optional[str]):
        """Cộng 1 ngày phép cho mọi tài khoản đang hoạt động (chạy hàng tháng)."""
        try:
            credited = container.leave_accrual_service.accrue(month=month)
        except DomainError as e:
            raise click.ClickException(str(e))
        click.echo(f"Đã cộng phép cho {credited} người dùng")

    @app.cli.command("create-admin")
    @click.option("--username", default=None, help="Mặc định lấy từ ADMIN_USERNAME")
    @click.option("--password", default=None, help="Mặc định lấy từ ADMIN_PASSWORD")
    @click.option("--full-name", default="Administrator", show_default=True)
    def create_admin(username: Optional[str], password: Optional[str], full_name: str):
        """Tạo (hoặc đặt lại mật khẩu) tài khoản admin."""
        try:
            user_id = container.auth_service.ensure_admin(
                username=username or app.config.get("ADMIN_USERNAME", ""),
                password=password or app.config.get("ADMIN_PASSWORD", ""),
                full_name=full_name,
            )
        except DomainError as e:
            raise click.ClickException(str(e))
        click.echo(f"Admin sẵn sàng (id={user_id})")


def create_app(
    settings_override: Optional[Mapping[str, Any]] = None,
    *,
    container: Optional[Container] = None,
) -> Flask:
    load_dotenv(override=False)
    settings = _load_settings(settings_override)

    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=settings["SECRET_KEY"],
        JWT_SECRET_KEY=settings.get("JWT_SECRET_KEY") or settings["SECRET_KEY"],
        JWT_ACCESS_TOKEN_EXPIRES=timedelta(hours=int(settings.get("JWT_ACCESS_TOKEN_HOURS", DEFAULT_TOKEN_HOURS))),
        DEBUG=bool(settings.get("DEBUG", False)),
        TESTING=bool(settings.get("TESTING", False)),
        ADMIN_USERNAME=settings.get("ADMIN_USERNAME", "admin"),
        ADMIN_PASSWORD=settings.get("ADMIN_PASSWORD", ""),
    )
    app.logger.setLevel(str(settings.get("LOG_LEVEL", "INFO")).upper())
    pkg_logger = logging.getLogger(__package__)
    pkg_logger.setLevel(app.logger.level)
    pkg_logger.addHandler(default_handler)

    init_jwt(app)
    register_error_handlers(app)

    if container is None:
        db_config = dict(settings["DB_CONFIG"])
        app.logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings["SETTINGS_MODULE"],
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        if settings.get("AUTO_INIT_DB"):
            apply_schema(db_config)
            app.logger.info("schema ready (tables=%s)", len(list_tables(db_config)))
        shift = WorkShift(timezone=settings.get("TIMEZONE") or DEFAULT_TIMEZONE)
        container = build_container(db_config=db_config, shift=shift)

    app.extensions["attendance_tracker"] = container

    register_users(app, container)
    register_attendance(app, container)
    register_requests(app, container)
    _register_cli(app, container)

    return app
