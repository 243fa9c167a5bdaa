import os
import json
from logging.config import dictConfig

import sentry_sdk
from flask import current_app
from sentry_sdk.integrations.flask import FlaskIntegration
from sentry_sdk.utils import BadDsn

def init_logging(app):
    """Structured logs (JSON) in staging/prod; keep default console in dev/tests."""
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))
    app_env = (os.getenv("APP_ENV", "development") or "development").lower()
    if app_env in ("staging", "production"):
        fmt = "%(asctime)s %(levelname)s %(name)s %(message)s"
        dictConfig({
            "version": 1,
            "formatters": {"json": {"()": "pythonjsonlogger.jsonlogger.JsonFormatter", "fmt": fmt}},
            "handlers": {"wsgi": {"class": "logging.StreamHandler", "formatter": "json"}},
            "root": {"level": app.config.get("LOG_LEVEL", "INFO"), "handlers": ["wsgi"]},
        })

def init_sentry(app):
    """Wire Sentry if DSN present; no-op otherwise."""
    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        return
    try:
        sentry_sdk.init(
            dsn=dsn,
            integrations=[FlaskIntegration()],
            traces_sample_rate=float(os.getenv("SENTRY_TRACES", "0.0")),
            environment=os.getenv("APP_ENV", "development"),
        )
    except BadDsn as exc:
        app.logger.warning("Sentry init skipped: %s", exc)

def log_event(event: str, level: str = "info", **fields):
    """
    Minimal structured log: one JSON object per line.
    Values must be JSON-friendly (ids, codes, roles); no PII.
    """
    payload = {"event": event, **fields}
    getattr(current_app.logger, level)(json.dumps(payload, default=str))
