import logging
from logging.config import fileConfig
import os
import importlib
import pkgutil
from pathlib import Path

from flask import current_app
from alembic import context

config = context.config

# Logging: alembic.ini in migrations/ or repo root; plain basicConfig otherwise
def _init_logging():
    candidates = [config.config_file_name, Path(__file__).resolve().parents[1] / "alembic.ini"]
    for ini in candidates:
        if ini and Path(ini).exists():
            fileConfig(str(ini))
            return
    logging.basicConfig(level=logging.INFO)

_init_logging()
logger = logging.getLogger("alembic.env")


def get_engine():
    # Flask-SQLAlchemy >= 3.x exposes .engine directly
    return current_app.extensions["migrate"].db.engine


def get_engine_url():
    return get_engine().url.render_as_string(hide_password=False).replace("%", "%%")


config.set_main_option("sqlalchemy.url", get_engine_url())
target_db = current_app.extensions["migrate"].db


def get_metadata():
    if hasattr(target_db, "metadatas"):
        return target_db.metadatas[None]
    return target_db.metadata


def _autoload_models():
    """Import every module in community_hub.models so autogenerate sees all tables/indexes."""
    import community_hub.models as models_pkg
    for m in pkgutil.iter_modules(models_pkg.__path__):
        importlib.import_module(f"community_hub.models.{m.name}")
    logger.info("Auto-loaded models from community_hub.models/*")


# Partial unique indexes are declared with dialect kwargs that autogenerate
# compares poorly; never let it propose dropping them unless allowlisted.
_PROTECTED_INDEXES = {"ux_community_member_codes_active_owner"}
_DROP_INDEX_ALLOWLIST = {
    name.strip()
    for name in os.getenv("ALEMBIC_DROP_INDEX_ALLOWLIST", "").split(",")
    if name.strip()
}

def _include_object(object, name, type_, reflected, compare_to):
    if type_ == "index" and name not in _DROP_INDEX_ALLOWLIST:
        if name in _PROTECTED_INDEXES and reflected:
            return False
        if reflected and compare_to is None:
            return False
    return True


def run_migrations_offline():
    _autoload_models()
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=get_metadata(),
        literal_binds=True,
        compare_type=True,
        compare_server_default=True,
        include_object=_include_object,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    # Prevent empty revision files on autogenerate
    def process_revision_directives(context_, revision, directives):
        if getattr(config.cmd_opts, "autogenerate", False):
            script = directives[0]
            if script.upgrade_ops.is_empty():
                directives[:] = []
                logger.info("No changes in schema detected.")

    conf_args = current_app.extensions["migrate"].configure_args
    conf_args = {
        **conf_args,
        "process_revision_directives": conf_args.get(
            "process_revision_directives", process_revision_directives
        ),
        "compare_type": True,
        "compare_server_default": True,
        "include_object": _include_object,
        "target_metadata": get_metadata(),
        # SQLite needs batch mode for ALTERs
        "render_as_batch": get_engine().dialect.name == "sqlite",
    }

    _autoload_models()

    with get_engine().connect() as connection:
        context.configure(connection=connection, **conf_args)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
