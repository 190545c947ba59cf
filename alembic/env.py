import sys
import os
from logging.config import fileConfig
from sqlalchemy import pool
from alembic import context
from dotenv import load_dotenv

# Load .env
load_dotenv(".env")

# Add project root to Python path
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from webgone.config import settings
from webgone.database import Base, create_db_engine, normalize_db_url
from webgone.models import outage  # noqa: F401

# This is the Alembic Config object
config = context.config

# Interpret .ini file for Python logging.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# DB_URL from the environment wins over alembic.ini
config.set_main_option("sqlalchemy.url", normalize_db_url(settings.DB_URL))

target_metadata = Base.metadata


def run_migrations_offline():
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    connectable = create_db_engine(config.get_main_option("sqlalchemy.url"))

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,  # detect ALTER COLUMN changes
            render_as_batch=True,  # sqlite cannot ALTER most columns in place
        )

        with context.begin_transaction():
            context.run_migrations()

    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
