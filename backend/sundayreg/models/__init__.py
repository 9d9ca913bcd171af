# sundayreg/models/__init__.py
"""
Central model registry.

Import this once at startup (e.g., in main.py) so SQLAlchemy sees all mapped
classes before `create_all` / alembic autogenerate.
"""
from sundayreg.db import Base  # noqa: F401  re-export Base
from sundayreg.models.registration import Registration, RegistrantType  # noqa: F401
