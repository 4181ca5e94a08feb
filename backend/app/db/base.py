"""Declarative base shared by all models and alembic/env.py."""
from sqlalchemy.orm import declarative_base

Base = declarative_base()
