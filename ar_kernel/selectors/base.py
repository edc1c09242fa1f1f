"""
Base class for the store's read-side selectors.

A selector wraps a session the caller opened (and will close) and returns
frozen DTOs, never ORM rows.  It never adds, deletes, flushes or commits.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from ar_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    def __init__(self, session: Session):
        self.session = session
