"""Batch lookups against the user directory."""

from __future__ import annotations

from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from meet.models import User


class UserRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_many_by_uuid(self, uuids: Iterable[str]) -> list[User]:
        unique = list(dict.fromkeys(uuids))
        if not unique:
            return []
        stmt = select(User).where(User.uuid.in_(unique))
        return list(self.db.execute(stmt).scalars().all())
