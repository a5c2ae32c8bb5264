"""Persistence helpers for per-user key/value entries."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from guardian_inbox.infrastructure.models import StorageEntryModel
from guardian_inbox.utils import ensure_app_naive_datetime, now_in_app_timezone


class StorageEntryRepository:
    """Read and write whole values stored under a user-scoped key."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, owner_id: str, key: str) -> str | None:
        model = self._get_model(owner_id, key)
        return model.value if model else None

    def put(self, owner_id: str, key: str, value: str) -> None:
        model = self._get_model(owner_id, key)
        if model is None:
            model = StorageEntryModel(owner_id=owner_id, key=key)
        model.value = value
        model.updated_at = ensure_app_naive_datetime(now_in_app_timezone())
        self.session.add(model)
        self.session.commit()

    def delete(self, owner_id: str, key: str) -> bool:
        model = self._get_model(owner_id, key)
        if model is None:
            return False
        self.session.delete(model)
        self.session.commit()
        return True

    def delete_many(self, owner_id: str, keys: Sequence[str]) -> int:
        """Remove every entry of ``owner_id`` stored under ``keys`` in one commit."""

        models = (
            self.session.query(StorageEntryModel)
            .filter(StorageEntryModel.owner_id == owner_id)
            .filter(StorageEntryModel.key.in_(list(keys)))
            .all()
        )
        for model in models:
            self.session.delete(model)
        self.session.commit()
        return len(models)

    def _get_model(self, owner_id: str, key: str) -> StorageEntryModel | None:
        return (
            self.session.query(StorageEntryModel)
            .filter(StorageEntryModel.owner_id == owner_id)
            .filter(StorageEntryModel.key == key)
            .one_or_none()
        )


__all__ = ["StorageEntryRepository"]
