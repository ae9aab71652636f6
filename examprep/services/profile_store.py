"""Student profile persistence: flat JSON files or a SQL table, same interface.

Every write goes through a per-student asyncio.Lock, and ``update`` does its
read-modify-write while holding it, so two completions for one student in
this process cannot both start from the same stored profile.
"""
from __future__ import annotations

import asyncio
import json
import logging
import os
import re
import tempfile
from abc import ABC, abstractmethod
from collections import defaultdict
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from examprep.models.student_profile import StudentProfileRow
from examprep.schemas.student import STUDENT_ID_PATTERN, StudentProfile
from examprep.services.errors import ProfileStoreError

logger = logging.getLogger(__name__)

_STUDENT_ID_RE = re.compile(STUDENT_ID_PATTERN)

ProfileUpdate = Callable[[StudentProfile], StudentProfile]


class KeyedLocks:
    """One asyncio.Lock per key, dropped once nobody holds or waits for it."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: defaultdict[str, int] = defaultdict(int)

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def __call__(self, key: str):
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] += 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if not self._waiters[key]:
                del self._waiters[key]
                del self._locks[key]


def check_student_id(student_id: str) -> str:
    if not _STUDENT_ID_RE.match(student_id):
        raise ValueError(f"Invalid student id {student_id!r}")
    return student_id


class ProfileStore(ABC):
    """get / put / update / reset / delete of StudentProfile by student id."""

    def __init__(self) -> None:
        self._locks = KeyedLocks()

    @abstractmethod
    async def _read(self, student_id: str) -> StudentProfile | None: ...

    @abstractmethod
    async def _write(self, student_id: str, profile: StudentProfile) -> None: ...

    @abstractmethod
    async def _remove(self, student_id: str) -> bool: ...

    async def get(self, student_id: str) -> StudentProfile:
        """Stored profile, or a fresh default one if the student has none yet."""
        check_student_id(student_id)
        return await self._read(student_id) or StudentProfile()

    async def exists(self, student_id: str) -> bool:
        check_student_id(student_id)
        return await self._read(student_id) is not None

    async def put(self, student_id: str, profile: StudentProfile) -> StudentProfile:
        check_student_id(student_id)
        async with self._locks(student_id):
            await self._write(student_id, profile)
        logger.info("Stored profile for %s", student_id)
        return profile

    async def update(self, student_id: str, fn: ProfileUpdate) -> StudentProfile:
        """Read, apply `fn`, write back; atomic per student within this process."""
        check_student_id(student_id)
        async with self._locks(student_id):
            current = await self._read(student_id) or StudentProfile()
            updated = fn(current)
            await self._write(student_id, updated)
        logger.info("Updated profile for %s", student_id)
        return updated

    async def reset(self, student_id: str) -> StudentProfile:
        """Back to defaults, keeping the display name."""
        return await self.update(student_id, lambda current: StudentProfile(display_name=current.display_name))

    async def delete(self, student_id: str) -> bool:
        check_student_id(student_id)
        async with self._locks(student_id):
            removed = await self._remove(student_id)
        if removed:
            logger.info("Deleted profile for %s", student_id)
        return removed


def _decode(student_id: str, document: str) -> StudentProfile:
    try:
        return StudentProfile.model_validate_json(document)
    except ValidationError as exc:
        raise ProfileStoreError(f"Stored profile is not valid: {exc.error_count()} errors", student_id) from exc


class JsonFileProfileStore(ProfileStore):
    """<directory>/students/<student id>.json, pretty printed, replaced atomically."""

    def __init__(self, directory: Path) -> None:
        super().__init__()
        self.directory = Path(directory) / "students"

    def _path(self, student_id: str) -> Path:
        return self.directory / f"{student_id}.json"

    def _read_sync(self, student_id: str) -> StudentProfile | None:
        path = self._path(student_id)
        try:
            document = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise ProfileStoreError(f"Failed to read {path}: {exc}", student_id) from exc
        return _decode(student_id, document)

    def _write_sync(self, student_id: str, profile: StudentProfile) -> None:
        path = self._path(student_id)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{student_id}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(profile.model_dump_json(indent=2))
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise ProfileStoreError(f"Failed to write {path}: {exc}", student_id) from exc

    def _remove_sync(self, student_id: str) -> bool:
        try:
            self._path(student_id).unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise ProfileStoreError(f"Failed to delete profile: {exc}", student_id) from exc
        return True

    async def _read(self, student_id: str) -> StudentProfile | None:
        return await asyncio.to_thread(self._read_sync, student_id)

    async def _write(self, student_id: str, profile: StudentProfile) -> None:
        await asyncio.to_thread(self._write_sync, student_id, profile)

    async def _remove(self, student_id: str) -> bool:
        return await asyncio.to_thread(self._remove_sync, student_id)


class SqlProfileStore(ProfileStore):
    """Profiles as JSON documents in the student_profiles table."""

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        super().__init__()
        self._sessionmaker = sessionmaker

    async def _read(self, student_id: str) -> StudentProfile | None:
        try:
            async with self._sessionmaker() as db:
                row = await db.get(StudentProfileRow, student_id)
        except SQLAlchemyError as exc:
            raise ProfileStoreError(f"Failed to read profile: {exc}", student_id) from exc
        return _decode(student_id, row.document) if row else None

    async def _write(self, student_id: str, profile: StudentProfile) -> None:
        try:
            async with self._sessionmaker() as db, db.begin():
                await db.merge(
                    StudentProfileRow(
                        student_id=student_id,
                        document=profile.model_dump_json(),
                        updated_at=datetime.now(timezone.utc),
                    )
                )
        except SQLAlchemyError as exc:
            raise ProfileStoreError(f"Failed to write profile: {exc}", student_id) from exc

    async def _remove(self, student_id: str) -> bool:
        try:
            async with self._sessionmaker() as db, db.begin():
                result = await db.execute(delete(StudentProfileRow).where(StudentProfileRow.student_id == student_id))
        except SQLAlchemyError as exc:
            raise ProfileStoreError(f"Failed to delete profile: {exc}", student_id) from exc
        return result.rowcount > 0

    async def update(self, student_id: str, fn: ProfileUpdate) -> StudentProfile:
        """Read-modify-write in one transaction, row locked where the database supports it."""
        check_student_id(student_id)
        async with self._locks(student_id):
            try:
                async with self._sessionmaker() as db, db.begin():
                    row = (
                        await db.execute(
                            select(StudentProfileRow)
                            .where(StudentProfileRow.student_id == student_id)
                            .with_for_update()
                        )
                    ).scalar_one_or_none()
                    current = _decode(student_id, row.document) if row else StudentProfile()
                    updated = fn(current)
                    if row is None:
                        db.add(StudentProfileRow(student_id=student_id, document=updated.model_dump_json()))
                    else:
                        row.document = updated.model_dump_json()
                        row.updated_at = datetime.now(timezone.utc)
            except SQLAlchemyError as exc:
                raise ProfileStoreError(f"Failed to update profile: {exc}", student_id) from exc
        logger.info("Updated profile for %s", student_id)
        return updated


def create_profile_store(backend: str, data_dir: Path, sessionmaker: async_sessionmaker[AsyncSession]) -> ProfileStore:
    if backend == "json":
        return JsonFileProfileStore(data_dir)
    if backend == "sql":
        return SqlProfileStore(sessionmaker)
    raise ValueError(f"Unknown profile backend {backend!r} (expected 'json' or 'sql')")
