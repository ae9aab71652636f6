"""Tests for the JSON-file and SQL profile stores."""
import asyncio

import pytest
import pytest_asyncio

from examprep.db.base import Base
from examprep.db.session import create_session_factory
from examprep.schemas.student import StudentProfile
from examprep.services.errors import ProfileStoreError
from examprep.services.profile_store import (
    JsonFileProfileStore,
    KeyedLocks,
    SqlProfileStore,
    check_student_id,
    create_profile_store,
)


@pytest_asyncio.fixture(params=["json", "sql"])
async def store(request, tmp_path):
    if request.param == "json":
        yield JsonFileProfileStore(tmp_path)
        return
    engine, sessionmaker = create_session_factory(f"sqlite+aiosqlite:///{tmp_path / 'profiles.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield SqlProfileStore(sessionmaker)
    await engine.dispose()


def _bump(profile: StudentProfile) -> StudentProfile:
    statistics = profile.statistics.model_copy(update={"sessions_taken": profile.statistics.sessions_taken + 1})
    return profile.model_copy(update={"statistics": statistics})


@pytest.mark.asyncio
class TestProfileStore:
    async def test_missing_profile_is_default(self, store):
        profile = await store.get("alice")
        assert profile == StudentProfile()
        assert not await store.exists("alice")

    async def test_put_then_get(self, store):
        await store.put("alice", StudentProfile(display_name="Alice"))
        assert (await store.get("alice")).display_name == "Alice"
        assert await store.exists("alice")

    async def test_put_overwrites(self, store):
        await store.put("alice", StudentProfile(display_name="Alice"))
        await store.put("alice", StudentProfile(display_name="Alicia"))
        assert (await store.get("alice")).display_name == "Alicia"

    async def test_update_applies_function(self, store):
        updated = await store.update("bob", _bump)
        assert updated.statistics.sessions_taken == 1
        assert (await store.get("bob")).statistics.sessions_taken == 1

    async def test_concurrent_updates_are_not_lost(self, store):
        await asyncio.gather(*(store.update("carol", _bump) for _ in range(20)))
        assert (await store.get("carol")).statistics.sessions_taken == 20
        assert len(store._locks) == 0

    async def test_reset_keeps_display_name(self, store):
        await store.put("dave", _bump(StudentProfile(display_name="Dave", status="doing great ⭐")))
        profile = await store.reset("dave")
        assert profile == StudentProfile(display_name="Dave")
        assert await store.get("dave") == StudentProfile(display_name="Dave")

    async def test_delete(self, store):
        await store.put("erin", StudentProfile())
        assert await store.delete("erin")
        assert not await store.exists("erin")
        assert not await store.delete("erin")

    async def test_profiles_are_separate(self, store):
        await store.update("frank", _bump)
        assert (await store.get("grace")).statistics.sessions_taken == 0

    async def test_invalid_id_rejected(self, store):
        with pytest.raises(ValueError):
            await store.get("../etc/passwd")


@pytest.mark.asyncio
async def test_corrupt_json_profile_raises_store_error(tmp_path):
    store = JsonFileProfileStore(tmp_path)
    (tmp_path / "students").mkdir()
    (tmp_path / "students" / "henry.json").write_text('{"statistics": {"sessions_taken": "many"}}', encoding="utf-8")
    with pytest.raises(ProfileStoreError) as excinfo:
        await store.get("henry")
    assert excinfo.value.student_id == "henry"


@pytest.mark.asyncio
async def test_json_store_writes_one_file_per_student(tmp_path):
    store = JsonFileProfileStore(tmp_path)
    await store.put("ivy", StudentProfile(display_name="Ivy"))
    files = sorted(p.name for p in (tmp_path / "students").iterdir())
    assert files == ["ivy.json"]


class TestCheckStudentId:
    @pytest.mark.parametrize("student_id", ["alice", "student_42", "a.b@example.com", "x-y"])
    def test_valid(self, student_id):
        assert check_student_id(student_id) == student_id

    @pytest.mark.parametrize("student_id", ["", ".hidden", "a/b", "a b", "x" * 200])
    def test_invalid(self, student_id):
        with pytest.raises(ValueError):
            check_student_id(student_id)


def test_unknown_backend(tmp_path):
    with pytest.raises(ValueError):
        create_profile_store("redis", tmp_path, None)


@pytest.mark.asyncio
class TestKeyedLocks:
    async def test_same_key_is_exclusive(self):
        locks = KeyedLocks()
        events = []

        async def worker(name):
            async with locks("alice"):
                events.append(f"{name} in")
                await asyncio.sleep(0)
                events.append(f"{name} out")

        await asyncio.gather(worker("a"), worker("b"))
        assert events == ["a in", "a out", "b in", "b out"]

    async def test_lock_dropped_when_released(self):
        locks = KeyedLocks()
        async with locks("alice"):
            assert len(locks) == 1
        assert len(locks) == 0

    async def test_lock_kept_while_someone_waits(self):
        locks = KeyedLocks()
        entered = asyncio.Event()
        release = asyncio.Event()

        async def holder():
            async with locks("alice"):
                entered.set()
                await release.wait()

        async def waiter():
            async with locks("alice"):
                pass

        holding = asyncio.create_task(holder())
        await entered.wait()
        waiting = asyncio.create_task(waiter())
        await asyncio.sleep(0)
        assert len(locks) == 1
        assert locks._waiters["alice"] == 2
        release.set()
        await asyncio.gather(holding, waiting)
        assert len(locks) == 0

    async def test_distinct_keys_are_independent(self):
        locks = KeyedLocks()
        async with locks("alice"), locks("bob"):
            assert len(locks) == 2
        assert len(locks) == 0
