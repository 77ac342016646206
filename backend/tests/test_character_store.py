"""Tests for the character stores: local file, database and fallback."""
import json
import re
import threading
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from party_sheets.core.errors import CharacterNotFoundError, StorageError
from party_sheets.database import models  # noqa: F401
from party_sheets.services.character_parser import normalize
from party_sheets.services.character_store import (
    DatabaseCharacterStore,
    FallbackCharacterStore,
    LocalCharacterStore,
    StoredCharacter,
    display_name,
    generate_character_id,
)


class TestHelpers:
    """Tests for id generation and display names."""

    def test_id_format(self):
        assert re.fullmatch(r"char-\d+-[0-9a-z]{9}", generate_character_id())

    def test_ids_are_unique(self):
        assert len({generate_character_id() for _ in range(100)}) == 100

    def test_display_name(self, minimal_export):
        record = normalize(minimal_export)
        assert display_name(record) == "Aria"
        assert display_name(record, "  Aria the Bold ") == "Aria the Bold"
        assert display_name(normalize({})) == "Unnamed Character"
        assert display_name(normalize({}), "   ") == "Unnamed Character"


class TestLocalCharacterStore:
    """Tests for the JSON file store."""

    @pytest.mark.asyncio
    async def test_save_and_get(self, local_store, foundry_export):
        record = normalize(foundry_export)
        character_id = await local_store.save_character(record)

        stored = await local_store.get_character(character_id)
        assert stored.name == "Elara Moonwhisper"
        assert stored.data == record

    @pytest.mark.asyncio
    async def test_list_in_upload_order(self, local_store, foundry_export, minimal_export):
        first = await local_store.save_character(normalize(foundry_export))
        second = await local_store.save_character(normalize(minimal_export), "Party Bard")

        characters = await local_store.list_characters()
        assert [c.id for c in characters] == [first, second]
        assert characters[1].name == "Party Bard"

    @pytest.mark.asyncio
    async def test_unknown_id(self, local_store):
        assert await local_store.get_character("char-missing") is None
        with pytest.raises(CharacterNotFoundError):
            await local_store.delete_character("char-missing")
        with pytest.raises(CharacterNotFoundError):
            await local_store.rename_character("char-missing", "x")

    @pytest.mark.asyncio
    async def test_rename_keeps_record(self, local_store, minimal_export):
        record = normalize(minimal_export)
        character_id = await local_store.save_character(record)

        await local_store.rename_character(character_id, "Renamed")

        stored = await local_store.get_character(character_id)
        assert stored.name == "Renamed"
        assert stored.data.name == "Aria"

    @pytest.mark.asyncio
    async def test_delete(self, local_store, minimal_export):
        character_id = await local_store.save_character(normalize(minimal_export))
        await local_store.delete_character(character_id)
        assert await local_store.list_characters() == []

    @pytest.mark.asyncio
    async def test_corrupt_file_reads_empty(self, tmp_path):
        path = tmp_path / "characters.json"
        path.write_text("{not json", encoding="utf-8")
        assert await LocalCharacterStore(path).list_characters() == []

    @pytest.mark.asyncio
    async def test_malformed_entries_skipped(self, tmp_path, minimal_export):
        path = tmp_path / "characters.json"
        store = LocalCharacterStore(path)
        await store.save_character(normalize(minimal_export))

        entries = json.loads(path.read_text(encoding="utf-8"))
        entries.append({"id": "broken"})
        path.write_text(json.dumps(entries), encoding="utf-8")

        assert len(await store.list_characters()) == 1


def _session_context_for(url):
    engine = create_async_engine(url)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    @asynccontextmanager
    async def session_context():
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return engine, session_context


class TestDatabaseCharacterStore:
    """Tests for the SQL store against a temporary SQLite database."""

    @pytest.mark.asyncio
    async def test_crud(self, tmp_path, foundry_export, minimal_export):
        engine, session_context = _session_context_for(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

        store = DatabaseCharacterStore(session_context)
        try:
            wizard_id = await store.save_character(normalize(foundry_export))
            bard_id = await store.save_character(normalize(minimal_export), "Bard")

            characters = {c.id: c for c in await store.list_characters()}
            assert set(characters) == {wizard_id, bard_id}
            assert characters[wizard_id].name == "Elara Moonwhisper"
            assert characters[wizard_id].data == normalize(foundry_export)
            assert characters[bard_id].name == "Bard"

            await store.rename_character(bard_id, "Aria")
            assert (await store.get_character(bard_id)).name == "Aria"

            await store.delete_character(wizard_id)
            assert await store.get_character(wizard_id) is None
            with pytest.raises(CharacterNotFoundError):
                await store.delete_character(wizard_id)
            with pytest.raises(CharacterNotFoundError):
                await store.rename_character(wizard_id, "Ghost")
        finally:
            await engine.dispose()

    @pytest.mark.asyncio
    async def test_database_errors_become_storage_errors(self):
        @asynccontextmanager
        async def broken_session():
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))
            yield  # pragma: no cover

        store = DatabaseCharacterStore(broken_session)
        with pytest.raises(StorageError):
            await store.list_characters()


class TestFallbackCharacterStore:
    """Tests for switching to the fallback store."""

    @pytest.mark.asyncio
    async def test_uses_primary_when_healthy(self, local_store, minimal_export):
        fallback = AsyncMock()
        store = FallbackCharacterStore(local_store, fallback)

        character_id = await store.save_character(normalize(minimal_export))

        assert (await local_store.get_character(character_id)) is not None
        fallback.save_character.assert_not_called()

    @pytest.mark.asyncio
    async def test_falls_back_on_storage_error(self, local_store, minimal_export):
        primary = AsyncMock()
        primary.save_character.side_effect = StorageError()
        primary.list_characters.side_effect = StorageError()
        store = FallbackCharacterStore(primary, local_store)

        character_id = await store.save_character(normalize(minimal_export))

        characters = await store.list_characters()
        assert [c.id for c in characters] == [character_id]

    @pytest.mark.asyncio
    async def test_unknown_everywhere_is_not_found(self, local_store):
        primary = AsyncMock()
        primary.delete_character.side_effect = CharacterNotFoundError("char-x")
        primary.rename_character.side_effect = CharacterNotFoundError("char-x")
        primary.get_character.return_value = None
        store = FallbackCharacterStore(primary, local_store)

        assert await store.get_character("char-x") is None
        with pytest.raises(CharacterNotFoundError):
            await store.delete_character("char-x")
        with pytest.raises(CharacterNotFoundError):
            await store.rename_character("char-x", "Ghost")


class OutageStore(LocalCharacterStore):
    """Local store that raises StorageError while ``down`` is set."""

    down = False

    def _check(self):
        if self.down:
            raise StorageError(details={"reason": "connection refused"})

    async def list_characters(self):
        self._check()
        return await super().list_characters()

    async def get_character(self, character_id):
        self._check()
        return await super().get_character(character_id)

    async def save_character(self, record, name=None):
        self._check()
        return await super().save_character(record, name)

    async def delete_character(self, character_id):
        self._check()
        await super().delete_character(character_id)

    async def rename_character(self, character_id, name):
        self._check()
        await super().rename_character(character_id, name)


class TestFallbackAfterRecovery:
    """Characters saved during an outage stay reachable once the primary is back."""

    @pytest.fixture
    def stores(self, tmp_path):
        primary = OutageStore(tmp_path / "primary.json")
        fallback = LocalCharacterStore(tmp_path / "fallback.json")
        return primary, fallback, FallbackCharacterStore(primary, fallback)

    @pytest.mark.asyncio
    async def test_saved_during_outage_is_listed(self, stores, foundry_export, minimal_export):
        primary, fallback, store = stores
        before = await store.save_character(normalize(foundry_export))

        primary.down = True
        during = await store.save_character(normalize(minimal_export))
        primary.down = False

        assert await primary.get_character(during) is None
        characters = await store.list_characters()
        assert [c.id for c in characters] == [before, during]

    @pytest.mark.asyncio
    async def test_get_rename_delete_after_recovery(self, stores, minimal_export):
        primary, fallback, store = stores
        primary.down = True
        character_id = await store.save_character(normalize(minimal_export))
        primary.down = False

        assert (await store.get_character(character_id)).name == "Aria"

        await store.rename_character(character_id, "Aria the Bold")
        assert (await fallback.get_character(character_id)).name == "Aria the Bold"

        await store.delete_character(character_id)
        assert await store.get_character(character_id) is None
        assert await store.list_characters() == []

    @pytest.mark.asyncio
    async def test_get_falls_back_during_outage(self, stores, minimal_export):
        primary, fallback, store = stores
        character_id = await fallback.save_character(normalize(minimal_export))
        primary.down = True
        assert (await store.get_character(character_id)).id == character_id


class TestLocalStoreIO:
    """Tests for how the local store touches the disk."""

    @pytest.mark.asyncio
    async def test_file_access_runs_off_the_event_loop_thread(self, local_store, minimal_export, monkeypatch):
        threads = []
        original_read = LocalCharacterStore._read

        def recording_read(self):
            threads.append(threading.get_ident())
            return original_read(self)

        monkeypatch.setattr(LocalCharacterStore, "_read", recording_read)

        await local_store.save_character(normalize(minimal_export))
        await local_store.list_characters()

        assert threads
        assert threading.get_ident() not in threads

    def test_naive_timestamp_read_as_utc(self, minimal_export):
        stored = StoredCharacter(
            id="char-1",
            name="Aria",
            data=normalize(minimal_export),
            uploaded_at=datetime(2024, 1, 1, 12, 0),
        )
        assert stored.uploaded_at == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
