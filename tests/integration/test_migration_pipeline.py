"""End-to-end migration tests against an in-memory database."""

import json
from uuid import UUID, uuid4

import pytest
from conftest import make_channel, make_entity, make_track
from sqlalchemy import func, insert, select

from channel_migrator.models import AuthUser, Channel, ChannelTrack, Track, UserChannel
from channel_migrator.repositories.migration_repo import InsertedTrack, MigrationRepository
from channel_migrator.runner import run_migration, save_summary
from channel_migrator.services.entity_loader import EntityLoader
from channel_migrator.services.export_reader import parse_export
from channel_migrator.services.identifiers import SequenceIdentifierGenerator
from channel_migrator.services.orchestrator import MigrationOrchestrator


async def count(store, model) -> int:
    rows = await store.execute(select(func.count().label("n")).select_from(model))
    return rows[0]["n"]


async def counts(store) -> dict[str, int]:
    async with store.transaction():
        return {
            "users": await count(store, AuthUser),
            "channels": await count(store, Channel),
            "memberships": await count(store, UserChannel),
            "tracks": await count(store, Track),
            "links": await count(store, ChannelTrack),
        }


class FailingRepository(MigrationRepository):
    """Makes one member of a track or link batch fail."""

    def __init__(
        self,
        store,
        settings,
        bad_track_url: str | None = None,
        bad_link: int | None = None,
        track_error: Exception | None = None,
    ):
        super().__init__(store, settings)
        self.bad_track_url = bad_track_url
        self.bad_link = bad_link
        self.track_error = track_error
        self.links = 0

    async def insert_track(self, track):
        if track.url == self.bad_track_url:
            if self.track_error:
                raise self.track_error
            # violates tracks.url NOT NULL
            await self.store.execute(insert(Track).values(url=None, title=track.title))
        return await super().insert_track(track)

    async def insert_channel_track(self, user_id, channel_id, track):
        self.links += 1
        if self.links == self.bad_link:
            # unknown track id violates the foreign key
            track = InsertedTrack(id=uuid4(), created_at=track.created_at)
        await super().insert_channel_track(user_id, channel_id, track)


def track_url(n: int) -> str:
    return make_track(n)["url"]


@pytest.fixture
def orchestrator(store, repo, settings, fixed_ids):
    loader = EntityLoader(
        repo,
        new_id=SequenceIdentifierGenerator(fixed_ids),
        concurrency=settings.insert_concurrency,
    )
    return MigrationOrchestrator(store, repo, loader)


class TestEndToEnd:
    """Full runs over realistic input."""

    @pytest.mark.asyncio
    async def test_channel_user_and_bare_user(self, orchestrator, store):
        """One user with a channel and two tracks (one without url), one bare user."""
        entity_a = make_entity(
            "A",
            channel=make_channel("a-radio"),
            tracks=[make_track(1), make_track(2, url=None)],
            providers=["google.com"],
        )
        entity_b = make_entity("B")

        log = await orchestrator.migrate([entity_a, entity_b])

        assert log.ok == ["A", "B"]
        assert log.failed == []
        assert await counts(store) == {
            "users": 2,
            "channels": 1,
            "memberships": 1,
            "tracks": 1,
            "links": 1,
        }

    @pytest.mark.asyncio
    async def test_rows_reference_generated_ids(self, orchestrator, store, fixed_ids):
        entity = make_entity(
            "A",
            channel=make_channel("a-radio"),
            tracks=[make_track(1), make_track(2)],
            providers=["google.com"],
        )

        await orchestrator.migrate([entity])

        async with store.transaction():
            users = await store.execute(select(AuthUser))
            channels = await store.execute(select(Channel))
            memberships = await store.execute(select(UserChannel))
            tracks = await store.execute(select(Track))
            links = await store.execute(select(ChannelTrack))

        user = users[0]
        assert user["id"] == fixed_ids[0]
        assert user["email"] == "a@example.com"
        assert user["encrypted_password"] == "hash-A"
        assert user["raw_app_meta_data"] == {"provider": "google"}
        assert user["raw_user_meta_data"] == {}
        assert user["instance_id"] == UUID(int=0)
        assert user["aud"] == "authenticated"
        assert user["role"] == "authenticated"
        assert user["confirmation_token"] == ""
        assert user["is_super_admin"] is False

        channel_id = channels[0]["id"]
        assert channels[0]["name"] == "A Radio"
        assert channels[0]["url"] == "https://a-radio.example.com"
        assert [(m["user_id"], m["channel_id"]) for m in memberships] == [(user["id"], channel_id)]

        track_ids = {t["id"] for t in tracks}
        assert len(track_ids) == 2
        assert {link["track_id"] for link in links} == track_ids
        assert all(link["user_id"] == user["id"] for link in links)
        assert all(link["channel_id"] == channel_id for link in links)

    @pytest.mark.asyncio
    async def test_track_without_url_never_written(self, orchestrator, store):
        entity = make_entity(
            "A",
            channel=make_channel("a-radio"),
            tracks=[make_track(1, url=None), make_track(2, url="")],
        )

        log = await orchestrator.migrate([entity])

        assert log.ok == ["A"]
        result = await counts(store)
        assert result["tracks"] == 0
        assert result["links"] == 0

    @pytest.mark.asyncio
    async def test_user_without_channel(self, orchestrator, store):
        log = await orchestrator.migrate([make_entity("B", tracks=[make_track(1)])])

        assert log.ok == ["B"]
        assert await counts(store) == {
            "users": 1,
            "channels": 0,
            "memberships": 0,
            "tracks": 0,
            "links": 0,
        }


class TestFailureIsolation:
    """A failed entity leaves nothing behind and does not stop the run."""

    @pytest.mark.asyncio
    async def test_channel_failure_rolls_back_entity(self, orchestrator, store):
        first = make_entity("A", channel=make_channel("taken"), tracks=[make_track(1)])
        duplicate = make_entity("B", channel=make_channel("taken"), tracks=[make_track(2)])
        last = make_entity("C")

        log = await orchestrator.migrate([first, duplicate, last])

        assert log.ok == ["A", "C"]
        assert log.failed == ["B"]
        assert await counts(store) == {
            "users": 2,
            "channels": 1,
            "memberships": 1,
            "tracks": 1,
            "links": 1,
        }

    @pytest.mark.asyncio
    async def test_user_failure(self, store, repo, settings):
        same_id = UUID(int=99)
        loader = EntityLoader(
            repo,
            new_id=SequenceIdentifierGenerator([same_id, same_id, UUID(int=100)]),
            concurrency=settings.insert_concurrency,
        )
        orchestrator = MigrationOrchestrator(store, repo, loader)

        log = await orchestrator.migrate(
            [
                make_entity("A"),
                make_entity("B", channel=make_channel("b-radio")),
                make_entity("C", channel=make_channel("c-radio")),
            ]
        )

        assert log.ok == ["A", "C"]
        assert log.failed == ["B"]
        result = await counts(store)
        assert result["users"] == 2
        assert result["channels"] == 1


    @pytest.mark.asyncio
    async def test_track_batch_failure_leaves_no_rows(self, store, settings):
        repo = FailingRepository(store, settings, bad_track_url=track_url(3))
        loader = EntityLoader(repo, concurrency=settings.insert_concurrency)
        entities = [
            make_entity(
                "A",
                channel=make_channel("a-radio"),
                tracks=[make_track(n) for n in range(1, 5)],
            ),
            make_entity("B"),
            make_entity("C", channel=make_channel("c-radio"), tracks=[make_track(5)]),
        ]

        log = await MigrationOrchestrator(store, repo, loader).migrate(entities)

        assert log.ok == ["B", "C"]
        assert log.failed == ["A"]
        assert await counts(store) == {
            "users": 2,
            "channels": 1,
            "memberships": 1,
            "tracks": 1,
            "links": 1,
        }

    @pytest.mark.asyncio
    async def test_link_batch_failure_leaves_no_rows(self, store, settings):
        repo = FailingRepository(store, settings, bad_link=2)
        loader = EntityLoader(repo, concurrency=settings.insert_concurrency)
        entities = [
            make_entity(
                "A",
                channel=make_channel("a-radio"),
                tracks=[make_track(n) for n in range(1, 4)],
            ),
            make_entity("B"),
            make_entity("C", channel=make_channel("c-radio"), tracks=[make_track(4)]),
        ]

        log = await MigrationOrchestrator(store, repo, loader).migrate(entities)

        assert log.ok == ["B", "C"]
        assert log.failed == ["A"]
        assert await counts(store) == {
            "users": 2,
            "channels": 1,
            "memberships": 1,
            "tracks": 1,
            "links": 1,
        }

    @pytest.mark.asyncio
    async def test_unexpected_error_fails_only_that_entity(self, store, settings):
        repo = FailingRepository(
            store,
            settings,
            bad_track_url=track_url(2),
            track_error=ValueError("bad track payload"),
        )
        loader = EntityLoader(repo, concurrency=settings.insert_concurrency)
        entities = [
            make_entity("A", channel=make_channel("a-radio"), tracks=[make_track(1), make_track(2)]),
            make_entity("B"),
        ]

        log = await MigrationOrchestrator(store, repo, loader).migrate(entities)

        assert log.ok == ["B"]
        assert log.failed == ["A"]
        assert await counts(store) == {
            "users": 1,
            "channels": 0,
            "memberships": 0,
            "tracks": 0,
            "links": 0,
        }


class TestReset:
    """Runs are full-replace."""

    @pytest.mark.asyncio
    async def test_second_run_replaces_first(self, store, repo, settings):
        entities = [make_entity("A", channel=make_channel("a-radio"), tracks=[make_track(1)])]

        for _ in range(2):
            loader = EntityLoader(repo, concurrency=settings.insert_concurrency)
            log = await MigrationOrchestrator(store, repo, loader).migrate(entities)
            assert log.ok == ["A"]

        assert await counts(store) == {
            "users": 1,
            "channels": 1,
            "memberships": 1,
            "tracks": 1,
            "links": 1,
        }

    @pytest.mark.asyncio
    async def test_clear_all_empties_every_table(self, orchestrator, store, repo):
        await orchestrator.migrate(
            [make_entity("A", channel=make_channel("a-radio"), tracks=[make_track(1)])]
        )

        await orchestrator.reset()

        async with store.transaction():
            assert set((await repo.count_rows()).values()) == {0}


class TestRunner:
    """Test the run wiring and report."""

    @pytest.mark.asyncio
    async def test_run_migration_writes_report(self, db_engine, settings, tmp_path):
        entities = [
            make_entity("A", channel=make_channel("a-radio"), tracks=[make_track(1), make_track(2)]),
            make_entity("B"),
        ]

        summary = await run_migration(db_engine, entities, settings)
        path = save_summary(summary, tmp_path / "reports")

        assert summary.result.ok == ["A", "B"]
        assert summary.row_counts == {
            "channel_track": 2,
            "channels": 1,
            "tracks": 2,
            "user_channel": 1,
            "auth.users": 2,
        }
        report = json.loads(path.read_text())
        assert report["result"] == {"ok": ["A", "B"], "failed": []}
        assert summary.completed_at >= summary.started_at

    @pytest.mark.asyncio
    async def test_rejected_records_are_reported(self, db_engine, settings):
        export = parse_export(
            [
                {"user": {"localId": "A"}, "channel": {"title": "A Radio", "slug": "a-radio"}},
                {"user": {"localId": "B"}, "channel": {"title": "no slug"}},
                {"channel": {"title": "Orphan", "slug": "orphan"}},
                {"user": {"localId": "C"}},
            ]
        )

        summary = await run_migration(
            db_engine, export.entities, settings, rejected=export.rejected
        )

        assert summary.result.ok == ["A", "C"]
        assert summary.result.failed == ["B"]
        assert [r.position for r in summary.rejected] == [2, 3]
        assert summary.row_counts["auth.users"] == 2
        assert summary.row_counts["channels"] == 1
