"""
Tests for the versioned rating store and its replay clock.
"""

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from backline.core.exceptions import PointInTimeViolation
from backline.ratings.season import SeasonTransition
from backline.ratings.store import RatingStore
from backline.ratings.types import Rating, RatingSnapshot

T1 = datetime(2024, 9, 8, 17, 0, tzinfo=timezone.utc)
T2 = T1 + timedelta(hours=3)
NEXT_WEEK = T1 + timedelta(days=7)


def _played(rating, value, week, at):
    return replace(rating, value=value, games_played=rating.games_played + 1,
                   week=week, updated_at=at, last_played=at)


@pytest.fixture
def store():
    return RatingStore(SeasonTransition(league_average=1500.0, carryover=0.6))


class TestSeeding:
    def test_unknown_team_seeded_at_league_average(self, store):
        rating = store.get("KC", 2024, week=1)
        assert rating.value == 1500.0
        assert rating.week == 0
        assert store.history("KC", 2024) == (rating,)

    def test_seed_regresses_prior_season(self, store):
        store.set("KC", 2023, replace(store.get("KC", 2023, 1), value=1700.0, week=17, updated_at=T1))
        assert store.get("KC", 2024, week=1).value == pytest.approx(1620.0)

    def test_rating_at_does_not_seed(self, store):
        assert store.rating_at("KC", 2024, 3).value == 1500.0
        assert store.history("KC", 2024) == ()
        assert store.teams(2024) == []

    def test_seed_season(self, store):
        seeds = {"KC": replace(store.rating_at("KC", 2024, 0), value=1550.0)}
        store.seed_season(2024, seeds)
        assert store.get("KC", 2024, 1).value == 1550.0

    def test_seed_season_rejects_played_rating(self, store):
        played = _played(store.rating_at("KC", 2024, 0), 1510.0, 1, T1)
        with pytest.raises(ValueError):
            store.seed_season(2024, {"KC": played})


class TestPointInTimeReads:
    def test_entering_week_excludes_that_week(self, store):
        store.advance_to(2024, 1, T1)
        seed = store.get("KC", 2024, 1, before=T1)
        store.set("KC", 2024, _played(seed, 1510.0, 1, T1))

        store.advance_to(2024, 2)
        assert store.get("KC", 2024, 1).value == 1500.0
        assert store.get("KC", 2024, 2).value == 1510.0

    def test_before_includes_strictly_earlier_same_week_games(self, store):
        store.advance_to(2024, 1, T1)
        seed = store.get("KC", 2024, 1, before=T1)
        store.set("KC", 2024, _played(seed, 1510.0, 1, T1))

        store.advance_to(2024, 1, T2)
        assert store.get("KC", 2024, 1, before=T2).value == 1510.0
        assert store.get("KC", 2024, 1, before=T1).value == 1500.0

    def test_read_ahead_of_clock_raises(self, store):
        store.advance_to(2024, 1, T1)
        with pytest.raises(PointInTimeViolation):
            store.get("KC", 2024, 2)
        with pytest.raises(PointInTimeViolation):
            store.get("KC", 2024, 1, before=T2)
        with pytest.raises(PointInTimeViolation):
            store.get("KC", 2025, 1)

    def test_clock_cannot_move_backwards(self, store):
        store.advance_to(2024, 2)
        with pytest.raises(PointInTimeViolation):
            store.advance_to(2024, 1)
        store.advance_to(2024, 2, T2)
        with pytest.raises(PointInTimeViolation):
            store.advance_to(2024, 2, T1)

    def test_unguarded_without_clock(self, store):
        assert store.clock is None
        assert store.get("KC", 2030, 40).value == 1500.0


class TestWrites:
    def test_out_of_order_write_raises(self, store):
        store.advance_to(2024, 2, NEXT_WEEK)
        seed = store.get("KC", 2024, 2, before=NEXT_WEEK)
        store.set("KC", 2024, _played(seed, 1510.0, 2, NEXT_WEEK))
        with pytest.raises(PointInTimeViolation):
            store.set("KC", 2024, _played(seed, 1490.0, 1, T1))

    def test_write_ahead_of_clock_raises(self, store):
        store.advance_to(2024, 1, T1)
        seed = store.get("KC", 2024, 1, before=T1)
        with pytest.raises(PointInTimeViolation):
            store.set("KC", 2024, _played(seed, 1510.0, 2, NEXT_WEEK))

    def test_write_to_frozen_season_raises(self, store):
        seed = store.get("KC", 2023, 1)
        store.freeze(2023)
        with pytest.raises(PointInTimeViolation):
            store.set("KC", 2023, _played(seed, 1510.0, 1, T1))

    def test_read_of_unknown_team_leaves_frozen_season_alone(self, store):
        store.get("KC", 2023, 1)
        store.freeze(2023)
        assert store.get("NYJ", 2023, 1).value == 1500.0
        assert store.teams(2023) == ["KC"]
        assert store.final_ratings(2023).keys() == {"KC"}

    def test_read_after_close_does_not_seed(self, store):
        store.get("KC", 2024, 1)
        store.close()
        assert store.get("NYJ", 2024, 3).games_played == 0
        assert store.history("NYJ", 2024) == ()

    def test_write_under_wrong_key_raises(self, store):
        seed = store.get("KC", 2024, 1)
        with pytest.raises(ValueError):
            store.set("DET", 2024, seed)

    def test_history_keeps_every_version(self, store):
        seed = store.get("KC", 2024, 1)
        first = _played(seed, 1510.0, 1, T1)
        second = _played(first, 1504.0, 2, NEXT_WEEK)
        store.set("KC", 2024, first)
        store.set("KC", 2024, second)
        assert [r.value for r in store.history("KC", 2024)] == [1500.0, 1510.0, 1504.0]


class TestSnapshots:
    def test_snapshot_after_week(self, store):
        store.advance_to(2024, 1, T1)
        seed = store.get("KC", 2024, 1, before=T1)
        store.get("DET", 2024, 1, before=T1)
        store.set("KC", 2024, _played(seed, 1510.0, 1, T1))
        store.advance_to(2024, 2)

        snap = store.snapshot(2024, 1)
        assert snap.values_by_team() == {"DET": 1500.0, "KC": 1510.0}
        assert list(snap) == ["DET", "KC"]
        assert store.snapshots() == [snap]

    def test_snapshot_is_immutable(self, store):
        store.get("KC", 2024, 1)
        snap = store.snapshot(2024, 1)
        with pytest.raises(TypeError):
            snap.ratings["KC"] = None

    def test_snapshot_of_unfinished_week_raises(self, store):
        store.advance_to(2024, 1, T1)
        with pytest.raises(PointInTimeViolation):
            store.snapshot(2024, 1)

    def test_later_writes_do_not_change_snapshot(self, store):
        store.advance_to(2024, 1)
        seed = store.get("KC", 2024, 1)
        store.advance_to(2024, 2, NEXT_WEEK)
        snap = store.snapshot(2024, 1)
        store.set("KC", 2024, _played(seed, 1525.0, 2, NEXT_WEEK))
        assert snap["KC"].value == 1500.0


class TestSeasonLifecycle:
    def test_final_ratings_require_frozen_season(self, store):
        store.get("KC", 2023, 1)
        with pytest.raises(PointInTimeViolation):
            store.final_ratings(2023)
        store.freeze(2023)
        assert set(store.final_ratings(2023)) == {"KC"}

    def test_latest_ratings_before(self, store):
        store.get("KC", 2022, 1)
        store.set("DET", 2023, replace(store.get("DET", 2023, 1), value=1444.0, week=5, updated_at=T1))
        latest = store.latest_ratings_before(2024)
        assert latest["KC"].season == 2022
        assert latest["DET"].value == 1444.0

    def test_close_freezes_everything(self, store):
        seed = store.get("KC", 2024, 1)
        store.close()
        assert store.is_frozen(2024)
        with pytest.raises(PointInTimeViolation):
            store.set("KC", 2024, _played(seed, 1510.0, 1, T1))


class TestRestore:
    def _played_week_one(self, store):
        store.advance_to(2024, 1, T1)
        seed = store.get("KC", 2024, 1, before=T1)
        store.set("KC", 2024, _played(seed, 1510.0, 1, T1))
        store.advance_to(2024, 2)
        return store.snapshot(2024, 1)

    def test_restore_discards_later_versions(self, store):
        snap = self._played_week_one(store)
        store.advance_to(2024, 2, NEXT_WEEK)
        after_week_one = store.get("KC", 2024, 2, before=NEXT_WEEK)
        store.set("KC", 2024, _played(after_week_one, 1525.0, 2, NEXT_WEEK))

        store.restore(snap)
        assert [r.value for r in store.history("KC", 2024)] == [1500.0, 1510.0]
        assert store.clock == (2024, 2, None)
        assert store.get("KC", 2024, 2).value == 1510.0

    def test_restore_drops_later_seasons(self, store):
        snap = self._played_week_one(store)
        store.freeze(2024)
        store.advance_to(2025, 1)
        store.get("KC", 2025, 1)
        store.close()

        store.restore(snap)
        assert store.seasons() == [2024]
        assert not store.closed
        assert not store.is_frozen(2024)
        assert store.snapshots() == [snap]

    def test_foreign_snapshot_raises(self, store):
        store.get("KC", 2024, 1)
        foreign = RatingSnapshot(
            season=2024, week=1, ratings={"KC": Rating(team_id="KC", season=2024, value=1600.0)}
        )
        with pytest.raises(ValueError):
            store.restore(foreign)
