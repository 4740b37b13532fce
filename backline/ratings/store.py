"""
Versioned rating store with a replay clock.

Every read is addressed by (team, season, week[, before]) so that replay and
live use share one code path; there is no "current rating" accessor. The
store keeps every version a team's rating has gone through, and a clock
marking how far the replay has progressed:

- reading a point later than the clock is a PointInTimeViolation (the
  answer would depend on games that have not been replayed yet);
- writing a version older than the latest one, writing beyond the clock,
  or writing into a frozen season is a PointInTimeViolation;
- moving the clock backwards is a PointInTimeViolation.

restore() is the only way to rewind: it discards everything after a
snapshot taken from the same store.

A store whose clock was never advanced is unguarded (standalone use).
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Mapping, Optional, Set, Tuple

from backline.core.exceptions import PointInTimeViolation
from backline.ratings.season import SeasonTransition, seed_rating
from backline.ratings.types import Rating, RatingSnapshot

logger = logging.getLogger(__name__)


def _version_key(week: int, at: Optional[datetime]) -> Tuple:
    # Start-of-week versions sort before any game played that week
    if at is None:
        return (week, 0)
    return (week, 1, at)


def _visible(version: Rating, week: int, before: Optional[datetime]) -> bool:
    """Is *version* known when reading at (week, before)?"""
    if version.updated_at is None:
        return version.week <= week
    if version.week < week:
        return True
    if version.week == week and before is not None:
        return version.updated_at < before
    return False


class RatingStore:
    """
    Ratings keyed by (team, season), with point-in-time reads.

    Example:
        >>> store = RatingStore()
        >>> store.get("KC", 2024, week=1).value
        1500.0
    """

    def __init__(self, transition: Optional[SeasonTransition] = None):
        self.transition = transition or SeasonTransition()
        self._versions: Dict[Tuple[str, int], List[Rating]] = {}
        self._snapshots: Dict[Tuple[int, int], RatingSnapshot] = {}
        self._frozen: Set[int] = set()
        self._clock: Optional[Tuple[int, int, Optional[datetime]]] = None
        self._closed = False

    # ------------------------------------------------------------------ #
    # Clock
    # ------------------------------------------------------------------ #

    @property
    def clock(self) -> Optional[Tuple[int, int, Optional[datetime]]]:
        return self._clock

    @property
    def closed(self) -> bool:
        return self._closed

    def advance_to(self, season: int, week: int, at: Optional[datetime] = None) -> None:
        """Move the replay clock forward to (season, week, at)."""
        if self._closed:
            raise PointInTimeViolation("Replay already closed; the clock cannot move")
        if self._clock is not None:
            cs, cw, ct = self._clock
            if (season, week) < (cs, cw):
                raise PointInTimeViolation(
                    f"Replay clock cannot move backwards from season {cs} week {cw} "
                    f"to season {season} week {week}"
                )
            if (season, week) == (cs, cw) and ct is not None:
                if at is None or at < ct:
                    raise PointInTimeViolation(
                        f"Replay clock cannot move backwards from {ct.isoformat()} "
                        f"to {at.isoformat() if at else 'start of week'} "
                        f"(season {season} week {week})"
                    )
        self._clock = (season, week, at)

    def close(self) -> None:
        """Mark the replay complete: every season is frozen, every point readable."""
        self._frozen.update(season for _, season in self._versions)
        self._closed = True

    def _check_readable(self, season: int, week: int, before: Optional[datetime]) -> None:
        if self._clock is None or self._closed:
            return
        cs, cw, ct = self._clock
        beyond = (
            (season, week) > (cs, cw)
            or (
                (season, week) == (cs, cw)
                and before is not None
                and ct is not None
                and before > ct
            )
        )
        if beyond:
            raise PointInTimeViolation(
                f"Read of season {season} week {week}"
                f"{' before ' + before.isoformat() if before else ''} is ahead of the "
                f"replay clock (season {cs} week {cw}"
                f"{' at ' + ct.isoformat() if ct else ''})"
            )

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def _prior_rating(self, team_id: str, season: int) -> Optional[Rating]:
        """Last version of *team_id* from the most recent earlier season."""
        earlier = [s for (t, s) in self._versions if t == team_id and s < season]
        if not earlier:
            return None
        return self._versions[(team_id, max(earlier))][-1]

    def _seed(self, team_id: str, season: int) -> Rating:
        return seed_rating(team_id, season, self._prior_rating(team_id, season), self.transition)

    def _lookup(self, versions: List[Rating], week: int, before: Optional[datetime]) -> Rating:
        for version in reversed(versions):
            if _visible(version, week, before):
                return version
        return versions[0]

    def get(
        self,
        team_id: str,
        season: int,
        week: int,
        before: Optional[datetime] = None,
    ) -> Rating:
        """
        Rating of *team_id* entering *week* of *season*.

        With *before*, games of the same week that started strictly earlier
        are included too. A team seen for the first time in *season* is
        seeded (carried over from its prior season or set to the league
        average) and recorded as of week 0. Frozen seasons are never
        extended: an unknown team gets its seed back without it being
        stored.
        """
        self._check_readable(season, week, before)

        key = (team_id, season)
        versions = self._versions.get(key)
        if versions is None:
            seed = self._seed(team_id, season)
            if self._closed or season in self._frozen:
                return seed
            self._versions[key] = [seed]
            logger.debug("Seeded %s for season %d at %.1f", team_id, season, seed.value)
            return seed
        return self._lookup(versions, week, before)

    def rating_at(self, team_id: str, season: int, week: int) -> Rating:
        """
        Read-only audit query: rating entering *week*, without seeding.

        Unknown teams return the rating they would be seeded with.
        """
        self._check_readable(season, week, None)
        versions = self._versions.get((team_id, season))
        if versions is None:
            return self._seed(team_id, season)
        return self._lookup(versions, week, None)

    def history(self, team_id: str, season: int) -> Tuple[Rating, ...]:
        """Every version of the team's rating in *season*, oldest first."""
        return tuple(self._versions.get((team_id, season), ()))

    def teams(self, season: int) -> List[str]:
        return sorted(team for team, s in self._versions if s == season)

    def seasons(self) -> List[int]:
        return sorted({s for _, s in self._versions})

    def latest_ratings_before(self, season: int) -> Dict[str, Rating]:
        """Each known team's last rating from any season before *season*."""
        result: Dict[str, Rating] = {}
        for team_id in sorted({t for (t, s) in self._versions if s < season}):
            prior = self._prior_rating(team_id, season)
            if prior is not None:
                result[team_id] = prior
        return result

    def final_ratings(self, season: int) -> Dict[str, Rating]:
        """End-of-season ratings. The season must be frozen."""
        if season not in self._frozen:
            raise PointInTimeViolation(
                f"Season {season} is still in progress; final ratings are not known"
            )
        return {
            team_id: self._versions[(team_id, season)][-1]
            for team_id in self.teams(season)
        }

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    def _check_writable(self, team_id: str, season: int, rating: Rating) -> None:
        if rating.team_id != team_id or rating.season != season:
            raise ValueError(
                f"Rating for {rating.team_id}/{rating.season} written under {team_id}/{season}"
            )
        if self._closed or season in self._frozen:
            raise PointInTimeViolation(f"Season {season} is frozen; {team_id} cannot be updated")
        if self._clock is not None:
            cs, cw, ct = self._clock
            if season != cs:
                raise PointInTimeViolation(
                    f"Write to season {season} while the replay is in season {cs}"
                )
            if _version_key(rating.week, rating.updated_at) > _version_key(cw, ct):
                raise PointInTimeViolation(
                    f"Write of {team_id} at week {rating.week} is ahead of the replay clock "
                    f"(week {cw})"
                )

    def set(self, team_id: str, season: int, rating: Rating) -> None:
        """Append a new version of the team's rating."""
        self._check_writable(team_id, season, rating)

        key = (team_id, season)
        versions = self._versions.setdefault(key, [self._seed(team_id, season)])
        last = versions[-1]
        if _version_key(rating.week, rating.updated_at) < _version_key(last.week, last.updated_at):
            raise PointInTimeViolation(
                f"Out-of-order write for {team_id} in season {season}: week {rating.week} "
                f"after week {last.week}"
            )
        versions.append(rating)

    def seed_season(self, season: int, ratings: Mapping[str, Rating]) -> None:
        """Install opening ratings for *season* (teams not yet seen that season)."""
        for team_id in sorted(ratings):
            rating = ratings[team_id]
            self._check_writable(team_id, season, rating)
            if rating.games_played != 0 or rating.updated_at is not None:
                raise ValueError(f"Seed for {team_id} must be a pre-season rating")
            self._versions.setdefault((team_id, season), [rating])

    def freeze(self, season: int) -> None:
        """Freeze *season*; its ratings can no longer change."""
        self._frozen.add(season)

    def is_frozen(self, season: int) -> bool:
        return season in self._frozen

    # ------------------------------------------------------------------ #
    # Snapshots
    # ------------------------------------------------------------------ #

    def snapshot(self, season: int, week: int) -> RatingSnapshot:
        """
        Immutable copy of every team's rating after all games of *week*.

        Only weeks the replay has moved past (or any week, once closed) can
        be snapshotted.
        """
        cached = self._snapshots.get((season, week))
        if cached is not None:
            return cached

        if self._clock is not None and not self._closed:
            cs, cw, _ = self._clock
            if (season, week) >= (cs, cw):
                raise PointInTimeViolation(
                    f"Week {week} of season {season} is not complete; cannot snapshot"
                )

        ratings = {}
        for team_id in self.teams(season):
            versions = self._versions[(team_id, season)]
            ratings[team_id] = self._lookup(versions, week + 1, None)
        snap = RatingSnapshot(season=season, week=week, ratings=ratings)
        self._snapshots[(season, week)] = snap
        logger.debug("Snapshot season %d week %d (%d teams)", season, week, len(ratings))
        return snap

    def snapshots(self) -> List[RatingSnapshot]:
        return [self._snapshots[key] for key in sorted(self._snapshots)]

    def restore(self, snapshot: RatingSnapshot) -> None:
        """
        Roll the store back to the state captured by *snapshot*.

        Every version written after the snapshot's week is discarded, along
        with later seasons and their snapshots, and the clock is rewound to
        the start of the following week. The snapshot must have been taken
        from this store's own history.
        """
        season, week = snapshot.season, snapshot.week

        restored: Dict[Tuple[str, int], List[Rating]] = {}
        for (team_id, s), versions in self._versions.items():
            if s < season:
                restored[(team_id, s)] = versions
            elif s == season and team_id in snapshot:
                kept = [v for v in versions if _visible(v, week + 1, None)] or versions[:1]
                if kept[-1] != snapshot[team_id]:
                    raise ValueError(
                        f"Snapshot of season {season} week {week} does not match the "
                        f"stored history of {team_id}"
                    )
                restored[(team_id, s)] = kept
        missing = [t for t in snapshot if (t, season) not in restored]
        if missing:
            raise ValueError(f"Snapshot teams unknown to this store: {missing}")

        self._versions = restored
        self._snapshots = {
            key: snap for key, snap in self._snapshots.items() if key <= (season, week)
        }
        self._frozen = {s for s in self._frozen if s < season}
        self._closed = False
        self._clock = (season, week + 1, None)
        logger.info("Restored ratings to season %d week %d", season, week)
