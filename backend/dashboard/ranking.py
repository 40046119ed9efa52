from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from .schemas import GameBucket, ScoreRecord

LEADERBOARD_SIZE = 20

# The chart plots rank as a percentile: rank 0 -> 100, last rank -> 0.
# Consumers must draw this axis reversed.
PERCENTILE_AXIS = {"key": "percentile", "reversed": True, "unit": "%"}


def rank(scores: Sequence[ScoreRecord], limit: int = LEADERBOARD_SIZE) -> list[ScoreRecord]:
    """
    Top `limit` records by score, best first.
    sorted() is stable, so equal scores keep their arrival order.
    """
    return sorted(scores, key=lambda r: r.score, reverse=True)[:limit]


def percentile_of(index: int, length: int) -> float:
    if length <= 0:
        raise ValueError("percentile_of() needs a non-empty leaderboard")
    if length == 1:
        return 100.0
    return 100 - (index / (length - 1)) * 100


def max_score(ranked: Sequence[ScoreRecord]) -> float | None:
    if not ranked:
        return None
    return ranked[0].score


@dataclass(frozen=True)
class RankedEntry:
    rank: int
    percentile: float
    is_max: bool
    record: ScoreRecord


@dataclass(frozen=True)
class LeaderboardView:
    ranked: tuple[ScoreRecord, ...]
    max_score: float | None

    @classmethod
    def from_scores(cls, scores: Sequence[ScoreRecord], limit: int = LEADERBOARD_SIZE) -> LeaderboardView:
        ranked = tuple(rank(scores, limit))
        return cls(ranked=ranked, max_score=max_score(ranked))

    def __len__(self) -> int:
        return len(self.ranked)

    @property
    def empty(self) -> bool:
        return not self.ranked

    def percentile_of(self, index: int) -> float:
        return percentile_of(index, len(self.ranked))

    def entries(self) -> list[RankedEntry]:
        """
        Only the first record equal to max_score gets the max marker, even
        when several records share the top score.
        """
        out: list[RankedEntry] = []
        flagged = False
        for i, rec in enumerate(self.ranked):
            is_max = not flagged and rec.score == self.max_score
            flagged = flagged or is_max
            out.append(RankedEntry(rank=i, percentile=self.percentile_of(i), is_max=is_max, record=rec))
        return out

    def chart_series(self) -> list[dict[str, Any]]:
        return [
            {
                "rank": e.rank,
                "percentile": e.percentile,
                "score": e.record.score,
                "achieved_at": e.record.achieved_at.isoformat(),
                "is_max": e.is_max,
            }
            for e in self.entries()
        ]


@dataclass
class Selection:
    bucket_index: int = 0
    rank_index: int = 0


@dataclass
class RankingEngine:
    """
    Owns the bucket snapshot and the selection cursor. The cursor is only
    changed through select_bucket / select_rank / cycle / replace; callers read
    it via `selection` together with view().

    select_rank clamps into the current leaderboard; select_bucket always
    resets the rank cursor to the top scorer.
    """

    buckets: list[GameBucket] = field(default_factory=list)
    limit: int = LEADERBOARD_SIZE
    _selection: Selection = field(default_factory=Selection, repr=False)
    _view: LeaderboardView | None = field(default=None, repr=False)

    @property
    def selection(self) -> Selection:
        # copy: nobody else gets to write the cursor
        return Selection(self._selection.bucket_index, self._selection.rank_index)

    @property
    def bucket_count(self) -> int:
        return len(self.buckets)

    @property
    def active_bucket(self) -> GameBucket | None:
        if not self.buckets:
            return None
        return self.buckets[self._selection.bucket_index]

    def replace(self, buckets: Sequence[GameBucket]) -> None:
        """Swap in a fresh upstream snapshot; selection goes back to (0, 0)."""
        self.buckets = list(buckets)
        self._selection = Selection()
        self._view = None

    def view(self) -> LeaderboardView:
        if self._view is None:
            bucket = self.active_bucket
            scores = bucket.all_scores if bucket is not None else []
            self._view = LeaderboardView.from_scores(scores, self.limit)
        return self._view

    def select_bucket(self, index: int) -> None:
        if not 0 <= index < len(self.buckets):
            raise IndexError(f"bucket index {index} out of range (0..{len(self.buckets) - 1})")
        self._selection = Selection(bucket_index=index, rank_index=0)
        self._view = None

    def select_rank(self, index: int) -> int:
        n = len(self.view())
        if n == 0:
            clamped = 0
        else:
            clamped = min(max(int(index), 0), n - 1)
        self._selection.rank_index = clamped
        return clamped

    def cycle(self, direction: int) -> int:
        n = len(self.buckets)
        if n == 0:
            return 0
        step = 1 if direction >= 0 else -1
        new_index = (self._selection.bucket_index + step + n) % n
        self.select_bucket(new_index)
        return new_index

    def selected_record(self) -> ScoreRecord | None:
        v = self.view()
        if v.empty:
            return None
        return v.ranked[self._selection.rank_index]
