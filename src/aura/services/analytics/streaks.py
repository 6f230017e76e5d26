"""
Streak and Trend Engine

Pure functions that derive dashboard analytics from raw entries.
Callers supply "today" and the calendar timezone so every result is
reproducible.
"""

from collections import Counter
from datetime import date, timedelta, tzinfo
from typing import Iterable, Optional, Sequence

from aura.domain.enums.check_in import MoodTag, TrendDirection
from aura.domain.models.dashboard import MoodTrendPoint, StreakInfo
from aura.domain.models.entry import Entry


MOOD_SCORES: dict[MoodTag, int] = {
    MoodTag.SAD: 2,
    MoodTag.OVERWHELMED: 2,
    MoodTag.ANXIOUS: 3,
    MoodTag.FRUSTRATED: 3,
    MoodTag.STRESSED: 3,
    MoodTag.CONTENT: 5,
    MoodTag.CALM: 6,
    MoodTag.HAPPY: 8,
    MoodTag.EXCITED: 9,
    MoodTag.GRATEFUL: 9,
}
DEFAULT_MOOD_SCORE = 5

TREND_WINDOW = 7
TREND_DELTA = 0.5
TREND_DAYS = 7


def mood_score(mood: MoodTag) -> int:
    return MOOD_SCORES.get(mood, DEFAULT_MOOD_SCORE)


def calendar_day(entry: Entry, tz: tzinfo) -> date:
    return entry.created_at.astimezone(tz).date()


def dominant_mood(moods: Iterable[MoodTag]) -> Optional[MoodTag]:
    """Most frequent mood; ties go to the mood seen first."""
    counts = Counter(moods)
    if not counts:
        return None
    return counts.most_common(1)[0][0]


def mood_intensity(mood: MoodTag, count: int) -> float:
    """Base score scaled by activity (up to 2x), capped at 10."""
    return min(round(mood_score(mood) * min(count / 3, 2), 1), 10.0)


def mood_trends(entries: Sequence[Entry], today: date, tz: tzinfo) -> tuple[MoodTrendPoint, ...]:
    """
    Seven daily points ending today, oldest first.

    Days without entries are zero-filled with no mood.
    """
    start = today - timedelta(days=TREND_DAYS - 1)
    buckets: dict[date, list[MoodTag]] = {}
    for entry in sorted(entries, key=lambda e: e.created_at):
        day = calendar_day(entry, tz)
        if start <= day <= today:
            buckets.setdefault(day, []).append(entry.mood_tag)

    points = []
    for offset in range(TREND_DAYS):
        day = start + timedelta(days=offset)
        moods = buckets.get(day, [])
        mood = dominant_mood(moods)
        points.append(
            MoodTrendPoint(
                day=day,
                mood=mood,
                intensity=mood_intensity(mood, len(moods)) if mood else 0.0,
                count=len(moods),
            )
        )
    return tuple(points)


def compute_streak(entries: Sequence[Entry], today: date, tz: tzinfo) -> StreakInfo:
    """
    Current and longest runs of consecutive check-in days.

    The current streak counts back from today, or from yesterday if
    there is no entry yet today. Any empty day inside the run ends it.
    """
    if not entries:
        return StreakInfo()

    days = {calendar_day(e, tz) for e in entries}

    current = 0
    cursor = today if today in days else today - timedelta(days=1)
    while cursor in days:
        current += 1
        cursor -= timedelta(days=1)

    longest = 0
    run = 0
    previous: Optional[date] = None
    for day in sorted(days):
        run = run + 1 if previous is not None and day - previous == timedelta(days=1) else 1
        longest = max(longest, run)
        previous = day

    return StreakInfo(
        current=current,
        longest=longest,
        last_check_in=max(e.created_at for e in entries),
    )


def average_mood_score(entries: Sequence[Entry]) -> Optional[float]:
    if not entries:
        return None
    return round(sum(mood_score(e.mood_tag) for e in entries) / len(entries), 1)


def trend_direction(newest_first: Sequence[Entry]) -> TrendDirection:
    """
    Compare the average score of the latest 7 entries with the 7 before.

    Fewer than 7 entries is always stable.
    """
    if len(newest_first) < TREND_WINDOW:
        return TrendDirection.STABLE

    recent = newest_first[:TREND_WINDOW]
    previous = newest_first[TREND_WINDOW:TREND_WINDOW * 2]
    recent_avg = sum(mood_score(e.mood_tag) for e in recent) / len(recent)
    previous_avg = (
        sum(mood_score(e.mood_tag) for e in previous) / len(previous)
        if previous
        else recent_avg
    )

    delta = recent_avg - previous_avg
    if delta > TREND_DELTA:
        return TrendDirection.IMPROVING
    if delta < -TREND_DELTA:
        return TrendDirection.DECLINING
    return TrendDirection.STABLE
