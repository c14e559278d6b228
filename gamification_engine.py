"""
Gamification engine: owns UserProfile state (scan history, badges, weekly
challenge, mini-game stats) and the rules that advance it.

The module-level functions are pure with respect to storage: they mutate a
UserProfile in place and take `now` explicitly. GamificationEngine wraps them
in locked load -> mutate -> save cycles against a ProfileStore.
"""

import datetime
import logging
import math
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from api.pydantic_models import Badge, GameStats, GamificationOutcome, ScanRecord, UserProfile, WeeklyChallenge
from profile_store import ProfileStore, ProfileStoreError
from timezone_utils import ensure_utc, get_app_timezone, is_monday, same_weekday, to_epoch_millis, utc_now

logger = logging.getLogger(__name__)

WEEK = datetime.timedelta(days=7)
GREEN_THRESHOLD = 8
LOW_IMPACT_THRESHOLD = 5


@dataclass(frozen=True)
class BadgeDefinition:
    id: str
    name: str
    emoji: str
    description: str
    points: int


GREEN_PRODUCT_HUNTER = BadgeDefinition("green-product-hunter", "Green Product Hunter", "🏹",
                                       "Successfully completed the weekly EcoHunt!", 30)
PLASTIC_FREE_PRO = BadgeDefinition("plastic-free-pro", "Plastic-Free Pro", "🧼",
                                   "Scan 5 recyclable products in a week", 20)
ECO_EXPLORER = BadgeDefinition("eco-explorer", "Eco Explorer", "🌍",
                               "Scan products from 3 different locations", 25)
GREEN_GURU = BadgeDefinition("green-guru", "Green Guru", "🌱", "Achieve average EcoScore of 8+", 40)
ECO_GENIUS = BadgeDefinition("eco-genius", "Eco Genius", "🧠", "Achieve 90%+ on an AI Quiz", 50)
SORTING_MASTER = BadgeDefinition("sorting-master", "Sorting Master", "♻️",
                                 "Achieved 90%+ accuracy in the EcoSort game!", 50)
PUZZLE_CHAMPION = BadgeDefinition("puzzle-champion", "Puzzle Champion", "🧩", "Solved 10 packaging puzzles!", 60)

PLASTIC_FREE_PRO_SCANS = 5
ECO_EXPLORER_LOCATIONS = 3
GREEN_GURU_AVERAGE = 8
ECO_GENIUS_PERCENTAGE = 90
SORTING_MASTER_ACCURACY = 90
PUZZLE_CHAMPION_SOLVED = 10


class ProfileExistsError(Exception):
    pass


# --- derived values ---

def certification_for(eco_score: int) -> str:
    if eco_score >= GREEN_THRESHOLD:
        return "green"
    if eco_score >= LOW_IMPACT_THRESHOLD:
        return "low-impact"
    return "harmful"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def average_eco_score(scans: Iterable[ScanRecord]) -> float:
    scores = [s.ecoScore for s in scans]
    return sum(scores) / len(scores) if scores else 0.0


def compute_progress_score(scans: List[ScanRecord]) -> int:
    """round(10 * mean ecoScore), clamped to 100; 0 with no scans."""
    if not scans:
        return 0
    return min(100, round_half_up(average_eco_score(scans) * 10))


# --- weekly challenge ---

def should_reset_weekly_challenge(now: datetime.datetime, last_reset: datetime.datetime,
                                  tz: Optional[datetime.tzinfo] = None) -> bool:
    """
    More than a week since the last reset, and either today is Monday or today
    falls on a different weekday than the last reset. Evaluated lazily on load,
    so a week in which this is never checked simply resets later.
    """
    tz = tz or get_app_timezone()
    if ensure_utc(now) - ensure_utc(last_reset) <= WEEK:
        return False
    return is_monday(now, tz) or not same_weekday(now, last_reset, tz)


def reset_weekly_challenge_if_due(profile: UserProfile, now: datetime.datetime,
                                  tz: Optional[datetime.tzinfo] = None) -> bool:
    if not should_reset_weekly_challenge(now, profile.lastWeeklyChallengeReset, tz):
        return False
    profile.weeklyChallenge.progress = 0
    profile.weeklyChallenge.completed = False
    profile.gameStats.weeklyHuntProgress = 0
    profile.lastWeeklyChallengeReset = ensure_utc(now)
    logger.info("Weekly challenge reset")
    return True


# --- badges ---

def award_badge(profile: UserProfile, badge_id: str, name: str, emoji: str, description: str,
                points_reward: int, now: datetime.datetime) -> Optional[Badge]:
    """
    Grant a badge at most once. The sole mutation path for `badges` and for
    `ecoPoints`. Returns the new Badge, or None if it was already held.
    """
    if profile.has_badge(badge_id):
        return None
    badge = Badge(id=badge_id, name=name, emoji=emoji, description=description,
                  earned=True, earnedDate=ensure_utc(now))
    profile.badges.append(badge)
    profile.ecoPoints += max(0, points_reward)
    logger.info(f"Badge earned: {badge_id} (+{points_reward} EcoPoints)")
    return badge


def _grant(profile: UserProfile, definition: BadgeDefinition, now: datetime.datetime,
           awarded: List[Badge]) -> None:
    badge = award_badge(profile, definition.id, definition.name, definition.emoji,
                        definition.description, definition.points, now)
    if badge is not None:
        awarded.append(badge)


# --- events ---

def _next_scan_id(profile: UserProfile, now: datetime.datetime) -> str:
    base = f"scan-{to_epoch_millis(now)}"
    existing = {s.id for s in profile.scans}
    scan_id, suffix = base, 2
    while scan_id in existing:
        scan_id = f"{base}-{suffix}"
        suffix += 1
    return scan_id


def record_scan(profile: UserProfile, description: str, eco_score: int, location: str,
                category: Optional[str], now: datetime.datetime) -> List[Badge]:
    """Append a scan, refresh derived stats, advance the weekly hunt and evaluate scan badges."""
    awarded: List[Badge] = []

    profile.scans.append(ScanRecord(
        id=_next_scan_id(profile, now),
        description=description,
        ecoScore=eco_score,
        timestamp=ensure_utc(now),
        location=location or "",
        category=category or "Other",
        certification=certification_for(eco_score),
    ))
    profile.totalScans = len(profile.scans)
    profile.ecoProgressScore = compute_progress_score(profile.scans)

    challenge = profile.weeklyChallenge
    if eco_score >= GREEN_THRESHOLD and not challenge.completed:
        challenge.progress = min(challenge.target, challenge.progress + 1)
        if challenge.progress >= challenge.target:
            challenge.completed = True
            _grant(profile, GREEN_PRODUCT_HUNTER, now, awarded)
    profile.gameStats.weeklyHuntProgress = challenge.progress

    if profile.totalScans >= PLASTIC_FREE_PRO_SCANS:
        _grant(profile, PLASTIC_FREE_PRO, now, awarded)
    if len({s.location for s in profile.scans}) >= ECO_EXPLORER_LOCATIONS:
        _grant(profile, ECO_EXPLORER, now, awarded)
    if average_eco_score(profile.scans) >= GREEN_GURU_AVERAGE:
        _grant(profile, GREEN_GURU, now, awarded)

    return awarded


def record_quiz_result(profile: UserProfile, percentage: int, now: datetime.datetime) -> List[Badge]:
    awarded: List[Badge] = []
    profile.gameStats.quizScore = max(profile.gameStats.quizScore, percentage)
    if percentage >= ECO_GENIUS_PERCENTAGE:
        _grant(profile, ECO_GENIUS, now, awarded)
    return awarded


def record_sorting_result(profile: UserProfile, accuracy: int, now: datetime.datetime) -> List[Badge]:
    awarded: List[Badge] = []
    profile.gameStats.sortingAccuracy = max(profile.gameStats.sortingAccuracy, accuracy)
    if accuracy >= SORTING_MASTER_ACCURACY:
        _grant(profile, SORTING_MASTER, now, awarded)
    return awarded


def record_puzzle_solved(profile: UserProfile, now: datetime.datetime) -> List[Badge]:
    awarded: List[Badge] = []
    profile.gameStats.puzzlesSolved += 1
    if profile.gameStats.puzzlesSolved >= PUZZLE_CHAMPION_SOLVED:
        _grant(profile, PUZZLE_CHAMPION, now, awarded)
    return awarded


# --- profile creation ---

def new_profile(now: datetime.datetime) -> UserProfile:
    return UserProfile(lastWeeklyChallengeReset=ensure_utc(now))


# (description, ecoScore, days ago, location, category)
DEMO_SCANS = [
    ("Glass milk bottle", 9, 10, "San Francisco", "Beverages"),
    ("Aluminum soda can", 8, 10, "San Francisco", "Beverages"),
    ("Paper coffee cup", 6, 9, "Oakland", "Beverages"),
    ("Plastic water bottle", 4, 9, "Berkeley", "Beverages"),
    ("Cardboard cereal box", 8, 8, "San Francisco", "Food"),
    ("Glass pasta sauce jar", 9, 8, "San Francisco", "Food"),
    ("Plastic yogurt container", 5, 7, "Oakland", "Food"),
    ("Aluminum foil wrap", 7, 7, "Berkeley", "Food"),
    ("Paper shopping bag", 8, 6, "San Francisco", "Packaging"),
    ("Plastic chip bag", 2, 6, "Oakland", "Snacks"),
    ("Compostable dish sponges", 9, 0, "San Francisco", "Home"),
]

DEMO_BADGES = (PLASTIC_FREE_PRO, ECO_EXPLORER, GREEN_GURU, GREEN_PRODUCT_HUNTER)


def demo_profile(now: datetime.datetime) -> UserProfile:
    """Pre-seeded profile for the demo account."""
    now = ensure_utc(now)
    scans = [
        ScanRecord(id=f"scan-{i}", description=description, ecoScore=score,
                   timestamp=now - datetime.timedelta(days=days_ago), location=location,
                   category=category, certification=certification_for(score))
        for i, (description, score, days_ago, location, category) in enumerate(DEMO_SCANS, start=1)
    ]
    badges = [
        Badge(id=b.id, name=b.name, emoji=b.emoji, description=b.description, earned=True,
              earnedDate=now - datetime.timedelta(days=5))
        for b in DEMO_BADGES
    ]
    return UserProfile(
        totalScans=len(scans),
        ecoProgressScore=compute_progress_score(scans),
        currentStreak=6,
        ecoPoints=250,
        badges=badges,
        scans=scans,
        weeklyChallenge=WeeklyChallenge(progress=4, target=5),
        gameStats=GameStats(streakCount=6, leaderboardPosition=15, weeklyHuntProgress=4,
                            quizScore=92, sortingAccuracy=88, puzzlesSolved=8),
        lastWeeklyChallengeReset=now - datetime.timedelta(days=5),
    )


class GamificationEngine:
    """
    Applies gamification events to stored profiles. Each operation is one
    locked load -> mutate -> save cycle. When the store is unavailable the
    operation is a no-op: it logs and reports no change instead of raising.
    """

    def __init__(self, store: ProfileStore, clock: Callable[[], datetime.datetime] = utc_now,
                 tz: Optional[datetime.tzinfo] = None):
        self.store = store
        self.clock = clock
        self.tz = tz

    def create_profile(self, user_id: str, demo: bool = False) -> UserProfile:
        """Create the profile at sign-up. Raises ProfileExistsError or ProfileStoreError."""
        now = self.clock()
        with self.store.lock(user_id):
            if self.store.load(user_id) is not None:
                raise ProfileExistsError(f"Profile already exists for {user_id}")
            profile = demo_profile(now) if demo else new_profile(now)
            self.store.save(user_id, profile)
        logger.info(f"Created {'demo ' if demo else ''}profile for {user_id}")
        return profile

    def load_profile(self, user_id: str) -> UserProfile:
        """Get-or-create a profile, applying the lazy weekly reset. Raises ProfileStoreError."""
        with self.store.lock(user_id):
            profile, changed = self._load_for_update(user_id)
            if changed:
                self.store.save(user_id, profile)
        return profile

    def record_scan(self, user_id: str, description: str, eco_score: int, location: str,
                    category: Optional[str] = None) -> GamificationOutcome:
        return self._apply(user_id, "record_scan",
                           lambda p, now: record_scan(p, description, eco_score, location, category, now))

    def award_badge(self, user_id: str, badge_id: str, name: str, emoji: str, description: str,
                    points_reward: int = 0) -> bool:
        outcome = self._apply(user_id, "award_badge", lambda p, now: [
            b for b in [award_badge(p, badge_id, name, emoji, description, points_reward, now)] if b is not None
        ])
        return bool(outcome.newlyAwardedBadges)

    def record_quiz_result(self, user_id: str, percentage: int) -> GamificationOutcome:
        return self._apply(user_id, "record_quiz_result", lambda p, now: record_quiz_result(p, percentage, now))

    def record_sorting_result(self, user_id: str, accuracy: int) -> GamificationOutcome:
        return self._apply(user_id, "record_sorting_result",
                           lambda p, now: record_sorting_result(p, accuracy, now))

    def record_puzzle_solved(self, user_id: str) -> GamificationOutcome:
        return self._apply(user_id, "record_puzzle_solved", lambda p, now: record_puzzle_solved(p, now))

    def _load_for_update(self, user_id: str):
        now = self.clock()
        profile = self.store.load(user_id)
        if profile is None:
            return new_profile(now), True
        return profile, reset_weekly_challenge_if_due(profile, now, self.tz)

    def _apply(self, user_id: str, operation: str,
               mutation: Callable[[UserProfile, datetime.datetime], List[Badge]]) -> GamificationOutcome:
        try:
            with self.store.lock(user_id):
                profile, _ = self._load_for_update(user_id)
                awarded = mutation(profile, self.clock())
                self.store.save(user_id, profile)
        except ProfileStoreError as e:
            logger.error(f"{operation} for {user_id} skipped, profile store unavailable: {e}")
            return GamificationOutcome()
        return GamificationOutcome(newlyAwardedBadges=awarded, profile=profile)
