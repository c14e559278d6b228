from datetime import datetime
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Literal, Optional

Difficulty = Literal["easy", "medium", "hard"]
Certification = Literal["green", "low-impact", "harmful"]

DEFAULT_QUIZ_DIFFICULTY = "medium"
DEFAULT_QUIZ_CATEGORY = "general"
DEFAULT_QUESTION_COUNT = 3
MAX_QUESTION_COUNT = 10

# --- PACKAGING ANALYSIS ---
class PackagingComponent(BaseModel):
    name: str
    material: str
    recyclable: bool
    plasticCode: Optional[str] = None
    disposalTip: str

class AlternativeProduct(BaseModel):
    name: str
    brand: str
    ecoScore: int = Field(ge=1, le=10)
    reason: str
    image: str

class DiyTip(BaseModel):
    title: str
    description: str
    difficulty: Difficulty
    icon: str

class StoryboardFrame(BaseModel):
    frame: int = Field(ge=1, le=4)
    title: str
    description: str
    image: str

class AnalysisSummary(BaseModel):
    material: str
    recyclable: str  # "Yes" / "No" / "Unclear"
    plasticCode: Optional[str] = None
    disposalTip: str
    ecoRating: int = Field(ge=1, le=10)
    greenTip: str

# UI flavour text only; never persisted
class GamificationBlurb(BaseModel):
    badgeProgress: str
    progressScore: int
    motivationalMessage: str
    weeklyChallenge: str

class AnalysisResult(BaseModel):
    components: List[PackagingComponent] = Field(min_length=1)
    ecoScore: int = Field(ge=1, le=10)
    carbonFootprint: str
    greenTip: str
    alternative: str
    alternatives: List[AlternativeProduct]
    diyTips: List[DiyTip]
    storyboard: List[StoryboardFrame] = Field(min_length=4, max_length=4)
    summary: AnalysisSummary
    gamification: GamificationBlurb

    @model_validator(mode="after")
    def check_consistency(self):
        if self.summary.ecoRating != self.ecoScore:
            raise ValueError("summary.ecoRating must match ecoScore")
        if [f.frame for f in self.storyboard] != [1, 2, 3, 4]:
            raise ValueError("storyboard frames must be numbered 1..4 in order")
        return self

# --- CHAT ---
class ChatReply(BaseModel):
    response: str

# --- QUIZ ---
class QuizQuestion(BaseModel):
    id: int
    question: str
    options: List[str] = Field(min_length=4, max_length=4)
    correctAnswer: int
    explanation: str
    points: int

    @model_validator(mode="after")
    def check_answer_index(self):
        if not 0 <= self.correctAnswer < len(self.options):
            raise ValueError("correctAnswer must index into options")
        return self

class Quiz(BaseModel):
    title: str
    difficulty: str
    category: str
    questions: List[QuizQuestion] = Field(min_length=1)

    @field_validator("questions")
    @classmethod
    def unique_question_ids(cls, questions):
        ids = [q.id for q in questions]
        if len(ids) != len(set(ids)):
            raise ValueError("question ids must be unique within a quiz")
        return questions

class QuizResponse(BaseModel):
    quiz: Quiz

# --- ASSISTANT REQUESTS ---
# These never reject input: anything unusable falls back to a default.
class AnalyzeRequest(BaseModel):
    description: str = ""
    location: str = ""
    userId: Optional[str] = None

    @field_validator("description", "location", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return "" if value is None else str(value)

class ChatRequest(BaseModel):
    message: str = ""

    @field_validator("message", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return "" if value is None else str(value)

class QuizRequest(BaseModel):
    difficulty: str = DEFAULT_QUIZ_DIFFICULTY
    category: str = DEFAULT_QUIZ_CATEGORY
    questionCount: int = DEFAULT_QUESTION_COUNT

    @field_validator("difficulty", mode="before")
    @classmethod
    def default_difficulty(cls, value):
        return str(value).strip().lower() if value else DEFAULT_QUIZ_DIFFICULTY

    @field_validator("category", mode="before")
    @classmethod
    def default_category(cls, value):
        return str(value).strip() if value else DEFAULT_QUIZ_CATEGORY

    @field_validator("questionCount", mode="before")
    @classmethod
    def default_question_count(cls, value):
        try:
            count = int(value)
        except (TypeError, ValueError):
            return DEFAULT_QUESTION_COUNT
        if count < 1:
            return DEFAULT_QUESTION_COUNT
        return min(count, MAX_QUESTION_COUNT)

# --- USER PROFILE (owned by the gamification engine) ---
class Badge(BaseModel):
    id: str
    name: str
    emoji: str
    description: str
    earned: bool = True
    earnedDate: Optional[datetime] = None

class ScanRecord(BaseModel):
    id: str
    description: str
    ecoScore: int = Field(ge=1, le=10)
    timestamp: datetime
    location: str = ""
    category: str = "Other"
    certification: Certification

class WeeklyChallenge(BaseModel):
    description: str = "Scan 5 products with EcoScore above 8 this week"
    progress: int = Field(default=0, ge=0)
    target: int = Field(default=5, ge=1)
    reward: str = "🏆 Sustainability Champion Badge"
    completed: bool = False

class GameStats(BaseModel):
    streakCount: int = 0
    leaderboardPosition: int = 100
    weeklyHuntProgress: int = 0
    quizScore: int = 0
    sortingAccuracy: int = 0
    puzzlesSolved: int = 0

class UserProfile(BaseModel):
    totalScans: int = 0
    ecoProgressScore: int = Field(default=0, ge=0, le=100)
    currentStreak: int = 0
    ecoPoints: int = Field(default=0, ge=0)
    badges: List[Badge] = []
    scans: List[ScanRecord] = []
    weeklyChallenge: WeeklyChallenge = Field(default_factory=WeeklyChallenge)
    gameStats: GameStats = Field(default_factory=GameStats)
    lastWeeklyChallengeReset: datetime

    def has_badge(self, badge_id: str) -> bool:
        return any(b.id == badge_id for b in self.badges)

# --- GAMIFICATION REQUESTS ---
class CreateProfileRequest(BaseModel):
    demo: bool = False

class RecordScanRequest(BaseModel):
    description: str
    ecoScore: int = Field(ge=1, le=10)
    location: str = ""
    category: Optional[str] = None

class AwardBadgeRequest(BaseModel):
    id: str = Field(min_length=1)
    name: str
    emoji: str = ""
    description: str = ""
    pointsReward: int = Field(default=0, ge=0)

class QuizResultRequest(BaseModel):
    percentage: int = Field(ge=0, le=100)

class SortingResultRequest(BaseModel):
    accuracy: int = Field(ge=0, le=100)

# --- GAMIFICATION RESPONSES ---
class GamificationOutcome(BaseModel):
    newlyAwardedBadges: List[Badge] = []
    profile: Optional[UserProfile] = None
