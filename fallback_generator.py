"""
Deterministic, keyword-driven content used when the model is unavailable or its
output is unusable. Every function here returns a schema-complete payload and
never raises for well-formed input.

Classification is table driven: rules are (keywords, result) pairs checked top
down and the first rule whose keyword occurs in the lowercased text wins.
"""

import copy
import logging
from dataclasses import dataclass
from typing import Any, Generic, Mapping, Optional, Sequence, Tuple, TypeVar

from api.pydantic_models import (
    AlternativeProduct, AnalysisResult, AnalysisSummary, ChatReply, DiyTip,
    GamificationBlurb, PackagingComponent, Quiz, QuizResponse, StoryboardFrame,
)
from fallback_quizzes import DEFAULT_FALLBACK_DIFFICULTY, FALLBACK_QUIZZES, PLACEHOLDER_QUIZ

logger = logging.getLogger(__name__)

R = TypeVar("R")

ALTERNATIVE_IMAGE = "/placeholder.svg?height=100&width=100"
STORYBOARD_IMAGE = "/placeholder.svg?height=200&width=300"


@dataclass(frozen=True)
class KeywordRule(Generic[R]):
    keywords: Tuple[str, ...]
    result: R

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)


def first_match(rules: Sequence[KeywordRule[R]], text: str, default: R) -> R:
    """Evaluate rules in order against lowercased text; the earliest matching rule wins."""
    text = (text or "").lower()
    for rule in rules:
        if rule.matches(text):
            return rule.result
    return default


# --- PACKAGING ANALYSIS ---

@dataclass(frozen=True)
class MaterialProfile:
    material: str
    recyclable: bool
    eco_score: int
    plastic_code: str = "N/A"
    category: str = "General"


MIXED_MATERIALS = MaterialProfile("Mixed materials", recyclable=False, eco_score=5)

MATERIAL_RULES = (
    KeywordRule(("bottle", "water", "soda"),
                MaterialProfile("PET #1 Plastic", True, 6, plastic_code="#1 PET", category="Beverages")),
    KeywordRule(("glass",), MaterialProfile("Glass", True, 9, category="Beverages")),
    KeywordRule(("aluminum", "can"), MaterialProfile("Aluminum", True, 9, category="Beverages")),
    KeywordRule(("paper", "cardboard", "box"), MaterialProfile("Paper/Cardboard", True, 8, category="Packaging")),
    KeywordRule(("bag", "wrapper"), MaterialProfile("Plastic Film", False, 2, category="Snacks")),
    KeywordRule(("yogurt", "container"),
                MaterialProfile("HDPE #2 Plastic", True, 6, plastic_code="#2 HDPE", category="Food")),
)

# Keyed off the material name, checked in order
PRODUCTION_RULES = (
    KeywordRule(("glass",), "sand and high heat"),
    KeywordRule(("aluminum",), "bauxite ore"),
    KeywordRule(("paper", "cardboard"), "wood pulp"),
)
DEFAULT_PRODUCTION = "petroleum-based materials"

DIY_REUSE_RULES = (
    KeywordRule(("glass",), DiyTip(title="Storage Container",
                                   description="Perfect for storing bulk foods, spices, or craft supplies",
                                   difficulty="easy", icon="🫙")),
    KeywordRule(("plastic",), DiyTip(title="Plant Pot",
                                     description="Cut drainage holes and use for starting seedlings",
                                     difficulty="easy", icon="🌱")),
)
DEFAULT_DIY_REUSE = DiyTip(title="Organizer", description="Use for organizing small items around the house",
                           difficulty="easy", icon="📦")


def classify_packaging(description: str) -> MaterialProfile:
    return first_match(MATERIAL_RULES, description, MIXED_MATERIALS)


def carbon_footprint_text(eco_score: int) -> str:
    comparison = "driving 3km in a car" if eco_score < 6 else "charging your phone for 5 days"
    return f"Estimated {eco_score * 0.08:.2f} kg CO₂ - equivalent to {comparison}"


def _alternatives(eco_score: int):
    improvable = eco_score < 7
    return [
        AlternativeProduct(
            name="Eco-Friendly Alternative" if improvable else "Even Better Option",
            brand="GreenChoice",
            ecoScore=min(10, eco_score + 2),
            reason="Uses sustainable materials and minimal packaging" if improvable else "Zero-waste packaging option",
            image=ALTERNATIVE_IMAGE,
        ),
        AlternativeProduct(
            name="Bulk Option",
            brand="BulkStore",
            ecoScore=min(10, eco_score + 3),
            reason="Bring your own container, eliminate packaging waste",
            image=ALTERNATIVE_IMAGE,
        ),
    ]


def _diy_tips(profile: MaterialProfile):
    return [
        first_match(DIY_REUSE_RULES, profile.material, DEFAULT_DIY_REUSE),
        DiyTip(title="Art Project",
               description=f"Transform this {profile.material.lower()} into a creative art piece or decoration",
               difficulty="medium", icon="🎨"),
    ]


def _storyboard(profile: MaterialProfile):
    production = first_match(PRODUCTION_RULES, profile.material, DEFAULT_PRODUCTION)
    recyclable = profile.recyclable
    return [
        StoryboardFrame(frame=1, title="Production",
                        description=f"{profile.material} is manufactured using {production}",
                        image=STORYBOARD_IMAGE),
        StoryboardFrame(frame=2, title="Usage",
                        description=f"Product is packaged and used by consumers for {profile.category.lower()}",
                        image=STORYBOARD_IMAGE),
        StoryboardFrame(frame=3, title="Recycling Path" if recyclable else "Disposal",
                        description=(f"Can be recycled into new {profile.material.lower()} products" if recyclable
                                     else "Requires special disposal or ends up in landfill"),
                        image=STORYBOARD_IMAGE),
        StoryboardFrame(frame=4, title="Environmental Impact",
                        description=("Becomes part of circular economy, reducing need for virgin materials"
                                     if recyclable else "May persist in environment for decades if not properly managed"),
                        image=STORYBOARD_IMAGE),
    ]


def _gamification_blurb(profile: MaterialProfile) -> GamificationBlurb:
    score = profile.eco_score
    if score >= 8:
        badge_progress = "🌟 Excellent choice! You're becoming an eco-expert!"
    elif score >= 6:
        badge_progress = "🌱 Good analysis! Keep learning about sustainable options"
    else:
        badge_progress = "📚 Every scan teaches you more about environmental impact!"
    return GamificationBlurb(
        badgeProgress=badge_progress,
        progressScore=min(95, 45 + score * 6),
        motivationalMessage=("Fantastic! You're making sustainable decisions! 🌟" if score >= 7
                             else "Great job analyzing! Every choice matters for our planet! 🌍"),
        weeklyChallenge=("♻️ Challenge: Find 2 more recyclable products this week!" if profile.recyclable
                         else "🌱 Challenge: Look for 3 plastic-free alternatives this week!"),
    )


def build_fallback_analysis(description: str, location: str = "") -> AnalysisResult:
    profile = classify_packaging(description)
    score = profile.eco_score
    recyclable = profile.recyclable

    if recyclable:
        disposal_tip = "Clean and place in recycling bin" + (f" ({location} guidelines apply)" if location else "")
    else:
        disposal_tip = "Check local waste management guidelines for proper disposal"

    return AnalysisResult(
        components=[PackagingComponent(
            name="Primary packaging",
            material=profile.material,
            recyclable=recyclable,
            plasticCode=profile.plastic_code,
            disposalTip=disposal_tip,
        )],
        ecoScore=score,
        carbonFootprint=carbon_footprint_text(score),
        greenTip=("♻️ Always rinse containers before recycling!" if recyclable
                  else "🌱 Look for eco-friendly alternatives with less packaging"),
        alternative=("Consider products with minimal, recyclable packaging or refillable options" if score < 7
                     else "Great choice! This packaging is relatively eco-friendly"),
        alternatives=_alternatives(score),
        diyTips=_diy_tips(profile),
        storyboard=_storyboard(profile),
        summary=AnalysisSummary(
            material=profile.material,
            recyclable="Yes" if recyclable else "No",
            plasticCode=profile.plastic_code,
            disposalTip="Clean and recycle" if recyclable else "Check local guidelines",
            ecoRating=score,
            greenTip="Rinse before recycling" if recyclable else "Choose better alternatives",
        ),
        gamification=_gamification_blurb(profile),
    )


def synthesize_analysis(description: str, location: str = "") -> dict:
    logger.info(f"Using fallback analysis for: {description!r}")
    return build_fallback_analysis(description, location).model_dump()


def placeholder_analysis() -> dict:
    """Hardcoded answer for unexpected faults; independent of any input."""
    return AnalysisResult(
        components=[PackagingComponent(
            name="Product packaging",
            material="Unknown material",
            recyclable=False,
            plasticCode="N/A",
            disposalTip="Check local waste management guidelines",
        )],
        ecoScore=5,
        carbonFootprint="Unable to calculate - try describing the packaging materials",
        greenTip="🌱 Look for clear recycling symbols and material codes on packaging",
        alternative="Choose products with clearly labeled, recyclable packaging",
        alternatives=[AlternativeProduct(
            name="Eco-Friendly Option", brand="GreenChoice", ecoScore=8,
            reason="Clear sustainability labeling and recyclable materials", image=ALTERNATIVE_IMAGE,
        )],
        diyTips=[DiyTip(
            title="Research Project",
            description="Look up the packaging materials online to learn about their environmental impact",
            difficulty="easy", icon="🔍",
        )],
        storyboard=[
            StoryboardFrame(frame=1, title="Unknown Origin",
                            description="Without clear material identification, environmental impact is unclear",
                            image=STORYBOARD_IMAGE),
            StoryboardFrame(frame=2, title="Consumer Use", description="Product serves its intended purpose",
                            image=STORYBOARD_IMAGE),
            StoryboardFrame(frame=3, title="Uncertain Fate",
                            description="Without proper labeling, disposal method is unclear",
                            image=STORYBOARD_IMAGE),
            StoryboardFrame(frame=4, title="Learning Opportunity",
                            description="This highlights the importance of clear environmental labeling",
                            image=STORYBOARD_IMAGE),
        ],
        summary=AnalysisSummary(material="Unknown", recyclable="Unclear", plasticCode="N/A",
                                disposalTip="Research materials online", ecoRating=5,
                                greenTip="Look for clear labeling"),
        gamification=GamificationBlurb(
            badgeProgress="🔍 Detective work! Learning to identify packaging materials",
            progressScore=50,
            motivationalMessage="Every analysis helps you become more environmentally aware! 🌍",
            weeklyChallenge="🎯 Challenge: Find 3 products with clear recycling labels!",
        ),
    ).model_dump()


# --- CHAT ---

DEFAULT_CHAT_TIP = ("🌱 Great question! I'm having trouble connecting right now, but here's a quick tip: "
                    "Always check for recycling symbols on packaging!")

CHAT_RULES = (
    KeywordRule(("recycle", "recycling"),
                "♻️ Recycling tip: Clean containers before recycling and check your local guidelines - "
                "different areas accept different materials! 🌍"),
    KeywordRule(("plastic",),
                "🔢 Plastic codes matter! Look for numbers 1-7 in triangles - #1 (PET) and #2 (HDPE) "
                "are most commonly recycled! ♻️"),
    KeywordRule(("sustainable", "eco"),
                "🌱 Sustainability starts small! Choose products with minimal packaging, reuse containers, "
                "and support brands with eco-friendly practices! 💚"),
    KeywordRule(("alternative",),
                "🔄 Great alternatives: Glass over plastic, paper over foil, refillable over single-use! "
                "Every swap counts! 🌟"),
    KeywordRule(("compost",),
                "🌿 Composting rocks! Paper, cardboard (uncoated), and food scraps can often be composted - "
                "but avoid glossy or plastic-coated materials! 🍃"),
)


def synthesize_chat_reply(message: str) -> dict:
    return ChatReply(response=first_match(CHAT_RULES, message, DEFAULT_CHAT_TIP)).model_dump()


# --- QUIZ ---

def synthesize_quiz(difficulty: Optional[str], category: Optional[str], question_count: int) -> dict:
    """
    Serve a pre-authored quiz. Unknown difficulties get the medium quiz; the
    question list is truncated to `question_count`, never padded or shuffled.
    """
    key = difficulty if difficulty in FALLBACK_QUIZZES else DEFAULT_FALLBACK_DIFFICULTY
    quiz = copy.deepcopy(FALLBACK_QUIZZES[key])
    quiz["category"] = category or "general"
    quiz["questions"] = quiz["questions"][:max(1, question_count)]
    logger.info(f"Using fallback quiz '{quiz['title']}' with {len(quiz['questions'])} question(s)")
    return QuizResponse(quiz=Quiz.model_validate(quiz)).model_dump()


def placeholder_quiz() -> dict:
    return {"quiz": copy.deepcopy(PLACEHOLDER_QUIZ)}


def synthesize(use_case: str, user_input: Mapping[str, Any]) -> dict:
    """Dispatch to the use-case specific synthesizer."""
    if use_case == "analyze":
        return synthesize_analysis(user_input.get("description") or "", user_input.get("location") or "")
    if use_case == "chat":
        return synthesize_chat_reply(user_input.get("message") or "")
    if use_case == "quiz":
        return synthesize_quiz(user_input.get("difficulty"), user_input.get("category"),
                               user_input.get("questionCount") or 3)
    raise ValueError(f"Unknown fallback use case: {use_case}")
