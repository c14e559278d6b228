import pytest

import fallback_generator
from api.pydantic_models import AnalysisResult, ChatReply, QuizResponse
from fallback_generator import (
    CHAT_RULES, DEFAULT_CHAT_TIP, MATERIAL_RULES, MIXED_MATERIALS, KeywordRule,
    classify_packaging, first_match, synthesize, synthesize_analysis, synthesize_chat_reply, synthesize_quiz,
)
from fallback_quizzes import FALLBACK_QUIZZES


def test_plastic_bottle_classifies_as_pet():
    result = synthesize_analysis("Coca-Cola plastic bottle")
    component = result["components"][0]
    assert component["material"] == "PET #1 Plastic"
    assert component["recyclable"] is True
    assert component["plasticCode"] == "#1 PET"
    assert result["ecoScore"] == 6


@pytest.mark.parametrize("description, material, score", [
    ("glass jar", "Glass", 9),
    ("Aluminum tin", "Aluminum", 9),
    ("cardboard box", "Paper/Cardboard", 8),
    ("chip bag", "Plastic Film", 2),
    ("yogurt container", "HDPE #2 Plastic", 6),
    ("mystery blister pack", "Mixed materials", 5),
    ("", "Mixed materials", 5),
])
def test_material_table(description, material, score):
    profile = classify_packaging(description)
    assert profile.material == material
    assert profile.eco_score == score


def test_earlier_rule_wins_regardless_of_word_position():
    # "glass" appears first in the text but the bottle rule is checked first
    assert classify_packaging("glass water bottle").material == "PET #1 Plastic"
    # "can" is in the aluminum rule, which precedes paper/box
    assert classify_packaging("box of cans").material == "Aluminum"


def test_matching_is_case_insensitive():
    assert classify_packaging("GLASS JAR").material == "Glass"


def test_first_match_with_custom_rules():
    rules = (KeywordRule(("b",), "second"), KeywordRule(("a",), "first"))
    assert first_match(rules, "ab", "none") == "second"
    assert first_match(rules, "xyz", "none") == "none"
    assert first_match(rules, None, "none") == "none"


@pytest.mark.parametrize("description", [
    "plastic water bottle", "glass jar", "aluminum can", "cardboard box", "snack wrapper",
    "yogurt container", "unknown thing", "",
])
def test_fallback_analysis_is_schema_complete(description):
    payload = synthesize_analysis(description, "Lisbon")
    result = AnalysisResult.model_validate(payload)
    assert result.summary.ecoRating == result.ecoScore
    assert [f.frame for f in result.storyboard] == [1, 2, 3, 4]
    assert all(1 <= alt.ecoScore <= 10 for alt in result.alternatives)


def test_alternatives_are_capped_at_ten():
    result = synthesize_analysis("glass jar")
    assert [alt["ecoScore"] for alt in result["alternatives"]] == [10, 10]


def test_non_recyclable_storyboard_and_disposal():
    result = synthesize_analysis("chip bag")
    assert result["summary"]["recyclable"] == "No"
    assert result["storyboard"][2]["title"] == "Disposal"
    assert result["diyTips"][0]["title"] == "Plant Pot"


def test_recyclable_disposal_tip_mentions_location():
    result = synthesize_analysis("glass jar", "Oslo")
    assert "Oslo" in result["components"][0]["disposalTip"]
    assert result["diyTips"][0]["title"] == "Storage Container"
    assert "sand and high heat" in result["storyboard"][0]["description"]


def test_placeholder_analysis_is_schema_complete():
    result = AnalysisResult.model_validate(fallback_generator.placeholder_analysis())
    assert result.ecoScore == 5
    assert result.components[0].material == "Unknown material"


@pytest.mark.parametrize("message, expected_rule", [
    ("How do I recycle batteries?", 0),
    ("Is plastic wrap bad?", 1),
    ("Tips for a sustainable kitchen", 2),
    ("What's an alternative to cling film?", 3),
    ("Can I compost napkins?", 4),
])
def test_chat_keyword_replies(message, expected_rule):
    assert synthesize_chat_reply(message) == {"response": CHAT_RULES[expected_rule].result}


def test_chat_default_reply():
    reply = synthesize_chat_reply("hello there")
    assert ChatReply.model_validate(reply).response == DEFAULT_CHAT_TIP


def test_hard_quiz_truncated_in_bank_order():
    result = synthesize_quiz("hard", "general", 2)
    questions = result["quiz"]["questions"]
    assert len(questions) == 2
    assert questions == FALLBACK_QUIZZES["hard"]["questions"][:2]


def test_unknown_difficulty_serves_medium_and_echoes_category():
    result = synthesize_quiz("impossible", "oceans", 10)
    quiz = QuizResponse.model_validate(result).quiz
    assert quiz.title == FALLBACK_QUIZZES["medium"]["title"]
    assert quiz.category == "oceans"
    assert len(quiz.questions) == 5


def test_quiz_bank_is_not_mutated():
    synthesize_quiz("easy", "general", 1)
    assert len(FALLBACK_QUIZZES["easy"]["questions"]) == 5


def test_placeholder_quiz_is_schema_complete():
    quiz = QuizResponse.model_validate(fallback_generator.placeholder_quiz()).quiz
    assert quiz.title == "Basic Eco Quiz"


def test_synthesize_dispatch():
    assert synthesize("analyze", {"description": "glass"})["ecoScore"] == 9
    assert "response" in synthesize("chat", {"message": "compost?"})
    assert len(synthesize("quiz", {"difficulty": "easy", "questionCount": 4})["quiz"]["questions"]) == 4
    with pytest.raises(ValueError):
        synthesize("poem", {})


def test_mixed_materials_is_the_default():
    assert first_match(MATERIAL_RULES, "styrofoam tray", MIXED_MATERIALS) is MIXED_MATERIALS
