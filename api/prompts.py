"""
Prompt templates for the three assistant use cases.
Placeholders are {name_placeholder} markers filled in a single regex pass, so literal
JSON braces need no escaping and user text is never expanded again.
"""

import re
from typing import Any, Mapping, Optional

ANALYSIS_OUTPUT_SCHEMA = """{
  "components": [{"name": "bottle", "material": "PET #1 plastic", "recyclable": true, "plasticCode": "#1 PET", "disposalTip": "rinse and recycle"}],
  "ecoScore": 6,
  "carbonFootprint": "0.5kg CO2 - like charging phone for 2 days",
  "greenTip": "♻️ Always rinse containers before recycling",
  "alternative": "Choose glass bottles or aluminum cans instead",
  "alternatives": [{"name": "Glass Bottle", "brand": "EcoChoice", "ecoScore": 9, "reason": "Infinitely recyclable", "image": "/placeholder.svg?height=100&width=100"}],
  "diyTips": [{"title": "Plant Pot", "description": "Cut and use as seedling starter", "difficulty": "easy", "icon": "🌱"}],
  "storyboard": [
    {"frame": 1, "title": "Production", "description": "Made from petroleum", "image": "/placeholder.svg?height=200&width=300"},
    {"frame": 2, "title": "Usage", "description": "Used once then discarded", "image": "/placeholder.svg?height=200&width=300"},
    {"frame": 3, "title": "Recycling", "description": "Can be recycled into new bottles", "image": "/placeholder.svg?height=200&width=300"},
    {"frame": 4, "title": "Impact", "description": "Reduces landfill waste", "image": "/placeholder.svg?height=200&width=300"}
  ],
  "summary": {"material": "PET Plastic", "recyclable": "Yes", "plasticCode": "#1 PET", "disposalTip": "Rinse and recycle", "ecoRating": 6, "greenTip": "Choose reusable alternatives"},
  "gamification": {"badgeProgress": "🌱 Keep scanning!", "progressScore": 65, "motivationalMessage": "Great job analyzing packaging!", "weeklyChallenge": "Find 3 recyclable items this week"}
}"""

QUIZ_OUTPUT_SCHEMA = """{
  "quiz": {
    "title": "Sustainability Quiz",
    "difficulty": "{difficulty_placeholder}",
    "category": "{category_placeholder}",
    "questions": [
      {
        "id": 1,
        "question": "What does the recycling symbol #1 PET mean?",
        "options": ["Polyethylene Terephthalate", "Plastic Eating Turtle", "Pretty Easy Trash", "Petroleum Extract Type"],
        "correctAnswer": 0,
        "explanation": "PET stands for Polyethylene Terephthalate, commonly used for water bottles and food containers.",
        "points": 10
      }
    ]
  }
}"""

ANALYSIS_PROMPT = """Analyze this product packaging for environmental impact. Product: {description_placeholder}{location_placeholder}

Return ONLY a valid JSON object with this exact structure:
{schema_placeholder}"""

IMAGE_INSTRUCTION = "\n\nAnalyze the packaging shown in this image:"

CHAT_PROMPT = """You are EcoPal, a friendly sustainability chatbot assistant for EcoPackAI. You help users with questions about:
- Recycling and waste management
- Packaging materials and their environmental impact
- Sustainable alternatives and eco-friendly choices
- Local recycling guidelines
- Environmental tips and facts

Keep your responses:
- Friendly and encouraging with emojis
- Educational but easy to understand
- Practical and actionable
- Brief (2-3 sentences max)
- Focused on sustainability topics

User question: {message_placeholder}

Respond as EcoPal with helpful, emoji-rich advice:"""

QUIZ_PROMPT = """Generate a sustainability and recycling quiz with {count_placeholder} questions.
Difficulty: {difficulty_placeholder}
Category: {category_placeholder}

Create questions about:
- Recycling symbols and plastic codes
- Environmental impact of packaging
- Sustainable alternatives
- Waste reduction tips
- Eco-friendly practices

Return ONLY a valid JSON object with this exact structure:
{schema_placeholder}

Make questions educational, engaging, and factually accurate. Include diverse topics within sustainability."""

USE_CASES = ("analyze", "chat", "quiz")

PLACEHOLDER = re.compile(r"\{(\w+)_placeholder\}")


def fill_placeholders(template: str, values: Mapping[str, str]) -> str:
    """
    Substitute {name_placeholder} markers in one pass. Inserted values are
    never rescanned; markers without a value are left in place.
    """
    return PLACEHOLDER.sub(lambda m: values.get(m.group(1), m.group(0)), template)


def _build_analysis_prompt(user_input: Mapping[str, Any], schema_hint: str) -> str:
    location = user_input.get("location") or ""
    prompt = fill_placeholders(ANALYSIS_PROMPT, {
        "description": user_input.get("description") or "",
        "location": f" Location: {location}" if location else "",
        "schema": schema_hint,
    })
    if user_input.get("has_image"):
        prompt += IMAGE_INSTRUCTION
    return prompt


def _build_chat_prompt(user_input: Mapping[str, Any]) -> str:
    return fill_placeholders(CHAT_PROMPT, {"message": user_input.get("message") or ""})


def _build_quiz_prompt(user_input: Mapping[str, Any], schema_hint: str) -> str:
    # The schema carries difficulty/category markers of its own, so it goes in first
    prompt = fill_placeholders(QUIZ_PROMPT, {"schema": schema_hint})
    return fill_placeholders(prompt, {
        "count": str(user_input.get("questionCount") or 3),
        "difficulty": user_input.get("difficulty") or "medium",
        "category": user_input.get("category") or "general",
    })


PROMPT_BUILDERS = {
    "analyze": lambda user_input, schema_hint: _build_analysis_prompt(user_input, schema_hint or ANALYSIS_OUTPUT_SCHEMA),
    "chat": lambda user_input, schema_hint: _build_chat_prompt(user_input),
    "quiz": lambda user_input, schema_hint: _build_quiz_prompt(user_input, schema_hint or QUIZ_OUTPUT_SCHEMA),
}


def build_prompt(use_case: str, user_input: Mapping[str, Any], schema_hint: Optional[str] = None) -> str:
    """
    Build the model prompt for a use case. Pure string construction, no I/O.

    Args:
        use_case: one of USE_CASES
        user_input: request fields (description/location/has_image, message,
            or difficulty/category/questionCount)
        schema_hint: literal JSON example of the expected output; defaults to
            the use case's built-in schema (ignored for chat, which is prose)
    """
    if use_case not in USE_CASES:
        raise ValueError(f"Unknown prompt use case: {use_case}")
    return PROMPT_BUILDERS[use_case](user_input, schema_hint)
