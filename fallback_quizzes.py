# Pre-authored quizzes served when the model cannot generate one.
# Keyed by difficulty; each holds five questions in presentation order.

FALLBACK_QUIZZES = {
    "easy": {
        "title": "Eco Basics Quiz",
        "difficulty": "easy",
        "questions": [
            {
                "id": 1,
                "question": "What does the ♻️ symbol mean?",
                "options": ["Recyclable", "Reusable", "Renewable", "Returnable"],
                "correctAnswer": 0,
                "explanation": "The recycling symbol indicates that a material can be recycled and processed into new products.",
                "points": 10,
            },
            {
                "id": 2,
                "question": "Which material takes the longest to decompose?",
                "options": ["Paper", "Glass", "Plastic", "Aluminum"],
                "correctAnswer": 2,
                "explanation": "Plastic can take 400-1000 years to decompose, making it one of the most persistent pollutants.",
                "points": 10,
            },
            {
                "id": 3,
                "question": "What does PET #1 plastic commonly contain?",
                "options": ["Milk", "Water bottles", "Yogurt", "Detergent"],
                "correctAnswer": 1,
                "explanation": "PET #1 plastic is commonly used for water bottles and soft drink containers.",
                "points": 10,
            },
            {
                "id": 4,
                "question": "Which is better for the environment?",
                "options": ["Paper bags", "Plastic bags", "Reusable bags", "No bags"],
                "correctAnswer": 2,
                "explanation": "Reusable bags have the lowest environmental impact when used multiple times.",
                "points": 10,
            },
            {
                "id": 5,
                "question": "What should you do before recycling containers?",
                "options": ["Break them", "Clean them", "Label them", "Heat them"],
                "correctAnswer": 1,
                "explanation": "Cleaning containers removes food residue and contamination, making recycling more effective.",
                "points": 10,
            },
        ],
    },
    "medium": {
        "title": "Sustainability Challenge",
        "difficulty": "medium",
        "questions": [
            {
                "id": 1,
                "question": "What does HDPE #2 plastic stand for?",
                "options": [
                    "High Density Polyethylene",
                    "Heavy Duty Plastic Element",
                    "Hard Durable Polymer Exterior",
                    "High Definition Plastic Envelope",
                ],
                "correctAnswer": 0,
                "explanation": "HDPE stands for High Density Polyethylene, used in milk jugs and detergent bottles.",
                "points": 15,
            },
            {
                "id": 2,
                "question": "Which packaging has the lowest carbon footprint?",
                "options": ["Aluminum cans", "Glass bottles", "Plastic bottles", "Tetra packs"],
                "correctAnswer": 0,
                "explanation": "Aluminum cans have a lower carbon footprint and are infinitely recyclable.",
                "points": 15,
            },
            {
                "id": 3,
                "question": "What is 'greenwashing'?",
                "options": [
                    "Cleaning with eco products",
                    "Misleading environmental claims",
                    "Washing clothes efficiently",
                    "Green building practices",
                ],
                "correctAnswer": 1,
                "explanation": "Greenwashing is when companies make misleading claims about their environmental practices.",
                "points": 15,
            },
            {
                "id": 4,
                "question": "Which plastic code is NOT commonly recyclable?",
                "options": ["#1 PET", "#2 HDPE", "#6 PS", "#5 PP"],
                "correctAnswer": 2,
                "explanation": "#6 PS (Polystyrene) is rarely accepted in curbside recycling programs.",
                "points": 15,
            },
            {
                "id": 5,
                "question": "What is the circular economy?",
                "options": [
                    "Round packaging design",
                    "Waste reduction system",
                    "Circular supply chains",
                    "Global trade patterns",
                ],
                "correctAnswer": 1,
                "explanation": "The circular economy focuses on eliminating waste through reuse, recycling, and regeneration.",
                "points": 15,
            },
        ],
    },
    "hard": {
        "title": "Eco Expert Challenge",
        "difficulty": "hard",
        "questions": [
            {
                "id": 1,
                "question": "What is the main component of biodegradable plastics?",
                "options": ["Petroleum", "Corn starch", "Recycled plastic", "Natural gas"],
                "correctAnswer": 1,
                "explanation": "Many biodegradable plastics are made from corn starch and other plant-based materials.",
                "points": 20,
            },
            {
                "id": 2,
                "question": "Which has the highest recycling rate globally?",
                "options": ["Paper", "Glass", "Aluminum", "Plastic"],
                "correctAnswer": 2,
                "explanation": "Aluminum has the highest recycling rate at about 75% globally, and can be recycled infinitely.",
                "points": 20,
            },
            {
                "id": 3,
                "question": "What is the Great Pacific Garbage Patch primarily composed of?",
                "options": ["Large plastic debris", "Microplastics", "Glass bottles", "Metal cans"],
                "correctAnswer": 1,
                "explanation": "The Great Pacific Garbage Patch is mostly microplastics, not a solid island of trash.",
                "points": 20,
            },
            {
                "id": 4,
                "question": "Which country has the highest plastic recycling rate?",
                "options": ["Germany", "Japan", "South Korea", "Norway"],
                "correctAnswer": 2,
                "explanation": "South Korea has one of the highest plastic recycling rates at over 85%.",
                "points": 20,
            },
            {
                "id": 5,
                "question": "What is chemical recycling?",
                "options": [
                    "Using chemicals to clean plastic",
                    "Breaking plastic into molecular components",
                    "Chemical sorting of materials",
                    "Adding chemicals to improve recycling",
                ],
                "correctAnswer": 1,
                "explanation": "Chemical recycling breaks plastic down to its molecular components to create new materials.",
                "points": 20,
            },
        ],
    },
}

DEFAULT_FALLBACK_DIFFICULTY = "medium"

# Last-resort quiz for unexpected faults in the quiz handler
PLACEHOLDER_QUIZ = {
    "title": "Basic Eco Quiz",
    "difficulty": "easy",
    "category": "general",
    "questions": [
        {
            "id": 1,
            "question": "What does recycling help reduce?",
            "options": ["Waste in landfills", "Air pollution", "Water usage", "All of the above"],
            "correctAnswer": 3,
            "explanation": "Recycling helps reduce waste, pollution, and resource consumption.",
            "points": 10,
        }
    ],
}
