"""
BotLab v1.0 - Starter Bot Templates
Ready-made bots a learner can copy into the builder and then change.

Each template: id, name, avatar, description, category, difficulty,
language, intents [{name, training_phrases, responses}], features.
The first intent is the entry point; the builder connects it to the rest.
"""

from typing import Optional

from app.bot.schema import BotConfiguration, BotEdge, BotNode, NodeData, Position

CATEGORIES = ("educational", "cultural", "fun", "practical")

DEFAULT_FALLBACK_RESPONSES = [
    "Hmm, I'm not sure about that yet. Can you ask another way?",
    "I'm still learning! Try asking me something else.",
]

TEMPLATES: list[dict] = [
    {
        "id": "breakfast-bot",
        "name": "Ubuntu Breakfast Bot",
        "avatar": "cook",
        "description": "Help plan healthy African breakfast meals",
        "category": "practical",
        "difficulty": "Beginner",
        "language": "English/Swahili",
        "intents": [
            {
                "name": "Greet",
                "training_phrases": ["hello", "hi there", "jambo", "good morning", "sawubona"],
                "responses": [
                    "Jambo! Ready for a healthy African breakfast?",
                    "Sawubona! Let's plan a nutritious meal together!",
                ],
            },
            {
                "name": "Suggest Breakfast",
                "training_phrases": [
                    "what should I eat", "breakfast ideas", "I'm hungry", "what's for breakfast",
                ],
                "responses": [
                    "How about ugali with milk and fruit?",
                    "Try mandazi with chai tea!",
                    "Injera with honey is delicious and energizing!",
                ],
            },
            {
                "name": "Nutrition Info",
                "training_phrases": ["is this healthy", "nutrition facts", "calories", "vitamins"],
                "responses": [
                    "That's packed with nutrients! Great choice for growing minds.",
                    "This meal gives you energy for learning all day!",
                ],
            },
        ],
        "features": ["Traditional recipes", "Nutritional education", "Multilingual support"],
    },
    {
        "id": "story-friend",
        "name": "Anansi Story Friend",
        "avatar": "book",
        "description": "Interactive storyteller with African folktales",
        "category": "cultural",
        "difficulty": "Easy",
        "language": "English",
        "intents": [
            {
                "name": "Tell Story",
                "training_phrases": [
                    "tell me a story", "story time", "once upon a time", "I want to hear a tale",
                ],
                "responses": [
                    "Let me tell you about Anansi the clever spider...",
                    "Here's a story from the great baobab tree...",
                ],
            },
            {
                "name": "Create Story",
                "training_phrases": ["let's make a story", "create together", "I have an idea"],
                "responses": [
                    "Wonderful! What character should we start with?",
                    "Great! Every good story needs a hero. Who is yours?",
                ],
            },
            {
                "name": "Story Moral",
                "training_phrases": ["what does it mean", "moral of the story", "lesson learned"],
                "responses": [
                    "This story teaches us about wisdom and kindness",
                    "The lesson is that Ubuntu - we are stronger together!",
                ],
            },
        ],
        "features": ["Interactive storytelling", "Cultural education", "Creative writing help"],
    },
    {
        "id": "math-buddy",
        "name": "Kwame Math Buddy",
        "avatar": "numbers",
        "description": "Makes math fun with African contexts",
        "category": "educational",
        "difficulty": "Medium",
        "language": "English",
        "intents": [
            {
                "name": "Math Problem",
                "training_phrases": [
                    "help with math", "solve this", "I need help calculating", "math homework",
                ],
                "responses": [
                    "Let's solve this step by step!",
                    "Math is like counting elephants - let's take it one step at a time!",
                ],
            },
            {
                "name": "Practice Problems",
                "training_phrases": ["give me practice", "more problems", "test me", "quiz time"],
                "responses": [
                    "If you have 5 baskets and each holds 8 mangoes, how many mangoes total?",
                    "A safari guide sees 3 groups of 4 zebras. How many zebras in total?",
                ],
            },
            {
                "name": "Explain Concept",
                "training_phrases": [
                    "explain fractions", "what is multiplication", "how does division work",
                ],
                "responses": [
                    "Think of fractions like sharing ugali equally among friends!",
                    "Multiplication is like counting groups of things - very useful at the market!",
                ],
            },
        ],
        "features": ["Contextual learning", "Step-by-step solutions", "Cultural math scenarios"],
    },
    {
        "id": "weather-wizard",
        "name": "Savanna Weather Wizard",
        "avatar": "weather",
        "description": "Weather bot with African climate awareness",
        "category": "practical",
        "difficulty": "Beginner",
        "language": "English/French",
        "intents": [
            {
                "name": "Weather Today",
                "training_phrases": [
                    "weather today", "how is it outside", "should I bring umbrella",
                ],
                "responses": [
                    "The savanna is sunny today - perfect for outdoor learning!",
                    "Looks like rainy season is here - great for the crops!",
                ],
            },
            {
                "name": "Seasonal Info",
                "training_phrases": ["rainy season", "dry season", "harvest time", "planting season"],
                "responses": [
                    "Rainy season brings life to the savanna!",
                    "This is when farmers plant their crops for the harvest!",
                ],
            },
        ],
        "features": ["Weather awareness", "Agricultural context", "Seasonal education"],
    },
    {
        "id": "pet-caretaker",
        "name": "Safari Pet Guide",
        "avatar": "dog",
        "description": "Virtual pet care with African animal focus",
        "category": "fun",
        "difficulty": "Easy",
        "language": "English",
        "intents": [
            {
                "name": "Pet Care",
                "training_phrases": ["feed my pet", "pet is hungry", "take care of animal"],
                "responses": [
                    "Your virtual meerkat is happy and well-fed!",
                    "Time to give your baby elephant some water!",
                ],
            },
            {
                "name": "Animal Facts",
                "training_phrases": ["tell me about animals", "animal facts", "wildlife"],
                "responses": [
                    "Did you know elephants can remember friends for decades?",
                    "Meerkats work together like a community - just like Ubuntu!",
                ],
            },
        ],
        "features": ["Virtual pet care", "Wildlife education", "Conservation awareness"],
    },
]


def list_templates(category: Optional[str] = None) -> list[dict]:
    if category is None or category == "all":
        return list(TEMPLATES)
    return [t for t in TEMPLATES if t["category"] == category]


def get_template(template_id: str) -> Optional[dict]:
    for template in TEMPLATES:
        if template["id"] == template_id:
            return template
    return None


def template_to_configuration(template: dict, name: Optional[str] = None) -> BotConfiguration:
    """Lay the template out as a builder graph: intents in a row, fallback last."""
    nodes = []
    for index, intent in enumerate(template["intents"]):
        nodes.append(BotNode(
            id=f"intent-{index + 1}",
            type="intent",
            position=Position(x=250 * index, y=100),
            data=NodeData(
                label=intent["name"],
                training_phrases=list(intent["training_phrases"]),
                responses=list(intent["responses"]),
            ),
        ))
    nodes.append(BotNode(
        id="fallback",
        type="fallback",
        position=Position(x=0, y=300),
        data=NodeData(
            label="Fallback",
            responses=list(DEFAULT_FALLBACK_RESPONSES),
            is_default=True,
        ),
    ))

    entry = nodes[0].id
    edges = [
        BotEdge(id=f"e-{entry}-{node.id}", source=entry, target=node.id, animated=True)
        for node in nodes[1:-1]
    ]

    return BotConfiguration(
        name=name or template["name"],
        avatar=template.get("avatar"),
        description=template.get("description"),
        nodes=nodes,
        edges=edges,
    )
