# Built-in fallback suggestions, used when the mappings file provides none.

from typing import Dict, List

from .models import CareerSuggestion, QuizType

DEFAULT_FALLBACK_SUGGESTIONS: Dict[QuizType, List[CareerSuggestion]] = {
    QuizType.STANDARD: [
        CareerSuggestion(
            career="Software Engineer",
            description="Designs, builds and maintains software systems and applications.",
            reasoning="A versatile career with strong demand across almost every industry.",
            roadmap_path="software-engineer",
        ),
        CareerSuggestion(
            career="Business Analyst",
            description="Bridges business needs and technical solutions by analysing processes and data.",
            reasoning="Combines problem solving with communication, suiting a wide range of strengths.",
            roadmap_path="business-analyst",
        ),
        CareerSuggestion(
            career="Graphic Designer",
            description="Creates visual concepts that communicate ideas and inspire audiences.",
            reasoning="Offers creative freedom and a path into digital media and branding.",
            roadmap_path="graphic-designer",
        ),
    ],
    QuizType.LONG: [
        CareerSuggestion(
            career="Project Manager",
            description="Plans, executes and closes projects while coordinating teams and resources.",
            reasoning="Rewards organisation and collaboration, and opens doors to leadership roles.",
            roadmap_path="project-manager",
        ),
        CareerSuggestion(
            career="Data Analyst",
            description="Turns raw data into insights that guide decisions.",
            reasoning="A growing field for people who enjoy structured thinking and evidence.",
            roadmap_path="data-analyst",
        ),
        CareerSuggestion(
            career="Marketing Specialist",
            description="Researches markets and crafts campaigns that connect products with people.",
            reasoning="Blends creativity and analysis in a fast-moving environment.",
            roadmap_path="marketing-specialist",
        ),
    ],
}
