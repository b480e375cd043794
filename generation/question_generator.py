"""LLM-based topic extraction and exam / practice quiz generation"""

import json
import logging
import math
from typing import List

from pydantic import ValidationError

from data.processor import MaterialProcessor
from generation.gateway import AIGateway, parse_json
from models.errors import GenerationError
from models.schemas import (
    BLANK_MARKER,
    MIXED_EXAM_TYPES,
    Difficulty,
    ExamConfig,
    ExamType,
    Material,
    PracticeConfig,
    Question,
    QuestionType,
    QuestionsResponse,
    TopicsResponse,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert curriculum designer. You create high-quality assessment questions "
    "from course materials. Return responses in strict JSON format."
)

TOPICS_PROMPT = (
    "Analyze the course materials above and extract a concise list of key topics and concepts. "
    'Respond STRICTLY in the following JSON format: {"topics": ["topic1", "topic2", ...]}'
)

# Formatting rules for a whole exam of one type
EXAM_FORMAT_DETAILS = {
    ExamType.MULTIPLE_CHOICE: (
        "Each question must be multiple-choice with exactly 4 options. "
        "Indicate the single correct answer in `correctAnswer`."
    ),
    ExamType.TRUE_FALSE: (
        "Each question must be a statement that is either true or false. "
        'The `correctAnswer` must be either "True" or "False".'
    ),
    ExamType.FILL_IN_THE_BLANK: (
        f'Each question must be a sentence with one or more blanks represented by "{BLANK_MARKER}". '
        "Provide the correct words for the blanks in the `correctAnswers` array, in order."
    ),
    ExamType.MATCHING: (
        "Each question should be a set of matching pairs. Provide the list of prompts and "
        "corresponding answers in the `matchingPairs` field. The `question` field should be an "
        'instruction like "Match the terms to their definitions."'
    ),
    ExamType.SHORT_ANSWER: (
        "Each question should require a concise answer, typically one or two sentences. "
        "Provide a model correct answer in `correctAnswer` for evaluation purposes."
    ),
    ExamType.ESSAY: (
        "Each question should be open-ended, requiring a detailed, multi-paragraph response. "
        "Provide a comprehensive model answer in `correctAnswer` covering key points for evaluation."
    ),
    ExamType.MIXED: (
        "Generate a mix of question types including "
        + ", ".join(t.value for t in MIXED_EXAM_TYPES[:-1])
        + f", and {MIXED_EXAM_TYPES[-1].value}. Follow the specific formatting rules for each type "
        "as described. Ensure a good distribution of types."
    ),
}

# Formatting rules for a single question of each type (practice quizzes)
QUESTION_TYPE_INSTRUCTIONS = {
    QuestionType.MULTIPLE_CHOICE: (
        "A multiple-choice question with exactly 4 options. "
        "Indicate the single correct answer in `correctAnswer`."
    ),
    QuestionType.TRUE_FALSE: (
        'A statement that is either true or false. The `correctAnswer` must be either "True" or "False".'
    ),
    QuestionType.FILL_IN_THE_BLANK: (
        f'A sentence with one or more blanks represented by "{BLANK_MARKER}". '
        "Provide the correct words for the blanks in the `correctAnswers` array."
    ),
    QuestionType.MATCHING: "A set of matching pairs. Provide prompts and answers in the `matchingPairs` field.",
    QuestionType.SHORT_ANSWER: (
        "A question requiring a concise answer (1-2 sentences). Provide a model correct answer in `correctAnswer`."
    ),
    QuestionType.ESSAY: (
        "An open-ended question requiring a detailed response. Provide a model answer in `correctAnswer`."
    ),
}

# Used for the "generating..." countdown shown while waiting on the model
DIFFICULTY_TIME_MULTIPLIER = {
    Difficulty.BEGINNER: 1.0,
    Difficulty.INTERMEDIATE: 1.2,
    Difficulty.ADVANCED: 1.5,
}


def estimate_generation_seconds(config) -> int:
    """Rough wait estimate for generating an exam or a practice quiz (halves round up)"""
    if isinstance(config, PracticeConfig):
        seconds = config.num_questions * 2.5
    else:
        seconds = (15 + config.num_questions * 2) * DIFFICULTY_TIME_MULTIPLIER[config.difficulty]
    return math.floor(seconds + 0.5)


class QuestionGenerator:
    """Generates topics and questions through the AI gateway"""

    def __init__(self, gateway: AIGateway, processor: MaterialProcessor = None):
        self.gateway = gateway
        self.processor = processor or MaterialProcessor()

    def extract_topics(self, materials: List[Material]) -> List[str]:
        """Ask the model for the key topics covered by the materials"""
        if not materials:
            return []

        parts = self.processor.prepare(materials) + [TOPICS_PROMPT]
        logger.info(f"Extracting topics from {len(materials)} materials")
        response_text = self.gateway.generate(parts, TopicsResponse, system=SYSTEM_PROMPT)

        try:
            topics = TopicsResponse.model_validate(parse_json(response_text)).topics
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Failed to parse topics from response: {response_text}")
            raise GenerationError(f"Error parsing topics: {e}") from e

        topics = [topic.strip() for topic in topics if topic and topic.strip()]
        logger.info(f"✓ Extracted {len(topics)} topics")
        return topics

    def build_exam_prompt(self, config: ExamConfig, topics: str) -> str:
        return f"""Based on the following key topics, create a high-quality exam.

KEY TOPICS:
{topics}

EXAM SPECIFICATIONS:
- Type: {config.type.value}
- Difficulty: {config.difficulty.value}
- Number of Questions: {config.num_questions}

INSTRUCTIONS:
- Generate exactly {config.num_questions} questions.
- Ensure questions are relevant to the provided topics and match the specified difficulty level.
- {EXAM_FORMAT_DETAILS[config.type]}
- For each question, identify the main 'topic' it covers from the key topics list and set its `type` field correctly.
- Adhere STRICTLY to the JSON output schema. Do not include any extra text or markdown formatting outside of the JSON structure.
"""

    def build_practice_prompt(self, config: PracticeConfig) -> str:
        requested_types = "\n".join(
            f"  - {qtype.value}: {QUESTION_TYPE_INSTRUCTIONS[qtype]}" for qtype in config.question_types
        )
        return f"""Create a practice quiz based on the following specifications.

SELECTED TOPICS:
{', '.join(config.topics)}

QUIZ SPECIFICATIONS:
- Difficulty: {config.difficulty.value}
- Number of Questions: {config.num_questions}
- Question Types to Include: {', '.join(qtype.value for qtype in config.question_types)}

INSTRUCTIONS:
- Generate exactly {config.num_questions} questions.
- Each question must be one of the selected types. Distribute the types as evenly as possible.
- Questions must be relevant to the selected topics and difficulty.
- For each question, follow these formatting rules:
{requested_types}
- For each question, identify the main 'topic' it covers from the selected topics list.
- Adhere STRICTLY to the JSON output schema. Do not include any extra text or markdown formatting.
"""

    def parse_questions(self, response_text: str, label: str) -> List[Question]:
        """Parse a ``{"questions": [...]}`` response, skipping malformed questions"""
        try:
            raw_json = parse_json(response_text)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse {label} JSON response: {response_text}")
            raise GenerationError(f"Error parsing {label} questions: {e}") from e

        question_list = raw_json.get("questions") if isinstance(raw_json, dict) else None
        if not isinstance(question_list, list):
            logger.error(f"Failed to parse {label} JSON response: {response_text}")
            raise GenerationError(
                f"Error parsing {label} questions: Invalid JSON structure received from API. "
                "Expected a 'questions' array."
            )

        questions = []
        for idx, q_dict in enumerate(question_list):
            try:
                questions.append(Question.model_validate(q_dict))
            except ValidationError as e:
                logger.error(f"Error parsing question {idx}: {e}")
                continue

        logger.info(f"✓ Generated {len(questions)} questions")
        return questions

    def generate_exam(self, config: ExamConfig, materials: List[Material]) -> List[Question]:
        """Extract topics from the materials, then generate an exam over them"""
        topics = ", ".join(self.extract_topics(materials))
        if not topics.strip():
            raise GenerationError("Could not extract topics from the provided materials.")

        logger.info(f"Generating {config.num_questions} {config.type.value} questions ({config.difficulty.value})")
        prompt = self.build_exam_prompt(config, topics)
        response_text = self.gateway.generate(prompt, QuestionsResponse, system=SYSTEM_PROMPT)
        return self.parse_questions(response_text, "exam")

    def generate_practice_quiz(self, config: PracticeConfig) -> List[Question]:
        """Generate a practice quiz over the selected topics and question types"""
        logger.info(
            f"Generating {config.num_questions} practice questions for: {', '.join(config.topics)}"
        )
        prompt = self.build_practice_prompt(config)
        response_text = self.gateway.generate(prompt, QuestionsResponse, system=SYSTEM_PROMPT)
        return self.parse_questions(response_text, "practice quiz")
