"""
Quiz Prompts - exam-style question generation from analysed pages.
"""
import json
from typing import List, Sequence

from studylens.domain.schemas.quiz import ExistingQuestion
from studylens.domain.schemas.study import AnalysisRecord, Collection


def _variation_block(quiz_count: int) -> str:
    if quiz_count <= 0:
        return "This is the first quiz - create a solid foundation covering major topics"
    return (
        f"CRITICAL: This collection already has {quiz_count} quiz(zes). You MUST create COMPLETELY DIFFERENT questions!\n"
        "- DO NOT repeat questions from previous quizzes\n"
        "- Focus on DIFFERENT aspects, angles, and scenarios\n"
        "- Use DIFFERENT wording and question formats\n"
        "- Explore DIFFERENT topics or deeper/alternative perspectives\n"
        "- Be CREATIVE and find new ways to test the same material"
    )


def _coverage_hint(quiz_count: int) -> str:
    if quiz_count == 0:
        return "Cover ALL major topics broadly"
    if quiz_count == 1:
        return 'Dig deeper into topics, ask "why" and "how"'
    return "Focus on edge cases, comparisons, and synthesis"


def build_quiz_system_prompt(quiz_count: int) -> str:
    return f"""You are an experienced teacher creating exam-style quiz questions. Analyze study materials deeply and create intelligent, pedagogically sound questions.

CRITICAL LANGUAGE INSTRUCTION:
- Detect the language of the study materials provided below
- Generate ALL quiz content in that SAME language
- This includes: title, description, questions, answers, explanations, exam tips
- Do NOT translate. Match the original language exactly.

VARIATION REQUIREMENT (MOST IMPORTANT):
{_variation_block(quiz_count)}

QUESTION GENERATION STRATEGY:
- Generate 1 question per 1.5-2 pages of content (e.g., 19 pages -> 12-15 questions)
- Minimum 10 questions, maximum 20 questions
- Distribute across cognitive levels (Bloom's Taxonomy):
  * 30% Remember/Recall (basic definitions, facts, terminology)
  * 40% Understand/Apply (problem-solving, method selection, real scenarios)
  * 20% Analyze (compare/contrast, explain why, relationships)
  * 10% Evaluate/Create (higher-order thinking, synthesis)
- {_coverage_hint(quiz_count)}

WRONG ANSWERS MUST BE INTELLIGENT:
- Base wrong answers on common student misconceptions
- Make them plausible and tempting, not obviously wrong
- Test understanding, not just memory

EXAM INTELLIGENCE:
- Flag concepts mentioned multiple times as "very_high" exam likelihood
- Identify foundational building blocks as "high" exam likelihood
- Note visual emphasis (diagrams, definitions in boxes) as exam-worthy
- Mark supporting details as "medium" or "low" exam likelihood

Return JSON with this EXACT structure:
{{
  "title": "Descriptive Quiz Title",
  "description": "Brief overview of topics covered",
  "content_analysis": {{
    "major_topics": ["Topic 1", "Topic 2"],
    "total_pages_analyzed": 0,
    "recommended_question_count": 0
  }},
  "questions": [
    {{
      "question": "Clear, specific question text?",
      "correct_answer": "The correct answer",
      "wrong_answers": ["Plausible misconception 1", "Plausible misconception 2", "Plausible misconception 3"],
      "explanation": "Why this is correct, with teaching insight",
      "difficulty": "easy | medium | hard",
      "bloom_level": "remember | understand | apply | analyze | evaluate | create",
      "question_type": "recall | application | analysis | synthesis",
      "topic_category": "Main topic this tests",
      "exam_likelihood": "low | medium | high | very_high",
      "exam_tip": "Why this concept is important for exams",
      "page_references": ["Page X", "Page Y"]
    }}
  ]
}}

Make questions clear, educational, and exam-realistic. Ensure comprehensive coverage of all major topics."""


def format_page(record: AnalysisRecord, index: int, char_limit: int) -> str:
    page_label = record.pageNumber or index + 1
    text = record.extractedText
    excerpt = text[:char_limit] + ("..." if len(text) > char_limit else "")

    lines: List[str] = [
        f"--- Page {page_label} ---",
        f"Topics: {', '.join(record.majorTopics)}",
        f"Key Concepts: {', '.join(record.keyConcepts)}",
        "",
        "Content:",
        excerpt,
    ]
    if record.definitions:
        lines.append(f"Definitions: {json.dumps(record.definitions, ensure_ascii=False)}")
    if record.formulas:
        lines.append(f"Formulas: {', '.join(record.formulas)}")
    if record.emphasisMarkers:
        lines.append(f"Important: {'; '.join(record.emphasisMarkers)}")
    if record.visualElements:
        lines.append(f"Visuals: {'; '.join(record.visualElements)}")
    return "\n".join(lines)


def build_knowledge_base(records: Sequence[AnalysisRecord], char_limit: int) -> str:
    return "\n\n".join(format_page(record, idx, char_limit) for idx, record in enumerate(records))


def _existing_questions_block(existing: Sequence[ExistingQuestion], preview: int) -> str:
    if not existing:
        return ""
    lines = [f"AVOID THESE {len(existing)} EXISTING QUESTIONS:"]
    lines.extend(
        f'- "{q.question_text}" ({q.topic_category or "general"})' for q in existing[:preview]
    )
    if len(existing) > preview:
        lines.append(f"... and {len(existing) - preview} more questions")
    lines.append("You MUST create questions with DIFFERENT focus, wording, and angles!")
    return "\n".join(lines)


def build_quiz_user_prompt(
    collection: Collection,
    records: Sequence[AnalysisRecord],
    existing: Sequence[ExistingQuestion],
    quiz_count: int,
    *,
    char_limit: int,
    existing_preview: int,
) -> str:
    subject = f"{collection.title}. {collection.description or ''}".strip()
    parts = [f"Create a quiz from the following pre-analyzed study materials about: {subject}"]
    avoid = _existing_questions_block(existing, existing_preview)
    if avoid:
        parts.append(avoid)
    parts.append(f"KNOWLEDGE BASE ({len(records)} pages):\n\n{build_knowledge_base(records, char_limit)}")
    closing = (
        "Create a comprehensive quiz covering all major topics with proper distribution "
        "across Bloom's taxonomy levels."
    )
    if quiz_count > 0:
        closing += " Remember: VARY from existing questions!"
    parts.append(closing)
    return "\n\n".join(parts)
