"""
Analysis Prompts - per-page extraction instructions for the vision model.

One prompt per material type: study content is mined for topics, concepts,
definitions and formulas; learning-objective documents only for goals and
topic areas.
"""
from studylens.domain.schemas.study import MaterialType


# =============================================================================
# CONTENT PAGES
# =============================================================================

CONTENT_ANALYSIS_PROMPT = """You are an expert educational content analyzer. Analyze this study material and extract ALL information.

IMPORTANT: Analyze from a STUDENT PERSPECTIVE. Focus on what students need to LEARN.

TEXT EXTRACTION: Extract all text and reflow it into natural paragraphs. Remove artificial line breaks within sentences. Only keep paragraph breaks between distinct topics/sections. The output should read as flowing prose, not fragmented lines.

TOPIC IDENTIFICATION:
- Identify 1-3 major topics (broad themes)
- List 3-8 key concepts (specific ideas students must learn)
- Mark if FOUNDATIONAL (basic) or ADVANCED

DEFINITIONS: Extract terms with explanations as JSON:
{"Term": "Definition"}

FORMULAS: List mathematical/scientific formulas

VISUAL ELEMENTS: Only note the TYPE of visual (e.g., "Image: Map", "Diagram: Process flow", "Chart: Statistics"). Do NOT describe content in detail.

EMPHASIS: Note highlighted, bold, or emphasized content

Return valid JSON:
{
  "extracted_text": "flowing text with natural paragraphs",
  "major_topics": ["topic1", "topic2"],
  "key_concepts": ["concept1", "concept2"],
  "definitions": {"Term": "Definition"},
  "formulas": ["formula1"],
  "visual_elements": ["description"],
  "emphasis_markers": ["important point"],
  "is_foundational": true
}"""


# =============================================================================
# LEARNING OBJECTIVES / STUDY PLANS
# =============================================================================

LEARNING_OBJECTIVES_PROMPT = """You are an expert educational content analyzer. This is a LEARNING OBJECTIVES or STUDY PLAN document.

TASK: Extract the learning goals, objectives, and requirements that students need to achieve.

LEARNING OBJECTIVES: List all learning goals, competencies, and skills mentioned
TOPIC AREAS: Identify the main subject areas or topics covered
KEY CONCEPTS: Extract specific concepts or knowledge areas students must learn

Return valid JSON:
{
  "learning_objectives": ["objective1", "objective2"],
  "major_topics": ["topic1", "topic2"],
  "key_concepts": ["concept1", "concept2"],
  "extracted_text": "brief summary of the objectives",
  "is_foundational": false
}"""


def analysis_prompt_for(material_type: MaterialType) -> str:
    if material_type == MaterialType.LEARNING_OBJECTIVES:
        return LEARNING_OBJECTIVES_PROMPT
    return CONTENT_ANALYSIS_PROMPT
