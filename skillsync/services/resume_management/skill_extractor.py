from __future__ import annotations

import json
import logging
import math
import secrets
import string
import time
from dataclasses import dataclass, field
from typing import Any, List, Literal, Optional

from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, ConfigDict, Field

from skillsync.config import ExtractionConfig

logger = logging.getLogger(__name__)

SKILL_LEVELS = ("beginner", "intermediate", "advanced", "expert")
DEFAULT_CATEGORY = "Other"
DEFAULT_LEVEL = "beginner"
DEFAULT_CONFIDENCE = 0.8

SYSTEM_PROMPT = (
    "You are an expert at analyzing resumes and extracting technical skills. "
    "Return only valid JSON."
)

SKILL_EXTRACTION_PROMPT = """Analyze the following resume and extract every professional skill it demonstrates.

Return a JSON array only, with no prose and no markdown. Each element must be an object:
{{"name": string, "category": string, "level": "beginner" | "intermediate" | "advanced" | "expert", "confidence": number between 0 and 1}}

- category is a short grouping such as "Programming Languages", "Frameworks", "Cloud", "Databases", "Tools" or "Soft Skills".
- level reflects the candidate's proficiency as evidenced by the resume.
- confidence is how certain you are that the candidate has the skill.

Resume:
{resume_text}"""

_ID_ALPHABET = string.ascii_lowercase + string.digits


class ExtractedSkill(BaseModel):
    """A normalised skill as consumed by gap analysis and learning paths."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: str = DEFAULT_CATEGORY
    level: Literal["beginner", "intermediate", "advanced", "expert"] = DEFAULT_LEVEL
    confidence: float = Field(default=DEFAULT_CONFIDENCE, ge=0.0, le=1.0)


@dataclass(frozen=True)
class SkillExtractionResult:
    """Outcome of one extraction call; ``error`` is set when it degraded."""

    skills: List[ExtractedSkill] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _generate_skill_id() -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"skill_{int(time.time() * 1000)}_{suffix}"


def _normalise_level(value: Any) -> str:
    if isinstance(value, str) and value.strip().lower() in SKILL_LEVELS:
        return value.strip().lower()
    return DEFAULT_LEVEL


def _normalise_confidence(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return DEFAULT_CONFIDENCE
    try:
        conf = float(value)
    except (TypeError, ValueError):
        return DEFAULT_CONFIDENCE
    if math.isnan(conf):
        return DEFAULT_CONFIDENCE
    return max(0.0, min(1.0, conf))


def _normalise_text_field(value: Any, default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def to_extracted_skill(item: Any) -> Optional[ExtractedSkill]:
    """Map one raw array element to an ``ExtractedSkill``; non-objects yield None."""
    if not isinstance(item, dict):
        return None
    return ExtractedSkill(
        id=_generate_skill_id(),
        name=_normalise_text_field(item.get("name"), ""),
        category=_normalise_text_field(item.get("category"), DEFAULT_CATEGORY),
        level=_normalise_level(item.get("level")),
        confidence=_normalise_confidence(item.get("confidence")),
    )


def parse_skill_response(content: str) -> SkillExtractionResult:
    """Parse the model reply; anything but a JSON array is a degraded result."""
    if not content or not content.strip():
        return SkillExtractionResult(error="No response from AI model")
    try:
        data = json.loads(content)
    except (ValueError, RecursionError) as exc:
        return SkillExtractionResult(error=f"Invalid JSON: {exc}")
    if not isinstance(data, list):
        return SkillExtractionResult(error="Invalid skills format")

    skills = []
    for item in data:
        skill = to_extracted_skill(item)
        if skill is not None:
            skills.append(skill)
    return SkillExtractionResult(skills=skills)


class SkillExtractionClient:
    """Turns resume text into ``ExtractedSkill`` values via a chat model.

    The client is fail-open: every upstream or parsing failure becomes an
    empty skill list, so callers never see an exception from this step.
    """

    def __init__(self, llm: Any = None, config: Optional[ExtractionConfig] = None):
        self.config = config or ExtractionConfig.from_env()
        if llm is None and self.config.api_key:
            from langchain_openai import ChatOpenAI

            llm = ChatOpenAI(
                model=self.config.model,
                api_key=self.config.api_key,
                base_url=self.config.base_url,
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
                timeout=self.config.timeout,
                max_retries=0,
            )
        self.llm = llm
        self.prompt = ChatPromptTemplate.from_messages(
            [
                ("system", SYSTEM_PROMPT),
                ("user", SKILL_EXTRACTION_PROMPT),
            ]
        )

    def analyze(self, text: str) -> SkillExtractionResult:
        if self.llm is None:
            return SkillExtractionResult(error="No language model configured")
        try:
            chain = self.prompt | self.llm
            message = chain.invoke({"resume_text": text or ""})
        except Exception as exc:
            return SkillExtractionResult(error=f"Upstream call failed: {exc}")
        content = getattr(message, "content", message)
        if not isinstance(content, str):
            return SkillExtractionResult(error="Unexpected response content")
        return parse_skill_response(content)

    def extract_skills(self, text: str) -> List[ExtractedSkill]:
        result = self.analyze(text)
        if not result.ok:
            logger.warning(f"AI skill extraction unavailable: {result.error}")
            return []
        logger.info(f"Extracted {len(result.skills)} skills from resume text")
        return result.skills
