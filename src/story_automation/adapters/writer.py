"""IScriptWriter adapter: viral idea generation and full narrative writing."""

import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from story_automation import config
from story_automation.application.retry import with_retry
from story_automation.domain.models import StoryConfig, ViralIdea
from story_automation.domain.styles import ContentFormat
from story_automation.ports.interfaces import IScriptWriter, ITextGenerator

IDEAS_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "ideas": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "title": {"type": "STRING"},
                    "hook": {"type": "STRING"},
                    "viralFactor": {"type": "STRING"},
                },
                "required": ["title", "hook", "viralFactor"],
            },
        },
    },
    "required": ["ideas"],
}


def _has_reference(reference_script: Optional[str]) -> bool:
    return bool(reference_script) and len(reference_script.strip()) > config.REFERENCE_SCRIPT_MIN_CHARS


def _character_instruction(description: str) -> str:
    if not description:
        return ""
    return (
        f"IMPORTANT: The main protagonist MUST match this physical description: {description}. "
        "Ensure their gender, age, and features described here are reflected in their actions "
        "and dialogue throughout the script."
    )


class ScriptWriterAdapter(IScriptWriter):
    """Writes ideas and narratives through an ITextGenerator."""

    def __init__(
        self,
        llm: ITextGenerator,
        retries: int = config.RETRY_ATTEMPTS,
        retry_delay: float = config.RETRY_INITIAL_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._llm = llm
        self._retries = retries
        self._retry_delay = retry_delay
        self._sleep = sleep

    def _retry(self, fn, label: str):
        return with_retry(
            fn, retries=self._retries, delay=self._retry_delay, sleep=self._sleep, label=label
        )

    def generate_viral_ideas(
        self,
        content_format: ContentFormat,
        duration: str,
        reference_script: Optional[str] = None,
    ) -> Tuple[List[ViralIdea], int]:
        if _has_reference(reference_script):
            context = f"""
Analyze the "Viral DNA" of this reference transcript:
\"\"\"
{reference_script[:config.REFERENCE_SCRIPT_IDEA_CHARS]}
\"\"\"
Generate {config.IDEA_COUNT} original story ideas that match this successful storytelling style, hook intensity, and twist structure.
"""
        else:
            context = "You are an expert storyteller and viral content strategist for narrated YouTube story channels."

        prompt = f"""
{context}
Generate {config.IDEA_COUNT} original viral story ideas for a {content_format.value} video ({duration}).
Focus on relatable setups, atmospheric dread, and shocking twists.
Output Format: JSON Object with "ideas" key.
"""
        data, tokens = self._retry(
            lambda: self._llm.generate_json(prompt, schema=IDEAS_SCHEMA), "Idea generation"
        )
        ideas = [
            ViralIdea(
                title=str(item.get("title", "")).strip(),
                hook=str(item.get("hook", "")).strip(),
                viral_factor=str(item.get("viralFactor", "")).strip(),
            )
            for item in data.get("ideas", [])
            if isinstance(item, dict) and item.get("title")
        ]
        return ideas, tokens

    def generate_script(self, story_config: StoryConfig) -> Tuple[str, int]:
        idea = story_config.selected_idea
        if idea is None:
            raise ValueError("No idea selected")

        character_instruction = _character_instruction(story_config.character_description)
        if _has_reference(story_config.reference_script):
            prompt = f"""
Using the reference story transcript below as the storytelling style, tone, pacing and
emotional intensity reference, write a complete story script based on this idea:
[STORY IDEA: {idea.title} - {idea.hook}]

{character_instruction}

The story should fit approximately [{story_config.duration}] when used as an AI voiceover.

REFERENCE TRANSCRIPT:
\"\"\"
{story_config.reference_script}
\"\"\"

The narrator retells what happened to someone else (3rd-person narration style).

Requirements:
- No timestamps, narration labels, or scene numbers; only the full story written naturally.
- Keep the pacing tight, cinematic, and emotionally engaging.
- Build suspense gradually and deliver a shocking twist ending.
- Ensure the script length matches the specified duration ({story_config.duration}).

Final output:
→ A clean narrative script ready for narration.
"""
        else:
            prompt = f"""
Write a complete story script based on:
TITLE: {idea.title}
SUMMARY: {idea.hook}

{character_instruction}

Requirements:
- 3rd-person narration.
- Approx {story_config.duration}.
- Atmospheric, cinematic pacing.
- Shocking twist ending.
- Give the protagonist a unique name.
- Output narrative text only.
"""
        system_instruction = (
            "You are a master storyteller. You specialize in 3rd-person atmospheric narration. "
            f"{character_instruction}"
        ).strip()

        result = self._retry(
            lambda: self._llm.generate(prompt, {"system_instruction": system_instruction}),
            "Script generation",
        )
        return result.get("response", "").strip(), result.get("tokens", 0)
