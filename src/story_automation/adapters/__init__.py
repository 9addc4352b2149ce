"""
Adapters – concrete implementations of ports.
One LLMClient (Gemini → Ollama) is shared by the segmenter and the script writer;
pass overrides to inject fakes or another backend.
"""

from story_automation.adapters.llm import LLMClient
from story_automation.adapters.segmenter import GeminiSceneSegmenter
from story_automation.adapters.writer import ScriptWriterAdapter


def default_adapters(**overrides):
    """
    Build default adapter instances (use story_automation.config).
    Overrides: llm=..., segmenter=..., script_writer=... for testing or another backend.
    """
    llm = overrides.pop("llm", None) or LLMClient()
    defaults = {
        "segmenter": GeminiSceneSegmenter(llm),
        "script_writer": ScriptWriterAdapter(llm),
    }
    defaults.update(overrides)
    return defaults
