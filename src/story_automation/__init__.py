"""
Story Automation – idea -> narrative -> storyboard pipeline for narrated story videos.

Usage:
  from story_automation.application.pipeline import StoryboardPipeline
  from story_automation.adapters import default_adapters
  pipeline = StoryboardPipeline(**default_adapters())
  pipeline.adopt_narrative(script_text)
  pipeline.run_storyboard()

Any text backend can be plugged in by implementing the ports
(ITextGenerator, ISceneSegmenter, IScriptWriter) and injecting it.
"""

__version__ = "0.2.0"
