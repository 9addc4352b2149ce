"""
CLI entrypoint:
  story-automation --stage ideas [--format short] [--duration "Short (< 60 Seconds)"]
  story-automation --stage script --idea-title "..." --idea-hook "..." [--output story.txt]
  story-automation --stage storyboard --script-file story.txt [--output storyboard.json]
"""

import argparse
import os
import sys
from datetime import datetime
from typing import Optional

from story_automation import config
from story_automation.domain.errors import GenerationError, SegmentationBatchError
from story_automation.domain.models import StoryConfig, ViralIdea
from story_automation.domain.styles import DURATION_OPTIONS, ContentFormat

FORMAT_CHOICES = {
    "short": ContentFormat.SHORT,
    "long": ContentFormat.LONG,
    "series": ContentFormat.SERIES,
}


def _read_text(path: Optional[str]) -> Optional[str]:
    if not path:
        return None
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _default_output(stage: str, extension: str) -> str:
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return os.path.join(config.OUTPUT_DIR, f"{stage}_{timestamp}.{extension}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Turn a story idea into a narrated, illustrated storyboard"
    )
    parser.add_argument(
        "--stage",
        choices=["ideas", "script", "storyboard"],
        default="storyboard",
        help="ideas: pitch story ideas; script: write the narrative; storyboard: split a narrative into scenes",
    )
    parser.add_argument("--format", choices=sorted(FORMAT_CHOICES), default="short")
    parser.add_argument("--duration", default=DURATION_OPTIONS[0], help="Target narration length")
    parser.add_argument("--idea-title", type=str, help="Idea title (script stage)")
    parser.add_argument("--idea-hook", type=str, default="", help="Idea summary (script stage)")
    parser.add_argument("--character", type=str, default="", help="Protagonist physical description")
    parser.add_argument("--style", type=str, default=None, help="Art style id")
    parser.add_argument("--script-file", type=str, help="Narrative text file (storyboard stage)")
    parser.add_argument("--reference-file", type=str, help="Reference transcript to imitate")
    parser.add_argument("--batch-size", type=int, default=config.SEGMENT_BATCH_SIZE)
    parser.add_argument("--max-batches", type=int, default=None)
    parser.add_argument("--output", type=str, help="Output file path")
    return parser


def main(argv=None) -> int:
    from story_automation.adapters import default_adapters
    from story_automation.application.pipeline import StoryboardPipeline

    args = build_parser().parse_args(argv)

    story_config = StoryConfig(
        format=FORMAT_CHOICES[args.format],
        duration=args.duration,
        character_description=args.character,
        reference_script=_read_text(args.reference_file),
    )
    if args.style:
        story_config.art_style_id = args.style
    if args.idea_title:
        story_config.selected_idea = ViralIdea(title=args.idea_title, hook=args.idea_hook)

    pipeline = StoryboardPipeline(
        **default_adapters(),
        story_config=story_config,
        batch_size=args.batch_size,
    )

    try:
        if args.stage == "ideas":
            for i, idea in enumerate(pipeline.generate_ideas(), 1):
                print(f"  {i}. {idea.title} – {idea.hook}")
                if idea.viral_factor:
                    print(f"     Why it works: {idea.viral_factor}")

        elif args.stage == "script":
            if story_config.selected_idea is None:
                print("❌ --idea-title is required for the script stage")
                return 2
            script = pipeline.generate_script()
            output_path = args.output or _default_output("script", "txt")
            os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
            with open(output_path, "w", encoding="utf-8") as f:
                f.write(script)
            print(f"\n✅ Script saved to: {output_path}")

        else:
            narrative = _read_text(args.script_file)
            if not narrative:
                print("❌ --script-file is required for the storyboard stage")
                return 2
            pipeline.adopt_narrative(narrative)
            pipeline.run_storyboard(max_batches=args.max_batches)
            pipeline.save_storyboard(args.output or _default_output("storyboard", "json"))

    except (GenerationError, SegmentationBatchError) as e:
        print(f"\n❌ {e}")
        cause = e.__cause__
        if cause is not None:
            print(f"   Cause: {cause}")
        return 1

    print(f"\nTokens used: {pipeline.usage.tokens}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
