"""DraftDesk - topic to edited article

Simple CLI for running the research, writer and editor pipeline.
"""

import argparse
import asyncio
import json
import sys

from pydantic import ValidationError

from draftdesk.agents.orchestrator import PipelineOrchestrator
from draftdesk.models.pipeline import DEFAULT_TONE, VALID_TONES, OrchestrationResult, PipelineStatus


def print_result(result: OrchestrationResult) -> None:
    print(f"\n[*] Pipeline {result.status.value} in {result.total_duration_ms}ms")
    for step in result.steps:
        line = f"  {step.agent:<9} {step.status.value:<10} {step.duration_ms}ms"
        if step.error:
            line += f"  ({step.error})"
        print(line)

    if result.research:
        print(f"\n[+] {result.research.summary}")

    if result.edited:
        score = result.edited.quality_score
        print(f"\n{'=' * 50}")
        print(result.edited.edited_title)
        print(f"{'=' * 50}")
        print(result.edited.edited_article)
        print(f"\n   Words: {result.edited.word_count}")
        print(f"   Edits: {len(result.edited.changes)}")
        if score:
            print(f"   Quality: {score.overall}/100")
    elif result.article:
        print(f"\n{'=' * 50}")
        print(result.article.title)
        print(f"{'=' * 50}")
        print(result.article.article)


async def run_pipeline(topic: str, tone: str, as_json: bool = False) -> int:
    """Run the pipeline on the given topic and return a process exit code."""
    if not as_json:
        print(f"Topic: {topic} ({tone})")
        print("-" * 50)

    orchestrator = PipelineOrchestrator()
    try:
        result = await orchestrator.run(topic, tone)
    except ValidationError as e:
        print(f"[!] Invalid input: {e.errors()[0]['msg']}", file=sys.stderr)
        return 2

    if as_json:
        print(json.dumps(result.model_dump(mode="json", by_alias=True), indent=2))
    else:
        print_result(result)

    return 1 if result.status == PipelineStatus.FAILED else 0


def main():
    parser = argparse.ArgumentParser(description="DraftDesk article pipeline")
    parser.add_argument("--topic", "-t", required=True, help="Topic to research and write about")
    parser.add_argument("--tone", choices=VALID_TONES, default=DEFAULT_TONE, help="Article tone")
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON")

    args = parser.parse_args()

    sys.exit(asyncio.run(run_pipeline(args.topic, args.tone, args.json)))


if __name__ == "__main__":
    main()
