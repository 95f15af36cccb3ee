"""
HLSA command line analyzer.

Usage:
    hlsa-analyze answer.txt
    hlsa-analyze answer.txt --delays 1800,2100,950
    hlsa-analyze - --json < answer.txt
    hlsa-analyze answer.txt --offline   # skip the LLM judges
"""

import argparse
import asyncio
import json
import sys
from typing import Optional

from hlsa.api.schemas import AnalysisReport
from hlsa.services.analyzer import AnalysisError, AnalysisService
from hlsa.services.llm_client import LLMClient


class OfflineClient:
    """Completion client that always fails, so every LLM judge falls back."""

    async def complete(self, messages, temperature=0.3, max_tokens=250) -> str:
        raise ConnectionError("offline mode")


def parse_delays(value: str) -> list[int]:
    """Parse a comma-separated list of millisecond delays."""
    if not value:
        return []
    try:
        delays = [int(part) for part in value.split(",") if part.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid delay list: {value!r}")
    if any(d < 0 for d in delays):
        raise argparse.ArgumentTypeError("Delays must be non-negative")
    return delays


def format_report(report: AnalysisReport) -> str:
    """Render a report as plain text."""
    lines = [
        f"Classification: {report.classification.value}",
        f"Human-likeness: {report.overall_human_likeness_score:.3f}",
        "",
        "Text structure:",
        f"  tokens={report.text_structure.token_count} "
        f"sentences={report.text_structure.sentence_count} "
        f"diversity={report.text_structure.lexical_diversity:.3f} "
        f"avg_sentence={report.text_structure.avg_sentence_length:.1f}",
        "  key terms: " + ", ".join(k.term for k in report.text_structure.key_terms),
        "",
        f"AI similarity: {report.ai_similarity.overall_score:.3f}",
        f"  vocabulary complexity: {report.ai_similarity.vocabulary_complexity:.3f}",
        f"  emotional fluctuation: {report.ai_similarity.emotional_fluctuation:.3f}",
        f"  creative divergence:   {report.ai_similarity.creative_divergence:.3f}",
        "",
        f"Innovation features: {report.innovation_features.overall_score:.3f}",
    ]
    features = report.innovation_features.model_dump(exclude={"overall_score"})
    for name, feature in features.items():
        lines.append(f"  {name.replace('_', ' ')}: {feature['score']:.2f}")
    return "\n".join(lines)


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Score a text for human-likeness",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("file", help="Text file to analyze ('-' for stdin)")
    parser.add_argument("--delays", type=parse_delays, default=[],
                        help="Comma-separated typing delays in milliseconds")
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    parser.add_argument("--offline", action="store_true",
                        help="Do not call the LLM; judges report neutral fallbacks")
    args = parser.parse_args(argv)

    if args.file == "-":
        text = sys.stdin.read()
    else:
        with open(args.file, encoding="utf-8") as f:
            text = f.read()

    if not text.strip():
        print("Error: text is empty", file=sys.stderr)
        return 2

    client = OfflineClient() if args.offline else LLMClient()
    service = AnalysisService(client)

    try:
        report = asyncio.run(service.analyze(text, response_delays=args.delays))
    except AnalysisError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(report.model_dump(mode="json"), indent=2, ensure_ascii=False))
    else:
        print(format_report(report))
    return 0


if __name__ == "__main__":
    sys.exit(main())
