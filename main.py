import asyncio
import argparse
import json
import logging
import os
import sys
import yaml
from core.config import ScanConfig, DEFAULT_SNIPPET_LIMIT, DEFAULT_SCORE_FLOOR, ALLOWED_SCORE_FLOORS
from core.engine import Engine
from core.extractor_registry import ExtractorRegistry
from core.history import ReportHistory
from core.presentation import render_text
from core.rules_validator import load_raw_patterns, print_validation_report
from core.style import Viewport
from models.report import ErrorReport
from rules.rules_loader import DEFAULT_DIRECTIVES_FILE


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Score a web page for prompt-injection content aimed at AI agents")
    parser.add_argument("url", nargs="?", help="Target URL (e.g., https://example.com)")
    parser.add_argument("--file", type=str, help="Scan a saved HTML file instead of fetching a URL (the URL argument, if given, is used as its base URL)")
    parser.add_argument("--format", type=str, default="json", choices=["json", "text"], help="Output format (default: json)")
    parser.add_argument("--score-floor", type=int, default=DEFAULT_SCORE_FLOOR, choices=ALLOWED_SCORE_FLOORS, help=f"Lowest reported score (default: {DEFAULT_SCORE_FLOOR})")
    parser.add_argument("--snippet-limit", type=int, default=DEFAULT_SNIPPET_LIMIT, help=f"Maximum length of reported snippets (default: {DEFAULT_SNIPPET_LIMIT})")
    parser.add_argument("--viewport", type=str, default="1280x800", help="Viewport used by the hidden-element heuristic, WIDTHxHEIGHT (default: 1280x800)")
    parser.add_argument("--patterns-file", type=str, help="YAML file with directive patterns (default: rules/directives.yaml)")
    parser.add_argument("--whitelist-file", type=str, help="YAML file with additional trusted domain substrings")
    parser.add_argument("--history-file", type=str, help="JSON file keeping the latest report per URL")
    parser.add_argument("--headers-file", type=str, help="Path to JSON file containing additional HTTP headers (e.g., User-Agent, Cookie)")
    parser.add_argument("--exclude", type=str, nargs="+", help="Exclude specific extractors (e.g., --exclude comments iframes)")
    parser.add_argument("--list-extractors", action="store_true", help="List all available extractors and exit")
    parser.add_argument("--validate-rules", action="store_true", help="Validate the directive pattern file and exit")
    parser.add_argument("--log-level", type=str, default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging verbosity level (default: WARNING)")
    return parser


def main():
    parser = build_parser()
    args = parser.parse_args()

    # Configure logging
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, args.log_level),
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logger = logging.getLogger(__name__)

    if args.list_extractors:
        print("Available extractors:")
        for name in ExtractorRegistry.get_all_names():
            print(f"  - {name} -> {ExtractorRegistry.get_report_field(name)}")
        return

    if args.validate_rules:
        entries = load_raw_patterns(args.patterns_file or DEFAULT_DIRECTIVES_FILE)
        ok = print_validation_report(entries)
        sys.exit(0 if ok else 1)

    if not args.url and not args.file:
        parser.error("URL or --file is required unless using --list-extractors or --validate-rules")

    # Load custom headers from JSON file if provided
    custom_headers = {}
    if args.headers_file:
        try:
            with open(args.headers_file, "r") as f:
                custom_headers = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            parser.error(f"Could not read headers file {args.headers_file}: {e}")
        if not isinstance(custom_headers, dict):
            parser.error("Headers file must contain a JSON object (dictionary)")
        logger.info(f"Loaded {len(custom_headers)} custom headers from {args.headers_file}")

    exclude_set = set(args.exclude) if args.exclude else set()
    invalid_excludes = exclude_set - set(ExtractorRegistry.get_all_names())
    if invalid_excludes:
        parser.error(f"Invalid extractor names: {', '.join(sorted(invalid_excludes))}")

    try:
        config = ScanConfig(
            patterns_file=args.patterns_file,
            whitelist_file=args.whitelist_file,
            snippet_limit=args.snippet_limit,
            score_floor=args.score_floor,
            viewport=Viewport.parse(args.viewport),
        )
    except ValueError as e:
        parser.error(str(e))

    history = ReportHistory()
    if args.history_file and os.path.exists(args.history_file):
        try:
            history.load(args.history_file)
        except (OSError, ValueError) as e:
            parser.error(f"Could not read history file {args.history_file}: {e}")
        logger.info(f"Loaded {history.size()} reports from {args.history_file}")

    try:
        engine = Engine(config=config, exclude_extractors=exclude_set, sinks=[history.record])
    except (OSError, ValueError, yaml.YAMLError) as e:
        parser.error(f"Could not load rules: {e}")

    if args.file:
        logger.info(f"Scanning file {args.file}")
        report = engine.scan_file(args.file, url=args.url)
    else:
        logger.info(f"Fetching {args.url}...")
        report = asyncio.run(engine.scan_url(args.url, headers=custom_headers))

    if args.history_file:
        history.save(args.history_file)

    if args.format == "text":
        print(render_text(report, engine.whitelist))
    else:
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))

    if isinstance(report, ErrorReport):
        sys.exit(2)


if __name__ == "__main__":
    main()
