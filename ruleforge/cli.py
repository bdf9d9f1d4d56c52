"""CLI entrypoints for ruleforge commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import CONFIG_FILENAME, ConfigError, load_config
from .fetching import FetchError, LocalContentTree, discover_candidates, fetch_bodies
from .frontmatter import standardize
from .logging import configure_logging
from .models import ContentType
from .pipeline import GenerationPipeline, GenerationSummary, NothingToAdaptError
from .platforms import DEFAULT_REGISTRY
from .validation import validate_rules


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_path_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ruleforge",
        description="Select relevant AI assistant rules for a project and render them per platform.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Score, select and adapt blueprints for the detected platforms.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_path_argument(generate_parser)
    generate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List the files that would be written without touching the disk.",
    )
    generate_parser.add_argument(
        "--platform",
        help="Generate for this platform only, skipping detection.",
    )
    generate_parser.add_argument(
        "--source",
        help="Local blueprint directory to use instead of the configured source.",
    )
    generate_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the generation summary as JSON.",
    )

    detect_parser = subparsers.add_parser(
        "detect",
        help="Show detected platforms and the chosen primary platform.",
    )
    _add_verbose_option(detect_parser, suppress_default=True)
    _add_path_argument(detect_parser)

    platforms_parser = subparsers.add_parser(
        "platforms",
        help="List supported platforms and their limits.",
    )
    _add_verbose_option(platforms_parser, suppress_default=True)

    validate_parser = subparsers.add_parser(
        "validate",
        help="Check blueprint frontmatter in a local blueprint directory.",
    )
    _add_verbose_option(validate_parser, suppress_default=True)
    validate_parser.add_argument("directory", help="Blueprint directory (the one holding rules/ and commands/).")

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="0.0.0.0", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for ruleforge commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = None
    if args.command in {"generate", "detect"}:
        try:
            log_file = load_config(Path(args.path).expanduser() / CONFIG_FILENAME).log_file
        except ConfigError as exc:
            parser.exit(1, f"ruleforge {args.command} failed: {exc}\n")
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    if args.command == "generate":
        pipeline = GenerationPipeline()
        try:
            summary = pipeline.run(
                args.path,
                dry_run=bool(args.dry_run),
                platform=args.platform,
                source=args.source,
            )
        except NothingToAdaptError as exc:
            print(f"Nothing to adapt: {exc}")
            return
        except FileNotFoundError as exc:
            parser.exit(1, f"{exc}\n")
        except (ConfigError, FetchError) as exc:
            parser.exit(1, f"ruleforge generate failed: {exc}\n")
        except Exception as exc:  # pragma: no cover - unexpected failure
            parser.exit(1, f"ruleforge generate failed: {exc}\nRun with --verbose for more details.\n")
        if args.json:
            print(json.dumps(summary.to_dict(), indent=2))
        else:
            _print_summary(summary)
    elif args.command == "detect":
        pipeline = GenerationPipeline()
        try:
            detected, choice = pipeline.detect(args.path)
        except ConfigError as exc:
            parser.exit(1, f"ruleforge detect failed: {exc}\n")
        if not detected:
            print("No platforms detected")
        for item in detected:
            indicators = "; ".join(item.indicators)
            print(f"{item.platform_id}: {item.confidence.value} ({indicators})")
        if choice.platform_id:
            suffix = " (ambiguous)" if choice.ambiguous else ""
            print(f"Primary platform: {choice.platform_id}{suffix} - {choice.reason}")
    elif args.command == "platforms":
        for capability in DEFAULT_REGISTRY:
            limits = {key: value for key, value in vars(capability.limits).items() if value is not None}
            described = ", ".join(f"{key}={value}" for key, value in limits.items()) or "no limits"
            print(f"{capability.id:<16} {capability.name:<22} {described}")
    elif args.command == "validate":
        directory = Path(args.directory)
        if not directory.is_dir():
            parser.exit(1, f"Blueprint directory not found: {directory}\n")
        tree = LocalContentTree(directory)
        candidates = discover_candidates(tree, [ContentType.RULE, ContentType.COMMAND])
        fetched = fetch_bodies(tree, candidates)
        rules = [standardize(item, item.raw_content or "") for item in fetched.documents]
        _, report = validate_rules(rules)
        for issue in report.issues:
            print(f"{issue.rule}: {issue.field}: {issue.detail}")
        print(f"Checked {report.checked} blueprint(s), {len(report.issues)} issue(s)")
        if not report.ok:
            parser.exit(1)
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _print_summary(summary: GenerationSummary) -> None:
    if summary.reason and not summary.results:
        print(summary.reason)
        return
    primary = summary.primary or "none"
    if summary.ambiguous:
        primary += " (ambiguous)"
    print(f"Primary platform: {primary}")
    for result in summary.results:
        line = (
            f"  {result.platform_id}: {result.summary.generated} file(s), "
            f"{result.summary.skipped} skipped, {result.summary.truncated} truncated"
        )
        if result.summary.reason:
            line += f" ({result.summary.reason})"
        print(line)
    for platform_id, error in summary.platform_errors.items():
        print(f"  {platform_id}: failed ({error})")
    if summary.dry_run:
        print("Files that would be written (dry-run):")
        for path in summary.write.planned:
            print(f"  {_relativize(path)}")
    else:
        print(f"Wrote {len(summary.write.written)} file(s), {len(summary.write.unchanged)} unchanged")
    for failure in summary.write.failures:
        print(f"  failed to write {_relativize(failure.path)}: {failure.error}")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
