from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import VIEW_PRESETS, configure_logging, load_config
from .github_api import GitHubSession
from .models import RequestState, SortKey
from .report import render_markdown, write_report
from .search import ProfileSearch

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitfinder",
        description="Look up a GitHub profile and summarise its repositories and activity.",
    )
    parser.add_argument("handle", help="GitHub username, e.g. octocat")
    parser.add_argument("--config", type=Path, help="Path to settings YAML file", default=None)
    parser.add_argument("--variant", choices=sorted(VIEW_PRESETS), help="View preset to render")
    parser.add_argument("--language", help="Only list repositories written in this language ('all' for every one)")
    parser.add_argument("--sort", dest="sort_key", choices=[key.value for key in SortKey], help="Repository ordering")
    parser.add_argument("--output-dir", dest="output_dir", type=Path, help="Write the report here instead of stdout")
    parser.add_argument("--log-level", dest="log_level", help="Logging level, e.g. DEBUG")
    return parser


def app(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        if args.variant:
            config.view = config.view.with_variant(args.variant)
        if args.output_dir:
            config.output.directory = args.output_dir
        if args.log_level:
            config.logging.level = args.log_level.upper()
        configure_logging(config.logging)
    except ValueError as exc:
        parser.error(str(exc))

    with GitHubSession.create(config.api) as session:
        searcher = ProfileSearch(session, config)
        try:
            result = searcher.search(args.handle)
        except ValueError as exc:
            parser.error(str(exc))
        if result.state is not RequestState.ERROR and (args.language or args.sort_key):
            result = searcher.select(language=args.language, sort_key=args.sort_key)

    if result.state is RequestState.ERROR:
        print(result.error, file=sys.stderr)
        return 1
    if result.failures:
        logger.info("Rendered %s without: %s", result.handle, ", ".join(result.failures))

    if config.output.directory:
        report_path = write_report(result, config.view, config.output.directory)
        print(f"Report generated: {report_path}")
    else:
        sys.stdout.write(render_markdown(result, config.view))
    return 0


def main() -> None:  # pragma: no cover
    sys.exit(app(sys.argv[1:]))


if __name__ == "__main__":  # pragma: no cover
    main()
