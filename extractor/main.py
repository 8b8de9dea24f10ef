"""Command-line entry point for the job text extractor."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from extractor.config.environment import EnvironmentConfig
from extractor.config.exceptions import ConfigurationError
from extractor.config.loader import load_config
from extractor.config.models import AppConfig, TransportConfig, TransportType
from extractor.exceptions import ExtractorError
from extractor.logging import get_logger
from extractor.logging.config import configure_logging
from extractor.pages import FilePage, HttpPage, PageSource, discover_frame_urls
from extractor.pipeline import ExtractionPipeline, ExtractionRequest, ExtractionRunResult
from extractor.transport import create_transport

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str], transport_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and apply command-line overrides.

    Log level priority: CLI > environment > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level

    if transport_override:
        try:
            transport = TransportConfig(
                **{**app_config.transport.model_dump(), "type": transport_override}
            )
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid transport override: {e}",
                suggestions=["Set transport.command in config.yaml or NATIVE_HOST_COMMAND in .env"],
            ) from e
        app_config = app_config.model_copy(update={"transport": transport})

    return app_config, env_config


async def build_request(args: argparse.Namespace, pipeline: ExtractionPipeline) -> ExtractionRequest:
    """
    Build the document contexts for a request.

    The top page comes from --html when given, otherwise from an HTTP fetch.
    Frames named with --frame always become contexts; frames declared in the
    top document become contexts only with --fetch-frames and otherwise just
    inform classification.
    """
    if args.html:
        top: PageSource = FilePage(args.html, url=args.url)
    else:
        top = HttpPage(args.url, pipeline.client)

    discovered = discover_frame_urls(await top.snapshot(), args.url)
    explicit: List[str] = list(args.frame or [])

    frame_pages: List[PageSource] = []
    fetched = explicit + ([u for u in discovered if u not in explicit] if args.fetch_frames else [])
    for index, frame_url in enumerate(fetched, 1):
        frame_pages.append(HttpPage(frame_url, pipeline.client, context_id=f"frame-{index}"))

    logger.debug(
        "Document contexts prepared",
        extra={
            "event": "cli.contexts.prepared",
            "discovered_frames": len(discovered),
            "frame_contexts": len(frame_pages),
        },
    )

    return ExtractionRequest(
        url=args.url,
        pages=[top, *frame_pages],
        tab_id=args.tab_id,
        frame_urls=[u for u in discovered if u not in fetched],
    )


async def run_extraction(args: argparse.Namespace, app_config: AppConfig, env_config: EnvironmentConfig) -> ExtractionRunResult:
    transport = create_transport(app_config.transport)
    pipeline = ExtractionPipeline(app_config=app_config, env_config=env_config, transport=transport)
    try:
        request = await build_request(args, pipeline)
        return await pipeline.run(request)
    finally:
        pipeline.client.close()


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the job text extractor.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    parser = argparse.ArgumentParser(
        description="Job Text Extractor - extract a job posting's text and hand it to the analysis host"
    )
    parser.add_argument("url", help="URL of the job posting page")
    parser.add_argument(
        "--html",
        type=Path,
        default=None,
        help="Read the top page from a saved HTML file instead of fetching it",
    )
    parser.add_argument(
        "--frame",
        action="append",
        metavar="URL",
        help="Frame URL to read as an additional document context (repeatable)",
    )
    parser.add_argument(
        "--fetch-frames",
        action="store_true",
        help="Also read every frame declared in the top page",
    )
    parser.add_argument("--tab-id", default=None, help="Caller identifier recorded in the payload")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml if present)",
    )
    parser.add_argument(
        "--transport",
        default=None,
        choices=[t.value for t in TransportType],
        help="Transport override (console prints the payload)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )

    args = parser.parse_args(argv)

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level, args.transport)
        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )

        result = asyncio.run(run_extraction(args, app_config, env_config))

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        return 1
    except ExtractorError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130

    if not result.succeeded:
        print(f"Extraction failed: {result.error_message}", file=sys.stderr)
        return 1

    saved = f", saved as {result.ack.filename}" if result.ack and result.ack.filename else ""
    print(
        f"Extracted {result.result.content_length} characters via {result.path} "
        f"({result.result.source_kind.value}){saved}",
        file=sys.stderr,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
