#!/usr/bin/env python3
"""Command-line interface for notebook translation.

Usage:
    ipynb-translate translate-cell notebook.ipynb 3
    ipynb-translate translate-all notebook.ipynb -o notebook.zh.ipynb
    ipynb-translate translate-all notebook.ipynb --yes --concurrency 5
    ipynb-translate check-providers --timeout 10

Settings come from IPYNB_TRANSLATOR_* environment variables (or a .env
file); the flags below override them for one run.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from ipynb_translator.commands import translate_all_command, translate_cell_command
from ipynb_translator.exceptions import ConfigurationError
from ipynb_translator.host_ui import ConsoleUI
from ipynb_translator.llm_client import AsyncTranslationClient
from ipynb_translator.notebook import IpynbDocument
from ipynb_translator.provider_check import CHECK_TEXT, CHECK_TIMEOUT, check_providers, keys_from_env, print_summary
from ipynb_translator.providers import available_providers
from ipynb_translator.settings import TranslatorSettings, load_settings

logger = logging.getLogger(__name__)


def settings_from_args(args: argparse.Namespace) -> TranslatorSettings:
    """Environment settings with command-line overrides applied.

    Args:
        args: Parsed arguments.

    Returns:
        The effective settings.
    """
    return load_settings().with_overrides(
        provider=args.provider,
        model_name=args.model,
        custom_api_url=args.custom_url,
        concurrency=args.concurrency,
        request_timeout=args.timeout,
    )


def output_path(args: argparse.Namespace) -> Path:
    return Path(args.output) if args.output else Path(args.notebook)


def cmd_translate_cell(args: argparse.Namespace, settings: TranslatorSettings) -> int:
    """Translate one cell and save the notebook.

    Args:
        args: Parsed arguments (notebook, index, output).
        settings: Effective settings.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    document = IpynbDocument.load(args.notebook)
    if not 0 <= args.index < document.count():
        print(f"❌ Cell index {args.index} out of range (notebook has {document.count()} cells)")
        return 1

    ui = ConsoleUI()
    client = AsyncTranslationClient(timeout=settings.request_timeout)
    inserted = asyncio.run(translate_cell_command(document, args.index, client, settings, ui))
    if inserted is None:
        return 1

    document.save(output_path(args))
    logger.info("Saved %s", output_path(args))
    return 0


def cmd_translate_all(args: argparse.Namespace, settings: TranslatorSettings) -> int:
    """Translate every eligible Markdown cell and save the notebook.

    Ctrl-C while the batch runs stops new requests from starting; the ones
    already sent finish and are still written back.

    Args:
        args: Parsed arguments (notebook, output, yes).
        settings: Effective settings.

    Returns:
        Exit code (0 when nothing failed, 1 otherwise).
    """
    document = IpynbDocument.load(args.notebook)
    ui = ConsoleUI(assume_yes=args.yes)
    client = AsyncTranslationClient(timeout=settings.request_timeout)

    summary = asyncio.run(translate_all_command(document, client, settings, ui))
    if summary is None:
        return 1

    if summary.successful:
        document.save(output_path(args))
        logger.info("Saved %s", output_path(args))
    return 0 if summary.failed == 0 else 1


def cmd_check_providers(args: argparse.Namespace) -> int:
    """Send a test request to every provider with a configured key.

    Args:
        args: Parsed arguments (text, timeout).

    Returns:
        Exit code (0 when every checked provider answered).
    """
    results = asyncio.run(check_providers(keys_from_env(), text=args.text, timeout=args.timeout or CHECK_TIMEOUT))
    print_summary(results)
    return 0 if all(result.success for result in results.values()) else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ipynb-translate",
        description="Translate Markdown cells of Jupyter notebooks with an LLM API.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--provider", choices=available_providers(), help="Translation provider")
    common.add_argument("--model", help="Model name")
    common.add_argument("--custom-url", help="API URL for the 'custom' provider")
    common.add_argument("--concurrency", type=int, help="Parallel requests in batch mode")
    common.add_argument("--timeout", type=float, help="Request timeout in seconds")

    sub = parser.add_subparsers(dest="command", required=True)

    cell = sub.add_parser("translate-cell", parents=[common], help="Translate one Markdown cell")
    cell.add_argument("notebook", help="Path to the .ipynb file")
    cell.add_argument("index", type=int, help="Zero-based cell index")
    cell.add_argument("-o", "--output", help="Write the result here instead of in place")

    batch = sub.add_parser("translate-all", parents=[common], help="Translate all Markdown cells")
    batch.add_argument("notebook", help="Path to the .ipynb file")
    batch.add_argument("-o", "--output", help="Write the result here instead of in place")
    batch.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")

    check = sub.add_parser("check-providers", help="Test every provider with a configured API key")
    check.add_argument("--text", default=CHECK_TEXT, help="Text to translate")
    check.add_argument("--timeout", type=float, default=CHECK_TIMEOUT, help="Request timeout in seconds")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    if args.command == "check-providers":
        return cmd_check_providers(args)

    try:
        settings = settings_from_args(args)
    except ConfigurationError as e:
        print(f"❌ {e}")
        return 1

    try:
        if args.command == "translate-cell":
            return cmd_translate_cell(args, settings)
        return cmd_translate_all(args, settings)
    except (OSError, ValueError) as e:
        print(f"❌ Cannot process {args.notebook}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
