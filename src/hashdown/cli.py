"""Command-line interface for Hashdown."""

from __future__ import annotations

import argparse
import logging
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from hashdown.context import DEFAULT_MAX_DEPTH
from hashdown.errors import NestingError

logger = logging.getLogger(__name__)

CONFIG_NAME = "hashdown.toml"


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path | None
    output_file: Path | None
    max_depth: int
    inline: bool
    standalone: bool
    title: str | None
    lang: str | None
    css_files: list[str]
    meta_tags: list[tuple[str, str]]
    verbose: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="hashdown",
        description="Convert Markdown to HTML",
    )
    p.add_argument("input", nargs="?", default="-", help="Input file (default: stdin)")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"Config file (default: auto-discover {CONFIG_NAME})",
    )
    p.add_argument(
        "--max-depth",
        type=int,
        default=None,
        metavar="N",
        help=f"Maximum nesting of quotes and lists (default: {DEFAULT_MAX_DEPTH})",
    )
    p.add_argument("--inline", action="store_true", help="Apply inline rules only")
    p.add_argument(
        "--standalone",
        action="store_true",
        default=None,
        help="Wrap the output in a complete HTML document",
    )
    p.add_argument("--title", help="Document title (with --standalone)")
    p.add_argument("--lang", help="Document language (with --standalone)")
    p.add_argument(
        "--css",
        action="append",
        default=[],
        metavar="FILE",
        help="CSS file to link (repeatable)",
    )
    p.add_argument(
        "--meta",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Meta tag to add (repeatable)",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    return p


def parse_meta_arg(s: str) -> tuple[str, str]:
    """Parse a NAME=VALUE string into (name, value) for meta tags."""
    if "=" not in s:
        raise argparse.ArgumentTypeError(f"invalid meta format (expected NAME=VALUE): {s}")
    name, _, value = s.partition("=")
    return name, value


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / CONFIG_NAME

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    input_file = None if args.input == "-" else Path(args.input)
    input_dir = input_file.parent if input_file is not None else Path(".")
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    try:
        config = load_config(config_path, input_dir)
    except tomllib.TOMLDecodeError as exc:
        raise argparse.ArgumentTypeError(f"invalid config file: {exc}") from exc

    # Nesting limit: config < CLI
    max_depth = DEFAULT_MAX_DEPTH
    cfg_parser = config.get("parser")
    if isinstance(cfg_parser, dict):
        cfg_depth = cfg_parser.get("max_depth")
        if isinstance(cfg_depth, int):
            max_depth = cfg_depth
    if args.max_depth is not None:
        max_depth = args.max_depth
    if max_depth < 1:
        raise argparse.ArgumentTypeError(f"max depth must be at least 1: {max_depth}")

    # Document wrapper: config < CLI
    standalone = False
    title: str | None = None
    lang: str | None = None
    cfg_doc = config.get("document")
    if isinstance(cfg_doc, dict):
        standalone = bool(cfg_doc.get("standalone", False))
        if cfg_doc.get("title") is not None:
            title = str(cfg_doc["title"])
        if cfg_doc.get("lang") is not None:
            lang = str(cfg_doc["lang"])
    if args.standalone is not None:
        standalone = args.standalone
    if args.title is not None:
        title = args.title
    if args.lang is not None:
        lang = args.lang

    # CSS files: config < CLI
    css_files: list[str] = []
    cfg_css = config.get("css")
    if isinstance(cfg_css, dict):
        cfg_css_files = cfg_css.get("files")
        if isinstance(cfg_css_files, list):
            css_files.extend(str(f) for f in cfg_css_files)
    css_files.extend(args.css)

    # Meta tags: config < CLI
    meta_tags: list[tuple[str, str]] = []
    cfg_meta = config.get("meta")
    if isinstance(cfg_meta, dict):
        for k, v in cfg_meta.items():
            meta_tags.append((str(k), str(v)))
    for raw in args.meta:
        meta_tags.append(parse_meta_arg(raw))

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        max_depth=max_depth,
        inline=args.inline,
        standalone=standalone,
        title=title,
        lang=lang,
        css_files=css_files,
        meta_tags=meta_tags,
        verbose=args.verbose,
    )


def compile_source(source: str, options: CliOptions, filename: str = "<stdin>") -> str:
    """Convert Markdown source to HTML according to *options*."""
    from hashdown.document import wrap_document
    from hashdown.pipeline import Markdown
    from hashdown.escapes import normalize_newlines
    from hashdown.references import extract_references, find_unresolved

    for ref in find_unresolved(source):
        logger.warning(
            "%s:%d:%d: unresolved reference '%s'", filename, ref.line, ref.column, ref.label
        )

    engine = Markdown(options.max_depth)
    if options.inline:
        # Definition lines are dropped and resolve links, as in a full parse
        text, engine.references = extract_references(normalize_newlines(source))
        html = engine.transform_inline(text)
    else:
        html = engine.parse(source)

    if options.standalone:
        html = wrap_document(
            html,
            title=options.title,
            lang=options.lang,
            css_files=options.css_files,
            meta_tags=options.meta_tags,
        )
    return html


def compile_file(options: CliOptions) -> str:
    """Read the input named in *options* and convert it to HTML."""
    if options.input_file is None:
        return compile_source(sys.stdin.read(), options)
    source = options.input_file.read_text(encoding="utf-8")
    return compile_source(source, options, str(options.input_file))


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=logging.DEBUG if options.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    filename = str(options.input_file) if options.input_file is not None else "<stdin>"
    try:
        html = compile_file(options)
    except NestingError as exc:
        print(exc.format(filename), file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if options.output_file:
        options.output_file.write_text(html, encoding="utf-8")
    else:
        sys.stdout.write(html)
        if html and not html.endswith("\n"):
            sys.stdout.write("\n")

    return 0
