"""
otzaria-toolkit: command-line front-end for the transform engine.

Usage:
  otzaria-toolkit <command> [options]

Commands:
  process   Load files/folders, apply a YAML recipe of transforms, write a ZIP.
  scan      List the split candidates a split step would propose.
  outline   Print the h1–h4 heading outline of one file with raw-text offsets.

Recipe format (YAML)::

    steps:
      - merge: {source: h4, target: h5, exclude: "intro, preface"}
      - replace_headings: {scope: all, find: "^Chapter (\\d+)", replace: "Ch. \\1"}
      - global_replace: {find: "&nbsp;", replace: " "}
      - split: {method: tag, tag: h2, book_name: "", author: "", exclude: "", skip: ["0-3"]}
      - normalize: {skip: [h1]}
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from otzaria_toolkit.config import ConfigManager
from otzaria_toolkit.core.models import SplitConfig, SplitMethod
from otzaria_toolkit.core.services.structure_editing_service import (
    OperationResult,
    StructureEditingService,
)
from otzaria_toolkit.logging_config import setup_logging
from otzaria_toolkit.version import get_app_version

logger = logging.getLogger(__name__)

__all__ = ["build_parser", "main", "run_recipe", "split_config_from"]


class RecipeError(ValueError):
    """The recipe file is malformed."""


def split_config_from(options: Dict[str, Any]) -> SplitConfig:
    """Build a :class:`SplitConfig` from a recipe/CLI mapping."""
    defaults = ConfigManager().get_section("split")
    return SplitConfig(
        method=SplitMethod(options.get("method", defaults.get("method", "tag"))),
        tag=str(options.get("tag", defaults.get("tag", "h2"))),
        pattern=str(options.get("pattern", "") or ""),
        book_name=str(options.get("book_name", "") or ""),
        author=str(options.get("author", "") or ""),
        exclude=str(options.get("exclude", "") or ""),
    )


def _run_split(service: StructureEditingService, options: Dict[str, Any]) -> OperationResult:
    scanned = service.scan_split(split_config_from(options))
    if not scanned.success:
        return scanned
    for candidate_id in options.get("skip", []) or []:
        service.set_split_flag(str(candidate_id), "should_split", False)
    return service.commit_split()


def _step_handlers(service: StructureEditingService):
    merge_defaults = ConfigManager().get_section("merge")
    return {
        "merge": lambda o: service.merge_headings(
            o.get("source", merge_defaults.get("source_tag", "h4")),
            o.get("target", merge_defaults.get("target_tag", "h5")),
            o.get("exclude", "") or "",
        ),
        "replace_headings": lambda o: service.replace_in_headings(
            o.get("scope", "all"), o.get("find", "") or "", o.get("replace", "") or ""
        ),
        "global_replace": lambda o: service.global_replace(
            o.get("find", "") or "", o.get("replace", "") or ""
        ),
        "split": lambda o: _run_split(service, o),
        "normalize": lambda o: service.normalize_hierarchy(o.get("skip", []) or []),
    }


def run_recipe(service: StructureEditingService, recipe: Dict[str, Any]) -> List[OperationResult]:
    """Apply every step of *recipe* in order; returns one result per step."""
    steps = recipe.get("steps") if isinstance(recipe, dict) else None
    if not isinstance(steps, list):
        raise RecipeError("Recipe must contain a 'steps' list.")
    handlers = _step_handlers(service)
    results: List[OperationResult] = []
    for position, step in enumerate(steps, start=1):
        if not isinstance(step, dict) or len(step) != 1:
            raise RecipeError(f"Step {position} must be a single-key mapping.")
        (name, options), = step.items()
        handler = handlers.get(name)
        if handler is None:
            raise RecipeError(f"Step {position}: unknown operation '{name}'.")
        logger.info("Recipe step %d: %s", position, name)
        results.append(handler(options or {}))
    return results


def _load_recipe(path: Path) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise RecipeError(f"Invalid recipe {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise RecipeError(f"Recipe {path} must be a mapping.")
    return data


def _print_log(service: StructureEditingService) -> None:
    for entry in reversed(service.log_entries()):
        print(f"[{entry.timestamp}] {entry.level:<7} {entry.message}")


def _cmd_process(args: argparse.Namespace) -> int:
    service = StructureEditingService()
    service.load_paths(args.inputs)
    run_recipe(service, _load_recipe(Path(args.recipe)))
    service.save_archive(args.output)
    _print_log(service)
    return 0


def _cmd_scan(args: argparse.Namespace) -> int:
    service = StructureEditingService()
    service.load_paths(args.inputs)
    result = service.scan_split(split_config_from({
        "method": args.method,
        "tag": args.tag,
        "pattern": args.pattern,
        "exclude": args.exclude,
    }))
    if not result.success:
        print(result.message, file=sys.stderr)
        return 1
    names = service.store.names()
    for c in service.split_review.candidates:
        print(f"{c.id}\t{names[c.document_index]}\t{c.original_text}")
    return 0


def _cmd_outline(args: argparse.Namespace) -> int:
    service = StructureEditingService()
    service.load_paths([args.file])
    for entry in service.heading_outline(0):
        print(f"{'  ' * (entry.level - 1)}h{entry.level} {entry.text}\t@{entry.offset}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="otzaria-toolkit",
        description="Restructure batches of HTML-like text documents.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"otzaria-toolkit {get_app_version()}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_process = subparsers.add_parser("process", help="apply a recipe and write a ZIP archive")
    p_process.add_argument("inputs", nargs="+", help="files or folders to load")
    p_process.add_argument("--recipe", required=True, help="YAML recipe file")
    p_process.add_argument("--output", default=".", help="directory for the ZIP archive")
    p_process.set_defaults(func=_cmd_process)

    p_scan = subparsers.add_parser("scan", help="list split candidates")
    p_scan.add_argument("inputs", nargs="+", help="files or folders to load")
    p_scan.add_argument("--method", choices=[m.value for m in SplitMethod], default="tag")
    p_scan.add_argument("--tag", default="h2")
    p_scan.add_argument("--pattern", default="")
    p_scan.add_argument("--exclude", default="")
    p_scan.set_defaults(func=_cmd_scan)

    p_outline = subparsers.add_parser("outline", help="print the heading outline of a file")
    p_outline.add_argument("file")
    p_outline.set_defaults(func=_cmd_outline)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging()
    try:
        return args.func(args)
    except (RecipeError, OSError, UnicodeDecodeError) as exc:
        logger.error("Command failed: %s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
