# main.py
# Version 01.00.00.00 dated 20261019
#!/usr/bin/env python3

"""
main.py

Command line entry point for EasyGallery.

Usage:
  easygallery index ~/Pictures
  easygallery watch add ~/Pictures --name "Family" --auto
  easygallery reindex --auto-only
  easygallery tag create Clara person --color "#F59E0B"
  easygallery tag add ~/Pictures/beach.jpg Clara
  easygallery search --persons Clara Romaric --persons-op AND --locations Paris
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from app_services import GalleryServices
from errors import GalleryError
from logging_config import setup_logging, get_logger, disable_external_logging
from services import ScanProgress
from settings_manager import SettingsManager

logger = get_logger(__name__)


def _abs(path: str) -> str:
    """Catalog keys are resolved absolute paths."""
    return str(Path(path).expanduser().resolve())


def _print_json(data):
    print(json.dumps(data, indent=2, default=str))


def _print_progress(progress: ScanProgress):
    print(f"\r[{progress.percent:3d}%] {progress.current}/{progress.total} {progress.current_file}",
          end="", file=sys.stderr, flush=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="easygallery", description="Index and search a tagged photo collection")
    parser.add_argument("--settings", help="Path of settings.json")
    parser.add_argument("--data-dir", help="Override the data folder (database + thumbnails)")
    parser.add_argument("--log-level", help="Override the log level")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("index", help="Index a folder once")
    p.add_argument("path")
    p.add_argument("--quiet", action="store_true", help="No progress output")

    watch = sub.add_parser("watch", help="Manage watched folders")
    watch_sub = watch.add_subparsers(dest="watch_command", required=True)
    p = watch_sub.add_parser("add")
    p.add_argument("path")
    p.add_argument("--name", default="")
    p.add_argument("--auto", action="store_true", help="Include in automatic re-index")
    p = watch_sub.add_parser("update")
    p.add_argument("path")
    p.add_argument("--name", default="")
    p.add_argument("--auto", action="store_true")
    p = watch_sub.add_parser("remove")
    p.add_argument("path")
    watch_sub.add_parser("list")
    p = watch_sub.add_parser("index", help="Index one watched folder")
    p.add_argument("path")

    p = sub.add_parser("reindex", help="Re-index all watched folders")
    p.add_argument("--auto-only", action="store_true")

    tag = sub.add_parser("tag", help="Manage tags")
    tag_sub = tag.add_subparsers(dest="tag_command", required=True)
    p = tag_sub.add_parser("create")
    p.add_argument("name")
    p.add_argument("category", choices=["person", "location", "event", "other"])
    p.add_argument("--color", default="")
    p = tag_sub.add_parser("update")
    p.add_argument("name")
    p.add_argument("category", choices=["person", "location", "event", "other"])
    p.add_argument("--color", default="")
    p = tag_sub.add_parser("delete")
    p.add_argument("name")
    p = tag_sub.add_parser("list")
    p.add_argument("--counts", action="store_true")
    p = tag_sub.add_parser("add", help="Tag a picture")
    p.add_argument("picture")
    p.add_argument("name")
    p = tag_sub.add_parser("remove", help="Untag a picture")
    p.add_argument("picture")
    p.add_argument("name")
    p = tag_sub.add_parser("show", help="Tags of a picture")
    p.add_argument("picture")

    p = sub.add_parser("search", help="Search pictures by tags")
    for group in ("persons", "locations", "events", "others"):
        p.add_argument(f"--{group}", nargs="+", default=[])
        p.add_argument(f"--{group}-op", default="AND", choices=["AND", "OR", "and", "or"])
    p.add_argument("--json", dest="criteria_json", help="Criteria as a JSON document")

    p = sub.add_parser("pictures", help="List indexed pictures")
    p.add_argument("--count", action="store_true")

    p = sub.add_parser("delete", help="Remove a picture from the catalog")
    p.add_argument("path")
    p.add_argument("--from-disk", action="store_true")

    return parser


def _search_criteria(args) -> dict:
    """
    Raises:
        ValueError: --json is not valid JSON or not a JSON object
    """
    if args.criteria_json:
        data = json.loads(args.criteria_json)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return data
    return {
        group: {"tags": getattr(args, group), "operator": getattr(args, f"{group}_op")}
        for group in ("persons", "locations", "events", "others")
    }


def run(args, gallery: GalleryServices) -> int:
    if args.command == "index":
        result = gallery.index_folder(args.path, None if args.quiet else _print_progress)
        if not args.quiet:
            print(file=sys.stderr)
        print(f"Indexed {result.photos_indexed} pictures "
              f"({result.photos_skipped} unchanged, {result.photos_failed} failed)")
        for warning in result.warnings:
            print(f"warning: {warning}", file=sys.stderr)

    elif args.command == "watch":
        if args.watch_command == "add":
            _print_json(gallery.add_watched_folder(args.path, args.name, args.auto))
        elif args.watch_command == "update":
            _print_json(gallery.update_watched_folder(args.path, args.name, args.auto))
        elif args.watch_command == "remove":
            gallery.remove_watched_folder(args.path)
        elif args.watch_command == "list":
            _print_json(gallery.get_watched_folders())
        elif args.watch_command == "index":
            result = gallery.index_watched_folder(args.path)
            print(f"Indexed {result.photos_indexed} pictures")
            if result.stats_error:
                print(f"warning: {result.stats_error}", file=sys.stderr)

    elif args.command == "reindex":
        print(f"Indexed {gallery.reindex_all_watched_folders(only_auto=args.auto_only)} pictures")

    elif args.command == "tag":
        if args.tag_command == "create":
            _print_json(gallery.create_tag(args.name, args.category, args.color))
        elif args.tag_command == "update":
            _print_json(gallery.update_tag(args.name, args.category, args.color))
        elif args.tag_command == "delete":
            gallery.delete_tag(args.name)
        elif args.tag_command == "list":
            _print_json(gallery.get_all_tags_with_count() if args.counts else gallery.get_all_tags())
        elif args.tag_command == "add":
            gallery.add_tag_to_picture(_abs(args.picture), args.name)
        elif args.tag_command == "remove":
            gallery.remove_tag_from_picture(_abs(args.picture), args.name)
        elif args.tag_command == "show":
            _print_json(gallery.get_tags_for_picture(_abs(args.picture)))

    elif args.command == "search":
        _print_json(gallery.search_pictures_advanced(args.criteria))

    elif args.command == "pictures":
        if args.count:
            print(gallery.get_picture_count())
        else:
            _print_json(gallery.get_indexed_pictures())

    elif args.command == "delete":
        _print_json(gallery.delete_picture(_abs(args.path), args.from_disk).__dict__)

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "search":
        try:
            args.criteria = _search_criteria(args)
        except ValueError as e:
            print(f"error: invalid criteria JSON: {e}", file=sys.stderr)
            return 2

    settings = SettingsManager(args.settings)
    if args.data_dir:
        settings.override("data_dir", args.data_dir)

    log_file = settings.log_file()
    setup_logging(
        log_level=args.log_level or settings.get("log_level", "INFO"),
        console=settings.get("log_to_console", True),
        use_colors=settings.get("log_colored_output", True),
        log_file=str(log_file) if log_file else None
    )
    disable_external_logging()

    try:
        gallery = GalleryServices.from_settings(settings)
        return run(args, gallery)
    except GalleryError as e:
        logger.error(f"{type(e).__name__}: {e}")
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
