from __future__ import annotations

import argparse
import json
import os
import sys
from typing import List, Optional

from tagfixer import config
from tagfixer import logger as logger_mod
from tagfixer.archive import ArchiveError, archive_name, build_archive
from tagfixer.batch import ORACLE_MODES, BatchItemResult, TagFixer, collect_items
from tagfixer.codec import CodecError, FfmpegCodec
from tagfixer.helpers import strip_extension
from tagfixer.id3.reader import TagReader

log = logger_mod.get_logger()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tagfixer",
        description="Repair Shift-JIS mojibake in MP3 tags and rewrite them as ID3v2.3 / UTF-16",
    )
    parser.add_argument("--log-level", help="Python logging level (overrides LOGGING_LEVEL)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    fix = subparsers.add_parser("fix", help="Rewrite the tags of MP3 files or folders")
    fix.add_argument("paths", nargs="+", help="MP3 files or folders (folder name becomes the album)")
    out = fix.add_mutually_exclusive_group()
    out.add_argument("--out-dir", help="Write fixed files into this directory")
    out.add_argument("--zip", dest="zip_path", help="Write fixed files into this ZIP archive")
    fix.add_argument(
        "--oracle",
        choices=ORACLE_MODES,
        default="off",
        help="Ask the LLM for metadata: never, when tags are unusable, or always",
    )
    fix.add_argument("--workers", type=int, default=config.MAX_WORKERS)

    show = subparsers.add_parser("show", help="Print resolved metadata without writing")
    show.add_argument("paths", nargs="+")
    show.add_argument("--json", action="store_true", help="One JSON object per file")

    inspect = subparsers.add_parser("inspect", help="Print tags as music-tag reads them")
    inspect.add_argument("path")

    convert = subparsers.add_parser("convert", help="Transcode WMA files to MP3")
    convert.add_argument("paths", nargs="+")
    convert.add_argument("--out-dir", required=True)

    split = subparsers.add_parser("split", help="Split an MP3 file")
    split.add_argument("path")
    how = split.add_mutually_exclusive_group(required=True)
    how.add_argument("--every", type=float, help="Segment length in seconds")
    how.add_argument("--silence", action="store_true", help="Cut at detected silences")
    split.add_argument("--out-dir", required=True)
    return parser


def _print_result(r: BatchItemResult) -> None:
    if r.ok and r.metadata is not None:
        m = r.metadata
        print(f"OK    {r.name}: {m.title} / {m.artist} / {m.album} [{m.original_encoding}]")
    else:
        print(f"ERROR {r.name}: {r.error}")


def _write_file(out_dir: str, name: str, data: bytes) -> str:
    os.makedirs(out_dir, exist_ok=True)
    path = os.path.join(out_dir, name)
    with open(path, "wb") as fh:
        fh.write(data)
    return path


def _cmd_fix(args: argparse.Namespace) -> int:
    oracle = None
    if args.oracle != "off":
        from tagfixer.llm import build_llm
        from tagfixer.oracle import LLMMetadataOracle

        oracle = LLMMetadataOracle(build_llm())

    fixer = TagFixer(oracle=oracle, oracle_mode=args.oracle, max_workers=args.workers)
    results = fixer.process(collect_items(args.paths))
    for r in results:
        _print_result(r)

    if args.zip_path:
        try:
            payload = build_archive(results)
        except ArchiveError as e:
            print(f"ERROR {e}", file=sys.stderr)
            return 1
        zip_path = args.zip_path
        if os.path.isdir(zip_path):
            zip_path = os.path.join(zip_path, archive_name(results))
        with open(zip_path, "wb") as fh:
            fh.write(payload)
        print(f"wrote {zip_path}")
    elif args.out_dir:
        for r in results:
            if r.ok and r.output is not None:
                sub = os.path.join(args.out_dir, r.folder_name) if r.folder_name else args.out_dir
                _write_file(sub, r.name, r.output)

    return 0 if all(r.ok for r in results) else 1


def _cmd_show(args: argparse.Namespace) -> int:
    fixer = TagFixer()
    for item in collect_items(args.paths):
        m = fixer.resolve(item)
        if args.json:
            row = {"file": item.name, **m.as_dict(), "encoding": m.original_encoding}
            print(json.dumps(row, ensure_ascii=False))
        else:
            print(f"{item.name}: {m.title} / {m.artist} / {m.album} [{m.original_encoding}]")
    return 0


def _cmd_inspect(args: argparse.Namespace) -> int:
    from tagfixer.id3.snapshot import MusicTagSnapshotReader

    with open(args.path, "rb") as fh:
        ours = TagReader().parse(fh.read(), os.path.basename(args.path))
    snap = MusicTagSnapshotReader().read(args.path)
    print(f"title:   {snap.title}")
    print(f"artist:  {snap.artist}")
    print(f"album:   {snap.album}")
    print(f"artwork: {'yes' if snap.has_artwork else 'no'}")

    differing = snap.mismatches(ours)
    for name in differing:
        print(
            f"MISMATCH {name}: music-tag={getattr(snap, name)!r} "
            f"tagfixer={getattr(ours, name)!r}"
        )
    return 1 if differing else 0


def _cmd_convert(args: argparse.Namespace) -> int:
    codec = FfmpegCodec()
    failed = 0
    for path in args.paths:
        try:
            with open(path, "rb") as fh:
                mp3 = codec.convert_wma_to_mp3(fh.read())
        except (OSError, CodecError) as e:
            failed += 1
            print(f"ERROR {path}: {e}")
            continue
        out = _write_file(args.out_dir, f"{strip_extension(path)}.mp3", mp3)
        print(f"OK    {path} -> {out}")
    return 1 if failed else 0


def _cmd_split(args: argparse.Namespace) -> int:
    codec = FfmpegCodec()
    try:
        with open(args.path, "rb") as fh:
            pieces = codec.split(fh.read(), "silence" if args.silence else args.every)
    except (OSError, CodecError) as e:
        print(f"ERROR {args.path}: {e}")
        return 1
    stem = strip_extension(args.path)
    for i, piece in enumerate(pieces, start=1):
        out = _write_file(args.out_dir, f"{stem}_{i:03d}.mp3", piece)
        print(f"OK    {out}")
    return 0


_COMMANDS = {
    "fix": _cmd_fix,
    "show": _cmd_show,
    "inspect": _cmd_inspect,
    "convert": _cmd_convert,
    "split": _cmd_split,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    if args.log_level:
        log.setLevel(args.log_level.upper())
    return _COMMANDS[args.command](args)


if __name__ == "__main__":
    raise SystemExit(main())
