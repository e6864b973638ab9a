#!/usr/bin/env python

r"""
reorg.py - Reorganize photos and videos into a date-bucketed directory tree

SUMMARY:
--------
This script scans a source directory (recursively) for files (all types by default, or the
media categories / extensions given on the command line), works out when each one was captured
(preferably from the EXIF "original capture" time, falling back to the file system date),
and moves or copies them into YYYY/MM/DD subfolders of a target directory.

FEATURES:
---------
- Media filtering by broad category (image, video, audio, ...) or by literal extension.
- Capture date from embedded metadata (hachoir), falling back to the file's birth/modification time.
- Extension correction: a file whose content does not match its extension (e.g. a JPEG saved as
  .png) is renamed to the canonical extension of its real type (sniffed with libmagic).
- Collision handling at the destination: content-identical files are skipped, different files
  get a numeric suffix (photo.jpg, photo-2.jpg, photo-3.jpg, ...).
- Flat mode: no date subfolders, everything lands directly in the target directory.
- Dry run mode: simulate the whole run without touching the file system.
- Progress line with ETA, and a log of every action in the target directory.

USAGE EXAMPLES:
---------------
1. Move everything from a camera card into a dated archive:
    python reorg.py mv /media/card/DCIM ~/Pictures/archive

2. Copy only images and videos, keeping the originals:
    python reorg.py cp /media/card/DCIM ~/Pictures/archive image video

3. Copy JPEG and Canon RAW files by extension:
    python reorg.py cp /media/card/DCIM ~/Pictures/archive jpg cr3

4. Use the camera preset (image, video, cr3) and show every file operation:
    python reorg.py mv -p -v /media/card/DCIM ~/Pictures/archive

5. Dry run: show what would happen without moving anything:
    python reorg.py mv --noop --verbose /media/card/DCIM ~/Pictures/archive

6. Gather files into a single folder with no date subfolders:
    python reorg.py cp --flat ~/Downloads ~/Pictures/inbox image

See --help for all options.
"""

# Standard library imports
import sys
import os
import re
import time
import datetime
import logging
import shutil
import hashlib
import argparse
import mimetypes
from pathlib import Path
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence

# Third-party library imports for content sniffing and metadata extraction
import magic
from hachoir.parser import createParser
from hachoir.metadata import extractMetadata
from hachoir.core import config

# Suppress hachoir warnings to keep console output clean
config.quiet = True

# Version History:
# v1.0.0 - Date-bucketed move/copy with numeric suffix on name collisions
# v1.1.0 - Media type filter (categories or extensions) as trailing arguments
# v1.2.0 - Extension correction from sniffed content type, CR3 exempt
# v1.2.1 - Read the original capture time instead of the EXIF modification time
# v1.3.0 - Skip content-identical destinations instead of renaming them
#          Dry run keeps track of names it would have claimed
# v1.4.0 - Event log in the target directory, --preset, --examples
__version__ = "1.4.0"

# Camera preset used with -p/--preset
DEFAULT_MEDIA_TYPES = ("image", "video", "cr3")

# libmagic reports Canon CR3 as a generic ISO media container, so never rename these
UNSNIFFED_EXTENSIONS = ("cr3",)

# Types libmagic falls back to when it does not recognize the content
GENERIC_MIME_TYPES = ("application/octet-stream", "inode/x-empty")

DATE_PATH_FORMAT = "%Y/%m/%d"
LOG_FILE_NAME = "events.log"

CAPTURE_TIME_REGEX = re.compile(r"^(\d{4}):(\d{2}):(\d{2}) (\d{2}):(\d{2}):(\d{2})$")


class ReorgError(Exception):
    """Base error for a failed reorganization run."""


class TransferError(ReorgError):
    """A single move or copy failed; the rest of the run is aborted."""

    def __init__(self, source: Path, destination: Path, message: str):
        super().__init__(message)
        self.source = source
        self.destination = destination


class PlannedMove(NamedTuple):
    """One file relocation, computed before anything is touched."""

    source_path: Path
    dest_dir: Path
    dest_filename: str


class RunReport(NamedTuple):
    """Counts returned by reorganize, plus the wall-clock seconds the run took."""

    planned: int
    moved: int
    skipped: int
    elapsed: float


# ---------------------------------------------------------------------------
# Media classification
# ---------------------------------------------------------------------------


def normalize_media_types(tokens) -> List[str]:
    """
    Clean up media filter tokens given on the command line.

    Category tokens are kept as typed; extension tokens may be given with or
    without a leading dot. Empty tokens are dropped.

    Example:
        ["image", ".CR3", " jpg "] -> ["image", ".CR3", "jpg"]
    """
    return [token.strip() for token in tokens or () if token.strip()]


def matches_media_types(media_types: Optional[Sequence[str]], file_path) -> bool:
    """
    Decide whether a file belongs to the requested media types.

    Args:
        media_types (sequence or None): Categories ("image", "video") and/or extensions
        file_path (Path or str): File to classify

    Returns:
        bool: True if the filter is empty, the file's MIME category is listed,
              or its extension is listed (case-insensitive)
    """
    if not media_types:
        return True

    mime_type, _ = mimetypes.guess_type(str(file_path))
    if mime_type and mime_type.split("/")[0] in media_types:
        return True

    extension = Path(file_path).suffix.lstrip(".").lower()
    if not extension:
        return False
    return extension in [token.lower().lstrip(".") for token in media_types]


# ---------------------------------------------------------------------------
# Capture date resolution
# ---------------------------------------------------------------------------


def read_capture_time(file_path: Path):
    """
    Read the original capture time embedded in a file.

    Args:
        file_path (Path): Path to the file to extract metadata from

    Returns:
        datetime.datetime, str or None: The raw "date_time_original" value, or None

    This uses hachoir and looks only at the EXIF DateTimeOriginal field
    ("date_time_original"). hachoir's "creation_date" comes from the EXIF
    DateTime tag, which editing software rewrites, so it is not used.
    Nothing is raised: every failure is logged at debug level and reported as None.
    """
    log = logging.getLogger(__name__)

    try:
        parser = createParser(str(file_path))
    except Exception as e:
        log.debug(f"Failed to create parser for {file_path}: {e}")
        return None

    if not parser:
        log.debug(f"Unable to parse file for capture time: {file_path}")
        return None

    try:
        with parser:
            metadata = extractMetadata(parser)
            if not metadata:
                log.debug(f"Unable to extract metadata for {file_path}")
                return None
            values = metadata.getValues("date_time_original")
    except Exception as e:
        log.debug(f"Error during metadata extraction for {file_path}: {e}")
        return None

    return values[0] if values else None


def parse_capture_time(raw) -> Optional[datetime.datetime]:
    """
    Turn a raw capture time into a naive local datetime.

    Accepts a datetime (hachoir already converted it) or an EXIF style
    "YYYY:MM:DD HH:MM:SS" string. Returns None for anything else, including
    strings that match the pattern but are not a real calendar date
    ("0000:00:00 00:00:00" is common on cameras with an unset clock).
    """
    if isinstance(raw, datetime.datetime):
        return raw
    if not isinstance(raw, str):
        return None

    match = CAPTURE_TIME_REGEX.match(raw.strip().rstrip("\x00").strip())
    if not match:
        return None
    try:
        return datetime.datetime(*(int(part) for part in match.groups()))
    except ValueError:
        return None


def filesystem_date(file_path: Path) -> datetime.datetime:
    """Birth time of the file where the platform records it, else its modification time."""
    stat = Path(file_path).stat()
    timestamp = getattr(stat, "st_birthtime", None) or stat.st_mtime
    return datetime.datetime.fromtimestamp(timestamp)


def resolve_date(file_path: Path, reader: Callable = read_capture_time) -> datetime.datetime:
    """
    Work out when a file was captured.

    Args:
        file_path (Path): File to date
        reader (callable): Returns the raw embedded capture time for a path, or None

    Returns:
        datetime.datetime: Embedded capture time if present and well formed,
                           otherwise the file system date
    """
    try:
        captured = parse_capture_time(reader(file_path))
    except Exception as e:
        logging.getLogger(__name__).debug(f"Capture time lookup failed for {file_path}: {e}")
        captured = None

    if captured is not None:
        return captured
    return filesystem_date(file_path)


# ---------------------------------------------------------------------------
# Extension normalization
# ---------------------------------------------------------------------------


def sniff_mime_type(file_path: Path) -> Optional[str]:
    """
    Detect a file's MIME type from its content using libmagic.

    Returns:
        str or None: MIME type such as "image/jpeg", or None if sniffing failed
    """
    try:
        return magic.from_file(str(file_path), mime=True)
    except Exception as e:
        logging.getLogger(__name__).debug(f"Content sniffing failed for {file_path}: {e}")
        return None


def extensions_for(mime_type: Optional[str]) -> List[str]:
    """
    Registered extensions for a MIME type, without dots, canonical one first.

    Example:
        "image/jpeg" -> ["jpg", "jpe", "jpeg"]
    """
    if not mime_type:
        return []

    extensions = mimetypes.guess_all_extensions(mime_type)
    preferred = mimetypes.guess_extension(mime_type)
    if preferred:
        extensions = [preferred] + [ext for ext in extensions if ext != preferred]
    return [ext.lstrip(".") for ext in extensions]


def fix_extension(file_path: Path, file_name: str, sniffer: Callable = sniff_mime_type) -> str:
    """
    Make a file name's extension agree with the file's actual content.

    Args:
        file_path (Path): File to inspect
        file_name (str): Name to correct (normally file_path.name)
        sniffer (callable): Returns the content MIME type of a path, or None

    Returns:
        str: file_name with its trailing extension replaced by the canonical
             extension for the detected type, or file_name unchanged when the
             type is unknown, the extension is already valid for it, or the
             extension is exempt from sniffing

    Example:
        photo.png containing JPEG data -> photo.jpg
        photo.jpeg containing JPEG data -> photo.jpeg
    """
    stem, dot, extension = file_name.rpartition(".")
    if not dot or not stem:
        return file_name

    if extension.lower() in UNSNIFFED_EXTENSIONS:
        return file_name

    mime_type = sniffer(file_path)
    if not mime_type or mime_type in GENERIC_MIME_TYPES:
        return file_name

    valid_extensions = extensions_for(mime_type)
    if not valid_extensions or extension.lower() in valid_extensions:
        return file_name

    return f"{stem}.{valid_extensions[0]}"


# ---------------------------------------------------------------------------
# Plan building
# ---------------------------------------------------------------------------


def generate_moves(
    source_dir: Path,
    target_dir: Path,
    flat: bool = False,
    media_types=None,
    sniffer: Callable = sniff_mime_type,
    date_reader: Callable = read_capture_time,
    logger=None,
) -> List[PlannedMove]:
    """
    Walk the source tree and plan where every matching file should go.

    Args:
        source_dir (Path): Directory to scan recursively
        target_dir (Path): Root of the organized tree
        flat (bool): Put every file directly in target_dir instead of YYYY/MM/DD
        media_types (sequence or None): Media filter; empty or None matches everything
        sniffer (callable): Content type sniffer used for extension correction
        date_reader (callable): Embedded capture time reader
        logger (logging.Logger): Logger for recording skipped entries

    Returns:
        list: PlannedMove tuples in sorted, depth-first order

    Entries are visited in name order, and a subdirectory's files take the
    place of the subdirectory entry itself. Hidden entries and symbolic links
    are skipped, and so is the target directory when it lies inside the source.
    """
    logger = logger or logging.getLogger(__name__)
    source_dir = Path(source_dir)
    target_dir = Path(target_dir)
    target_resolved = target_dir.resolve()

    moves = []
    stack = [iter(_sorted_entries(source_dir, logger))]

    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue

        if entry.name.startswith("."):
            continue

        entry_path = Path(entry.path)

        if entry.is_symlink():
            logger.debug(f"Skipping symbolic link: {entry_path}")
            continue

        if entry.is_dir():
            if entry_path.resolve() == target_resolved:
                logger.debug(f"Skipping target directory inside source: {entry_path}")
                continue
            stack.append(iter(_sorted_entries(entry_path, logger)))
            continue

        if not entry.is_file():
            continue

        if not matches_media_types(media_types, entry_path):
            continue

        if flat:
            dest_dir = target_dir
        else:
            captured = resolve_date(entry_path, date_reader)
            dest_dir = target_dir.joinpath(*captured.strftime(DATE_PATH_FORMAT).split("/"))

        dest_filename = fix_extension(entry_path, entry.name, sniffer)
        moves.append(PlannedMove(entry_path, dest_dir, dest_filename))

    return moves


def _sorted_entries(directory: Path, logger):
    """Return the entries of a directory sorted by name."""
    logger.debug(f"Scanning {directory}")
    with os.scandir(directory) as it:
        return sorted(it, key=lambda entry: entry.name)


# ---------------------------------------------------------------------------
# Destination resolution
# ---------------------------------------------------------------------------


def calculate_file_hash(file_path: Path, algorithm: str = "sha256") -> str:
    """
    Calculate hash of a file for content comparison.

    Args:
        file_path (Path): Path to the file to hash
        algorithm (str): Hash algorithm to use (default: sha256)

    Returns:
        str: Hexadecimal hash string, or empty string if error
    """
    try:
        hash_obj = hashlib.new(algorithm)
        with open(file_path, "rb") as f:
            # Read file in chunks to handle large files efficiently
            for chunk in iter(lambda: f.read(8192), b""):
                hash_obj.update(chunk)
        return hash_obj.hexdigest()
    except OSError as e:
        logging.getLogger(__name__).debug(f"Failed to calculate hash for {file_path}: {e}")
        return ""


def is_same_content(first: Path, second: Path) -> bool:
    """
    True if two paths are the same file or hold byte-identical content.

    Sizes are compared before hashing. A file that cannot be read is never
    considered identical to anything.
    """
    try:
        if os.path.samefile(first, second):
            return True
        if os.path.getsize(first) != os.path.getsize(second):
            return False
    except OSError:
        return False

    first_hash = calculate_file_hash(first)
    return bool(first_hash) and first_hash == calculate_file_hash(second)


def suffixed_path(base_path: Path, counter: int) -> Path:
    """
    Insert "-<counter>" before the final extension.

    Example:
        img.jpg, 3 -> img-3.jpg
        archive.tar.gz, 2 -> archive.tar-2.gz
    """
    base_path = Path(base_path)
    return base_path.with_name(f"{base_path.stem}-{counter}{base_path.suffix}")


def finalize_file_name(
    source_path: Path, candidate: Path, pending: Optional[Dict[Path, Path]] = None
) -> Optional[Path]:
    """
    Find the final destination for a file, or decide that it is already there.

    Args:
        source_path (Path): File about to be moved or copied
        candidate (Path): Planned destination path
        pending (dict, optional): Destinations claimed earlier in a dry run,
            mapped to the source file that claimed them

    Returns:
        Path or None: First free path among candidate, candidate-2, candidate-3, ...,
                      or None if one of them already holds identical content

    The search always stops: every step moves to a higher counter, and only a
    finite number of files can be in the way.
    """
    pending = pending if pending is not None else {}
    candidate = Path(candidate)
    attempt = candidate
    counter = 1

    while True:
        if attempt in pending:
            occupant = pending[attempt]
        elif os.path.lexists(attempt):
            occupant = attempt
        else:
            return attempt

        if is_same_content(source_path, occupant):
            return None

        counter += 1
        attempt = suffixed_path(candidate, counter)


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


def format_time(total_seconds: float) -> str:
    """Format a duration as HH:MM:SS (hours are not capped at 24)."""
    total_seconds = max(int(total_seconds), 0)
    minutes, seconds = divmod(total_seconds, 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def estimate_time_left(elapsed: float, completed: int, total: int) -> float:
    """
    Estimate the seconds remaining from the average time per completed item.

    Returns:
        float: Seconds left, 0.0 before the first item completes
    """
    if completed <= 0:
        return 0.0
    return elapsed / completed * total - elapsed


def print_progress(start_time: float, completed: int, total: int):
    """Rewrite the console progress line: (completed/total) ETA: HH:MM:SS"""
    eta = estimate_time_left(time.monotonic() - start_time, completed, total)
    print(f"\r({completed}/{total}) ETA: {format_time(eta)}", end="", flush=True)


def create_date_directories(moves: Sequence[PlannedMove], noop: bool, logger) -> int:
    """
    Create every distinct destination directory of the plan, in plan order.

    Returns:
        int: Number of distinct directories (created or, in a dry run, that would be)
    """
    directories = dict.fromkeys(move.dest_dir for move in moves)
    for dest_dir in directories:
        logger.info(f"mkdir -p {dest_dir}")
        if not noop:
            dest_dir.mkdir(parents=True, exist_ok=True)
    return len(directories)


def execute_moves(
    moves: Sequence[PlannedMove],
    method: str,
    noop: bool = False,
    logger=None,
    show_progress: bool = True,
):
    """
    Apply a plan, one file at a time, in order.

    Args:
        moves (sequence): PlannedMove tuples from generate_moves
        method (str): "mv" to move, "cp" to copy (metadata preserved)
        noop (bool): Log what would happen without touching the file system
        logger (logging.Logger): Logger for recording operations
        show_progress (bool): Print the progress line after each file

    Returns:
        tuple: (moved, skipped) counts

    Raises:
        TransferError: The first move or copy that fails; nothing after it runs.
    """
    logger = logger or logging.getLogger(__name__)
    label = "mv" if method == "mv" else "cp -p"
    pending = {}
    moved = 0
    skipped = 0
    start_time = time.monotonic()

    for index, move in enumerate(moves, start=1):
        candidate = move.dest_dir / move.dest_filename
        destination = finalize_file_name(move.source_path, candidate, pending if noop else None)

        if destination is None:
            skipped += 1
            logger.info(f"skip {move.source_path} (identical file at {candidate})")
        else:
            logger.info(f"{label} {move.source_path} {destination}" + (" [DRY RUN]" if noop else ""))
            if noop:
                pending[destination] = move.source_path
            else:
                try:
                    if method == "mv":
                        shutil.move(str(move.source_path), str(destination))
                    else:
                        shutil.copy2(str(move.source_path), str(destination))
                except OSError as e:
                    logger.error(f"Failed attempting to {label} {move.source_path} to {destination}: {e}")
                    raise TransferError(
                        move.source_path,
                        destination,
                        f"Failed attempting to {label} {move.source_path} to {destination}: {e}",
                    ) from e
            moved += 1

        if show_progress:
            print_progress(start_time, index, len(moves))

    return moved, skipped


def remove_source_tree(source_dir: Path, noop: bool, logger):
    """Best-effort recursive removal of the source tree after a move."""
    logger.info(f"rm -rf {source_dir}")
    if not noop:
        shutil.rmtree(source_dir, ignore_errors=True)


def reorganize(
    method: str,
    source_dir: Path,
    target_dir: Path,
    noop: bool = False,
    flat: bool = False,
    media_types=None,
    sniffer: Callable = sniff_mime_type,
    date_reader: Callable = read_capture_time,
    logger=None,
) -> RunReport:
    """
    Move or copy files from source_dir into a date-organized target_dir.

    Args:
        method (str): "mv" or "cp"
        source_dir (Path): Directory to scan recursively
        target_dir (Path): Root of the organized tree (must exist)
        noop (bool): Dry run, nothing on disk is changed
        flat (bool): No YYYY/MM/DD subdirectories
        media_types (sequence or None): Media filter; empty or None matches everything
        sniffer (callable): Content type sniffer
        date_reader (callable): Embedded capture time reader
        logger (logging.Logger): Logger for recording operations

    Returns:
        RunReport: planned, moved and skipped counts plus elapsed seconds

    Raises:
        TransferError: A move or copy failed; remaining files were not processed
    """
    logger = logger or logging.getLogger(__name__)
    start_time = time.monotonic()
    source_dir = Path(source_dir)
    target_dir = Path(target_dir)

    print("Scanning directory for files...")
    moves = generate_moves(source_dir, target_dir, flat, media_types, sniffer, date_reader, logger)
    print("Done.")
    logger.info(f"Planned {len(moves)} files from {source_dir}")

    if not flat:
        print("Creating date directories...")
        created = create_date_directories(moves, noop, logger)
        print("Done.")
        logger.debug(f"{created} date directories ready")

    print("Moving files... " if method == "mv" else "Copying files... ")
    moved, skipped = execute_moves(moves, method, noop, logger)

    if method == "mv":
        remove_source_tree(source_dir, noop, logger)

    elapsed = time.monotonic() - start_time
    verb = "Moved" if method == "mv" else "Copied"
    print(
        f"\rDone. {verb} {moved} files ({skipped} skipped as identical). "
        f"Total elapsed time: {format_time(elapsed)}" + (" [DRY RUN]" if noop else "")
    )
    logger.info(f"{verb} {moved} files, skipped {skipped} identical, in {format_time(elapsed)}")
    return RunReport(len(moves), moved, skipped, elapsed)


# ---------------------------------------------------------------------------
# Command line
# ---------------------------------------------------------------------------


def set_up_logging(log_file: Optional[Path], verbose: bool):
    """
    Set up logging to a file and to the console.

    Args:
        log_file (Path or None): Event log path; None disables the file log (dry run)
        verbose (bool): DEBUG level in the file and INFO on the console

    Returns:
        logging.Logger: Configured logger instance

    Handlers left over from an earlier call are closed first, so running main()
    more than once in a process does not write into a stale log file.
    """
    logger = logging.getLogger(__name__)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.INFO if verbose else logging.WARNING)
    console.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console)

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as e:
            print(f"Failed to create log file {log_file}: {e}", file=sys.stderr)
            sys.exit(1)
        fh.setLevel(logging.DEBUG if verbose else logging.INFO)
        fh.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(fh)

    return logger


def validate_args(method: str, source_dir: Path, target_dir: Path):
    """
    Check the source and target directories before anything else runs.

    Exits with status 1 and a message on stderr if either path is not an
    existing directory, if they are the same directory, or if a move would
    remove a target that lives inside the source tree.
    """
    if not source_dir.is_dir():
        print(f"Source {str(source_dir)!r} is not a directory.", file=sys.stderr)
        sys.exit(1)

    if not target_dir.is_dir():
        print(f"Target {str(target_dir)!r} is not a directory.", file=sys.stderr)
        sys.exit(1)

    source = source_dir.resolve()
    target = target_dir.resolve()
    if source == target:
        print("Source and target directories must not be the same.", file=sys.stderr)
        sys.exit(1)

    if method == "mv" and source in target.parents:
        print("Target must not be inside the source when moving; the source tree is removed afterwards.",
              file=sys.stderr)
        sys.exit(1)


def print_examples():
    """Print the usage examples section of the module docstring."""
    doc_lines = __doc__.split("\n")
    examples_start = doc_lines.index("USAGE EXAMPLES:")
    examples_end = next(
        (i for i, line in enumerate(doc_lines[examples_start:], examples_start) if line.startswith("See --help")),
        len(doc_lines),
    )
    print("\n".join(doc_lines[examples_start : examples_end + 1]))


def parse_arguments(args=None):
    """
    Parse command line arguments using argparse.

    Args:
        args (list, optional): Command line arguments. Defaults to sys.argv[1:].

    Returns:
        argparse.Namespace: Parsed arguments

    Flags may appear anywhere, including between trailing media type tokens.
    """
    if args is None:
        args = sys.argv[1:]

    # --examples works without the required positional arguments
    if "--examples" in args:
        print_examples()
        sys.exit(0)

    parser = argparse.ArgumentParser(
        prog="reorg",
        description="Move or copy media files into a YYYY/MM/DD directory tree, dated by their "
        "EXIF capture time (or file system date), with extension correction and duplicate detection.",
        epilog="""
IMPORTANT NOTES:
• With no MEDIA_TYPE arguments every file is processed
• In mv mode the source tree is removed after all files are moved
• Files identical to one already at the destination are skipped
• All operations are logged to 'events.log' in the target directory (except with --noop)
• Use --examples to see usage scenarios""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "method",
        choices=["mv", "cp"],
        help="'mv' moves files (and removes the source tree afterwards), 'cp' copies them preserving metadata",
    )
    parser.add_argument("source_dir", metavar="SOURCE_DIR", help="Directory to scan recursively")
    parser.add_argument("target_dir", metavar="TARGET_DIR", help="Root of the organized tree; must exist")
    parser.add_argument(
        "media_types",
        nargs="*",
        metavar="MEDIA_TYPE",
        help="Media categories (image, video, audio, ...) or extensions (jpg, cr3, ...) to process [default: all files]",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print every file operation and write debug details to the log",
    )
    parser.add_argument(
        "-n",
        "--noop",
        action="store_true",
        help="Dry run: report what would happen without changing anything on disk",
    )
    parser.add_argument(
        "-f",
        "--flat",
        action="store_true",
        help="Put all files directly into TARGET_DIR instead of YYYY/MM/DD subdirectories",
    )
    parser.add_argument(
        "-p",
        "--preset",
        action="store_true",
        help=f"Add the camera preset filter ({', '.join(DEFAULT_MEDIA_TYPES)}) to the media types",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        metavar="PATH",
        help=f"Event log location [default: TARGET_DIR/{LOG_FILE_NAME}]",
    )
    parser.add_argument(
        "--examples",
        action="store_true",
        help="Display usage examples and exit",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show program version and exit",
    )

    return parser.parse_intermixed_args(args)


def main(args=None):
    """
    Main entry point for the script.

    Parses arguments, validates the directories, sets up logging and runs
    reorganize(). Any failure during the run is reported once, as a message,
    and the process exits with status 1.
    """
    parsed_args = parse_arguments(args)

    source_dir = Path(parsed_args.source_dir).expanduser()
    target_dir = Path(parsed_args.target_dir).expanduser()
    validate_args(parsed_args.method, source_dir, target_dir)

    media_types = normalize_media_types(parsed_args.media_types)
    if parsed_args.preset:
        media_types += [token for token in DEFAULT_MEDIA_TYPES if token not in media_types]

    if parsed_args.noop:
        log_file = None
    elif parsed_args.log_file:
        log_file = Path(parsed_args.log_file).expanduser()
    else:
        log_file = target_dir / LOG_FILE_NAME
    logger = set_up_logging(log_file, parsed_args.verbose)

    start_time = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    logger.info("=" * 80)
    logger.info(f"reorg {__version__} - Session Started: {start_time}")
    logger.info("=" * 80)
    logger.debug("Command-line options: %s", vars(parsed_args))
    logger.info(f"Media types: {', '.join(media_types) if media_types else 'all files'}")

    try:
        reorganize(
            parsed_args.method,
            source_dir,
            target_dir,
            noop=parsed_args.noop,
            flat=parsed_args.flat,
            media_types=media_types,
            sniffer=sniff_mime_type,
            date_reader=read_capture_time,
            logger=logger,
        )
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        logger.warning("Run interrupted by user")
        logging.shutdown()
        sys.exit(130)
    except Exception as e:
        print(f"\n{e}", file=sys.stderr)
        logger.debug("Run failed", exc_info=True)
        logging.shutdown()
        sys.exit(1)

    end_time = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    logger.info(f"Session Ended: {end_time}")
    logger.info("")

    # Ensure all log messages are written
    logging.shutdown()


if __name__ == "__main__":
    main()
