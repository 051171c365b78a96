"""Marginalia entry point.

Usage:
    python -m marginalia [OPTIONS]

Options:
    --config PATH       Path to YAML config file
    --profile NAME      Profile name (dev, prod, test)
    --book TITLE        Book to read (added to the library if new)
    --utterance TEXT    Process TEXT as a final transcript (repeatable)
    --help              Show this help message
    --version           Show version
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from . import __version__
from .config.loader import load_config
from .config.profiles import detect_profile

if TYPE_CHECKING:
    from .app import Marginalia
    from .books import Book
    from .notes import Note
    from .reading import ReadingLoop

# .env in the project root (parent of src/), else the current directory
_env_file = Path(__file__).parent.parent.parent / ".env"
load_dotenv(_env_file if _env_file.exists() else None)

ANSWER_TIMEOUT_SECONDS = 60.0


def setup_logging(level: str) -> None:
    """Configure logging based on config."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="marginalia",
        description="Marginalia - voice notes for reading physical books",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m marginalia --book "Dune"                # Dictate notes while reading
  python -m marginalia --profile test --book "Dune" \\
      --utterance "quote: Fear is the mind-killer."  # Process text without audio
  python -m marginalia --config my.yaml --dry-run   # Check a config file

Environment:
  MARGINALIA_PROFILE    Set profile (dev, prod, test)
  ANTHROPIC_API_KEY     API key for AI answers
""",
    )

    parser.add_argument("--config", type=Path, help="Path to YAML config file", metavar="PATH")
    parser.add_argument(
        "--profile", choices=["dev", "prod", "test"], help="Configuration profile to use"
    )
    parser.add_argument(
        "--version", action="version", version=f"Marginalia v{__version__}"
    )
    parser.add_argument(
        "--dry-run", action="store_true", help="Load config and exit (for testing)"
    )
    parser.add_argument(
        "--mock-audio",
        action="store_true",
        help="Use mock audio, recognizer and AI (for testing without hardware)",
    )
    parser.add_argument("--book", metavar="TITLE", help="Title of the book being read")
    parser.add_argument("--author", default="Unknown author", help="Author for a new book")
    parser.add_argument("--page", type=int, default=None, help="Page the reader is on")
    parser.add_argument(
        "--utterance",
        action="append",
        metavar="TEXT",
        help="Final transcript to turn into a note (repeatable)",
    )

    return parser.parse_args(argv)


def resolve_book(app: "Marginalia", title: str | None, author: str) -> "Book | None":
    """Find the book by title, add it if new, or pick the book being read."""
    from .books import Book, ReadingStatus

    if title:
        book = app.books.find_by_title(title)
        return book or app.books.add(Book(title=title, author=author))

    reading = app.books.by_status(ReadingStatus.READING)
    return reading[0] if reading else None


def print_note(note: "Note") -> None:
    page = f" (p. {note.page})" if note.page else ""
    print(f"[{note.type.display_name}]{page} {note.content}")
    if note.ai_response:
        print(f"    -> {note.ai_response}")


def run_utterances(app: "Marginalia", loop: "ReadingLoop", utterances: list[str]) -> int:
    """Process transcripts without audio and print the resulting notes."""
    created = []
    for text in utterances:
        created.extend(loop.dictate(text))

    app.fanout.wait(timeout=ANSWER_TIMEOUT_SECONDS)
    for note in created:
        print_note(app.notes.get(note.id) or note)
    return 0


def run_interactive(app: "Marginalia", loop: "ReadingLoop", logger: logging.Logger) -> int:
    """Listen loop: Enter toggles recording, '? text' asks, 'p N' sets the page."""
    from .capture import CaptureError

    print("Press Enter to start/stop dictating, '? question' to ask,")
    print("'p N' to set the page, 'q' or Ctrl+C to end the session.\n")

    while True:
        try:
            line = input("listening> " if loop.is_recording else "> ").strip()
        except (KeyboardInterrupt, EOFError):
            print()
            return 0

        if line == "q":
            return 0
        if line.startswith("?"):
            note = loop.ask(line[1:])
            if note:
                print_note(note)
            continue
        if line.startswith("p "):
            try:
                loop.current_page = int(line[2:])
            except ValueError:
                print("Page must be a number")
            continue

        try:
            for note in loop.toggle_recording():
                print_note(note)
        except CaptureError as e:
            logger.error(f"Capture failed: {e}")
            print(f"Cannot listen: {e}")


def main(argv: list[str] | None = None) -> int:
    """Main entry point for Marginalia.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    args = parse_args(argv)

    try:
        config = load_config(path=args.config, profile=args.profile)
    except FileNotFoundError as e:
        print(f"Error: Config file not found: {e}", file=sys.stderr)
        return 1
    except (TypeError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    setup_logging(config.logging.level)
    logger = logging.getLogger("marginalia")

    profile = args.profile or detect_profile().value
    logger.info(f"Marginalia v{__version__}")
    logger.info(f"Profile: {profile}")

    if args.dry_run:
        logger.info("Dry run mode - exiting after config load")
        logger.info(f"STT model: {config.stt.model}")
        logger.info(f"AI: {config.ai.provider}:{config.ai.model}")
        logger.info(f"Storage: {config.storage.backend}")
        return 0

    from .app import Marginalia
    from .reading import ReadingLoop

    use_mocks = config.testing.mock_audio_enabled or args.mock_audio
    try:
        app = Marginalia.from_config(config, use_mocks=use_mocks)
    except Exception as e:
        logger.error(f"Failed to initialize components: {e}")
        print(f"\nError: Failed to initialize Marginalia: {e}", file=sys.stderr)
        return 1

    with app:
        book = resolve_book(app, args.book, args.author)
        if book is None:
            print("No book is being read. Use --book TITLE.", file=sys.stderr)
            return 1

        loop = ReadingLoop(app, segment_utterances=config.capture.segment_utterances)
        loop.begin(book.id)
        if args.page is not None:
            loop.current_page = args.page

        print(f"\nReading '{book.title}' by {book.author} ({book.progress_text})\n")
        try:
            if args.utterance:
                code = run_utterances(app, loop, args.utterance)
            else:
                code = run_interactive(app, loop, logger)
        finally:
            session = loop.finish(end_page=loop.current_page or None)
            if session:
                print(f"\nSession ended: {session.formatted_duration}, {session.summary}")
                if session.key_insight:
                    print(f"Key insight: {session.key_insight}")

    return code


if __name__ == "__main__":
    sys.exit(main())
