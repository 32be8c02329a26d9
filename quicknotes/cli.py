#!/usr/bin/env python3
"""Command-line front end for QuickNotes.

  quicknotes list
  quicknotes add "Title" "Content"
  quicknotes edit ID "Title" "Content"
  quicknotes delete ID

The backend (local file or remote server) comes from QUICKNOTES_* settings.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from quicknotes.config import Settings
from quicknotes.controller import NoteController
from quicknotes.models import Note
from quicknotes.store import create_store

GREEN = "\033[92m"
RED = "\033[91m"
DIM = "\033[2m"
BOLD = "\033[1m"
RESET = "\033[0m"


def _print_note(note: Note) -> None:
    print(f"  {BOLD}{note.title}{RESET}  {DIM}#{note.id} · {note.updated_at}{RESET}")
    print(f"    {note.content}")


def _print_notes(notes: tuple[Note, ...]) -> None:
    if not notes:
        print(f"  {DIM}No notes yet!{RESET}")
        return
    for note in notes:
        _print_note(note)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="quicknotes", description="Quick notes")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="Show all notes")

    add = sub.add_parser("add", help="Create a note")
    add.add_argument("title")
    add.add_argument("content")

    edit = sub.add_parser("edit", help="Replace a note's title and content")
    edit.add_argument("id")
    edit.add_argument("title")
    edit.add_argument("content")

    delete = sub.add_parser("delete", help="Delete a note")
    delete.add_argument("id")
    return parser


async def run(args: argparse.Namespace, settings: Settings) -> int:
    """Load the notes, apply the requested command, and report the outcome."""
    async with create_store(settings) as store:
        controller = NoteController(store)
        if not await controller.load():
            print(f"{RED}{controller.error}{RESET}", file=sys.stderr)
            return 1

        if args.command == "add":
            note = await controller.add(args.title, args.content)
            ok = note is not None
            message = f"Note '{args.title}' saved." if ok else controller.error
        elif args.command == "edit":
            note = await controller.edit(args.id, args.title, args.content)
            ok = note is not None
            message = f"Note #{args.id} updated." if ok else controller.error
        elif args.command == "delete":
            ok = await controller.remove(args.id)
            message = f"Note #{args.id} deleted." if ok else controller.error
        else:
            ok, message = True, None

        if not ok:
            print(f"{RED}{message}{RESET}", file=sys.stderr)
            return 1
        if message:
            print(f"{GREEN}{message}{RESET}")
        _print_notes(controller.notes)
        return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings()
    logging.basicConfig(
        level="DEBUG" if args.verbose else settings.log_level,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    )
    return asyncio.run(run(args, settings))


if __name__ == "__main__":
    sys.exit(main())
