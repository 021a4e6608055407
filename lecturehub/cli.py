"""
CLI (Command Line Interface).

Quick terminal commands, e.g.:

    lecturehub lectures --subject math
    lecturehub video https://youtu.be/abc123
    lecturehub session set --standard 10 --name "Asha"
    lecturehub session show
    lecturehub profile --name "Asha K" --email asha@example.com
    lecturehub doubts
    lecturehub interactive

Note:
- The interactive screens live in lecturehub/interactive.py
- This CLI prints plain text (no rich formatting) apart from log output
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import getpass
import logging
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from lecturehub.config import BACKENDS, Settings, load_settings
from lecturehub.fetch import FetchController
from lecturehub.media import NO_VIDEO_TEXT, extract_youtube_id, record_video_id
from lecturehub.model import FilterCriteria
from lecturehub.profile import UPDATE_OK, ProfileValidationError, update_profile
from lecturehub.remote import BackendError, make_client
from lecturehub.session import Session, load_session, save_session

log = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    """
    Send log records to stderr through rich, so they never mix with
    command output on stdout.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _safe_str(x: Any) -> str:
    return "" if x is None else str(x)


def _lecture_line(record: dict[str, Any]) -> str:
    """
    One lecture as 'id | class | subject | title | video'.
    """
    video_id = record_video_id(record)
    bits = [
        _safe_str(record.get("id")),
        _safe_str(record.get("class", record.get("standard"))),
        _safe_str(record.get("subject")).strip() or "(no subject)",
        _safe_str(record.get("title")).strip() or "(no title)",
        video_id if video_id else "no video",
    ]
    return " | ".join(bits)


def _cmd_lectures(args: argparse.Namespace, settings: Settings, session: Session) -> int:
    """
    Fetch all lectures and print the ones matching the selected standard
    and the optional subject/global searches.
    """
    standard = (args.standard or session.selected_standard).strip()
    if not standard:
        print("No standard selected. Run: lecturehub session set --standard <class>")
        return 1

    client = make_client(settings, id_token=session.id_token)
    controller = FetchController(client, settings.lectures_collection, timeout=settings.timeout)
    asyncio.run(controller.fetch())

    if controller.state.failed:
        print(controller.state.error)
        return 1

    criteria = FilterCriteria(standard=standard, subject_query=args.subject or "", global_query=args.query or "")
    lectures = controller.visible(criteria)
    if not lectures:
        print(f"No lectures available for {standard}")
        return 0

    for lecture in lectures:
        print(_lecture_line(lecture))
    print(f"{len(lectures)} of {len(controller.records)} lectures")
    return 0


def _cmd_video(args: argparse.Namespace) -> int:
    """
    Print the YouTube video id of a link.
    """
    video_id = extract_youtube_id(args.url)
    if not video_id:
        print(NO_VIDEO_TEXT)
        return 1
    print(video_id)
    return 0


def _cmd_session_show(session: Session) -> int:
    print(f"Name     : {session.name or '(not set)'}")
    print(f"Email    : {session.email or '(not set)'}")
    print(f"Standard : {session.selected_standard or '(not set)'}")
    print(f"Signed in: {'yes (' + session.uid + ')' if session.signed_in else 'no'}")
    return 0


def _cmd_session_set(args: argparse.Namespace, settings: Settings, session: Session) -> int:
    """
    Update the stored session. Only the given options change.
    """
    changes = {
        "selected_standard": args.standard,
        "name": args.name,
        "email": args.email,
        "uid": args.uid,
        "id_token": args.token,
        "standard_color": args.color,
    }
    changes = {k: v.strip() for k, v in changes.items() if v is not None}
    if not changes:
        print("Nothing to change.")
        return 1

    updated = dataclasses.replace(session, **changes)
    save_session(updated, settings.session_path)
    print(f"Session saved to: {settings.session_path}")
    return 0


def _cmd_profile(args: argparse.Namespace, settings: Settings, session: Session) -> int:
    """
    Update name and email of the signed-in user.
    """
    password = args.password if args.password is not None else getpass.getpass("Password: ")

    client = make_client(settings, id_token=session.id_token)
    try:
        update_profile(
            client,
            session,
            full_name=args.name or "",
            email=args.email or "",
            password=password,
            collection=settings.users_collection,
        )
    except (ProfileValidationError, BackendError) as e:
        print(e)
        return 1

    print(UPDATE_OK)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="lecturehub", description="Free lectures for your class")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--backend", choices=BACKENDS, help="Where lectures come from")
    parser.add_argument("--data-dir", type=Path, help="Directory with local collections and session.json")
    sub = parser.add_subparsers(dest="command", required=True)

    p_lectures = sub.add_parser("lectures", help="List lectures for your standard")
    p_lectures.add_argument("--standard", type=str, help="Override the session's standard (e.g. 10)")
    p_lectures.add_argument("--subject", type=str, default="", help="Search by subject")
    p_lectures.add_argument("--query", "-q", type=str, default="", help="Search titles and subjects")

    p_video = sub.add_parser("video", help="Extract the video id from a YouTube link")
    p_video.add_argument("url", type=str, help="YouTube URL")

    p_session = sub.add_parser("session", help="Show or change the stored session")
    session_sub = p_session.add_subparsers(dest="session_command", required=True)
    session_sub.add_parser("show", help="Show the stored session")
    p_set = session_sub.add_parser("set", help="Change session values")
    p_set.add_argument("--standard", type=str, help="Selected class/standard")
    p_set.add_argument("--name", type=str, help="Display name")
    p_set.add_argument("--email", type=str, help="Account email")
    p_set.add_argument("--uid", type=str, help="Backend user id")
    p_set.add_argument("--token", type=str, help="Backend id token")
    p_set.add_argument("--color", type=str, help="Theme color of the standard")

    p_profile = sub.add_parser("profile", help="Update your name and email")
    p_profile.add_argument("--name", type=str, help="Full name")
    p_profile.add_argument("--email", type=str, help="Email")
    p_profile.add_argument("--password", type=str, help="Password (prompted if omitted)")

    sub.add_parser("doubts", help="Ask a doubt (chat)")
    sub.add_parser("interactive", help="Interactive menu mode")

    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    settings = load_settings()
    if args.backend:
        settings = dataclasses.replace(settings, backend=args.backend)
    if args.data_dir:
        settings = dataclasses.replace(settings, data_dir=args.data_dir)
    return settings


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = _settings_from_args(args)
    _configure_logging("DEBUG" if args.verbose else settings.log_level)

    if args.command == "video":
        raise SystemExit(_cmd_video(args))

    session = load_session(settings.session_path)

    try:
        if args.command == "lectures":
            raise SystemExit(_cmd_lectures(args, settings, session))
        if args.command == "session":
            if args.session_command == "show":
                raise SystemExit(_cmd_session_show(session))
            raise SystemExit(_cmd_session_set(args, settings, session))
        if args.command == "profile":
            raise SystemExit(_cmd_profile(args, settings, session))

        if args.command == "doubts":
            from lecturehub.interactive import run_doubts

            run_doubts(session)
            raise SystemExit(0)

        if args.command == "interactive":
            from lecturehub.interactive import run_interactive

            run_interactive(settings, session)
            raise SystemExit(0)
    except ValueError as e:
        # bad configuration, e.g. --backend firestore without a project id
        log.error("%s", e)
        raise SystemExit(1)

    raise SystemExit(2)
