from __future__ import annotations

import asyncio
import logging
import webbrowser
from typing import Any

from rich import box
from rich.color import Color, ColorParseError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from lecturehub.chat import DoubtsChat
from lecturehub.config import Settings
from lecturehub.fetch import FetchController
from lecturehub.media import NO_VIDEO_TEXT, record_video_id, watch_url
from lecturehub.model import ChatMessage, FilterCriteria
from lecturehub.remote import make_client
from lecturehub.session import Session

log = logging.getLogger(__name__)

console = Console()


def _println(msg: str = "") -> None:
    console.print(msg)


def _prompt(msg: str) -> str:
    return console.input(msg, markup=False)


def _safe_str(x: Any) -> str:
    return "" if x is None else str(x)


class LectureScreen:
    """
    The lecture list: fetch controller + current searches for one session.
    """

    def __init__(self, controller: FetchController, session: Session, standard: str) -> None:
        self.controller = controller
        self.session = session
        self.standard = standard
        self.subject_query = ""
        self.global_query = ""

    @property
    def criteria(self) -> FilterCriteria:
        return FilterCriteria(
            standard=self.standard, subject_query=self.subject_query, global_query=self.global_query
        )

    def visible(self) -> list[dict[str, Any]]:
        return self.controller.visible(self.criteria)


def run_interactive(settings: Settings, session: Session) -> None:
    """
    Interactive menu loop around the lecture list.
    """
    standard = session.selected_standard.strip()
    if not standard:
        standard = _prompt("Which class/standard are you in? ").strip()
        if not standard:
            _println("No standard selected. Bye.")
            return

    client = make_client(settings, id_token=session.id_token)
    controller = FetchController(client, settings.lectures_collection, timeout=settings.timeout)
    screen = LectureScreen(controller, session, standard)

    loop = asyncio.new_event_loop()
    try:
        _load(loop, controller)
        _menu(loop, screen)
    finally:
        controller.dispose()
        loop.close()


def _load(loop: asyncio.AbstractEventLoop, controller: FetchController) -> None:
    with console.status("Loading Lectures..."):
        loop.run_until_complete(controller.fetch())


def _refresh(loop: asyncio.AbstractEventLoop, controller: FetchController) -> None:
    with console.status("Refreshing..."):
        loop.run_until_complete(controller.refresh())


def _menu(loop: asyncio.AbstractEventLoop, screen: LectureScreen) -> None:
    controller = screen.controller
    while True:
        if controller.state.failed:
            if not _error_screen(loop, controller):
                return
            continue

        _print_header(screen)

        choice = _prompt(
            "\n[1] Show lectures\n"
            "[2] Search by subject\n"
            "[3] Search lectures\n"
            "[4] Clear searches\n"
            "[5] Refresh\n"
            "[6] Ask a doubt\n"
            "[0] Exit\n"
            "Select: "
        ).strip()

        if choice == "0":
            _println("Bye.")
            return

        if choice == "1":
            _flow_show_lectures(screen)
        elif choice == "2":
            screen.subject_query = _prompt("Search by subject... [blank = clear]: ")
        elif choice == "3":
            screen.global_query = _prompt("Search lectures... [blank = clear]: ")
        elif choice == "4":
            screen.subject_query = ""
            screen.global_query = ""
            _println("Searches cleared.")
        elif choice == "5":
            _refresh(loop, controller)
        elif choice == "6":
            _flow_doubts(loop, screen.session)
        else:
            _println("Invalid choice.")


def _error_screen(loop: asyncio.AbstractEventLoop, controller: FetchController) -> bool:
    """
    Show the load error with a retry option. Returns False if the user quits.
    """
    _println(f"\n⚠️  [bold red]{escape(controller.state.error or '')}[/]")
    pick = _prompt("[r] Retry  [0] Exit: ").strip().lower()
    if pick == "0":
        _println("Bye.")
        return False
    if pick in ("r", ""):
        _load(loop, controller)
    return True


def _print_header(screen: LectureScreen) -> None:
    visible = screen.visible()
    name = escape(screen.session.name or "student")
    _println(f"\n=== 📚 Free Lectures ({escape(screen.standard)}) ===")
    _println(f"Hi {name} | lectures={len(screen.controller.records)} | showing={len(visible)}")

    searches = []
    if screen.subject_query.strip():
        searches.append(f"subject='{escape(screen.subject_query)}'")
    if screen.global_query.strip():
        searches.append(f"search='{escape(screen.global_query)}'")
    if searches:
        _println("Searching: " + " | ".join(searches))


def _flow_show_lectures(screen: LectureScreen) -> None:
    """
    Show the filtered lectures and optionally open one lecture's video.
    """
    lectures = screen.visible()
    if not lectures:
        _println(f"\n📭 No lectures available for {escape(screen.standard)}")
        return

    table = Table(title="Lectures", box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Class")
    table.add_column("Subject")
    table.add_column("Title")
    table.add_column("Video")
    for i, lecture in enumerate(lectures, start=1):
        video_id = record_video_id(lecture)
        table.add_row(
            str(i),
            f"[bold cyan]{escape(_safe_str(lecture.get('class', lecture.get('standard'))))}[/]",
            f"[green]{escape(_safe_str(lecture.get('subject')))}[/]",
            escape(_safe_str(lecture.get("title"))),
            f"[magenta]🎥 {video_id}[/]" if video_id else "[red]no video[/]",
        )
    console.print(table)

    pick = _prompt("Enter number to watch [blank = back]: ").strip()
    if not pick:
        return
    if not pick.isdigit():
        _println("Not a number.")
        return

    i = int(pick)
    if not (1 <= i <= len(lectures)):
        _println("Out of range.")
        return

    video_id = record_video_id(lectures[i - 1])
    if not video_id:
        _println(NO_VIDEO_TEXT)
        return

    url = watch_url(video_id)
    _println(f"Opening {url}")
    try:
        webbrowser.open(url)
    except webbrowser.Error as e:
        log.warning("Could not open browser: %s", e)


# ---------------------------------------------------------------------------
# Doubts chat
# ---------------------------------------------------------------------------


DEFAULT_STANDARD_COLOR = "cyan"


def _standard_style(session: Session) -> str:
    """
    Theme color picked for the student's standard, or the default when
    it is unset or not a color rich knows.
    """
    color = "".join(session.standard_color.split())
    if not color:
        return DEFAULT_STANDARD_COLOR
    try:
        Color.parse(color)
    except ColorParseError:
        log.debug("Unknown standard color %r, using %s", color, DEFAULT_STANDARD_COLOR)
        return DEFAULT_STANDARD_COLOR
    return color


def _print_message(message: ChatMessage, style: str = DEFAULT_STANDARD_COLOR) -> None:
    if message.is_user:
        console.print(f"[on dark_green] {escape(message.text)} [/]", justify="right")
    else:
        console.print(f"[bold {style}]🤖[/] [{style}]{escape(message.text)}[/]")


async def _ask(chat: DoubtsChat, text: str) -> None:
    if chat.send(text) is not None:
        await chat.wait_idle()


def _flow_doubts(loop: asyncio.AbstractEventLoop, session: Session) -> None:
    """
    Chat screen. Leaving it cancels any reply that is still on its way.
    """
    chat = DoubtsChat()
    shown = 0
    style = _standard_style(session)
    _println(f"\n[bold {style}]=== Doubts ({escape(session.name or 'student')}) ===[/]")
    try:
        while True:
            for message in chat.messages[shown:]:
                _print_message(message, style)
            shown = len(chat.messages)

            text = _prompt("Type your doubt [blank = back]: ")
            if not text.strip():
                return
            with console.status("Thinking..."):
                loop.run_until_complete(_ask(chat, text))
    finally:
        chat.close()
        loop.run_until_complete(chat.wait_idle())


def run_doubts(session: Session) -> None:
    loop = asyncio.new_event_loop()
    try:
        _flow_doubts(loop, session)
    finally:
        loop.close()
