#!/usr/bin/env python3
"""
Multiplication Master — Textual TUI Drill
=========================================
One screen: a times-table problem, an answer field, the running score and a
compact history. F2 opens the full history as a modal overlay.

Run:
    pip install textual
    python drill_gui.py
    python drill_gui.py --delay 0.8 --seed 7
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

try:
    from textual.app import App, ComposeResult
    from textual.widgets import Header, Footer, Button, Static, Input, Rule
    from textual.containers import Container, ScrollableContainer, Horizontal, Vertical
    from textual.screen import Screen, ModalScreen
    from textual.binding import Binding
    from textual.logging import TextualHandler
    from textual import events, on
except ImportError:
    print("Textual not installed. Run:  pip install textual")
    sys.exit(1)

from rich.markup import escape

from drill import (
    FEEDBACK_DELAY, TIMES,
    LockState, QuizEngine,
    build_parser, setup_logging,
)

log = logging.getLogger("drill.gui")

EMPTY_HISTORY = "No answers yet. Solve a problem to start your history."


# ── Rendering helpers ─────────────────────────────────────────────────────────


def compact_line(entry) -> str:
    """Main-screen history row: the solved problem and what the user said."""
    return (
        f"{escape(entry.problem)} = {entry.correct_answer}    "
        f"[bold]You said: {escape(entry.user_answer)}[/bold]"
    )


def detail_line(entry) -> str:
    """Overlay row. The correct answer is only repeated for wrong answers."""
    if entry.is_correct:
        return (
            f"[green]✔[/green]  {escape(entry.problem)}    "
            f"You said: [bold green]{escape(entry.user_answer)}[/bold green]"
        )
    return (
        f"[red]✘[/red]  {escape(entry.problem)}    "
        f"You said: [bold red]{escape(entry.user_answer)}[/bold red]    "
        f"Correct answer: [bold]{entry.correct_answer}[/bold]"
    )


class HistoryRow(Static):
    """One HistoryEntry, tinted by outcome."""

    def __init__(self, entry, detailed: bool = False) -> None:
        outcome = "-correct" if entry.is_correct else "-incorrect"
        super().__init__(
            detail_line(entry) if detailed else compact_line(entry),
            classes=f"history-entry {outcome}",
        )
        self.entry = entry


# ── History overlay ───────────────────────────────────────────────────────────


class HistoryPanel(Vertical):
    """Content panel of the overlay. Clicks inside never reach the backdrop."""

    def on_click(self, event: events.Click) -> None:
        event.stop()


class HistoryScreen(ModalScreen):
    """Full, scrollable history of the session, newest first.

    The Escape binding belongs to this screen, so it only exists while the
    overlay is on the screen stack.
    """

    BINDINGS = [Binding("escape", "close", "Close")]

    def __init__(self, history) -> None:
        super().__init__()
        self.history = tuple(history)

    def compose(self) -> ComposeResult:
        with HistoryPanel(id="history-panel"):
            yield Static(
                f"[bold]History[/bold]  [dim]{len(self.history)} answer(s)[/dim]",
                id="history-title",
            )
            yield Rule()
            with ScrollableContainer(id="history-detail"):
                if not self.history:
                    yield Static(f"[dim]{EMPTY_HISTORY}[/dim]", id="history-empty")
                for entry in self.history:
                    yield HistoryRow(entry, detailed=True)
            yield Button("Close  [Esc]", id="btn-close", variant="warning")

    def on_mount(self) -> None:
        log.debug("History overlay opened with %d entries", len(self.history))

    def on_unmount(self) -> None:
        log.debug("History overlay closed")

    def on_click(self, event: events.Click) -> None:
        # Only backdrop clicks get here
        self.dismiss()

    def action_close(self) -> None:
        self.dismiss()

    @on(Button.Pressed, "#btn-close")
    def on_close(self) -> None:
        self.dismiss()


# ── Drill screen ──────────────────────────────────────────────────────────────


class DrillScreen(Screen):
    """Problem, answer field, score, feedback and compact history."""

    BINDINGS = [
        Binding("f2", "show_history", "History"),
    ]

    def __init__(self, delay: float = FEEDBACK_DELAY, seed: Optional[int] = None) -> None:
        super().__init__()
        self.engine = QuizEngine(delay, seed=seed, schedule=self._schedule)
        self.engine.add_listener(self._on_new_problem)

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Container(id="drill-layout"):
            yield Static("Multiplication Master", id="title")
            with Horizontal(id="score-row"):
                yield Static(id="score-correct", classes="score-box")
                yield Static(id="score-incorrect", classes="score-box")
            with Vertical(id="problem-panel"):
                yield Static(id="problem", classes="problem-text")
                yield Input(placeholder="?", id="answer-input")
                yield Button("Submit  [Enter]", id="btn-submit", variant="primary")
                yield Static(id="feedback", classes="feedback-text")
            with Vertical(id="history-section"):
                yield Static("History", classes="section-title")
                yield ScrollableContainer(id="history-list")
            with Horizontal(id="drill-nav"):
                yield Button("History details  [F2]", id="btn-details")
        yield Footer()

    def on_mount(self) -> None:
        self._refresh()
        self.query_one("#answer-input", Input).focus()

    def on_unmount(self) -> None:
        self.engine.close()

    # ── Engine wiring ─────────────────────────────────────────────────────────

    def _schedule(self, delay, callback):
        return self.set_timer(delay, callback, name="next-problem")

    def _on_new_problem(self, problem) -> None:
        inp = self.query_one("#answer-input", Input)
        inp.value = ""
        inp.focus()
        self._refresh()

    def _submit(self, value: str) -> None:
        feedback = self.engine.submit_answer(value)
        if feedback is None:
            return
        self._add_history_row(self.engine.history[0])
        self._refresh()

    # ── Display ───────────────────────────────────────────────────────────────

    def _refresh(self) -> None:
        state = self.engine.get_state()

        self.query_one("#score-correct", Static).update(
            f"[bold]Correct:[/bold] {state.score.correct}"
        )
        self.query_one("#score-incorrect", Static).update(
            f"[bold]Incorrect:[/bold] {state.score.incorrect}"
        )

        problem = state.problem
        self.query_one("#problem", Static).update(
            f"[bold cyan]{problem.operand1}[/bold cyan] "
            f"[bold magenta]{TIMES}[/bold magenta] "
            f"[bold cyan]{problem.operand2}[/bold cyan]"
        )

        panel = self.query_one("#problem-panel")
        panel.set_class(state.lock is LockState.CORRECT, "-correct")
        panel.set_class(state.lock is LockState.INCORRECT, "-incorrect")

        feedback = self.query_one("#feedback", Static)
        if state.feedback is None:
            feedback.update("")
        else:
            feedback.update(f"[bold]{state.feedback.message}[/bold]")
            feedback.set_class(state.feedback.is_correct, "-correct")
            feedback.set_class(not state.feedback.is_correct, "-incorrect")

        self.query_one("#history-section").display = bool(state.history)

    def _add_history_row(self, entry) -> None:
        container = self.query_one("#history-list", ScrollableContainer)
        row = HistoryRow(entry)
        if container.children:
            container.mount(row, before=0)
        else:
            container.mount(row)
        container.scroll_home(animate=False)

    # ── Keyboard actions ──────────────────────────────────────────────────────

    def action_show_history(self) -> None:
        self.app.push_screen(HistoryScreen(self.engine.get_state().history))

    # ── Button / Input handlers ───────────────────────────────────────────────

    @on(Input.Changed, "#answer-input")
    def on_answer_changed(self, event: Input.Changed) -> None:
        self.engine.update_input(event.value)

    @on(Input.Submitted, "#answer-input")
    def on_enter(self, event: Input.Submitted) -> None:
        self._submit(event.value)

    @on(Button.Pressed, "#btn-submit")
    def on_submit_btn(self) -> None:
        self._submit(self.query_one("#answer-input", Input).value)

    @on(Button.Pressed, "#btn-details")
    def on_details(self) -> None:
        self.action_show_history()


# ── App ───────────────────────────────────────────────────────────────────────

class DrillApp(App):
    TITLE = "Multiplication Master"
    SUB_TITLE = "Times tables 1–12"

    CSS = """
    Screen { background: $surface; }

    #drill-layout {
        padding: 1 2;
        height: 1fr;
        align: center top;
    }

    #title {
        width: 100%;
        content-align: center middle;
        color: $accent;
        text-style: bold;
    }

    #score-row {
        height: 3;
        margin: 1 0;
        align: center middle;
    }
    .score-box {
        width: 20;
        height: 3;
        margin: 0 2;
        content-align: center middle;
    }
    #score-correct   { background: $success 20%; color: $success; }
    #score-incorrect { background: $error 20%;   color: $error; }

    #problem-panel {
        width: 60;
        height: auto;
        border: solid $primary-darken-2;
        padding: 0 2;
    }
    #problem-panel.-correct   { border: heavy $success; }
    #problem-panel.-incorrect { border: heavy $error; }

    .problem-text {
        width: 100%;
        padding: 1 0;
        content-align: center middle;
    }
    #btn-submit { width: 100%; margin: 1 0 0 0; }

    .feedback-text {
        width: 100%;
        padding: 1 0 0 0;
        content-align: center middle;
    }
    .feedback-text.-correct   { color: $success; }
    .feedback-text.-incorrect { color: $error; }

    #history-section {
        width: 60;
        height: auto;
        margin-top: 1;
    }
    .section-title { color: $text-muted; }
    #history-list {
        height: auto;
        max-height: 8;
        border: solid $primary-darken-2;
    }

    .history-entry { padding: 0 1; }
    .history-entry.-correct   { background: $success 10%; }
    .history-entry.-incorrect { background: $error 10%; }

    #drill-nav {
        width: 60;
        height: 3;
        align: right middle;
    }

    HistoryScreen {
        align: center middle;
        background: $background 60%;
    }
    #history-panel {
        width: 64;
        height: 80%;
        border: thick $primary;
        background: $panel;
        padding: 1 2;
    }
    #history-detail { height: 1fr; }
    #btn-close { margin-top: 1; }

    Input  { margin: 0; }
    Rule   { margin: 1 0; }
    """

    def __init__(self, delay: float = FEEDBACK_DELAY, seed: Optional[int] = None) -> None:
        super().__init__()
        self.delay = delay
        self.seed = seed

    def on_mount(self) -> None:
        self.push_screen(DrillScreen(self.delay, self.seed))


def main(argv=None) -> None:
    args = build_parser("Multiplication Master -- Textual drill").parse_args(argv)
    setup_logging(args.log_level, args.log_file).addHandler(TextualHandler())
    DrillApp(delay=args.delay, seed=args.seed).run()


if __name__ == "__main__":
    main()
