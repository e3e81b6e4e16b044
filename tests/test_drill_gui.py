from textual.widgets import Input

from drill import HistoryEntry, LockState, Score
from drill_gui import DrillApp, DrillScreen, HistoryRow, HistoryScreen

SIZE = (100, 50)


async def _answer(pilot, text):
    await pilot.press(*text, "enter")
    await pilot.pause()


async def test_starts_idle_with_a_problem():
    app = DrillApp(delay=30, seed=3)
    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        screen = app.screen
        assert isinstance(screen, DrillScreen)
        state = screen.engine.get_state()
        assert state.lock is LockState.NONE
        assert 1 <= state.problem.operand1 <= 12
        assert screen.query_one("#answer-input", Input).has_focus
        assert not screen.query_one("#history-section").display


async def test_correct_answer_locks_until_next_problem():
    app = DrillApp(delay=30, seed=3)
    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        screen = app.screen
        first = screen.engine.problem
        panel = screen.query_one("#problem-panel")

        await _answer(pilot, str(first.answer))

        state = screen.engine.get_state()
        assert state.score == Score(1, 0)
        assert state.lock is LockState.CORRECT
        assert state.feedback.message == "CORRECT!"
        assert panel.has_class("-correct")
        assert screen.query_one("#feedback").has_class("-correct")

        # still locked: pressing enter again changes nothing
        await pilot.press("enter")
        await pilot.pause()
        assert screen.engine.get_state().score.total == 1

        screen.engine.complete_transition()
        await pilot.pause()
        assert not panel.has_class("-correct")
        assert screen.engine.problem is not first
        assert screen.query_one("#answer-input", Input).value == ""


async def test_blank_enter_is_ignored():
    app = DrillApp(delay=30, seed=3)
    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        screen = app.screen
        problem = screen.engine.problem
        await _answer(pilot, "")
        assert screen.engine.get_state().history == ()
        assert screen.engine.problem is problem


async def test_next_problem_after_delay():
    app = DrillApp(delay=0.05, seed=11)
    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        screen = app.screen
        first = screen.engine.problem

        await _answer(pilot, "0")
        await pilot.pause(0.5)

        state = screen.engine.get_state()
        assert state.score == Score(0, 1)
        assert state.lock is LockState.NONE
        assert state.problem is not first
        assert state.feedback.message == f"NICE TRY! The answer was {first.answer}."
        assert screen.query_one("#history-section").display
        rows = list(screen.query_one("#history-list").query(HistoryRow))
        assert [row.entry for row in rows] == list(state.history)


async def test_submit_button():
    app = DrillApp(delay=30, seed=5)
    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        screen = app.screen
        await pilot.press("a", "b", "c")
        await pilot.click("#btn-submit")
        await pilot.pause()
        entry = screen.engine.history[0]
        assert entry.user_answer == "abc"
        assert not entry.is_correct


async def test_overlay_empty_history_shows_placeholder():
    app = DrillApp(delay=30, seed=3)
    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        await pilot.press("f2")
        await pilot.pause()
        overlay = app.screen
        assert isinstance(overlay, HistoryScreen)
        assert len(overlay.query("#history-empty")) == 1
        assert len(overlay.query(HistoryRow)) == 0


async def test_overlay_lists_entries_newest_first():
    app = DrillApp(delay=0.01, seed=8)
    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        screen = app.screen
        for text in ["0", "abc", None]:
            await _answer(pilot, text or str(screen.engine.problem.answer))
            await pilot.pause(0.2)
        history = screen.engine.get_state().history
        assert [entry.is_correct for entry in history] == [True, False, False]
        assert history[1].user_answer == "abc"

        await pilot.click("#btn-details")
        await pilot.pause()

        overlay = app.screen
        assert isinstance(overlay, HistoryScreen)
        assert [row.entry for row in overlay.query(HistoryRow)] == list(history)
        assert len(overlay.query("#history-empty")) == 0


async def test_escape_closes_overlay_once():
    app = DrillApp(delay=30, seed=3)
    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        drill_screen = app.screen
        depth = len(app.screen_stack)

        await pilot.press("f2")
        await pilot.pause()
        assert isinstance(app.screen, HistoryScreen)

        await pilot.press("escape")
        await pilot.pause()
        assert app.screen is drill_screen
        assert len(app.screen_stack) == depth

        await pilot.press("escape")
        await pilot.pause()
        assert app.screen is drill_screen
        assert len(app.screen_stack) == depth


async def test_overlay_reopens_after_close():
    app = DrillApp(delay=30, seed=3)
    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        for _ in range(3):
            await pilot.press("f2")
            await pilot.pause()
            assert isinstance(app.screen, HistoryScreen)
            await pilot.click("#btn-close")
            await pilot.pause()
            assert isinstance(app.screen, DrillScreen)


async def test_panel_click_keeps_overlay_and_backdrop_click_closes():
    app = DrillApp(delay=30, seed=3)
    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        await pilot.press("f2")
        await pilot.pause()

        await pilot.click("#history-title")
        await pilot.pause()
        assert isinstance(app.screen, HistoryScreen)

        await pilot.click(offset=(0, 0))
        await pilot.pause()
        assert isinstance(app.screen, DrillScreen)


async def test_engine_closed_on_teardown():
    app = DrillApp(delay=30, seed=3)
    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        screen = app.screen
        await _answer(pilot, "0")
        assert screen.engine.get_state().pending
    assert not screen.engine.active


async def test_overlay_rows_show_correct_answer_only_when_wrong():
    history = [
        HistoryEntry("3 × 4", "10", 12, False),
        HistoryEntry("2 × 5", "10", 10, True),
    ]
    app = DrillApp(delay=30, seed=3)
    async with app.run_test(size=SIZE) as pilot:
        await pilot.pause()
        app.push_screen(HistoryScreen(history))
        await pilot.pause()

        wrong, right = app.screen.query(HistoryRow)
        wrong_text = wrong.render().plain
        right_text = right.render().plain

        assert wrong.has_class("-incorrect")
        assert "✘" in wrong_text
        assert "You said: 10" in wrong_text
        assert "Correct answer: 12" in wrong_text

        assert right.has_class("-correct")
        assert "✔" in right_text
        assert "You said: 10" in right_text
        assert "Correct answer" not in right_text
