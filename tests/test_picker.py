"""
Tests for the picker state machine
"""

import pytest

from elpick_core.highlight import ClassHighlighter
from elpick_core.picker import PickerController, PickerState


PAGE = """
<html><body>
  <div data-devtoolkit="true" id="panel"><button id="pick">Pick</button></div>
  <main><p id="a">A</p><p id="b">B</p></main>
</body></html>
"""

HIGHLIGHT = "element-highlight"


@pytest.fixture
def page(make_doc):
    return make_doc(PAGE)


@pytest.fixture
def picker(page):
    return PickerController(page, highlighter=ClassHighlighter(HIGHLIGHT), chrome_marker="data-devtoolkit")


def classes(element):
    return element.get("class") or []


class TestStartStop:
    """Session lifecycle and idempotence."""

    def test_initially_idle(self, picker, page):
        assert picker.state is PickerState.IDLE
        assert picker.session is None
        assert page.listener_count() == 0

    def test_start_registers_capture_listeners(self, picker, page):
        assert picker.start(lambda commit: None, source="inspector") is True
        assert picker.state is PickerState.ACTIVE
        assert page.listener_count("mousemove") == 1
        assert page.listener_count("click") == 1

    def test_second_start_is_ignored(self, picker, page):
        first = []
        picker.start(first.append, source="inspector")
        assert picker.start(lambda commit: None, source="filters") is False
        assert page.listener_count() == 2
        assert picker.session.source == "inspector"

    def test_stop_while_idle_is_noop(self, picker, page):
        picker.stop()
        assert picker.state is PickerState.IDLE
        assert page.listener_count() == 0
        assert page.cursor == ""

    def test_stop_removes_listeners_and_cursor(self, picker, page):
        picker.start(lambda commit: None, cursor_style="copy")
        assert page.cursor == "copy"
        picker.stop()
        assert page.listener_count() == 0
        assert page.cursor == ""
        assert picker.state is PickerState.IDLE

    def test_state_listeners(self, picker):
        changes = []
        picker.add_state_listener(lambda active, source: changes.append((active, source)))
        picker.start(lambda commit: None, source="colors")
        picker.stop()
        picker.stop()
        assert changes == [(True, "colors"), (False, "colors")]


class TestHover:
    """Highlight follows the pointer, never the tool's chrome."""

    def test_hover_moves_highlight(self, picker, page):
        a, b = page.query("#a"), page.query("#b")
        picker.start(lambda commit: None)
        page.dispatch("mousemove", a)
        assert HIGHLIGHT in classes(a)
        page.dispatch("mousemove", b)
        assert HIGHLIGHT not in classes(a)
        assert HIGHLIGHT in classes(b)
        assert picker.session.current_hover_target is b

    def test_hover_on_chrome_clears(self, picker, page):
        a = page.query("#a")
        picker.start(lambda commit: None)
        page.dispatch("mousemove", a)
        page.dispatch("mousemove", page.query("#pick"))
        assert HIGHLIGHT not in classes(a)
        assert HIGHLIGHT not in classes(page.query("#pick"))
        assert picker.session.current_hover_target is None

    def test_highlight_disabled_still_tracks_target(self, picker, page):
        a = page.query("#a")
        picker.start(lambda commit: None, highlight_enabled=False)
        page.dispatch("mousemove", a)
        assert HIGHLIGHT not in classes(a)
        assert picker.session.current_hover_target is a

    def test_stop_clears_highlight(self, picker, page):
        a = page.query("#a")
        picker.start(lambda commit: None)
        page.dispatch("mousemove", a)
        picker.stop()
        assert HIGHLIGHT not in classes(a)
        assert "class" not in a.attrs

    def test_update_hook(self, page):
        updates = []
        picker = PickerController(page, highlighter=ClassHighlighter(HIGHLIGHT, on_update=updates.append))
        a, b = page.query("#a"), page.query("#b")
        picker.start(lambda commit: None)
        page.dispatch("mousemove", a)
        page.dispatch("mousemove", a)
        page.dispatch("mousemove", b)
        assert len(updates) == 3
        assert updates[0] is a
        assert updates[1] is None
        assert updates[2] is b

    def test_hover_while_idle_does_nothing(self, picker, page):
        a = page.query("#a")
        page.dispatch("mousemove", a)
        assert HIGHLIGHT not in classes(a)


class TestClick:
    """Click commits exactly once and ends the session."""

    def test_click_commits_and_stops(self, picker, page):
        commits = []
        b = page.query("#b")
        picker.start(commits.append, source="inspector")
        page.dispatch("mousemove", b)
        event = page.dispatch("click", b)

        assert len(commits) == 1
        assert commits[0].element is b
        assert commits[0].source == "inspector"
        assert event.default_prevented
        assert event.propagation_stopped
        assert picker.state is PickerState.IDLE
        assert page.listener_count() == 0
        assert HIGHLIGHT not in classes(b)

        page.dispatch("click", b)
        assert len(commits) == 1

    def test_click_on_chrome_passes_through(self, picker, page):
        commits = []
        picker.start(commits.append)
        event = page.dispatch("click", page.query("#pick"))
        assert commits == []
        assert not event.default_prevented
        assert picker.is_active

    def test_page_listeners_blocked_only_while_picking(self, picker, page):
        seen = []
        page.add_event_listener("click", lambda event: seen.append(event.target))
        b = page.query("#b")
        picker.start(lambda commit: None)
        page.dispatch("click", b)
        assert seen == []
        page.dispatch("click", b)
        assert len(seen) == 1

    def test_text_node_resolves_to_element(self, picker, page):
        commits = []
        a = page.query("#a")
        picker.start(commits.append)
        page.dispatch("click", a.string)
        assert commits[0].element is a

    def test_missing_handler(self, picker, page):
        picker.start(None)
        page.dispatch("click", page.query("#a"))
        assert picker.state is PickerState.IDLE

    def test_handler_can_restart(self, picker, page):
        commits = []

        def again(commit):
            commits.append(commit)
            picker.start(commits.append, source="second")

        picker.start(again, source="first")
        page.dispatch("click", page.query("#a"))
        assert picker.is_active
        assert picker.session.source == "second"
        page.dispatch("click", page.query("#b"))
        assert [c.source for c in commits] == ["first", "second"]
