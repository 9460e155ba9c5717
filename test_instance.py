"""Conversation store: page bookkeeping, routing, rosters and scrolling."""

import pytest

from conftest import make_instance
from pagechat.config import HOME_PAGE_NAME, WELCOME_BANNER
from pagechat.errors import DuplicateName, IndexOutOfRange, PermissionDenied
from pagechat.instance import Instance, SharedInstance
from pagechat.models import Page, RosterState


def test_new_instance_has_only_home_page(instance):
    assert instance.names() == [HOME_PAGE_NAME]
    assert instance.get_current() == 0
    assert instance.get_chat() == WELCOME_BANNER


def test_names_placeholder_when_empty():
    assert Instance().names() == [""]


def test_add_keeps_insertion_order_and_current():
    inst = make_instance("bob", "#ops", "carol")
    assert inst.names() == [HOME_PAGE_NAME, "bob", "#ops", "carol"]
    assert inst.get_current() == 0


def test_add_duplicate_is_rejected_and_store_unchanged():
    inst = make_instance("bob")
    inst.pages[1].lines.append("hello")
    with pytest.raises(DuplicateName):
        inst.add(Page("bob", ["other"]))
    assert inst.names() == [HOME_PAGE_NAME, "bob"]
    assert inst.pages[1].lines == ["hello"]


@pytest.mark.parametrize("index, ok", [(0, True), (2, True), (3, False), (10, False), (-1, False)])
def test_set_current_bounds(three_pages, index, ok):
    if ok:
        three_pages.set_current(index)
        assert three_pages.get_current() == index
    else:
        with pytest.raises(IndexOutOfRange):
            three_pages.set_current(index)
        assert three_pages.get_current() == 0


def test_next_page_cycles(three_pages):
    seen = []
    for _ in range(4):
        three_pages.next_page()
        seen.append(three_pages.get_current())
    assert seen == [1, 2, 0, 1]


def test_next_page_single_page_noop(instance):
    instance.next_page()
    assert instance.get_current() == 0


def test_append_line_splits_physical_lines(three_pages):
    three_pages.append_line(1, "one\ntwo\nthree")
    assert three_pages.pages[1].lines == ["one", "two", "three"]


def test_append_line_empty_text_is_one_line(instance):
    before = len(instance.get_chat())
    instance.append_line(None, "")
    assert len(instance.get_chat()) == before + 1


def test_append_line_bad_index(three_pages):
    with pytest.raises(IndexOutOfRange):
        three_pages.append_line(7, "x")


def test_add_err_goes_to_current_page(three_pages):
    three_pages.set_current(2)
    three_pages.add_err("boom")
    assert three_pages.pages[2].lines[-1] == "[ERR]: boom"


def test_route_incoming_direct_message_to_sender_page(three_pages):
    three_pages.route_incoming("alice", "me", "hi")
    assert three_pages.pages[1].lines == ["[alice]: hi"]


def test_route_incoming_group_message_to_group_page(three_pages):
    three_pages.route_incoming("dave", "#team", "standup?")
    assert three_pages.pages[2].lines == ["[dave]: standup?"]
    assert "dave" not in three_pages.names()


def test_route_incoming_unknown_sender_creates_page(three_pages):
    three_pages.route_incoming("erin", "me", "first\nsecond")
    assert three_pages.names()[-1] == "erin"
    assert three_pages.pages[-1].lines == ["[erin]: first", "second"]
    assert three_pages.get_current() == 0


def test_route_incoming_unknown_group_creates_group_page(instance):
    instance.route_incoming("dave", "#new", "hey")
    assert instance.names()[-1] == "#new"


def test_remove_current_home_is_denied(three_pages):
    with pytest.raises(PermissionDenied):
        three_pages.remove_current()
    assert len(three_pages.pages) == 3


def test_remove_current_moves_to_following_page():
    inst = make_instance("a", "b", "c")
    inst.set_current(1)
    assert inst.remove_current() == "a"
    assert inst.names() == [HOME_PAGE_NAME, "b", "c"]
    assert inst.get_name() == "b"


def test_remove_current_last_page_wraps_to_home():
    inst = make_instance("a", "b")
    inst.set_current(2)
    assert inst.remove_current() == "b"
    assert inst.get_current() == 0


def test_remove_current_always_leaves_valid_current():
    inst = make_instance("a", "b", "c", "d")
    for start in (4, 1, 2, 1):
        inst.set_current(min(start, len(inst.pages) - 1))
        if inst.get_current() == 0:
            continue
        before = inst.names()
        removed = inst.remove_current()
        assert 0 <= inst.get_current() < len(inst.pages)
        assert inst.get_name() in before
        assert inst.get_name() != removed


def test_roster_tristate(three_pages):
    team = three_pages.pages[2]
    assert team.roster_state is RosterState.ABSENT

    three_pages.add_roster_members("#team", [])
    assert team.roster_state is RosterState.EMPTY

    three_pages.add_roster_members("#team", ["ann", "ben"])
    assert team.roster_state is RosterState.POPULATED

    three_pages.remove_roster_members("#team", ["ann", "ben"])
    assert team.roster_state is RosterState.EMPTY
    assert team.roster == set()


def test_roster_add_is_idempotent(three_pages):
    three_pages.add_roster_members("#team", ["ann"])
    three_pages.add_roster_members("#team", ["ann"])
    assert three_pages.pages[2].roster == {"ann"}


def test_roster_remove_non_member_is_silent(three_pages):
    three_pages.add_roster_members("#team", ["ann"])
    three_pages.remove_roster_members("#team", ["zed"])
    assert three_pages.pages[2].roster == {"ann"}


def test_roster_remove_before_any_add_stays_absent(three_pages):
    three_pages.remove_roster_members("#team", ["ann"])
    assert three_pages.pages[2].roster_state is RosterState.ABSENT


def test_roster_unknown_page_noop(three_pages):
    three_pages.add_roster_members("#nope", ["ann"])
    assert all(p.roster is None for p in three_pages.pages)


def test_get_roster_for_current_page(three_pages):
    three_pages.add_roster_members("#team", ["ben", "ann"])
    assert three_pages.get_roster() is None
    three_pages.set_current(2)
    assert three_pages.get_roster() == ["ann", "ben"]


def test_scroll_down_floors_at_zero(instance):
    instance.scroll_down()
    assert instance.pages[0].scroll == 0
    instance.scroll_up()
    instance.scroll_up()
    instance.scroll_down()
    assert instance.pages[0].scroll == 1


def test_scroll_is_per_page(three_pages):
    three_pages.scroll_up()
    three_pages.next_page()
    assert three_pages.pages[1].scroll == 0
    assert three_pages.pages[0].scroll == 1


def test_display_range_clamps_stale_scroll():
    inst = make_instance("a")
    inst.set_current(1)
    inst.append_line(None, "\n".join(str(i) for i in range(50)))
    for _ in range(100):
        inst.scroll_up()
    shown = inst.display_range(20)
    assert inst.pages[1].scroll == 32
    assert shown == range(0, 18)


async def test_snapshot_reads_visible_window(shared):
    await shared.append_line(None, "\n".join(f"line {i}" for i in range(30)))
    snap = await shared.snapshot(12)
    assert snap.current == 0
    assert snap.names == [HOME_PAGE_NAME]
    assert len(snap.lines) == 10
    assert snap.lines[-1] == "line 29"
    assert snap.roster is None
    assert snap.roster_state is RosterState.ABSENT


async def test_snapshot_carries_roster_state(three_pages):
    shared = SharedInstance(three_pages)
    three_pages.set_current(2)
    three_pages.add_roster_members("#team", [])
    assert (await shared.snapshot(20)).roster_state is RosterState.EMPTY

    three_pages.add_roster_members("#team", ["ben", "ann"])
    snap = await shared.snapshot(20)
    assert snap.roster_state is RosterState.POPULATED
    assert snap.roster == ["ann", "ben"]
