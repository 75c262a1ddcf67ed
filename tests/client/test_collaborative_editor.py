"""
Tests for the collaborative editor, wired to the real relay handlers through
an in-process loopback hub instead of a network socket.
"""

import os
import sys

# CRITICAL: Set Windows event loop policy FIRST, before other imports
if sys.platform == "win32":
    import asyncio

    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Load environment variables early
from dotenv import load_dotenv

load_dotenv()

# Constants
try:
    from pathlib import Path

    BASE_DIR = Path(__file__).resolve().parents[2]
except NameError:
    BASE_DIR = Path(os.getcwd()).parents[0]
sys.path.insert(0, str(BASE_DIR))

import asyncio

import pytest

from storypad_client.editor import (
    USER_COLORS,
    CollaborativeEditor,
    ConnectionState,
    get_user_color,
)
from tests.helpers import LoopbackHub

ALICE = {"id": "u1", "username": "alice"}
BOB = {"id": "u2", "username": "bob"}


@pytest.fixture
def hub():
    return LoopbackHub()


def make_editor(hub, user, chapter_index=0, story_id="s1", **kwargs):
    changes = []
    editor = CollaborativeEditor(
        story_id=story_id,
        chapter_index=chapter_index,
        current_user=user,
        on_change=changes.append,
        socket_url="http://relay.test",
        client_factory=hub.client_factory,
        **kwargs,
    )
    editor.changes = changes
    return editor


# ==============================================================================
# COLOURS
# ==============================================================================
def test_user_color_is_stable_and_defaults_to_first():
    assert get_user_color(None) == USER_COLORS[0]
    assert get_user_color("") == USER_COLORS[0]
    # "u" is code point 117, 117 % 8 == 5
    assert get_user_color("u1") == USER_COLORS[5]
    assert get_user_color("u1") == get_user_color("u2")
    assert len(USER_COLORS) == 8


# ==============================================================================
# LIFECYCLE
# ==============================================================================
@pytest.mark.asyncio
@pytest.mark.parametrize(
    "story_id,user", [("new", ALICE), ("", ALICE), (None, ALICE), ("s1", None)]
)
async def test_mount_skipped_without_story_or_user(hub, story_id, user):
    editor = make_editor(hub, user, story_id=story_id)

    assert await editor.mount() is False
    assert editor.state == ConnectionState.DISCONNECTED
    assert editor.socket is None
    assert hub.clients == {}


@pytest.mark.asyncio
async def test_mount_joins_room(hub):
    editor = make_editor(hub, ALICE)

    assert await editor.mount() is True

    assert editor.state == ConnectionState.JOINED
    assert editor.connected
    assert editor.status_label == "Connected"
    assert editor.socket.connect_calls == [("http://relay.test", ["websocket", "polling"])]
    assert editor.socket.sent[0] == (
        "join-story",
        {"storyId": "s1", "username": "alice", "userId": "u1"},
    )
    assert hub.registry.lookup(editor.socket.sid).user_id == "u1"
    await editor.unmount()


@pytest.mark.asyncio
async def test_connection_failure_leaves_editor_disconnected(hub):
    hub.refuse_connections = True
    editor = make_editor(hub, ALICE)

    assert await editor.mount() is False
    assert editor.state == ConnectionState.DISCONNECTED
    assert editor.status_label == "Disconnected"


@pytest.mark.asyncio
async def test_unmount_disconnects_and_peers_see_user_left(hub):
    alice = make_editor(hub, ALICE)
    bob = make_editor(hub, BOB)
    await alice.mount()
    await bob.mount()
    await alice.handle_cursor_change(3)
    assert alice.socket.sid in bob.cursors

    alice_sid = alice.socket.sid
    await alice.unmount()

    assert alice.state == ConnectionState.DISCONNECTED
    assert not alice.connected
    assert alice_sid not in hub.registry
    assert bob.active_users == []
    assert alice_sid not in bob.cursors
    await bob.unmount()


# ==============================================================================
# PRESENCE
# ==============================================================================
@pytest.mark.asyncio
async def test_presence_lists(hub):
    alice = make_editor(hub, ALICE)
    bob = make_editor(hub, BOB)
    await alice.mount()
    await bob.mount()

    assert bob.active_users == [{"userId": "u1", "username": "alice"}]
    assert alice.active_users == [
        {"userId": "u2", "username": "bob", "socketId": bob.socket.sid}
    ]
    assert alice.others_label == "1 other online"

    # A second tab of bob replaces his entry instead of duplicating it
    bob_tab = make_editor(hub, BOB)
    await bob_tab.mount()
    assert [u["userId"] for u in alice.active_users] == ["u2"]
    assert alice.active_users[0]["socketId"] == bob_tab.socket.sid
    assert bob_tab.active_users == [{"userId": "u1", "username": "alice"}]

    for editor in (alice, bob, bob_tab):
        await editor.unmount()


# ==============================================================================
# CONTENT
# ==============================================================================
@pytest.mark.asyncio
async def test_last_writer_wins_between_two_editors(hub):
    u1 = make_editor(hub, ALICE)
    u2 = make_editor(hub, BOB)
    await u1.mount()
    await u2.mount()

    await u1.handle_text_change("Hello")
    assert u2.value == "Hello"
    assert u2.changes == ["Hello"]
    assert u2.someone_typing

    # Let u2's remote-change window close before it types
    await asyncio.sleep(0.15)
    assert not u2.someone_typing

    await u2.handle_text_change("Hello world")
    assert u1.value == "Hello world"
    assert u1.changes == ["Hello", "Hello world"]

    await u1.unmount()
    await u2.unmount()


@pytest.mark.asyncio
async def test_text_change_never_echoes_to_sender(hub):
    u1 = make_editor(hub, ALICE)
    u2 = make_editor(hub, BOB)
    await u1.mount()
    await u2.mount()

    await u1.handle_text_change("draft")

    # u1 only saw its own local change
    assert u1.changes == ["draft"]
    assert not u1.someone_typing
    await u1.unmount()
    await u2.unmount()


@pytest.mark.asyncio
async def test_other_chapter_does_not_touch_buffer(hub):
    chapter0 = make_editor(hub, ALICE, chapter_index=0, value="chapter zero text")
    chapter2 = make_editor(hub, BOB, chapter_index=2)
    await chapter0.mount()
    await chapter2.mount()

    await chapter2.handle_text_change("chapter two text")
    await chapter2.handle_cursor_change(5)

    assert chapter0.value == "chapter zero text"
    assert chapter0.changes == []
    assert not chapter0.someone_typing
    assert chapter0.cursors == {}
    await chapter0.unmount()
    await chapter2.unmount()


@pytest.mark.asyncio
async def test_local_edit_during_remote_window_is_not_rebroadcast(hub):
    u1 = make_editor(hub, ALICE)
    u2 = make_editor(hub, BOB)
    await u1.mount()
    await u2.mount()

    await u1.handle_text_change("Hello")
    sent_before = list(u2.socket.sent)
    await u2.handle_text_change("Hello!")

    assert u2.value == "Hello!"
    assert u2.socket.sent == sent_before
    assert u1.value == "Hello"
    await u1.unmount()
    await u2.unmount()


@pytest.mark.asyncio
async def test_remote_cursor_gets_colour(hub):
    u1 = make_editor(hub, ALICE)
    u2 = make_editor(hub, BOB)
    await u1.mount()
    await u2.mount()

    await u2.handle_cursor_change(7)

    assert u1.cursors == {
        u2.socket.sid: {
            "position": 7,
            "username": "bob",
            "userId": "u2",
            "color": get_user_color("u2"),
        }
    }
    await u1.unmount()
    await u2.unmount()


@pytest.mark.asyncio
async def test_local_edit_while_disconnected_stays_local(hub):
    editor = make_editor(hub, ALICE, story_id="new")
    await editor.mount()

    await editor.handle_text_change("offline draft")
    await editor.handle_cursor_change(2)

    assert editor.value == "offline draft"
    assert editor.changes == ["offline draft"]
