"""Tests for betterpaste.services.patch_inbox.PatchInbox."""

import re

from betterpaste.models.block import PatchPayload
from betterpaste.services.patch_inbox import PatchInbox

_PAYLOAD = PatchPayload(file_path="a.py", search_content="old", replace_content="new")


class TestPatchInbox:
    def test_receive_pending(self):
        inbox = PatchInbox()
        entry = inbox.receive(_PAYLOAD)
        assert entry.status == "pending"
        assert entry.data == _PAYLOAD
        assert re.fullmatch(r"\d{2}:\d{2}:\d{2}", entry.timestamp)
        assert inbox.new_patch_alert is True

    def test_receive_queued_while_paused(self):
        inbox = PatchInbox(paused=True)
        assert inbox.receive(_PAYLOAD).status == "queued"

    def test_auto_dismiss_stores_nothing(self):
        inbox = PatchInbox(auto_dismiss=True)
        assert inbox.receive(_PAYLOAD) is None
        assert inbox.entries() == []

    def test_ids_unique_and_increasing(self):
        inbox = PatchInbox()
        ids = [int(inbox.receive(_PAYLOAD).id) for _ in range(5)]
        assert ids == sorted(set(ids))

    def test_entries_clears_alert(self):
        inbox = PatchInbox()
        inbox.receive(_PAYLOAD)
        assert len(inbox.entries()) == 1
        assert inbox.new_patch_alert is False

    def test_unpause_releases_queued(self):
        inbox = PatchInbox(paused=True)
        inbox.receive(_PAYLOAD)
        inbox.receive(_PAYLOAD)
        assert inbox.unpause() == 2
        assert inbox.paused is False
        assert {e.status for e in inbox.entries()} == {"pending"}

    def test_pause_queues_new_entries(self):
        inbox = PatchInbox()
        inbox.receive(_PAYLOAD)
        inbox.pause()
        inbox.receive(_PAYLOAD)
        assert [e.status for e in inbox.entries()] == ["pending", "queued"]

    def test_clear(self):
        inbox = PatchInbox()
        inbox.receive(_PAYLOAD)
        inbox.clear()
        assert inbox.entries() == []
