from __future__ import annotations

import pytest

from melody.host import Severity, Stance
from melody.sequencer import Sequencer
from tests._support.fake_host import FakeHost


def make_sequencer(**host_kwargs) -> tuple[Sequencer, FakeHost]:
    host = FakeHost(**host_kwargs)
    return Sequencer(host), host


@pytest.mark.parametrize("slots", [[0], [0, 1], [2, 4, 6], [0, 1, 2, 3], [7, 6, 5, 4, 3]])
def test_start_accepts_one_to_five_valid_slots(slots):
    seq, host = make_sequencer()

    assert seq.start(slots) is True
    assert seq.actions == tuple(slots)
    assert seq.current_index == -1
    assert seq.retry_count == 0
    assert host.message_texts() == ["You begin playing a melody."]


def test_start_rejects_more_than_five_slots_and_keeps_previous_run():
    seq, host = make_sequencer()
    assert seq.start([0, 3])
    seq.tick()
    host.messages.clear()

    assert seq.start([1, 1, 1, 1, 1, 1]) is False

    assert seq.actions == (0, 3)
    assert seq.current_index == 0
    assert len(host.messages) == 1
    assert "up to 5" in host.messages[0][0]


def test_start_rejects_six_entries_when_idle():
    seq, host = make_sequencer()

    assert seq.start([1] * 6) is False
    assert seq.is_active() is False
    assert seq.actions == ()


@pytest.mark.parametrize("slot", [-1, 8, 42])
def test_start_rejects_out_of_range_slot(slot):
    seq, host = make_sequencer()

    assert seq.start([0, slot]) is False
    assert seq.is_active() is False
    assert host.messages == [(f"Error: Invalid spell gem {slot + 1}", Severity.FAILURE)]


def test_start_rejects_empty_loadout_slot():
    seq, host = make_sequencer()
    del host.loadout[3]

    assert seq.start([1, 3]) is False
    assert host.message_texts() == ["Error: spell gem 4 is empty"]


def test_start_requires_active_world():
    seq, host = make_sequencer(world_active=False)

    assert seq.start([0]) is False
    assert seq.is_active() is False
    assert len(host.messages) == 1


def test_start_requires_controlled_entity():
    seq, host = make_sequencer(entity=None)

    assert seq.start([0]) is False
    assert host.message_texts() == ["Can not start melody while stunned."]


def test_start_declined_while_stunned():
    seq, host = make_sequencer()
    host.set_flags(stunned=True)

    assert seq.start([0]) is False
    assert host.message_texts() == ["Can not start melody while stunned."]


@pytest.mark.parametrize("stance", [Stance.SIT, Stance.DUCK, Stance.BIND])
def test_start_requires_standing(stance):
    seq, host = make_sequencer()
    host.set_stance(stance)

    assert seq.start([0]) is False
    assert host.message_texts() == ["Can only start melody when standing."]


def test_rejected_start_does_not_touch_active_run():
    seq, host = make_sequencer()
    assert seq.start([0, 1, 2])
    seq.tick()
    host.set_stance(Stance.DUCK)

    assert seq.start([4]) is False
    assert seq.actions == (0, 1, 2)
    assert seq.current_index == 0


def test_empty_start_is_accepted_and_ends_the_run():
    seq, host = make_sequencer()
    assert seq.start([0, 1])

    assert seq.start([]) is True
    assert seq.is_active() is False
    assert host.message_texts()[-1] == "Your melody has ended."


def test_empty_start_when_idle_has_no_effect():
    seq, host = make_sequencer()

    assert seq.start([]) is True
    assert host.messages == []


def test_restart_resets_counters():
    seq, host = make_sequencer()
    assert seq.start([0, 1])
    seq.tick()
    seq.on_stop_notified(3)
    assert seq.retry_count == 1

    assert seq.start([2, 3])
    assert seq.current_index == -1
    assert seq.retry_count == 0


def test_end_is_idempotent():
    seq, host = make_sequencer()
    seq.end()
    assert host.messages == []

    assert seq.start([0])
    seq.end()
    seq.end()

    assert seq.is_active() is False
    assert seq.current_index == -1
    assert seq.retry_count == 0
    assert host.message_texts().count("Your melody has ended.") == 1


def test_on_log_receives_lifecycle_messages():
    seq, host = make_sequencer()
    lines: list[str] = []
    seq.on_log(lines.append)

    seq.start([1, 2])
    seq.end()

    assert lines == ["Melody started: slots [2, 3]", "Melody ended"]


def test_failing_log_callback_does_not_break_the_sequencer():
    seq, host = make_sequencer()

    def boom(_msg: str) -> None:
        raise RuntimeError("observer failed")

    seq.on_log(boom)
    assert seq.start([0])
    seq.end()
    assert seq.is_active() is False
