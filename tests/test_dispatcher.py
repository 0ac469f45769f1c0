from __future__ import annotations

import threading

from conftest import make_dispatcher
from osc_display.commands import ArgShape, CommandRegistry, register_command
from osc_display.core.addressing import AddressingPolicy
from osc_display.core.result import ErrorKind
from osc_display.dispatcher import UNMATCHED, Dispatcher
from osc_display.flush import FlushMode
from osc_display.utils.profiler import DispatchProfiler


def surfaces(dispatcher: Dispatcher):
    return [target.surface for target in dispatcher.state.targets]


def test_unknown_address_fails_no_pattern_matched(dispatcher) -> None:
    result = dispatcher.dispatch("/unknown", [1.0])

    assert result.error == ErrorKind.NO_PATTERN_MATCHED
    assert result.code == 1
    assert all(s.calls == [] for s in surfaces(dispatcher))


def test_parameters_with_missing_argument_draws_nothing(dispatcher) -> None:
    result = dispatcher.dispatch("/parameters", [0.1, 0.2])

    assert result.error == ErrorKind.ARGUMENT_SHAPE_MISMATCH
    assert all(s.calls == [] and s.flush_count == 0 for s in surfaces(dispatcher))


def test_parameters_draw_three_bars_and_flush(dispatcher) -> None:
    result = dispatcher.dispatch("/parameters", [0.0, 0.5, 1.0])
    surface = surfaces(dispatcher)[0]

    assert result.ok and result.mutated and result.target == 0
    assert surface.calls[0] == ("clear",)
    assert [c[3] for c in surface.calls if c[0] == "text"] == ["P1", "P2", "P3"]
    boxes = [c for c in surface.calls if c[0] == "box"]
    assert len(boxes) == 3
    assert boxes[0][3] == 0
    assert boxes[2][3] == 128 - (6 * 2 + 2)
    assert surface.flush_count == 1


def test_target_mode_undefined_value_keeps_policy(dispatcher) -> None:
    result = dispatcher.dispatch("/targetMode", [7])

    assert result.error == ErrorKind.VALUE_OUT_OF_RANGE
    assert dispatcher.state.resolver.policy == AddressingPolicy.SINGLE


def test_target_mode_wrong_shape(dispatcher) -> None:
    result = dispatcher.dispatch("/targetMode", [])

    assert result.error == ErrorKind.ARGUMENT_SHAPE_MISMATCH


def test_target_rejected_unless_stateful(dispatcher) -> None:
    result = dispatcher.dispatch("/target", [1])

    assert result.error == ErrorKind.ADDRESSING_MODE_INVALID


def test_stateful_target_routes_following_messages(dispatcher) -> None:
    assert dispatcher.dispatch("/targetMode", [2]).ok
    assert dispatcher.dispatch("/target", [1]).ok

    result = dispatcher.dispatch("/number", [42])

    assert result.target == 1
    first, second, third = surfaces(dispatcher)
    assert ("text", 58, 28, "42") in second.calls
    assert first.calls == [] and third.calls == []


def test_control_messages_never_flush(dispatcher) -> None:
    dispatcher.dispatch("/targetMode", ["stateful"])
    result = dispatcher.dispatch("/target", [2])

    assert result.ok and not result.mutated and result.target is None
    assert all(s.flush_count == 0 for s in surfaces(dispatcher))


def test_single_mode_ignores_active_target(dispatcher) -> None:
    dispatcher.dispatch("/targetMode", [2])
    dispatcher.dispatch("/target", [2])
    dispatcher.dispatch("/targetMode", [0])

    result = dispatcher.dispatch("/display-text", ["hello"])

    assert result.target == 0
    assert surfaces(dispatcher)[0].drawing_calls == [("text", 0, 0, "hello")]


def test_per_message_routes_by_leading_index() -> None:
    dispatcher = make_dispatcher(policy=AddressingPolicy.PER_MESSAGE)

    result = dispatcher.dispatch("/display-text", [2, "two"])

    assert result.target == 2
    assert dispatcher.state.resolver.active_target == 2
    assert surfaces(dispatcher)[2].drawing_calls == [("text", 0, 0, "two")]


def test_per_message_out_of_range_aborts_before_drawing() -> None:
    dispatcher = make_dispatcher(policy=AddressingPolicy.PER_MESSAGE)

    result = dispatcher.dispatch("/display-text", [5, "five"])

    assert result.error == ErrorKind.VALUE_OUT_OF_RANGE
    assert all(s.calls == [] for s in surfaces(dispatcher))


def test_per_message_validation_failure_keeps_active_target() -> None:
    dispatcher = make_dispatcher(policy=AddressingPolicy.PER_MESSAGE)

    result = dispatcher.dispatch("/parameters", [2, 0.1])

    assert result.error == ErrorKind.ARGUMENT_SHAPE_MISMATCH
    assert result.target == 2
    assert dispatcher.state.resolver.active_target == 0


def test_waveform_maps_columns_to_values() -> None:
    dispatcher = make_dispatcher(count=1, width=10, height=10)

    dispatcher.dispatch("/waveform", [0.0, 1.0, 0.5, 0.0, 1.0])

    pixels = surfaces(dispatcher)[0].pixels()
    # index = floor(x * 5 / 10), y = floor(value * 10) clamped to the surface
    assert pixels == [(0, 0), (1, 0), (2, 9), (3, 9), (4, 5), (5, 5),
                      (6, 0), (7, 0), (8, 9), (9, 9)]


def test_points_trail_through_dispatch() -> None:
    dispatcher = make_dispatcher(count=1)
    surface = surfaces(dispatcher)[0]

    assert dispatcher.dispatch("/points/persistence", [3]).ok
    state_result = dispatcher.dispatch("/points/values-px", [4, 5])
    assert state_result.ok and not state_result.mutated
    assert surface.flush_count == 0

    for _ in range(4):
        assert dispatcher.dispatch("/points/tick").mutated

    assert surface.pixels() == [(4, 5)] * 3
    assert surface.flush_count == 4


def test_points_values_rel_requires_pairs(dispatcher) -> None:
    result = dispatcher.dispatch("/points/values-rel", [0.5, 0.5, 0.1])

    assert result.error == ErrorKind.ARGUMENT_SHAPE_MISMATCH
    assert dispatcher.state.targets[0].points.live_cells == 0


def test_display_strings_and_numbers_lines(dispatcher) -> None:
    result = dispatcher.dispatch("/display-strings-and-numbers", ["freq", 440, "q", 0.25])

    assert result.ok
    assert surfaces(dispatcher)[0].drawing_calls == [
        ("text", 0, 0, "freq 440"),
        ("text", 0, 8, "q 0.25"),
    ]


def test_display_strings_and_numbers_rejects_bad_pairing(dispatcher) -> None:
    result = dispatcher.dispatch("/display-strings-and-numbers", ["freq", 440, 3, "q"])

    assert result.error == ErrorKind.ARGUMENT_SHAPE_MISMATCH
    assert surfaces(dispatcher)[0].calls == []


def test_lfos_draw_bipolar_bars(dispatcher) -> None:
    dispatcher.dispatch("/lfos", [1.0, -0.5])

    boxes = [c for c in surfaces(dispatcher)[0].calls if c[0] == "box"]
    assert boxes == [("box", 0, 0, 63, 32), ("box", 64, 32, 63, 16)]


def test_polled_mode_coalesces_flushes() -> None:
    dispatcher = make_dispatcher(mode=FlushMode.POLLED)
    first, second, _ = surfaces(dispatcher)

    dispatcher.dispatch("/number", [1])
    dispatcher.dispatch("/number", [2])
    dispatcher.dispatch("/targetMode", [1])
    dispatcher.dispatch("/number", [1, 3])
    assert first.flush_count == 0 and second.flush_count == 0

    assert dispatcher.scheduler.poll() == 2
    assert first.flush_count == 1 and second.flush_count == 1
    assert dispatcher.scheduler.poll() == 0


def test_handle_message_returns_status_codes(dispatcher) -> None:
    assert dispatcher.handle_message("127.0.0.1:9000", "/number", 3) == 0
    assert dispatcher.handle_message("127.0.0.1:9000", "/nope") == 1


def test_handle_message_survives_action_errors() -> None:
    registry = CommandRegistry()

    @register_command("/boom", ArgShape(), registry=registry)
    def boom(target):
        raise RuntimeError("boom")

    base = make_dispatcher(count=1)
    dispatcher = Dispatcher(base.state, registry, base.scheduler)

    assert dispatcher.handle_message("test", "/boom") == 1
    dispatcher.drain()


def test_concurrent_messages_are_serialized() -> None:
    dispatcher = make_dispatcher(policy=AddressingPolicy.PER_MESSAGE)
    codes = []
    codes_lock = threading.Lock()

    def worker(index: int) -> None:
        for i in range(50):
            code = dispatcher.handle_message("test", "/points/values-px", index, i % 16, index)
            with codes_lock:
                codes.append(code)

    threads = [threading.Thread(target=worker, args=(i % 3,)) for i in range(6)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert codes == [0] * 300
    for target in dispatcher.state.targets:
        assert target.points.live_cells == 16


def test_unknown_address_under_per_message_fails_no_pattern_matched() -> None:
    dispatcher = make_dispatcher(policy=AddressingPolicy.PER_MESSAGE)

    no_args = dispatcher.dispatch("/unknown")
    bad_index = dispatcher.dispatch("/unknown", [9])

    assert no_args.error == ErrorKind.NO_PATTERN_MATCHED
    assert bad_index.error == ErrorKind.NO_PATTERN_MATCHED
    assert dispatcher.state.resolver.active_target == 0


def test_per_message_known_address_without_index_is_shape_mismatch() -> None:
    dispatcher = make_dispatcher(policy=AddressingPolicy.PER_MESSAGE)

    result = dispatcher.dispatch("/points/tick")

    assert result.error == ErrorKind.ARGUMENT_SHAPE_MISMATCH


def test_profiler_groups_unknown_addresses() -> None:
    profiler = DispatchProfiler(interval=3600)
    state = make_dispatcher().state
    dispatcher = Dispatcher(state, profiler=profiler)

    for i in range(500):
        assert dispatcher.handle_message("test", f"/junk{i}") == 1
    dispatcher.handle_message("test", "/number", 1)
    dispatcher.handle_message("test", "/parameters", 0.1)

    assert set(profiler._commands) == {UNMATCHED, "/number", "/parameters"}
    assert profiler._commands[UNMATCHED].count == 300
