import asyncio

import pytest

from microdp_tracker import LifecycleSignal, LifecycleSignals, LoopTimers, Platform


def test_listeners_register_once_and_survive_errors() -> None:
    lifecycle = LifecycleSignals()
    calls = []

    def failing() -> None:
        raise RuntimeError("listener bug")

    def recording() -> None:
        calls.append("called")

    lifecycle.add_listener(LifecycleSignal.PAGEHIDE, failing)
    lifecycle.add_listener(LifecycleSignal.PAGEHIDE, recording)
    lifecycle.add_listener(LifecycleSignal.PAGEHIDE, recording)
    lifecycle.emit(LifecycleSignal.PAGEHIDE)

    assert calls == ["called"]
    lifecycle.remove_listener(LifecycleSignal.PAGEHIDE, recording)
    lifecycle.remove_listener(LifecycleSignal.PAGEHIDE, recording)
    assert lifecycle.listener_count(LifecycleSignal.PAGEHIDE) == 1


def test_visibility_change_only_emits_on_transition() -> None:
    lifecycle = LifecycleSignals()
    seen = []
    lifecycle.add_listener(LifecycleSignal.VISIBILITY_CHANGE, lambda: seen.append(lifecycle.visibility_state))

    lifecycle.set_visibility("visible")
    lifecycle.set_visibility("hidden")
    lifecycle.set_visibility("hidden")
    lifecycle.set_visibility("visible")

    assert seen == ["hidden", "visible"]


def test_loop_timers_repeat_until_cleared() -> None:
    timers = LoopTimers()

    async def scenario() -> int:
        ticks = []
        handle = timers.set_interval(lambda: ticks.append(1), 10)
        while len(ticks) < 3:
            await asyncio.sleep(0.005)
        timers.clear_interval(handle)
        count = len(ticks)
        await asyncio.sleep(0.05)
        assert handle.cancelled
        return len(ticks) - count

    assert asyncio.run(scenario()) == 0


def test_loop_timers_need_running_loop() -> None:
    with pytest.raises(RuntimeError):
        LoopTimers().set_interval(lambda: None, 10)


def test_headless_platform_has_no_beacon() -> None:
    platform = Platform.headless()
    assert platform.beacon_available is False
    assert isinstance(platform.timers, LoopTimers)
