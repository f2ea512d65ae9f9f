from datetime import datetime

from alarms.session import AlarmSession


def _now() -> datetime:
    return datetime(2024, 1, 1, 6, 0)


def _session(scheduler, player, vibrator=None, **kwargs):
    return AlarmSession(scheduler, player, vibrator=vibrator, window_seconds=30, **kwargs)


def test_window_ends_session_and_releases(make_scheduler, player):
    scheduler = make_scheduler(_now())
    done = []
    session = _session(scheduler, player)
    assert session.trigger(lambda: done.append(True))
    assert session.active
    assert player.playing

    scheduler.advance(29)
    assert session.active
    scheduler.advance(1)
    assert not session.active
    assert not player.playing
    assert player.releases == 1
    assert done == [True]


def test_second_trigger_is_ignored(make_scheduler, player, vibrator):
    scheduler = make_scheduler(_now())
    session = _session(scheduler, player, vibrator, vibration_enabled=True)
    assert session.trigger()
    assert not session.trigger()
    assert player.starts == 1
    assert vibrator.starts == 1
    assert len(scheduler.pending()) == 1

    scheduler.advance(30)
    assert not session.active
    assert vibrator.cancels == 1


def test_callback_given_while_active_runs_at_teardown(make_scheduler, player):
    scheduler = make_scheduler(_now())
    done = []
    session = _session(scheduler, player)
    session.trigger()
    scheduler.advance(10)
    session.trigger(lambda: done.append("rearm"))
    scheduler.advance(20)
    assert done == ["rearm"]


def test_vibration_only_when_enabled(make_scheduler, player, vibrator):
    scheduler = make_scheduler(_now())
    session = _session(scheduler, player, vibrator)
    session.trigger()
    scheduler.advance(30)
    assert vibrator.starts == 0

    session.vibration_enabled = True
    session.trigger()
    scheduler.advance(30)
    assert vibrator.starts == 1
    assert vibrator.cancels == 1


def test_sound_failure_still_completes(make_scheduler, vibrator, failing_player):
    scheduler = make_scheduler(_now())
    failures = []
    done = []
    player = failing_player
    session = _session(
        scheduler,
        player,
        vibrator,
        vibration_enabled=True,
        on_failure=lambda source, exc: failures.append(source),
    )
    assert not session.trigger(lambda: done.append(True))
    assert failures == ["sound"]
    assert not session.active
    assert done == [True]
    assert vibrator.cancels == 1
    assert player.releases == 1
    assert scheduler.pending() == []


def test_vibration_failure_keeps_sound(make_scheduler, player, failing_vibrator):
    scheduler = make_scheduler(_now())
    failures = []
    session = _session(
        scheduler,
        player,
        failing_vibrator,
        vibration_enabled=True,
        on_failure=lambda source, exc: failures.append(source),
    )
    session.trigger()
    assert failures == ["vibration"]
    assert session.active
    assert player.playing


def test_stop_dismisses_early(make_scheduler, player):
    scheduler = make_scheduler(_now())
    done = []
    session = _session(scheduler, player)
    assert not session.stop()
    session.trigger(lambda: done.append(True))
    scheduler.advance(5)
    assert session.stop()
    assert not session.active
    assert done == [True]
    assert scheduler.pending() == []


def test_dispose_mid_playback(make_scheduler, player, vibrator):
    scheduler = make_scheduler(_now())
    done = []
    session = _session(scheduler, player, vibrator, vibration_enabled=True)
    session.trigger(lambda: done.append(True))
    scheduler.advance(5)
    session.dispose()
    assert not session.active
    assert player.releases == 1
    assert vibrator.cancels == 1
    assert scheduler.pending() == []
    scheduler.advance(60)
    assert done == []
