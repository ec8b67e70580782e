"""
Tests for the sequential prefetch dispatcher: ordering, fallback and stale results.
"""

from collections import deque
from unittest.mock import Mock

from conftest import high_url, low_url
from prefetch_dispatcher import PrefetchDispatcher
from resource_tracker import ResourceStateTracker
from slide_models import QueueTask, ResourceState

LOW = ResourceState.LOW
HIGH = ResourceState.HIGH
EMPTY = ResourceState.EMPTY


def _dispatcher(fetcher, on_loaded=None):
    return PrefetchDispatcher(fetcher, ResourceStateTracker(), on_loaded=on_loaded)


def test_only_one_fetch_in_flight(fetcher, make_slides):
    dispatcher = _dispatcher(fetcher)
    dispatcher.rebuild(0, make_slides(5))

    dispatcher.dispatch()
    dispatcher.dispatch()

    assert fetcher.requested == [low_url(0)]
    assert len(fetcher.pending) == 1
    assert dispatcher.dispatching


def test_drains_queue_in_plan_order(fetcher, make_slides):
    slides = make_slides(3)
    dispatcher = _dispatcher(fetcher)
    dispatcher.rebuild(0, slides)
    dispatcher.dispatch()

    fetcher.run_until_idle()

    assert fetcher.requested == [
        low_url(0), high_url(0), low_url(1), low_url(2), high_url(1), high_url(2),
    ]
    assert all(dispatcher.tracker.get_state(s.resources[0]) == HIGH for s in slides)
    assert dispatcher.idle
    assert dispatcher.loaded_count == 6


def test_satisfied_tasks_are_skipped_at_dequeue(fetcher, make_slides):
    slides = make_slides(3)
    resource = slides[1].resources[0]
    dispatcher = _dispatcher(fetcher)
    dispatcher.queue = deque([
        QueueTask(resource, LOW, 0),
        QueueTask(resource, LOW, 0),
        QueueTask(resource, HIGH, 0),
        QueueTask(resource, HIGH, 0),
    ])
    dispatcher.dispatch()

    fetcher.run_until_idle()

    assert fetcher.requested == [low_url(1), high_url(1)]


def test_low_failure_falls_back_to_high(fetcher, make_slides):
    slides = make_slides(1)
    resource = slides[0].resources[0]
    fetcher.failing.add(low_url(0))
    dispatcher = _dispatcher(fetcher)
    dispatcher.rebuild(0, slides)
    dispatcher.dispatch()

    fetcher.complete()
    assert dispatcher.queue[0] == QueueTask(resource, HIGH, dispatcher.generation)

    fetcher.run_until_idle()

    assert dispatcher.tracker.get_state(resource) == HIGH
    assert fetcher.requested == [low_url(0), high_url(0)]
    assert dispatcher.failed_count == 1


def test_fallback_jumps_ahead_of_other_work(fetcher, make_slides):
    slides = make_slides(3)
    fetcher.failing.add(low_url(1))
    dispatcher = _dispatcher(fetcher)
    dispatcher.rebuild(0, slides)
    dispatcher.dispatch()

    fetcher.run_until_idle()

    assert fetcher.requested == [
        low_url(0), high_url(0), low_url(1), high_url(1), low_url(2), high_url(2),
    ]


def test_high_failure_is_dropped(fetcher, make_slides):
    slides = make_slides(1)
    fetcher.failing.add(high_url(0))
    dispatcher = _dispatcher(fetcher)
    dispatcher.rebuild(0, slides)
    dispatcher.dispatch()

    fetcher.run_until_idle()

    assert dispatcher.tracker.get_state(slides[0].resources[0]) == LOW
    assert fetcher.requested == [low_url(0), high_url(0)]
    assert dispatcher.idle


def test_both_tiers_failing_leaves_resource_empty(fetcher, make_slides):
    slides = make_slides(1)
    fetcher.failing.update({low_url(0), high_url(0)})
    dispatcher = _dispatcher(fetcher)
    dispatcher.rebuild(0, slides)
    dispatcher.dispatch()

    fetcher.run_until_idle()

    assert dispatcher.tracker.get_state(slides[0].resources[0]) == EMPTY
    assert fetcher.requested == [low_url(0), high_url(0)]
    assert dispatcher.idle


def test_missing_low_url_is_dropped_without_fetching(fetcher, make_slides):
    slides = make_slides(1, missing_low={0})
    dispatcher = _dispatcher(fetcher)
    dispatcher.rebuild(0, slides)
    dispatcher.dispatch()

    fetcher.run_until_idle()

    assert fetcher.requested == [high_url(0)]
    assert dispatcher.tracker.get_state(slides[0].resources[0]) == HIGH


def test_late_low_result_never_downgrades(fetcher, make_slides):
    slides = make_slides(1)
    resource = slides[0].resources[0]
    on_loaded = Mock()
    dispatcher = _dispatcher(fetcher, on_loaded)
    dispatcher.queue = deque([QueueTask(resource, LOW, dispatcher.generation)])
    dispatcher.dispatch()

    dispatcher.tracker.set_state(resource, HIGH)
    fetcher.complete()

    assert dispatcher.tracker.get_state(resource) == HIGH
    on_loaded.assert_not_called()


def test_stale_result_is_discarded_and_loop_resumes(fetcher, make_slides):
    slides = make_slides(5)
    on_loaded = Mock()
    dispatcher = _dispatcher(fetcher, on_loaded)
    dispatcher.rebuild(0, slides)
    dispatcher.dispatch()

    dispatcher.advance_generation()
    dispatcher.rebuild(2, slides)
    dispatcher.dispatch()
    assert len(fetcher.pending) == 1

    fetcher.complete()

    assert dispatcher.tracker.get_state(slides[0].resources[0]) == EMPTY
    on_loaded.assert_not_called()
    assert dispatcher.stale_count == 1
    assert fetcher.requested == [low_url(0), low_url(2)]


def test_stale_failure_is_not_promoted(fetcher, make_slides):
    slides = make_slides(5)
    fetcher.failing.add(low_url(0))
    dispatcher = _dispatcher(fetcher)
    dispatcher.rebuild(0, slides)
    dispatcher.dispatch()

    dispatcher.advance_generation()
    dispatcher.rebuild(3, slides)
    fetcher.complete()

    assert fetcher.requested == [low_url(0), low_url(3)]
    assert dispatcher.failed_count == 0


def test_success_notifies_display(fetcher, make_slides):
    slides = make_slides(1)
    on_loaded = Mock()
    dispatcher = _dispatcher(fetcher, on_loaded)
    dispatcher.rebuild(0, slides)
    dispatcher.dispatch()

    fetcher.complete()

    on_loaded.assert_called_once_with(slides[0].resources[0], LOW, low_url(0), f"decoded:{low_url(0)}")


def test_display_errors_do_not_stop_dispatch(fetcher, make_slides):
    slides = make_slides(3)
    dispatcher = _dispatcher(fetcher, Mock(side_effect=RuntimeError("canvas gone")))
    dispatcher.rebuild(0, slides)
    dispatcher.dispatch()

    fetcher.run_until_idle()

    assert len(fetcher.requested) == 6
    assert dispatcher.idle


def test_empty_queue_stays_idle(fetcher):
    dispatcher = _dispatcher(fetcher)
    dispatcher.dispatch()

    assert fetcher.requested == []
    assert not dispatcher.dispatching


def test_stats_reports_progress(fetcher, make_slides):
    dispatcher = _dispatcher(fetcher)
    dispatcher.rebuild(0, make_slides(2))
    dispatcher.dispatch()
    fetcher.run_until_idle()

    stats = dispatcher.stats()
    assert stats['loaded'] == 4
    assert stats['queued'] == 0
    assert stats['states'] == {'high': 2}
