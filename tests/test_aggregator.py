import threading
import time

import pytest

from feedwall.aggregator import FeedAggregator
from feedwall.errors import AggregationError, AggregationTimeout, FeedLoadError, FeedwallError
from feedwall.models import AggregationStatus, Feed, SourceState

from conftest import FakeLoader


def _feeds_with_delays(sources, delays):
    return {
        source.url: (delay, Feed(title=f"Feed {index}"))
        for index, (source, delay) in enumerate(zip(sources, delays))
    }


def test_get_all_resolves_with_one_feed_per_source(sources):
    loader = FakeLoader(_feeds_with_delays(sources, [0, 0, 0, 0]))
    aggregator = FeedAggregator(loader, sources)

    feeds = aggregator.get_all(timeout=5)

    assert len(feeds) == len(sources)
    assert {feed.title for feed in feeds} == {"Feed 0", "Feed 1", "Feed 2", "Feed 3"}
    assert sorted(loader.calls) == sorted((source.url, 10) for source in sources)


def test_results_follow_completion_order(sources):
    loader = FakeLoader(_feeds_with_delays(sources, [0.45, 0.0, 0.3, 0.15]))

    feeds = FeedAggregator(loader, sources).get_all(timeout=5)

    assert [feed.title for feed in feeds] == ["Feed 1", "Feed 3", "Feed 2", "Feed 0"]


def test_source_order_option_keeps_configuration_order(sources):
    loader = FakeLoader(_feeds_with_delays(sources, [0.3, 0.0, 0.2, 0.1]))

    feeds = FeedAggregator(loader, sources, order="source").get_all(timeout=5)

    assert [feed.title for feed in feeds] == ["Feed 0", "Feed 1", "Feed 2", "Feed 3"]


def test_calls_are_issued_concurrently(sources):
    release = threading.Event()
    behaviours = {source.url: (0, release) for source in sources}
    loader = FakeLoader(behaviours)

    aggregation = FeedAggregator(loader, sources).start()
    try:
        for _ in range(50):
            if len(loader.calls) == len(sources):
                break
            time.sleep(0.01)
        assert len(loader.calls) == len(sources)
        assert aggregation.status is AggregationStatus.LOADING
    finally:
        release.set()

    assert len(aggregation.result(timeout=5)) == len(sources)


def test_never_resolves_with_fewer_feeds_while_sources_pending(sources):
    stalled = threading.Event()
    behaviours = _feeds_with_delays(sources, [0, 0, 0, 0])
    behaviours[sources[3].url] = (0, stalled)

    aggregation = FeedAggregator(FakeLoader(behaviours), sources).start()
    try:
        with pytest.raises(AggregationTimeout) as excinfo:
            aggregation.result(timeout=0.3)

        report = excinfo.value.report
        assert report.status is AggregationStatus.LOADING
        assert len(report.feeds) == 3
        assert report.pending_sources == [sources[3]]
    finally:
        stalled.set()

    assert len(aggregation.result(timeout=5)) == 4


def test_single_failure_reaches_partial_state(sources):
    behaviours = _feeds_with_delays(sources, [0, 0, 0, 0])
    behaviours[sources[2].url] = (0, FeedLoadError(sources[2].url, "timed out"))

    aggregation = FeedAggregator(FakeLoader(behaviours), sources).start()

    with pytest.raises(AggregationError) as excinfo:
        aggregation.result(timeout=5)

    report = excinfo.value.report
    assert report.status is AggregationStatus.PARTIAL
    assert report.failed_sources == [sources[2]]
    assert len(report.feeds) == 3
    failed = report.outcomes[2]
    assert failed.state is SourceState.FAILED
    assert "timed out" in failed.error
    assert sources[2].url in str(excinfo.value)


def test_all_sources_failing_is_a_distinct_terminal_state(sources):
    behaviours = {source.url: (0, RuntimeError("down")) for source in sources}

    aggregation = FeedAggregator(FakeLoader(behaviours), sources).start()

    assert aggregation.wait(timeout=5)
    report = aggregation.report()
    assert report.status is AggregationStatus.FAILED
    assert report.is_settled
    assert report.feeds == []
    with pytest.raises(AggregationError):
        aggregation.result()


def test_result_is_stable_across_calls(sources):
    aggregation = FeedAggregator(
        FakeLoader(_feeds_with_delays(sources, [0, 0, 0, 0])), sources
    ).start()

    first = aggregation.result(timeout=5)
    second = aggregation.result(timeout=5)

    assert first == second
    assert first is not second


def test_start_without_sources_raises():
    with pytest.raises(FeedwallError):
        FeedAggregator(FakeLoader({}), []).start()


def test_unknown_order_is_rejected(sources):
    with pytest.raises(ValueError):
        FeedAggregator(FakeLoader({}), sources, order="random")
