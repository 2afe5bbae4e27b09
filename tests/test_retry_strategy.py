import threading
import time

import pytest
from search_client.hosts import CallType, StatefulHost, READ_ONLY, WRITE_ONLY, READ_WRITE
from search_client.retry_strategy import RetryConfig, RetryOutcome, RetryStrategy, classify


APP_ID = "app_id"


def make_hosts(*states):
    return [
        StatefulHost(url=f"{APP_ID}-{i}.algolianet.com", **state)
        for i, state in enumerate(states, start=4)
    ]


@pytest.fixture
def strategy():
    return RetryStrategy(make_hosts({}, {}, {}))


@pytest.mark.parametrize("call_type", [CallType.READ, CallType.WRITE])
def test_excludes_recently_downed_host(call_type):
    retry_strategy = RetryStrategy(make_hosts({}, {"up": False}, {}))

    hosts = retry_strategy.get_tryable_hosts(call_type)

    assert len(hosts) == 2
    assert [host.url for host in hosts] == ["app_id-4.algolianet.com", "app_id-6.algolianet.com"]


@pytest.mark.parametrize("call_type", [CallType.READ, CallType.WRITE])
def test_resets_expired_host(call_type):
    retry_strategy = RetryStrategy(
        make_hosts({}, {"up": False, "last_use": time.time() - 1000}, {})
    )

    hosts = retry_strategy.get_tryable_hosts(call_type)

    assert len(hosts) == 3
    assert hosts[1].url == "app_id-5.algolianet.com"
    assert hosts[1].up is True
    assert hosts[1].retry_count == 0


@pytest.mark.parametrize("call_type", [CallType.READ, CallType.WRITE])
def test_all_hosts_down_falls_back_to_all(call_type):
    retry_strategy = RetryStrategy(make_hosts({"up": False}, {"up": False}, {"up": False}))

    hosts = retry_strategy.get_tryable_hosts(call_type)

    assert len(hosts) == 3
    assert all(host.up for host in hosts)


def test_host_within_ttl_stays_excluded():
    now = 10_000.0
    retry_strategy = RetryStrategy(
        make_hosts({}, {"up": False, "last_use": now - 299}),
        RetryConfig(host_down_ttl=300),
        clock=lambda: now,
    )

    assert len(retry_strategy.get_tryable_hosts(CallType.READ)) == 1

    retry_strategy._clock = lambda: now + 2
    assert len(retry_strategy.get_tryable_hosts(CallType.READ)) == 2


def test_tryable_hosts_follow_accept():
    retry_strategy = RetryStrategy([
        StatefulHost(url="app_id-dsn.algolia.net", accept=READ_ONLY),
        StatefulHost(url="app_id.algolia.net", accept=WRITE_ONLY),
        StatefulHost(url="app_id-1.algolianet.com", accept=READ_WRITE),
    ])

    read_hosts = [host.url for host in retry_strategy.get_tryable_hosts(CallType.READ)]
    write_hosts = [host.url for host in retry_strategy.get_tryable_hosts(CallType.WRITE)]

    assert read_hosts == ["app_id-dsn.algolia.net", "app_id-1.algolianet.com"]
    assert write_hosts == ["app_id.algolia.net", "app_id-1.algolianet.com"]


def test_no_host_accepting_call_type():
    retry_strategy = RetryStrategy([StatefulHost(url="app_id-dsn.algolia.net", accept=READ_ONLY)])

    assert retry_strategy.get_tryable_hosts(CallType.WRITE) == []


def test_strategy_owns_copies_of_hosts():
    configured = make_hosts({})
    retry_strategy = RetryStrategy(configured)

    host = retry_strategy.get_tryable_hosts(CallType.READ)[0]
    retry_strategy.decide(host, status_code=500)

    assert host.retry_count == 1
    assert configured[0].retry_count == 0


@pytest.mark.parametrize("status_code", [200, 201, 204, 299])
def test_decision_on_success(strategy, status_code):
    host = strategy.hosts[0]
    host.retry_count = 1
    host.up = False

    assert strategy.decide(host, status_code=status_code) == RetryOutcome.SUCCESS
    assert host.up is True
    assert host.retry_count == 0


@pytest.mark.parametrize("status_code", [400, 401, 403, 404, 429, 499])
def test_decision_on_client_error(strategy, status_code):
    host = strategy.hosts[0]

    assert strategy.decide(host, status_code=status_code) == RetryOutcome.FAILURE
    assert host.up is True
    assert host.retry_count == 0


@pytest.mark.parametrize("status_code", [300, 302, 500, 502, 503, 600, None])
def test_decision_on_transient_error(strategy, status_code):
    host = strategy.hosts[0]

    assert strategy.decide(host, status_code=status_code) == RetryOutcome.RETRY
    assert host.retry_count == 1


def test_decision_on_timed_out(strategy):
    host = strategy.hosts[0]

    assert strategy.decide(host, is_timed_out=True) == RetryOutcome.RETRY
    assert host.retry_count == 1
    assert host.up is True


def test_timed_out_wins_over_status_code(strategy):
    assert strategy.decide(strategy.hosts[0], status_code=200, is_timed_out=True) == RetryOutcome.RETRY


def test_host_quarantined_after_threshold():
    now = 5_000.0
    retry_strategy = RetryStrategy(make_hosts({}, {}), RetryConfig(failure_threshold=2), clock=lambda: now)
    host = retry_strategy.hosts[0]

    retry_strategy.decide(host, is_timed_out=True)
    assert host.up is True

    retry_strategy.decide(host, status_code=503)
    assert host.up is False
    assert host.last_use == now
    assert [h.url for h in retry_strategy.get_tryable_hosts(CallType.READ)] == ["app_id-5.algolianet.com"]


def test_success_after_quarantine_restores_host():
    retry_strategy = RetryStrategy(make_hosts({}), RetryConfig(failure_threshold=1))
    host = retry_strategy.hosts[0]

    retry_strategy.decide(host, status_code=500)
    assert host.up is False

    retry_strategy.decide(host, status_code=200)
    assert host.up is True
    assert host.retry_count == 0


def test_classify_is_pure():
    host = StatefulHost(url="app_id-1.algolianet.com")

    assert classify(200) == RetryOutcome.SUCCESS
    assert classify(404) == RetryOutcome.FAILURE
    assert classify(500) == RetryOutcome.RETRY
    assert classify(None, is_timed_out=True) == RetryOutcome.RETRY
    assert host.retry_count == 0


def test_concurrent_decisions_are_consistent():
    retry_strategy = RetryStrategy(make_hosts({}), RetryConfig(failure_threshold=10_000))
    host = retry_strategy.hosts[0]

    def fail_many():
        for _ in range(200):
            retry_strategy.decide(host, status_code=500)

    threads = [threading.Thread(target=fail_many) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert host.retry_count == 1600


def test_host_states_snapshot():
    retry_strategy = RetryStrategy(make_hosts({}, {"up": False}))

    states = retry_strategy.host_states()

    assert [state["up"] for state in states] == [True, False]
    assert states[0]["accept"] == ["read", "write"]
    assert states[0]["retry_count"] == 0


def test_attempt_multiplier_and_is_up():
    retry_strategy = RetryStrategy(make_hosts({}), RetryConfig(failure_threshold=2))
    host = retry_strategy.hosts[0]

    assert retry_strategy.attempt_multiplier(host) == 1
    retry_strategy.decide(host, is_timed_out=True)
    assert retry_strategy.attempt_multiplier(host) == 2
    assert retry_strategy.is_up(host) is True

    retry_strategy.decide(host, status_code=500)
    assert retry_strategy.attempt_multiplier(host) == 3
    assert retry_strategy.is_up(host) is False
