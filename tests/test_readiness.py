import pytest

from clbnode.errors import TerminalRemoteError, TransientRemoteError
from clbnode.readiness import wait_until_ready


class Clock:
    def __init__(self):
        self.now = 100.0
        self.sleeps = []

    def sleep(self, s):
        self.sleeps.append(s)
        self.now += s

    def __call__(self):
        return self.now


def test_ready_immediately(fake_client):
    client = fake_client()
    clock = Clock()
    assert wait_until_ready(client, 1, 60, 5, sleep=clock.sleep, clock=clock) is True
    assert clock.sleeps == []


def test_polls_until_active(fake_client):
    client = fake_client(lb_statuses=["PENDING_UPDATE", "PENDING_UPDATE", "ACTIVE"])
    clock = Clock()
    assert wait_until_ready(client, 1, 60, 5, sleep=clock.sleep, clock=clock) is True
    assert clock.sleeps == [5, 5]
    assert client.names() == ["get_lb"] * 3


def test_timeout_returns_false(fake_client):
    client = fake_client(lb_statuses=["PENDING_UPDATE"] * 10)
    clock = Clock()
    assert wait_until_ready(client, 1, 12, 5, sleep=clock.sleep, clock=clock) is False
    assert clock.sleeps == [5, 5, 2]


def test_zero_timeout_skips_polling(fake_client):
    client = fake_client()
    assert wait_until_ready(client, 1, 0, 5, sleep=pytest.fail, clock=lambda: 0.0) is True
    assert client.calls == []


def test_transient_error_counts_as_not_ready(fake_client):
    client = fake_client(lb_statuses=[TransientRemoteError("over limit", 413), "ACTIVE"])
    clock = Clock()
    assert wait_until_ready(client, 1, 60, 5, sleep=clock.sleep, clock=clock) is True
    assert clock.sleeps == [5]


def test_terminal_error_propagates(fake_client):
    client = fake_client(lb_statuses=[TerminalRemoteError("unauthorized", 401)])
    clock = Clock()
    with pytest.raises(TerminalRemoteError):
        wait_until_ready(client, 1, 60, 5, sleep=clock.sleep, clock=clock)
