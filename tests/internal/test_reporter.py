from threading import Event

import mock

from coverband_service.internal.reporter import BackgroundReporter
from tests.utils import make_config


def test_from_config():
    reporter = BackgroundReporter.from_config(make_config(env="production", report_period="300"), [])

    assert reporter._base_interval == 300
    assert reporter.wiggle == 90
    assert 300 <= reporter.interval <= 390


def test_interval_wiggle():
    reporter = BackgroundReporter(interval=10, wiggle=5)

    for _ in range(20):
        assert 10 <= reporter._next_interval() <= 15


def test_no_wiggle():
    reporter = BackgroundReporter(interval=10)

    assert reporter.interval == 10


def test_report_runs_every_target_even_if_one_fails():
    failing = mock.Mock(side_effect=RuntimeError("boom"))
    ok = mock.Mock()
    reporter = BackgroundReporter(interval=10, targets=[failing, ok])

    reporter.report()

    failing.assert_called_once_with()
    ok.assert_called_once_with()


def test_periodic_reports_and_picks_a_new_interval():
    target = mock.Mock()
    reporter = BackgroundReporter(interval=10, targets=[target], wiggle=3)

    with mock.patch("coverband_service.internal.reporter.random.randint", return_value=2):
        reporter.periodic()

    target.assert_called_once_with()
    assert reporter.interval == 12


def test_reports_in_background_and_on_shutdown():
    reported = Event()
    calls = []

    def target():
        calls.append(1)
        reported.set()

    reporter = BackgroundReporter(interval=0.01)
    reporter.register(target)
    reporter.start()
    assert reported.wait(5)
    reporter.stop()
    reporter.join()

    # at least one periodic report plus the final one on shutdown
    assert len(calls) >= 2
