import logging

import mock
import pytest

from coverband_service.internal import logger as coverband_logger


@pytest.fixture
def package_logger():
    log = logging.getLogger(coverband_logger.ROOT_LOGGER_NAME)
    level = log.level
    yield log
    log.setLevel(level)


def test_get_logger_adds_rate_limit_filter():
    log = coverband_logger.get_logger("coverband_service.test")
    assert coverband_logger.log_filter in log.filters
    assert log.propagate


def test_configure_verbose(package_logger):
    package_logger.setLevel(logging.WARNING)

    coverband_logger.configure(False)
    assert package_logger.level == logging.WARNING

    coverband_logger.configure(True)
    assert package_logger.level == logging.DEBUG


def test_log_filter_rate_limits_per_call_site(package_logger):
    package_logger.setLevel(logging.WARNING)
    record = logging.LogRecord("coverband_service.test", logging.WARNING, "/a.py", 10, "msg", (), None)

    with mock.patch.object(coverband_logger, "_rate_limit", 60), mock.patch.dict(coverband_logger._buckets, clear=True):
        assert coverband_logger.log_filter(record)
        assert not coverband_logger.log_filter(record)
        assert not coverband_logger.log_filter(record)
        bucket = coverband_logger._buckets[("/a.py", 10)]
        assert bucket.skipped == 2


def test_log_filter_never_limits_debug(package_logger):
    package_logger.setLevel(logging.DEBUG)
    record = logging.LogRecord("coverband_service.test", logging.WARNING, "/b.py", 10, "msg", (), None)

    with mock.patch.object(coverband_logger, "_rate_limit", 60):
        assert all(coverband_logger.log_filter(record) for _ in range(3))


def test_formatter_appends_skipped_count():
    record = logging.LogRecord("coverband_service.test", logging.WARNING, "/a.py", 10, "saving failed", (), None)
    record.skipped = 3

    assert coverband_logger.CoverbandFormatter().format(record) == "WARNING saving failed [3 skipped]"
