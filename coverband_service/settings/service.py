import os
import typing as t

from coverband_service.constants import DEFAULT_DEVELOPMENT_TIMEOUT
from coverband_service.constants import DEFAULT_TIMEOUT
from coverband_service.constants import DEFAULT_URL
from coverband_service.settings._core import CoverbandConfig


PRODUCTION = "production"
DEVELOPMENT = "development"
NON_PRODUCTION_REPORTING_INTERVAL = 60


def _parse_paths(value: str) -> t.List[str]:
    return [p.strip() for p in value.split(",") if p.strip()]


def _derive_timeout(config: "ServiceConfig") -> float:
    if config._timeout is not None:
        return config._timeout
    if config.env == DEVELOPMENT:
        return DEFAULT_DEVELOPMENT_TIMEOUT
    return DEFAULT_TIMEOUT


def _derive_hostname(config: "ServiceConfig") -> t.Optional[str]:
    # Heroku dynos have unhelpful socket hostnames, prefer the dyno name
    return config._hostname or config.env_source.get("DYNO") or None


def _derive_root_paths(config: "ServiceConfig") -> t.List[str]:
    return config._root_paths or [os.getcwd()]


def _derive_reporting_interval(config: "ServiceConfig") -> int:
    if config.env == PRODUCTION:
        return config.report_period
    return NON_PRODUCTION_REPORTING_INTERVAL


def _derive_save_timeout(config: "ServiceConfig") -> float:
    if config._save_timeout is not None:
        return config._save_timeout
    # two attempts on the persistent transport, each bounded by connect and read timeouts
    return 4 * _derive_timeout(config) + 1


def _validate_positive(value):
    if value <= 0:
        raise ValueError("value must be positive, got %r" % (value,))


class ServiceConfig(CoverbandConfig):
    __prefix__ = "coverband"

    api_key = CoverbandConfig.v(
        t.Optional[str],
        "api_key",
        default=None,
        help_type="String",
        help="API key sent in the Coverband-Token header",
    )

    url = CoverbandConfig.v(
        str,
        "url",
        default=DEFAULT_URL,
        help_type="String",
        help="Base URL of the Coverband collector service",
    )

    env = CoverbandConfig.v(
        str,
        "env",
        default="unknown",
        help_type="String",
        help="Runtime environment label attached to every report",
    )

    _timeout = CoverbandConfig.v(
        t.Optional[float],
        "timeout",
        default=None,
        help_type="Float",
        help="Open, read and TLS handshake timeout in seconds for collector requests",
    )

    process_type = CoverbandConfig.v(
        str,
        "process_type",
        default="unknown",
        help_type="String",
        help="Label of the reporting process, e.g. web or worker",
    )

    _hostname = CoverbandConfig.v(
        t.Optional[str],
        "hostname",
        default=None,
        help_type="String",
        help="Hostname reported to the collector instead of the socket hostname",
    )

    coverband_id = CoverbandConfig.v(
        t.Optional[str],
        "id",
        default=None,
        help_type="String",
        help="Project identifier for the legacy path-style coverage endpoint",
    )

    stats_url = CoverbandConfig.v(
        t.Optional[str],
        "stats_url",
        default=None,
        help_type="String",
        help="DogStatsD URL receiving save timings, timings are disabled when unset",
    )

    persistent_connection = CoverbandConfig.v(
        bool,
        "persistent_connection",
        default=True,
        help_type="Boolean",
        help="Reuse one HTTP connection across reports",
    )

    _root_paths = CoverbandConfig.v(
        list,
        "root_paths",
        parser=_parse_paths,
        default=[],
        help_type="List",
        help="Comma separated path prefixes stripped from reported files and views",
    )

    report_period = CoverbandConfig.v(
        int,
        "report_period",
        default=600,
        validator=_validate_positive,
        help_type="Int",
        help="Seconds between background reports in production",
    )

    _track_views = CoverbandConfig.v(
        bool,
        "track_views",
        default=True,
        help_type="Boolean",
        help="Report tracked views alongside line coverage",
    )

    _disable_view_tracker = CoverbandConfig.v(
        bool,
        "disable_view_tracker",
        default=False,
        help_type="Boolean",
        help="Turn view tracking off regardless of COVERBAND_TRACK_VIEWS",
    )

    _save_timeout = CoverbandConfig.v(
        t.Optional[float],
        "save_timeout",
        default=None,
        help_type="Float",
        help="Upper bound in seconds on waiting for a single report to be saved",
    )

    max_workers = CoverbandConfig.v(
        int,
        "max_workers",
        default=2,
        validator=_validate_positive,
        help_type="Int",
        help="Maximum number of reports being sent concurrently",
    )

    verbose = CoverbandConfig.v(
        bool,
        "verbose",
        default=False,
        help_type="Boolean",
        help="Log every request and failure at debug level",
    )

    timeout_seconds = CoverbandConfig.d(float, _derive_timeout)
    hostname = CoverbandConfig.d(t.Optional[str], _derive_hostname)
    root_paths = CoverbandConfig.d(list, _derive_root_paths)
    reporting_interval = CoverbandConfig.d(int, _derive_reporting_interval)
    reporting_wiggle = CoverbandConfig.d(int, lambda c: 90 if c.env == PRODUCTION else 6)
    save_timeout = CoverbandConfig.d(float, _derive_save_timeout)
    track_views = CoverbandConfig.d(bool, lambda c: c._track_views and not c._disable_view_tracker)


config = ServiceConfig()
