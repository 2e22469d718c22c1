"""Construction of the packages shipped to the collector endpoint.

Everything here is a pure transform: the caller's report is never mutated
and a new package is built for every send.
"""
import functools
import hashlib
import json
import typing as t
import uuid

from coverband_service.constants import COVERAGE_DELTA
from coverband_service.constants import DATA_KEY
from coverband_service.constants import EAGER_TYPE
from coverband_service.constants import FILE_HASH_KEY
from coverband_service.constants import FIRST_UPDATED_KEY
from coverband_service.constants import LAST_UPDATED_KEY
from coverband_service.constants import RUNTIME_TYPE
from coverband_service.constants import VIEW_TRACKER_DELTA
from coverband_service.internal.logger import get_logger
from coverband_service.internal.utils.time import Time


if t.TYPE_CHECKING:  # pragma: no cover
    from coverband_service.internal.identity import ClientIdentity


log = get_logger(__name__)

CoverageReport = t.Mapping[str, t.Any]


@functools.lru_cache(maxsize=4096)
def file_hash(path):
    # type: (str) -> t.Optional[str]
    """MD5 of a source file, so the collector can detect stale line counters."""
    try:
        with open(path, "rb") as f:
            return hashlib.md5(f.read()).hexdigest()  # nosec
    except OSError:
        return None


def relative_file_path(path, roots):
    # type: (str, t.Iterable[str]) -> str
    """Replace the first matching root prefix of ``path`` with ``./``."""
    for root in roots:
        root = root.rstrip("/")
        if root and path.startswith(root + "/"):
            return "./" + path[len(root) + 1 :]
    return path


def relative_view_path(view, roots):
    # type: (str, t.Iterable[str]) -> str
    """Strip every matching root prefix from a view path."""
    for root in roots:
        root = root.rstrip("/")
        if root and view.startswith(root + "/"):
            view = view[len(root) + 1 :]
    return view


def expand_report(report, roots=(), coverage_type=RUNTIME_TYPE, report_time=None):
    # type: (CoverageReport, t.Iterable[str], str, t.Optional[int]) -> t.Dict[str, t.Dict[str, t.Any]]
    """Expand compact ``{path: counters}`` coverage into the collector wire shape.

    Counters are forwarded untouched. Eager-loading reports carry no
    ``last_updated_at`` since no request code ran to produce them.
    """
    if report_time is None:
        report_time = int(Time.time())
    updated_time = None if coverage_type == EAGER_TYPE else report_time
    roots = list(roots)

    expanded = {}
    for path, line_data in report.items():
        expanded[relative_file_path(path, roots)] = {
            FIRST_UPDATED_KEY: report_time,
            LAST_UPDATED_KEY: updated_time,
            FILE_HASH_KEY: file_hash(path),
            DATA_KEY: line_data,
        }
    return expanded


def build_delta(report, identity, runtime_env, coverage_type=RUNTIME_TYPE, roots=(), report_time=None):
    # type: (CoverageReport, ClientIdentity, str, str, t.Iterable[str], t.Optional[int]) -> t.Dict[str, t.Any]
    return {
        "collection_type": COVERAGE_DELTA,
        "collection_data": {
            "tags": {
                "process_type": identity.process_type,
                "app_loading": coverage_type == EAGER_TYPE,
                "runtime_env": runtime_env,
                "pid": identity.pid,
                "hostname": identity.hostname,
            },
            "file_coverage": expand_report(report, roots, coverage_type, report_time),
        },
    }


def build_tracked_views(views, runtime_env, collection_time=None):
    # type: (t.Iterable[str], str, t.Optional[int]) -> t.Dict[str, t.Any]
    return {
        "collection_type": VIEW_TRACKER_DELTA,
        "collection_data": {
            "tags": {"runtime_env": runtime_env},
            "collection_time": int(Time.time()) if collection_time is None else collection_time,
            "tracked_views": list(views),
        },
    }


def make_envelope(data):
    # type: (t.Dict[str, t.Any]) -> t.Dict[str, t.Any]
    # a fresh uuid per send, the collector must never see two envelopes with the same id
    return {"remote_uuid": str(uuid.uuid4()), "data": data}


def encode_envelope(envelope):
    # type: (t.Dict[str, t.Any]) -> bytes
    return json.dumps(envelope, separators=(",", ":")).encode("utf-8")
