import hashlib
import json

import pytest

from coverband_service.constants import EAGER_TYPE
from coverband_service.constants import RUNTIME_TYPE
from coverband_service.internal.identity import ClientIdentity
from coverband_service.internal.payload import build_delta
from coverband_service.internal.payload import build_tracked_views
from coverband_service.internal.payload import encode_envelope
from coverband_service.internal.payload import expand_report
from coverband_service.internal.payload import file_hash
from coverband_service.internal.payload import make_envelope
from coverband_service.internal.payload import relative_file_path
from coverband_service.internal.payload import relative_view_path


@pytest.fixture
def identity():
    identity = ClientIdentity("worker", hostname="host-1")
    identity.bind_pid()
    return identity


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "app" / "models" / "user.rb"
    path.parent.mkdir(parents=True)
    path.write_bytes(b"class User\nend\n")
    file_hash.cache_clear()
    return path


def test_relative_file_path():
    assert relative_file_path("/app/models/user.rb", ["/app"]) == "./models/user.rb"
    assert relative_file_path("/app/models/user.rb", ["/app/"]) == "./models/user.rb"
    assert relative_file_path("/gems/lib/a.rb", ["/app", "/gems"]) == "./lib/a.rb"
    assert relative_file_path("/application/a.rb", ["/app"]) == "/application/a.rb"
    assert relative_file_path("/other/a.rb", []) == "/other/a.rb"


def test_relative_view_path():
    assert relative_view_path("/app/views/x.erb", ["/app"]) == "views/x.erb"
    assert relative_view_path("/app/views/x.erb", ["/app/"]) == "views/x.erb"
    assert relative_view_path("/engine/views/x.erb", ["/app"]) == "/engine/views/x.erb"


def test_expand_report(source_file, tmp_path):
    report = {str(source_file): [1, None, 0]}

    expanded = expand_report(report, roots=[str(tmp_path / "app")], report_time=1600000000)

    assert expanded == {
        "./models/user.rb": {
            "first_updated_at": 1600000000,
            "last_updated_at": 1600000000,
            "file_hash": hashlib.md5(b"class User\nend\n").hexdigest(),
            "data": [1, None, 0],
        }
    }


def test_expand_report_eager_loading_has_no_last_update(source_file):
    expanded = expand_report({str(source_file): [1]}, coverage_type=EAGER_TYPE, report_time=10)

    entry = expanded[str(source_file)]
    assert entry["first_updated_at"] == 10
    assert entry["last_updated_at"] is None


def test_expand_report_missing_file_and_malformed_counters():
    expanded = expand_report({"/does/not/exist.rb": "not-a-list"}, report_time=10)

    assert expanded["/does/not/exist.rb"]["file_hash"] is None
    assert expanded["/does/not/exist.rb"]["data"] == "not-a-list"


def test_build_delta(identity):
    report = {"/app/a.rb": [1, 2]}

    data = build_delta(report, identity, "production", coverage_type=RUNTIME_TYPE, roots=["/app"], report_time=5)

    assert data["collection_type"] == "coverage_delta"
    assert data["collection_data"]["tags"] == {
        "process_type": "worker",
        "app_loading": False,
        "runtime_env": "production",
        "pid": identity.pid,
        "hostname": "host-1",
    }
    assert list(data["collection_data"]["file_coverage"]) == ["./a.rb"]
    # the caller's report is left alone
    assert report == {"/app/a.rb": [1, 2]}


def test_build_delta_eager_loading(identity):
    data = build_delta({"/app/a.rb": [1]}, identity, "production", coverage_type=EAGER_TYPE)
    assert data["collection_data"]["tags"]["app_loading"] is True


def test_build_tracked_views():
    data = build_tracked_views(["views/x.erb"], "staging", collection_time=42)

    assert data == {
        "collection_type": "view_tracker_delta",
        "collection_data": {
            "tags": {"runtime_env": "staging"},
            "collection_time": 42,
            "tracked_views": ["views/x.erb"],
        },
    }


def test_make_envelope_uses_a_fresh_uuid_each_time():
    data = {"collection_type": "coverage_delta"}

    first = make_envelope(data)
    second = make_envelope(data)

    assert first["data"] is data
    assert first["remote_uuid"] != second["remote_uuid"]


def test_encode_envelope():
    envelope = {"remote_uuid": "abc", "data": {"a": [1, None]}}

    encoded = encode_envelope(envelope)

    assert encoded == b'{"remote_uuid":"abc","data":{"a":[1,null]}}'
    assert json.loads(encoded) == envelope
