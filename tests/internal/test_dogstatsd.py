import pytest

from coverband_service.internal.dogstatsd import get_dogstatsd_client


def test_udp_client():
    client = get_dogstatsd_client("udp://statsd.local:9125")
    assert client.host == "statsd.local"
    assert client.port == 9125


def test_udp_client_default_port():
    client = get_dogstatsd_client("statsd.local")
    assert client.host == "statsd.local"
    assert client.port == 8125


def test_unix_client():
    client = get_dogstatsd_client("/var/run/datadog/dsd.socket")
    assert client.socket_path == "/var/run/datadog/dsd.socket"


def test_unknown_scheme():
    with pytest.raises(ValueError):
        get_dogstatsd_client("tcp://statsd.local:8125")
