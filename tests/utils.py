import mock

from coverband_service.settings import ServiceConfig


def make_config(**overrides):
    source = {
        "COVERBAND_API_KEY": "secret-key",
        "COVERBAND_URL": "https://collector.example.com",
        "COVERBAND_ENV": "production",
        "COVERBAND_PROCESS_TYPE": "web",
        "COVERBAND_HOSTNAME": "web-1",
        "COVERBAND_ROOT_PATHS": "/app",
    }
    for key, value in overrides.items():
        name = "COVERBAND_%s" % key.upper()
        if value is None:
            source.pop(name, None)
        else:
            source[name] = value
    return ServiceConfig(source=source)


def make_response(status=200, body=b"{}", reason="OK"):
    resp = mock.Mock(status=status, reason=reason)
    resp.read.return_value = body
    return resp


def make_connection(request_side_effect=None, responses=None, timeout=2.0):
    """A mocked ``http.client`` connection answering with ``responses`` (200 by default)."""
    conn = mock.Mock(timeout=timeout)
    conn.request.side_effect = request_side_effect
    if responses is None:
        conn.getresponse.side_effect = lambda: make_response()
    else:
        conn.getresponse.side_effect = list(responses)
    return conn


def sent_bodies(*connections):
    return [c.args[2] for conn in connections for c in conn.request.call_args_list]
