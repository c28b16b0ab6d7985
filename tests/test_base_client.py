import pytest
import requests

from fakes import CLOUD_BASE, SERVER_BASE, FakeSession, cloud_config, make_response, server_config
from jira_assist.base_client import BaseClient
from jira_assist.cancellation import CancelToken
from jira_assist.errors import Cancelled, NetworkFailure, RequestFailed

MYSELF = "/rest/api/2/myself"


def test_heals_to_subpath_after_404s_and_remembers_it():
    session = FakeSession()
    session.route(f"{SERVER_BASE}/jira/rest/api/2/myself", make_response(200, {"name": "dev"}))
    session.route(f"{SERVER_BASE}/jira/rest/api/2/issue/ABC-1", make_response(200, {"key": "ABC-1"}))
    client = BaseClient(server_config(), session=session)

    assert client.execute("GET", MYSELF) == {"name": "dev"}
    assert session.urls == [
        f"{SERVER_BASE}/rest/api/2/myself",
        f"{SERVER_BASE}/rest/api/latest/myself",
        f"{SERVER_BASE}/jira/rest/api/2/myself",
    ]
    assert client.learned_base_url == f"{SERVER_BASE}/jira"

    session.calls.clear()
    assert client.execute("GET", "/rest/api/2/issue/ABC-1") == {"key": "ABC-1"}
    assert session.urls == [
        f"{SERVER_BASE}/rest/api/2/issue/ABC-1",
        f"{SERVER_BASE}/jira/rest/api/2/issue/ABC-1",
    ]


def test_latest_alias_success_does_not_change_base():
    session = FakeSession()
    session.route(f"{SERVER_BASE}/rest/api/latest/myself", make_response(200, {"name": "dev"}))
    client = BaseClient(server_config(), session=session)

    assert client.execute("GET", MYSELF) == {"name": "dev"}
    assert client.learned_base_url is None


def test_forbidden_stops_without_trying_other_candidates():
    session = FakeSession()
    session.route(f"{SERVER_BASE}/rest/api/2/myself", make_response(403, {"errorMessages": ["Nope"]}))
    client = BaseClient(server_config(), session=session)

    with pytest.raises(RequestFailed) as exc:
        client.execute("GET", MYSELF)

    assert len(session.calls) == 1
    assert exc.value.status == 403
    assert exc.value.hint == "missing access"
    assert exc.value.detail == "Nope"


def test_unauthorized_stops_with_credential_hint():
    session = FakeSession()
    session.route(f"{SERVER_BASE}/rest/api/2/myself", make_response(401))
    client = BaseClient(server_config(), session=session)

    with pytest.raises(RequestFailed) as exc:
        client.execute("GET", MYSELF)

    assert len(session.calls) == 1
    assert exc.value.status == 401
    assert "check credential" in str(exc.value)


def test_server_error_after_404_stops_the_loop():
    session = FakeSession()
    session.route(f"{SERVER_BASE}/rest/api/latest/myself", make_response(500, {"message": "boom"}))
    client = BaseClient(server_config(), session=session)

    with pytest.raises(RequestFailed) as exc:
        client.execute("GET", MYSELF)

    assert len(session.calls) == 2
    assert exc.value.status == 500
    assert exc.value.hint is None
    assert exc.value.detail == "boom"


def test_exhausted_candidates_report_not_found():
    session = FakeSession()
    client = BaseClient(server_config(), session=session)

    with pytest.raises(RequestFailed) as exc:
        client.execute("GET", MYSELF)

    assert len(session.calls) == 4
    assert exc.value.status == 404
    assert "check base URL" in exc.value.hint
    assert client.learned_base_url is None


def test_cloud_404_is_not_healed():
    session = FakeSession()
    client = BaseClient(cloud_config(), session=session)

    with pytest.raises(RequestFailed):
        client.execute("GET", MYSELF)

    assert session.urls == [f"{CLOUD_BASE}/rest/api/2/myself"]


def test_network_error_aborts_immediately():
    session = FakeSession()
    session.route(
        f"{SERVER_BASE}/rest/api/2/myself", requests.exceptions.ConnectionError("refused")
    )
    client = BaseClient(server_config(), session=session)

    with pytest.raises(NetworkFailure) as exc:
        client.execute("GET", MYSELF)

    assert len(session.calls) == 1
    assert "refused" in exc.value.reason


def test_no_content_maps_to_none():
    session = FakeSession()
    session.route(f"{SERVER_BASE}/rest/api/2/issue/ABC-1/transitions", make_response(204))
    client = BaseClient(server_config(), session=session)

    result = client.execute(
        "POST", "/rest/api/2/issue/ABC-1/transitions", json={"transition": {"id": "5"}}
    )

    assert result is None
    assert session.calls[0].json == {"transition": {"id": "5"}}


def test_auth_headers_sent_on_every_attempt():
    session = FakeSession()
    client = BaseClient(server_config(), session=session)

    with pytest.raises(RequestFailed):
        client.execute("GET", MYSELF)

    assert {c.headers["Authorization"] for c in session.calls} == {"Bearer pat-123"}


def test_cancel_mid_loop_leaves_no_learned_base():
    cancel = CancelToken()
    session = FakeSession()

    def cancel_then_404(call):
        cancel.cancel()
        return make_response(404)

    session.route(f"{SERVER_BASE}/rest/api/2/myself", cancel_then_404)
    session.route(f"{SERVER_BASE}/jira/rest/api/2/myself", make_response(200, {"name": "dev"}))
    client = BaseClient(server_config(), session=session)

    with pytest.raises(Cancelled):
        client.execute("GET", MYSELF, cancel=cancel)

    assert len(session.calls) == 1
    assert client.learned_base_url is None


def test_cancel_during_winning_request_learns_nothing():
    cancel = CancelToken()
    session = FakeSession()

    def cancel_then_ok(call):
        cancel.cancel()
        return make_response(200, {"name": "dev"})

    session.route(f"{SERVER_BASE}/jira/rest/api/2/myself", cancel_then_ok)
    client = BaseClient(server_config(), session=session)

    with pytest.raises(Cancelled):
        client.execute("GET", MYSELF, cancel=cancel)

    assert len(session.calls) == 3
    assert client.learned_base_url is None


def test_cancelled_token_prevents_any_request():
    cancel = CancelToken()
    cancel.cancel()
    session = FakeSession()
    client = BaseClient(server_config(), session=session)

    with pytest.raises(Cancelled):
        client.execute("GET", MYSELF, cancel=cancel)

    assert session.calls == []


def test_non_json_success_is_reported():
    session = FakeSession()
    html = make_response(200)
    html._content = b"<html>login</html>"
    session.route(f"{SERVER_BASE}/rest/api/2/myself", html)
    client = BaseClient(server_config(), session=session)

    with pytest.raises(RequestFailed) as exc:
        client.execute("GET", MYSELF)

    assert "non-JSON" in exc.value.hint


def test_context_manager_closes_session():
    session = FakeSession()
    with BaseClient(server_config(), session=session):
        pass
    assert session.closed


def test_subpath_with_latest_alias_keeps_working_after_learning():
    session = FakeSession()
    session.route(f"{SERVER_BASE}/jira/rest/api/latest/myself", make_response(200, {"name": "dev"}))
    session.route(
        f"{SERVER_BASE}/jira/rest/api/latest/issue/ABC-1", make_response(200, {"key": "ABC-1"})
    )
    client = BaseClient(server_config(), session=session)

    assert client.execute("GET", MYSELF) == {"name": "dev"}
    assert client.learned_base_url == f"{SERVER_BASE}/jira"

    session.calls.clear()
    assert client.execute("GET", "/rest/api/2/issue/ABC-1") == {"key": "ABC-1"}
    assert session.urls == [
        f"{SERVER_BASE}/rest/api/2/issue/ABC-1",
        f"{SERVER_BASE}/jira/rest/api/2/issue/ABC-1",
        f"{SERVER_BASE}/jira/rest/api/latest/issue/ABC-1",
    ]


def test_canonical_success_drops_stale_correction():
    session = FakeSession()
    session.route(f"{SERVER_BASE}/rest/api/2/myself", make_response(200, {"name": "dev"}))
    client = BaseClient(server_config(), session=session)
    client.resolver.remember(f"{SERVER_BASE}/jira")

    assert client.execute("GET", MYSELF) == {"name": "dev"}
    assert client.learned_base_url is None
