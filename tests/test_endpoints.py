from fakes import CLOUD_BASE, SERVER_BASE, cloud_config, server_config
from jira_assist.endpoints import EndpointResolver


def urls(resolver, path):
    return [c.url for c in resolver.candidates(path)]


def test_cloud_has_exactly_one_candidate():
    resolver = EndpointResolver(cloud_config())
    assert urls(resolver, "/rest/api/2/myself") == [f"{CLOUD_BASE}/rest/api/2/myself"]


def test_cloud_ignores_learned_base():
    resolver = EndpointResolver(cloud_config())
    resolver.remember(f"{CLOUD_BASE}/jira")
    assert urls(resolver, "/rest/api/2/myself") == [f"{CLOUD_BASE}/rest/api/2/myself"]


def test_server_candidates_in_priority_order():
    resolver = EndpointResolver(server_config())
    assert urls(resolver, "/rest/api/2/myself") == [
        f"{SERVER_BASE}/rest/api/2/myself",
        f"{SERVER_BASE}/rest/api/latest/myself",
        f"{SERVER_BASE}/jira/rest/api/2/myself",
        f"{SERVER_BASE}/jira/rest/api/latest/myself",
    ]


def test_server_base_with_subpath_only_adds_latest_alias():
    base = f"{SERVER_BASE}/jira"
    resolver = EndpointResolver(server_config(base_url=base))
    assert urls(resolver, "/rest/api/2/myself") == [
        f"{base}/rest/api/2/myself",
        f"{base}/rest/api/latest/myself",
    ]


def test_subpath_suffix_check_is_case_insensitive():
    base = f"{SERVER_BASE}/JIRA"
    resolver = EndpointResolver(server_config(base_url=base))
    assert len(urls(resolver, "/rest/api/2/myself")) == 2


def test_agile_paths_have_no_version_alias():
    resolver = EndpointResolver(server_config())
    assert urls(resolver, "/rest/agile/1.0/board/7/sprint") == [
        f"{SERVER_BASE}/rest/agile/1.0/board/7/sprint",
        f"{SERVER_BASE}/jira/rest/agile/1.0/board/7/sprint",
    ]


def test_learned_base_comes_right_after_canonical():
    resolver = EndpointResolver(server_config())
    resolver.remember(f"{SERVER_BASE}/jira")
    assert urls(resolver, "/rest/api/2/issue/ABC-1") == [
        f"{SERVER_BASE}/rest/api/2/issue/ABC-1",
        f"{SERVER_BASE}/jira/rest/api/2/issue/ABC-1",
        f"{SERVER_BASE}/jira/rest/api/latest/issue/ABC-1",
        f"{SERVER_BASE}/rest/api/latest/issue/ABC-1",
    ]


def test_candidates_are_deterministic_and_unique():
    resolver = EndpointResolver(server_config())
    first = urls(resolver, "/rest/api/2/search")
    assert first == urls(resolver, "/rest/api/2/search")
    assert len(first) == len(set(first))
    assert first[0] == f"{SERVER_BASE}/rest/api/2/search"


def test_candidates_record_their_base():
    resolver = EndpointResolver(server_config())
    bases = [c.base for c in resolver.candidates("/rest/api/2/myself")]
    assert bases == [SERVER_BASE, SERVER_BASE, f"{SERVER_BASE}/jira", f"{SERVER_BASE}/jira"]


def test_forget_clears_learned_base():
    resolver = EndpointResolver(server_config())
    resolver.remember(f"{SERVER_BASE}/jira")
    resolver.forget()
    assert resolver.learned_base is None
    assert resolver.active_base == SERVER_BASE
