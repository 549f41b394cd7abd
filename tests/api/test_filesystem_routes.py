"""Integration tests for filesystem inspection routes."""

from models.privilege import PrivilegeTier
from tests.fixtures.core.shells import LOCAL_ROOT_PASSWORD, su


class TestNodeLookup:
    """Tests for GET /filesystem/{machine_id}/node endpoint."""

    def test_readable_directory(self, client_with_shell):
        client, _ = client_with_shell
        response = client.get("/filesystem/localhost/node", params={"path": "/home/jshacker"})

        assert response.status_code == 200
        body = response.json()
        assert body["exists"] is True
        assert body["kind"] == "directory"
        assert body["readable"] is True
        assert "README.txt" in body["children"]
        assert body["content"] is None

    def test_unreadable_file_hides_content(self, client_with_shell):
        client, _ = client_with_shell
        body = client.get("/filesystem/localhost/node", params={"path": "/root/flag.txt"}).json()

        assert body["exists"] is True
        assert body["readable"] is False
        assert body["content"] is None

    def test_reads_follow_session_tier(self, client_with_shell):
        client, shell = client_with_shell
        su(shell, "root", LOCAL_ROOT_PASSWORD)

        body = client.get("/filesystem/localhost/node", params={"path": "/root/flag.txt"}).json()
        assert "FLAG{root_access_granted}" in body["content"]

    def test_tier_query_cannot_escalate(self, client_with_shell):
        client, _ = client_with_shell
        body = client.get(
            "/filesystem/localhost/node", params={"path": "/root/flag.txt", "tier": "root"}
        ).json()
        assert body["readable"] is False
        assert body["content"] is None

    def test_path_is_normalized(self, client_with_shell):
        client, _ = client_with_shell
        body = client.get("/filesystem/localhost/node", params={"path": "/home//jshacker/../jshacker"}).json()
        assert body["path"] == "/home/jshacker"

    def test_missing_path(self, client_with_shell):
        client, _ = client_with_shell
        body = client.get("/filesystem/localhost/node", params={"path": "/nope"}).json()
        assert body == {
            "machine_id": "localhost",
            "path": "/nope",
            "exists": False,
            "kind": None,
            "owner": None,
            "readable": False,
            "content": None,
            "children": None,
        }

    def test_unknown_machine(self, client_with_shell):
        client, _ = client_with_shell
        response = client.get("/filesystem/atlantis/node")

        assert response.status_code == 404
        body = response.json()
        assert body["requested_machine"] == "atlantis"
        assert "localhost" in body["available_machines"]


class TestPatches:
    """Tests for GET /filesystem/patches endpoint."""

    def test_no_patches(self, client_with_shell):
        client, _ = client_with_shell
        body = client.get("/filesystem/patches").json()

        assert body["patch_count"] == 0
        assert body["patches"] == []
        assert body["machines"] == sorted(body["machines"])

    def test_patch_listed_after_write(self, client_with_shell):
        client, shell = client_with_shell
        shell.store.create_file("localhost", "/tmp/a.txt", "a", PrivilegeTier.USER)

        body = client.get("/filesystem/patches").json()
        assert body["patch_count"] == 1
        assert body["patches"][0]["path"] == "/tmp/a.txt"
        assert body["patches"][0]["owner"] == "user"
