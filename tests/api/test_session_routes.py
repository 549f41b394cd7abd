"""Integration tests for session inspection routes."""

from tests.fixtures.core.shells import GATEWAY_GUEST_PASSWORD, ssh


class TestSessionState:
    """Tests for GET /session/state endpoint."""

    def test_default_state(self, client_with_shell):
        client, _ = client_with_shell
        response = client.get("/session/state")

        assert response.status_code == 200
        body = response.json()
        assert body["session"] == {
            "username": "jshacker",
            "tier": "user",
            "machine": "localhost",
            "cwd": "/home/jshacker",
        }
        assert body["session_stack"] == []
        assert body["ftp_session"] is None
        assert body["nc_session"] is None

    def test_remote_login_pushes_stack(self, client_with_shell):
        client, shell = client_with_shell
        ssh(shell, "guest", "192.168.1.1", GATEWAY_GUEST_PASSWORD)

        body = client.get("/session/state").json()
        assert body["session"]["machine"] == "192.168.1.1"
        assert body["session"]["tier"] == "guest"
        assert [entry["machine"] for entry in body["session_stack"]] == ["localhost"]


class TestSessionSummary:
    """Tests for GET /session/summary endpoint."""

    def test_summary(self, client_with_shell):
        client, shell = client_with_shell
        body = client.get("/session/summary").json()

        assert body["shell_id"] == shell.shell_id
        assert body["prompt"] == "jshacker@localhost>"
        assert body["depth"] == 0
        assert body["current_time"] == shell.scheduler.current_time.isoformat()
