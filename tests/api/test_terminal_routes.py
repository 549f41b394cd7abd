"""Integration tests for terminal routes.

These tests verify the behavior of the terminal endpoints:
- POST /terminal/submit - Submit a command line or credential
- POST /terminal/advance - Advance simulated time
- POST /terminal/interrupt - Cancel the running command or prompt
- GET /terminal/prompt - Current prompt and input mode
- GET /terminal/commands - Commands available to the current identity
"""

from tests.fixtures.core.shells import LOCAL_ROOT_PASSWORD


def line_texts(body: dict) -> list[str]:
    return [line["text"] for line in body["lines"] if line["kind"] != "input"]


class TestSubmit:
    """Tests for POST /terminal/submit endpoint."""

    def test_submit_returns_output_and_prompt(self, client_with_shell):
        client, _ = client_with_shell
        response = client.post("/terminal/submit", json={"input": "pwd()"})

        assert response.status_code == 200
        body = response.json()
        assert body["lines"][0] == {"kind": "input", "text": "jshacker@localhost> pwd()"}
        assert line_texts(body) == ["/home/jshacker"]
        assert body["prompt"] == "jshacker@localhost>"
        assert body["mode"] == "none"
        assert body["input_mode"] == "command"
        assert body["busy"] is False

    def test_command_errors_are_output_not_http_errors(self, client_with_shell):
        client, _ = client_with_shell
        response = client.post("/terminal/submit", json={"input": "nope()"})

        assert response.status_code == 200
        assert response.json()["lines"][-1] == {
            "kind": "error",
            "text": "Error: ReferenceError: nope is not defined",
        }

    def test_password_flow(self, client_with_shell):
        client, shell = client_with_shell
        body = client.post("/terminal/submit", json={"input": 'su("root")'}).json()
        assert body["input_mode"] == "password"
        assert body["prompt"] == "Password:"

        body = client.post("/terminal/submit", json={"input": LOCAL_ROOT_PASSWORD}).json()
        assert line_texts(body) == ["Switched to user: root"]
        assert body["prompt"] == "root@localhost>"
        assert shell.session.username == "root"

    def test_missing_input_rejected(self, client_with_shell):
        client, _ = client_with_shell
        response = client.post("/terminal/submit", json={})
        assert response.status_code == 422

    def test_oversized_input_rejected(self, client_with_shell):
        client, _ = client_with_shell
        response = client.post("/terminal/submit", json={"input": "x" * 10_001})
        assert response.status_code == 422


class TestAdvance:
    """Tests for POST /terminal/advance endpoint."""

    def test_async_output_arrives_on_advance(self, client_with_shell):
        client, _ = client_with_shell
        body = client.post("/terminal/submit", json={"input": 'nslookup("darknet.ctf")'}).json()
        assert body["busy"] is True

        body = client.post("/terminal/advance", json={"milliseconds": 600}).json()
        assert line_texts(body)[-1] == "Address: 203.0.113.42"
        assert body["busy"] is False

    def test_advance_moves_clock(self, client_with_shell):
        client, shell = client_with_shell
        before = shell.scheduler.current_time

        client.post("/terminal/advance", json={"milliseconds": 1500})
        assert (shell.scheduler.current_time - before).total_seconds() == 1.5

    def test_negative_milliseconds_rejected(self, client_with_shell):
        client, _ = client_with_shell
        response = client.post("/terminal/advance", json={"milliseconds": -1})
        assert response.status_code == 422


class TestInterrupt:
    """Tests for POST /terminal/interrupt endpoint."""

    def test_interrupt_running_command(self, client_with_shell):
        client, _ = client_with_shell
        client.post("/terminal/submit", json={"input": 'ssh("guest", "192.168.1.1")'})

        body = client.post("/terminal/interrupt").json()
        assert line_texts(body) == ["^C"]
        assert body["busy"] is False

        body = client.post("/terminal/advance", json={"milliseconds": 5000}).json()
        assert body["lines"] == []

    def test_interrupt_idle(self, client_with_shell):
        client, _ = client_with_shell
        assert client.post("/terminal/interrupt").json()["lines"] == []


class TestPromptAndCommands:
    """Tests for GET /terminal/prompt and GET /terminal/commands."""

    def test_prompt(self, client_with_shell):
        client, _ = client_with_shell
        response = client.get("/terminal/prompt")

        assert response.status_code == 200
        assert response.json() == {
            "prompt": "jshacker@localhost>",
            "mode": "none",
            "input_mode": "command",
            "busy": False,
        }

    def test_commands_filtered_by_tier(self, client_with_shell):
        client, _ = client_with_shell
        body = client.get("/terminal/commands").json()

        assert body["mode"] == "none"
        assert body["commands"] == sorted(body["commands"])
        assert "ssh" in body["commands"]
        assert "decrypt" not in body["commands"]
