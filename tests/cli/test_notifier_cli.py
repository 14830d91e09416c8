from __future__ import annotations

from typing import Any, Dict

from docker.errors import DockerException
from typer.testing import CliRunner

from cli import notifier as notifier_cli
from notifications.dispatcher import NotificationDispatcher
from notifications.sinks import SinkConfig


def _set_env(monkeypatch, **values: str) -> None:
    for key in ("API_VERSION", "SLACK_URL", "DISCORD_URL"):
        monkeypatch.delenv(key, raising=False)
    for key, value in values.items():
        monkeypatch.setenv(key, value)
    monkeypatch.setattr(notifier_cli, "_configure_environment", lambda: None)


def test_run_exits_on_configuration_error(monkeypatch) -> None:
    runner = CliRunner()
    _set_env(monkeypatch, API_VERSION="1.43")

    result = runner.invoke(notifier_cli.app, ["run"])

    assert result.exit_code == 2
    assert "SLACK_URL and/or DISCORD_URL must be set" in result.output


def test_run_stops_watcher_and_drains_dispatcher(monkeypatch) -> None:
    runner = CliRunner()
    _set_env(monkeypatch, API_VERSION="1.43", SLACK_URL="https://hooks.example/slack")

    class DummyDispatcher:
        def __init__(self) -> None:
            self.drained = False

        def shutdown(self, *, wait: bool = True) -> None:
            self.drained = wait

    class DummyWatcher:
        def __init__(self) -> None:
            self.dispatcher = DummyDispatcher()
            self.stopped = False

        def run_forever(self) -> None:
            raise KeyboardInterrupt

        def stop(self) -> None:
            self.stopped = True

    watcher = DummyWatcher()
    monkeypatch.setattr(notifier_cli, "_build_watcher", lambda config: watcher)

    result = runner.invoke(notifier_cli.app, ["run"])

    assert result.exit_code == 0, result.stdout
    assert "Watching docker events for slack" in result.stdout
    assert watcher.stopped
    assert watcher.dispatcher.drained


def test_run_exits_when_docker_client_cannot_be_built(monkeypatch) -> None:
    runner = CliRunner()
    _set_env(monkeypatch, API_VERSION="1.43", SLACK_URL="https://hooks.example/slack")

    def _broken(config: Any) -> Any:
        raise DockerException("Error while fetching server API version: bad DOCKER_HOST")

    monkeypatch.setattr(notifier_cli, "_build_watcher", _broken)

    result = runner.invoke(notifier_cli.app, ["run"])

    assert result.exit_code == 1
    assert "Docker client error" in result.output
    assert "bad DOCKER_HOST" in result.output
    assert "Watching docker events" not in result.output


def test_health_reports_config_and_docker(monkeypatch) -> None:
    runner = CliRunner()
    _set_env(monkeypatch, API_VERSION="1.43", DISCORD_URL="https://hooks.example/discord")
    monkeypatch.setattr(
        notifier_cli,
        "_ping_docker",
        lambda config: {"reachable": True, "server_version": "24.0.7", "server_api_version": "1.43"},
    )

    result = runner.invoke(notifier_cli.app, ["health", "--raw"])

    assert result.exit_code == 0, result.stdout
    assert '"sinks": ["discord"]' in result.stdout
    assert '"reachable": true' in result.stdout
    assert "hooks.example" not in result.stdout


def test_health_fails_when_docker_is_unreachable(monkeypatch) -> None:
    runner = CliRunner()
    _set_env(monkeypatch, API_VERSION="1.43", SLACK_URL="https://hooks.example/slack")
    monkeypatch.setattr(
        notifier_cli,
        "_ping_docker",
        lambda config: {"reachable": False, "error": "connection refused"},
    )

    result = runner.invoke(notifier_cli.app, ["health"])

    assert result.exit_code == 1


def test_send_test_reports_each_sink(monkeypatch) -> None:
    runner = CliRunner()
    _set_env(
        monkeypatch,
        API_VERSION="1.43",
        SLACK_URL="https://hooks.example/slack",
        DISCORD_URL="https://hooks.example/discord",
    )
    sent: Dict[str, Any] = {}

    class OkTransport:
        def __init__(self, name: str) -> None:
            self.name = name

        def send(self, body: bytes) -> None:
            sent[self.name] = body

    def _dispatcher(config) -> NotificationDispatcher:
        return NotificationDispatcher(
            SinkConfig(config.sinks.urls),
            transports={name: OkTransport(name) for name in config.sinks.names},
        )

    monkeypatch.setattr(notifier_cli, "_build_dispatcher", _dispatcher)

    result = runner.invoke(notifier_cli.app, ["send-test"])

    assert result.exit_code == 0, result.stdout
    assert "slack: ok" in result.stdout
    assert "discord: ok" in result.stdout
    assert set(sent) == {"slack", "discord"}
    assert b"docker-notify-test" in sent["slack"]
