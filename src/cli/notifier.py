"""CLI entrypoint for the docker-notify daemon."""

from __future__ import annotations

import json
import os
import time
from datetime import datetime, timezone

import typer
from docker.errors import DockerException
from dotenv import load_dotenv
from requests import RequestException

from infra.logging import configure_logging
from notifications.dispatcher import NotificationDispatcher
from notifications.payload import STARTED_COLOR, Attachment, NotificationPayload
from notifications.sinks import ConfigurationError
from watcher.builder import build_dispatcher, build_docker_client, build_watcher
from watcher.config import WatcherConfig
from watcher.loop import EventWatcher

app = typer.Typer(help="Forward Docker container start/die events to chat webhooks")


def _configure_environment() -> None:
    load_dotenv()
    run_id = os.environ.get("RUN_ID")
    if not run_id:
        run_id = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        os.environ["RUN_ID"] = run_id
    configure_logging(run_id=run_id, environment=os.environ.get("ENVIRONMENT"))


def _load_config() -> WatcherConfig:
    try:
        return WatcherConfig.from_env()
    except ConfigurationError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=2) from exc


def _build_watcher(config: WatcherConfig) -> EventWatcher:
    return build_watcher(config, build_docker_client(config))


def _build_dispatcher(config: WatcherConfig) -> NotificationDispatcher:
    return build_dispatcher(config)


def _ping_docker(config: WatcherConfig) -> dict[str, object]:
    try:
        client = build_docker_client(config)
    except DockerException as exc:
        return {"reachable": False, "error": str(exc)}
    try:
        client.ping()
        version = client.version()
    except (DockerException, RequestException) as exc:
        return {"reachable": False, "error": str(exc)}
    finally:
        client.close()
    return {
        "reachable": True,
        "server_version": version.get("Version"),
        "server_api_version": version.get("ApiVersion"),
    }


@app.command()
def run() -> None:
    """Watch container events until interrupted."""

    _configure_environment()
    config = _load_config()
    try:
        watcher = _build_watcher(config)
    except DockerException as exc:
        typer.echo(f"Docker client error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"Watching docker events for {', '.join(config.sinks.names)} (Ctrl+C to stop)")
    try:
        watcher.run_forever()
    except KeyboardInterrupt:
        typer.echo("Stopping watcher...")
        watcher.stop()
    finally:
        watcher.dispatcher.shutdown(wait=True)


@app.command()
def health(pretty: bool = typer.Option(True, "--pretty/--raw", help="Pretty-print JSON")) -> None:
    """Validate configuration and check that the Docker engine is reachable."""

    _configure_environment()
    config = _load_config()
    report = {"config": config.as_dict(), "docker": _ping_docker(config)}
    typer.echo(json.dumps(report, indent=2 if pretty else None))
    if not report["docker"]["reachable"]:
        raise typer.Exit(code=1)


@app.command("send-test")
def send_test(
    timeout: float = typer.Option(30.0, help="Seconds to wait for deliveries"),
) -> None:
    """Post a sample 'container started' notification to every sink."""

    _configure_environment()
    config = _load_config()
    dispatcher = _build_dispatcher(config)
    payload = NotificationPayload.single(
        Attachment(
            title="Container started. name => docker-notify-test image => docker-notify",
            color=STARTED_COLOR,
            ts=int(time.time()),
        )
    )
    try:
        results = dispatcher.dispatch(payload).wait(timeout=timeout)
    finally:
        dispatcher.shutdown(wait=False)
    for sink, delivered in results.items():
        typer.echo(f"{sink}: {'ok' if delivered else 'failed'}")
    if not all(results.values()):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
