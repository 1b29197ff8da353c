# src/hostswitch/cli.py
# Entry point invoked by the menu-bar plugin: `hostswitch` with no command
# prints the menu, the other commands are the actions behind its items.
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import requests
import typer

from hostswitch.alerts import alert_user_now
from hostswitch.blocker.applier import Applier
from hostswitch.blocker.counter import count_blocked
from hostswitch.blocker.detector import detect_active, is_active
from hostswitch.blocker.privilege import PrivilegedRunner, SudoRunner
from hostswitch.config import SYSTEM, Settings, load_settings
from hostswitch.errors import ApplyError, WriteFailed
from hostswitch.menu import MenuData, decode_token, render_menu
from hostswitch.profiles.state import StateStore
from hostswitch.profiles.store import ProfileStore
from hostswitch.sync.remote import RemoteSync, describe

logger = logging.getLogger("hostswitch")

cli = typer.Typer(add_completion=False, help="Switch /etc/hosts between named profiles.")


@dataclass
class Services:
    settings: Settings
    store: ProfileStore
    state_store: StateStore
    sync: RemoteSync
    applier: Applier

    @classmethod
    def build(
        cls,
        settings: Settings,
        session: Optional[requests.Session] = None,
        runner: Optional[PrivilegedRunner] = None,
    ) -> "Services":
        store = ProfileStore(settings)
        state_store = StateStore(settings.cache_dir)
        return cls(
            settings=settings,
            store=store,
            state_store=state_store,
            sync=RemoteSync(settings, store, state_store, session=session),
            applier=Applier(settings, state_store, runner=runner or SudoRunner()),
        )


@cli.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr."),
):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if ctx.obj is None:
        ctx.obj = Services.build(load_settings())
    if ctx.invoked_subcommand is None:
        menu(ctx)


@cli.command()
def menu(ctx: typer.Context):
    """Print the menu. Never fails: sync problems fall back to cached state."""
    svc: Services = ctx.obj
    try:
        svc.store.ensure_defaults()
        svc.sync.refresh_if_due()
    except WriteFailed as e:
        logger.error("❌ %s", e)

    hosts_path = svc.settings.hosts_path
    profiles = list(svc.store.list_profiles())
    active = detect_active(svc.store, hosts_path)
    count_source = active.path if active else hosts_path
    state = svc.state_store.load()

    data = MenuData(
        active=active,
        blocked_count=count_blocked(count_source),
        profiles=profiles,
        active_paths=[p.path for p in profiles if is_active(p.path, hosts_path)],
        last_error=state.last_error_line,
        hosts_path=hosts_path,
        safe_path=svc.settings.safe_path,
        upstream_last_modified=state.upstream_last_modified,
    )
    for line in render_menu(data):
        typer.echo(line)


@cli.command()
def apply(
    ctx: typer.Context,
    token: str = typer.Argument(..., help="Profile reference from the menu (base64 path)."),
    raw_path: bool = typer.Option(False, "--path", help="Treat TOKEN as a plain file path."),
):
    """Install a profile as the live hosts file (SAFE is refreshed first)."""
    svc: Services = ctx.obj
    candidate = Path(token) if raw_path else decode_token(token)
    src = svc.store.resolve(candidate) if candidate is not None else None
    if src is None:
        logger.info("No profile for %r; nothing to do", token)
        raise typer.Exit(0)

    try:
        if src == svc.store.safe_path:
            svc.sync.force_refresh()
        svc.applier.apply(src)
    except ApplyError as e:
        alert_user_now(f"Could not apply {src.name}", str(e))
        raise typer.Exit(1)
    except WriteFailed as e:
        logger.error("❌ %s", e)
        _record_error(svc, str(e))
        alert_user_now(f"Could not apply {src.name}", str(e))
        raise typer.Exit(1)


def _record_error(svc: Services, text: str) -> None:
    try:
        state = svc.state_store.load()
        state.append_error(text)
        svc.state_store.save(state, "last_error")
    except WriteFailed as e:
        logger.error("❌ could not record error: %s", e)


def open_in_text_editor(path: Path) -> int:
    """Open ``path`` in a text editor. Hosts files have no extension, so on macOS
    `open -t` is needed to avoid the "no application" dialog."""
    if SYSTEM == "Darwin":
        try:
            return subprocess.run(["/usr/bin/open", "-t", str(path)]).returncode
        except OSError as e:
            logger.warning("Cannot run open: %s", e)
            return 1
    return typer.launch(str(path))


@cli.command("open-active")
def open_active(ctx: typer.Context):
    """Open the active profile (or the live hosts file) in the default editor."""
    svc: Services = ctx.obj
    active = detect_active(svc.store, svc.settings.hosts_path)
    target = active.path if active else svc.settings.hosts_path
    rc = open_in_text_editor(target)
    if rc != 0:
        logger.warning("Opening %s exited with %s", target, rc)


@cli.command("open-profiles")
def open_profiles(ctx: typer.Context):
    """Show the profiles folder in the file browser."""
    svc: Services = ctx.obj
    try:
        svc.store.ensure_defaults()
    except WriteFailed as e:
        logger.error("❌ %s", e)
    rc = typer.launch(str(svc.settings.profiles_dir))
    if rc != 0:
        logger.warning("Opening %s exited with %s", svc.settings.profiles_dir, rc)


@cli.command()
def sync(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", "-f", help="Ignore the check interval."),
):
    """Refresh the SAFE profile from upstream."""
    svc: Services = ctx.obj
    try:
        svc.store.ensure_defaults()
        if force:
            changed = svc.sync.force_refresh()
            typer.echo("SAFE updated" if changed else "SAFE unchanged")
        else:
            typer.echo(describe(svc.sync.refresh_if_due()))
    except WriteFailed as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    cli()
