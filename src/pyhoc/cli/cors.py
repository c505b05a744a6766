# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""'pyhoc cors': show the effective CORS policy for a configuration."""

from __future__ import annotations

import json
from pathlib import Path

import click
from rich.markup import escape
from rich.table import Table

from pyhoc.cli.console import console
from pyhoc.core.application import resolve_active_profiles
from pyhoc.core.config import Config
from pyhoc.cors.policy import CorsPolicy, resolve
from pyhoc.cors.properties import CorsSettings
from pyhoc.kernel.exceptions import ConfigurationException


def _source(configured: tuple[str, ...]) -> str:
    return "[info]configured[/info]" if configured else "[dim]default[/dim]"


@click.command()
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Directory holding pyhoc.yaml / config/pyhoc.yaml.",
)
@click.option(
    "--profile", "profiles", multiple=True, help="Active profile (repeatable). Defaults to pyhoc.profiles.active."
)
@click.option("--json", "as_json", is_flag=True, help="Print the policy as JSON.")
def cors_command(config_dir: Path, profiles: tuple[str, ...], as_json: bool) -> None:
    """Resolve and display the CORS policy the application would install."""
    try:
        active = list(profiles) or resolve_active_profiles(config_dir)
        config = Config.from_sources(config_dir, active_profiles=active)
        settings = config.bind(CorsSettings)
    except ConfigurationException as exc:
        console.print(f"[error]{escape(str(exc))}[/error]")
        raise SystemExit(1) from exc

    policy = resolve(settings)

    if as_json:
        click.echo(json.dumps(_as_dict(policy, settings), indent=2))
        return

    table = Table(title="[pyhoc]Effective CORS policy[/pyhoc]", border_style="dim")
    table.add_column("Setting", style="info")
    table.add_column("Value")
    table.add_column("Source")
    table.add_row("allowed-origins", ", ".join(policy.allowed_origins), _source(settings.allowed_origins))
    table.add_row("allowed-methods", ", ".join(policy.allowed_methods), _source(settings.allowed_methods))
    table.add_row("allowed-headers", ", ".join(policy.allowed_headers), _source(settings.allowed_headers))
    table.add_row("allow-credentials", str(policy.allow_credentials).lower(), "[dim]fixed[/dim]")
    console.print(table)

    if not settings.enabled:
        console.print("[warning]CORS filter is disabled (pyhoc.cors.enabled=false).[/warning]")
    elif policy.allows_any_origin:
        console.print(
            "[warning]Any origin is allowed together with credentials; "
            "set pyhoc.cors.allowed-origins to restrict credentialed requests.[/warning]"
        )


def _as_dict(policy: CorsPolicy, settings: CorsSettings) -> dict:
    return {
        "enabled": settings.enabled,
        "allowed_origins": list(policy.allowed_origins),
        "allowed_methods": list(policy.allowed_methods),
        "allowed_headers": list(policy.allowed_headers),
        "allow_credentials": policy.allow_credentials,
    }
