"""Unified CLI for twostep using Click."""

import asyncio
import json
import sys

import click
from loguru import logger

from twostep.config import get_config
from twostep.forms.code_entry import CodeEntryController
from twostep.forms.credentials import CredentialFormController
from twostep.forms.schemas import CODE_LENGTH, Scheme
from twostep.forms.state import SubmitStatus
from twostep.gateway import SubmissionGateway


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
def cli(verbose):
    logger.remove()
    logger.add(
        lambda message: click.echo(message, err=True, nl=False),
        level="DEBUG" if verbose else "WARNING",
        format="{time:HH:mm:ss} | {level: <8} | {message}",
    )


# =============================================================================
# Login Commands
# =============================================================================


def type_code(entry: CodeEntryController, text: str) -> None:
    """Enter a code the way a user would: paste it, or type it digit by digit."""
    for index in range(CODE_LENGTH):
        entry.on_digit(index, "")
    if entry.on_paste(text):
        return
    for index, char in enumerate(text[:CODE_LENGTH]):
        entry.on_digit(index, char)


async def _run_login(
    scheme: Scheme,
    identifier: str,
    password: str,
    code,
    attempts: int,
    base_url,
) -> int:
    """Headless two-step login. Returns the process exit code."""
    config = get_config()
    gateway = SubmissionGateway(base_url=base_url, config=config)

    form = CredentialFormController(gateway, config=config.forms)
    form.select_scheme(scheme)
    form.set_field(scheme.value, identifier)
    form.set_field("password", password)

    outcome = await form.submit()
    if outcome.status is SubmitStatus.INVALID:
        for field, message in outcome.errors.items():
            click.echo(f"{field}: {message}", err=True)
        return 1
    if not outcome.ok:
        click.echo(form.login_error or "Login failed", err=True)
        return 1

    click.echo("Login accepted. Enter the code from your authenticator app.")

    verified = []
    entry = CodeEntryController(
        gateway,
        on_verified=lambda target, data: verified.append(target),
        config=config.code_entry,
    )

    for attempt in range(attempts):
        text = code if (code and attempt == 0) else click.prompt("Code")
        type_code(entry, text.strip())

        outcome = await entry.submit()
        if outcome.ok:
            click.echo(f"Verified. Continue to: {verified[0]}")
            return 0
        for message in (entry.schema_error, entry.server_error):
            if message:
                click.echo(message, err=True)

    click.echo("Too many attempts", err=True)
    return 1


@cli.command()
@click.option("--email", "-e", default=None, help="Log in with this email address.")
@click.option("--mobile", "-m", default=None, help="Log in with this mobile number.")
@click.option("--password", "-p", default=None, help="Password (prompted if omitted).")
@click.option("--code", "-c", default=None, help="One-time code (prompted if omitted).")
@click.option(
    "--attempts",
    default=3,
    show_default=True,
    type=click.IntRange(min=1),
    help="Number of code attempts before giving up.",
)
@click.option("--base-url", default=None, help="Backend URL (overrides config).")
def login(email, mobile, password, code, attempts, base_url):
    """Log in with email or mobile number, then verify a one-time code.

    Example:
        twostep login --email user@example.com
    """
    if bool(email) == bool(mobile):
        raise click.UsageError("Provide exactly one of --email or --mobile")

    scheme = Scheme.EMAIL if email else Scheme.MOBILE
    identifier = email or mobile
    if password is None:
        password = click.prompt("Password", hide_input=True)

    exit_code = asyncio.run(
        _run_login(scheme, identifier, password, code, attempts, base_url)
    )
    if exit_code:
        sys.exit(exit_code)


@cli.command()
@click.option("--base-url", default=None, help="Backend URL (overrides config).")
def tui(base_url):
    """Launch the interactive login screens."""
    from twostep.tui.app import run_tui

    target = run_tui(base_url=base_url)
    if target:
        click.echo(f"Verified. Continue to: {target}")


# =============================================================================
# Utility Commands
# =============================================================================


@cli.command(name="config")
def show_config():
    """Show the effective configuration."""
    click.echo(json.dumps(get_config().to_dict(), indent=2))


if __name__ == "__main__":
    cli()
