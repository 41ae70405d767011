# Copyright (c) 2025-2026 Gowtham Adamane Rao. All Rights Reserved.
#
# Licensed under the Prosperity Public License 3.0.0 (the "License").
# You may not use this file except in compliance with the License.
# You may obtain a copy of the License in the LICENSE file at the root
# of this repository, or at: https://prosperitylicense.com/versions/3.0.0
#
# Commercial use beyond a 30-day trial requires a separate license.
"""
This module provides the command-line interface for the ICSR exporter.
"""
import logging
from datetime import date
from pathlib import Path
from typing import Optional

import typer

from . import config
from .casefile import load_case_file
from .encoder import IcsrEncoder
from .reader import read_icsr

app = typer.Typer(help="Export reviewed adverse-event cases as ICH E2B(R3) ICSR documents.")

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


def default_output_name(report_id: str, today: Optional[date] = None) -> str:
    """File name for an exported report, e.g. ``e2b-icsr-NARC-1A2B3C4D-2026-01-31.xml``."""
    return f"e2b-icsr-{report_id}-{(today or date.today()).isoformat()}.xml"


@app.command()
def export(
    case_file: Path = typer.Argument(..., help="Reviewed case as a JSON or YAML file."),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Where to write the XML. Defaults to a name derived from the report id.",
    ),
    exported_by: str = typer.Option(
        "", "--exported-by", "-u", help="Identity of the user running the export."
    ),
    receiver: Optional[str] = typer.Option(
        None, "--receiver", help="Override the receiving regulatory authority."
    ),
    country: Optional[str] = typer.Option(
        None, "--country", help="Override the ISO 3166-1 alpha-2 country code."
    ),
    stdout: bool = typer.Option(False, "--stdout", help="Print the XML instead of writing a file."),
    profile: str = typer.Option(
        "dev", "--profile", "-p", help="The configuration profile to use."
    ),
) -> None:
    """Encode a reviewed case as an ICSR XML document."""
    settings = config.load_config(profile=profile)
    logging.getLogger().setLevel(settings.log_level)

    try:
        loaded = load_case_file(case_file)
        overrides = {}
        if receiver:
            overrides["receiver_organization"] = receiver
        if country:
            overrides["country_code"] = country.upper()
        if loaded.coding_dictionary_version:
            overrides["coding_dictionary_version"] = loaded.coding_dictionary_version
        options = settings.export.to_options(exported_by).model_copy(update=overrides)

        encoder = IcsrEncoder.from_config(settings)
        document = encoder.build(loaded.case, options=options)
        xml = document.render()
    except Exception as e:
        typer.secho(f"Export failed: {e}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)

    if stdout:
        typer.echo(xml, nl=False)
        return

    report_id = document.report_id
    target = output or Path(default_output_name(report_id))
    target.write_text(xml, encoding="utf-8")
    unconfirmed = loaded.case.unconfirmed_count
    colour = typer.colors.YELLOW if unconfirmed else typer.colors.GREEN
    typer.secho(
        f"Wrote {report_id} to {target} ({unconfirmed} unconfirmed term(s)).", fg=colour
    )


@app.command()
def inspect(
    xml_file: Path = typer.Argument(..., help="An exported ICSR XML file."),
    strict: bool = typer.Option(
        False, "--strict", help="Exit with code 1 if any reaction is not confirmed."
    ),
) -> None:
    """Show the review status of every reaction in an exported report."""
    try:
        summary = read_icsr(xml_file)
    except Exception as e:
        typer.secho(f"Could not read {xml_file}: {e}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.echo(f"Report {summary.report_id} (serious={summary.serious})")
    for reaction in summary.reactions:
        status = reaction.status.value if reaction.status else "no marker"
        typer.echo(f"  {reaction.index}. {reaction.pt_term} [{status}]")

    if summary.ready_for_submission:
        typer.secho("All reactions confirmed.", fg=typer.colors.GREEN)
    else:
        typer.secho(
            f"{len(summary.unconfirmed)} reaction(s) require verification.",
            fg=typer.colors.YELLOW,
        )
        if strict:
            raise typer.Exit(code=1)


@app.command()
def init_config(
    path: Path = typer.Option(Path("config.yaml"), "--path", help="Where to write the file."),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file."),
) -> None:
    """Write a default configuration file with 'dev' and 'prod' profiles."""
    if path.exists() and not force:
        logger.error(f"{path} already exists. Use --force to overwrite it.")
        raise typer.Exit(code=1)
    path.write_text(config.DEFAULT_CONFIG.lstrip(), encoding="utf-8")
    logger.info(f"Wrote default configuration to {path}.")


if __name__ == "__main__":
    app()
