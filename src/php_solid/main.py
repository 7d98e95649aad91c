"""
php-solid: SOLID checks for PHP sources
---------------------------------------
Parses PHP code with Tree-sitter and reports:
- LSP violations: methods that throw exceptions their contract does not
  allow, return types that are not covariant, parameter types that are
  not contravariant
- ISP violations: stub implementations, fat interfaces, unfinished
  implementations

USAGE EXAMPLES
--------------
# 1) Check every class under a directory (LSP and ISP):
php-solid src/

# 2) Use a YAML config listing directories/files to scan:
php-solid --config solid.yaml

# 3) Only ISP, with a stricter fat-interface threshold, as JSON:
php-solid src/ --isp --isp-threshold 3 --json

Exit code is 1 when any class failed a check, 0 otherwise, 2 on usage or
configuration errors.
"""
import logging
from pathlib import Path
from typing import Optional

import typer

from php_solid.application import Application, RunOptions
from php_solid.config import SolidConfig, load_config
from php_solid.errors import ConfigError
from php_solid.logging import configure_logging, get_logger
from php_solid.logging_tags import CLI

app = typer.Typer(help="Detect LSP and ISP violations in PHP code.", add_completion=False)
logger = get_logger(__name__)


@app.command()
def check(
    directory: Optional[Path] = typer.Argument(
        None,
        help="Directory scanned recursively for .php files (added to the config's directories).",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML config file (directories, files, exclusions, isp_threshold).",
    ),
    lsp: bool = typer.Option(False, "--lsp", help="Run only the Liskov Substitution checks."),
    isp: bool = typer.Option(False, "--isp", help="Run only the Interface Segregation checks."),
    isp_threshold: Optional[int] = typer.Option(
        None,
        "--isp-threshold",
        min=1,
        help="Maximum number of methods before an interface is reported as fat (default 5).",
    ),
    json_output: bool = typer.Option(False, "--json", help="Print a JSON report instead of text."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log warnings and errors."),
) -> None:
    """
    Check PHP classes for LSP and ISP violations.
    """
    configure_logging(logging.WARNING if quiet else logging.INFO)

    if directory is None and config is None:
        typer.echo("Error: give a DIRECTORY or --config FILE.", err=True)
        raise typer.Exit(code=2)

    try:
        solid_config = load_config(config) if config is not None else SolidConfig()
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)

    if directory is not None:
        if not directory.is_dir():
            typer.echo(f"Error: '{directory}' is not a directory.", err=True)
            raise typer.Exit(code=2)
        solid_config = solid_config.add_directory(str(directory))

    # Neither flag means both principles.
    run_lsp, run_isp = (lsp, isp) if (lsp or isp) else (True, True)
    options = RunOptions(
        config=solid_config,
        run_lsp=run_lsp,
        run_isp=run_isp,
        isp_threshold=isp_threshold,
        json_output=json_output,
    )
    logger.info(
        f"{CLI} Running {'LSP ' if run_lsp else ''}{'ISP ' if run_isp else ''}"
        f"checks (fat interface threshold {options.effective_threshold})"
    )

    result = Application().run(options)
    raise typer.Exit(code=1 if result.failed_count else 0)


def main():
    app()


if __name__ == "__main__":
    main()
