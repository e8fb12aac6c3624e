"""repo-onboarder CLI interface.

Commands:
- run: Analyze a repository and generate its onboarding documents
- analyze: Analyze a repository only (git report and context payload)
- init: Initialize onboarder configuration

Global options:
- --config: Path to configuration file
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --ci: JSON log output
- --version: Show version and exit
"""

from dataclasses import replace
from pathlib import Path
from typing import Annotated

import typer

from onboarder import __version__
from onboarder.config import OnboarderConfig, create_default_config, load_config
from onboarder.errors import OnboarderError
from onboarder.utils.logging import configure_from_cli, get_logger

app = typer.Typer(
    name="onboarder",
    help="Generate onboarding documentation for a git repository",
    add_completion=False,
    no_args_is_help=True,
)

# Global state
_config: OnboarderConfig | None = None
_logger = get_logger()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"onboarder {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output with timestamps",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress info messages (warnings and errors only)",
        ),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option(
            "--ci",
            help="Enable CI mode with JSON output",
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """repo-onboarder - onboarding documentation from git history and source.

    Analyzes commit history and churn hotspots, builds a repository context
    and asks a language model for onboarding documents.
    """
    global _config

    configure_from_cli(verbose=verbose, quiet=quiet, ci=ci)

    try:
        _config = load_config(config_path=config)
        if _config.config_path:
            _logger.debug(f"Loaded config from: {_config.config_path}")
    except FileNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except (ValueError, OSError) as e:
        _logger.error(f"Failed to load config: {e}")
        raise typer.Exit(1)


def _effective_config(
    output: Path | None = None,
    no_cache: bool = False,
    debug: bool = False,
) -> OnboarderConfig:
    """Apply command-line overrides to the loaded configuration."""
    config = _config or OnboarderConfig()
    if output is not None:
        config = replace(config, output=replace(config.output, directory=str(output)))
    if no_cache:
        config = replace(config, cache=replace(config.cache, enabled=False))
    if debug:
        config = replace(config, output=replace(config.output, debug=True))
    return config


# =============================================================================
# run command
# =============================================================================


@app.command()
def run(
    repo_url: Annotated[
        str,
        typer.Argument(help="Repository URL or local path"),
    ],
    branch: Annotated[
        str | None,
        typer.Option(
            "--branch",
            "-b",
            help="Branch to check out (remote default if omitted)",
        ),
    ] = None,
    with_tests: Annotated[
        bool,
        typer.Option(
            "--with-tests",
            help="Keep test files in the file listing and source corpus",
        ),
    ] = False,
    language: Annotated[
        str | None,
        typer.Option(
            "--language",
            "-l",
            help="Language of the generated documents (overrides config)",
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output directory (overrides config)",
        ),
    ] = None,
    no_cache: Annotated[
        bool,
        typer.Option(
            "--no-cache",
            help="Embed the full repository context in every prompt",
        ),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option(
            "--debug",
            help="Write rendered prompts and raw documents to the debug directory",
        ),
    ] = False,
) -> None:
    """Analyze a repository and generate its onboarding documents.

    Exit codes:
        0: All documents generated
        1: Fatal error (documents finished before the error are kept)
    """
    from onboarder.runner import OnboardingRunner

    config = _effective_config(output=output, no_cache=no_cache, debug=debug)
    runner = OnboardingRunner(config)

    _logger.info(f"Onboarding repository: {repo_url}")
    try:
        result = runner.run(
            repo_url,
            branch=branch,
            include_tests=with_tests or None,
            target_language=language,
        )
    except OnboarderError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except (ValueError, OSError) as e:
        _logger.error(f"Run failed: {e}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        runner.cancel.cancel()
        _logger.error("Interrupted")
        raise typer.Exit(1)

    typer.echo(f"\n📄 {len(result)} documents written to: {runner.output_dir}")
    for document_type in result.keys():
        typer.echo(f"  • {document_type}")


# =============================================================================
# analyze command
# =============================================================================


@app.command()
def analyze(
    repo_url: Annotated[
        str,
        typer.Argument(help="Repository URL or local path"),
    ],
    branch: Annotated[
        str | None,
        typer.Option(
            "--branch",
            "-b",
            help="Branch to check out (remote default if omitted)",
        ),
    ] = None,
    with_tests: Annotated[
        bool,
        typer.Option(
            "--with-tests",
            help="Keep test files in the file listing and source corpus",
        ),
    ] = False,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output directory (overrides config)",
        ),
    ] = None,
) -> None:
    """Analyze a repository without calling the language model.

    Writes the git report and the repository context payload files.
    """
    from onboarder.runner import OnboardingRunner

    config = _effective_config(output=output)
    config = replace(config, output=replace(config.output, write_payloads=True))
    runner = OnboardingRunner(config)

    _logger.info(f"Analyzing repository: {repo_url}")
    try:
        analysis = runner.analyze(repo_url, branch=branch, include_tests=with_tests or None)
    except OnboarderError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except OSError as e:
        _logger.error(f"Failed to write output: {e}")
        raise typer.Exit(1)

    report = analysis.report
    typer.echo(
        f"\n📊 {len(report.files)} files, {len(report.commits)} commits, "
        f"{len(report.file_stats)} hotspots"
    )
    for stats in report.hotspots(5):
        typer.echo(f"  • {stats.path} (churn {stats.churn}, {stats.commits} commits)")
    typer.echo(f"\n📄 Git report written to: {runner.output_dir / config.output.git_report}")
    typer.echo(f"📦 Payload written to: {config.output.debug_directory}")


# =============================================================================
# init command
# =============================================================================


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Overwrite existing config",
        ),
    ] = False,
) -> None:
    """Initialize onboarder configuration.

    Creates .onboarder/config.yaml with every option and its default.
    """
    config_dir = Path(".onboarder")
    config_dir.mkdir(exist_ok=True)

    config_file = config_dir / "config.yaml"
    if config_file.exists() and not force:
        _logger.error(f"Config already exists: {config_file}")
        _logger.info("Use --force to overwrite")
        raise typer.Exit(1)

    config_file.write_text(create_default_config(), encoding="utf-8")
    typer.echo(f"✅ Created {config_file}")
    typer.echo("\nNext steps:")
    typer.echo("  1. Set GEMINI_API_KEY (and GITHUB_TOKEN for private repositories)")
    typer.echo("  2. onboarder run https://github.com/<owner>/<repo>")


if __name__ == "__main__":
    app()
