"""Main CLI entry point for variant-ranking.

Provides command group with global options and subcommands.
"""

import logging
from pathlib import Path

import click

from variant_ranking import __version__
from variant_ranking.config.loader import load_config
from variant_ranking.cli.rank_cmd import rank


logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@click.group()
@click.option(
    '--config',
    type=click.Path(exists=True, path_type=Path),
    default='config/default.yaml',
    help='Path to analysis configuration YAML file'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Enable verbose logging (DEBUG level)'
)
@click.pass_context
def cli(ctx, config, verbose):
    """Variant-ranking: rank candidate disease genes from variant evidence.

    Filters called variants on effect, quality, population frequency and
    predicted pathogenicity, then fuses the survivors with phenotype priority
    scores into one ranked gene list.
    """
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")


@cli.command()
@click.pass_context
def info(ctx):
    """Display version and configuration summary."""
    config_path = ctx.obj['config_path']

    click.echo(f"Variant Ranking v{__version__}")
    click.echo(f"Config: {config_path}")
    click.echo()

    try:
        config = load_config(config_path)

        config_hash = config.config_hash()
        click.echo(f"Config Hash: {config_hash[:16]}...")
        click.echo()

        filters = config.filters
        click.echo(click.style("Filters:", bold=True))
        click.echo(f"  Stages: {', '.join(s.value for s in filters.stages)}")
        click.echo(f"  Min Quality: {filters.min_quality}")
        frequency_mode = "strict" if filters.strict_frequency else f"< {filters.max_frequency}%"
        click.echo(f"  Max Frequency: {frequency_mode}")
        click.echo(f"  Min Pathogenicity: {filters.min_pathogenicity_score}")
        click.echo(f"  Include Pathogenic: {filters.include_pathogenic}")
        if filters.intervals:
            click.echo(f"  Intervals: {', '.join(filters.intervals)}")
        if filters.priority_score_method is not None:
            click.echo(
                f"  Min Priority Score: {filters.min_priority_score} ({filters.priority_score_method.value})"
            )
        click.echo()

        click.echo(click.style("Scoring:", bold=True))
        click.echo(f"  Mode of Inheritance: {config.scoring.mode_of_inheritance.value}")
        click.echo(f"  Scoring Mode: {config.scoring.scoring_mode.value}")
        click.echo()

        click.echo(click.style("Execution:", bold=True))
        click.echo(f"  Run Mode: {config.execution.run_mode.value}")
        click.echo(f"  Max Workers: {config.execution.max_workers}")
        click.echo(f"  Max Retries: {config.execution.max_retries}")
        click.echo()

        click.echo(click.style("Paths:", bold=True))
        click.echo(f"  Data Directory: {config.data_dir}")
        click.echo(f"  DuckDB Path: {config.duckdb_path}")

    except Exception as e:
        click.echo(click.style(f"Error loading config: {e}", fg='red'), err=True)
        ctx.exit(1)


cli.add_command(rank)


if __name__ == '__main__':
    cli()
