"""Rank command: filter variants, score genes and persist the ranking."""

import logging
import sys
from pathlib import Path

import click

from variant_ranking.analysis import AnalysisRunner, load_analysis_input
from variant_ranking.config.loader import load_config_with_overrides
from variant_ranking.evidence import StoreEvidenceSource
from variant_ranking.model.modes import RunMode, ScoringMode
from variant_ranking.output import persist_results, write_results
from variant_ranking.persistence import AnalysisStore, ProvenanceTracker

logger = logging.getLogger(__name__)


@click.command('rank')
@click.argument('input_path', type=click.Path(exists=True, path_type=Path))
@click.option(
    '--run-mode',
    type=click.Choice([m.value for m in RunMode]),
    default=None,
    help='Override execution.run_mode from config'
)
@click.option(
    '--scoring-mode',
    type=click.Choice([m.value for m in ScoringMode]),
    default=None,
    help='Override scoring.scoring_mode from config'
)
@click.option(
    '--evidence',
    type=click.Choice(['inline', 'store']),
    default='inline',
    help='Read frequency/pathogenicity from the input file or from the DuckDB evidence tables'
)
@click.option(
    '--top',
    type=int,
    default=10,
    show_default=True,
    help='Number of top genes to display'
)
@click.option(
    '--no-persist',
    is_flag=True,
    help='Do not save results to DuckDB or write output files'
)
@click.pass_context
def rank(ctx, input_path, run_mode, scoring_mode, evidence, top, no_persist):
    """Rank candidate genes for one analysis input file.

    INPUT_PATH is a YAML file with the pedigree, called variants (with
    precomputed gene/effect annotation) and phenotype priority scores.

    Examples:

        # Rank with inline evidence and default config
        variant-ranking rank analysis.yaml

        # Rank-based priority rescoring, stop at first failed filter
        variant-ranking rank analysis.yaml --scoring-mode rank_based --run-mode pass_only

        # Use evidence tables loaded into DuckDB
        variant-ranking rank analysis.yaml --evidence store
    """
    config_path = ctx.obj['config_path']

    click.echo(click.style("=== Variant Ranking ===", bold=True))
    click.echo()

    store = None
    try:
        overrides = {}
        if run_mode is not None:
            overrides['execution.run_mode'] = run_mode
        if scoring_mode is not None:
            overrides['scoring.scoring_mode'] = scoring_mode
        config = load_config_with_overrides(config_path, overrides)
        click.echo(click.style(f"  Config loaded: {config_path}", fg='green'))

        analysis_input = load_analysis_input(input_path)
        click.echo(click.style(
            f"  Input loaded: {len(analysis_input.variants)} variants, "
            f"{len(analysis_input.priority_scores)} priority scores",
            fg='green'
        ))
        click.echo()

        provenance = ProvenanceTracker.from_config(config)
        if not no_persist:
            store = AnalysisStore.from_config(config)
        elif evidence == 'store':
            store = AnalysisStore.from_config(config, read_only=True)

        if evidence == 'store':
            lookup = StoreEvidenceSource(store, max_retries=config.execution.max_retries)
        else:
            lookup = analysis_input.evidence_source()

        runner = AnalysisRunner(
            config,
            annotator=analysis_input.annotator(),
            frequency_lookup=lookup,
            pathogenicity_lookup=lookup,
        )
        results = runner.run(
            analysis_input.to_variants(),
            analysis_input.pedigree,
            priority_source=analysis_input.priority_source(),
            priority_types=analysis_input.priority_types(),
        )

        report = results.filter_report
        provenance.record_step('filter_variants', {
            'total': report.total,
            'passed_all': report.passed_all,
            'errored': report.errored,
        })
        provenance.record_step('score_genes', {'gene_count': len(results.genes)})
        provenance.record_filter_report(report)

        click.echo(click.style("Filter summary:", bold=True))
        click.echo(f"  Variants: {report.total}")
        click.echo(f"  Passed all filters: {report.passed_all}")
        if report.errored:
            click.echo(click.style(f"  Errored lookups: {report.errored}", fg='yellow'))
        for stage in report.stages:
            click.echo(
                f"  {stage.filter_type:<14} pass={stage.passed} fail={stage.failed} not_run={stage.not_run}"
            )
        click.echo()

        click.echo(click.style(f"Top {top} genes:", bold=True))
        for position, gene in enumerate(results.top(top), start=1):
            modes = ",".join(sorted(m.value for m in gene.inheritance_modes)) or "-"
            click.echo(
                f"  {position:>3}. {gene.symbol:<12} combined={gene.combined_score:.4f} "
                f"filter={gene.filter_score:.4f} priority={gene.priority_score:.4f} modes={modes}"
            )
        click.echo()

        if not no_persist:
            counts = persist_results(store, results)
            provenance.record_step('persist_results', counts)
            results_dir = Path(config.data_dir) / "results"
            paths = write_results(results, results_dir)
            provenance.save_to_store(store)
            sidecar = provenance.save_sidecar(paths['tsv'])
            click.echo(click.style(f"  Results saved to DuckDB: {config.duckdb_path}", fg='green'))
            click.echo(click.style(f"  TSV: {paths['tsv']}", fg='green'))
            click.echo(click.style(f"  Provenance: {sidecar}", fg='green'))
            click.echo()

        click.echo(click.style("Ranking complete!", fg='green', bold=True))

    except Exception as e:
        click.echo(click.style(f"Rank command failed: {e}", fg='red'), err=True)
        logger.exception("Rank command failed")
        sys.exit(1)
    finally:
        if store is not None:
            store.close()
