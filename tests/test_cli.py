"""Integration tests for the CLI using CliRunner."""

import json

import pytest
from click.testing import CliRunner

from variant_ranking.cli.main import cli
from variant_ranking.persistence import AnalysisStore


@pytest.fixture
def test_config(tmp_path):
    config_path = tmp_path / "test_config.yaml"
    config_path.write_text(f"""
data_dir: {tmp_path}/data
duckdb_path: {tmp_path}/test.duckdb
filters:
  min_quality: 30
scoring:
  mode_of_inheritance: any
execution:
  max_workers: 2
""")
    return config_path


@pytest.fixture
def analysis_file(tmp_path):
    path = tmp_path / "analysis.yaml"
    path.write_text("""
pedigree:
  individuals:
    - {id: proband, sex: male, status: affected}
variants:
  - {chromosome: "10", position: 123256215, ref: T, alt: G, quality: 80,
     genotypes: {proband: "0/1"}, gene: FGFR2, effect: missense,
     pathogenicity: {revel: 0.9}}
  - {chromosome: "1", position: 100, ref: A, alt: C, quality: 10,
     genotypes: {proband: "0/1"}, gene: LOWQ, effect: stop_gained}
priority_scores:
  - {gene: FGFR2, method: human_phenotype, score: 0.7}
  - {gene: LOWQ, method: human_phenotype, score: 0.1}
""")
    return path


def test_cli_help():
    runner = CliRunner()
    result = runner.invoke(cli, ['--help'])

    assert result.exit_code == 0
    assert 'rank' in result.output
    assert 'info' in result.output


def test_info_command(test_config):
    runner = CliRunner()
    result = runner.invoke(cli, ['--config', str(test_config), 'info'])

    assert result.exit_code == 0
    assert 'Config Hash:' in result.output
    assert 'Min Quality: 30.0' in result.output
    assert 'Max Workers: 2' in result.output


def test_info_invalid_config(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("filters:\n  min_quality: -1\n")

    result = CliRunner().invoke(cli, ['--config', str(bad), 'info'])

    assert result.exit_code == 1
    assert 'Error loading config' in result.output


def test_rank_command(test_config, analysis_file, tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, ['--config', str(test_config), 'rank', str(analysis_file)])

    assert result.exit_code == 0, result.output
    assert 'Passed all filters: 1' in result.output
    assert 'FGFR2' in result.output
    assert 'Ranking complete!' in result.output

    with AnalysisStore(tmp_path / "test.duckdb") as store:
        genes = store.read_table('ranked_genes')
        assert genes['gene_symbol'].to_list()[0] == 'FGFR2'
        assert store.read_table('variant_evaluations').height == 2

    results_dir = tmp_path / "data" / "results"
    assert (results_dir / "ranked_genes.tsv").exists()
    provenance = json.loads((results_dir / "ranked_genes.provenance.json").read_text())
    assert provenance['filter_report']['passed_all'] == 1
    assert [s['step_name'] for s in provenance['processing_steps']] == [
        'filter_variants', 'score_genes', 'persist_results',
    ]


def test_rank_no_persist(test_config, analysis_file, tmp_path):
    result = CliRunner().invoke(
        cli, ['--config', str(test_config), 'rank', str(analysis_file), '--no-persist', '--top', '1']
    )

    assert result.exit_code == 0, result.output
    assert 'Top 1 genes:' in result.output
    assert 'LOWQ' not in result.output.split('Top 1 genes:')[1]
    assert not (tmp_path / "test.duckdb").exists()


def test_rank_overrides(test_config, analysis_file):
    result = CliRunner().invoke(cli, [
        '--config', str(test_config), 'rank', str(analysis_file),
        '--no-persist', '--run-mode', 'pass_only', '--scoring-mode', 'rank_based',
    ])

    assert result.exit_code == 0, result.output
    assert 'not_run=1' in result.output


def test_rank_store_evidence_without_tables(test_config, analysis_file):
    """Store-backed evidence with empty tables still ranks (no evidence is not an error)."""
    result = CliRunner().invoke(cli, [
        '--config', str(test_config), 'rank', str(analysis_file), '--evidence', 'store',
    ])

    assert result.exit_code == 0, result.output
    # FGFR2 falls back to the missense default score; LOWQ still fails quality
    assert 'Passed all filters: 1' in result.output


def test_rank_missing_pedigree_fails(test_config, tmp_path):
    path = tmp_path / "no_pedigree.yaml"
    path.write_text("""
variants:
  - {chromosome: "1", position: 5, ref: A, alt: C, quality: 50,
     genotypes: {proband: "0/1"}, gene: G1, effect: missense}
""")

    result = CliRunner().invoke(cli, ['--config', str(test_config), 'rank', str(path), '--no-persist'])

    assert result.exit_code == 1
    assert 'No pedigree supplied' in result.output


def test_rank_store_evidence_no_persist_opens_read_only(test_config, analysis_file, tmp_path):
    AnalysisStore(tmp_path / "test.duckdb").close()

    result = CliRunner().invoke(cli, [
        '--config', str(test_config), 'rank', str(analysis_file), '--evidence', 'store', '--no-persist',
    ])

    assert result.exit_code == 0, result.output
    assert 'Passed all filters: 1' in result.output
    with AnalysisStore(tmp_path / "test.duckdb", read_only=True) as store:
        assert not store.table_exists("ranked_genes")
