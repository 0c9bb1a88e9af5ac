"""Tests for persistence layer (DuckDB store and provenance tracking)."""

import json

import duckdb
import polars as pl
import pytest

from variant_ranking.config.loader import load_config
from variant_ranking.filters import FilterReport, StageCount
from variant_ranking.persistence import AnalysisStore, ProvenanceTracker


@pytest.fixture
def test_config(tmp_path):
    """Create a minimal test config."""
    config_path = tmp_path / "test_config.yaml"
    config_path.write_text("""
data_dir: {data_dir}
duckdb_path: {duckdb_path}
scoring:
  mode_of_inheritance: autosomal_recessive
""".format(
        data_dir=str(tmp_path / "data"),
        duckdb_path=str(tmp_path / "test.duckdb"),
    ))
    return load_config(config_path)


@pytest.fixture
def store(tmp_path):
    with AnalysisStore(tmp_path / "test.duckdb") as store:
        yield store


# ============================================================================
# DuckDB Store Tests
# ============================================================================

def test_store_creates_database(tmp_path):
    db_path = tmp_path / "nested" / "test.duckdb"
    assert not db_path.exists()

    AnalysisStore(db_path).close()

    assert db_path.exists()


def test_write_and_read_table(store):
    df = pl.DataFrame({
        "gene": ["FGFR2", "USH2A", "MYO7A"],
        "score": [0.95, 0.88, 0.92],
    })

    assert store.write_table(df, "genes", "test genes") == 3

    loaded = store.read_table("genes")
    assert loaded.columns == df.columns
    assert loaded["gene"].to_list() == df["gene"].to_list()


def test_write_rejects_non_polars(store):
    with pytest.raises(TypeError, match="polars DataFrame"):
        store.write_table({"gene": ["A"]}, "genes")


def test_write_rejects_bad_table_name(store):
    with pytest.raises(ValueError, match="Invalid table name"):
        store.write_table(pl.DataFrame({"a": [1]}), "genes; DROP TABLE x")


def test_append_creates_then_extends(store):
    assert store.write_table(pl.DataFrame({"val": [1, 2]}), "vals", append=True) == 2
    assert store.write_table(pl.DataFrame({"val": [3]}), "vals", append=True) == 3

    assert store.read_table("vals")["val"].to_list() == [1, 2, 3]
    assert store.registry()["row_count"].to_list() == [3]


def test_registry(store):
    assert not store.has_table("table_0")
    for i in range(3):
        store.write_table(pl.DataFrame({"val": list(range(i + 1))}), f"table_{i}", f"description {i}")

    registry = store.registry()

    assert store.has_table("table_0")
    assert registry["table_name"].to_list() == ["table_0", "table_1", "table_2"]
    assert registry["row_count"].to_list() == [1, 2, 3]
    assert registry["description"][0] == "description 0"


def test_unregistered_table_exists_but_not_registered(store):
    store.conn.execute("CREATE TABLE raw_import (x INTEGER)")

    assert store.table_exists("raw_import")
    assert not store.has_table("raw_import")


def test_read_missing_table_returns_none(store):
    assert store.read_table("nonexistent_table") is None


def test_reopen_read_only(tmp_path):
    db_path = tmp_path / "test.duckdb"
    df = pl.DataFrame({"col": [1, 2, 3]})

    with AnalysisStore(db_path) as store:
        store.write_table(df, "test_table", "test")

    with AnalysisStore(db_path, read_only=True) as store:
        assert store.has_table("test_table")
        assert store.read_table("test_table").shape == df.shape
        with pytest.raises(duckdb.Error):
            store.write_table(df, "other_table")


def test_close_is_idempotent(tmp_path):
    store = AnalysisStore(tmp_path / "test.duckdb")
    store.close()
    store.close()

    assert store.conn is None


def test_from_config(test_config):
    store = AnalysisStore.from_config(test_config)

    assert store.db_path == test_config.duckdb_path

    store.close()


# ============================================================================
# Provenance Tests
# ============================================================================

def test_provenance_metadata_structure(test_config):
    tracker = ProvenanceTracker("0.1.0", test_config)

    metadata = tracker.to_dict()

    assert metadata["version"] == "0.1.0"
    assert metadata["config_hash"] == test_config.config_hash()
    assert metadata["settings"]["scoring"]["mode_of_inheritance"] == "autosomal_recessive"
    assert metadata["processing_steps"] == []
    assert metadata["filter_report"] is None


def test_provenance_records_steps(test_config):
    tracker = ProvenanceTracker("0.1.0", test_config)

    tracker.record_step("filter_variants")
    tracker.record_step("score_genes", {"gene_count": 12})

    steps = tracker.steps
    assert [s["step_name"] for s in steps] == ["filter_variants", "score_genes"]
    assert steps[1]["details"]["gene_count"] == 12
    assert "details" not in steps[0]
    assert "timestamp" in steps[0]


def test_provenance_sidecar_roundtrip(test_config, tmp_path):
    tracker = ProvenanceTracker("0.1.0", test_config)
    tracker.record_step("test_step", {"key": "value"})
    tracker.record_filter_report(FilterReport(
        total=3, passed_all=1, errored=0,
        stages=[StageCount("quality", passed=1, failed=2)],
    ))

    sidecar_path = tracker.save_sidecar(tmp_path / "ranked_genes.tsv")

    assert sidecar_path == tmp_path / "ranked_genes.provenance.json"
    loaded = ProvenanceTracker.load_sidecar(sidecar_path)
    assert loaded["config_hash"] == test_config.config_hash()
    assert loaded["processing_steps"][0]["step_name"] == "test_step"
    assert loaded["filter_report"]["stages"][0] == {
        "filter_type": "quality", "passed": 1, "failed": 2, "not_run": 0,
    }


def test_provenance_save_to_store(test_config, store):
    tracker = ProvenanceTracker("0.1.0", test_config)
    tracker.record_step("test_step")

    tracker.save_to_store(store)
    tracker.save_to_store(store)

    rows = store.conn.execute("SELECT * FROM _provenance").fetchall()
    assert len(rows) == 2
    assert rows[0][0] == "0.1.0"
    assert rows[0][1] == test_config.config_hash()
    assert json.loads(rows[0][3])[0]["step_name"] == "test_step"


def test_provenance_from_config_uses_package_version(test_config):
    from variant_ranking import __version__

    assert ProvenanceTracker.from_config(test_config).version == __version__
