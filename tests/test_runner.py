import numpy as np
import pytest

from stochsim import (
    NumericAnomalyError,
    PathSimulator,
    PiEstimator,
    RandomSampler,
    RunConfig,
    SimulationParameters,
    read_paths,
)
from stochsim.runner import main, run_gbm_pipeline, run_pi_pipeline


class TestPiPipeline:
    """Test the pi pipeline driver"""

    def test_prints_one_line_per_size(self, capsys):
        """Test every size is reported in order"""
        res = run_pi_pipeline([10, 100, 1000], PiEstimator(RandomSampler(1)))
        out = capsys.readouterr().out
        assert [r.n_points for r in res] == [10, 100, 1000]
        sample_lines = [l for l in out.splitlines() if l.startswith("Samples:")]
        assert len(sample_lines) == 3
        assert "1000 |" in sample_lines[-1]

    def test_invalid_size_aborts_pipeline(self, capsys, caplog):
        """Test an invalid size stops the pipeline with a diagnostic"""
        with caplog.at_level("ERROR", logger="stochsim"):
            res = run_pi_pipeline([10, 0, 100], PiEstimator(RandomSampler(1)))
        assert res is None
        assert "Pi estimation aborted" in caplog.text
        out = capsys.readouterr().out
        assert len([l for l in out.splitlines() if l.startswith("Samples:")]) == 1


class TestGbmPipeline:
    """Test the GBM pipeline driver"""

    def test_full_run_writes_file(self, tmp_path, capsys, small_params):
        """Test statistics are printed and paths persisted"""
        out_file = tmp_path / "stockPrices.csv"
        stats = run_gbm_pipeline(small_params, str(out_file), PathSimulator(RandomSampler(2)))
        assert stats is not None
        assert stats.n_paths == small_params.path_count
        out = capsys.readouterr().out
        assert "Mean final price: $" in out
        assert f"Simulation results saved to {out_file}" in out
        assert read_paths(out_file).shape == (50, 21)

    def test_write_failure_is_not_fatal(self, tmp_path, capsys, caplog, small_params):
        """Test statistics survive an unwritable destination"""
        bad = tmp_path / "no" / "such" / "dir.csv"
        with caplog.at_level("ERROR", logger="stochsim"):
            stats = run_gbm_pipeline(small_params, str(bad), PathSimulator(RandomSampler(2)))
        assert stats is not None
        assert "Could not write paths" in caplog.text
        assert "saved to" not in capsys.readouterr().out

    def test_skip_persistence(self, capsys, flat_params):
        """Test output_path=None only reports"""
        stats = run_gbm_pipeline(flat_params, None, PathSimulator(RandomSampler(2)))
        assert stats.mean == 100.0
        assert stats.stddev == 0.0
        assert "saved to" not in capsys.readouterr().out

    def test_numeric_anomaly_withholds_statistics(self, capsys, caplog, small_params):
        """Test corrupted prices abort the pipeline with a diagnostic"""

        class BrokenSimulator(PathSimulator):
            def simulate(self, params, progress_callback=None):
                raise NumericAnomalyError("3 of 50 paths contain NaN or infinite prices")

        with caplog.at_level("ERROR", logger="stochsim"):
            stats = run_gbm_pipeline(small_params, None, BrokenSimulator(RandomSampler(0)))
        assert stats is None
        assert "statistics withheld" in caplog.text
        assert "Mean final price" not in capsys.readouterr().out


class TestMain:
    """Test the top-level driver"""

    def test_main_runs_both_pipelines(self, tmp_path, capsys):
        """Test a small configuration end to end"""
        out_file = tmp_path / "stockPrices.csv"
        cfg = RunConfig(
            parameters=SimulationParameters(step_count=5, path_count=4),
            sample_sizes=(100, 10),
            output_path=str(out_file),
            seed=123,
        )
        assert main(cfg) == 0
        out = capsys.readouterr().out
        assert out.index("Monte Carlo Pi Estimation") < out.index("Stock price simulation")
        assert out.index("Samples: " + "10".rjust(10)) < out.index("Samples: " + "100".rjust(10))
        m = read_paths(out_file)
        assert m.shape == (4, 6)
        assert np.all(m.column(0) == 100.0)

    def test_main_reproducible_with_seed(self, tmp_path):
        """Test a fixed seed reproduces the persisted paths"""
        def run(name):
            out_file = tmp_path / name
            cfg = RunConfig(
                parameters=SimulationParameters(step_count=3, path_count=3),
                sample_sizes=(10,),
                output_path=str(out_file),
                seed=5,
            )
            main(cfg)
            return read_paths(out_file)

        assert run("a.csv") == run("b.csv")

    def test_main_reports_aborted_pipeline(self, tmp_path):
        """Test a failing pipeline gives a non-zero status but the other still runs"""
        out_file = tmp_path / "p.csv"
        cfg = RunConfig(
            parameters=SimulationParameters(step_count=2, path_count=2),
            sample_sizes=(0, 10),
            output_path=str(out_file),
        )
        assert main(cfg) == 1
        assert out_file.exists()

    def test_main_with_thread_backend(self, tmp_path):
        """Test the parallel backend is wired through"""
        cfg = RunConfig(
            parameters=SimulationParameters(step_count=3, path_count=40),
            sample_sizes=(1000,),
            output_path=str(tmp_path / "t.csv"),
            backend="thread",
            n_workers=2,
        )
        assert main(cfg) == 0
