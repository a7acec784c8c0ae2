import logging

import pytest

from arcwalk.cli import build_parser, main


class TestParser:
    """Argument parsing"""

    def test_path_defaults(self):
        args = build_parser().parse_args(["path"])
        assert (args.n, args.p, args.s0, args.seed, args.plot) == (100, 0.5, 0, None, None)

    def test_mc_defaults(self):
        args = build_parser().parse_args(["mc"])
        assert (args.m, args.n, args.backend, args.workers) == (10_000, 222, "sequential", None)

    def test_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_rejects_unknown_backend(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["mc", "--backend", "gpu"])


class TestMain:
    """End-to-end command runs"""

    def test_path(self, capsys):
        assert main(["path", "--n", "12", "--seed", "1"]) == 0
        out = capsys.readouterr().out
        assert "n=12" in out
        assert "tau=" in out and "gamma=" in out

    def test_path_reproducible(self, capsys):
        main(["path", "--n", "20", "--seed", "4"])
        first = capsys.readouterr().out
        main(["path", "--n", "20", "--seed", "4"])
        assert capsys.readouterr().out == first

    def test_mc(self, capsys):
        assert main(["--log-level", "WARNING", "mc", "--m", "200", "--n", "20", "--seed", "2"]) == 0
        out = capsys.readouterr().out
        assert "Trials: 200" in out
        assert "KS vs arcsine" in out

    @pytest.mark.parametrize(
        "argv",
        [
            ["path", "--p", "1.0"],
            ["path", "--n", "0"],
            ["mc", "--m", "0"],
            ["mc", "--p", "0"],
            ["mc", "--workers", "0"],
        ],
    )
    def test_invalid_parameters_exit_2(self, argv, capsys):
        assert main(argv) == 2
        assert "arcwalk: error:" in capsys.readouterr().err

    def test_plots(self, tmp_path):
        walk_png = tmp_path / "walk.png"
        hist_png = tmp_path / "hist.png"
        assert main(["path", "--n", "30", "--seed", "1", "--plot", str(walk_png)]) == 0
        assert main(["mc", "--m", "100", "--n", "20", "--seed", "1", "--bins", "10", "--plot", str(hist_png)]) == 0
        assert walk_png.exists() and hist_png.exists()

    def test_bad_bins_exit_2(self, tmp_path, capsys):
        argv = ["mc", "--m", "50", "--n", "10", "--seed", "1", "--bins", "0", "--plot", str(tmp_path / "h.png")]
        assert main(argv) == 2
        assert "bins must be positive" in capsys.readouterr().err
        assert not (tmp_path / "h.png").exists()


class TestLogging:
    """--log-level reaches every arcwalk module"""

    def test_simulation_messages_have_a_handler(self, caplog):
        pkg = logging.getLogger("arcwalk")
        try:
            with caplog.at_level(logging.INFO, logger="arcwalk"):
                assert main(["--log-level", "INFO", "mc", "--m", "20", "--n", "5", "--seed", "1"]) == 0
            assert pkg.handlers
            assert logging.getLogger("arcwalk.simulation").getEffectiveLevel() == logging.INFO
            assert "Computing 20 trials sequentially" in caplog.text
        finally:
            pkg.setLevel(logging.INFO)

    def test_log_level_applies_to_package(self):
        pkg = logging.getLogger("arcwalk")
        try:
            main(["--log-level", "ERROR", "path", "--n", "5", "--seed", "1"])
            assert logging.getLogger("arcwalk.simulation").getEffectiveLevel() == logging.ERROR
            assert logging.getLogger("arcwalk.core").getEffectiveLevel() == logging.ERROR
        finally:
            pkg.setLevel(logging.INFO)
