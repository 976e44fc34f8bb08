import io

import pytest

from polytile import main
from polytile.solver import solver


def test_run_writes_log_and_prints_solution(small_config, log_dir, capsys):
    result = solver.run(small_config)

    assert result.status == "success"
    logfile = log_dir / "puzzle" / "3x2.log"
    assert logfile.is_file()
    log = logfile.read_text(encoding="utf-8")
    assert "Dimensions: 3x2" in log
    assert "Solution found!" in log
    assert "States expanded:" in log
    out = capsys.readouterr().out
    assert f"Log file: {logfile}" in out
    assert "┌" in out


def test_run_reports_no_solution(two_t_config, log_dir, capsys):
    result = solver.run(two_t_config)

    assert result.status == "no_solution"
    log = (log_dir / "two-t" / "4x2.log").read_text(encoding="utf-8")
    assert "No solution found." in log
    assert "No solution found." in capsys.readouterr().out


def test_solve_one_logs_pieces(small_config):
    logf = io.StringIO()
    result = solver.solve_one(small_config, logf=logf)
    assert result.status == "success"
    log = logf.getvalue()
    assert "  B: 3 cells, 4 orientation(s)" in log
    assert "Start time:" in log


def test_main_with_puzzle_file(tmp_path, log_dir, capsys):
    path = tmp_path / "simple.txt"
    path.write_text("3 2\n\n**\n\n*\n\n**\n*\n", encoding="utf-8")
    main([str(path)])
    assert "┌" in capsys.readouterr().out
    assert (log_dir / "simple" / "3x2.log").is_file()


def test_main_with_example(log_dir, capsys):
    main(["--example", "simple"])
    assert "┘" in capsys.readouterr().out


def test_main_unsolvable_exits_with_error(tmp_path, log_dir):
    path = tmp_path / "two-t.txt"
    path.write_text("4 2\n\n***\n *\n\n***\n *\n", encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        main([str(path)])
    assert exc.value.code == 1


def test_main_bad_config_exits_with_error(tmp_path, log_dir, capsys):
    path = tmp_path / "bad.txt"
    path.write_text("2 2\n\n*\n\n*\n", encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        main([str(path)])
    assert exc.value.code == 1
    assert "Cannot initialize puzzle" in capsys.readouterr().err
    assert not log_dir.exists()


def test_main_missing_file_exits_with_error(tmp_path, log_dir, capsys):
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path / "missing.txt")])
    assert exc.value.code == 1
    assert "Cannot read puzzle file" in capsys.readouterr().err


def test_main_requires_a_puzzle():
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 2
