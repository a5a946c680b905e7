import io

import pytest

from elecsim.grid import Grid
from elecsim.prober import (
    Command,
    CommandType,
    ProbeError,
    command_string,
    main,
    parse_commands,
    parse_test_file,
    run_probe,
)
from elecsim.tiles import ButtonTile, Direction, WireTile


def _circuit():
    grid = Grid()
    grid.set_tile((0, 0), ButtonTile((0, 0), Direction.RIGHT), False)
    grid.set_tile((1, 0), WireTile((1, 0), Direction.RIGHT), False)
    grid.reset_simulation()
    grid.simulate()
    return grid


def _write_files(tmp_path, script):
    grid_path = tmp_path / "circuit.grid"
    _circuit().save(grid_path)
    probe_path = tmp_path / "circuit.probe"
    probe_path.write_text(script)
    return grid_path, probe_path


def test_parse_all_command_kinds():
    lines = ["# hello", "w 1 2 1 3", "i 0 0", "s", "r -1 -2 1", "", "   "]
    assert parse_commands(lines) == [
        Command(CommandType.COMMENT, comment=" hello"),
        Command(CommandType.WRITE, 1, 2, 1, Direction.LEFT),
        Command(CommandType.INTERACT, 0, 0),
        Command(CommandType.STEP),
        Command(CommandType.READ, -1, -2, 1),
    ]


def test_empty_comment_is_skipped():
    assert parse_commands(["#", "  s"]) == [Command(CommandType.STEP)]


def test_trailing_text_is_ignored():
    assert parse_commands(["r 3 4 0 extra\n"]) == [Command(CommandType.READ, 3, 4, 0)]


def test_unknown_command():
    with pytest.raises(ProbeError, match="Unknown command 'x' at line 2"):
        parse_commands(["s", "x 1 2"])


@pytest.mark.parametrize(
    "line, message",
    [
        ("w 1 2 1", "Malformed write command at line 1"),
        ("w 1 2 1 9", "Malformed write command at line 1"),
        ("i 1", "Malformed interact command at line 1"),
        ("r 1 - 1", "Malformed read command at line 1"),
        ("r 1 2 1.5x", None),
    ],
)
def test_malformed_commands(line, message):
    if message is None:
        assert parse_commands([line]) == [Command(CommandType.READ, 1, 2, 1)]
    else:
        with pytest.raises(ProbeError, match=message):
            parse_commands([line])


def test_command_string():
    assert command_string(Command(CommandType.READ, 1, 2, 1)) == "Read 1 2 1"


def test_parse_test_file(tmp_path):
    path = tmp_path / "t.probe"
    path.write_text("i 0 0\ns\n")
    assert parse_test_file(path) == [
        Command(CommandType.INTERACT, 0, 0),
        Command(CommandType.STEP),
    ]


def test_parse_missing_file(tmp_path):
    with pytest.raises(ProbeError, match="Could not open test file"):
        parse_test_file(tmp_path / "missing.probe")


def test_run_probe_success():
    out = io.StringIO()
    commands = parse_commands(["i 0 0", "s", "r 1 0 1"])
    assert run_probe(_circuit(), commands, False, out) is True
    text = out.getvalue()
    assert "  Actual: active\n" in text
    assert text.endswith("Test completed successfully.\n")


def test_run_probe_failure_stops():
    out = io.StringIO()
    commands = parse_commands(["r 1 0 1", "s"])
    assert run_probe(_circuit(), commands, False, out) is False
    text = out.getvalue()
    assert text.endswith(" (Test failed)")
    assert "Test completed successfully." not in text


def test_run_probe_missing_tile_reads_none():
    out = io.StringIO()
    assert run_probe(_circuit(), parse_commands(["r 7 7 1"]), False, out) is True
    assert "  Actual: None\n" in out.getvalue()


def test_run_probe_write_activates_tile():
    grid = _circuit()
    out = io.StringIO()
    commands = parse_commands(["w 1 0 1 3", "s", "r 1 0 1"])
    assert run_probe(grid, commands, False, out) is True
    assert grid.get((1, 0)).activated is True


def test_run_probe_comments_only_when_verbose():
    commands = parse_commands(["# note"])
    quiet, loud = io.StringIO(), io.StringIO()
    run_probe(_circuit(), commands, False, quiet)
    run_probe(_circuit(), commands, True, loud)
    assert " note" not in quiet.getvalue()
    assert " note\n" in loud.getvalue()


def test_main_success(tmp_path, capsys):
    grid_path, probe_path = _write_files(tmp_path, "# start\ni 0 0\ns\nr 1 0 1\n")
    assert main(["-f", str(grid_path), "-t", str(probe_path), "-v"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert " start" in lines
    assert lines[-1] == "Test completed successfully."


def test_main_failure(tmp_path, capsys):
    grid_path, probe_path = _write_files(tmp_path, "i 0 0\ns\nr 1 0 0\n")
    assert main(["-f", str(grid_path), "-t", str(probe_path)]) == 1
    assert "(Test failed)" in capsys.readouterr().out


def test_main_help(capsys):
    assert main(["-h"]) == 0
    assert "Prober is a tool for simulating elecSim circuits." in capsys.readouterr().out


def test_main_missing_arguments(capsys):
    assert main(["-v"]) == 1
    assert "-f" in capsys.readouterr().err


def test_main_bad_script(tmp_path, capsys):
    grid_path, probe_path = _write_files(tmp_path, "q\n")
    assert main(["-f", str(grid_path), "-t", str(probe_path)]) == 1
    assert "Unknown command 'q' at line 1" in capsys.readouterr().err