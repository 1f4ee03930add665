import io
from pathlib import Path

import pytest

from mecca import (
    Interpreter,
    InterpreterSettings,
    MemoryLoader,
    TemplateAccessError,
    TemplateNotFoundError,
    TerminalCapabilities,
)
from mecca.resources import FileLoader


def write_templates(root: Path, files: dict) -> Path:
    for name, content in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


def make_interpreter(root: Path, color_system=None, **settings) -> Interpreter:
    settings.setdefault("pause_seconds", 0)
    return Interpreter(
        settings=InterpreterSettings(**settings),
        template_root=str(root),
        terminal=TerminalCapabilities(color_system=color_system, height=24),
        writer=io.StringIO(),
    )


def test_include_renders_file_inline(tmp_path: Path) -> None:
    write_templates(tmp_path, {"inc.mec": "Inner"})

    assert make_interpreter(tmp_path).interpret("A[include inc.mec]B") == "AInnerB"


def test_include_from_subdirectory(tmp_path: Path) -> None:
    write_templates(tmp_path, {"parts/head.mec": "Head"})

    assert make_interpreter(tmp_path).interpret("[include parts/head.mec]") == "Head"


def test_included_file_sees_variables(tmp_path: Path) -> None:
    write_templates(tmp_path, {"inc.mec": "Hi [name]"})

    assert make_interpreter(tmp_path).interpret("[include inc.mec]", {"name": "Ann"}) == "Hi Ann"


def test_self_include_is_reported(tmp_path: Path) -> None:
    write_templates(tmp_path, {"self.mec": "X[include self.mec]Y"})

    output = make_interpreter(tmp_path).exec_template("self.mec")

    assert output == "X[ERROR: self.mec included recursively]Y"


def test_indirect_recursion_is_reported(tmp_path: Path) -> None:
    write_templates(tmp_path, {"a.mec": "a[include b.mec]", "b.mec": "b[include a.mec]"})

    output = make_interpreter(tmp_path).exec_template("a.mec")

    assert output == "ab[ERROR: a.mec included recursively]"


def test_same_file_may_be_included_twice_in_sequence(tmp_path: Path) -> None:
    write_templates(tmp_path, {"dot.mec": "."})

    assert make_interpreter(tmp_path).interpret("[include dot.mec][include dot.mec]") == ".."


def test_missing_include_is_inline_error(tmp_path: Path) -> None:
    output = make_interpreter(tmp_path).interpret("A[include missing.mec]B")

    assert output == "A[ERROR: missing.mec not found]B"


def test_include_outside_root_is_refused(tmp_path: Path) -> None:
    root = tmp_path / "root"
    root.mkdir()
    (tmp_path / "secret.txt").write_text("nope", encoding="utf-8")

    output = make_interpreter(root).interpret("[include ../secret.txt]")

    assert output == "[ERROR: ../secret.txt is outside the template root]"


def test_exec_template_missing_file_raises(tmp_path: Path) -> None:
    interpreter = make_interpreter(tmp_path)

    with pytest.raises(TemplateNotFoundError):
        interpreter.exec_template("missing.mec")
    with pytest.raises(FileNotFoundError):
        interpreter.exec_template("missing.mec")


def test_render_template_streams_file(tmp_path: Path) -> None:
    write_templates(tmp_path, {"hello.mec": "Hello [who]"})
    writer = io.StringIO()
    interpreter = Interpreter(
        template_root=str(tmp_path),
        terminal=TerminalCapabilities(color_system=None),
        writer=writer,
    )

    interpreter.render_template("hello.mec", {"who": "you"})

    assert writer.getvalue() == "Hello you"


def test_display_replaces_rest_of_file(tmp_path: Path) -> None:
    write_templates(tmp_path, {"d.mec": "D"})

    assert make_interpreter(tmp_path).interpret("A[display d.mec]B") == "AD"


def test_link_returns_to_caller(tmp_path: Path) -> None:
    write_templates(tmp_path, {"l.mec": "L"})

    assert make_interpreter(tmp_path).interpret("A[link l.mec]B") == "ALB"


def test_link_restores_caller_style(tmp_path: Path) -> None:
    write_templates(tmp_path, {"l.mec": "[blue]L"})

    output = make_interpreter(tmp_path, color_system="truecolor").interpret("[red][link l.mec]X")

    assert output == "\x1b[34mL\x1b[0m\x1b[31mX\x1b[0m"


def test_quit_in_linked_file_returns_to_caller(tmp_path: Path) -> None:
    write_templates(tmp_path, {"l.mec": "L[quit]M"})

    assert make_interpreter(tmp_path).interpret("A[link l.mec]B") == "ALB"


def test_exit_in_linked_file_stops_everything(tmp_path: Path) -> None:
    write_templates(tmp_path, {"l.mec": "L[exit]M"})

    assert make_interpreter(tmp_path).interpret("A[link l.mec]B") == "AL"


def test_link_depth_is_bounded(tmp_path: Path) -> None:
    write_templates(tmp_path, {f"l{i}.mec": f"{i}[link l{i + 1}.mec]" for i in range(1, 10)})

    output = make_interpreter(tmp_path).interpret("[link l1.mec]")

    assert output == "12345678[ERROR: link nesting too deep (max 8 levels)]"


def test_link_depth_follows_settings(tmp_path: Path) -> None:
    write_templates(tmp_path, {f"l{i}.mec": f"{i}[link l{i + 1}.mec]" for i in range(1, 5)})

    output = make_interpreter(tmp_path, max_link_depth=2).interpret("[link l1.mec]")

    assert output == "12[ERROR: link nesting too deep (max 2 levels)]"


@pytest.mark.parametrize("token", ["onexit bye.mec", "on exit bye.mec"])
def test_on_exit_file_runs_after_quit(tmp_path: Path, token: str) -> None:
    write_templates(tmp_path, {"bye.mec": "Bye"})

    output = make_interpreter(tmp_path).interpret(f"[{token}]A[quit]B")

    assert output == "ABye"


def test_on_exit_file_runs_after_exit(tmp_path: Path) -> None:
    write_templates(tmp_path, {"bye.mec": "Bye"})

    assert make_interpreter(tmp_path).interpret("[onexit bye.mec]A[exit]B") == "ABye"


def test_on_exit_file_runs_at_end_of_template(tmp_path: Path) -> None:
    write_templates(tmp_path, {"bye.mec": "Bye"})

    assert make_interpreter(tmp_path).interpret("[onexit bye.mec]A") == "ABye"


def test_ansi_copies_file_without_styling(tmp_path: Path) -> None:
    write_templates(tmp_path, {"art.ans": b"\x1b[31mART[red]"})

    output = make_interpreter(tmp_path, color_system="truecolor").interpret("[red][ansi art.ans]")

    assert output == "\x1b[31mART[red]"


def test_copy_is_an_alias_for_ansi(tmp_path: Path) -> None:
    write_templates(tmp_path, {"note.txt": "plain"})

    assert make_interpreter(tmp_path).interpret("[copy note.txt]") == "plain"


def test_ansiconvert_decodes_cp437(tmp_path: Path) -> None:
    write_templates(tmp_path, {"art.ans": b"\xdb\xb0"})

    assert make_interpreter(tmp_path).interpret("[ansiconvert art.ans cp437]") == "█░"


def test_ansiconvert_rejects_unknown_charset(tmp_path: Path) -> None:
    write_templates(tmp_path, {"art.ans": b"x"})

    output = make_interpreter(tmp_path).interpret("[ansiconvert art.ans latin9]")

    assert output == "[ERROR: unsupported charset latin9]"


def test_include_inside_hidden_block_renders_nothing(tmp_path: Path) -> None:
    write_templates(tmp_path, {"inc.mec": "Inner"})

    output = make_interpreter(tmp_path, color_system="truecolor").interpret(
        "[nocolor][include inc.mec][endcolor]Shown"
    )

    assert output == "Shown"


def test_memory_loader_serves_templates() -> None:
    interpreter = Interpreter(
        loader=MemoryLoader({"menu.mec": "Menu", "art.ans": b"\xb0"}),
        terminal=TerminalCapabilities(color_system=None),
        writer=io.StringIO(),
    )

    assert interpreter.interpret("[include menu.mec][ansiconvert art.ans IBM437]") == "Menu░"


def test_file_loader_refuses_absolute_paths(tmp_path: Path) -> None:
    loader = FileLoader(tmp_path)

    with pytest.raises(TemplateAccessError):
        loader.read(str(tmp_path / "x.mec"))


def test_file_loader_reports_directories(tmp_path: Path) -> None:
    (tmp_path / "sub").mkdir()

    with pytest.raises(TemplateAccessError, match="directory"):
        FileLoader(tmp_path).read("sub")


@pytest.mark.parametrize(("color_system", "expected"), [(None, "PLAIN"), ("truecolor", "FANCY")])
def test_display_picks_file_by_color_block(tmp_path: Path, color_system, expected: str) -> None:
    write_templates(tmp_path, {"fancy.mec": "FANCY", "plain.mec": "PLAIN"})
    template = "[color][display fancy.mec][endcolor][nocolor][display plain.mec][endcolor]after"

    assert make_interpreter(tmp_path, color_system=color_system).interpret(template) == expected


def test_link_and_on_exit_inside_hidden_block_are_ignored(tmp_path: Path) -> None:
    write_templates(tmp_path, {"l.mec": "L", "bye.mec": "Bye"})

    output = make_interpreter(tmp_path).interpret("[color][link l.mec][on exit bye.mec][onexit bye.mec][endcolor]A")

    assert output == "A"


def test_ansi_replaces_bytes_that_are_not_utf8(tmp_path: Path) -> None:
    write_templates(tmp_path, {"art.ans": b"\xdbA"})

    interpreter = make_interpreter(tmp_path)

    assert interpreter.interpret("[ansi art.ans]") == "\ufffdA"
    assert interpreter.interpret("[ansiconvert art.ans cp437]") == "█A"
