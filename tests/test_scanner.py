import pytest

from citc.scanner import EOF, Scanner


def drain(scanner):
    chars = []
    while (ch := scanner.scan()) != EOF:
        chars.append(ch)
    return "".join(chars)


def test_scan_returns_every_character_then_eof():
    scanner = Scanner("int a;\n")
    assert drain(scanner) == "int a;\n"
    assert scanner.finished
    assert scanner.scan() == EOF


def test_empty_input_is_eof():
    scanner = Scanner("")
    assert scanner.scan() == EOF
    assert scanner.finished


def test_column_counts_characters_on_a_line():
    scanner = Scanner("abc")
    scanner.scan()
    first = scanner.column
    scanner.scan()
    scanner.scan()
    assert scanner.column == first + 2
    assert scanner.line == 1


def test_newline_advances_line_on_next_read():
    scanner = Scanner("a\nb")
    scanner.scan()
    scanner.scan()
    assert scanner.line == 1
    scanner.scan()
    assert scanner.line == 2
    assert scanner.column == 1


def test_tab_counts_four_columns():
    scanner = Scanner("\tx")
    scanner.scan()
    assert scanner.column == 4
    scanner.scan()
    assert scanner.column == 5


def test_open_reads_file(tmp_path):
    path = tmp_path / "prog.c"
    path.write_text("int x;", encoding="utf-8")
    scanner = Scanner.open(path)
    assert scanner.filename == str(path)
    assert drain(scanner) == "int x;"


def test_open_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        Scanner.open(tmp_path / "missing.c")


def test_show_chars_prints_each_character(capsys):
    scanner = Scanner("a \n", show_chars=True)
    drain(scanner)
    lines = capsys.readouterr().out.splitlines()
    assert lines == ["a\t\t<97>", "<blank>\t\t<32>", "\\n\t\t<10>", "EOF\t\t<-1>"]