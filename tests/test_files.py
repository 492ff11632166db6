import os

import pytest

from htmlmark.files import (
    InputFile,
    OutputType,
    calculate_output_paths,
    determine_output_type,
    ensure_output_directories,
    file_name_without_extension,
    has_folder_suffix,
    hash_filepath,
    list_input_files,
    read_input,
    write_file,
)
from htmlmark.printing import CLIError


def _write(path, content):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(content)


def _read(path):
    with open(path, encoding="utf-8") as handle:
        return handle.read()


@pytest.fixture
def sample_dir(tmp_path):
    _write(str(tmp_path / "input" / "random.txt"), "other random file")
    _write(str(tmp_path / "input" / "website_a.html"), "<strong>file content A</strong>")
    _write(str(tmp_path / "input" / "website_b.html"), "<strong>file content B</strong>")
    _write(str(tmp_path / "input" / "nested" / "website_c.html"), "<i>file content C</i>")
    os.makedirs(tmp_path / "output")
    return tmp_path


def test_file_name_without_extension():
    assert file_name_without_extension("website.html") == "website"
    assert file_name_without_extension("website") == "website"
    assert file_name_without_extension("archive.tar.gz") == "archive.tar"


def test_has_folder_suffix():
    assert has_folder_suffix("dist/")
    assert has_folder_suffix("dist" + os.sep)
    assert not has_folder_suffix("dist")


def test_write_file_override_false(tmp_path):
    path = str(tmp_path / "test.txt")
    write_file(path, b"A", False)
    assert _read(path) == "A"
    with pytest.raises(FileExistsError):
        write_file(path, b"B", False)
    assert _read(path) == "A"


def test_write_file_override_true(tmp_path):
    path = str(tmp_path / "test.txt")
    write_file(path, b"A", True)
    assert _read(path) == "A"
    write_file(path, b"B", True)
    assert _read(path) == "B"


def test_list_input_files_direct_pattern(sample_dir):
    files = list_input_files(os.path.join(str(sample_dir), "input", "website*.html"))
    names = [os.path.basename(f.input_full_filepath) for f in files]
    assert names == ["website_a.html", "website_b.html"]


def test_list_input_files_match_everything(sample_dir):
    files = list_input_files(os.path.join(str(sample_dir), "**", "*"))
    names = sorted(os.path.basename(f.input_full_filepath) for f in files)
    assert names == ["random.txt", "website_a.html", "website_b.html", "website_c.html"]


def test_list_input_files_nested_pattern(sample_dir):
    files = list_input_files(os.path.join(str(sample_dir), "**", "website*.html"))
    names = sorted(os.path.basename(f.input_full_filepath) for f in files)
    assert names == ["website_a.html", "website_b.html", "website_c.html"]


def test_list_input_files_not_found(sample_dir, monkeypatch):
    monkeypatch.chdir(sample_dir)
    with pytest.raises(CLIError, match='no files found matching pattern "not_found.html"'):
        list_input_files("not_found.html")


def test_list_input_files_directory(sample_dir, monkeypatch):
    monkeypatch.chdir(sample_dir)
    with pytest.raises(CLIError, match='input path "input" is a directory, not a file'):
        list_input_files("input")


def test_read_input_prefers_held_data(sample_dir):
    held = InputFile("output", data=b"<b>x</b>")
    assert read_input(held) == b"<b>x</b>"
    on_disk = InputFile(os.path.join(str(sample_dir), "input", "website_a.html"))
    assert read_input(on_disk) == b"<strong>file content A</strong>"


def test_determine_output_type_stdout():
    assert determine_output_type("", 1, "") is OutputType.STDOUT


def test_determine_output_type_multiple_without_output():
    with pytest.raises(CLIError, match="--output needs to be a directory"):
        determine_output_type("*", 3, "")


def test_determine_output_type_directory():
    assert determine_output_type("*", 3, "dist/") is OutputType.DIRECTORY


def test_determine_output_type_multiple_without_suffix(tmp_path):
    with pytest.raises(CLIError, match='--output "folder" must end with "folder/"'):
        determine_output_type("*", 3, str(tmp_path / "random" / "folder"))


def test_determine_output_type_existing_dir_without_suffix(sample_dir):
    with pytest.raises(CLIError, match='path "output" exists and is a directory'):
        determine_output_type("", 1, str(sample_dir / "output"))


def test_determine_output_type_file(sample_dir):
    assert determine_output_type("", 1, str(sample_dir / "out" / "the_cool_website.md")) is OutputType.FILE
    assert determine_output_type("", 1, str(sample_dir / "out" / "noext")) is OutputType.FILE


def test_calculate_output_paths_unique(sample_dir):
    pattern = os.path.join(str(sample_dir), "**", "website*.html")
    result = calculate_output_paths(pattern, list_input_files(pattern))
    assert sorted(f.output_full_filepath for f in result) == [
        "website_a.md",
        "website_b.md",
        "website_c.md",
    ]


def test_calculate_output_paths_duplicates(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write(str(tmp_path / "input" / "a" / "random.html"), "file a")
    _write(str(tmp_path / "input" / "b" / "random.html"), "file b")
    _write(str(tmp_path / "input" / "nested" / "c" / "random.html"), "file c")

    pattern = os.path.join(".", "input", "**", "*")
    result = calculate_output_paths(pattern, list_input_files(pattern))
    mapping = {f.output_full_filepath: _read(f.input_full_filepath) for f in result}
    assert mapping == {
        "random.md": "file a",
        "random.689330a60f.md": "file b",
        "random.f679b6e0c2.md": "file c",
    }


def test_hash_filepath_uses_forward_slashes():
    assert hash_filepath(os.path.join("b", "random.html")).startswith("689330a60f")
    assert len(hash_filepath("x")) == 64


def test_ensure_output_directories(tmp_path):
    directory = tmp_path / "output" / "in" / "nested" / "folder"
    ensure_output_directories(OutputType.DIRECTORY, str(directory) + os.sep)
    assert directory.is_dir()

    target = tmp_path / "output" / "websites" / "the_cool_website.md"
    ensure_output_directories(OutputType.FILE, str(target))
    assert target.parent.is_dir()
    assert not target.exists()