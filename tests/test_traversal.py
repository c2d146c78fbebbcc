"""Tests for file system traversal functionality."""

import logging
from pathlib import Path

import pytest

from gclint.traversal import (
    DEFAULT_IGNORE_DIRS,
    find_cs_files,
    is_cs_file,
    is_generated_file,
    should_ignore_directory,
)


class TestFileTypeChecks:
    def test_is_cs_file_recognizes_cs_extension(self):
        assert is_cs_file(Path("Program.cs"))
        assert is_cs_file(Path("src/Utils.CS"))

    def test_is_cs_file_rejects_other_files(self):
        assert not is_cs_file(Path("App.csproj"))
        assert not is_cs_file(Path("App.sln"))
        assert not is_cs_file(Path("script.csx"))
        assert not is_cs_file(Path("README.md"))

    def test_is_generated_file(self):
        assert is_generated_file(Path("Form1.Designer.cs"))
        assert is_generated_file(Path("obj/App.g.cs"))
        assert not is_generated_file(Path("Program.cs"))


class TestDirectoryFiltering:
    def test_should_ignore_directory(self):
        assert should_ignore_directory(Path("bin"), DEFAULT_IGNORE_DIRS)
        assert should_ignore_directory(Path("obj"), DEFAULT_IGNORE_DIRS)
        assert not should_ignore_directory(Path("src"), DEFAULT_IGNORE_DIRS)

    def test_should_ignore_directory_case_sensitive(self):
        assert not should_ignore_directory(Path("Bin"), {"bin"})

    def test_default_ignore_dirs_includes_dotnet_output(self):
        for name in ("bin", "obj", ".vs", ".git", "packages", "TestResults"):
            assert name in DEFAULT_IGNORE_DIRS


class TestTraversal:
    @pytest.fixture
    def temp_solution(self, tmp_path):
        # tmp_path/
        #   App/Program.cs, App/Form1.Designer.cs
        #   App/bin/Debug/Copy.cs (ignored)
        #   App/obj/App.g.cs (ignored)
        #   App.Tests/ProgramTests.cs
        #   App.sln
        (tmp_path / "App" / "bin" / "Debug").mkdir(parents=True)
        (tmp_path / "App" / "obj").mkdir()
        (tmp_path / "App.Tests").mkdir()
        (tmp_path / "App" / "Program.cs").write_text("class Program { }")
        (tmp_path / "App" / "Form1.Designer.cs").write_text("partial class Form1 { }")
        (tmp_path / "App" / "bin" / "Debug" / "Copy.cs").write_text("class Copy { }")
        (tmp_path / "App" / "obj" / "App.g.cs").write_text("class Generated { }")
        (tmp_path / "App.Tests" / "ProgramTests.cs").write_text("class ProgramTests { }")
        (tmp_path / "App.sln").write_text("")
        return tmp_path

    def test_find_cs_files_skips_build_output_and_generated(self, temp_solution):
        names = [f.name for f in find_cs_files(temp_solution)]
        assert names == ["Program.cs", "ProgramTests.cs"]

    def test_include_generated(self, temp_solution):
        names = {f.name for f in find_cs_files(temp_solution, include_generated=True)}
        assert names == {"Program.cs", "Form1.Designer.cs", "ProgramTests.cs"}

    def test_custom_ignore_dirs(self, temp_solution):
        names = {f.name for f in find_cs_files(temp_solution, ignore_dirs={"obj"})}
        assert "Copy.cs" in names
        assert "App.g.cs" not in names

    def test_filter_function(self, temp_solution):
        files = find_cs_files(temp_solution, filter_fn=lambda p: "Tests" not in p.name)
        assert [f.name for f in files] == ["Program.cs"]

    def test_results_sorted(self, temp_solution):
        files = find_cs_files(temp_solution)
        assert files == sorted(files)

    def test_nonexistent_directory(self):
        with pytest.raises(FileNotFoundError):
            find_cs_files(Path("/nonexistent/solution"))

    def test_file_instead_of_directory(self, tmp_path):
        cs_file = tmp_path / "Program.cs"
        cs_file.write_text("class Program { }")
        with pytest.raises(NotADirectoryError):
            find_cs_files(cs_file)

    def test_logs_progress(self, temp_solution, caplog):
        with caplog.at_level(logging.INFO):
            find_cs_files(temp_solution)
        assert "Starting traversal" in caplog.text
        assert "Traversal complete" in caplog.text
