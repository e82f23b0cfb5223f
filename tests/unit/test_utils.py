"""Unit tests for search paths, process running and output helpers."""

import io

import pytest

from nodepack.errors import CommandError
from nodepack.utils import SearchPath, child_env, remove_tree
from nodepack.utils import output
from nodepack.utils.process import capture, run_indented


class TestSearchPath:
    """Test the explicit executable search path."""

    def test_from_environ(self):
        path = SearchPath.from_environ({"PATH": "/a::/b"})
        assert path.entries == ("/a", "/b")

    def test_from_environ_without_path(self):
        assert SearchPath.from_environ({}).entries == ()

    def test_prepend_moves_existing_entry(self):
        path = SearchPath(("/a", "/b", "/c"))

        assert path.prepend("/c").entries == ("/c", "/a", "/b")
        assert path.prepend("/d").entries == ("/d", "/a", "/b", "/c")
        assert path.entries == ("/a", "/b", "/c")

    def test_as_env_value(self):
        assert SearchPath(("/a", "/b")).as_env_value() == "/a:/b"

    def test_child_env_path_wins(self):
        env = child_env(
            SearchPath(("/vendor/bin",)),
            base={"PATH": "/usr/bin", "HOME": "/app"},
            extra={"PATH": "/x", "FOO": "bar"},
        )

        assert env == {"PATH": "/vendor/bin", "HOME": "/app", "FOO": "bar"}

    def test_remove_tree(self, tmp_path):
        (tmp_path / "dir" / "sub").mkdir(parents=True)
        (tmp_path / "file").write_text("x")

        assert remove_tree(tmp_path / "dir") is True
        assert remove_tree(tmp_path / "file") is True
        assert remove_tree(tmp_path / "missing") is False
        assert list(tmp_path.iterdir()) == []


class TestProcess:
    """Test running commands resolved on a search path."""

    def test_run_indented_combines_output(self, base_search_path, capsys):
        env = child_env(base_search_path)

        run_indented(
            ["sh", "-c", "echo out; echo err >&2"], search_path=base_search_path, env=env
        )

        out = capsys.readouterr().out
        assert "       out" in out
        assert "       err" in out

    def test_run_indented_discard_stdout(self, base_search_path, capsys):
        env = child_env(base_search_path)

        run_indented(
            ["sh", "-c", "echo out; echo err >&2"],
            search_path=base_search_path,
            env=env,
            discard_stdout=True,
        )

        out = capsys.readouterr().out
        assert "out\n" not in out
        assert "       err" in out

    def test_run_indented_failure(self, base_search_path):
        env = child_env(base_search_path)

        with pytest.raises(CommandError) as exc_info:
            run_indented(["sh", "-c", "exit 4"], search_path=base_search_path, env=env)

        assert exc_info.value.returncode == 4
        assert exc_info.value.exit_code == 4

    def test_killed_by_signal(self, base_search_path):
        env = child_env(base_search_path)

        with pytest.raises(CommandError) as exc_info:
            run_indented(["sh", "-c", "kill -TERM $$"], search_path=base_search_path, env=env)

        assert exc_info.value.returncode == -15
        assert exc_info.value.exit_code == 143

    def test_command_not_on_search_path(self):
        with pytest.raises(CommandError) as exc_info:
            capture(["sh", "-c", "true"], search_path=SearchPath(()), env={})

        assert exc_info.value.returncode == 127
        assert "command not found" in str(exc_info.value)

    def test_capture(self, base_search_path):
        env = child_env(base_search_path, extra={"GREETING": "hello"})

        result = capture(
            ["sh", "-c", 'echo "$GREETING"'], search_path=base_search_path, env=env
        )

        assert result == "hello"


class TestOutput:
    """Test buildpack-style output formatting."""

    def test_status(self):
        stream = io.StringIO()
        output.status("Installing dependencies", stream)
        assert stream.getvalue() == "-----> Installing dependencies\n"

    def test_indent_lines(self):
        stream = io.StringIO()
        output.indent_lines(["a\n", "b\r\n"], stream)
        assert stream.getvalue() == "       a\n       b\n"

    def test_protip(self):
        stream = io.StringIO()
        output.protip("Pin your versions", stream)

        text = stream.getvalue()
        assert "       PRO TIP: Pin your versions" in text
        assert output.PROTIP_LINK in text

    def test_error(self):
        stream = io.StringIO()
        output.error("first\nsecond", stream)
        assert stream.getvalue() == " !     first\n !     second\n"
