"""Tests for git utility functions."""

from logfocus.utils.git import find_git_root


class TestFindGitRoot:
    """Tests for find_git_root function."""

    def test_find_git_root_in_repo(self, tmp_path, monkeypatch):
        """Should find .git directory when in a git repo."""
        (tmp_path / ".git").mkdir()
        subdir = tmp_path / "src" / "deep"
        subdir.mkdir(parents=True)
        monkeypatch.chdir(subdir)
        monkeypatch.delenv("LOGFOCUS_GIT_ROOT", raising=False)

        assert find_git_root() == tmp_path

    def test_find_git_root_not_in_repo(self, tmp_path, monkeypatch):
        """Should return None when no ancestor holds a .git entry."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("LOGFOCUS_GIT_ROOT", raising=False)

        # tmp_path may itself live under a checkout; anything found must be a real root
        result = find_git_root()
        assert result is None or (result / ".git").exists()
        assert result != tmp_path

    def test_find_git_root_with_start_path(self, tmp_path, monkeypatch):
        """Should find git root from specified start path."""
        (tmp_path / ".git").mkdir()
        subdir = tmp_path / "project" / "src"
        subdir.mkdir(parents=True)
        monkeypatch.delenv("LOGFOCUS_GIT_ROOT", raising=False)

        assert find_git_root(subdir) == tmp_path

    def test_git_file_counts_as_root(self, tmp_path, monkeypatch):
        """A .git file (worktree or submodule) marks a root too."""
        (tmp_path / ".git").write_text("gitdir: ../elsewhere\n")
        monkeypatch.delenv("LOGFOCUS_GIT_ROOT", raising=False)

        assert find_git_root(tmp_path) == tmp_path

    def test_git_root_env_override(self, tmp_path, monkeypatch):
        """LOGFOCUS_GIT_ROOT should override detection."""
        override_path = tmp_path / "override"
        override_path.mkdir()
        monkeypatch.setenv("LOGFOCUS_GIT_ROOT", str(override_path))

        assert find_git_root() == override_path

    def test_git_root_env_override_takes_precedence(self, tmp_path, monkeypatch):
        """LOGFOCUS_GIT_ROOT should take precedence over an actual .git directory."""
        (tmp_path / ".git").mkdir()
        override_path = tmp_path / "elsewhere"
        monkeypatch.setenv("LOGFOCUS_GIT_ROOT", str(override_path))

        assert find_git_root(tmp_path) == override_path
