"""Tests for the gitlogue-dump command."""

import json

import pytest

from gitlogue import config as config_module
from gitlogue.main import main


@pytest.fixture(autouse=True)
def no_user_config(monkeypatch, tmp_path):
  monkeypatch.setattr(
    config_module, "default_config_path", lambda: tmp_path / "no-such-config.yaml"
  )


def run(capsys, *argv):
  code = main(list(argv))
  captured = capsys.readouterr()
  return code, captured.out, captured.err


class TestDump:
  def test_specific_commit(self, capsys, linear_repo):
    builder, commits = linear_repo
    code, out, _ = run(capsys, "-p", str(builder.path), "-c", commits[1].hexsha)

    assert code == 0
    data = json.loads(out)
    assert data["hash"] == commits[1].hexsha
    assert data["message"] == "Add main"
    assert data["changes"][0]["path"] == "src/main.py"
    assert data["changes"][0]["status"] == "A"

  def test_range_in_ascending_order(self, capsys, linear_repo):
    builder, commits = linear_repo
    code, out, _ = run(capsys, "-p", str(builder.path), "-r", "HEAD~2..HEAD", "--order", "asc")

    assert code == 0
    assert json.loads(out)["hash"] == commits[3].hexsha

  def test_descending_whole_history(self, capsys, linear_repo):
    builder, commits = linear_repo
    code, out, _ = run(capsys, "-p", str(builder.path), "--order", "desc")

    assert code == 0
    assert json.loads(out)["hash"] == commits[-1].hexsha

  def test_ignore_option(self, capsys, builder):
    commit = builder.commit("Assets", {"logo.svg": "<svg/>\n", "app.py": "x = 1\n"})
    code, out, _ = run(
      capsys, "-p", str(builder.path), "-c", commit.hexsha, "--ignore", "*.svg"
    )

    assert code == 0
    changes = {change["path"]: change for change in json.loads(out)["changes"]}
    assert changes["logo.svg"]["is_excluded"]
    assert changes["logo.svg"]["exclusion_reason"] == "matches ignore pattern '*.svg'"
    assert not changes["app.py"]["is_excluded"]

  def test_config_file(self, capsys, tmp_path, builder):
    commit = builder.commit("Assets", {"logo.svg": "<svg/>\n"})
    config_path = tmp_path / "gitlogue.yaml"
    config_path.write_text('ignore_patterns: ["*.svg"]\n', encoding="utf-8")

    code, out, _ = run(
      capsys, "-p", str(builder.path), "-c", commit.hexsha, "--config", str(config_path)
    )

    assert code == 0
    assert json.loads(out)["changes"][0]["is_excluded"]


class TestErrors:
  def test_unknown_commit(self, capsys, linear_repo):
    builder, _ = linear_repo
    code, out, err = run(capsys, "-p", str(builder.path), "-c", "nonexistent")

    assert code == 1
    assert out == ""
    assert "Invalid commit hash or commit not found" in err

  def test_not_a_repository(self, capsys, tmp_path):
    code, _, err = run(capsys, "-p", str(tmp_path / "plain"))
    assert code == 1
    assert "Not a Git repository" in err

  def test_invalid_range(self, capsys, linear_repo):
    builder, _ = linear_repo
    code, _, err = run(capsys, "-p", str(builder.path), "-r", "HEAD~1...HEAD")
    assert code == 1
    assert "'...' is not supported" in err

  def test_missing_config_file(self, capsys, tmp_path, linear_repo):
    builder, _ = linear_repo
    code, _, err = run(
      capsys, "-p", str(builder.path), "--config", str(tmp_path / "missing.yaml")
    )
    assert code == 1
    assert "Configuration file not found" in err


if __name__ == "__main__":
  pytest.main([__file__, "-v"])
