import json

from research_feed import cli
from research_feed.models import ResultSet
from research_feed.pipeline import RunSummary


def test_build_writes_snapshot(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli, "run", lambda config: RunSummary(result_set=ResultSet(), index_fetched=True))
    out = tmp_path / "public" / "feed.json"

    assert cli.main(["--stats", "build", "--out", str(out)]) == 0

    data = json.loads(out.read_text())
    assert data["opportunities"] == []
    captured = capsys.readouterr()
    assert f"Wrote 0 opportunities to {out}" in captured.out
    assert "Crawl stats:" in captured.err


def test_lookup_with_bad_id_exits_nonzero(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert cli.main(["lookup", "!!"]) == 1
    assert json.loads(capsys.readouterr().out) == {"error": "Invalid opportunity id."}


def test_config_error_exits_2(tmp_path, capsys):
    path = tmp_path / "bad.toml"
    path.write_text("[crawl]\nmax_results = 0\n")
    assert cli.main(["--config", str(path), "build"]) == 2
    assert "Configuration error" in capsys.readouterr().err
