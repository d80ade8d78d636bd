import pytest

from main import main


@pytest.fixture
def config_file(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        f"""
cache:
  snapshot_file: "{(tmp_path / 'cache' / 'timeline.json').as_posix()}"
registry:
  names:
    - {{name: Tokala Ironfang, aliases: [tok]}}
logging:
  log_file: ""
""",
        encoding="utf-8"
    )
    return config_path


def test_rebuild_and_search(config_file, capsys):
    assert main(["--config", str(config_file), "--rebuild", "--search", "queen of skanktown", "--limit", "1"]) == 0

    out = capsys.readouterr().out
    assert "Timeline cache holds 6 events (6 new)" in out
    assert "Queen of Skanktown" in out


def test_resolve_and_autocomplete(config_file, capsys):
    assert main(["--config", str(config_file), "--resolve", "tokla", "--names", "tok"]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines[-2:] == ["Tokala Ironfang", "Tokala Ironfang"]


def test_unknown_name(config_file, capsys):
    main(["--config", str(config_file), "--resolve", "zzzzzzzz"])
    assert "Unknown name: zzzzzzzz" in capsys.readouterr().out
