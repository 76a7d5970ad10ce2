"""Tests for the command line interface."""

import json

import pytest

from cicada import cli
from cicada.storage import FilePassageStore


def test_parser_search_arguments():
    args = cli.build_parser().parse_args([
        "--data-dir", "/tmp/x", "search", "who is Shion?",
        "--episode", "meakashi", "--episode", "watanagashi",
        "--character", "Shion", "--top-k", "3", "--min-score", "0.4", "--group",
    ])
    assert args.data_dir == "/tmp/x"
    assert args.query == "who is Shion?"
    assert args.episode == ["meakashi", "watanagashi"]
    assert args.top_k == 3
    assert args.min_score == 0.4
    assert args.group is True
    assert args.func is cli.search


def test_stats_command(tmp_path, corpus, capsys):
    store = FilePassageStore(str(tmp_path))
    for passage in corpus:
        store.add(passage)

    args = cli.build_parser().parse_args(["--data-dir", str(tmp_path), "stats"])
    args.func(args)

    output = json.loads(capsys.readouterr().out)
    assert output["passages"] == 3
    assert output["episodes"] == {"onikakushi": 2, "watanagashi": 1}


def test_search_requires_api_key(monkeypatch, tmp_path):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("CICADA_EMBEDDING_PROVIDER", raising=False)
    args = cli.build_parser().parse_args(["--data-dir", str(tmp_path), "search", "q"])
    with pytest.raises(SystemExit) as exc_info:
        args.func(args)
    assert exc_info.value.code == 1
