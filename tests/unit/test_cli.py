"""Unit tests for the command line interface."""

import json

import pytest

from docsite_search.cli import main


@pytest.fixture(autouse=True)
def _restore_logging(restore_root_logger):
    yield


def _stdout_json(capsys):
    return json.loads(capsys.readouterr().out)


@pytest.mark.unit
class TestSearchCommand:
    def test_prints_ranked_results(self, colors_index_path, capsys):
        exit_code = main(["search", str(colors_index_path), "colordiff", "--limit", "2"])

        payload = _stdout_json(capsys)
        assert exit_code == 0
        assert payload["query"] == "colordiff"
        assert 1 <= len(payload["results"]) <= 2
        top = payload["results"][0]
        assert top["title"] == "Colors.colordiff"
        assert top["highlights"][0] == {"start": 0, "end": 9}
        assert "rendered_snippet" not in top
        assert "error" not in payload

    def test_style_and_base_url(self, colors_index_path, capsys):
        exit_code = main(
            [
                "search",
                str(colors_index_path),
                "colordiff",
                "--style",
                "html",
                "--base-url",
                "https://example.org/stable/",
            ]
        )

        top = _stdout_json(capsys)["results"][0]
        assert exit_code == 0
        assert top["location"] == "https://example.org/stable/colordifferences.html#Colors.colordiff"
        assert top["rendered_snippet"].startswith("<mark>colordiff</mark>")

    def test_empty_query_has_no_results(self, colors_index_path, capsys):
        assert main(["search", str(colors_index_path), "  ...  "]) == 0
        assert _stdout_json(capsys)["results"] == []

    def test_negative_limit_is_rejected(self, colors_index_path, capsys):
        assert main(["search", str(colors_index_path), "color", "--limit", "-1"]) == 2
        assert "--limit must be >= 0" in capsys.readouterr().err

    def test_missing_index(self, tmp_path, capsys):
        assert main(["search", str(tmp_path / "missing.js"), "color"]) == 1

        captured = capsys.readouterr()
        payload = json.loads(captured.out)
        assert "Search index not found" in captured.err
        assert payload == {
            "query": "color",
            "results": [],
            "error": f"Search index not found: {tmp_path / 'missing.js'}",
        }

    def test_malformed_index(self, tmp_path, capsys):
        index_path = tmp_path / "search_index.js"
        index_path.write_text('var documenterSearchIndex = {"docs": [{"location": "a#1"}]}', encoding="utf-8")

        assert main(["search", str(index_path), "color"]) == 1

        captured = capsys.readouterr()
        payload = json.loads(captured.out)
        assert "Malformed search index" in captured.err
        assert payload["results"] == []
        assert payload["error"].startswith("Malformed search index: Index record #0 is malformed")

    def test_invalid_configuration(self, colors_index_path, monkeypatch, capsys):
        monkeypatch.setenv("DOCSITE_SEARCH_LOG_LEVEL", "verbose")

        assert main(["search", str(colors_index_path), "color"]) == 1
        assert "Invalid configuration" in capsys.readouterr().err


@pytest.mark.unit
class TestOtherCommands:
    def test_stats(self, colors_index_path, capsys):
        assert main(["stats", str(colors_index_path)]) == 0

        payload = _stdout_json(capsys)
        assert payload["entries"] == 7
        assert payload["pages"] == 6
        assert payload["categories"] == {"function": 2, "page": 2, "section": 3}

    def test_fit_image(self, capsys):
        assert main(["fit-image", "500", "400", "300"]) == 0
        assert _stdout_json(capsys) == {"height": 375.0, "width": 500.0}

    def test_requires_a_command(self):
        with pytest.raises(SystemExit) as excinfo:
            main([])
        assert excinfo.value.code == 2

    def test_stats_missing_index_prints_nothing(self, tmp_path, capsys):
        assert main(["stats", str(tmp_path / "missing.js")]) == 1

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Search index not found" in captured.err
