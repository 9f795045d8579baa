"""The catalog maintenance scripts, run against copies of the fixture data."""

import importlib.util
import json
from pathlib import Path
import shutil

import pytest

SCRIPTS_DIR = Path(__file__).resolve().parents[2] / "scripts"
FIXTURE_CATALOG_DIR = Path(__file__).resolve().parents[1] / "fixtures" / "catalog"


def _load_script(name: str):
    spec = importlib.util.spec_from_file_location(name, SCRIPTS_DIR / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def data_dir(tmp_path):
    target = tmp_path / "data"
    shutil.copytree(FIXTURE_CATALOG_DIR, target)
    return target


def _read(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))


class TestValidateData:
    def test_clean_catalog(self, data_dir, capsys):
        validate_data = _load_script("validate_data")

        assert validate_data.main(["--data-dir", str(data_dir)]) == 0
        assert "OK: no integrity errors" in capsys.readouterr().out

    def test_dangling_reference_fails(self, data_dir, capsys):
        entries = _read(data_dir / "entries.json")
        entries[0]["filmId"] = "ghost"
        (data_dir / "entries.json").write_text(json.dumps(entries), encoding="utf-8")
        validate_data = _load_script("validate_data")

        assert validate_data.main(["--data-dir", str(data_dir), "--json"]) == 1
        report = json.loads(capsys.readouterr().out)
        assert report["ok"] is False
        assert "Entry ent_a_jiff references missing film ghost" in report["errors"]

    def test_missing_directory(self, tmp_path):
        validate_data = _load_script("validate_data")
        assert validate_data.main(["--data-dir", str(tmp_path / "nowhere")]) == 1


class TestPrefixIds:
    def test_plan_only_touches_the_edition(self):
        prefix_ids = _load_script("prefix_ids")
        films = [{"id": "f1"}, {"id": "f2"}, {"id": "biff_f3"}]
        entries = [
            {"filmId": "f1", "editionId": "biff"},
            {"filmId": "f2", "editionId": "jiff"},
            {"filmId": "biff_f3", "editionId": "biff"},
        ]

        assert prefix_ids.plan_renames(films, entries, "biff", "biff_") == {"f1": "biff_f1"}

    def test_rewrites_films_and_entries(self, data_dir):
        prefix_ids = _load_script("prefix_ids")

        code = prefix_ids.main(
            ["--edition", "edition_biff_2025", "--prefix", "biff2025_", "--data-dir", str(data_dir)]
        )

        assert code == 0
        film_ids = [film["id"] for film in _read(data_dir / "films.json")]
        assert film_ids == ["biff2025_film_a", "film_b", "film_c", "film_d", "biff2025_film_e"]
        refs = {entry["id"]: entry["filmId"] for entry in _read(data_dir / "entries.json")}
        assert refs["ent_a_jiff"] == "biff2025_film_a"
        assert refs["ent_e_biff"] == "biff2025_film_e"
        assert refs["ent_b_jiff"] == "film_b"

        # a second run finds nothing to do and the catalog still validates
        assert prefix_ids.main(
            ["--edition", "edition_biff_2025", "--prefix", "biff2025_", "--data-dir", str(data_dir)]
        ) == 0
        assert _load_script("validate_data").main(["--data-dir", str(data_dir)]) == 0

    def test_dry_run_writes_nothing(self, data_dir):
        prefix_ids = _load_script("prefix_ids")
        before = (data_dir / "films.json").read_text(encoding="utf-8")

        code = prefix_ids.main(
            ["--edition", "edition_biff_2025", "--prefix", "biff2025_", "--data-dir", str(data_dir), "--dry-run"]
        )

        assert code == 0
        assert (data_dir / "films.json").read_text(encoding="utf-8") == before

    def test_blank_prefix(self, data_dir):
        prefix_ids = _load_script("prefix_ids")
        assert prefix_ids.main(["--edition", "x", "--prefix", "  ", "--data-dir", str(data_dir)]) == 2
