# tests/test_projections_fantasypros.py

import pytest

import projections_fantasypros as fp
from models import ScoringFormat


def _write_table(path, rows):
    body = "".join(f"<tr><td>{name}</td><td>{fpts}</td></tr>" for name, fpts in rows)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        "<html><body><table>"
        "<thead><tr><th>Player</th><th>FPTS</th></tr></thead>"
        f"<tbody>{body}</tbody>"
        "</table></body></html>"
    )


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Jordan Love GB", "jordan love"),
        ("Jordan Love (GB)", "jordan love"),
        ("Kenneth Walker III", "kenneth walker"),
        ("Kenneth Walker III SEA", "kenneth walker"),
        ("Marvin Harrison Jr.", "marvin harrison"),
    ],
)
def test_norm_name(raw, expected):
    assert fp._norm_name(raw) == expected


def test_projection_keys_line_up_across_sources():
    # ESPN and FantasyPros spell players / defenses differently
    assert fp.projection_key_for("Kenneth Walker III", "RB") == fp.projection_key_for("Kenneth Walker III SEA", "RB")
    assert fp.projection_key_for("Seahawks D/ST", "D/ST") == "DEF:seahawks"
    assert fp.projection_key_for("Seattle Seahawks", "DST") == "DEF:seahawks"
    assert fp.projection_key_for("49ers D/ST", "DEF") == "DEF:49ers"


def test_projection_key_unknown_position():
    assert fp.projection_key_for("Some Coach", "HC") is None
    assert fp.projection_key_for("", "QB") is None


def test_week_folder():
    assert fp.week_folder(13, 2025, ScoringFormat.HALF_PPR) == "fp_week13_2025_half_ppr"


def test_load_position_file(tmp_path):
    path = tmp_path / "rb.xls"
    _write_table(path, [("Kenneth Walker III SEA", 14.2), ("Bijan Robinson ATL", 19.8), ("Bad Row", "-")])

    table = fp._load_position_file(path, "RB")

    assert table == {"RB:kenneth walker": 14.2, "RB:bijan robinson": 19.8}


def test_load_missing_file(tmp_path):
    assert fp._load_position_file(tmp_path / "nope.xls", "QB") == {}


def test_fetch_projections_reads_saved_week(tmp_path):
    folder = tmp_path / fp.week_folder(14, 2025, ScoringFormat.PPR)
    _write_table(folder / "qb.xls", [("Jordan Love GB", 18.5)])
    _write_table(folder / "dst.xls", [("Seattle Seahawks", 7.0)])

    provider = fp.FantasyProsProjections(data_root=tmp_path, download=False)
    table = provider.fetch_projections(14, 2025, ScoringFormat.PPR)

    assert table["QB:jordan love"].ppr == 18.5
    assert table["QB:jordan love"].half_ppr is None
    assert table["DEF:seahawks"].points_for(ScoringFormat.PPR) == 7.0
    # parsed once per folder
    assert provider.fetch_projections(14, 2025, "ppr") is table


def test_only_current_week_is_downloaded(tmp_path, monkeypatch):
    downloads = []

    def fake_download(pos, scoring_format, outfile):
        downloads.append((pos, scoring_format))
        _write_table(outfile, [("Jordan Love GB", 18.5)] if pos == "QB" else [("Someone Else", 1.0)])

    monkeypatch.setattr(fp, "download_projection_file", fake_download)
    provider = fp.FantasyProsProjections(data_root=tmp_path, download=True, download_week=14)

    assert provider.fetch_projections(13, 2025, ScoringFormat.PPR) == {}
    assert downloads == []

    table = provider.fetch_projections(14, 2025, ScoringFormat.STANDARD)
    assert [pos for pos, _ in downloads] == list(fp.POSITION_FILES)
    assert table["QB:jordan love"].standard == 18.5
