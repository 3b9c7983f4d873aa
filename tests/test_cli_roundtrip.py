import json
import subprocess
import sys
from pathlib import Path


def run(args, cwd):
    return subprocess.run([sys.executable, *args], cwd=cwd, check=False, capture_output=True, text=True)


def scm_edit(args, cwd):
    return run(["-m", "scm_edit.cli", *args], cwd)


def test_edit_session(tmp_path):
    repo = Path(__file__).resolve().parents[1]
    scm = tmp_path / "channels.scm"
    tsv = tmp_path / "list.tsv"

    r = run(["tools/make_sample_scm.py", str(scm), "--channels", "30"], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout
    original = scm.read_bytes()

    r = scm_edit(["list", str(scm)], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout
    assert "=== Satellite (map-SateD) - 30 channels ===" in r.stdout
    assert "=== Analog Antenna (map-AirA) - 30 channels ===" in r.stdout

    r = scm_edit(["check", str(scm)], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout

    # Same position: nothing written, no backup
    r = scm_edit(["move", str(scm), "5", "5"], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout
    assert scm.read_bytes() == original
    assert not (tmp_path / "channels.scm.backup").exists()

    r = scm_edit(["move", str(scm), "24", "1"], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout
    assert "in map-SateD" in r.stdout
    assert "Successfully moved channel 24 to position 1" in r.stdout
    assert (tmp_path / "channels.scm.backup").read_bytes() == original

    r = scm_edit(["list", str(scm), "--json"], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout
    listing = json.loads(r.stdout)
    sat = listing["map-SateD"]
    assert [ch["number"] for ch in sat] == list(range(1, 31))
    assert sat[0]["name"].endswith(" 24")
    assert sat[0]["index"] == 23

    r = scm_edit(["check", str(scm)], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout

    # Each store is numbered 1..30, so the first import interleaves them into 1..90
    r = scm_edit(["export", str(scm), str(tsv)], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout
    assert "Exported 90 channels" in r.stdout

    r = scm_edit(["import", str(scm), str(tsv)], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout
    assert "Successfully updated 89 channels" in r.stdout

    listing = json.loads(scm_edit(["list", str(scm), "--json"], cwd=repo).stdout)
    digital = [ch["number"] for store in ("map-SateD", "map-CableD", "map-AirD") for ch in listing[store]]
    assert sorted(digital) == list(range(1, 91))

    r = scm_edit(["check", str(scm)], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout

    # Now numbers are unique: an unedited round trip changes nothing
    r = scm_edit(["export", str(scm), str(tsv)], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout
    before_import = scm.read_bytes()

    r = scm_edit(["import", str(scm), str(tsv)], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout
    assert "Successfully updated 0 channels" in r.stdout
    assert scm.read_bytes() == before_import

    # Unknown channel fails closed
    r = scm_edit(["move", str(scm), "99", "1", "--no-backup"], cwd=repo)
    assert r.returncode == 1
    assert "FATAL: Channel not found: 99" in r.stdout
    assert scm.read_bytes() == before_import

    # Corrupt one record and make sure check notices
    r = run(["scripts/corrupt_one_byte.py", str(scm), "map-CableD", "0"], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout
    r = scm_edit(["check", str(scm)], cwd=repo)
    assert r.returncode == 1
    assert "map-CableD#0: checksum mismatch" in r.stdout


def test_import_warns_on_bad_rows(tmp_path):
    repo = Path(__file__).resolve().parents[1]
    scm = tmp_path / "channels.scm"
    tsv = tmp_path / "edited.tsv"

    r = run(["tools/make_sample_scm.py", str(scm), "--channels", "3"], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout

    tsv.write_text(
        "Number\tName\tSource\tRecordIndex\n"
        "3\tx\tmap-SateD\t2\n"
        "broken line\n"
        "1\tx\tmap-SateD\t0\n",
        encoding="utf-8",
    )
    r = scm_edit(["import", str(scm), str(tsv), "--no-backup"], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout
    assert "Warning: Skipping invalid line 3" in r.stdout
    assert "Successfully updated 2 channels" in r.stdout
    assert not (tmp_path / "channels.scm.backup").exists()

    r = scm_edit(["list", str(scm), "--json"], cwd=repo)
    sat = json.loads(r.stdout)["map-SateD"]
    assert [(ch["number"], ch["index"]) for ch in sat] == [(1, 2), (2, 0), (2, 1)]

    r = scm_edit(["compact", str(scm), "2", "--no-backup"], cwd=repo)
    assert r.returncode == 0, r.stderr + r.stdout
    assert "map-SateD: Renumbered 1 channels" in r.stdout
    assert "starting from position 2" in r.stdout

    r = scm_edit(["list", str(scm), "--json"], cwd=repo)
    sat = json.loads(r.stdout)["map-SateD"]
    assert [(ch["number"], ch["index"]) for ch in sat] == [(1, 2), (2, 0), (3, 1)]


def test_missing_container_is_fatal(tmp_path):
    repo = Path(__file__).resolve().parents[1]
    r = scm_edit(["compact", str(tmp_path / "missing.scm")], cwd=repo)
    assert r.returncode == 1
    assert "FATAL: File not found" in r.stdout
