from pathlib import Path
import sys

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from smf.errors import ValueOutOfRange  # noqa: E402
from tools.inspect_smf import format_midi_note, generate_report  # noqa: E402
from tools.roundtrip_smf import first_diff, main as roundtrip_main  # noqa: E402
import tools.roundtrip_smf as roundtrip_smf  # noqa: E402


def _chunk(tag: bytes, payload: bytes) -> bytes:
    return tag + len(payload).to_bytes(4, "big") + payload


HEADER = _chunk(b"MThd", bytes.fromhex("0000 0001 0060"))
TRACK = bytes.fromhex("00 ff 03 05 4c 65 61 64 21 00 90 3c 64 60 3c 00 00 ff 2f 00")
GOOD = HEADER + _chunk(b"MTrk", TRACK)


@pytest.fixture
def corpus(tmp_path: Path) -> Path:
    (tmp_path / "good.mid").write_bytes(GOOD)
    (tmp_path / "padded.mid").write_bytes(HEADER + _chunk(b"MTrk", TRACK + b"\x00"))
    (tmp_path / "broken.mid").write_bytes(GOOD[:-1])
    (tmp_path / "alien.mid").write_bytes(GOOD + _chunk(b"\xc3\xa9XY", b"abc"))
    return tmp_path


def test_first_diff() -> None:
    assert first_diff(b"abc", b"abc") == (None, None, None)
    assert first_diff(b"abc", b"abd") == (2, ord("c"), ord("d"))
    assert first_diff(b"abc", b"ab") == (2, None, None)


def test_roundtrip_reports_each_file(corpus: Path, capsys: pytest.CaptureFixture) -> None:
    status = roundtrip_main([str(corpus / "*.mid")])
    out = capsys.readouterr().out
    assert status == 1
    assert f"OK   {corpus / 'good.mid'}" in out
    assert f"OK   {corpus / 'padded.mid'}" in out
    assert "WARN" in out and "after end-of-track" in out
    assert f"OK   {corpus / 'alien.mid'}" in out
    assert "is not ASCII" in out
    assert f"ERR  {corpus / 'broken.mid'}: unexpected end of data" in out


def test_roundtrip_never_policy_flags_running_status(corpus: Path, capsys: pytest.CaptureFixture) -> None:
    status = roundtrip_main([str(corpus / "good.mid"), "--running-status", "never"])
    out = capsys.readouterr().out
    assert status == 1
    assert "FAIL" in out


def test_roundtrip_reports_encode_errors_and_continues(
    corpus: Path, capsys: pytest.CaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    def failing_encode(midi, *, running_status):
        raise ValueOutOfRange("chunk tag must be 4 bytes, got b'TOOLONG'", chunk_index=1)

    monkeypatch.setattr(roundtrip_smf, "encode", failing_encode)
    status = roundtrip_main([str(corpus / "good.mid"), str(corpus / "padded.mid")])
    out = capsys.readouterr().out
    assert status == 1
    assert f"ERR  {corpus / 'good.mid'}: re-encode failed: chunk tag must be 4 bytes" in out
    assert f"ERR  {corpus / 'padded.mid'}: re-encode failed" in out
    assert "OK   " not in out


def test_inspect_report() -> None:
    report = generate_report(Path("good.mid"), GOOD)
    assert "format=SINGLE_TRACK  tracks=1  division=96 ticks/quarter" in report
    assert "META Text(type=3, text='Lead!')" in report
    assert "note=C4 (0x3C) vel=0 (running)" in report
    assert "[Anomalies]" not in report


@pytest.mark.parametrize("note,name", [(60, "C4"), (21, "A0"), (127, "G9"), (0, "C-1")])
def test_format_midi_note(note: int, name: str) -> None:
    assert format_midi_note(note) == name
