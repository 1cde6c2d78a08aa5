import io
import json
import zipfile

from tagfixer import cli
from tagfixer.id3.reader import parse_metadata
from tagfixer.id3.writer import audio_payload


def _library(tmp_path, build_tag, build_frame, audio):
    album = tmp_path / "in" / "My Album"
    album.mkdir(parents=True)
    tagged = build_tag(build_frame("TIT2", 0, "テスト1曲".encode("cp932"))) + audio
    (album / "01.mp3").write_bytes(tagged)
    (album / "02 Plain.mp3").write_bytes(audio)
    return album


def test_fix_to_out_dir(tmp_path, build_tag, build_frame, audio, capsys):
    album = _library(tmp_path, build_tag, build_frame, audio)
    out = tmp_path / "out"

    assert cli.main(["fix", str(album), "--out-dir", str(out)]) == 0

    fixed = (out / "My Album" / "01.mp3").read_bytes()
    m = parse_metadata(fixed, "01.mp3")
    assert m.title == "テスト1曲"
    assert m.album == "My Album"
    assert audio_payload(fixed) == audio
    assert (out / "My Album" / "02 Plain.mp3").exists()
    printed = capsys.readouterr().out
    assert "OK    01.mp3" in printed


def test_fix_to_zip_directory(tmp_path, build_tag, build_frame, audio):
    album = _library(tmp_path, build_tag, build_frame, audio)
    target = tmp_path / "zips"
    target.mkdir()

    assert cli.main(["fix", str(album), "--zip", str(target)]) == 0
    with zipfile.ZipFile(io.BytesIO((target / "music_collection.zip").read_bytes())) as zf:
        assert sorted(zf.namelist()) == ["01.mp3", "02 Plain.mp3"]


def test_show_prints_without_writing(tmp_path, build_tag, build_frame, audio, capsys):
    album = _library(tmp_path, build_tag, build_frame, audio)
    assert cli.main(["show", str(album / "01.mp3")]) == 0
    assert "テスト1曲" in capsys.readouterr().out
    assert sorted(p.name for p in album.iterdir()) == ["01.mp3", "02 Plain.mp3"]


def test_show_json(tmp_path, build_tag, build_frame, audio, capsys):
    album = _library(tmp_path, build_tag, build_frame, audio)
    assert cli.main(["show", "--json", str(album / "01.mp3")]) == 0
    row = json.loads(capsys.readouterr().out.strip())
    assert row["file"] == "01.mp3"
    assert row["title"] == "テスト1曲"
    assert row["encoding"] == "Shift-JIS"


def test_convert_reports_failures(tmp_path, monkeypatch, capsys):
    from tagfixer.codec import CodecError

    def fail(self, data, bitrate=None):
        raise CodecError("broken")

    monkeypatch.setattr(cli.FfmpegCodec, "convert_wma_to_mp3", fail)
    src = tmp_path / "a.wma"
    src.write_bytes(b"WMA")
    assert cli.main(["convert", str(src), "--out-dir", str(tmp_path / "o")]) == 1
    assert "ERROR" in capsys.readouterr().out


def test_split_writes_numbered_pieces(tmp_path, monkeypatch):
    monkeypatch.setattr(cli.FfmpegCodec, "split", lambda self, data, mode: [b"1", b"2"])
    src = tmp_path / "long.mp3"
    src.write_bytes(b"MP3")
    out = tmp_path / "o"
    assert cli.main(["split", str(src), "--every", "60", "--out-dir", str(out)]) == 0
    assert sorted(p.name for p in out.iterdir()) == ["long_001.mp3", "long_002.mp3"]


def _fake_music_tag(monkeypatch, loaded):
    from tagfixer.id3 import snapshot

    class FakeMusicTag:
        @staticmethod
        def load_file(path):
            return loaded

    monkeypatch.setattr(snapshot, "music_tag", FakeMusicTag)


def test_inspect_agrees_with_reader(tmp_path, build_tag, build_frame, audio, monkeypatch, capsys):
    path = tmp_path / "01.mp3"
    path.write_bytes(build_tag(build_frame("TIT2", 0, b"Song"), build_frame("TPE1", 0, b"Band")) + audio)
    _fake_music_tag(
        monkeypatch, {"tracktitle": "Song", "artist": "Band", "album": cli.config.UNKNOWN_ALBUM}
    )

    assert cli.main(["inspect", str(path)]) == 0
    printed = capsys.readouterr().out
    assert "title:   Song" in printed
    assert "MISMATCH" not in printed


def test_inspect_reports_mismatches(tmp_path, build_tag, build_frame, audio, monkeypatch, capsys):
    path = tmp_path / "01.mp3"
    path.write_bytes(build_tag(build_frame("TIT2", 0, "テスト".encode("cp932"))) + audio)
    _fake_music_tag(monkeypatch, {"tracktitle": "ƒeƒXƒg", "artist": "", "album": ""})

    assert cli.main(["inspect", str(path)]) == 1
    printed = capsys.readouterr().out
    assert "MISMATCH title" in printed
    assert "MISMATCH artist" in printed
