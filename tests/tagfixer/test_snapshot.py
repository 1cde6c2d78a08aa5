from tagfixer.id3 import snapshot
from tagfixer.id3.models import ResolvedMetadata


class FakeFile(dict):
    def __getitem__(self, key):
        if key == "album":
            raise RuntimeError("boom")
        return super().__getitem__(key)


def _fake_music_tag(monkeypatch, loaded):
    class FakeMusicTag:
        @staticmethod
        def load_file(path):
            return loaded

    monkeypatch.setattr(snapshot, "music_tag", FakeMusicTag)


def test_snapshot_joins_lists_and_survives_unreadable_keys(monkeypatch):
    fake = FakeFile(tracktitle="曲", artist=["A1", None, "A2"], album="x", artwork=b"img")
    _fake_music_tag(monkeypatch, fake)

    snap = snapshot.MusicTagSnapshotReader().read("x.mp3")
    assert (snap.title, snap.artist, snap.album) == ("曲", "A1, A2", "")
    assert snap.has_artwork is True


def test_snapshot_without_artwork(monkeypatch):
    _fake_music_tag(monkeypatch, {"tracktitle": None})
    snap = snapshot.MusicTagSnapshotReader().read("y.mp3")
    assert snap.title == ""
    assert snap.has_artwork is False


def test_mismatches_lists_differing_fields():
    snap = snapshot.TagSnapshot(title="曲", artist="A", album="Other")
    meta = ResolvedMetadata(title="曲", artist="A", album="Album")
    assert snap.mismatches(meta) == ["album"]
    assert snapshot.TagSnapshot(title="曲", artist="A", album="Album").mismatches(meta) == []
