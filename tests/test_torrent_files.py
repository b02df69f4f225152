import json
from pathlib import Path

import pytest

lt = pytest.importorskip("libtorrent")

from bencode2json.bencode import to_json  # noqa: E402
from bencode2json.cli import main  # noqa: E402

from .utils import create_torrent_file  # noqa: E402

TRACKER_URL = "http://localhost:8080/announce"
PAYLOAD_SIZE = 256 * 1024


@pytest.fixture
def torrent_file(tmp_path):
    """Write a payload with binary content and create a torrent file for it"""
    payload = tmp_path / "payload.dat"
    payload.write_bytes(bytes(range(256)) * (PAYLOAD_SIZE // 256))
    return create_torrent_file(str(payload), TRACKER_URL)


class TestTorrentFiles:
    """Convert torrent files generated by libtorrent."""

    def test_metainfo(self, torrent_file):
        """Test that the metainfo fields come out as JSON."""
        info = lt.torrent_info(torrent_file)
        doc = json.loads(to_json(Path(torrent_file).read_bytes()))

        assert doc["announce"] == TRACKER_URL
        assert doc["created by"] == "test-setup"
        assert doc["info"]["name"] == info.name()
        assert doc["info"]["piece length"] == info.piece_length()

    def test_binary_pieces(self, torrent_file):
        """Test that the binary piece hashes survive the conversion."""
        info = lt.torrent_info(torrent_file)
        doc = json.loads(to_json(Path(torrent_file).read_bytes()))

        pieces = doc["info"]["pieces"].encode("utf-8", "surrogateescape")
        assert len(pieces) == 20 * info.num_pieces()

    def test_cli(self, torrent_file, tmp_path):
        """Test the command line front end on a torrent file."""
        output = tmp_path / "payload.json"

        assert main(["-i", torrent_file, "-o", str(output)]) == 0
        assert output.read_text(encoding="utf-8") == to_json(Path(torrent_file).read_bytes())
