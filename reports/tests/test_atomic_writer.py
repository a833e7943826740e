"""
Tests for atomic writer - temp write -> fsync -> rename.
Simulated interruption tests to verify atomicity.
"""

import json
from datetime import date
from unittest.mock import patch

from reports.atomic_writer import write_text_atomic, write_json_atomic


class TestWriteTextAtomic:
    """Tests for write_text_atomic function."""

    def test_write_success(self, tmp_path):
        output_path = tmp_path / 'nested' / 'summary.md'

        result = write_text_atomic("## Portfolio Analysis Summary\n", output_path)

        assert result['status'] == 'completed'
        assert result['output_path'] == str(output_path)
        assert result['bytes_written'] == len("## Portfolio Analysis Summary\n".encode('utf-8'))
        assert output_path.read_text(encoding='utf-8') == "## Portfolio Analysis Summary\n"

    def test_overwrite_existing(self, tmp_path):
        output_path = tmp_path / 'analysis.json'
        output_path.write_text('old')

        write_text_atomic('new', output_path)

        assert output_path.read_text() == 'new'

    def test_no_temp_files_left(self, tmp_path):
        write_text_atomic('content', tmp_path / 'out.txt')

        assert [p.name for p in tmp_path.iterdir()] == ['out.txt']

    def test_interrupted_rename_keeps_original(self, tmp_path):
        """A failed rename leaves the old file intact and cleans up."""
        output_path = tmp_path / 'analysis.json'
        output_path.write_text('original')

        with patch('reports.atomic_writer.os.replace', side_effect=OSError("disk full")):
            result = write_text_atomic('replacement', output_path)

        assert result['status'] == 'failed'
        assert 'disk full' in result['error']
        assert output_path.read_text() == 'original'
        assert [p.name for p in tmp_path.iterdir()] == ['analysis.json']


class TestWriteJsonAtomic:
    """Tests for write_json_atomic function."""

    def test_write_json(self, tmp_path):
        output_path = tmp_path / 'analysis.json'
        payload = {'portfolio': {'health_score': 72, 'sharpe_ratio': None}}

        result = write_json_atomic(payload, output_path)

        assert result['status'] == 'completed'
        assert json.loads(output_path.read_text()) == payload

    def test_dates_stringified(self, tmp_path):
        output_path = tmp_path / 'analysis.json'

        write_json_atomic({'as_of': date(2025, 6, 30)}, output_path)

        assert json.loads(output_path.read_text()) == {'as_of': '2025-06-30'}

    def test_unserializable_payload(self, tmp_path):
        output_path = tmp_path / 'analysis.json'

        result = write_json_atomic({'bad': float('nan'), 'keys': {(1, 2): 'tuple key'}}, output_path)

        assert result['status'] == 'failed'
        assert 'JSON serialization failed' in result['error']
        assert not output_path.exists()
