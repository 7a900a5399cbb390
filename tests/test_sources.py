"""
Tests for the JSON replay and helper command pool sources.
"""

import json
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from conftest import disk, pool_record
from zpool_exporter.errors import SourceError
from zpool_exporter.source import CommandPoolSource, JsonPoolSource, PoolSnapshot


def write_json(path, data):
    path.write_text(json.dumps(data), encoding='utf-8')


class TestJsonPoolSource:

    def test_single_record_files(self, tmp_path):
        write_json(tmp_path / 'tank.json', pool_record([disk(0, '/dev/sda')]))
        write_json(tmp_path / 'capture.json', pool_record([], name='backup'))

        source = JsonPoolSource(str(tmp_path))
        assert sorted(source.list_pools()) == ['backup', 'tank']
        assert source.get_pool_stats('tank')['txg'] == 4242

    def test_record_without_name_uses_file_stem(self, tmp_path):
        record = pool_record([])
        del record['name']
        write_json(tmp_path / 'scratch.json', record)
        assert list(JsonPoolSource(str(tmp_path)).list_pools()) == ['scratch']

    def test_mapping_file(self, tmp_path):
        write_json(tmp_path / 'pools.json', {
            'tank': pool_record([]),
            'backup': pool_record([], name='backup'),
        })
        source = JsonPoolSource(str(tmp_path))
        assert sorted(source.list_pools()) == ['backup', 'tank']
        assert source.get_pool_stats('backup')['name'] == 'backup'

    def test_other_files_are_ignored(self, tmp_path):
        (tmp_path / 'README.txt').write_text('not json')
        assert JsonPoolSource(str(tmp_path)).list_pools() == {}

    def test_missing_directory(self, tmp_path):
        with pytest.raises(SourceError, match='does not exist'):
            JsonPoolSource(str(tmp_path / 'nope')).list_pools()

    def test_invalid_json(self, tmp_path):
        (tmp_path / 'broken.json').write_text('{"tank": ')
        with pytest.raises(SourceError, match='Invalid JSON'):
            JsonPoolSource(str(tmp_path)).list_pools()

    def test_non_object_json(self, tmp_path):
        write_json(tmp_path / 'list.json', [1, 2, 3])
        with pytest.raises(SourceError, match='expected a JSON object'):
            JsonPoolSource(str(tmp_path)).list_pools()

    def test_unknown_pool(self, tmp_path):
        write_json(tmp_path / 'tank.json', pool_record([]))
        with pytest.raises(SourceError, match='not found'):
            JsonPoolSource(str(tmp_path)).get_pool_stats('backup')

    def test_pass_reads_files_once(self, tmp_path):
        write_json(tmp_path / 'tank.json', pool_record([]))
        snapshot = JsonPoolSource(str(tmp_path)).begin_pass()
        (tmp_path / 'tank.json').unlink()

        assert list(snapshot.list_pools()) == ['tank']
        assert snapshot.get_pool_stats('tank')['txg'] == 4242


def completed(stdout):
    return subprocess.CompletedProcess(args=['zpool-stats'], returncode=0, stdout=stdout, stderr='')


@patch('zpool_exporter.source.command_source.subprocess.run')
class TestCommandPoolSource:

    def test_runs_once_per_pass(self, mock_run):
        mock_run.return_value = completed(json.dumps({'tank': pool_record([])}))
        source = CommandPoolSource('zpool-stats --all', timeout=5)

        snapshot = source.begin_pass()
        assert list(snapshot.list_pools()) == ['tank']
        assert snapshot.get_pool_stats('tank')['name'] == 'tank'
        mock_run.assert_called_once_with(['zpool-stats', '--all'], capture_output=True, text=True,
                                         check=True, timeout=5)

        source.begin_pass()
        assert mock_run.call_count == 2

    def test_runs_on_each_direct_call(self, mock_run):
        mock_run.return_value = completed('{}')
        assert CommandPoolSource(['zpool-stats']).list_pools() == {}
        mock_run.assert_called_once()

    def test_non_zero_exit(self, mock_run):
        mock_run.side_effect = subprocess.CalledProcessError(2, ['zpool-stats'], stderr='permission denied\n')
        with pytest.raises(SourceError, match='exit status 2.*permission denied'):
            CommandPoolSource('zpool-stats').begin_pass()

    def test_timeout(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(['zpool-stats'], 5)
        with pytest.raises(SourceError, match='timed out'):
            CommandPoolSource('zpool-stats', timeout=5).begin_pass()

    def test_missing_helper(self, mock_run):
        mock_run.side_effect = FileNotFoundError(2, 'No such file or directory')
        with pytest.raises(SourceError, match='not found: zpool-stats'):
            CommandPoolSource('zpool-stats').begin_pass()

    def test_invalid_json(self, mock_run):
        mock_run.return_value = completed('tank ONLINE')
        with pytest.raises(SourceError, match='invalid JSON'):
            CommandPoolSource('zpool-stats').begin_pass()

    def test_json_must_be_object(self, mock_run):
        mock_run.return_value = completed('["tank"]')
        with pytest.raises(SourceError, match='JSON object'):
            CommandPoolSource('zpool-stats').begin_pass()

    def test_missing_pool(self, mock_run):
        mock_run.return_value = completed('{}')
        snapshot = CommandPoolSource('zpool-stats').begin_pass()
        with pytest.raises(SourceError, match='missing'):
            snapshot.get_pool_stats('tank')

    def test_pass_keeps_its_snapshot(self, mock_run):
        mock_run.side_effect = [
            completed(json.dumps({'tank': pool_record([]), 'old': pool_record([], name='old')})),
            completed(json.dumps({'tank': pool_record([])})),
        ]
        source = CommandPoolSource('zpool-stats')

        first = source.begin_pass()
        assert sorted(first.list_pools()) == ['old', 'tank']
        second = source.begin_pass()
        assert first.get_pool_stats('old')['name'] == 'old'
        assert list(second.list_pools()) == ['tank']

    def test_snapshot_is_read_only(self, mock_run):
        mock_run.return_value = completed(json.dumps({'tank': pool_record([])}))
        snapshot = CommandPoolSource('zpool-stats').begin_pass()
        assert isinstance(snapshot, PoolSnapshot)
        with pytest.raises(TypeError):
            snapshot._pools['old'] = {}

    def test_source_errors_are_not_retried(self, mock_run):
        mock_run.side_effect = [subprocess.TimeoutExpired(['zpool-stats'], 1), MagicMock()]
        with pytest.raises(SourceError):
            CommandPoolSource('zpool-stats', timeout=1).begin_pass()
        assert mock_run.call_count == 1
