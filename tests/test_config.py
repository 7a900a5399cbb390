"""
Tests for settings resolution and the command line entry point.
"""

import json

import pytest

from conftest import disk, exposition_samples, mirror, parse_exposition, pool_record
from zpool_exporter.config import DEFAULT_PORT, Settings
from zpool_exporter.main import apply_cli_overrides, build_parser, create_source, main
from zpool_exporter.source import CommandPoolSource, JsonPoolSource

ENV_VARS = ('LISTEN_ADDRESS', 'PORT', 'DEPTH', 'FULL_PATH', 'FROM_JSON',
            'SOURCE_COMMAND', 'SOURCE_TIMEOUT', 'LOG_LEVEL', 'LOG_FILE')


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv('ZPOOL_EXPORTER_' + name, raising=False)


class TestSettings:

    def test_defaults(self):
        settings = Settings()
        assert settings.listen_address == '0.0.0.0'
        assert settings.port == DEFAULT_PORT
        assert settings.depth == 1
        assert settings.full_path is False
        assert settings.from_json is None
        assert settings.log_level == 'INFO'

    def test_environment(self, monkeypatch):
        monkeypatch.setenv('ZPOOL_EXPORTER_PORT', '9134')
        monkeypatch.setenv('ZPOOL_EXPORTER_DEPTH', '2')
        monkeypatch.setenv('ZPOOL_EXPORTER_FULL_PATH', 'true')
        settings = Settings()
        assert settings.port == 9134
        assert settings.depth == 2
        assert settings.full_path is True

    def test_file_overrides_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv('ZPOOL_EXPORTER_DEPTH', '2')
        monkeypatch.setenv('ZPOOL_EXPORTER_PORT', '9134')
        config = tmp_path / 'exporter.yaml'
        config.write_text('depth: 0\nsource_command: zpool-stats --all\nunrelated: 1\n')

        settings = Settings(config_file=str(config))
        assert settings.depth == 0
        assert settings.port == 9134
        assert settings.source_command == 'zpool-stats --all'

    def test_missing_file_keeps_environment(self, tmp_path):
        settings = Settings(config_file=str(tmp_path / 'missing.yaml'))
        assert settings.port == DEFAULT_PORT

    def test_invalid_file_value(self, tmp_path):
        config = tmp_path / 'exporter.yaml'
        config.write_text('port: 70000\n')
        with pytest.raises(ValueError):
            Settings(config_file=str(config))

    def test_invalid_environment_value(self, monkeypatch):
        monkeypatch.setenv('ZPOOL_EXPORTER_DEPTH', '-1')
        with pytest.raises(ValueError):
            Settings()

    def test_cli_overrides_file(self, tmp_path):
        config = tmp_path / 'exporter.yaml'
        config.write_text('depth: 0\nport: 9200\n')
        cmd = build_parser().parse_args(['--config', str(config), '--depth', '3', '--fullPath'])

        settings = apply_cli_overrides(Settings(config_file=cmd.config), cmd)
        assert settings.depth == 3
        assert settings.port == 9200
        assert settings.full_path is True

    def test_create_source(self, tmp_path):
        settings = Settings()
        settings.from_json = str(tmp_path)
        assert isinstance(create_source(settings), JsonPoolSource)

        settings.from_json = None
        settings.source_command = 'zpool-stats'
        assert isinstance(create_source(settings), CommandPoolSource)


class TestMain:

    def test_dump(self, tmp_path, capsys):
        record = pool_record([mirror(0, [disk(0, '/dev/sda'), disk(1, '/dev/sdb')])])
        (tmp_path / 'tank.json').write_text(json.dumps(record))

        main(['--fromJson', str(tmp_path), '--depth', '2', '--dump'])
        families = parse_exposition(capsys.readouterr().out)
        assert families['zfs_pool_errors'].type == 'gauge'
        states = exposition_samples(families, 'zfs_vdev_state')
        assert {'vdev': 'mirror-0', 'zpool': 'tank', 'path': 'sdb'} in [labels for labels, _ in states]
        # process metrics belong to the long running server only
        assert 'process_cpu_seconds' not in families

    def test_dump_fails_on_bad_data(self, tmp_path):
        (tmp_path / 'tank.json').write_text(json.dumps({'name': 'tank', 'vdev_tree': {}}))
        with pytest.raises(SystemExit) as exc:
            main(['--fromJson', str(tmp_path), '--dump'])
        assert exc.value.code == 1

    def test_no_source(self):
        with pytest.raises(SystemExit) as exc:
            main(['--dump'])
        assert exc.value.code == 1

    def test_both_sources(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(['--fromJson', str(tmp_path), '--sourceCommand', 'zpool-stats', '--dump'])
        assert exc.value.code == 1

    def test_negative_depth(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(['--fromJson', str(tmp_path), '--depth', '-1', '--dump'])
        assert exc.value.code == 1

    def test_invalid_config(self, tmp_path, capsys):
        config = tmp_path / 'exporter.yaml'
        config.write_text('depth: many\n')
        with pytest.raises(SystemExit) as exc:
            main(['--config', str(config), '--dump'])
        assert exc.value.code == 1
        assert 'invalid configuration' in capsys.readouterr().err
