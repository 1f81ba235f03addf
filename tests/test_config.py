"""Tests for configuration loading and validation."""

import pytest
from pydantic import ValidationError

from mirror_backup.config.settings import MirrorConfig, SyncJobConfig, SyncOptions, LoggingOptions


class TestMirrorConfig:
    """Test suite for MirrorConfig."""

    def test_from_yaml(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "jobs:\n"
            "  - name: docs\n"
            "    source: /data/docs\n"
            "    target: /backup/docs\n"
            "    ignore: ['*.tmp']\n"
            "  - name: music\n"
            "    source: /data/music\n"
            "    target: /backup/music\n"
            "    enabled: false\n"
            "sync_options:\n"
            "  parallel_operations: 4\n"
            "logging:\n"
            "  log_level: debug\n"
        )

        config = MirrorConfig.from_yaml(config_file)

        assert [job.name for job in config.jobs] == ["docs", "music"]
        assert config.jobs[0].ignore == ["*.tmp"]
        assert config.sync_options.parallel_operations == 4
        assert config.sync_options.dry_run is False
        assert config.logging.log_level == "DEBUG"
        assert [job.name for job in config.get_enabled_jobs()] == ["docs"]
        assert config.get_job_by_name("music").enabled is False
        assert config.get_job_by_name("nope") is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            MirrorConfig.from_yaml(tmp_path / "missing.yaml")

    def test_empty_file_gives_defaults(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        config = MirrorConfig.from_yaml(config_file)

        assert config.jobs == []
        assert config.sync_options.parallel_operations == 16

    def test_save_and_reload(self, tmp_path):
        config = MirrorConfig(
            jobs=[SyncJobConfig(name="docs", source="/data/docs", target="/backup/docs")],
            logging=LoggingOptions(log_file=tmp_path / "logs" / "run.log"),
        )
        config_file = tmp_path / "nested" / "config.yaml"

        config.to_yaml(config_file)
        reloaded = MirrorConfig.from_yaml(config_file)

        assert reloaded == config

    def test_duplicate_job_names_rejected(self):
        with pytest.raises(ValidationError):
            MirrorConfig(jobs=[
                SyncJobConfig(name="same", source="/a", target="/x"),
                SyncJobConfig(name="same", source="/b", target="/y"),
            ])


class TestValidation:
    """Test suite for field validators."""

    def test_target_inside_source_rejected(self, tmp_path):
        with pytest.raises(ValidationError):
            SyncJobConfig(name="loop", source=str(tmp_path), target=str(tmp_path / "backup"))

    def test_same_source_and_target_rejected(self, tmp_path):
        with pytest.raises(ValidationError):
            SyncJobConfig(name="same", source=str(tmp_path), target=str(tmp_path))

    def test_source_inside_target_allowed(self, tmp_path):
        job = SyncJobConfig(name="ok", source=str(tmp_path / "src"), target=str(tmp_path))

        assert job.enabled is True

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            SyncJobConfig(name="  ", source="/a", target="/b")

    def test_parallel_operations_must_be_positive(self):
        with pytest.raises(ValidationError):
            SyncOptions(parallel_operations=0)

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            LoggingOptions(log_level="chatty")
