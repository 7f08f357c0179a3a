"""Tests for environment-driven configuration."""

import pytest

from riverpod_graph.config import Config


class TestConfig:
    """Config defaults and overrides."""

    def test_defaults(self, tmp_path):
        config = Config(tmp_path / 'missing.env')

        assert config.framework_packages == ['riverpod', 'flutter_riverpod', 'hooks_riverpod']
        assert set(config.consumer_bases) == {
            'ConsumerWidget', 'ConsumerStatefulWidget', 'HookConsumerWidget',
        }
        assert config.build_method == 'build'
        assert config.excluded_dirs == []

    def test_environment_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv('RIVERPOD_GRAPH_PACKAGES', ' state_kit , state_kit_ui ,')
        monkeypatch.setenv('RIVERPOD_GRAPH_CONSUMER_BASES', 'StateView')
        monkeypatch.setenv('RIVERPOD_GRAPH_BUILD_METHOD', 'create')
        monkeypatch.setenv('RIVERPOD_GRAPH_EXCLUDED_DIRS', 'generated,legacy')

        config = Config(tmp_path / 'missing.env')

        assert config.framework_packages == ['state_kit', 'state_kit_ui']
        assert config.consumer_bases == ['StateView']
        assert config.build_method == 'create'
        assert config.excluded_dirs == ['generated', 'legacy']

    def test_env_file(self, tmp_path, monkeypatch):
        env_file = tmp_path / 'settings.env'
        env_file.write_text('RIVERPOD_GRAPH_BUILD_METHOD=compute\n', encoding='utf-8')
        # Loaded values land in os.environ, make monkeypatch remove it afterwards
        monkeypatch.setenv('RIVERPOD_GRAPH_BUILD_METHOD', 'unused')
        monkeypatch.delenv('RIVERPOD_GRAPH_BUILD_METHOD')

        assert Config(env_file).build_method == 'compute'

    def test_environment_wins_over_env_file(self, tmp_path, monkeypatch):
        env_file = tmp_path / 'settings.env'
        env_file.write_text('RIVERPOD_GRAPH_BUILD_METHOD=compute\n', encoding='utf-8')
        monkeypatch.setenv('RIVERPOD_GRAPH_BUILD_METHOD', 'create')

        assert Config(env_file).build_method == 'create'

    def test_empty_package_list_is_rejected(self, tmp_path, monkeypatch):
        monkeypatch.setenv('RIVERPOD_GRAPH_PACKAGES', ' , ')

        with pytest.raises(ValueError, match='RIVERPOD_GRAPH_PACKAGES'):
            Config(tmp_path / 'missing.env')
