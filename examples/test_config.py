import pytest

from fqcollect.config import FqcollectConfig, get_config, reset_config


def test_default_file_is_created(isolated_config):
    config = FqcollectConfig()
    assert config.config_path == isolated_config
    assert isolated_config.exists()
    assert config.get('LOCATOR', 'separator') == '_'
    assert config.get('LOCATOR', 'search_root') == '/space/sequences/Illumina/'
    assert config.getboolean('LOCATOR', 'copy_files') is True
    assert config.get_log_level() == 'WARNING'


def test_override_path(tmp_path):
    path = tmp_path / "other.cfg"
    config = FqcollectConfig(str(path))
    assert config.config_path == path
    assert path.exists()


def test_set_persists(isolated_config):
    FqcollectConfig().set('LOCATOR', 'separator', '.')
    assert FqcollectConfig().get('LOCATOR', 'separator') == '.'


def test_missing_keys_are_filled_in(isolated_config):
    isolated_config.parent.mkdir(parents=True, exist_ok=True)
    isolated_config.write_text("[LOCATOR]\nseparator = -\n")
    config = FqcollectConfig()
    assert config.get('LOCATOR', 'separator') == '-'
    assert config.get('LOCATOR', 'output_dir') == 'fastq'
    assert config.get('INSTALLER', 'go_version') == '1.17.3'
    assert "[INSTALLER]" in isolated_config.read_text()


def test_path_keys_expand_user(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    config = FqcollectConfig()
    config.set('LOCATOR', 'output_dir', '~/fastq')
    assert config.get('LOCATOR', 'output_dir') == str(tmp_path / "fastq")


@pytest.mark.parametrize("section,key,value", [
    ('LOCATOR', 'copy_files', 'maybe'),
    ('DEFAULT', 'log_level', 'LOUD'),
    ('INSTALLER', 'singularity_version', '3.9.0'),
    ('DEFAULT', 'anything', 'x'),
])
def test_set_validation(section, key, value):
    with pytest.raises(ValueError):
        FqcollectConfig().set(section, key, value)


def test_log_level_is_normalised():
    config = FqcollectConfig()
    config.set('DEFAULT', 'log_level', 'debug')
    assert config.get_log_level() == 'DEBUG'


def test_installer_config_resolves_go_url():
    config = FqcollectConfig()
    config.set('INSTALLER', 'go_version', '1.21.0')
    settings = config.get_installer_config()
    assert settings['go_url'] == 'https://golang.org/dl/go1.21.0.linux-amd64.tar.gz'
    assert settings['singularity_version'] == 'v3.9.0'


def test_unknown_section_returns_default():
    config = FqcollectConfig()
    assert config.get('NOPE', 'key', 'fallback') == 'fallback'
    assert config.get_section('NOPE') is None


def test_show_sections_do_not_repeat_defaults():
    config = FqcollectConfig()
    assert 'log_level' not in config.get_section('LOCATOR')
    assert list(config.get_all_config())[0] == 'DEFAULT'


def test_global_instance_is_cached():
    first = get_config()
    assert get_config() is first
    reset_config()
    assert get_config() is not first


@pytest.mark.parametrize("separator", ['#', ';', ' ', 'a b', '\t'])
def test_separator_that_cannot_be_stored_is_rejected(isolated_config, separator):
    config = FqcollectConfig()
    with pytest.raises(ValueError):
        config.set('LOCATOR', 'separator', separator)
    reset_config()
    assert get_config().get('LOCATOR', 'separator') == '_'


def test_search_root_keeps_trailing_slash():
    config = FqcollectConfig()
    config.set('LOCATOR', 'search_root', '/data/runs/')
    assert config.get('LOCATOR', 'search_root') == '/data/runs/'
