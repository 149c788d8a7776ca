import pytest

from guac_installer.errors import ConfigError
from guac_installer.setup_config import DEFAULT_SCRIPT_SOURCE, load_presets, presets_from_mapping


def test_load_presets_from_yaml(tmp_path):
    path = tmp_path / "silent.yaml"
    path.write_text(
        "INSTALL_MYSQL: false\n"
        "mysql_host: db.example.lan\n"
        "guac_version: 1.5.4\n"
        "skip_fetch: [upgrade-guacamole.sh]\n"
        "prompt_max_attempts: 3\n",
        encoding="utf-8",
    )

    presets = load_presets(str(path))

    assert presets.flag("install_mysql") is False
    assert presets.get("mysql_host") == "db.example.lan"
    assert presets.get("guac_version") == "1.5.4"
    assert presets.skip_fetch == ["upgrade-guacamole.sh"]
    assert presets.prompt_max_attempts == 3
    assert presets.script_source == DEFAULT_SCRIPT_SOURCE


def test_no_preset_file_means_no_presets():
    presets = load_presets(None)
    assert presets.flag("install_nginx") is None
    # Shipped defaults still apply.
    assert presets.get("cert_country") == "AU"


@pytest.mark.parametrize(
    "name, content",
    [
        ("bad.yaml", "install_mysql: [unclosed\n"),
        ("list.yaml", "- install_mysql\n"),
        ("unknown.yaml", "install_everything: true\n"),
        ("silent.json", "{}"),
    ],
)
def test_load_presets_rejects_bad_files(tmp_path, name, content):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_presets(str(path))


def test_missing_preset_file(tmp_path):
    with pytest.raises(ConfigError):
        load_presets(str(tmp_path / "nope.yaml"))


@pytest.mark.parametrize(
    "value, expected",
    [(True, True), ("yes", True), ("Y", True), ("false", False), ("n", False), ("", None), (None, None)],
)
def test_flag_values(value, expected):
    assert presets_from_mapping({"install_ldap": value}).flag("install_ldap") is expected


def test_flag_rejects_garbage():
    with pytest.raises(ConfigError):
        presets_from_mapping({"install_ldap": "sometimes"}).flag("install_ldap")


def test_blank_preset_does_not_count():
    assert presets_from_mapping({"mysql_host": "  "}).get("mysql_host") is None


def test_prompt_max_attempts_must_be_positive():
    with pytest.raises(ConfigError):
        presets_from_mapping({"prompt_max_attempts": 0}).prompt_max_attempts


def test_as_env_renders_shell_names(silent_config):
    env = silent_config.as_env()

    assert env["ID"] == "debian"
    assert env["VERSION_CODENAME"] == "bookworm"
    assert env["VERSION_ID"] == "12"
    assert env["INSTALL_MYSQL"] == "true"
    assert env["INSTALL_NGINX"] == "false"
    assert env["GUAC_PWD"] == "guac-secret"
    assert env["CERT_DAYS"] == "3650"
    assert "LDFLAGS" not in env
    assert all(isinstance(v, str) for v in env.values())


def test_config_is_frozen(silent_config):
    with pytest.raises(AttributeError):
        silent_config.install_nginx = True
