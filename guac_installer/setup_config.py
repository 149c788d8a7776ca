from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError

DEFAULT_SCRIPT_SOURCE = "https://raw.githubusercontent.com/zXMiguelXz/guacamole/main"

# Values that ship pre-filled rather than prompted for. A preset file may
# override any of them.
IN_FILE_DEFAULTS: Dict[str, Any] = {
    "guac_version": "1.5.5",
    "mysqljcon": "8.4.0",
    "mysql_version": "",
    "mariadb_source_link": "https://downloads.mariadb.com/MariaDB/mariadb_repo_setup",
    "guac_url": "http://localhost:8080/guacamole/",
    "rsa_keylength": "2048",
    "cert_country": "AU",
    "cert_state": "Victoria",
    "cert_location": "Melbourne",
    "cert_org": "Guacamole",
    "cert_ou": "I.T.",
    "backup_retention": "30",
    "rdp_share_label": "RDP Share",
    "rdp_printer_label": "RDP Printer",
}

# Keys that tune the orchestrator itself and never reach a step script.
ORCHESTRATOR_KEYS = {"script_source", "skip_fetch", "prompt_max_attempts"}

_ENV_NAMES = {
    "os_id": "ID",
    "os_version_id": "VERSION_ID",
    "os_codename": "VERSION_CODENAME",
}


@dataclass(frozen=True)
class SetupConfig:
    """Fully resolved installation options. Built once, never mutated."""

    # Host
    os_id: str
    os_version_id: str
    os_codename: str
    default_ip: str
    domain_suffix: str
    server_name: str
    local_domain: str

    # Paths
    download_dir: str
    db_backup_dir: str
    install_log: str

    # Sources and package lexicon
    guac_version: str
    guac_source_link: str
    mysqljcon: str
    mysqljcon_source_link: str
    mysql_version: str
    mariadb_source_link: str
    mysqlsrv: str
    mysqlclient: str
    db_cmd: str
    tomcat_version: str
    jpegturbo: str
    libpng: str
    ldflags: str
    guac_url: str

    # Database
    install_mysql: bool
    secure_mysql: bool
    mysql_host: str
    mysql_port: str
    guac_db: str
    guac_user: str
    mysql_root_pwd: str
    guac_pwd: str
    db_tz: str
    backup_email: str
    backup_retention: str

    # Extensions
    install_totp: bool
    install_duo: bool
    install_ldap: bool
    install_qconnect: bool
    install_histrec: bool
    histrec_path: str

    # Front end
    guac_url_redir: bool
    install_nginx: bool
    proxy_site: str
    self_sign: bool
    rsa_keylength: str
    cert_country: str
    cert_state: str
    cert_location: str
    cert_org: str
    cert_ou: str
    cert_days: str
    lets_encrypt: bool
    le_dns_name: str
    le_email: str

    # RDP redirection labels
    rdp_share_host: str
    rdp_share_label: str
    rdp_printer_label: str

    @property
    def download_path(self) -> Path:
        return Path(self.download_dir)

    @property
    def backup_path(self) -> Path:
        return Path(self.db_backup_dir)

    def as_env(self) -> Dict[str, str]:
        env: Dict[str, str] = {}
        for f in fields(self):
            name = _ENV_NAMES.get(f.name, f.name.upper())
            value = getattr(self, f.name)
            if f.name == "ldflags" and not value:
                continue
            env[name] = _render(value)
        return env


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def setup_config_fields() -> List[str]:
    return [f.name for f in fields(SetupConfig)]


@dataclass(frozen=True)
class Presets:
    """Silent options: any non-blank value here suppresses its prompt."""

    raw: Dict[str, Any]

    def get(self, name: str) -> Optional[str]:
        value = self.raw.get(name)
        if value is None:
            value = IN_FILE_DEFAULTS.get(name)
        if value is None:
            return None
        if isinstance(value, bool):
            return _render(value)
        text = str(value).strip()
        return text or None

    def flag(self, name: str) -> Optional[bool]:
        value = self.raw.get(name)
        if value is None or value == "":
            return None
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in {"true", "y", "yes"}:
            return True
        if text in {"false", "n", "no"}:
            return False
        raise ConfigError(f"Preset {name} must be true or false, got {value!r}")

    @property
    def script_source(self) -> str:
        return str(self.raw.get("script_source") or DEFAULT_SCRIPT_SOURCE).rstrip("/")

    @property
    def skip_fetch(self) -> List[str]:
        value = self.raw.get("skip_fetch") or []
        if not isinstance(value, list):
            raise ConfigError("Preset skip_fetch must be a list of script names")
        return [str(v) for v in value]

    @property
    def prompt_max_attempts(self) -> Optional[int]:
        value = self.raw.get("prompt_max_attempts")
        if value in (None, ""):
            return None
        try:
            n = int(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Preset prompt_max_attempts must be an integer, got {value!r}") from e
        if n < 1:
            raise ConfigError("Preset prompt_max_attempts must be at least 1")
        return n


def presets_from_mapping(raw: Dict[str, Any]) -> Presets:
    allowed = set(setup_config_fields()) | ORCHESTRATOR_KEYS
    normalized: Dict[str, Any] = {}
    for key, value in raw.items():
        name = str(key).strip().lower()
        if name not in allowed:
            raise ConfigError(f"Unknown preset option: {key}")
        normalized[name] = value
    return Presets(raw=normalized)


def load_presets(path: Optional[str]) -> Presets:
    if not path:
        return Presets(raw={})

    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Preset file not found: {path}")

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ConfigError("Preset file must be YAML")

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Unable to parse {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping/object")

    return presets_from_mapping(raw)
