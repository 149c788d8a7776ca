"""Bake resolved option values into the downloaded step scripts.

Each dependent script starts with bare placeholder assignments such as
``PROXY_SITE=``. The first bare assignment of each name is rewritten to
``PROXY_SITE='value'`` so the script can be re-run later on its own. Nothing
else in the file changes. Running this twice over the same file is not
supported: the placeholders are gone after the first pass.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, List, Mapping, Sequence, Tuple

from .errors import PropagationError
from .fetcher import BACKUP_GUACAMOLE, INSTALL_NGINX, TLS_LETSENCRYPT, TLS_SELF_SIGNED, UPGRADE_GUACAMOLE
from .setup_config import SetupConfig

logger = logging.getLogger(__name__)

_CERT_VARS = ("CERT_COUNTRY", "CERT_STATE", "CERT_LOCATION", "CERT_ORG", "CERT_OU", "CERT_DAYS")

PROPAGATION_TABLE: Dict[str, Tuple[str, ...]] = {
    BACKUP_GUACAMOLE: (
        "MYSQL_HOST",
        "MYSQL_PORT",
        "GUAC_USER",
        "GUAC_PWD",
        "GUAC_DB",
        "DB_BACKUP_DIR",
        "BACKUP_EMAIL",
        "BACKUP_RETENTION",
    ),
    "add-tls-guac-daemon.sh": _CERT_VARS,
    UPGRADE_GUACAMOLE: (
        "INSTALL_MYSQL",
        "MYSQL_HOST",
        "MYSQL_PORT",
        "GUAC_DB",
        "MYSQL_ROOT_PWD",
        "GUAC_USER",
        "GUAC_PWD",
        "RDP_SHARE_HOST",
        "RDP_SHARE_LABEL",
        "RDP_PRINTER_LABEL",
    ),
    INSTALL_NGINX: ("PROXY_SITE", "INSTALL_LOG", "GUAC_URL"),
    TLS_SELF_SIGNED: (
        "DOWNLOAD_DIR",
        "PROXY_SITE",
        *_CERT_VARS,
        "GUAC_URL",
        "INSTALL_LOG",
        "DEFAULT_IP",
        "RSA_KEYLENGTH",
    ),
    TLS_LETSENCRYPT: ("DOWNLOAD_DIR", "PROXY_SITE", "GUAC_URL", "LE_DNS_NAME", "LE_EMAIL", "INSTALL_LOG"),
    "add-smtp-relay-o365.sh": ("LOCAL_DOMAIN",),
}


def shell_single_quote(value: str) -> str:
    return "'" + value.replace("'", "'\"'\"'") + "'"


def _placeholder_re(name: str) -> "re.Pattern[str]":
    # NAME= at line start with nothing but whitespace or a comment after it.
    return re.compile(rf"^(?P<indent>[ \t]*){re.escape(name)}=(?=[ \t]*(?:#[^\n]*)?$)", re.MULTILINE)


def substitute_placeholders(text: str, values: Mapping[str, str]) -> Tuple[str, List[str]]:
    """Return (new_text, names_not_found)."""

    missing: List[str] = []
    for name, value in values.items():
        rendered = f"{name}={shell_single_quote(value)}"
        text, n = _placeholder_re(name).subn(lambda m: m.group("indent") + rendered, text, count=1)
        if n == 0:
            missing.append(name)
    return text, missing


def propagate_file(path: Path, values: Mapping[str, str]) -> List[str]:
    try:
        original = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise PropagationError(str(path), "file not found") from e
    except OSError as e:
        raise PropagationError(str(path), e.strerror or str(e)) from e

    updated, missing = substitute_placeholders(original, values)
    for name in missing:
        logger.warning("No %s= placeholder in %s", name, path)

    try:
        path.write_text(updated, encoding="utf-8")
    except OSError as e:
        raise PropagationError(str(path), e.strerror or str(e)) from e
    logger.info("Propagated %d values into %s", len(values) - len(missing), path)
    return missing


def propagate_config(
    cfg: SetupConfig,
    script_dir: Path,
    *,
    table: Mapping[str, Sequence[str]] = PROPAGATION_TABLE,
    dry_run: bool = False,
) -> None:
    env = cfg.as_env()
    for script, names in table.items():
        path = script_dir / script
        if dry_run:
            logger.info("Would propagate %s into %s", ",".join(names), path)
            continue
        propagate_file(path, {name: env[name] for name in names})
