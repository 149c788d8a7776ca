from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

import requests

from .console import error, info
from .errors import FetchError

logger = logging.getLogger(__name__)

DOWNLOAD_TIMEOUT = 60

INSTALL_GUACAMOLE = "2-install-guacamole.sh"
INSTALL_NGINX = "3-install-nginx.sh"
TLS_SELF_SIGNED = "4a-install-tls-self-signed-nginx.sh"
TLS_LETSENCRYPT = "4b-install-tls-letsencrypt-nginx.sh"
BACKUP_GUACAMOLE = "backup-guacamole.sh"
UPGRADE_GUACAMOLE = "upgrade-guacamole.sh"


@dataclass(frozen=True)
class RemoteScript:
    name: str
    # Path below the script source, relative.
    remote_dir: str = ""

    def url(self, source: str) -> str:
        parts = [source.rstrip("/")]
        if self.remote_dir:
            parts.append(self.remote_dir.strip("/"))
        parts.append(self.name)
        return "/".join(parts)


SCRIPTS: Sequence[RemoteScript] = (
    RemoteScript(INSTALL_GUACAMOLE),
    RemoteScript(INSTALL_NGINX),
    RemoteScript(TLS_SELF_SIGNED),
    RemoteScript(TLS_LETSENCRYPT),
    # Optional features, run by hand after the install.
    RemoteScript("add-auth-duo.sh", "guac-optional-features"),
    RemoteScript("add-auth-ldap.sh", "guac-optional-features"),
    RemoteScript("add-auth-totp.sh", "guac-optional-features"),
    RemoteScript("add-xtra-quickconnect.sh", "guac-optional-features"),
    RemoteScript("add-xtra-histrecstor.sh", "guac-optional-features"),
    RemoteScript("add-smtp-relay-o365.sh", "guac-optional-features"),
    RemoteScript("add-tls-guac-daemon.sh", "guac-optional-features"),
    RemoteScript("add-fail2ban.sh", "guac-optional-features"),
    RemoteScript(BACKUP_GUACAMOLE, "guac-management"),
    RemoteScript(UPGRADE_GUACAMOLE),
)


def _download(session: requests.Session, url: str, dest: Path) -> None:
    tmp = dest.with_name(dest.name + ".part")
    try:
        with session.get(url, stream=True, timeout=DOWNLOAD_TIMEOUT) as response:
            response.raise_for_status()
            with open(tmp, "wb") as f:
                for chunk in response.iter_content(chunk_size=8192):
                    if chunk:
                        f.write(chunk)
        os.replace(tmp, dest)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    dest.chmod(0o755)


def fetch_scripts(
    source: str,
    dest_dir: Path,
    *,
    scripts: Iterable[RemoteScript] = SCRIPTS,
    skip: Sequence[str] = (),
    session: Optional[requests.Session] = None,
    dry_run: bool = False,
) -> List[Path]:
    """Download every step script into dest_dir.

    All transfers are attempted and each failure is reported on its own; if
    any failed the whole set is rejected with FetchError.
    """

    dest_dir.mkdir(parents=True, exist_ok=True)
    session = session or requests.Session()
    info("Downloading the Guacamole build suite...")

    fetched: List[Path] = []
    failures: Dict[str, str] = {}
    for script in scripts:
        dest = dest_dir / script.name
        if script.name in skip:
            if dest.exists():
                logger.info("Keeping local %s", dest)
                fetched.append(dest)
            else:
                failures[script.name] = "marked skip_fetch but not present locally"
                error(f"Missing local script {dest}")
            continue

        url = script.url(source)
        if dry_run:
            logger.info("Would download %s -> %s", url, dest)
            fetched.append(dest)
            continue

        try:
            _download(session, url, dest)
        except (requests.RequestException, OSError) as e:
            failures[script.name] = str(e)
            error(f"Download failed: {url} ({e})")
            continue
        logger.info("Downloaded %s -> %s", url, dest)
        fetched.append(dest)

    if failures:
        raise FetchError(failures)
    return fetched
