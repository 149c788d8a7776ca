"""Distribution package naming and version-specific workarounds.

The workaround table is keyed by (distribution id, version codename). Each
entry only lists what it overrides; an unknown host gets no overrides.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .pkg import add_apt_source, add_universe_repo, apt_has_version, apt_update
from .probe import OsRelease

logger = logging.getLogger(__name__)

DEFAULT_TOMCAT = "tomcat9"


@dataclass(frozen=True)
class PackageLexicon:
    mysqlsrv: str
    mysqlclient: str
    db_cmd: str
    jpegturbo: str
    libpng: str
    needs_universe: bool


@dataclass(frozen=True)
class Workaround:
    # (sources.list.d file name, apt line)
    apt_sources: Tuple[Tuple[str, str], ...] = ()
    tomcat_version: Optional[str] = None
    # Guacamole version that needs LDFLAGS=-lrt on this host.
    lrt_guac_version: Optional[str] = None


_BULLSEYE_MAIN = ("bullseye.list", "deb http://deb.debian.org/debian/ bullseye main")
_JAMMY_UNIVERSE = ("jammy.list", "deb http://archive.ubuntu.com/ubuntu/ jammy universe")

WORKAROUNDS: Dict[Tuple[str, str], Workaround] = {
    # Later Tomcat releases break Guacamole; pull tomcat9 from an older suite.
    ("debian", "bookworm"): Workaround(apt_sources=(_BULLSEYE_MAIN,), tomcat_version="tomcat9"),
    ("debian", "trixie"): Workaround(apt_sources=(_BULLSEYE_MAIN,), tomcat_version="tomcat9"),
    ("ubuntu", "lunar"): Workaround(tomcat_version="tomcat9"),
    ("ubuntu", "noble"): Workaround(apt_sources=(_JAMMY_UNIVERSE,), tomcat_version="tomcat9"),
    # GUACAMOLE-1892, fixed in 1.5.5
    ("debian", "bullseye"): Workaround(lrt_guac_version="1.5.4"),
    ("ubuntu", "focal"): Workaround(lrt_guac_version="1.5.4"),
}


def is_ubuntu_family(os_id: str) -> bool:
    os_id = os_id.lower()
    return "ubuntu" in os_id or "linuxmint" in os_id


def package_lexicon(os_id: str, mysql_version: str) -> PackageLexicon:
    if mysql_version:
        # Official mariadb.org repo
        mysqlsrv, mysqlclient, db_cmd = "mariadb-server mariadb-client mariadb-common", "mariadb-client", "mariadb"
    else:
        mysqlsrv = "default-mysql-server default-mysql-client mysql-common"
        mysqlclient, db_cmd = "default-mysql-client", "mysql"

    os_id = os_id.lower()
    jpegturbo, libpng = "", ""
    if is_ubuntu_family(os_id):
        jpegturbo, libpng = "libjpeg-turbo8-dev", "libpng-dev"
    elif os_id in {"debian", "raspbian"}:
        jpegturbo, libpng = "libjpeg62-turbo-dev", "libpng-dev"

    return PackageLexicon(
        mysqlsrv=mysqlsrv,
        mysqlclient=mysqlclient,
        db_cmd=db_cmd,
        jpegturbo=jpegturbo,
        libpng=libpng,
        needs_universe=is_ubuntu_family(os_id),
    )


def lookup_workaround(os_release: OsRelease) -> Workaround:
    key = (os_release.id.lower(), os_release.version_codename.lower())
    return WORKAROUNDS.get(key, Workaround())


def ldflags_for(workaround: Workaround, guac_version: str) -> str:
    if workaround.lrt_guac_version and workaround.lrt_guac_version == guac_version:
        return "-lrt"
    return ""


def detect_tomcat_version(*, dry_run: bool = False) -> str:
    """Newest Tomcat the distro offers, tomcat9 when unsure."""

    if apt_has_version("tomcat10", 10, dry_run=dry_run):
        return "tomcat10"
    if apt_has_version("tomcat9", 9, dry_run=dry_run):
        return "tomcat9"
    return DEFAULT_TOMCAT


def prepare_host(
    os_release: OsRelease,
    *,
    log_path: Optional[str] = None,
    dry_run: bool = False,
) -> str:
    """Refresh apt, apply repository workarounds and return the Tomcat package to use."""

    apt_update(log_path=log_path, dry_run=dry_run)

    if is_ubuntu_family(os_release.id):
        add_universe_repo(log_path=log_path, dry_run=dry_run)

    wa = lookup_workaround(os_release)
    for list_name, line in wa.apt_sources:
        add_apt_source(list_name, line, dry_run=dry_run)
    if wa.apt_sources:
        apt_update(log_path=log_path, dry_run=dry_run)

    tomcat = wa.tomcat_version or detect_tomcat_version(dry_run=dry_run)
    logger.info(
        "Workarounds for %s/%s: sources=%d tomcat=%s",
        os_release.id,
        os_release.version_codename,
        len(wa.apt_sources),
        tomcat,
    )
    return tomcat
