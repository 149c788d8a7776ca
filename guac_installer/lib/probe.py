from __future__ import annotations

import getpass
import grp
import logging
import os
import pwd
import re
import shlex
import shutil
import socket
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..errors import PreconditionError
from .command import run_cmd

logger = logging.getLogger(__name__)

LEFTOVER_PATTERNS = ("guacamole-*", "mysql-connector-j-*")
FALLBACK_DOMAIN_SUFFIX = "local"


@dataclass(frozen=True)
class OsRelease:
    id: str
    version_id: str
    version_codename: str


@dataclass(frozen=True)
class HostFacts:
    """Read-only snapshot of the host, taken before any prompt."""

    os: OsRelease
    default_ip: str
    domain_suffix: str
    hostname: str
    timezone: str
    home_dir: Path


def _read_text(path: Path) -> Optional[str]:
    try:
        txt = path.read_text(encoding="utf-8", errors="ignore").strip()
        return txt or None
    except OSError:
        return None


def parse_os_release(text: str) -> OsRelease:
    values = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, raw = line.partition("=")
        try:
            parts = shlex.split(raw)
        except ValueError:
            parts = [raw.strip("\"'")]
        values[key.strip()] = parts[0] if parts else ""
    return OsRelease(
        id=values.get("ID", ""),
        version_id=values.get("VERSION_ID", ""),
        version_codename=values.get("VERSION_CODENAME", ""),
    )


def read_os_release(path: str = "/etc/os-release") -> OsRelease:
    return parse_os_release(_read_text(Path(path)) or "")


def parse_default_interface(route_text: str) -> Optional[str]:
    # default via 192.168.1.1 dev eth0 proto dhcp metric 100
    for line in route_text.splitlines():
        fields = line.split()
        if fields and fields[0] == "default" and "dev" in fields:
            idx = fields.index("dev")
            if idx + 1 < len(fields):
                return fields[idx + 1]
    return None


def parse_first_inet(addr_text: str) -> str:
    m = re.search(r"^\s*inet\s+([0-9.]+)", addr_text, re.MULTILINE)
    return m.group(1) if m else ""


def detect_default_ip() -> str:
    """Address bound to the default-route interface, or "" if there is none."""

    r = run_cmd(["ip", "route"], check=False)
    iface = parse_default_interface(r.stdout) if r.returncode == 0 else None
    if not iface:
        logger.warning("No default route found; DEFAULT_IP left blank")
        return ""
    r = run_cmd(["ip", "-4", "addr", "show", iface], check=False)
    return parse_first_inet(r.stdout) if r.returncode == 0 else ""


def _first_value(resolv_text: str, keyword: str) -> Optional[str]:
    for line in resolv_text.splitlines():
        fields = line.split()
        if len(fields) >= 2 and fields[0] == keyword:
            return fields[1]
    return None


def derive_domain_suffix(resolv_text: str) -> str:
    """Pick a DNS suffix from resolver configuration text.

    With both "search" and "domain" entries the shorter value wins; on a tie
    the "domain" value is used.
    """

    search = _first_value(resolv_text, "search")
    domain = _first_value(resolv_text, "domain")
    if search and domain:
        return search if len(search) < len(domain) else domain
    return search or domain or FALLBACK_DOMAIN_SUFFIX


def detect_domain_suffix(path: str = "/etc/resolv.conf") -> str:
    return derive_domain_suffix(_read_text(Path(path)) or "")


def detect_timezone(path: str = "/etc/timezone") -> str:
    return _read_text(Path(path)) or "UTC"


def find_leftovers(path: Path) -> List[Path]:
    found: set[Path] = set()
    for pattern in LEFTOVER_PATTERNS:
        found.update(path.glob(pattern))
    return sorted(found)


def invoking_home() -> Path:
    sudo_user = os.environ.get("SUDO_USER")
    if sudo_user:
        try:
            return Path(pwd.getpwnam(sudo_user).pw_dir)
        except KeyError:
            pass
    return Path.home()


def user_groups(user: str) -> List[str]:
    try:
        gid = pwd.getpwnam(user).pw_gid
    except KeyError:
        return []
    names = []
    for g in os.getgrouplist(user, gid):
        try:
            names.append(grp.getgrgid(g).gr_name)
        except KeyError:
            continue
    return names


def check_preconditions(cwd: Path) -> None:
    """Fail before any side effect if the run would be unsafe."""

    if os.geteuid() == 0:
        raise PreconditionError(
            "This installer must NOT be run as root, it will prompt for sudo when needed."
        )

    if shutil.which("sudo") is None:
        raise PreconditionError("Sudo is not installed. Please install sudo.")

    user = getpass.getuser()
    if "sudo" not in user_groups(user):
        raise PreconditionError(
            f"The current user ({user}) must be a member of the 'sudo' group. "
            f"Run: sudo usermod -aG sudo {user}"
        )

    leftovers = find_leftovers(cwd)
    if leftovers:
        names = ", ".join(p.name for p in leftovers)
        raise PreconditionError(
            "Possible previous install files detected in current build path "
            f"({names}). Please review and remove old guacamole install files before proceeding."
        )


def probe_host() -> HostFacts:
    os_release = read_os_release()
    facts = HostFacts(
        os=os_release,
        default_ip=detect_default_ip(),
        domain_suffix=detect_domain_suffix(),
        hostname=socket.gethostname().split(".")[0],
        timezone=detect_timezone(),
        home_dir=invoking_home(),
    )
    logger.info(
        "Host: id=%s version=%s codename=%s ip=%s suffix=%s",
        os_release.id,
        os_release.version_id,
        os_release.version_codename,
        facts.default_ip or "-",
        facts.domain_suffix,
    )
    return facts
