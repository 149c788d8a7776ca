"""Resolve every installation option into a frozen SetupConfig.

Each option is resolved in priority order: a non-blank preset, then an
interactive answer (only when the prompt's precondition holds), then the
option's documented default.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .console import heading
from .errors import ConfigConflictError, ConfigError
from .lib.probe import HostFacts
from .lib.prompts import Prompter
from .lib.workarounds import ldflags_for, lookup_workaround, package_lexicon
from .logging_utils import LOG_FILE_NAME
from .setup_config import Presets, SetupConfig

logger = logging.getLogger(__name__)

DEFAULT_MYSQL_HOST = "localhost"
DEFAULT_MYSQL_PORT = "3306"
DEFAULT_GUAC_DB = "guacamole_db"
DEFAULT_GUAC_USER = "guacamole_user"
DEFAULT_BACKUP_EMAIL = "backup-email@yourdomain.com"
DEFAULT_HISTREC_PATH = "/var/lib/guacamole/recordings"
DEFAULT_CERT_DAYS = "3650"
MIN_RSA_KEYLENGTH = 2048

CERT_FIELDS = ("cert_country", "cert_state", "cert_location", "cert_org", "cert_ou")


def default_paths(presets: Presets, home_dir: Path) -> tuple[str, str]:
    download_dir = presets.get("download_dir") or str(home_dir / "guac-setup")
    db_backup_dir = presets.get("db_backup_dir") or str(home_dir / "mysqlbackups")
    return download_dir, db_backup_dir


def default_install_log(presets: Presets, home_dir: Path) -> str:
    download_dir, _ = default_paths(presets, home_dir)
    return presets.get("install_log") or str(Path(download_dir) / LOG_FILE_NAME)


def _positive_int(name: str, value: str) -> str:
    try:
        n = int(value)
    except ValueError as e:
        raise ConfigError(f"{name.upper()} must be a whole number, got {value!r}") from e
    if n <= 0:
        raise ConfigError(f"{name.upper()} must be greater than zero")
    return str(n)


def check_exclusive(a_name: str, a: bool, b_name: str, b: bool, reason: str) -> None:
    if a and b:
        raise ConfigConflictError(f"{a_name} and {b_name} cannot be installed at the same time. {reason}")


class Collector:
    def __init__(
        self,
        presets: Presets,
        facts: HostFacts,
        prompter: Prompter,
        *,
        tomcat_version: str,
        install_log: Optional[str] = None,
    ):
        self.presets = presets
        self.facts = facts
        self.prompter = prompter
        self.tomcat_version = tomcat_version
        self.install_log = install_log

    def _flag(self, name: str) -> Optional[bool]:
        return self.presets.flag(name)

    def _required_static(self, name: str) -> str:
        value = self.presets.get(name)
        if not value:
            raise ConfigError(f"{name.upper()} must not be blank")
        return value

    # Database ---------------------------------------------------------------

    def _database(self) -> dict:
        p = self.prompter
        heading("MySQL setup options:")

        install_mysql = self._flag("install_mysql")
        if install_mysql is None:
            install_mysql = p.yes_no(
                "SQL: Install MySQL locally? (For a REMOTE MySQL server select 'n')", default=True
            )

        secure_mysql = self._flag("secure_mysql")
        if secure_mysql is None:
            secure_mysql = (
                p.yes_no("SQL: Apply MySQL secure installation settings to LOCAL db?", default=True)
                if install_mysql
                else False
            )

        mysql_host = self.presets.get("mysql_host")
        mysql_port = self.presets.get("mysql_port")
        guac_db = self.presets.get("guac_db")
        guac_user = self.presets.get("guac_user")
        if not install_mysql:
            if not mysql_host:
                mysql_host = p.text("SQL: Enter remote MySQL server hostname or IP")
            if not mysql_port:
                mysql_port = p.text(f"SQL: Enter remote MySQL server port [{DEFAULT_MYSQL_PORT}]")
            if not guac_db:
                guac_db = p.text(f"SQL: Enter remote Guacamole database name [{DEFAULT_GUAC_DB}]")
            if not guac_user:
                guac_user = p.text(f"SQL: Enter remote Guacamole user name [{DEFAULT_GUAC_USER}]")
        mysql_host = mysql_host or DEFAULT_MYSQL_HOST
        mysql_port = _positive_int("mysql_port", mysql_port or DEFAULT_MYSQL_PORT)
        guac_db = guac_db or DEFAULT_GUAC_DB
        guac_user = guac_user or DEFAULT_GUAC_USER

        # Remote instances have no local root password step.
        mysql_root_pwd = self.presets.get("mysql_root_pwd") or ""
        if not mysql_root_pwd and install_mysql:
            mysql_root_pwd = p.confirmed_secret(
                f"SQL: Enter {mysql_host}'s MySQL ROOT password",
                f"SQL: Confirm {mysql_host}'s MySQL ROOT password",
            )

        guac_pwd = self.presets.get("guac_pwd")
        if not guac_pwd:
            guac_pwd = p.confirmed_secret(
                f"SQL: Enter {mysql_host}'s MySQL {guac_user} password",
                f"SQL: Confirm {mysql_host}'s MySQL {guac_user} password",
            )

        backup_email = self.presets.get("backup_email")
        if not backup_email:
            backup_email = p.text("SQL: Enter email address for SQL backup messages [Enter to skip]")
        backup_email = backup_email or DEFAULT_BACKUP_EMAIL

        return dict(
            install_mysql=install_mysql,
            secure_mysql=secure_mysql,
            mysql_host=mysql_host,
            mysql_port=mysql_port,
            guac_db=guac_db,
            guac_user=guac_user,
            mysql_root_pwd=mysql_root_pwd,
            guac_pwd=guac_pwd,
            db_tz=self.presets.get("db_tz") or self.facts.timezone,
            backup_email=backup_email,
            backup_retention=_positive_int("backup_retention", self._required_static("backup_retention")),
        )

    # Authentication extensions and extras -----------------------------------

    def _extensions(self) -> dict:
        p = self.prompter
        heading("Guacamole authentication extension options:")

        totp = self._flag("install_totp")
        duo = self._flag("install_duo")
        if totp is None and duo is not True:
            totp = p.yes_no("AUTH: Install TOTP? (choose 'n' if you want Duo)", default=False)
            if totp:
                duo = False
        if duo is None and totp is not True:
            duo = p.yes_no("AUTH: Install Duo?", default=False)
            if duo:
                totp = False
        totp, duo = bool(totp), bool(duo)
        # Guacamole does not support both MFA extensions at once.
        check_exclusive("TOTP", totp, "Duo", duo, "Choose one MFA extension.")

        ldap = self._flag("install_ldap")
        if ldap is None:
            ldap = p.yes_no("AUTH: Install LDAP?", default=False)

        heading("Guacamole console optional extras:")
        qconnect = self._flag("install_qconnect")
        if qconnect is None:
            qconnect = p.yes_no("EXTRAS: Install Quick Connect feature?", default=False)

        histrec = self._flag("install_histrec")
        if histrec is None:
            histrec = p.yes_no("EXTRAS: Install History Recorded Storage feature", default=False)

        histrec_path = self.presets.get("histrec_path")
        if not histrec_path and histrec:
            histrec_path = p.text(
                f"EXTRAS: Enter recorded storage path [Enter for default {DEFAULT_HISTREC_PATH}]"
            )
        histrec_path = histrec_path or DEFAULT_HISTREC_PATH

        return dict(
            install_totp=totp,
            install_duo=duo,
            install_ldap=ldap,
            install_qconnect=qconnect,
            install_histrec=histrec,
            histrec_path=histrec_path,
        )

    # Reverse proxy and TLS ---------------------------------------------------

    def _front_end(self, default_fqdn: str) -> dict:
        p = self.prompter
        heading("Reverse Proxy & front end options:")

        redir = self._flag("guac_url_redir")
        nginx = self._flag("install_nginx")
        if nginx is None:
            nginx = p.yes_no("FRONT END: Protect Guacamole behind Nginx reverse proxy", default=False)
            if nginx:
                redir = False
        if redir is None:
            redir = (
                p.yes_no("FRONT END: Redirect Guacamole http://domain.root:8080 to /guacamole", default=True)
                if not nginx
                else False
            )

        proxy_site = self.presets.get("proxy_site")
        if not proxy_site and nginx:
            proxy_site = p.text(f"FRONT END: Enter proxy LOCAL DNS name? [Enter to use {default_fqdn}]")
        proxy_site = proxy_site or default_fqdn

        self_sign = self._flag("self_sign")
        lets_encrypt = self._flag("lets_encrypt")
        if self_sign is None:
            if nginx and lets_encrypt is not True:
                self_sign = p.yes_no(
                    "FRONT END: Add self signed TLS support to Nginx? (choose 'n' for Let's Encrypt)",
                    default=False,
                )
                if self_sign:
                    lets_encrypt = False
            else:
                self_sign = False

        if lets_encrypt is None:
            if nginx and not self_sign:
                lets_encrypt = p.yes_no("FRONT END: Add Let's Encrypt TLS support to Nginx reverse proxy", default=False)
                if lets_encrypt:
                    self_sign = False
            else:
                lets_encrypt = False
        check_exclusive(
            "Self signed TLS", self_sign, "Let's Encrypt TLS", lets_encrypt, "Choose one certificate source."
        )

        cert_days = self.presets.get("cert_days")
        if not cert_days and self_sign:
            cert_days = p.text(
                f"FRONT END: Enter number of days till TLS certificates will expire [Enter for {DEFAULT_CERT_DAYS}]"
            )
        cert_days = _positive_int("cert_days", cert_days or DEFAULT_CERT_DAYS)

        le_dns_name = self.presets.get("le_dns_name") or ""
        le_email = self.presets.get("le_email") or ""
        # Without Nginx there is no Let's Encrypt step to feed.
        if nginx and lets_encrypt:
            if not le_dns_name:
                le_dns_name = p.required_text(
                    "FRONT END: Enter the PUBLIC FQDN for your proxy site",
                    complaint="You must enter a public DNS name.",
                )
            if not le_email:
                le_email = p.required_text(
                    "FRONT END: Enter the email address for Let's Encrypt notifications",
                    complaint="You must enter an email address.",
                )

        rsa_keylength = _positive_int("rsa_keylength", self._required_static("rsa_keylength"))
        if int(rsa_keylength) < MIN_RSA_KEYLENGTH:
            raise ConfigError(f"RSA_KEYLENGTH must be at least {MIN_RSA_KEYLENGTH}")
        certs = {name: self._required_static(name) for name in CERT_FIELDS}
        if len(certs["cert_country"]) != 2:
            raise ConfigError("CERT_COUNTRY must be a 2 character country code")

        return dict(
            install_nginx=nginx,
            guac_url_redir=redir,
            proxy_site=proxy_site,
            self_sign=self_sign,
            cert_days=cert_days,
            lets_encrypt=lets_encrypt,
            le_dns_name=le_dns_name,
            le_email=le_email,
            rsa_keylength=rsa_keylength,
            **certs,
        )

    # -------------------------------------------------------------------------

    def collect(self) -> SetupConfig:
        facts = self.facts
        presets = self.presets

        server_name = presets.get("server_name") or facts.hostname
        local_domain = presets.get("local_domain") or facts.domain_suffix
        default_fqdn = f"{server_name}.{local_domain}"

        download_dir, db_backup_dir = default_paths(presets, facts.home_dir)
        install_log = self.install_log or default_install_log(presets, facts.home_dir)

        guac_version = self._required_static("guac_version")
        mysqljcon = self._required_static("mysqljcon")
        mysql_version = presets.get("mysql_version") or ""
        lexicon = package_lexicon(facts.os.id, mysql_version)
        workaround = lookup_workaround(facts.os)

        database = self._database()
        extensions = self._extensions()
        front_end = self._front_end(default_fqdn)

        cfg = SetupConfig(
            os_id=facts.os.id,
            os_version_id=facts.os.version_id,
            os_codename=facts.os.version_codename,
            default_ip=presets.get("default_ip") or facts.default_ip,
            domain_suffix=presets.get("domain_suffix") or facts.domain_suffix,
            server_name=server_name,
            local_domain=local_domain,
            download_dir=download_dir,
            db_backup_dir=db_backup_dir,
            install_log=install_log,
            guac_version=guac_version,
            guac_source_link=presets.get("guac_source_link")
            or f"http://apache.org/dyn/closer.cgi?action=download&filename=guacamole/{guac_version}",
            mysqljcon=mysqljcon,
            mysqljcon_source_link=presets.get("mysqljcon_source_link")
            or f"https://dev.mysql.com/get/Downloads/Connector-J/mysql-connector-j-{mysqljcon}.tar.gz",
            mysql_version=mysql_version,
            mariadb_source_link=self._required_static("mariadb_source_link"),
            mysqlsrv=presets.get("mysqlsrv") or lexicon.mysqlsrv,
            mysqlclient=presets.get("mysqlclient") or lexicon.mysqlclient,
            db_cmd=presets.get("db_cmd") or lexicon.db_cmd,
            tomcat_version=presets.get("tomcat_version") or self.tomcat_version,
            jpegturbo=presets.get("jpegturbo") or lexicon.jpegturbo,
            libpng=presets.get("libpng") or lexicon.libpng,
            ldflags=presets.get("ldflags") or ldflags_for(workaround, guac_version),
            guac_url=self._required_static("guac_url"),
            rdp_share_host=presets.get("rdp_share_host") or server_name,
            rdp_share_label=self._required_static("rdp_share_label"),
            rdp_printer_label=self._required_static("rdp_printer_label"),
            **database,
            **extensions,
            **front_end,
        )
        logger.info(
            "Resolved config: mysql=%s(%s) nginx=%s self_sign=%s lets_encrypt=%s totp=%s duo=%s ldap=%s",
            "local" if cfg.install_mysql else "remote",
            cfg.mysql_host,
            cfg.install_nginx,
            cfg.self_sign,
            cfg.lets_encrypt,
            cfg.install_totp,
            cfg.install_duo,
            cfg.install_ldap,
        )
        return cfg


def collect_config(
    presets: Presets,
    facts: HostFacts,
    prompter: Prompter,
    *,
    tomcat_version: str,
    install_log: Optional[str] = None,
) -> SetupConfig:
    return Collector(
        presets, facts, prompter, tomcat_version=tomcat_version, install_log=install_log
    ).collect()
