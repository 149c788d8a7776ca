from __future__ import annotations

import logging

from ..console import error, info, success, warn
from ..lib.pkg import apt_autoremove, apt_remove
from ..pipeline import InstallCtx
from ..setup_config import SetupConfig

logger = logging.getLogger(__name__)

BUILD_ONLY_PACKAGES = ["build-essential"]


class FinalizeStep:
    step_id = "90_finalize"

    def enabled(self, cfg: SetupConfig) -> bool:
        return True

    def _reminders(self, cfg: SetupConfig) -> None:
        # Duo and LDAP logins do not work until their properties are filled in.
        if cfg.install_duo:
            warn(
                "Reminder: Duo requires extra account specific info configured in the\n"
                "/etc/guacamole/guacamole.properties file before you can log in to Guacamole."
            )
            warn("See https://guacamole.apache.org/doc/gug/duo-auth.html")
        if cfg.install_ldap:
            warn(
                "Reminder: LDAP requires that your LDAP directory configuration match the exact format\n"
                "added to the /etc/guacamole/guacamole.properties file before LDAP auth will be active."
            )
            warn("See https://guacamole.apache.org/doc/gug/ldap-auth.html")

    def _cleanup(self, ctx: InstallCtx) -> bool:
        info("Removing build-essential package & cleaning up...")
        removed = apt_remove(BUILD_ONLY_PACKAGES, log_path=ctx.log_path, dry_run=ctx.dry_run)
        autoremoved = apt_autoremove(log_path=ctx.log_path, dry_run=ctx.dry_run)
        return removed.returncode == 0 and autoremoved.returncode == 0

    def run(self, ctx: InstallCtx) -> None:
        cfg = ctx.cfg
        self._reminders(cfg)
        success(f"Guacamole {cfg.guac_version} install complete!")

        # The install itself succeeded; a cleanup failure is only reported.
        if self._cleanup(ctx):
            success("OK")
        else:
            error(
                f"Build dependency cleanup failed. See {ctx.log_path}; "
                f"remove {', '.join(BUILD_ONLY_PACKAGES)} manually."
            )
