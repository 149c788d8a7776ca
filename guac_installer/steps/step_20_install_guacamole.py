from __future__ import annotations

import logging

from ..console import success, warn
from ..fetcher import INSTALL_GUACAMOLE
from ..lib.stepscript import run_step_script
from ..pipeline import InstallCtx
from ..setup_config import SetupConfig

logger = logging.getLogger(__name__)


class InstallGuacamoleStep:
    """Core install: build dependencies, database schema, guacd and the web app."""

    step_id = "20_install_guacamole"

    def enabled(self, cfg: SetupConfig) -> bool:
        return True

    def run(self, ctx: InstallCtx) -> None:
        cfg = ctx.cfg
        run_step_script(ctx, self.step_id, INSTALL_GUACAMOLE)

        suffix = "" if cfg.guac_url_redir else "/guacamole"
        success("Guacamole install complete")
        success(f"http://{cfg.proxy_site}:8080{suffix} - login user/pass: guacadmin/guacadmin")
        warn("***Be sure to change the password***")
