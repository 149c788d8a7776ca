from __future__ import annotations

import logging

from ..console import success, warn
from ..fetcher import INSTALL_NGINX
from ..lib.stepscript import run_step_script
from ..pipeline import InstallCtx
from ..setup_config import SetupConfig

logger = logging.getLogger(__name__)


class InstallNginxStep:
    step_id = "60_install_nginx"

    def enabled(self, cfg: SetupConfig) -> bool:
        return cfg.install_nginx

    def run(self, ctx: InstallCtx) -> None:
        run_step_script(ctx, self.step_id, INSTALL_NGINX)
        success("Nginx install complete")
        success(f"http://{ctx.cfg.proxy_site} - admin login: guacadmin pass: guacadmin")
        warn("***Be sure to change the password***")
