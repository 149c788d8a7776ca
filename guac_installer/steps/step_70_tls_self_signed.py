from __future__ import annotations

import logging

from ..console import success, warn
from ..fetcher import TLS_SELF_SIGNED
from ..lib.stepscript import run_step_script
from ..pipeline import InstallCtx
from ..setup_config import SetupConfig

logger = logging.getLogger(__name__)


class SelfSignedTlsStep:
    step_id = "70_tls_self_signed"

    def enabled(self, cfg: SetupConfig) -> bool:
        return cfg.install_nginx and cfg.self_sign and not cfg.lets_encrypt

    def run(self, ctx: InstallCtx) -> None:
        cfg = ctx.cfg
        # The script prints client certificate import instructions; keep a copy in the log.
        run_step_script(
            ctx,
            self.step_id,
            TLS_SELF_SIGNED,
            [cfg.proxy_site, cfg.cert_days, cfg.default_ip],
            tee_to_log=True,
        )
        success("Self signed certificate configured for Nginx")
        success(f"https://{cfg.proxy_site} - login user/pass: guacadmin/guacadmin")
        warn("***Be sure to change the password***")
