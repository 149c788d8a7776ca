from __future__ import annotations

import logging

from ..console import success, warn
from ..fetcher import TLS_LETSENCRYPT
from ..lib.stepscript import run_step_script
from ..pipeline import InstallCtx
from ..setup_config import SetupConfig

logger = logging.getLogger(__name__)


class LetsEncryptTlsStep:
    step_id = "75_tls_letsencrypt"

    def enabled(self, cfg: SetupConfig) -> bool:
        return cfg.install_nginx and cfg.lets_encrypt and not cfg.self_sign

    def run(self, ctx: InstallCtx) -> None:
        run_step_script(ctx, self.step_id, TLS_LETSENCRYPT)
        success("Let's Encrypt TLS configured for Nginx")
        success(f"https://{ctx.cfg.le_dns_name} - login user/pass: guacadmin/guacadmin")
        warn("***Be sure to change the password***")
