from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional

from .collector import collect_config, default_install_log, default_paths
from .console import banner, error, heading, info, success
from .errors import SetupError, StepFailedError
from .fetcher import fetch_scripts
from .lib.probe import check_preconditions, invoking_home, probe_host
from .lib.prompts import Prompter, RetryPolicy
from .lib.workarounds import prepare_host
from .logging_utils import configure_logging, current_log_path
from .pipeline import InstallCtx, PipelineResult, run_pipeline
from .propagate import propagate_config
from .setup_config import load_presets
from .steps import (
    FinalizeStep,
    InstallGuacamoleStep,
    InstallNginxStep,
    LetsEncryptTlsStep,
    ScheduleBackupStep,
    SelfSignedTlsStep,
)

logger = logging.getLogger(__name__)


def build_steps():
    return [
        InstallGuacamoleStep(),
        ScheduleBackupStep(),
        InstallNginxStep(),
        SelfSignedTlsStep(),
        LetsEncryptTlsStep(),
        FinalizeStep(),
    ]


def run(
    *,
    config_path: Optional[str] = None,
    log_path: Optional[str] = None,
    dry_run: bool = False,
    cwd: Optional[Path] = None,
    prompter: Optional[Prompter] = None,
) -> PipelineResult:
    """Check the host, collect options, parameterise the step scripts and run them."""

    # Nothing may touch the system before these pass.
    check_preconditions(cwd or Path.cwd())

    presets = load_presets(config_path)
    home = invoking_home()
    actual_log_path = configure_logging(log_path or default_install_log(presets, home))

    try:
        facts = probe_host()
        banner(presets.get("guac_version") or "")

        download_dir, _ = default_paths(presets, home)
        fetch_scripts(
            presets.script_source,
            Path(download_dir),
            skip=presets.skip_fetch,
            dry_run=dry_run,
        )

        tomcat_version = prepare_host(facts.os, log_path=actual_log_path, dry_run=dry_run)

        prompter = prompter or Prompter(retry=RetryPolicy(presets.prompt_max_attempts))
        cfg = collect_config(
            presets,
            facts,
            prompter,
            tomcat_version=tomcat_version,
            install_log=actual_log_path,
        )

        heading("Beginning Guacamole setup...")
        info("Synchronising the install script suite with the selected installation options...")
        propagate_config(cfg, cfg.download_path, dry_run=dry_run)
        success("OK")

        result = run_pipeline(ctx=InstallCtx(cfg=cfg, dry_run=dry_run), steps=build_steps())
        logger.info("Ran steps: %s; skipped: %s", result.ran_steps, result.skipped_steps)
        return result
    except Exception:
        logger.exception("Installer failed")
        raise


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="guac-setup", description="Apache Guacamole auto installer")
    p.add_argument("--config", default=None, help="YAML file of silent (pre-set) options")
    p.add_argument("--log", default=None, help="Install log path (default ~/guac-setup/guacamole_install.log)")
    p.add_argument("--dry-run", action="store_true", help="Log commands instead of running them")

    args = p.parse_args(argv)

    try:
        run(config_path=args.config, log_path=args.log, dry_run=bool(args.dry_run))
    except SetupError as e:
        error(str(e))
        log = current_log_path()
        if log and not isinstance(e, StepFailedError):
            error(f"See {log}")
        return 1
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
