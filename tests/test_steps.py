import dataclasses

import pytest

from guac_installer.errors import StepFailedError
from guac_installer.lib.command import CmdResult
from guac_installer.pipeline import InstallCtx
from guac_installer.steps import FinalizeStep, ScheduleBackupStep
from guac_installer.steps import step_50_schedule_backup, step_90_finalize


@pytest.fixture
def ctx(silent_config, tmp_path):
    cfg = dataclasses.replace(
        silent_config,
        download_dir=str(tmp_path / "guac-setup"),
        db_backup_dir=str(tmp_path / "mysqlbackups"),
        install_log=str(tmp_path / "install.log"),
    )
    cfg.download_path.mkdir()
    return InstallCtx(cfg=cfg)


def test_backup_script_moved_and_scheduled(ctx, monkeypatch):
    (ctx.script_dir / "backup-guacamole.sh").write_text("#!/bin/bash\n")
    entries = []
    monkeypatch.setattr(
        step_50_schedule_backup, "install_tagged_entry", lambda entry, tag, **kw: entries.append((entry, tag))
    )

    ScheduleBackupStep().run(ctx)

    dst = ctx.cfg.backup_path / "backup-guacamole.sh"
    assert dst.exists()
    assert not (ctx.script_dir / "backup-guacamole.sh").exists()
    assert entries == [(f"0 0 * * 1-5 {dst}", "backup guacamole")]


def test_backup_rerun_keeps_already_moved_script(ctx, monkeypatch):
    ctx.cfg.backup_path.mkdir()
    (ctx.cfg.backup_path / "backup-guacamole.sh").write_text("#!/bin/bash\n")
    monkeypatch.setattr(step_50_schedule_backup, "install_tagged_entry", lambda *a, **kw: None)

    ScheduleBackupStep().run(ctx)


def test_backup_script_missing_everywhere(ctx, monkeypatch):
    monkeypatch.setattr(step_50_schedule_backup, "install_tagged_entry", lambda *a, **kw: pytest.fail("no cron"))
    with pytest.raises(StepFailedError):
        ScheduleBackupStep().run(ctx)


def test_cleanup_failure_is_reported_not_raised(ctx, monkeypatch, capsys):
    monkeypatch.setattr(step_90_finalize, "apt_remove", lambda pkgs, **kw: CmdResult(["apt-get"], 100, "", ""))
    monkeypatch.setattr(step_90_finalize, "apt_autoremove", lambda **kw: CmdResult(["apt-get"], 0, "", ""))

    FinalizeStep().run(ctx)

    out = capsys.readouterr()
    assert "install complete!" in out.out
    assert "cleanup failed" in out.err


def test_finalize_reminds_about_duo_and_ldap(ctx, monkeypatch, capsys):
    ok = CmdResult(["apt-get"], 0, "", "")
    monkeypatch.setattr(step_90_finalize, "apt_remove", lambda pkgs, **kw: ok)
    monkeypatch.setattr(step_90_finalize, "apt_autoremove", lambda **kw: ok)
    cfg = dataclasses.replace(ctx.cfg, install_duo=True, install_ldap=True)

    FinalizeStep().run(InstallCtx(cfg=cfg))

    out = capsys.readouterr().out
    assert "duo-auth.html" in out
    assert "ldap-auth.html" in out
