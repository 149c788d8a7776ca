from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple

import pytest

from guac_installer.collector import collect_config
from guac_installer.lib.probe import HostFacts, OsRelease
from guac_installer.lib.prompts import Prompter, RetryPolicy
from guac_installer.setup_config import presets_from_mapping


class ScriptedReader:
    """Stands in for the terminal: answers prompts in order and records them."""

    def __init__(self, answers: Sequence[Tuple[str, str]] = ()):
        self.answers: List[Tuple[str, str]] = list(answers)
        self.prompts: List[str] = []

    def __call__(self, prompt: str, secret: bool) -> str:
        self.prompts.append(prompt)
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {prompt}")
        expected, answer = self.answers.pop(0)
        assert expected in prompt, f"expected a prompt containing {expected!r}, got {prompt!r}"
        return answer

    def asked(self, fragment: str) -> bool:
        return any(fragment in p for p in self.prompts)


# Every interactive option pre-set, so collection runs without prompting.
SILENT: Dict[str, Any] = {
    "install_mysql": True,
    "secure_mysql": True,
    "mysql_root_pwd": "root-secret",
    "guac_pwd": "guac-secret",
    "backup_email": "dba@example.lan",
    "install_totp": False,
    "install_duo": False,
    "install_ldap": False,
    "install_qconnect": False,
    "install_histrec": False,
    "install_nginx": False,
    "guac_url_redir": True,
    "self_sign": False,
    "lets_encrypt": False,
}


@pytest.fixture
def facts(tmp_path: Path) -> HostFacts:
    return HostFacts(
        os=OsRelease(id="debian", version_id="12", version_codename="bookworm"),
        default_ip="192.168.1.10",
        domain_suffix="example.lan",
        hostname="guac01",
        timezone="Australia/Melbourne",
        home_dir=tmp_path,
    )


@pytest.fixture
def collect(facts: HostFacts):
    """collect(presets_overrides, answers, drop=()) -> (cfg, reader)."""

    def _collect(overrides: Dict[str, Any] = None, answers=(), drop=(), max_attempts=None):
        raw = {k: v for k, v in SILENT.items() if k not in drop}
        raw.update(overrides or {})
        reader = ScriptedReader(answers)
        prompter = Prompter(read=reader, retry=RetryPolicy(max_attempts))
        cfg = collect_config(presets_from_mapping(raw), facts, prompter, tomcat_version="tomcat9")
        assert not reader.answers, f"unused answers: {reader.answers}"
        return cfg, reader

    return _collect


@pytest.fixture
def silent_config(collect):
    cfg, _ = collect()
    return cfg
