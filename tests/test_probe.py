import pytest

from guac_installer.errors import PreconditionError
from guac_installer.lib import probe
from guac_installer.lib.command import CmdResult


@pytest.mark.parametrize(
    "resolv, expected",
    [
        ("search abc\ndomain abcde\n", "abc"),
        ("domain abc\nsearch abcde\n", "abc"),
        ("nameserver 10.0.0.1\n", "local"),
        ("", "local"),
        ("search corp.lan\n", "corp.lan"),
        ("domain corp.lan\n", "corp.lan"),
        ("search aaa.lan\ndomain bbb.lan\n", "bbb.lan"),
    ],
)
def test_derive_domain_suffix(resolv, expected):
    assert probe.derive_domain_suffix(resolv) == expected


def test_parse_os_release():
    text = 'PRETTY_NAME="Ubuntu 24.04 LTS"\nID=ubuntu\nVERSION_ID="24.04"\nVERSION_CODENAME=noble\n'
    assert probe.parse_os_release(text) == probe.OsRelease("ubuntu", "24.04", "noble")


def test_parse_os_release_missing_fields():
    assert probe.parse_os_release("ID=debian\n") == probe.OsRelease("debian", "", "")


def test_default_interface_and_address():
    route = "default via 192.168.1.1 dev ens18 proto dhcp metric 100\n192.168.1.0/24 dev ens18 scope link\n"
    addr = (
        "2: ens18: <BROADCAST,MULTICAST,UP,LOWER_UP> mtu 1500\n"
        "    inet 192.168.1.42/24 brd 192.168.1.255 scope global dynamic ens18\n"
    )
    assert probe.parse_default_interface(route) == "ens18"
    assert probe.parse_first_inet(addr) == "192.168.1.42"


def test_no_default_route_gives_blank_ip(monkeypatch):
    calls = []

    def fake_run(argv, **kwargs):
        calls.append(argv)
        return CmdResult(argv=list(argv), returncode=0, stdout="10.0.0.0/8 dev eth0 scope link\n", stderr="")

    monkeypatch.setattr(probe, "run_cmd", fake_run)
    assert probe.detect_default_ip() == ""
    assert calls == [["ip", "route"]]


def test_find_leftovers(tmp_path):
    (tmp_path / "guacamole-server-1.5.5").mkdir()
    (tmp_path / "mysql-connector-j-8.4.0.tar.gz").write_text("x")
    (tmp_path / "notes.txt").write_text("x")

    names = [p.name for p in probe.find_leftovers(tmp_path)]

    assert names == ["guacamole-server-1.5.5", "mysql-connector-j-8.4.0.tar.gz"]


@pytest.fixture
def healthy_host(monkeypatch):
    monkeypatch.setattr(probe.os, "geteuid", lambda: 1000)
    monkeypatch.setattr(probe.shutil, "which", lambda name: "/usr/bin/sudo")
    monkeypatch.setattr(probe.getpass, "getuser", lambda: "operator")
    monkeypatch.setattr(probe, "user_groups", lambda user: ["operator", "sudo"])


def test_preconditions_pass(healthy_host, tmp_path):
    probe.check_preconditions(tmp_path)


def test_preconditions_reject_root(healthy_host, monkeypatch, tmp_path):
    monkeypatch.setattr(probe.os, "geteuid", lambda: 0)
    with pytest.raises(PreconditionError, match="must NOT be run as root"):
        probe.check_preconditions(tmp_path)


def test_preconditions_require_sudo(healthy_host, monkeypatch, tmp_path):
    monkeypatch.setattr(probe.shutil, "which", lambda name: None)
    with pytest.raises(PreconditionError, match="Sudo is not installed"):
        probe.check_preconditions(tmp_path)


def test_preconditions_require_sudo_group(healthy_host, monkeypatch, tmp_path):
    monkeypatch.setattr(probe, "user_groups", lambda user: ["operator"])
    with pytest.raises(PreconditionError, match="usermod -aG sudo operator"):
        probe.check_preconditions(tmp_path)


def test_preconditions_reject_leftovers(healthy_host, tmp_path):
    (tmp_path / "guacamole-9.9.9").mkdir()
    with pytest.raises(PreconditionError, match="guacamole-9.9.9"):
        probe.check_preconditions(tmp_path)
