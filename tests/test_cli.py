import sys

import pytest

import main
from squashslayer.modules.keepers import image_store
from squashslayer.modules.cli import parse_args

from tests.fakes import FakeSquashfsTools


@pytest.fixture
def fake_tools(monkeypatch):
    tools = FakeSquashfsTools()
    monkeypatch.setattr(image_store, "SquashfsTools", lambda: tools)
    return tools


def _run(tmp_path, *args):
    return main.main(["--image", str(tmp_path / "rootfs.img"), "--workdir", str(tmp_path / "work"), *args])


def test_no_mode_prints_help(capsys):
    with pytest.raises(SystemExit) as excinfo:
        parse_args([])
    assert excinfo.value.code == 0
    assert "usage" in capsys.readouterr().out


def test_output_requires_fragment():
    with pytest.raises(SystemExit):
        parse_args(["--image", "x.img", "--pseudofile", "--output", "out.img"])


def test_files_mode(tmp_path, capsys, fake_tools):
    assert _run(tmp_path, "--files") == 0
    out = capsys.readouterr().out.split("\n")
    assert "etc/hostname" in out
    assert "etc" not in out
    # staging tree removed on exit
    assert list((tmp_path / "work").glob("*-squashfs-root")) == []


def test_pseudofile_mode(tmp_path, capsys, fake_tools):
    assert _run(tmp_path, "--pseudofile") == 0
    assert "dev/sda b 0660 root disk 8 0" in capsys.readouterr().out


def test_listing_and_json_modes(tmp_path, capsys, fake_tools):
    assert _run(tmp_path, "--listing", "--json", "--verbose") == 0
    out = capsys.readouterr().out
    assert "drwxrwxrwt  root/root" in out
    assert '"path": "usr/bin/su"' in out
    assert "Listing lines skipped: 2" in out


def test_fragment_manifest_only(tmp_path, capsys, fake_tools):
    assert _run(tmp_path, "--fragment", "etc/hostname", "--with-parents") == 0
    out = capsys.readouterr().out
    assert "etc/hostname m 0644 1000 1000\netc m 0755 root root\n/ m 0755 root root" in out
    assert fake_tools.repacks == []


def test_fragment_build(tmp_path, capsys, fake_tools):
    output = tmp_path / "out" / "frag.img"
    assert _run(tmp_path, "--fragment", "etc/hostname", "dev/sda", "--output", str(output)) == 0
    assert output.is_file()
    assert "[+] Saved fragment" in capsys.readouterr().out


def test_open_failure_returns_1(tmp_path, capsys, monkeypatch):
    monkeypatch.setattr(image_store, "SquashfsTools", lambda: FakeSquashfsTools(list_rc=2))
    assert _run(tmp_path, "--files") == 1
    assert "[!] Error" in capsys.readouterr().out


def test_log_file_copies_output(tmp_path, capsys, monkeypatch, fake_tools):
    monkeypatch.setattr(sys, "stdout", sys.stdout)
    monkeypatch.setattr(sys, "stderr", sys.stderr)
    log = tmp_path / "run.log"
    assert _run(tmp_path, "--files", "--log-file", str(log)) == 0
    sys.stdout.flush()
    assert "etc/hostname" in capsys.readouterr().out
    assert "etc/hostname" in log.read_text()
