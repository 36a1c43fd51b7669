import os
import shutil

import pytest

from squashslayer.modules.keepers.image_store import SquashfsImage
from squashslayer.modules.keepers.tools import SquashfsTools


pytestmark = pytest.mark.skipif(
    not (shutil.which("unsquashfs") and shutil.which("mksquashfs")),
    reason="squashfs-tools not installed",
)


@pytest.fixture
def rootfs_src(tmp_path):
    src = tmp_path / "src"
    (src / "etc").mkdir(parents=True)
    (src / "etc" / "hostname").write_text("box\n")
    (src / "bin").mkdir()
    (src / "bin" / "tool").write_text("#!/bin/sh\n")
    os.chmod(src / "bin" / "tool", 0o4755)
    os.symlink("tool", src / "bin" / "alias")
    return src


def _build_image(src, image, *pseudo):
    cmd = ["mksquashfs", str(src), str(image), "-noappend", "-no-progress"]
    for line in pseudo:
        cmd += ["-p", line]
    result = SquashfsTools()._run(cmd)
    assert result.ok, result.stderr
    return image


def test_real_tools_round_trip(tmp_path, rootfs_src):
    rootfs = _build_image(rootfs_src, tmp_path / "rootfs.img")
    with SquashfsImage.open(rootfs, workdir=tmp_path / "work") as image:
        assert sorted(image.files()) == ["bin/alias", "bin/tool", "etc/hostname"]
        assert image.entry("bin/tool").permissions.digits() == "4755"
        assert image.pseudofile().split("\n")[-1].startswith("/ m ")

        output = tmp_path / "out" / "frag.img"
        image.build_fragment(["etc/hostname", "bin/tool"], output, with_parents=True)
        assert output.stat().st_size > 0
        assert not (tmp_path / "out" / "tmp").exists()

    with SquashfsImage.open(output, workdir=tmp_path / "work2") as fragment:
        assert sorted(fragment.files()) == ["bin/tool", "etc/hostname"]
        assert fragment.entry("bin/tool").permissions.digits() == "4755"


@pytest.mark.skipif(os.geteuid() != 0, reason="unsquashfs needs root to create device nodes")
def test_real_tools_round_trip_with_device(tmp_path, rootfs_src):
    (rootfs_src / "dev").mkdir()
    rootfs = _build_image(rootfs_src, tmp_path / "rootfs.img", "dev/sda b 660 root root 8 0")

    with SquashfsImage.open(rootfs, workdir=tmp_path / "work") as image:
        sda = image.entry("dev/sda")
        assert sda.type == "b"
        assert sda.device == (8, 0)
        assert sda.permissions.digits() == "0660"
        assert "dev/sda b 0660 root root 8 0" in image.pseudofile().split("\n")

        output = tmp_path / "out" / "frag.img"
        image.build_fragment(["etc/hostname", "bin/tool", "dev", "dev/sda"], output, with_parents=True)
        assert output.stat().st_size > 0
        assert not (tmp_path / "out" / "tmp").exists()

    with SquashfsImage.open(output, workdir=tmp_path / "work2") as fragment:
        assert sorted(fragment.files()) == ["bin/tool", "dev/sda", "etc/hostname"]
        assert fragment.entry("dev/sda").device == (8, 0)
        assert fragment.entry("dev/sda").ownership.owner == "root"
