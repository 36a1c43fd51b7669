import pytest

from squashslayer.modules.keepers.image_store import SquashfsImage

from tests.fakes import FakeSquashfsTools


@pytest.fixture
def make_tools():
    return FakeSquashfsTools


@pytest.fixture
def fake_tools():
    return FakeSquashfsTools()


@pytest.fixture
def image(tmp_path, fake_tools):
    img = SquashfsImage.open(tmp_path / "rootfs.img", tools=fake_tools, workdir=tmp_path / "work")
    yield img
    img.close()
