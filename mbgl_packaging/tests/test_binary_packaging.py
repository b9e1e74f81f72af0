import subprocess
import tarfile

import pytest

from mbgl_packaging.core.errors import ArchiveCreationFailed, MissingOutputDirectory, NoAbiDirectoriesFound
from mbgl_packaging.modules.abi_discovery import AbiDirectory
from mbgl_packaging.modules.binary_packaging import (
    BinaryPackager,
    build_tarball_name,
    create_tarball,
    sanitize_package_name,
)
from mbgl_packaging.modules.host_platform import HostEnvironment
from mbgl_packaging.scripts.manifest_parsing import PackageMetadata

EXPECTED = [
    "-scope-pkg-v1.2.3-node-v115-linux-x64.tar.gz",
    "-scope-pkg-v1.2.3-node-v127-linux-x64.tar.gz",
]


def linux_packager(project, **kwargs):
    return BinaryPackager(
        PackageMetadata(name="@scope/pkg", version="1.2.3"),
        lib_dir=project / "lib",
        output_dir=project,
        host=HostEnvironment("linux", "x86_64"),
        **kwargs
    )


def test_sanitize_package_name():
    assert sanitize_package_name("@scope/pkg") == "-scope-pkg"
    assert sanitize_package_name("plain") == "plain"


def test_build_tarball_name():
    assert build_tarball_name("-maplibre-maplibre-gl-native", "6.0.0", "115", "darwin", "arm64") == \
        "-maplibre-maplibre-gl-native-v6.0.0-node-v115-darwin-arm64.tar.gz"


@pytest.mark.requires_tar
def test_run_creates_one_tarball_per_abi(make_project):
    project = make_project()
    packager = linux_packager(project)

    assert packager.run() == EXPECTED
    assert sorted(p.name for p in project.glob("*.tar.gz")) == EXPECTED
    for name in EXPECTED:
        with tarfile.open(project / name, "r:gz") as tar:
            assert tar.getnames() == ["mbgl.node"]
    assert all(t.contents == ("mbgl.node",) for t in packager.tarballs)


@pytest.mark.requires_tar
def test_create_tarball_stores_binary_at_root(make_project):
    project = make_project(abis=("115",))
    abi_dir = AbiDirectory(name="node-v115", path=project / "lib" / "node-v115", abi="115")
    out = project / "dist"
    out.mkdir()

    tarball = create_tarball(abi_dir, "addon.tar.gz", output_dir=out, platform="linux", arch="x64")

    assert tarball.path == out / "addon.tar.gz"
    with tarfile.open(tarball.path, "r:gz") as tar:
        member = tar.extractfile("mbgl.node")
        assert member.read() == b"\x7fELF binary for 115"


def test_run_missing_lib_dir_creates_nothing(tmp_path):
    with pytest.raises(MissingOutputDirectory):
        linux_packager(tmp_path).run()
    assert not list(tmp_path.glob("*.tar.gz"))


def test_run_without_qualifying_directories_creates_nothing(tmp_path):
    (tmp_path / "lib" / "node-v115").mkdir(parents=True)
    (tmp_path / "lib" / "build").mkdir()
    with pytest.raises(NoAbiDirectoriesFound):
        linux_packager(tmp_path).run()
    assert not list(tmp_path.glob("*.tar.gz"))


@pytest.mark.requires_tar
def test_failure_on_second_abi_keeps_first_tarball(make_project, monkeypatch):
    project = make_project()
    real_run = subprocess.run

    def failing_run(cmd, **kwargs):
        if "-czf" in cmd and "node-v127" in cmd[2]:
            raise subprocess.CalledProcessError(2, cmd, stderr="tar: write error")
        return real_run(cmd, **kwargs)

    monkeypatch.setattr(subprocess, "run", failing_run)

    with pytest.raises(ArchiveCreationFailed) as excinfo:
        linux_packager(project).run()

    assert excinfo.value.returncode == 2
    assert excinfo.value.tarball_name == EXPECTED[1]
    assert "tar: write error" in str(excinfo.value)
    assert (project / EXPECTED[0]).exists()
    assert not (project / EXPECTED[1]).exists()


def test_missing_tar_executable(make_project, monkeypatch):
    project = make_project(abis=("115",))
    monkeypatch.setattr("mbgl_packaging.modules.binary_packaging.TAR_EXECUTABLE", "no-such-tar-binary")
    with pytest.raises(ArchiveCreationFailed, match="not found"):
        linux_packager(project).run()


def test_unknown_arch_is_used_as_is(make_project, log_records):
    project = make_project(abis=("115",))
    packager = BinaryPackager(
        PackageMetadata(name="pkg", version="0.1.0"),
        lib_dir=project / "lib",
        host=HostEnvironment("linux", "riscv64"),
    )
    plan = packager.plan()
    assert [name for _, name in plan] == ["pkg-v0.1.0-node-v115-linux-riscv64.tar.gz"]
    assert sum(1 for r in log_records if r["level"].name == "WARNING") == 1


@pytest.mark.requires_tar
def test_create_tarball_creates_missing_output_dir(make_project):
    project = make_project(abis=("115",))
    abi_dir = AbiDirectory(name="node-v115", path=project / "lib" / "node-v115", abi="115")
    out = project / "build" / "stage"

    tarball = create_tarball(abi_dir, "addon.tar.gz", output_dir=out)

    assert tarball.path.is_file()
    assert tarball.contents == ("mbgl.node",)


def test_output_dir_that_is_a_file_fails_cleanly(make_project):
    project = make_project(abis=("115",))
    (project / "dist").write_text("not a directory")
    abi_dir = AbiDirectory(name="node-v115", path=project / "lib" / "node-v115", abi="115")

    with pytest.raises(ArchiveCreationFailed, match="output directory"):
        create_tarball(abi_dir, "addon.tar.gz", output_dir=project / "dist")
