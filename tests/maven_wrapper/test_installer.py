"""
Tests for the installer.

The downloader and the path assembler are mocked; downloads are served from
archives built in tmp_path, so no network access is needed.
"""

import hashlib
import os
import pathlib
import shutil
import stat
import zipfile
from unittest.mock import MagicMock, call

import pytest

from maven_wrapper.wrapper_downloader import Downloader
from maven_wrapper.wrapper_exceptions import (
    ChecksumVerificationException,
    ConfigurationException,
    DistributionLayoutException,
    DownloadException,
)
from maven_wrapper.wrapper_installer import Installer, LocalDistribution, PathAssembler
from maven_wrapper.wrapper_models import (
    MAVEN_USER_HOME_STRING,
    PROJECT_STRING,
    Checksum,
    WrapperConfiguration,
)


WORKING_DISTRIBUTION_URI = "http://server/maven-0.9.zip"
BROKEN_DISTRIBUTION_URI = "http://server.down/maven-0.9.zip"
OTHER_BROKEN_DISTRIBUTION_URI = "http://other.down/maven-0.9.zip"
CHECKSUM_URI = "http://server/maven-0.9.zip.sha1"


def _make_zip(path: pathlib.Path, members: dict) -> pathlib.Path:
    """Write a zip archive containing members (name -> bytes, None for a directory entry)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as archive:
        for name, data in members.items():
            if data is None:
                archive.writestr(zipfile.ZipInfo(name), b"")
            else:
                archive.writestr(name, data)
    return path


def _touch(path: pathlib.Path) -> pathlib.Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.touch()
    return path


MAVEN_MEMBERS = {
    "maven-0.9/": None,
    "maven-0.9/bin/": None,
    "maven-0.9/bin/mvn": b"something",
    "maven-0.9/conf/settings.xml": b"<settings/>",
}


class TestInstaller:
    """Tests for Installer.create_dist."""

    @pytest.fixture
    def layout(self, tmp_path):
        """Local paths used by the mocked path assembler and the fake remote server."""
        distribution_dir = tmp_path / "someDistPath"
        zip_store = tmp_path / "zips"
        remote = tmp_path / "remote"
        remote.mkdir()
        return {
            "distribution_dir": distribution_dir,
            "maven_home": distribution_dir / "maven-0.9",
            "zip_destination": zip_store / "maven-0.9.zip",
            "checksum_destination": zip_store / "maven-0.9.zip.checksum",
            "remote_zip": _make_zip(remote / "maven-0.9.zip", MAVEN_MEMBERS),
            "remote_checksum": remote / "maven-0.9.zip.sha1",
        }

    @pytest.fixture
    def downloads(self):
        """Records (address, destination existed at call time) for every download."""
        return []

    @pytest.fixture
    def downloader(self, layout, downloads):
        def fake_download(address, destination):
            destination = pathlib.Path(destination)
            downloads.append((address, destination.exists()))
            if address in (BROKEN_DISTRIBUTION_URI, OTHER_BROKEN_DISTRIBUTION_URI):
                raise DownloadException(f"Connection refused to '{address}'.")

            destination.parent.mkdir(parents=True, exist_ok=True)
            if address == WORKING_DISTRIBUTION_URI:
                shutil.copyfile(layout["remote_zip"], destination)
            elif address == CHECKSUM_URI or address.startswith(WORKING_DISTRIBUTION_URI + "."):
                shutil.copyfile(layout["remote_checksum"], destination)
            else:
                raise DownloadException(f"Not found: '{address}'.")

        mock = MagicMock(spec=Downloader)
        mock.download.side_effect = fake_download
        return mock

    @pytest.fixture
    def local_distribution(self, layout):
        return LocalDistribution(
            distribution_dir=layout["distribution_dir"],
            zip_file=layout["zip_destination"],
        )

    @pytest.fixture
    def path_assembler(self, local_distribution):
        mock = MagicMock(spec=PathAssembler)
        mock.get_distribution.return_value = local_distribution
        return mock

    @pytest.fixture
    def installer(self, downloader, path_assembler):
        return Installer(downloader, path_assembler)

    @staticmethod
    def _configuration(**overrides) -> WrapperConfiguration:
        settings = dict(
            zip_base=PROJECT_STRING,
            zip_path="someZipPath",
            distribution_base=MAVEN_USER_HOME_STRING,
            distribution_path="someDistPath",
            distribution_uris=[WORKING_DISTRIBUTION_URI],
            always_download=False,
            always_unpack=False,
        )
        settings.update(overrides)
        return WrapperConfiguration(**settings)

    @staticmethod
    def _write_checksum(layout, checksum: str) -> None:
        layout["remote_checksum"].write_text(checksum, encoding="utf-8")

    @staticmethod
    def _sha1_of(path: pathlib.Path) -> str:
        return hashlib.sha1(path.read_bytes()).hexdigest()

    def test_create_dist(self, installer, layout, downloader, path_assembler):
        configuration = self._configuration()

        home_dir = installer.create_dist(configuration)

        assert home_dir == layout["maven_home"]
        assert home_dir.is_dir()
        assert (home_dir / "bin" / "mvn").read_bytes() == b"something"
        assert (home_dir / "conf" / "settings.xml").exists()
        assert layout["zip_destination"].exists()
        assert not layout["zip_destination"].with_name("maven-0.9.zip.part").exists()
        path_assembler.get_distribution.assert_called_once_with(configuration, WORKING_DISTRIBUTION_URI)
        downloader.download.assert_called_once_with(
            WORKING_DISTRIBUTION_URI, layout["zip_destination"].with_name("maven-0.9.zip.part")
        )

    @pytest.mark.skipif(os.name == "nt", reason="no executable bit on Windows")
    def test_create_dist_sets_executable_permissions(self, installer, layout):
        home_dir = installer.create_dist(self._configuration())

        mode = (home_dir / "bin" / "mvn").stat().st_mode
        assert mode & stat.S_IXUSR
        assert stat.S_IMODE(mode) == 0o755

    def test_create_dist_with_existing_distribution(self, installer, layout, downloader):
        _touch(layout["zip_destination"])
        some_file = _touch(layout["maven_home"] / "some-file")

        home_dir = installer.create_dist(self._configuration())

        assert home_dir == layout["maven_home"]
        assert home_dir.is_dir()
        assert some_file.exists()
        assert layout["zip_destination"].exists()
        downloader.download.assert_not_called()

    def test_existing_zip_is_not_downloaded_again(self, installer, layout, downloader):
        _make_zip(layout["zip_destination"], MAVEN_MEMBERS)

        home_dir = installer.create_dist(self._configuration())

        assert (home_dir / "bin" / "mvn").exists()
        downloader.download.assert_not_called()

    def test_create_dist_with_existing_dist_and_zip_and_always_unpack(self, installer, layout, downloader):
        _make_zip(layout["zip_destination"], MAVEN_MEMBERS)
        garbage = _touch(layout["maven_home"] / "garbage")

        home_dir = installer.create_dist(self._configuration(always_unpack=True))

        assert home_dir == layout["maven_home"]
        assert home_dir.is_dir()
        assert not garbage.exists()
        assert (home_dir / "bin" / "mvn").exists()
        downloader.download.assert_not_called()

    def test_create_dist_with_existing_zip_and_dist_and_always_download(self, installer, layout, downloader):
        _touch(layout["zip_destination"])
        garbage = _touch(layout["maven_home"] / "garbage")

        home_dir = installer.create_dist(self._configuration(always_download=True))

        assert home_dir == layout["maven_home"]
        assert (home_dir / "bin" / "mvn").exists()
        assert not garbage.exists()
        assert layout["zip_destination"].read_bytes() == layout["remote_zip"].read_bytes()
        downloader.download.assert_called_once()

    def test_stale_part_file_is_removed_before_download(self, installer, layout, downloads):
        stale = layout["zip_destination"].with_name("maven-0.9.zip.part")
        stale.parent.mkdir(parents=True)
        stale.write_bytes(b"half a download")

        installer.create_dist(self._configuration())

        assert downloads == [(WORKING_DISTRIBUTION_URI, False)]
        assert not stale.exists()

    def test_old_directories_are_removed_on_unpack(self, installer, layout):
        old_home = _touch(layout["distribution_dir"] / "maven-0.8" / "bin" / "mvn").parent.parent

        home_dir = installer.create_dist(self._configuration(always_download=True))

        assert not old_home.exists()
        assert home_dir == layout["maven_home"]

    def test_verify_download(self, installer, layout, downloader):
        self._write_checksum(layout, self._sha1_of(layout["remote_zip"]))
        garbage = _touch(layout["maven_home"] / "garbage")
        configuration = self._configuration(
            always_download=True,
            always_unpack=True,
            verify_download=True,
            checksum_algorithm=Checksum.SHA1,
        )

        home_dir = installer.create_dist(configuration)

        assert home_dir == layout["maven_home"]
        assert (home_dir / "bin" / "mvn").exists()
        assert not garbage.exists()
        assert layout["zip_destination"].exists()
        assert layout["checksum_destination"].read_text() == self._sha1_of(layout["remote_zip"])
        assert downloader.download.call_args_list == [
            call(WORKING_DISTRIBUTION_URI, layout["zip_destination"].with_name("maven-0.9.zip.part")),
            call(CHECKSUM_URI, layout["checksum_destination"].with_name("maven-0.9.zip.checksum.part")),
        ]

    def test_verify_download_ignores_line_terminator(self, installer, layout):
        self._write_checksum(layout, self._sha1_of(layout["remote_zip"]) + "\r\nsecond line\n")
        configuration = self._configuration(verify_download=True, checksum_algorithm=Checksum.SHA1)

        assert installer.create_dist(configuration) == layout["maven_home"]

    def test_verify_download_fails(self, installer, layout):
        self._write_checksum(layout, "Foo-Bar")
        configuration = self._configuration(
            always_download=True,
            always_unpack=True,
            verify_download=True,
            checksum_algorithm=Checksum.SHA1,
        )

        with pytest.raises(ChecksumVerificationException) as exc_info:
            installer.create_dist(configuration)

        assert str(exc_info.value) == (
            f"Maven distribution '{WORKING_DISTRIBUTION_URI}' failed to verify against '{CHECKSUM_URI}'."
        )
        assert not layout["zip_destination"].exists()
        assert not layout["zip_destination"].with_name("maven-0.9.zip.part").exists()
        assert not layout["checksum_destination"].exists()
        assert not layout["maven_home"].exists()

    def test_verify_download_failure_keeps_previous_archive(self, installer, layout):
        previous = _make_zip(layout["zip_destination"], {"maven-0.8/bin/mvn": b"old"})
        previous_bytes = previous.read_bytes()
        self._write_checksum(layout, "Foo-Bar")
        configuration = self._configuration(
            always_download=True, verify_download=True, checksum_algorithm=Checksum.SHA1
        )

        with pytest.raises(ChecksumVerificationException):
            installer.create_dist(configuration)

        assert layout["zip_destination"].read_bytes() == previous_bytes

    def test_verify_download_is_case_sensitive(self, installer, layout):
        self._write_checksum(layout, self._sha1_of(layout["remote_zip"]).upper())
        configuration = self._configuration(verify_download=True, checksum_algorithm=Checksum.SHA1)

        with pytest.raises(ChecksumVerificationException):
            installer.create_dist(configuration)

    def test_verify_download_with_checksum_extension(self, installer, layout, downloader):
        self._write_checksum(layout, self._sha1_of(layout["remote_zip"]))
        configuration = self._configuration(
            verify_download=True,
            checksum_algorithm=Checksum.SHA1,
            checksum_extension="sha1sum",
        )

        installer.create_dist(configuration)

        assert downloader.download.call_args_list[1][0][0] == WORKING_DISTRIBUTION_URI + ".sha1sum"

    def test_verify_download_with_configured_checksum_uri(self, installer, layout, downloader):
        self._write_checksum(layout, self._sha1_of(layout["remote_zip"]))
        configuration = self._configuration(
            verify_download=True,
            checksum_algorithm=Checksum.SHA1,
            checksum_uris=[CHECKSUM_URI],
            checksum_extension="ignored",
        )

        installer.create_dist(configuration)

        assert downloader.download.call_args_list[1][0][0] == CHECKSUM_URI

    def test_multiple_distributions_first_succeeds(self, installer, layout, downloader):
        garbage = _touch(layout["maven_home"] / "garbage")
        configuration = self._configuration(
            always_download=True,
            always_unpack=True,
            distribution_uris=[WORKING_DISTRIBUTION_URI, BROKEN_DISTRIBUTION_URI],
        )

        home_dir = installer.create_dist(configuration)

        assert home_dir == layout["maven_home"]
        assert (home_dir / "bin" / "mvn").exists()
        assert not garbage.exists()
        downloader.download.assert_called_once()
        assert downloader.download.call_args[0][0] == WORKING_DISTRIBUTION_URI

    def test_multiple_distributions_first_fails(self, installer, layout, downloader):
        garbage = _touch(layout["maven_home"] / "garbage")
        configuration = self._configuration(
            always_download=True,
            always_unpack=True,
            distribution_uris=[BROKEN_DISTRIBUTION_URI, WORKING_DISTRIBUTION_URI],
        )

        home_dir = installer.create_dist(configuration)

        assert home_dir == layout["maven_home"]
        assert (home_dir / "bin" / "mvn").exists()
        assert not garbage.exists()
        assert [c[0][0] for c in downloader.download.call_args_list] == [
            BROKEN_DISTRIBUTION_URI,
            WORKING_DISTRIBUTION_URI,
        ]

    def test_multiple_distributions_both_fail(self, installer, downloader):
        configuration = self._configuration(
            always_download=True,
            always_unpack=True,
            distribution_uris=[BROKEN_DISTRIBUTION_URI, BROKEN_DISTRIBUTION_URI],
        )

        with pytest.raises(DownloadException) as exc_info:
            installer.create_dist(configuration)

        assert str(exc_info.value) == f"Connection refused to '{BROKEN_DISTRIBUTION_URI}'."
        assert downloader.download.call_count == 2
        assert all(c[0][0] == BROKEN_DISTRIBUTION_URI for c in downloader.download.call_args_list)

    def test_first_failure_is_reported(self, installer):
        configuration = self._configuration(
            always_download=True,
            distribution_uris=[BROKEN_DISTRIBUTION_URI, OTHER_BROKEN_DISTRIBUTION_URI],
        )

        with pytest.raises(DownloadException) as exc_info:
            installer.create_dist(configuration)

        assert BROKEN_DISTRIBUTION_URI in str(exc_info.value)
        assert OTHER_BROKEN_DISTRIBUTION_URI not in str(exc_info.value)

    def test_no_distributions_configured(self, installer, downloader):
        with pytest.raises(ConfigurationException) as exc_info:
            installer.create_dist(self._configuration(distribution_uris=[]))

        assert str(exc_info.value) == "No distributions configured. Expected to find at least 1 distribution."
        downloader.download.assert_not_called()

    def test_archive_without_directories(self, installer, layout):
        _make_zip(layout["remote_zip"], {"README.txt": b"no root directory"})

        with pytest.raises(DistributionLayoutException) as exc_info:
            installer.create_dist(self._configuration())

        assert str(exc_info.value) == (
            f"Maven distribution '{WORKING_DISTRIBUTION_URI}' does not contain any directories. "
            "Expected to find exactly 1 directory."
        )

    def test_archive_with_too_many_directories(self, installer, layout):
        _make_zip(
            layout["remote_zip"],
            {"maven-0.9/bin/mvn": b"something", "extras/readme.txt": b"extra root"},
        )

        with pytest.raises(DistributionLayoutException) as exc_info:
            installer.create_dist(self._configuration())

        assert str(exc_info.value) == (
            f"Maven distribution '{WORKING_DISTRIBUTION_URI}' contains too many directories. "
            "Expected to find exactly 1 directory."
        )

    def test_existing_distribution_with_too_many_directories(self, installer, layout, downloader):
        _touch(layout["zip_destination"])
        layout["maven_home"].mkdir(parents=True)
        (layout["distribution_dir"] / "stray").mkdir()

        with pytest.raises(DistributionLayoutException, match="Expected to find exactly 1 directory"):
            installer.create_dist(self._configuration())

        downloader.download.assert_not_called()

    def test_archive_entry_outside_target_is_rejected(self, installer, layout, tmp_path):
        _make_zip(layout["remote_zip"], {"maven-0.9/bin/mvn": b"ok", "../escaped.txt": b"evil"})

        with pytest.raises(DistributionLayoutException, match="escapes target directory"):
            installer.create_dist(self._configuration())

        assert not (tmp_path / "escaped.txt").exists()

    def test_layout_failure_falls_back_to_next_uri(self, tmp_path, layout, downloader):
        bad_zip = _make_zip(tmp_path / "remote" / "bad.zip", {"README.txt": b"no root directory"})
        bad_uri = "http://bad/maven-0.9.zip"
        working_side_effect = downloader.download.side_effect

        def download(address, destination):
            if address == bad_uri:
                pathlib.Path(destination).parent.mkdir(parents=True, exist_ok=True)
                shutil.copyfile(bad_zip, destination)
                return
            working_side_effect(address, destination)

        downloader.download.side_effect = download
        bad_local = LocalDistribution(tmp_path / "bad" / "dist", tmp_path / "bad" / "zips" / "maven-0.9.zip")
        good_local = LocalDistribution(layout["distribution_dir"], layout["zip_destination"])
        path_assembler = MagicMock(spec=PathAssembler)
        path_assembler.get_distribution.side_effect = lambda config, uri: bad_local if uri == bad_uri else good_local
        installer = Installer(downloader, path_assembler)

        home_dir = installer.create_dist(
            self._configuration(distribution_uris=[bad_uri, WORKING_DISTRIBUTION_URI])
        )

        assert home_dir == layout["maven_home"]

    def test_unsafe_archive_is_rejected_on_every_run(self, installer, layout):
        _make_zip(
            layout["remote_zip"],
            {
                "maven-0.9/bin/mvn": b"something",
                "../escaped.txt": b"evil",
                "maven-0.9/boot/plexus-classworlds-2.jar": b"jar",
            },
        )

        with pytest.raises(DistributionLayoutException, match="escapes target directory"):
            installer.create_dist(self._configuration())

        assert not layout["maven_home"].exists()

        with pytest.raises(DistributionLayoutException, match="escapes target directory"):
            installer.create_dist(self._configuration())

    def test_corrupt_archive_raises_layout_exception(self, installer, layout):
        layout["remote_zip"].write_bytes(b"<html>Not Found</html>")

        with pytest.raises(DistributionLayoutException) as exc_info:
            installer.create_dist(self._configuration())

        assert str(exc_info.value).startswith(
            f"Could not unzip Maven distribution '{WORKING_DISTRIBUTION_URI}'"
        )
        assert isinstance(exc_info.value.__cause__, zipfile.BadZipFile)
        assert not layout["maven_home"].exists()

    def test_failed_unzip_removes_partial_directories(self, installer, layout, monkeypatch):
        def failing_unzip(zip_path, destination):
            (destination / "maven-0.9" / "bin").mkdir(parents=True)
            raise OSError("No space left on device")

        monkeypatch.setattr(
            "maven_wrapper.wrapper_installer.installer.FileUtils.unzip", staticmethod(failing_unzip)
        )

        with pytest.raises(DistributionLayoutException, match="No space left on device"):
            installer.create_dist(self._configuration())

        assert not layout["maven_home"].exists()

    def test_repeated_uri_uses_checksum_uri_at_its_position(self, installer, layout, downloader):
        self._write_checksum(layout, self._sha1_of(layout["remote_zip"]))
        missing_checksum_uri = "http://server/missing.sha1"
        configuration = self._configuration(
            distribution_uris=[WORKING_DISTRIBUTION_URI, WORKING_DISTRIBUTION_URI],
            verify_download=True,
            checksum_algorithm=Checksum.SHA1,
            checksum_uris=[missing_checksum_uri, CHECKSUM_URI],
        )

        home_dir = installer.create_dist(configuration)

        assert home_dir == layout["maven_home"]
        checksum_addresses = [c[0][0] for c in downloader.download.call_args_list if c[0][0] != WORKING_DISTRIBUTION_URI]
        assert checksum_addresses == [missing_checksum_uri, CHECKSUM_URI]
