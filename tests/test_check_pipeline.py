"""
Tests for the check orchestration: channel filtering, staleness decisions,
install triggering and failure aggregation.
"""

import asyncio
import gzip
from pathlib import Path

import httpx
import pytest

from adapters.installer import ArtifactInstaller
from core.domain.channel import Channel
from core.domain.models import (
    CandidateStatus,
    DonePage,
    InstallTarget,
    LocalVersion,
    NextPage,
    Release,
)
from core.errors import CheckFailedError, FileError, NetworkError, ParseError
from core.services.check_pipeline import CheckRequest, PipelineHooks, candidate_is_newer, run_check
from tests.conftest import make_client, streamed

DEST = Path("/opt/bin/rust-analyzer")


def _release(tag: str) -> Release:
    return Release(name=tag, tag=tag, is_prerelease=tag == "nightly")


class FakeReleases:
    def __init__(self, *tags: str) -> None:
        self.tags = tags
        self.calls: list[tuple[int, int]] = []

    async def list(self, page: int, per_page: int):
        self.calls.append((page, per_page))
        if not self.tags:
            return DonePage()
        return NextPage(page + 1, [_release(t) for t in self.tags])


class FakeProbe:
    def __init__(self, local: LocalVersion | None = None, error: Exception | None = None) -> None:
        self.local = local
        self.error = error

    async def probe(self):
        if self.error:
            raise self.error
        return self.local


class FakeInstaller:
    def __init__(self, failures: dict[str, Exception] | None = None) -> None:
        self.failures = failures or {}
        self.installed: list[tuple[str, Path]] = []

    async def install(self, release_tag: str, destination_path: Path) -> InstallTarget:
        await asyncio.sleep(0)
        if release_tag in self.failures:
            raise self.failures[release_tag]
        self.installed.append((release_tag, destination_path))
        return InstallTarget(release_tag=release_tag, destination_path=destination_path)


def _local(date_version: str) -> LocalVersion:
    return LocalVersion(date_version=date_version, semantic_version="0.3.1")


def _check(releases, probe, installer=None, **request_kwargs):
    request = CheckRequest(destination=DEST, **request_kwargs)
    return asyncio.run(run_check(request=request, releases=releases, probe=probe, installer=installer))


class TestStableChannel:
    def test_no_local_version_installs_once(self):
        installer = FakeInstaller()

        result = _check(FakeReleases("2023-01-01"), FakeProbe(None), installer)

        assert installer.installed == [("2023-01-01", DEST)]
        assert result.local_version is None
        assert [o.status for o in result.outcomes] == [CandidateStatus.INSTALLED]

    def test_nightly_tag_is_skipped(self):
        installer = FakeInstaller()

        result = _check(FakeReleases("nightly", "2023-01-01"), FakeProbe(None), installer)

        assert installer.installed == [("2023-01-01", DEST)]
        assert [(o.tag, o.status) for o in result.outcomes] == [
            ("nightly", CandidateStatus.SKIPPED),
            ("2023-01-01", CandidateStatus.INSTALLED),
        ]

    def test_only_first_newer_release_is_installed(self):
        installer = FakeInstaller()

        result = _check(FakeReleases("2023-01-08", "2023-01-01"), FakeProbe(None), installer)

        assert installer.installed == [("2023-01-08", DEST)]
        assert [(o.tag, o.status) for o in result.outcomes] == [
            ("2023-01-08", CandidateStatus.INSTALLED),
            ("2023-01-01", CandidateStatus.SUPERSEDED),
        ]

    def test_up_to_date_release_does_not_block_older_listing(self):
        installer = FakeInstaller()

        result = _check(FakeReleases("2022-08-16", "2022-08-01"), FakeProbe(_local("2022-08-16")), installer)

        assert installer.installed == []
        assert [o.status for o in result.outcomes] == [CandidateStatus.UP_TO_DATE, CandidateStatus.UP_TO_DATE]

    def test_release_within_grace_day_is_up_to_date(self):
        installer = FakeInstaller()

        result = _check(FakeReleases("2022-08-17"), FakeProbe(_local("2022-08-16")), installer)

        assert installer.installed == []
        assert result.outcomes[0].status is CandidateStatus.UP_TO_DATE

    def test_older_local_version_installs(self):
        installer = FakeInstaller()

        _check(FakeReleases("2022-08-17"), FakeProbe(_local("2022-08-15")), installer)

        assert installer.installed == [("2022-08-17", DEST)]

    def test_report_only_does_not_install(self):
        result = _check(
            FakeReleases("2023-01-08", "2023-01-01"), FakeProbe(_local("2022-08-15")), None, download=False
        )

        assert [o.tag for o in result.with_status(CandidateStatus.AVAILABLE)] == ["2023-01-08", "2023-01-01"]

    def test_uses_one_page_with_request_size(self):
        releases = FakeReleases("2023-01-01")
        _check(releases, FakeProbe(None), FakeInstaller(), per_page=2)
        assert releases.calls == [(1, 2)]

    def test_done_page_is_success(self):
        installer = FakeInstaller()
        result = _check(FakeReleases(), FakeProbe(None), installer)
        assert result.outcomes == []
        assert installer.installed == []


class TestNightlyChannel:
    def test_only_nightly_is_considered_and_always_newer(self):
        installer = FakeInstaller()

        result = _check(
            FakeReleases("2099-01-01", "nightly"),
            FakeProbe(_local("2100-01-01")),
            installer,
            channel=Channel.NIGHTLY,
        )

        assert installer.installed == [("nightly", DEST)]
        assert [o.status for o in result.outcomes] == [CandidateStatus.SKIPPED, CandidateStatus.INSTALLED]


class TestFailures:
    def test_one_failure_does_not_stop_siblings(self):
        installer = FakeInstaller()

        with pytest.raises(CheckFailedError) as exc_info:
            _check(FakeReleases("not-a-date", "2023-01-08"), FakeProbe(_local("2022-08-15")), installer)

        assert installer.installed == [("2023-01-08", DEST)]
        assert isinstance(exc_info.value.first, ParseError)
        assert exc_info.value.code == ParseError.code

    def test_first_failure_in_listing_order_wins(self):
        installer = FakeInstaller(failures={"2023-01-08": NetworkError("reset by peer")})

        with pytest.raises(CheckFailedError) as exc_info:
            _check(FakeReleases("2023-01-08", "not-a-date"), FakeProbe(_local("2022-08-15")), installer)

        assert [tag for tag, _ in exc_info.value.failures] == ["2023-01-08", "not-a-date"]
        assert isinstance(exc_info.value.first, NetworkError)

    def test_failed_install_still_reports_superseded(self):
        installer = FakeInstaller(failures={"2023-01-08": FileError("disk full")})
        seen = []

        with pytest.raises(CheckFailedError):
            asyncio.run(
                run_check(
                    request=CheckRequest(destination=DEST),
                    releases=FakeReleases("2023-01-08", "2023-01-01"),
                    probe=FakeProbe(None),
                    installer=installer,
                    hooks=PipelineHooks(outcome=seen.append),
                )
            )

        assert installer.installed == []
        assert [(o.tag, o.status) for o in seen] == [
            ("2023-01-08", CandidateStatus.FAILED),
            ("2023-01-01", CandidateStatus.SUPERSEDED),
        ]

    def test_malformed_tag_is_surfaced(self):
        with pytest.raises(CheckFailedError) as exc_info:
            _check(FakeReleases("not-a-date"), FakeProbe(_local("2022-08-15")), FakeInstaller())

        assert isinstance(exc_info.value.first, ParseError)

    def test_hooks_see_every_outcome_before_failure(self):
        seen = []
        installer = FakeInstaller(failures={"2023-01-01": FileError("disk full")})
        request = CheckRequest(destination=DEST)

        with pytest.raises(CheckFailedError):
            asyncio.run(
                run_check(
                    request=request,
                    releases=FakeReleases("2023-01-01", "nightly"),
                    probe=FakeProbe(None),
                    installer=installer,
                    hooks=PipelineHooks(outcome=seen.append),
                )
            )

        assert [(o.tag, o.status) for o in seen] == [
            ("2023-01-01", CandidateStatus.FAILED),
            ("nightly", CandidateStatus.SKIPPED),
        ]

    def test_probe_error_propagates(self):
        with pytest.raises(ParseError):
            _check(FakeReleases("2023-01-01"), FakeProbe(error=ParseError("no date version")), FakeInstaller())

    def test_download_without_installer_is_rejected(self):
        with pytest.raises(ValueError):
            _check(FakeReleases("2023-01-01"), FakeProbe(None), None, download=True)


def test_candidate_is_newer_without_local_version():
    assert candidate_is_newer(_release("2000-01-01"), channel=Channel.STABLE, local=None) is True


class TestWithRealInstaller:
    def test_destination_holds_newest_matching_release(self, settings, destination):
        requested: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            tag = request.url.path.split("/")[-2]
            requested.append(tag)
            return streamed(gzip.compress(f"rust-analyzer {tag}".encode()))

        async def go():
            async with make_client(settings, handler) as client:
                return await run_check(
                    request=CheckRequest(destination=destination),
                    releases=FakeReleases("nightly", "2023-01-08", "2023-01-01"),
                    probe=FakeProbe(None),
                    installer=ArtifactInstaller(client, settings, artifact="rust-analyzer-test.gz"),
                )

        result = asyncio.run(go())

        assert requested == ["2023-01-08"]
        assert destination.read_bytes() == b"rust-analyzer 2023-01-08"
        assert [o.status for o in result.outcomes] == [
            CandidateStatus.SKIPPED,
            CandidateStatus.INSTALLED,
            CandidateStatus.SUPERSEDED,
        ]
        assert sorted(p.name for p in destination.parent.iterdir()) == [destination.name]
