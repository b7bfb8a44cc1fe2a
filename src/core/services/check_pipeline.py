"""`check` orchestration.

Single pass, no persisted state: probe the local install, fetch one page of
releases, judge every candidate (channel filter -> staleness decision) and
install at most one of them. A failing candidate never stops its siblings,
but the run as a whole fails with the first failure in listing order.

The CLI only supplies adapters and hooks; printing stays out of this module.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from core.domain.channel import Channel
from core.domain.models import (
    CandidateOutcome,
    CandidateStatus,
    CheckResult,
    DonePage,
    LocalVersion,
    Release,
)
from core.errors import CheckFailedError, DownloaderError
from core.interfaces.sources import ArtifactSink, ReleaseSource, VersionProbe
from core.services.versions import is_newer

logger = logging.getLogger(__name__)

FIRST_PAGE = 1


@dataclass
class CheckRequest:
    """Parameters that control the check pipeline."""

    destination: Path
    channel: Channel = Channel.STABLE
    download: bool = True
    per_page: int = 2


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers."""

    outcome: Callable[[CandidateOutcome], None] | None = None
    local_version: Callable[[LocalVersion | None], None] | None = None


def candidate_is_newer(
    release: Release,
    *,
    channel: Channel,
    local: LocalVersion | None,
) -> bool:
    """Staleness rule for one candidate that already passed the channel filter.

    No local install, or the nightly channel, always counts as newer; the
    nightly tag carries no date to compare.
    """

    if local is None:
        return True
    if channel is Channel.NIGHTLY:
        return True
    return is_newer(local.date_version, release.tag)


def _decide(
    release: Release,
    *,
    request: CheckRequest,
    local: LocalVersion | None,
) -> CandidateStatus:
    if not request.channel.accepts(release.tag):
        logger.debug("Skipping %s: not on the %s channel", release.tag, request.channel.label())
        return CandidateStatus.SKIPPED

    if not candidate_is_newer(release, channel=request.channel, local=local):
        logger.info("Current version is up to date with %s", release.tag)
        return CandidateStatus.UP_TO_DATE

    logger.info("New version available: %s", release.tag)
    return CandidateStatus.AVAILABLE


async def _install(release: Release, *, request: CheckRequest, installer: ArtifactSink) -> CandidateOutcome:
    logger.info("Downloading rust-analyzer %s", release.tag)
    await installer.install(release.tag, request.destination)
    return CandidateOutcome(release=release, status=CandidateStatus.INSTALLED)


async def run_check(
    *,
    request: CheckRequest,
    releases: ReleaseSource,
    probe: VersionProbe,
    installer: ArtifactSink | None = None,
    hooks: PipelineHooks | None = None,
) -> CheckResult:
    """Run one check pass.

    Every candidate is judged; in download mode only the first newer one in
    listing order (the newest, since the API lists newest first) is
    installed and the other newer ones are reported as superseded.

    Raises:
        DownloaderError: probing or listing failed (nothing else ran).
        ValueError: download mode without an installer.
        CheckFailedError: at least one candidate failed; every candidate
            was still judged and reported.
    """

    if request.download and installer is None:
        raise ValueError("download mode requires an installer")
    sink = installer if request.download else None
    hooks = hooks or PipelineHooks()

    local = await probe.probe()
    if local is None:
        logger.info("No local rust-analyzer found, the first matching release will be installed")
    else:
        logger.info("Local rust-analyzer %s (%s)", local.semantic_version, local.date_version)
    if hooks.local_version:
        hooks.local_version(local)

    page = await releases.list(FIRST_PAGE, request.per_page)
    result = CheckResult(local_version=local)
    if isinstance(page, DonePage):
        logger.info("No releases listed")
        return result

    outcomes: list[CandidateOutcome] = []
    target: int | None = None
    for index, release in enumerate(page.releases):
        try:
            status = _decide(release, request=request, local=local)
        except DownloaderError as exc:
            outcomes.append(CandidateOutcome(release=release, status=CandidateStatus.FAILED, error=exc))
            continue
        if status is CandidateStatus.AVAILABLE and sink is not None:
            if target is None:
                target = index
            else:
                status = CandidateStatus.SUPERSEDED
        outcomes.append(CandidateOutcome(release=release, status=status))

    if target is not None and sink is not None:
        release = page.releases[target]
        try:
            outcomes[target] = await _install(release, request=request, installer=sink)
        except DownloaderError as exc:
            outcomes[target] = CandidateOutcome(release=release, status=CandidateStatus.FAILED, error=exc)

    failures: list[tuple[str, DownloaderError]] = []
    for outcome in outcomes:
        if isinstance(outcome.error, DownloaderError):
            logger.error("Release %s failed: %s", outcome.tag, outcome.error.format_full())
            failures.append((outcome.tag, outcome.error))
        result.outcomes.append(outcome)
        if hooks.outcome:
            hooks.outcome(outcome)

    if failures:
        raise CheckFailedError(failures)
    return result
