# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import dataclasses
import logging
import re
import typing

import semver

logger = logging.getLogger(__name__)

# [v]Major.Minor[.Patch][.Fourth][-Prerelease][+Build]
_version_tag_pattern = re.compile(
    r'[vV]?'
    r'(?P<major>[0-9]+)\.(?P<minor>[0-9]+)'
    r'(?:\.(?P<patch>[0-9]+))?'
    r'(?:\.(?P<fourth>[0-9]+))?'
    r'(?:-(?P<prerelease>[^+]*))?'
    r'(?:\+(?P<build>.*))?',
    re.DOTALL,
)


@dataclasses.dataclass(frozen=True, kw_only=True)
class ParsedVersion:
    major: int
    minor: int
    patch: int | None = None
    fourth: int | None = None
    prerelease: str | None = None
    build: str | None = None

    @property
    def release_line(self) -> str:
        '''
        the key of the release line this version belongs to: the first `.`-separated segment of
        the prerelease-tag (e.g. `rc` for `2.0.0-rc.1`), or the empty string for final versions
        '''
        if self.prerelease is None:
            return ''
        return self.prerelease.split('.', 1)[0]

    @property
    def is_final(self) -> bool:
        return not self.prerelease

    def to_semver(self) -> semver.VersionInfo:
        '''
        converts into a strict semver version. A missing patch-level defaults to `0`, a fourth
        version part is prepended to the build-metadata (and thus ignored for precedence).
        '''
        build = '.'.join(
            str(part) for part in (self.fourth, self.build)
            if part is not None and part != ''
        )
        return semver.VersionInfo(
            major=self.major,
            minor=self.minor,
            patch=self.patch or 0,
            prerelease=self.prerelease or None,
            build=build or None,
        )


def parse_version_tag(name: str) -> ParsedVersion | None:
    '''
    parses the given tag name into a `ParsedVersion`. Returns `None` if name is not a version
    (which is an expected outcome for arbitrary tags, hence no exception is raised).
    '''
    if not name or not (match := _version_tag_pattern.fullmatch(name)):
        return None

    def optional_int(group: str) -> int | None:
        if (value := match.group(group)) is None:
            return None
        return int(value)

    return ParsedVersion(
        major=int(match.group('major')),
        minor=int(match.group('minor')),
        patch=optional_int('patch'),
        fourth=optional_int('fourth'),
        prerelease=match.group('prerelease'),
        build=match.group('build'),
    )


def is_version_tag(name: str) -> bool:
    return parse_version_tag(name) is not None


T = typing.TypeVar('T')


def greatest_version(
    versions: typing.Iterable[T],
    ignore_prerelease_versions: bool=False,
    converter: typing.Callable[[T], str]=None,
) -> T | None:
    '''
    returns the greatest of the passed versions, compared using semver precedence. versions
    which cannot be parsed as version tags are silently ignored.

    if `converter` is given, it is used to retrieve the version-tag name from each element; the
    returned object is guaranteed to be identical to the passed-in one.
    '''
    greatest_candidate = None
    greatest_candidate_semver = None

    for candidate in versions:
        name = converter(candidate) if converter else candidate

        if not (parsed := parse_version_tag(name)):
            logger.debug(f'ignoring {name=} (not a version)')
            continue

        if ignore_prerelease_versions and not parsed.is_final:
            continue

        candidate_semver = parsed.to_semver()

        if greatest_candidate_semver is None or candidate_semver > greatest_candidate_semver:
            greatest_candidate_semver = candidate_semver
            greatest_candidate = candidate

    return greatest_candidate
