# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import collections
import collections.abc
import logging

import release_notes.model as rnm

logger = logging.getLogger(__name__)


def group_by_release_line(
    tags: collections.abc.Iterable[rnm.Tag],
    annotated_only: bool=False,
) -> dict[str, list[rnm.Tag]]:
    '''
    groups the given tags by their release line (see `version.ParsedVersion.release_line`).
    Tags whose names are not versions are dropped. If `annotated_only` is set, lightweight tags
    are dropped as well.
    '''
    groups = collections.defaultdict(list)

    for tag in tags:
        if annotated_only and not tag.is_annotated:
            continue

        if not (parsed_version := tag.parsed_version):
            logger.debug(f'ignoring {tag.name=} (not a version)')
            continue

        groups[parsed_version.release_line].append(tag)

    return dict(groups)


def select_release_line(
    groups: collections.abc.Mapping[str, list[rnm.Tag]],
    release_line: str | None=None,
) -> str | None:
    '''
    returns the key of the group matching `release_line` (final versions, i.e. the empty key,
    if no release line is given). If there is no such group, falls back to the
    lexicographically smallest key. Returns `None` if there are no groups at all.
    '''
    if not groups:
        return None

    wanted = release_line or ''
    if wanted in groups:
        return wanted

    fallback = min(groups)
    logger.warning(
        f'no release-tags found for release line {wanted!r} - falling back to {fallback!r} '
        f'(available: {", ".join(repr(k) for k in sorted(groups))})'
    )
    return fallback


def release_tags(
    tags: collections.abc.Iterable[rnm.Tag],
    release_line: str | None=None,
    annotated_only: bool=False,
) -> list[rnm.Tag]:
    '''
    returns the release-tags of the selected release line (see `select_release_line`). Tags
    not pointing to a commit are dropped.
    '''
    groups = group_by_release_line(
        tags=tags,
        annotated_only=annotated_only,
    )

    if (selected := select_release_line(groups=groups, release_line=release_line)) is None:
        logger.info('did not find any release-tags')
        return []

    selected_tags = groups[selected]
    logger.info(
        f'using {len(selected_tags)} release-tag(s) of release line {selected!r}'
    )

    return [
        tag for tag in selected_tags
        if tag.commit
    ]


def release_tag_commits(
    tags: collections.abc.Iterable[rnm.Tag],
    release_line: str | None=None,
    annotated_only: bool=False,
) -> list[str]:
    '''
    returns the commits (hexshas) tagged w/ release-tags of the selected release line
    '''
    return [
        tag.commit for tag in release_tags(
            tags=tags,
            release_line=release_line,
            annotated_only=annotated_only,
        )
    ]
