# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import collections.abc
import concurrent.futures
import dataclasses
import logging

import git

import gitutil
import release_notes.config as rnc
import release_notes.model as rnm
import release_notes.provider as rnp
import release_notes.tags as rnt
import version

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class ReleaseSet:
    '''
    branch_merge_commits: all merge commits reachable from the branch tip (in walk order)
    released_commits: merge commits already contained in a release (hexsha -> commit)
    release_tag_commits: commits of those release-tags which are part of the branch's history
    '''
    branch_merge_commits: list[git.Commit]
    released_commits: dict[str, git.Commit] = dataclasses.field(default_factory=dict)
    release_tag_commits: list[str] = dataclasses.field(default_factory=list)


def is_merge_commit(commit: git.Commit) -> bool:
    return len(commit.parents) > 1


def merge_commits(
    commits: collections.abc.Iterable[git.Commit],
) -> collections.abc.Generator[git.Commit, None, None]:
    for commit in commits:
        if is_merge_commit(commit):
            yield commit


def union_commits(
    *commit_mappings: collections.abc.Mapping[str, git.Commit],
) -> dict[str, git.Commit]:
    '''
    returns the union of the given mappings (hexsha -> commit). As equal keys always refer to the
    same commit, it does not matter which value is kept (the first one is).
    '''
    union = {}
    for commit_mapping in commit_mappings:
        for hexsha, commit in commit_mapping.items():
            union.setdefault(hexsha, commit)
    return union


def build_release_set(
    git_helper: gitutil.GitHelper,
    branch: rnm.BranchReference,
    tag_commits: collections.abc.Iterable[str],
) -> ReleaseSet:
    '''
    determines the merge commits of the given branch, and those of them which were already
    released (i.e. which are reachable from any of the given release-tag commits). Release-tag
    commits which are not part of the branch's history are ignored.
    '''
    branch_ancestors = list(git_helper.iter_ancestors(branch))
    release_set = ReleaseSet(
        branch_merge_commits=list(merge_commits(branch_ancestors)),
    )
    logger.info(
        f'{branch.name=} has {len(release_set.branch_merge_commits)} merge commit(s) '
        f'({len(branch_ancestors)} commits in total)'
    )

    if not (tag_commits := list(tag_commits)):
        return release_set

    branch_ancestor_shas = {commit.hexsha for commit in branch_ancestors}

    for tag_commit in dict.fromkeys(tag_commits):
        # only tags from the branch's own history are relevant
        if tag_commit not in branch_ancestor_shas:
            logger.debug(f'{tag_commit=} is not an ancestor of {branch.name=} - ignoring')
            continue

        release_set.release_tag_commits.append(tag_commit)
        released_commits = {
            commit.hexsha: commit
            for commit in merge_commits(git_helper.iter_ancestors(tag_commit))
        }
        release_set.released_commits = union_commits(
            release_set.released_commits,
            released_commits,
        )

    logger.info(
        f'{len(release_set.release_tag_commits)} release-tag(s) are part of {branch.name=}, '
        f'covering {len(release_set.released_commits)} released merge commit(s)'
    )

    return release_set


def unreleased_merge_commits(
    release_set: ReleaseSet,
) -> list[git.Commit]:
    released_commits = release_set.released_commits
    return [
        commit for commit in release_set.branch_merge_commits
        if commit.hexsha not in released_commits
    ]


def _extract_pull_request(
    provider: rnp.PullRequestProvider,
    hexsha: str,
    message: str,
) -> rnm.PullRequestRecord | None:
    if not (pull_request := provider.extract_pull_request(message)):
        logger.debug(f'{hexsha=} does not reference a pull request')
        return None

    return dataclasses.replace(pull_request, merge_commit=hexsha)


def build_history(
    unreleased_commits: collections.abc.Sequence[git.Commit],
    provider: rnp.PullRequestProvider,
    max_workers: int=8,
) -> list[rnm.PullRequestRecord]:
    '''
    looks up the pull requests for the given (unreleased) merge commits using the given provider.
    Lookups are run concurrently; commits for which no pull request could be found (or for which
    the lookup failed) are omitted. The returned pull requests are ordered like the passed
    commits.
    '''
    if not unreleased_commits:
        return []

    results: list[tuple[int, rnm.PullRequestRecord]] = []

    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        # read commit-messages from calling thread (git-object-access is not thread-safe)
        futures = {
            executor.submit(
                _extract_pull_request,
                provider,
                commit.hexsha,
                commit.message,
            ): (idx, commit.hexsha)
            for idx, commit in enumerate(unreleased_commits)
        }

        for future in concurrent.futures.as_completed(futures):
            idx, hexsha = futures[future]
            try:
                pull_request = future.result()
            except Exception as e:
                logger.warning(f'failed to look up pull request for {hexsha=}: {e}')
                continue

            if pull_request:
                results.append((idx, pull_request))

    results.sort(key=lambda result: result[0])
    logger.info(
        f'found {len(results)} pull request(s) for {len(unreleased_commits)} unreleased '
        'merge commit(s)'
    )

    return [pull_request for _, pull_request in results]


def latest_release(
    release_tags: collections.abc.Iterable[rnm.Tag],
    release_tag_commits: collections.abc.Iterable[str],
) -> rnm.Tag | None:
    '''
    returns the greatest of the given release-tags (expected to be of the selected release line)
    which point to one of the given commits (i.e. which are part of the branch's history)
    '''
    release_tag_commits = set(release_tag_commits)
    return version.greatest_version(
        versions=(tag for tag in release_tags if tag.commit in release_tag_commits),
        converter=lambda tag: tag.name,
    )


def unreleased_pull_requests(
    git_helper: gitutil.GitHelper,
    cfg: rnc.ReleaseNotesCfg,
    provider: rnp.PullRequestProvider,
) -> list[rnm.PullRequestRecord]:
    '''
    returns the pull requests merged into the configured release branch which were not yet
    released, i.e. whose merge commits are not reachable from any release-tag (of the configured
    release line) on that branch.

    @raises gitutil.BranchNotFound if the configured release branch does not exist
    '''
    # fail early (before walking any commits) for unknown branches
    branch = git_helper.branch(cfg.release_branch)
    logger.info(f'determining unreleased pull requests for {branch.name=} ({branch.commit})')

    release_tags = rnt.release_tags(
        tags=git_helper.tags(),
        release_line=cfg.release_line,
        annotated_only=cfg.annotated_tags_only,
    )

    release_set = build_release_set(
        git_helper=git_helper,
        branch=branch,
        tag_commits=[tag.commit for tag in release_tags],
    )

    if release_tag := latest_release(
        release_tags=release_tags,
        release_tag_commits=release_set.release_tag_commits,
    ):
        logger.info(f'latest release on branch: {release_tag.name}')
    else:
        logger.info('branch has not been released, yet')

    unreleased_commits = unreleased_merge_commits(release_set)
    logger.info(f'found {len(unreleased_commits)} unreleased merge commit(s)')

    return build_history(
        unreleased_commits=unreleased_commits,
        provider=provider,
        max_workers=cfg.max_workers,
    )
