# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import collections.abc
import itertools
import logging

import git

import ci.util
import release_notes.model as rnm

logger = logging.getLogger(__name__)


class BranchNotFound(ci.util.Failure):
    pass


class GitHelper:
    '''
    read-only accessor for the commit-graph of a (local) git-repository. Branches, tags and
    commits are read from the repository as-is; nothing is fetched from, or pushed to, remotes.
    '''
    def __init__(
        self,
        repo,
    ):
        if repo is None:
            raise ValueError(repo)
        if isinstance(repo, str):
            try:
                repo = git.Repo(
                    ci.util.existing_dir(repo),
                    search_parent_directories=True,
                )
            except git.exc.InvalidGitRepositoryError as igre:
                raise ci.util.Failure(f'not a git repository: {repo}') from igre
        if not isinstance(repo, git.Repo):
            raise ValueError(repo)

        self.repo = repo

    @property
    def repo_path(self) -> str:
        return self.repo.working_tree_dir or self.repo.git_dir

    def tags(self) -> list[rnm.Tag]:
        '''
        returns all tags of the repository. Tags pointing to objects other than commits (e.g.
        trees or blobs) are returned w/ `commit` set to `None`.
        '''
        tags = []
        for tag_ref in self.repo.tags:
            tag_ref: git.TagReference
            try:
                commit_sha = tag_ref.commit.hexsha
            except ValueError as ve:
                logger.debug(f'{tag_ref.name=} does not resolve to a commit: {ve}')
                commit_sha = None

            tags.append(rnm.Tag(
                name=tag_ref.name,
                commit=commit_sha,
                is_annotated=tag_ref.tag is not None,
            ))

        return tags

    def _branch_refs(self) -> collections.abc.Iterable[git.Reference]:
        return itertools.chain(
            self.repo.heads,
            *(remote.refs for remote in self.repo.remotes),
        )

    def branch(self, name: str) -> rnm.BranchReference:
        '''
        resolves the given branch name (either a local branch, e.g. `main`, a remote-tracking
        branch, e.g. `origin/main`, or a full ref-path, e.g. `refs/heads/main`) to its tip.

        @raises BranchNotFound if there is no such branch
        '''
        if not name:
            raise BranchNotFound('branch name must not be empty')

        for ref in self._branch_refs():
            if name in (ref.name, ref.path):
                return rnm.BranchReference(
                    name=name,
                    commit=ref.commit.hexsha,
                )

        raise BranchNotFound(f'{name=} is not a branch of {self.repo_path}')

    def iter_ancestors(
        self,
        rev: str | rnm.BranchReference,
    ) -> collections.abc.Generator[git.Commit, None, None]:
        '''
        lazily yields all commits reachable from `rev` (including the commit `rev` points to),
        following all parent edges. Each commit is yielded exactly once; apart from that, no
        particular ordering is guaranteed.
        '''
        if isinstance(rev, rnm.BranchReference):
            rev = rev.commit

        yield from self.repo.iter_commits(rev)
