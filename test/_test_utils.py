# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import git


def init_repo(path) -> git.Repo:
    repo = git.Repo.init(path)

    # required for creating annotated tags
    with repo.config_writer() as cfg_writer:
        cfg_writer.set_value('user', 'name', 'Test User')
        cfg_writer.set_value('user', 'email', 'test.user@example.com')

    return repo


class CommitGraphBuilder:
    '''
    creates (empty) commits w/ explicitly given parents, without touching HEAD or the worktree.
    Commits are remembered by name, which is also used as commit message, unless a message is
    passed explicitly.
    '''
    def __init__(self, repo: git.Repo):
        self.repo = repo
        self.commits: dict[str, git.Commit] = {}

    def commit(self, name: str, *parents: str, message: str=None) -> git.Commit:
        commit = self.repo.index.commit(
            message=message or name,
            parent_commits=[self.commits[parent] for parent in parents],
            head=False,
        )
        self.commits[name] = commit
        return commit

    def merge(self, name: str, parent: str, merged: str, pr_number: int=None) -> git.Commit:
        if pr_number is None:
            message = f'Merge branch {merged} ({name})'
        else:
            message = (
                f'Merge pull request #{pr_number} from org/{merged}\n\n'
                f'{name}: pull request {pr_number}'
            )
        return self.commit(name, parent, merged, message=message)

    def branch(self, name: str, commit: str) -> git.Head:
        return self.repo.create_head(name, self.commits[commit])

    def tag(self, name: str, commit: str, annotated: bool=False) -> git.TagReference:
        if annotated:
            return self.repo.create_tag(name, ref=self.commits[commit], message=f'release {name}')
        return self.repo.create_tag(name, ref=self.commits[commit])

    def sha(self, *names: str) -> set[str]:
        return {self.commits[name].hexsha for name in names}


def shas(commits) -> set[str]:
    return {commit.hexsha for commit in commits}
