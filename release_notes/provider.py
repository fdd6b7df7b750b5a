# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import abc
import logging
import re

import github3
import github3.exceptions
import github3.repos

import release_notes.config as rnc
import release_notes.model as rnm

logger = logging.getLogger(__name__)


class PullRequestProvider(abc.ABC):
    @abc.abstractmethod
    def extract_pull_request(self, message: str) -> rnm.PullRequestRecord | None:
        '''
        returns the pull request the merge commit w/ the given message was created for, or `None`
        if message does not reference a pull request.
        '''
        raise NotImplementedError


# subject lines (or messages) of merge commits as created by common hosting platforms
_merge_message_patterns = (
    # bitbucket server
    re.compile(
        r'\AMerge pull request #(?P<number>\d+) in \S+ from (?P<source_branch>\S+) to \S+',
    ),
    # github
    re.compile(r'\AMerge pull request #(?P<number>\d+) from (?P<source_branch>\S+)'),
    # bitbucket cloud
    re.compile(r'\AMerged in (?P<source_branch>\S+) \(pull request #(?P<number>\d+)\)'),
    # azure devops / tfs
    re.compile(r'\AMerged PR (?P<number>\d+): (?P<title>[^\n]+)'),
    # gitlab
    re.compile(
        r'\AMerge branch \'(?P<source_branch>[^\']+)\'.*?^See merge request \S+!(?P<number>\d+)',
        re.MULTILINE | re.DOTALL,
    ),
)


def _title_from_body(message: str) -> str | None:
    _, _, body = message.partition('\n')
    for line in body.splitlines():
        if not (line := line.strip()):
            continue
        if line.startswith('See merge request'):
            continue
        return line
    return None


class MergeMessageProvider(PullRequestProvider):
    '''
    extracts pull requests from merge commit messages w/o any remote lookups. Only the
    information contained in the message (number, source-branch and title) is available.
    '''
    def extract_pull_request(self, message: str) -> rnm.PullRequestRecord | None:
        if not message:
            return None

        message = message.strip()
        for pattern in _merge_message_patterns:
            if not (match := pattern.search(message)):
                continue

            groups = match.groupdict()
            title = (
                groups.get('title')
                or _title_from_body(message)
                or message.splitlines()[0]
            )
            return rnm.PullRequestRecord(
                number=int(groups['number']),
                title=title.strip(),
                source_branch=groups.get('source_branch'),
            )

        return None


class GithubPullRequestProvider(PullRequestProvider):
    '''
    looks up pull requests referenced by merge commit messages using the GitHub API
    '''
    def __init__(
        self,
        repository: github3.repos.Repository,
        merge_message_provider: MergeMessageProvider | None=None,
    ):
        self.repository = repository
        self.merge_message_provider = merge_message_provider or MergeMessageProvider()

    def extract_pull_request(self, message: str) -> rnm.PullRequestRecord | None:
        if not (merge_message_pr := self.merge_message_provider.extract_pull_request(message)):
            return None

        number = merge_message_pr.number
        try:
            pull_request = self.repository.pull_request(number)
        except github3.exceptions.NotFoundError:
            logger.warning(f'pull request #{number} not found in {self.repository.full_name}')
            return None

        if not pull_request:
            return None

        return rnm.PullRequestRecord(
            number=pull_request.number,
            title=pull_request.title,
            source_branch=pull_request.head.ref if pull_request.head else None,
            author=pull_request.user.login if pull_request.user else None,
            body=pull_request.body,
            url=pull_request.html_url,
        )


def github_repository(github_cfg: rnc.GithubCfg) -> github3.repos.Repository:
    host, org, repo = github_cfg.repo_coordinates()

    if host == 'github.com':
        github_api = github3.GitHub(token=github_cfg.token())
    else:
        github_api = github3.GitHubEnterprise(
            url=f'https://{host}',
            token=github_cfg.token(),
        )

    return github_api.repository(org, repo)


def provider_from_cfg(cfg: rnc.ReleaseNotesCfg) -> PullRequestProvider:
    if cfg.provider is rnc.ProviderType.MERGE_MESSAGE:
        return MergeMessageProvider()
    elif cfg.provider is rnc.ProviderType.GITHUB:
        return GithubPullRequestProvider(
            repository=github_repository(cfg.github),
        )
    else:
        raise NotImplementedError(cfg.provider)
