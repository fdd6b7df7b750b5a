# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import dataclasses
import enum
import logging
import os

import dacite

import ci.util

logger = logging.getLogger(__name__)

DEFAULT_CFG_FILE_NAME = '.release-notes.yaml'
GITHUB_TOKEN_ENV_VAR = 'GITHUB_TOKEN'


class ProviderType(enum.StrEnum):
    MERGE_MESSAGE = 'merge-message'
    GITHUB = 'github'


@dataclasses.dataclass
class GithubCfg:
    '''
    repo_url: <host>/<org>/<repo> (e.g. github.com/gardener/cc-utils); a scheme is tolerated
    auth_token: if absent, the token is read from env-var `GITHUB_TOKEN` (anonymous access if
                unset)
    '''
    repo_url: str
    auth_token: str | None = None

    def token(self) -> str | None:
        return self.auth_token or os.environ.get(GITHUB_TOKEN_ENV_VAR)

    def repo_coordinates(self) -> tuple[str, str, str]:
        repo_url = self.repo_url.removeprefix('https://').removeprefix('http://')
        try:
            host, org, repo = repo_url.strip('/').split('/')
        except ValueError:
            raise ci.util.Failure(
                f'{self.repo_url=} is not a valid repository url (expected: <host>/<org>/<repo>)'
            )
        return host, org, repo.removesuffix('.git')


@dataclasses.dataclass
class ReleaseNotesCfg:
    '''
    release_branch: branch to determine unreleased pull requests for (e.g. `main`, `origin/main`)
    release_line: release line of the release-tags to consider (e.g. `rc` for `1.0.0-rc.1`);
                  defaults to final versions
    annotated_tags_only: if set, lightweight tags are ignored
    max_workers: max. amount of concurrent pull request lookups
    provider: how to retrieve pull requests for merge commits
    github: required for provider `github`
    '''
    release_branch: str
    release_line: str | None = None
    annotated_tags_only: bool = False
    max_workers: int = 8
    provider: ProviderType = ProviderType.MERGE_MESSAGE
    github: GithubCfg | None = None

    def validate(self):
        if not self.release_branch:
            raise ci.util.Failure('release-branch must be configured')
        if self.max_workers < 1:
            raise ci.util.Failure(f'{self.max_workers=} must be a positive number')
        if self.provider is ProviderType.GITHUB:
            if not self.github:
                raise ci.util.Failure(f'github-cfg is required for {self.provider=}')
            self.github.repo_coordinates()


def _normalize_dict_keys(
    dic: dict,
    recursive: bool = False,
) -> dict:
    return {
        k.replace('-', '_').replace(' ', '_'):
        _normalize_dict_keys(v, recursive=recursive) if recursive and isinstance(v, dict) else v
        for k, v in dic.items()
    }


def cfg_from_dict(raw: dict) -> ReleaseNotesCfg:
    if not isinstance(raw, dict):
        raise ci.util.Failure(f'release-notes configuration must be a mapping, got: {type(raw)}')

    raw = _normalize_dict_keys(raw, recursive=True)
    if not raw.get('release_branch'):
        raise ci.util.Failure('release-branch must be configured')

    try:
        cfg = dacite.from_dict(
            data_class=ReleaseNotesCfg,
            data=raw,
            config=dacite.Config(
                cast=[enum.Enum],
                strict=True,
            ),
        )
    except (dacite.DaciteError, ValueError) as e:
        raise ci.util.Failure(f'invalid release-notes configuration: {e}') from e

    cfg.validate()
    return cfg


def load_cfg(
    repo_path: str='.',
    cfg_path: str | None=None,
    overrides: dict | None=None,
) -> ReleaseNotesCfg:
    '''
    reads release-notes configuration from the given yaml file (or, if absent, from
    `.release-notes.yaml` from the repository's root directory, if present). Values from
    `overrides` which are not `None` take precedence.
    '''
    if not cfg_path:
        default_cfg_path = os.path.join(repo_path, DEFAULT_CFG_FILE_NAME)
        if os.path.isfile(default_cfg_path):
            cfg_path = default_cfg_path

    if cfg_path:
        logger.info(f'reading configuration from {cfg_path=}')
        raw = ci.util.parse_yaml_file(cfg_path) or {}
        if not isinstance(raw, dict):
            raise ci.util.Failure(f'{cfg_path=} does not contain a mapping')
        raw = _normalize_dict_keys(raw, recursive=True)
    else:
        raw = {}

    for key, value in (overrides or {}).items():
        if value is None:
            continue
        raw[key] = value

    return cfg_from_dict(raw)
