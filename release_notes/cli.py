#! /usr/bin/env python3
# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

import argparse
import dataclasses
import logging
import sys

import yaml

import ci.log
import ci.util
import gitutil
import release_notes.config as rnc
import release_notes.fetch as rnf
import release_notes.markdown as rnmd
import release_notes.provider as rnp

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    ''' Parses CLI for listing unreleased pull requests '''
    parser = argparse.ArgumentParser(
        description='List pull requests merged into a release branch which were not yet released'
    )
    parser.add_argument(
        '--repo',
        default='.',
        help='path to the (local) git repository (default: current directory)',
    )
    parser.add_argument(
        '--config', '-c',
        help=f'configuration file (default: <repo>/{rnc.DEFAULT_CFG_FILE_NAME}, if present)',
    )
    parser.add_argument(
        '--branch', '-b',
        help='release branch (overrides configuration)',
    )
    parser.add_argument(
        '--release-line',
        help='release line of release-tags to honour, e.g. `rc` (default: final versions)',
    )
    parser.add_argument(
        '--annotated-tags-only',
        action='store_true',
        default=None,
        help='ignore lightweight tags',
    )
    parser.add_argument(
        '--provider',
        choices=[p.value for p in rnc.ProviderType],
        help='how to look up pull requests for merge commits',
    )
    parser.add_argument(
        '--max-workers',
        type=int,
        help='max. amount of concurrent pull request lookups',
    )
    parser.add_argument(
        '--format', '-f',
        choices=('markdown', 'yaml'),
        default='markdown',
    )
    parser.add_argument(
        '--title',
        help='title to render (markdown only)',
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
    )

    return parser.parse_args(argv)


def render(pull_requests, output_format: str, title: str | None=None) -> str:
    if output_format == 'yaml':
        return yaml.safe_dump(
            [dataclasses.asdict(pull_request) for pull_request in pull_requests],
            sort_keys=False,
        )
    return rnmd.render(pull_requests, title=title)


def unreleased_pull_requests_cli(argv=None):
    ''' CLI wrapper for listing unreleased pull requests '''
    args = parse_args(argv)

    ci.log.configure_default_logging(
        stdout_level=logging.DEBUG if args.verbose else logging.INFO,
    )

    try:
        git_helper = gitutil.GitHelper(repo=args.repo)
        cfg = rnc.load_cfg(
            repo_path=git_helper.repo_path,
            cfg_path=args.config,
            overrides={
                'release_branch': args.branch,
                'release_line': args.release_line,
                'annotated_tags_only': args.annotated_tags_only,
                'provider': args.provider,
                'max_workers': args.max_workers,
            },
        )
        pull_requests = rnf.unreleased_pull_requests(
            git_helper=git_helper,
            cfg=cfg,
            provider=rnp.provider_from_cfg(cfg),
        )
    except ci.util.Failure as f:
        print(f'✗ {f}', file=sys.stderr)
        sys.exit(1)

    sys.stdout.write(render(
        pull_requests=pull_requests,
        output_format=args.format,
        title=args.title,
    ))
    sys.exit(0)


if __name__ == '__main__':
    unreleased_pull_requests_cli()
