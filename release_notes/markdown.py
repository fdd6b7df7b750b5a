# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import collections.abc
import dataclasses

import release_notes.model as rnm

NO_PULL_REQUESTS = 'no unreleased pull requests'


@dataclasses.dataclass
class Header:
    level: int
    title: str

    def __str__(self):
        return f"{'#' * self.level} {self.title}\n"  # there should be a new line after the header


@dataclasses.dataclass
class ListItem:
    level: int
    text: str

    def __str__(self):
        return f"{'  ' * (self.level - 1)}- {self.text}"


def reference_for_pull_request(pull_request: rnm.PullRequestRecord) -> str:
    if pull_request.url:
        return f'[{pull_request.reference_str}]({pull_request.url})'
    return pull_request.reference_str


def list_item_from_pull_request(pull_request: rnm.PullRequestRecord) -> ListItem:
    suffix = [reference_for_pull_request(pull_request)]
    if pull_request.author:
        suffix.append(f'@{pull_request.author}')

    # titles may (in rare cases) span multiple lines
    title = ' '.join(pull_request.title.split())

    return ListItem(
        level=1,
        text=f'{title} ({", ".join(suffix)})',
    )


def render(
    pull_requests: collections.abc.Iterable[rnm.PullRequestRecord],
    title: str | None=None,
) -> str:
    lines = []
    if title:
        lines.append(str(Header(level=1, title=title)))

    items = [
        str(list_item_from_pull_request(pull_request))
        for pull_request in pull_requests
    ]
    if items:
        lines.extend(items)
    else:
        lines.append(f'_{NO_PULL_REQUESTS}_')

    return '\n'.join(lines) + '\n'
