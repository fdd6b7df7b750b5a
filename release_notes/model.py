# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import dataclasses
import functools

import version


@dataclasses.dataclass(frozen=True)
class Tag:
    name: str
    commit: str | None # hexsha of tagged commit; None if tag does not point to a commit
    is_annotated: bool = False

    @functools.cached_property
    def parsed_version(self) -> version.ParsedVersion | None:
        return version.parse_version_tag(self.name)


@dataclasses.dataclass(frozen=True)
class BranchReference:
    name: str
    commit: str # hexsha of branch tip


@dataclasses.dataclass(kw_only=True)
class PullRequestRecord:
    number: int
    title: str
    source_branch: str | None = None
    author: str | None = None
    body: str | None = None
    url: str | None = None
    merge_commit: str | None = None

    @property
    def reference_str(self) -> str:
        return f'#{self.number}'
