'''
Unreleased Pull Request Collector

Determines the pull requests merged into a release branch which were not yet released.

A pull request is considered to be released if its merge commit is reachable from a release-tag
(a tag named like a version, e.g. `v1.2.3` or `1.2.3-rc.1`) which itself is part of the release
branch's history. Release-tags are grouped into release lines by the first segment of their
prerelease-tag (e.g. `rc` for `1.2.3-rc.1`, or the empty string for final versions); only tags
of the configured release line are honoured.

Pull requests are looked up for the remaining (unreleased) merge commits, either by parsing the
merge commit messages, or from GitHub.
'''
