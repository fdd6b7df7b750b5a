import logging
import unittest.mock

import pytest

import gitutil
import release_notes.config as rnc
import release_notes.fetch as rnf
import release_notes.model as rnm
import release_notes.provider as rnp
import release_notes.tags as rnt

from _test_utils import (
    CommitGraphBuilder,
    init_repo,
    shas,
)


@pytest.fixture
def graph(tmpdir):
    r'''
    release:  c1 <- c2 <- c3 <- c4
                \   /         /
                 s1         s2
                \
                 x1 (not merged into release)

    c2 and c4 are merge commits
    '''
    graph = CommitGraphBuilder(init_repo(tmpdir))

    graph.commit('c1')
    graph.commit('s1', 'c1')
    graph.merge('c2', 'c1', 's1', pr_number=1)
    graph.commit('c3', 'c2')
    graph.commit('s2', 'c3')
    graph.merge('c4', 'c3', 's2', pr_number=2)
    graph.branch('release', 'c4')

    graph.commit('x1', 'c1')
    graph.branch('feature', 'x1')

    return graph


@pytest.fixture
def git_helper(graph):
    return gitutil.GitHelper(repo=graph.repo)


def unreleased(git_helper, release_line=None, annotated_tags_only=False) -> set[str]:
    branch = git_helper.branch('release')
    tag_commits = rnt.release_tag_commits(
        tags=git_helper.tags(),
        release_line=release_line,
        annotated_only=annotated_tags_only,
    )
    release_set = rnf.build_release_set(
        git_helper=git_helper,
        branch=branch,
        tag_commits=tag_commits,
    )
    return shas(rnf.unreleased_merge_commits(release_set))


class StaticProvider(rnp.PullRequestProvider):
    def __init__(self, results: dict):
        self.results = results
        self.messages = []

    def extract_pull_request(self, message):
        self.messages.append(message)
        result = self.results[message]
        if isinstance(result, Exception):
            raise result
        return result


def commit(hexsha, message):
    return unittest.mock.Mock(hexsha=hexsha, message=message)


def test_no_tags(git_helper, graph):
    assert unreleased(git_helper) == graph.sha('c2', 'c4')


def test_tag_on_merge_commit(git_helper, graph):
    graph.tag('v1.0.0', 'c2')

    assert unreleased(git_helper) == graph.sha('c4')


def test_tag_on_regular_commit(git_helper, graph):
    graph.tag('v1.0.0', 'c3')

    assert unreleased(git_helper) == graph.sha('c4')


def test_tag_on_branch_tip(git_helper, graph):
    graph.tag('v1.0.0', 'c1')
    graph.tag('v2.0.0', 'c4')

    assert unreleased(git_helper) == set()


def test_tag_not_on_branch_is_ignored(git_helper, graph):
    graph.tag('v1.0.0-rc.1', 'x1')

    assert unreleased(git_helper, release_line='rc') == graph.sha('c2', 'c4')

    # tag on side branch which is merged into release counts
    graph.tag('v1.0.0-rc.2', 's2')
    assert unreleased(git_helper, release_line='rc') == graph.sha('c4')


def test_only_tags_of_selected_release_line(git_helper, graph):
    graph.tag('v1.0.0-rc.1', 'c4')
    graph.tag('v0.1.0', 'c2')

    assert unreleased(git_helper) == graph.sha('c4')
    assert unreleased(git_helper, release_line='rc') == set()


def test_release_line_fallback(git_helper, graph):
    graph.tag('v1.0.0', 'c2')

    # no `beta` release-tags -> falls back to final versions
    assert unreleased(git_helper, release_line='beta') == graph.sha('c4')


def test_annotated_tags_only(git_helper, graph):
    graph.tag('v1.0.0', 'c2')

    assert unreleased(git_helper, annotated_tags_only=True) == graph.sha('c2', 'c4')

    graph.tag('v1.0.1', 'c2', annotated=True)

    assert unreleased(git_helper, annotated_tags_only=True) == graph.sha('c4')


def test_non_version_tags_are_ignored(git_helper, graph):
    graph.tag('bogus-tag', 'c4')
    graph.tag('latest', 'c2')

    assert unreleased(git_helper) == graph.sha('c2', 'c4')


def test_release_set_contains_only_merge_commits(git_helper, graph):
    graph.tag('v1.0.0', 'c4')

    release_set = rnf.build_release_set(
        git_helper=git_helper,
        branch=git_helper.branch('release'),
        tag_commits=[graph.commits['c4'].hexsha, graph.commits['x1'].hexsha],
    )

    assert shas(release_set.branch_merge_commits) == graph.sha('c2', 'c4')
    assert set(release_set.released_commits) == graph.sha('c2', 'c4')
    assert all(rnf.is_merge_commit(c) for c in release_set.released_commits.values())
    assert release_set.release_tag_commits == [graph.commits['c4'].hexsha]


def test_build_release_set_without_tags(git_helper, graph):
    release_set = rnf.build_release_set(
        git_helper=git_helper,
        branch=git_helper.branch('release'),
        tag_commits=[],
    )

    assert release_set.released_commits == {}
    assert shas(rnf.unreleased_merge_commits(release_set)) == graph.sha('c2', 'c4')


def test_idempotence(git_helper, graph):
    graph.tag('v1.0.0', 'c2')

    assert unreleased(git_helper) == unreleased(git_helper)


def test_union_commits():
    a = object()
    b = object()

    union = rnf.union_commits({'a': a}, {'a': a, 'b': b}, {})

    assert union == {'a': a, 'b': b}
    assert rnf.union_commits() == {}


def test_build_history_keeps_commit_order():
    commits = [commit(f'sha{i}', f'message {i}') for i in range(20)]
    provider = StaticProvider({
        c.message: rnm.PullRequestRecord(number=i, title=c.message)
        for i, c in enumerate(commits)
    })

    history = rnf.build_history(
        unreleased_commits=commits,
        provider=provider,
        max_workers=4,
    )

    assert [pr.number for pr in history] == list(range(20))
    assert [pr.merge_commit for pr in history] == [c.hexsha for c in commits]


def test_build_history_isolates_failures(caplog):
    commits = [
        commit('sha0', 'ok'),
        commit('sha1', 'boom'),
        commit('sha2', 'no-match'),
        commit('sha3', 'also ok'),
    ]
    provider = StaticProvider({
        'ok': rnm.PullRequestRecord(number=1, title='ok'),
        'boom': RuntimeError('provider failure'),
        'no-match': None,
        'also ok': rnm.PullRequestRecord(number=4, title='also ok'),
    })

    with caplog.at_level(logging.WARNING):
        history = rnf.build_history(
            unreleased_commits=commits,
            provider=provider,
        )

    assert [pr.number for pr in history] == [1, 4]
    assert sorted(provider.messages) == sorted(c.message for c in commits)
    assert 'sha1' in caplog.text


def test_build_history_without_commits():
    provider = StaticProvider({})

    assert rnf.build_history(unreleased_commits=[], provider=provider) == []
    assert provider.messages == []


def test_unreleased_pull_requests(git_helper, graph):
    graph.tag('v1.0.0', 'c2')

    pull_requests = rnf.unreleased_pull_requests(
        git_helper=git_helper,
        cfg=rnc.ReleaseNotesCfg(release_branch='release'),
        provider=rnp.MergeMessageProvider(),
    )

    assert len(pull_requests) == 1
    pull_request = pull_requests[0]
    assert pull_request.number == 2
    assert pull_request.title == 'c4: pull request 2'
    assert pull_request.source_branch == 'org/s2'
    assert pull_request.merge_commit == graph.commits['c4'].hexsha


def test_unreleased_pull_requests_without_tags(git_helper, graph):
    pull_requests = rnf.unreleased_pull_requests(
        git_helper=git_helper,
        cfg=rnc.ReleaseNotesCfg(release_branch='release'),
        provider=rnp.MergeMessageProvider(),
    )

    assert {pr.number for pr in pull_requests} == {1, 2}


def test_unknown_branch_fails_before_walking(git_helper):
    with unittest.mock.patch.object(git_helper, 'iter_ancestors') as iter_ancestors:
        with pytest.raises(gitutil.BranchNotFound):
            rnf.unreleased_pull_requests(
                git_helper=git_helper,
                cfg=rnc.ReleaseNotesCfg(release_branch='does-not-exist'),
                provider=rnp.MergeMessageProvider(),
            )

    iter_ancestors.assert_not_called()


def test_latest_release_honours_release_line(git_helper, graph):
    graph.tag('v1.0.0', 'c2')
    graph.tag('v2.0.0-rc.1', 'c2')
    graph.tag('v0.9.0', 'x1') # not part of release branch

    release_tags = rnt.release_tags(tags=git_helper.tags())
    release_set = rnf.build_release_set(
        git_helper=git_helper,
        branch=git_helper.branch('release'),
        tag_commits=[tag.commit for tag in release_tags],
    )

    latest = rnf.latest_release(
        release_tags=release_tags,
        release_tag_commits=release_set.release_tag_commits,
    )
    assert latest.name == 'v1.0.0'

    rc_tags = rnt.release_tags(tags=git_helper.tags(), release_line='rc')
    assert rnf.latest_release(
        release_tags=rc_tags,
        release_tag_commits=release_set.release_tag_commits,
    ).name == 'v2.0.0-rc.1'


def test_latest_release_without_tags_on_branch(git_helper, graph):
    graph.tag('v0.9.0', 'x1')

    release_tags = rnt.release_tags(tags=git_helper.tags())

    assert rnf.latest_release(release_tags=release_tags, release_tag_commits=[]) is None


def test_unreleased_pull_requests_logs_latest_release(git_helper, graph, caplog):
    graph.tag('v1.0.0', 'c2')
    graph.tag('v2.0.0-rc.1', 'c2')

    with caplog.at_level(logging.INFO):
        rnf.unreleased_pull_requests(
            git_helper=git_helper,
            cfg=rnc.ReleaseNotesCfg(release_branch='release'),
            provider=rnp.MergeMessageProvider(),
        )

    assert 'latest release on branch: v1.0.0' in caplog.text
    assert 'v2.0.0-rc.1' not in caplog.text
