import setuptools
import os

own_dir = os.path.abspath(os.path.dirname(__file__))


def requirements():
    with open(os.path.join(own_dir, 'requirements.txt')) as f:
        for line in f.readlines():
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            yield line


def test_requirements():
    yield 'pytest'


def modules():
    return [
        'gitutil',
        'version',
    ]


def version():
    with open(os.path.join(own_dir, 'VERSION')) as f:
        return f.read().strip()


setuptools.setup(
    name='pr-release-notes',
    version=version(),
    description='Determine pull requests not yet released on a release branch',
    python_requires='>=3.11',
    py_modules=modules(),
    packages=['ci', 'release_notes'],
    install_requires=list(requirements()),
    extras_require={
        'test': list(test_requirements()),
    },
    entry_points={
        'console_scripts': [
            'unreleased-prs = release_notes.cli:unreleased_pull_requests_cli',
        ],
    },
)
