from setuptools import find_packages
from setuptools import setup

from envgrep import __version__


def main():
    setup(
        name='envgrep',
        description='Search the environment variables of every running process.',
        version=__version__,
        platforms=['linux'],
        classifiers=[
            'License :: OSI Approved :: MIT License',
            'Operating System :: POSIX :: Linux',
            'Programming Language :: Python :: 3',
            'Programming Language :: Python :: Implementation :: CPython',
        ],
        python_requires='>=3.8',
        packages=find_packages(exclude=('tests*',)),
        install_requires=[
            'cached-property',
            'frozendict',
            'pyyaml',
        ],
        extras_require={
            'test': ['pytest', 'testfixtures'],
        },
        entry_points={
            'console_scripts': [
                'envgrep = envgrep.cli:main',
            ],
        },
    )


if __name__ == '__main__':
    exit(main())
