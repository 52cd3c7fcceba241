from setuptools import setup, find_packages

setup(
    name             = 'feedshield',
    version          = '4.0.0',
    description      = 'FeedShield — rule-based psychological risk scoring for social-media content',
    author           = 'FeedShield contributors',
    packages         = find_packages(exclude=['tests*']),
    install_requires = open('requirements.txt').read().splitlines(),
    extras_require   = {
        'test': ['pytest>=7.0', 'httpx>=0.24'],
    },
    entry_points     = {
        'console_scripts': [
            'feedshield     = feedshield.cli:main',
            'feedshield-api = feedshield.api:main',
        ],
    },
    python_requires  = '>=3.10',
    classifiers      = [
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
)
