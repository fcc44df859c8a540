#!/usr/bin/env python
# -*- coding: utf-8 -*-
from setuptools import setup


setup(
    name='analytics-sender',
    version='0.4.0',
    description="Batching delivery worker for analytics event tracking clients.",
    author="analytics-sender contributors",
    packages=[
        'analytics_sender',
    ],
    package_dir={'analytics_sender': 'analytics_sender'},
    package_data={'analytics_sender': ['VERSION']},
    entry_points={
        'console_scripts': [
            'analytics-sender=analytics_sender.cli:cli'
        ]
    },
    include_package_data=True,
    install_requires=[
        'httpx>=0.24',
        'tenacity>=8.2',
        'typer>=0.9',
        'rich>=12.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    python_requires=">=3.8",
    license="MIT license",
    zip_safe=False,
    keywords='analytics events batching',
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Natural Language :: English',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
    ]
)
