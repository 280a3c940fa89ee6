#!/usr/bin/env python
# -*- coding: utf-8 -*-

from setuptools import setup

NAME = 'quasiseq'
DESCRIPTION = 'Incremental quasi-random (low-discrepancy) sequences in Python'

with open('README.md') as f:
    long_description = f.read()

METADATA = dict(
    name=NAME,
    version='0.1',
    license='MIT',
    install_requires=['numpy>=1.18',
                      'numba'
                      ],
    extras_require={'test': ['pytest',
                             'scipy>=1.7'
                             ]
                    },
    description=DESCRIPTION,
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=[NAME],
    python_requires='>=3.8',
    platforms='any',
    classifiers=[
        'Programming Language :: Python :: 3',
        'Development Status :: 3 - Alpha',
        'Natural Language :: English',
        'Intended Audience :: Science/Research',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Topic :: Scientific/Engineering :: Mathematics',
    ]
)

setup(**METADATA)
