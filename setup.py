#!/usr/bin/env python3

from pathlib import Path
from setuptools import setup, find_packages

setup(
    name='gerbdecode',
    version='0.9.0',
    author='jaseg, XenGi',
    author_email='gerbonara@jaseg.de',
    description='Decoder and graphics state machine for single Gerber (RS-274X) layers',
    long_description=Path('README.md').read_text(),
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=['tests']),
    include_package_data=True,
    package_data={'gerbdecode.tests': ['resources/*.gbr']},
    install_requires=['click'],
    extras_require={
        'tests': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'gerbdecode = gerbdecode.cli:cli',
        ],
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Console',
        'Intended Audience :: Developers',
        'Intended Audience :: Manufacturing',
        'License :: OSI Approved :: Apache Software License',
        'Natural Language :: English',
        'Operating System :: POSIX :: Linux',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3 :: Only',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Topic :: Scientific/Engineering :: Electronic Design Automation (EDA)',
        'Topic :: Utilities',
    ],
    keywords='gerber rs274x pcb parser',
    python_requires='>=3.10',
)
