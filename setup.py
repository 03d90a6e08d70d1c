#!/usr/bin/env python3

import os
import re

from setuptools import find_packages, setup

TOPDIR = os.path.dirname(os.path.abspath(__file__))
PACKAGEDIR = os.path.join(TOPDIR, 'src')


def module_version():
    """Determine the version number from the package's __init__.py."""
    with open(os.path.join(PACKAGEDIR, 'pkgatom', '__init__.py'), encoding='utf-8') as f:
        version = re.search(
            r'^__version__\s*=\s*[\'"]([^\'"]*)[\'"]', f.read(), re.MULTILINE).group(1)
    if not version:
        raise RuntimeError('cannot find version information')
    return version


setup(**dict(
    name='pkgatom',
    version=module_version(),
    description='gentoo package atom parsing and version comparison',
    license='BSD',
    package_dir={'': 'src'},
    packages=find_packages('src'),
    python_requires='>=3.8',
    install_requires=['snakeoil'],
    extras_require={
        'test': ['pytest'],
    },
    classifiers=[
        'License :: OSI Approved :: BSD License',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
    ],
))
