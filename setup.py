# Backinator
# A configuration-driven backup job runner.
#
# Copyright (c) 2020 Hans Vredeveld
#
# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

from setuptools import setup


with open("README.md", "r") as fh:
    long_description = fh.read()


setup(
    name='backinator',
    version='1.0.0',
    description='A configuration-driven backup job runner',
    long_description=long_description,
    long_description_content_type="text/markdown",
    author='Hans Vredeveld',
    author_email='github@closingbrace.nl',
    license='Mozilla Public License 2.0',
    classifiers=[
        "Programming Language :: Python :: 3",
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: Mozilla Public License 2.0 (MPL 2.0)",
        "Operating System :: POSIX :: Linux",
        "Topic :: System :: Archiving :: Backup",
        "Topic :: Utilities",
    ],
    packages=['backinator'],
    python_requires='>=3.6',
    install_requires=['python-dateutil'],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'backinator=backinator.backinator:run',
        ],
    },
    zip_safe=False,
)
