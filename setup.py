# -*- coding: utf-8 -*-
"""gcp-config-types a module of small value types for service configuration.

Provides paths, file modes, user and group ids, durations, byte sizes, sets and UUIDs plus
credential and secret values resolved from literal values, environment variables, files or
GCP Secret Manager and masked whenever they are marshaled back out.

"""

import setuptools
import re
from io import open

VERSIONFILE="gcp_config_types/_version.py"
verstrline = open(VERSIONFILE, "rt").read()
VSRE = r"^__version__ = ['\"]([^'\"]*)['\"]"
mo = re.search(VSRE, verstrline, re.M)
if mo:
    verstr = mo.group(1)
else:
    raise RuntimeError("Unable to find version string in %s." % (VERSIONFILE,))

with open("README.md", "r", encoding='utf-8') as fh:
    long_description = fh.read()

setuptools.setup(
    name='gcp_config_types',
    version=verstr,
    description="Configuration value types including secrets resolved from the environment, files or GCP Secret Manager",
    long_description_content_type="text/markdown",
    long_description=long_description,
    packages=setuptools.find_packages(exclude=["*.tests", "*.tests.*"]),
    extras_require={
        "test": ["pytest"],
    },
    include_package_data=True,
    license="MIT",
    scripts=[],
    python_requires=">=3.8",
    install_requires=[
        "google-cloud-secret-manager~=2.0",
        "google-auth>=2.0,<3.0",
        "google-api-core>=2.0,<3.0",
        "google-crc32c~=1.0",
        "grpcio~=1.0",
        "PyYAML>=5.4"
    ],
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX",
    ],

)
