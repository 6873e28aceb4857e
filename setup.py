#!/usr/bin/env python3

import os
import re
import codecs

from setuptools import find_packages, setup

# Package meta-data.
NAME = 'coilvision'
DESCRIPTION = 'Train, publish, test and export an Azure Custom Vision classifier for the COIL-100 dataset'
URL = 'https://github.com/coilvision/coilvision/'
AUTHOR_EMAIL = 'coilvision@users.noreply.github.com'
AUTHOR = 'coilvision contributors'
LICENSE = 'GPL'
INSTALL_REQUIRES = [
    'pydantic>=2.0',
    'requests>=2.18.4',
    'pyyaml',
    'python-dotenv',
]
EXTRAS_REQUIRE = {
    'test': [
        'pytest',
        'responses',
    ],
}

here = os.path.abspath(os.path.dirname(__file__))
# read the contents of your README file
with open(os.path.join(here, 'README.md'), encoding='utf-8') as f:
    long_description = f.read()


def read(*parts):
    with codecs.open(os.path.join(here, *parts), 'r') as fp:
        data = fp.read()
    return data


def find_version(*file_paths):
    version_file = read(*file_paths)
    version_match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]", version_file, re.M)
    if version_match:
        return version_match.group(1)
    raise RuntimeError("Unable to find version string.")


setup(name=NAME,
      python_requires='>=3.10',
      version=find_version('coilvision', '__init__.py'),
      description=DESCRIPTION,
      long_description=long_description,
      long_description_content_type='text/markdown',
      author=AUTHOR,
      author_email=AUTHOR_EMAIL,
      url=URL,
      license=LICENSE,
      install_requires=INSTALL_REQUIRES,
      extras_require=EXTRAS_REQUIRE,
      packages=find_packages(include=['coilvision', 'coilvision.*']),
      entry_points={
          'console_scripts': [
              'coilvision = coilvision.__main__:main',
          ],
      },
      )
