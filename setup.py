#!/usr/bin/python

import codecs
import os
import re

from setuptools import setup


here = os.path.abspath(os.path.dirname(__file__))


def read(*parts):
    with codecs.open(os.path.join(here, *parts), 'r') as f:
        return f.read()


def find_version(*file_paths):
    version_file = read(*file_paths)
    version_match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]",
                              version_file, re.M)
    if version_match:
        return version_match.group(1)
    raise RuntimeError("Unable to find version string.")


if __name__ == '__main__':
    setup(
        name='ldapdeob',
        version=find_version("ldapdeob", "__init__.py"),
        description='Parsing and deobfuscation of LDAP SearchFilters',
        long_description=read('README.rst'),
        license='MIT',
        python_requires='>=3.8',
        packages=[
            'ldapdeob',
            'ldapdeob._scripts',
            'ldapdeob.test',
            'ldapdeob.transforms',
        ],
        install_requires=[
            'twisted',
            'pyparsing>=3.0',
            'zope.interface',
        ],
        entry_points={
            'console_scripts': [
                'ldapdeob-deobfuscate = ldapdeob._scripts.deobfuscate:console_script',
            ],
        },
        classifiers=[
            'Development Status :: 4 - Beta',
            'Framework :: Twisted',
            'Intended Audience :: Developers',
            'License :: OSI Approved :: MIT License',
            'Programming Language :: Python :: 3',
            'Topic :: Security',
            'Topic :: System :: Systems Administration :: Authentication/Directory :: LDAP',
        ],
    )
