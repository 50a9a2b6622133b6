#!/usr/bin/env python3

import os.path
import setuptools
from playwriter import VERSION

here = os.path.abspath(os.path.dirname(__file__))

setuptools.setup(

    name='playwriter',
    version='.'.join(map(str,VERSION)),
    description='Compiles plain-text stage play scripts into validated, '
                'structured documents ready for rendering',
    long_description=open(os.path.join(here, 'README.md'), encoding='utf-8').read(),
    long_description_content_type='text/markdown',
    author='Nicolas Almerge',
    license='MIT',
    classifiers=[
        'Development Status :: 5 - Production/Stable',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
    ],
    keywords='play script theatre compiler stage directions screenplay',
    packages=['playwriter'],
    install_requires=['begins'],
    extras_require={
        'test': ['pytest'],
    },
    python_requires='>=3.6',
    test_suite='tests',
    entry_points={
        'console_scripts': [
            'playwriter = playwriter.__main__:main.start'
        ],
    },
)
