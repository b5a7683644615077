#!/usr/bin/env python
# -*- coding: utf-8 -*-

from setuptools import setup, find_packages
from sys import version_info

classifiers = """\
Development Status :: 3 - Alpha
Intended Audience :: Science/Research
License :: OSI Approved :: BSD License
Natural Language :: English
Operating System :: OS Independent
Programming Language :: Python :: 3
Topic :: Scientific/Engineering :: Mathematics
"""


# check python version
ver = (version_info.major, version_info.minor)
assert ver >= (3, 7), 'lmcurve uses namedtuple defaults, which are available starting from Python 3.7'



setup(name='lmcurve',
      version='0.1',
      description="Levenberg-Marquardt curve fitting of arbitrary model functions",
      long_description="A small library that fits a parameterized model function to XY data"
                       " with a damped Gauss-Newton iteration, finite-difference derivatives,"
                       " parameter bounds and propagation of x uncertainties.",
      platforms='POSIX',
      keywords=['Curve fitting', 'Levenberg-Marquardt', 'least squares'],
      classifiers=[clsf for clsf in classifiers.split('\n') if clsf],
      license='BSD',
      python_requires='>=3.7',
      install_requires=[
          'numpy',
          'scipy',
          'matplotlib',
      ],
      extras_require={
          'test': ['pytest'],
      },
      packages=find_packages(exclude=['tests']),
)
