#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""The setup script"""
import os
from setuptools import setup, find_packages

# Get the long description from the README file
with open(os.path.join(os.path.abspath(os.path.dirname(__file__)), 'README.md')) as f:
    long_description = f.read()

setup(author="Dih5",
      author_email='dihedralfive@gmail.com',
      classifiers=[
          'Development Status :: 3 - Alpha',
          'Intended Audience :: Science/Research',
          'License :: OSI Approved :: MIT License',
          'Natural Language :: English',
          'Programming Language :: Python :: 3',
          'Topic :: Scientific/Engineering :: Mathematics',
      ],
      description='Exact stochastic SIR simulation with the Sellke construction',
      extras_require={
          "test": ["pytest"],
      },
      keywords=["epidemiology", "SIR", "stochastic simulation"],
      long_description=long_description,
      long_description_content_type='text/markdown',
      name='sellke',
      packages=find_packages(include=['sellke'], exclude=["demos", "tests", "docs"]),
      install_requires=["numpy", "scipy", "pandas", "tqdm"],
      version='0.1.0',

      )
