import os
import sys

try:
    import setuptools
except ImportError:
    sys.exit("setuptools package not found. "
             "Please use 'pip install setuptools' first")

from setuptools import setup

# Make sure we're running from the setup.py directory.
script_dir = os.path.dirname(os.path.realpath(__file__))
if script_dir != os.getcwd():
    os.chdir(script_dir)

from depthsv.__version__ import __version__


setup(name='depthsv',
      version=__version__,
      description='Large deletion and tandem duplication calling from breakpoints, read pairs and copy ratios',
      license='BSD-3-Clause',
      packages=['depthsv'],
      install_requires=['pysam', 'numpy', 'networkx', 'plotly', 'intervaltree', 'tqdm'],
      extras_require={'test': ['pytest']},
      entry_points={'console_scripts': ['depthsv = depthsv.main:main']},
      )
