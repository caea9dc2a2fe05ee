from setuptools import setup
setup(name = 'PyPNM',
      version = '0.1',
      description = 'Pure Python Netpbm codec and raster drawing.',
      author = 'Johann C. Rocholl',
      package_dir = {'': 'lib'},
      py_modules = ['pnm', 'pnmdraw'],
      python_requires = '>=3.6',
      extras_require = {'test': ['pytest']},
      )
