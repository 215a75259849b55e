import setuptools, sys, os

with open("README.rst", "r") as fh:
  long_description = fh.read()

# Raspberry Pi OS bookworm comes with Python 3.11, bullseye with 3.9.
python_version = sys.version_info
need_python_version = (3, 9)

if python_version < need_python_version:
  raise RuntimeError("pi_kiosk requires Python version %d.%d or higher"
                     % need_python_version)

sys.path.append(os.getcwd())
from pi_kiosk.version import *

setuptools.setup(
  name="pi-kiosk",
  version=KIOSK_VERSION,
  description="Raspberry Pi web kiosk provisioning",
  long_description=long_description,
  long_description_content_type="text/x-rst",
  packages=['pi_kiosk',
            'pi_kiosk.bin',
            'pi_kiosk.config',
            'pi_kiosk.lib',
            'pi_kiosk.ops',
            'pi_kiosk.setup'],
  include_package_data=True,
  install_requires=[
    'aiohttp>=3.8',
  ],
  extras_require={
    'test': ['pytest'],
  },
  entry_points={
    'console_scripts': [
      'setup-kiosk=pi_kiosk.setup.setup_kiosk:main',
      'kiosk-diagnose=pi_kiosk.bin.diagnose:main',
    ],
  },
  classifiers=[
    "Programming Language :: Python :: 3",
    "License :: OSI Approved :: MIT License",
    "Operating System :: POSIX :: Linux",
  ],
)
