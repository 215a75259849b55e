# Pi Kiosk
#
# Provisioning for unattended Raspberry Pi web kiosks.
#

"""
The top-level :mod:`pi_kiosk` module.

The :mod:`pi_kiosk` module defines the version number.
"""
name = "pi_kiosk"

from .version import *

# Semi-standard module versioning.
__version__ = KIOSK_VERSION
