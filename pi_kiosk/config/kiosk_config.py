"""
kiosk_config.py: kiosk provisioning configuration

Class level values are the defaults. from_environ() picks up the KIOSK_*
environment variables, and the command line overrides both.
"""
import os, sys

from ..const import const


class KioskConfig(object):
  """Base configuration."""

  URL = 'https://example.com'
  BROWSER = 'chromium'

  # Display
  OUTPUT = 'HDMI-A-1'
  MODE = None                # e.g. 1920x1080@60. None leaves the preferred mode.
  WAYLAND_DISPLAY = 'wayland-0'

  # Kiosk browser supervision
  SOCKET_TIMEOUT = 60
  POLL_INTERVAL = 1
  MAX_RETRIES = 5
  GRACE_PERIOD = 10
  BACKOFF = 5
  WAIT_FOR_URL = False
  URL_TIMEOUT = 60

  # Daily restart of the browser service
  RESTART_TIME = '04:00:00'

  # Keep-alive key press interval (seconds) against screen blanking
  KEEPALIVE_INTERVAL = 240

  # Blank the display after this many idle seconds. 0 keeps it on.
  BLANK_TIMEOUT = 0

  # Groups the kiosk user needs for seat, input and GPU access
  GROUPS = ('video', 'render', 'input', 'tty', 'audio', 'seat')

  # Boot firmware
  BOOT_DIRS = ('/boot/firmware', '/boot')
  BOOT_SETTINGS = (
    'dtoverlay=vc4-kms-v3d',
    'max_framebuffers=2',
    'disable_overscan=1',
    'hdmi_force_hotplug=1',
    'disable_splash=1',
    'gpu_mem=128',
  )
  BOOT_SUPPRESSED = (
    'dtoverlay=vc4-fkms-v3d',
    'hdmi_group',
    'hdmi_mode',
    'framebuffer_width',
    'framebuffer_height',
  )
  CMDLINE_FLAGS = {
    'consoleblank': '0',
    'logo.nologo': None,
    'vt.global_cursor_default': '0',
  }

  # Install locations
  OPT_DIR = '/opt/pi-kiosk'
  LOG_DIR = '/var/log/pi-kiosk'
  SYSTEMD_DIR = '/etc/systemd/system'
  LOGROTATE_FILE = '/etc/logrotate.d/pi-kiosk'
  PYTHON = sys.executable or '/usr/bin/python3'

  # First boot
  HOSTNAME_PREFIX = 'box'
  WIFI_SSID = None
  WIFI_PSK = None
  WIFI_COUNTRY = 'US'
  TIMEZONE = None
  KEYMAP = None              # XKB layout, e.g. us. None leaves the keyboard alone.
  KEYBOARD_MODEL = 'pc105'
  # Run once the network is up, from the boot partition, when it is there
  PROVISION_SCRIPT = 'firstboot-provision.sh'

  # Target root. Every path written is under this.
  ROOT = '/'

  def __init__(self, **overrides):
    for key, value in overrides.items():
      if not hasattr(KioskConfig, key):
        raise AttributeError("Unknown configuration %s" % key)
      if value is not None:
        setattr(self, key, value)
        pass
      pass
    pass

  @classmethod
  def from_environ(cls, environ=None, **overrides):
    if environ is None:
      environ = os.environ
      pass
    values = {
      'URL': environ.get(const.KIOSK_URL),
      'BROWSER': environ.get(const.KIOSK_BROWSER),
      'OUTPUT': environ.get(const.KIOSK_OUTPUT),
      'MODE': environ.get(const.KIOSK_MODE),
      'RESTART_TIME': environ.get(const.KIOSK_RESTART_TIME),
      'HOSTNAME_PREFIX': environ.get(const.KIOSK_HOSTNAME_PREFIX),
      'WIFI_SSID': environ.get(const.KIOSK_WIFI_SSID),
      'WIFI_PSK': environ.get(const.KIOSK_WIFI_PSK),
      'WIFI_COUNTRY': environ.get(const.KIOSK_WIFI_COUNTRY),
      'TIMEZONE': environ.get(const.KIOSK_TIMEZONE),
      'KEYMAP': environ.get(const.KIOSK_KEYMAP),
      'ROOT': environ.get(const.KIOSK_ROOT),
    }
    wait_for_url = environ.get(const.KIOSK_WAIT_FOR_URL)
    if wait_for_url is not None:
      values['WAIT_FOR_URL'] = wait_for_url.lower() in ('1', 'true', 'yes')
      pass
    for key, value in overrides.items():
      if value is not None:
        values[key] = value
        pass
      pass
    return cls(**values)

  def target_path(self, path):
    """Maps an absolute path on the kiosk to the path under ROOT."""
    if self.ROOT in (None, '', '/'):
      return path
    return os.path.join(self.ROOT, path.lstrip('/'))

  def find_boot_dir(self):
    """/boot/firmware on bookworm and later, /boot before."""
    for boot_dir in self.BOOT_DIRS:
      if os.path.exists(self.target_path(boot_dir + '/config.txt')):
        return boot_dir
      pass
    return self.BOOT_DIRS[0]
  pass
