"""String constants.
Once defined, it becomes immutable.
"""


class _const:

  class ConstError(TypeError):
    pass

  def __setattr__(self, name, value):
    if name in self.__dict__:
      raise self.ConstError
    self.__dict__[name] = value

  def __delattr__(self, name):
    if name in self.__dict__:
      raise self.ConstError
    raise NameError
  pass

const = _const()

# Environment variables the configuration reads
const.KIOSK_URL = 'KIOSK_URL'
const.KIOSK_USER = 'KIOSK_USER'
const.KIOSK_BROWSER = 'KIOSK_BROWSER'
const.KIOSK_OUTPUT = 'KIOSK_OUTPUT'
const.KIOSK_MODE = 'KIOSK_MODE'
const.KIOSK_RESTART_TIME = 'KIOSK_RESTART_TIME'
const.KIOSK_HOSTNAME_PREFIX = 'KIOSK_HOSTNAME_PREFIX'
const.KIOSK_WIFI_SSID = 'KIOSK_WIFI_SSID'
const.KIOSK_WIFI_PSK = 'KIOSK_WIFI_PSK'
const.KIOSK_WIFI_COUNTRY = 'KIOSK_WIFI_COUNTRY'
const.KIOSK_TIMEZONE = 'KIOSK_TIMEZONE'
const.KIOSK_KEYMAP = 'KIOSK_KEYMAP'
const.KIOSK_WAIT_FOR_URL = 'KIOSK_WAIT_FOR_URL'
const.KIOSK_LOG_FILE = 'KIOSK_LOG_FILE'
const.KIOSK_ROOT = 'KIOSK_ROOT'
const.SUDO_USER = 'SUDO_USER'

# Wayland
const.XDG_RUNTIME_DIR = 'XDG_RUNTIME_DIR'
const.WAYLAND_DISPLAY = 'WAYLAND_DISPLAY'

# Units
const.compositor_service = 'labwc.service'
const.browser_service = 'chromium-kiosk.service'
const.restart_service = 'kiosk-restart.service'
const.restart_timer = 'kiosk-restart.timer'
const.provision_service = 'firstboot-provision.service'

# config.txt keys that may legitimately appear more than once
const.multi_value_keys = ('dtoverlay', 'dtparam')

# the profile fallback is guarded by this substring
const.profile_marker = 'labwc'
