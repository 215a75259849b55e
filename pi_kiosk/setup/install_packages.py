#
# Install Raspberry Pi OS packages
#
import os

from ..ops.tasks import op_task_command
from ..lib.apt import list_installed_packages, get_package_list, get_debian_codename


kiosk_packages = {
  None: [
    'labwc',                    # Wayland compositor
    'seatd',                    # seat daemon, lets labwc run without logind session
    'wlr-randr',                # output mode
    'swayidle',                 # idle handling
    'wtype',                    # keep-alive key events
    'logrotate',                # browser log rotation
    'fonts-noto-color-emoji',   # web pages use emoji
  ],
  'bullseye': [
    'chromium-browser',
  ],
  'bookworm': [
    'chromium-browser',         # Raspberry Pi build with V4L2 video decode
    'rpi-chromium-mods',
  ],
  'trixie': [
    'chromium',
  ],
}

# Unknown release gets the Debian package name.
default_browser_packages = ['chromium']


def get_package_plan(release_version):
  packages = get_package_list(kiosk_packages, release_version)
  if release_version not in kiosk_packages:
    packages = packages + default_browser_packages
    pass
  return packages


class task_install_packages(op_task_command):
  """apt-get install the packages that are not installed yet."""
  def __init__(self, description, packages, **kwargs):
    env = os.environ.copy()
    env['DEBIAN_FRONTEND'] = 'noninteractive'
    super().__init__(description, env=env, time_estimate=120, **kwargs)
    self.packages = packages
    pass

  def plan_commands(self):
    installed_packages = list_installed_packages()
    missing = [package for package in self.packages if not installed_packages.get(package)]
    if not missing:
      return []
    self.log("Installing " + " ".join(missing))
    return [['apt-get', 'update'],
            ['apt-get', 'install', '-y', '--no-install-recommends'] + missing]

  def explain(self):
    return "apt-get install missing packages among " + " ".join(self.packages)
  pass


def install_packages_tasks(context):
  release_version = get_debian_codename(context.path('/etc/os-release'))
  return [task_install_packages("Install kiosk packages", get_package_plan(release_version))]
