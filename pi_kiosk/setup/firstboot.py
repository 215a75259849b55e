#
# First boot provisioning
#
# Raspberry Pi Imager's firstrun hook runs "setup-kiosk --firstboot" once.
# On top of the kiosk plan, this gives the box its own identity: a random
# hostname, ssh with the keys left on the boot partition, Wi-Fi, the timezone
# and the keymap. When the boot partition carries firstboot-provision.sh, a
# oneshot service runs it once the network is up. It also takes the one-shot
# systemd.run arguments out of cmdline.txt so that it does not run again.
#
# On a running Raspberry Pi OS, imager_custom does hostname, ssh, Wi-Fi,
# timezone and keymap the way Raspberry Pi Imager does them.
#
import os, glob

from ..const import const
from ..ops.tasks import op_task_python_simple, op_task_command, op_task_process_simple
from ..lib import get_kiosk_logger
from ..lib.hostname import generate_hostname, set_hostname_files
from ..lib.network_manager import is_network_manager_on, list_connections, wifi_connection_argv, generate_wpa_supplicant_conf
from ..lib.unit_file import unit_file
from ..lib.util import write_file
from ..config.config_tasks import task_write_file, task_patch_cmdline, task_install_authorized_keys
from .install_kiosk_services import task_enable_services

klog = get_kiosk_logger()

imager_custom = '/usr/lib/raspberrypi-sys-mods/imager_custom'


def is_live(config):
  """True when provisioning the running system rather than a mounted image."""
  return config.ROOT in (None, '', '/')


def has_imager_custom(config):
  return is_live(config) and os.path.exists(imager_custom)


def mask_secret(argv, secret):
  return " ".join("********" if secret and arg == secret else arg for arg in argv)


class task_imager_custom(op_task_command):
  """Runs one imager_custom command. The Wi-Fi passphrase stays out of the log."""
  def __init__(self, description, command, args=(), secret=None, **kwargs):
    super().__init__(description, argvs=[[imager_custom, command] + list(args)], **kwargs)
    self.secret = secret
    pass

  def format_argv(self, argv):
    return mask_secret(argv, self.secret)

  def explain(self):
    return self.format_argv(self.argvs[0])
  pass


class task_set_hostname(op_task_python_simple):
  """Hostname is decided when the plan is made so that --explain shows it."""
  def __init__(self, description, hostname, etc_dir, **kwargs):
    super().__init__(description, **kwargs)
    self.hostname = hostname
    self.etc_dir = etc_dir
    pass

  def run_python(self):
    old_hostname = set_hostname_files(self.etc_dir, self.hostname)
    return "Hostname %s -> %s" % (old_hostname or "(none)", self.hostname)

  def explain(self):
    return "Write %s to %s/hostname and %s/hosts" % (self.hostname, self.etc_dir, self.etc_dir)
  pass


class task_nmcli_wifi(op_task_command):
  """Adds a NetworkManager connection for the SSID unless one by that name exists."""
  def __init__(self, description, ssid, psk, **kwargs):
    super().__init__(description, **kwargs)
    self.ssid = ssid
    self.psk = psk
    pass

  def plan_commands(self):
    if self.ssid in list_connections():
      return []
    return [wifi_connection_argv(self.ssid, self.ssid, self.psk)]

  def format_argv(self, argv):
    return mask_secret(argv, self.psk)

  def explain(self):
    return "nmcli connection add type wifi ssid %s" % self.ssid
  pass


class task_reset_rfkill_state(op_task_python_simple):
  """systemd-rfkill puts back the saved soft block at boot. 0 is unblocked."""
  def __init__(self, description, state_dir, **kwargs):
    super().__init__(description, **kwargs)
    self.state_dir = state_dir
    pass

  def run_python(self):
    cleared = [path for path in sorted(glob.glob(os.path.join(self.state_dir, "*:wlan")))
               if write_file(path, "0\n")]
    if not cleared:
      return "No saved Wi-Fi block in %s." % self.state_dir
    return "Cleared %s" % ", ".join(cleared)

  def explain(self):
    return "Write 0 to %s/*:wlan" % self.state_dir
  pass


class task_set_timezone_files(op_task_python_simple):
  """/etc/timezone and the /etc/localtime link of an offline image."""
  def __init__(self, description, timezone, etc_dir, **kwargs):
    super().__init__(description, **kwargs)
    self.timezone = timezone
    self.etc_dir = etc_dir
    pass

  def run_python(self):
    write_file(os.path.join(self.etc_dir, "timezone"), self.timezone + "\n")
    localtime = os.path.join(self.etc_dir, "localtime")
    zoneinfo = "/usr/share/zoneinfo/" + self.timezone
    if os.path.islink(localtime) and os.readlink(localtime) == zoneinfo:
      return "Timezone is %s." % self.timezone
    if os.path.lexists(localtime):
      os.unlink(localtime)
      pass
    os.symlink(zoneinfo, localtime)
    return "Timezone set to %s." % self.timezone

  def explain(self):
    return "Write %s to %s/timezone and link %s/localtime" % (self.timezone, self.etc_dir, self.etc_dir)
  pass


keyboard_template = '''XKBMODEL="{model}"
XKBLAYOUT="{layout}"
XKBVARIANT=""
XKBOPTIONS=""

BACKSPACE="guess"
'''


def generate_keyboard(config):
  return keyboard_template.format(model=config.KEYBOARD_MODEL, layout=config.KEYMAP)


def hostname_tasks(context):
  config = context.config
  hostname = generate_hostname(config.HOSTNAME_PREFIX)
  if has_imager_custom(config):
    return [task_imager_custom("Set hostname", 'set_hostname', [hostname])]
  return [task_set_hostname("Set hostname", hostname, context.path('/etc'))]


def ssh_tasks(context):
  config = context.config
  if has_imager_custom(config):
    enable = task_imager_custom("Enable ssh", 'enable_ssh')
  elif is_live(config):
    enable = op_task_process_simple("Enable ssh", argv=['systemctl', 'enable', 'ssh'])
  else:
    enable = op_task_process_simple("Enable ssh", argv=['systemctl', '--root=%s' % config.ROOT, 'enable', 'ssh'])
    pass
  sources = [context.path(boot_dir + "/authorized_keys") for boot_dir in config.BOOT_DIRS]
  return [enable,
          task_install_authorized_keys("Install ssh authorized keys", sources,
                                       context.home_path('.ssh'), context.owner)]


def wifi_tasks(context):
  config = context.config
  if not config.WIFI_SSID:
    return []
  if has_imager_custom(config):
    return [task_imager_custom("Configure Wi-Fi", 'set_wlan',
                               [config.WIFI_SSID, config.WIFI_PSK or '', config.WIFI_COUNTRY],
                               secret=config.WIFI_PSK)]
  if is_live(config) and is_network_manager_on():
    return [task_nmcli_wifi("Configure Wi-Fi (NetworkManager)", config.WIFI_SSID, config.WIFI_PSK)]

  tasks = [task_write_file("Write wpa_supplicant.conf",
                           context.path('/etc/wpa_supplicant/wpa_supplicant.conf'),
                           generate_wpa_supplicant_conf(config.WIFI_SSID, config.WIFI_PSK, config.WIFI_COUNTRY),
                           mode=0o600)]
  if is_live(config):
    tasks.append(op_task_process_simple("Unblock Wi-Fi", argv=['rfkill', 'unblock', 'wifi']))
    pass
  tasks.append(task_reset_rfkill_state("Clear saved Wi-Fi block", context.path('/var/lib/systemd/rfkill')))
  return tasks


def timezone_tasks(context):
  config = context.config
  if not config.TIMEZONE:
    return []
  if has_imager_custom(config):
    return [task_imager_custom("Set timezone", 'set_timezone', [config.TIMEZONE])]
  if is_live(config):
    return [op_task_process_simple("Set timezone", argv=['timedatectl', 'set-timezone', config.TIMEZONE])]
  return [task_set_timezone_files("Set timezone", config.TIMEZONE, context.path('/etc'))]


def keymap_tasks(context):
  config = context.config
  if not config.KEYMAP:
    return []
  if has_imager_custom(config):
    return [task_imager_custom("Set keymap", 'set_keymap', [config.KEYMAP])]
  tasks = [task_write_file("Write keyboard layout", context.path('/etc/default/keyboard'), generate_keyboard(config))]
  if is_live(config):
    tasks.append(op_task_process_simple("Apply keyboard layout",
                                        argv=['dpkg-reconfigure', '-f', 'noninteractive', 'keyboard-configuration'],
                                        time_estimate=5))
    pass
  return tasks


def find_provision_script(context):
  """The script on the boot partition as the kiosk sees it, or None."""
  config = context.config
  for boot_dir in config.BOOT_DIRS:
    script = boot_dir + "/" + config.PROVISION_SCRIPT
    if os.path.isfile(context.path(script)):
      return script
    pass
  return None


def generate_provision_unit(config, script):
  log_file = os.path.dirname(script) + "/firstboot_setup.log"
  unit = unit_file(const.provision_service)
  unit.add("Unit", "Description", "First boot provisioning")
  unit.add("Unit", "After", "network-online.target")
  unit.add("Unit", "Wants", "network-online.target")
  unit.add("Service", "Type", "oneshot")
  unit.add("Service", "ExecStart", script)
  unit.add("Service", "Restart", "on-failure")
  unit.add("Service", "RestartSec", "90")
  unit.add("Service", "StandardOutput", "append:%s" % log_file)
  unit.add("Service", "StandardError", "append:%s" % log_file)
  unit.add("Install", "WantedBy", "multi-user.target")
  return unit


def provision_service_tasks(context):
  config = context.config
  script = find_provision_script(context)
  if script is None:
    klog.info("No %s on the boot partition. No deferred provisioning." % config.PROVISION_SCRIPT)
    return []
  unit = generate_provision_unit(config, script)
  return [task_write_file("Write %s" % unit.name, context.path(config.SYSTEMD_DIR + "/" + unit.name), unit.generate()),
          task_enable_services("Enable first boot provisioning", [unit.name], root=config.ROOT, default_target=None)]


def cmdline_cleanup_tasks(context):
  config = context.config
  boot_dir = config.find_boot_dir()
  return [task_patch_cmdline("Remove first boot arguments from %s/cmdline.txt" % boot_dir,
                             context.path(boot_dir + "/cmdline.txt"),
                             removed=('systemd.unit=kernel-command-line.target',),
                             removed_prefixes=('systemd.run',))]


def firstboot_tasks(context):
  return (hostname_tasks(context) +
          ssh_tasks(context) +
          wifi_tasks(context) +
          timezone_tasks(context) +
          keymap_tasks(context) +
          provision_service_tasks(context) +
          cmdline_cleanup_tasks(context))
