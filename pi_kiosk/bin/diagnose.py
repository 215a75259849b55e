#!/usr/bin/env python3
#
# Kiosk health report. ~/kiosk-diagnose.sh runs this.
#
# Each check prints one line. The exit code is 0 when every check passes.
#
import os, sys
from argparse import ArgumentParser

from ..const import const
from ..lib.util import get_kiosk_logger, setup_kiosk_logger, run_quietly, read_file
from ..lib.user_info import resolve_kiosk_user, user_groups
from ..lib.boot_config import boot_config, split_setting
from ..lib.url_probe import is_url_reachable
from ..lib import KioskSetupError
from ..config.kiosk_config import KioskConfig
from .launch_browser import wayland_socket_path, find_browser_pids

klog = get_kiosk_logger()

kiosk_units = [const.compositor_service, const.browser_service, const.restart_timer]


class diagnosis:
  def __init__(self, out=None):
    self.out = out if out is not None else sys.stdout
    self.failures = 0
    pass

  def report(self, ok, title, detail=""):
    if not ok:
      self.failures += 1
      pass
    print("[%s] %s%s" % ("OK" if ok else "NG", title, (": " + detail) if detail else ""), file=self.out)
    pass

  def section(self, title):
    print("\n== %s ==" % title, file=self.out)
    pass

  @property
  def healthy(self):
    return self.failures == 0
  pass


def check_user(diag, config, user_name=None):
  diag.section("User")
  try:
    user = resolve_kiosk_user(user_name)
  except KioskSetupError as exc:
    diag.report(False, "kiosk user", str(exc))
    return None
  diag.report(True, "kiosk user", "%s (uid %d)" % (user.name, user.uid))
  groups = user_groups(user.name)
  missing = [group for group in config.GROUPS if group not in groups]
  diag.report(not missing, "groups", "missing " + ",".join(missing) if missing else ",".join(groups))
  return user


def check_socket(diag, user):
  diag.section("Wayland")
  environ = dict(os.environ)
  if user is not None and not environ.get(const.XDG_RUNTIME_DIR):
    environ[const.XDG_RUNTIME_DIR] = "/run/user/%d" % user.uid
    pass
  socket_path = wayland_socket_path(environ)
  diag.report(os.path.exists(socket_path), "socket", socket_path)
  pass


def check_services(diag, config):
  diag.section("Services")
  for unit in kiosk_units:
    returncode, out = run_quietly(['systemctl', 'is-active', unit])
    state = out.strip() or "unknown"
    diag.report(returncode == 0, unit, state)
    pass
  pids = find_browser_pids(config.BROWSER, exclude=(os.getpid(),))
  diag.report(bool(pids), "browser process", " ".join(str(pid) for pid in pids) if pids else "not running")
  pass


def check_boot_config(diag, config):
  diag.section("Boot")
  filename = config.target_path(config.find_boot_dir() + "/config.txt")
  boot = boot_config(filename)
  try:
    boot.open()
  except FileNotFoundError:
    diag.report(False, filename, "not found")
    return
  for setting in config.BOOT_SETTINGS:
    key, value = split_setting(setting)
    values = boot.active_values(key)
    diag.report(value in values, setting, ", ".join(values) if values else "not set")
    pass
  pass


def check_url(diag, config):
  diag.section("Network")
  diag.report(is_url_reachable(config.URL), config.URL)
  pass


def show_browser_log(diag, config, lines=10):
  diag.section("Browser log")
  log_file = config.target_path(config.LOG_DIR + "/browser.log")
  contents = read_file(log_file)
  if contents is None:
    print("%s does not exist." % log_file, file=diag.out)
    return
  for line in contents.splitlines()[-lines:]:
    print("  " + line, file=diag.out)
    pass
  pass


def main(args=None):
  parser = ArgumentParser(description='Report the health of the kiosk')
  parser.add_argument("--user", dest="user", default=None)
  parser.add_argument("--url", dest="url", default=None)
  parser.add_argument("--log-lines", type=int, dest="log_lines", default=10)
  arguments = parser.parse_args(args)

  setup_kiosk_logger(klog, stream=sys.stderr)
  config = KioskConfig.from_environ(URL=arguments.url)

  diag = diagnosis()
  user = check_user(diag, config, arguments.user)
  check_socket(diag, user)
  check_services(diag, config)
  check_boot_config(diag, config)
  check_url(diag, config)
  show_browser_log(diag, config, arguments.log_lines)

  print("\n%s" % ("Healthy." if diag.healthy else "%d check(s) failed." % diag.failures))
  return 0 if diag.healthy else 1


if __name__ == "__main__":
  sys.exit(main())
  pass
