#!/usr/bin/env python3
#
# setup-kiosk: provisions this Raspberry Pi as a web kiosk.
#
# sudo setup-kiosk --url https://dashboard.example.com
#
# The plan, in order:
#   packages, user groups, labwc configuration, boot files, console autologin,
#   helper scripts, launcher and systemd units.
# --firstboot puts hostname, ssh, Wi-Fi, timezone, keymap and the deferred
# provisioning service in front of it.
#
import os, sys
from argparse import ArgumentParser

from ..ops.runner import Runner
from ..ops.ops_ui import console_ui
from ..lib import get_kiosk_logger, setup_kiosk_logger, KioskSetupError
from ..lib.user_info import resolve_kiosk_user
from ..config.kiosk_config import KioskConfig
from . import plan_context
from .install_packages import install_packages_tasks
from .config_kiosk_user import config_kiosk_user_tasks
from .config_compositor import config_compositor_tasks
from .patch_boot import patch_boot_tasks
from .config_autologin import config_autologin_tasks
from .install_helpers import install_helpers_tasks
from .install_kiosk_services import install_kiosk_services_tasks
from .firstboot import firstboot_tasks

klog = get_kiosk_logger()


def build_plan(context, firstboot=False, skip_packages=False):
  """The ordered task list."""
  tasks = []
  if firstboot:
    tasks += firstboot_tasks(context)
    pass
  if not skip_packages:
    tasks += install_packages_tasks(context)
    pass
  tasks += config_kiosk_user_tasks(context)
  tasks += config_compositor_tasks(context)
  tasks += patch_boot_tasks(context)
  tasks += config_autologin_tasks(context)
  tasks += install_helpers_tasks(context)
  tasks += install_kiosk_services_tasks(context)
  return tasks


class KioskSetupRunner(Runner):
  def __init__(self, ui, runner_id, context, firstboot=False, skip_packages=False):
    super().__init__(ui, runner_id)
    self.context = context
    self.firstboot = firstboot
    self.skip_packages = skip_packages
    pass

  def prepare(self):
    super().prepare()
    for task in build_plan(self.context, firstboot=self.firstboot, skip_packages=self.skip_packages):
      self.add_task(task)
      pass
    pass

  def exit_code(self):
    """0 on success. The failed command's return code, or 1."""
    if self.failed_task is None:
      return 0
    returncode = getattr(self.failed_task, 'returncode', None)
    if returncode:
      return returncode
    return 1
  pass


def main(args=None, environ=None):
  if environ is None:
    environ = os.environ
    pass
  parser = ArgumentParser(description="Provision this Raspberry Pi as a web kiosk.")
  parser.add_argument("--url", help="Page the kiosk shows. Default $KIOSK_URL or %s" % KioskConfig.URL)
  parser.add_argument("--user", help="Kiosk user. Default $SUDO_USER, $KIOSK_USER or the uid 1000 account.")
  parser.add_argument("--explain", action="store_true", help="Print the plan without running it.")
  parser.add_argument("--firstboot", action="store_true", help="Also set hostname, ssh, Wi-Fi, timezone and keymap.")
  parser.add_argument("--skip-packages", dest="skip_packages", action="store_true", help="Do not run apt-get.")
  parser.add_argument("--log-file", dest="log_file", help="Log file. Default $KIOSK_LOG_FILE.")
  arguments = parser.parse_args(args)

  if arguments.log_file:
    setup_kiosk_logger(klog, filename=arguments.log_file)
    pass

  if os.geteuid() != 0 and not arguments.explain:
    msg = "setup-kiosk must be run as root. Try: sudo setup-kiosk"
    print(msg, file=sys.stderr)
    klog.error(msg)
    return 1

  config = KioskConfig.from_environ(environ, URL=arguments.url)
  try:
    user = resolve_kiosk_user(arguments.user, environ)
  except KioskSetupError as exc:
    print(str(exc), file=sys.stderr)
    klog.error(str(exc))
    return 1
  klog.info("Kiosk user %s, URL %s, root %s" % (user.name, config.URL, config.ROOT))

  ui = console_ui()
  runner = KioskSetupRunner(ui, "setup-kiosk", plan_context(config, user),
                            firstboot=arguments.firstboot, skip_packages=arguments.skip_packages)
  runner.prepare()
  runner.preflight()
  if arguments.explain:
    runner.explain()
    return 0
  runner.run()
  return runner.exit_code()


if __name__ == "__main__":
  sys.exit(main())
  pass
