#
# Kiosk services
#
# labwc.service            compositor on tty7 as the kiosk user
#   chromium-kiosk.service browser, bound to the compositor
#     kiosk-restart.timer  restarts the browser once a day
#
import shlex

from ..const import const
from ..lib.unit_file import unit_file
from ..ops.tasks import op_task_command
from ..config.config_tasks import task_write_file, task_make_dirs
from .config_compositor import launcher_script_path


launch_browser_template = '''#!/bin/sh
# Generated by pi-kiosk.
# Waits for the compositor, then runs the browser with bounded retries.
export XDG_RUNTIME_DIR="${{XDG_RUNTIME_DIR:-/run/user/$(id -u)}}"
export WAYLAND_DISPLAY="${{WAYLAND_DISPLAY:-{wayland_display}}}"
exec {command}
'''

logrotate_template = '''{log_dir}/*.log {{
    daily
    rotate 7
    compress
    delaycompress
    missingok
    notifempty
    copytruncate
}}
'''


def generate_launch_browser_script(config):
  argv = [config.PYTHON, '-m', 'pi_kiosk.bin.launch_browser',
          '--url', config.URL,
          '--browser', config.BROWSER,
          '--socket-timeout', str(config.SOCKET_TIMEOUT),
          '--max-retries', str(config.MAX_RETRIES),
          '--grace-period', str(config.GRACE_PERIOD),
          '--backoff', str(config.BACKOFF)]
  if config.WAIT_FOR_URL:
    argv = argv + ['--wait-for-url', '--url-timeout', str(config.URL_TIMEOUT)]
    pass
  return launch_browser_template.format(wayland_display=config.WAYLAND_DISPLAY,
                                        command=" ".join(shlex.quote(arg) for arg in argv))


def generate_compositor_unit(config, user):
  unit = unit_file(const.compositor_service)
  unit.add("Unit", "Description", "Kiosk Wayland compositor (labwc)")
  unit.add("Unit", "After", "systemd-user-sessions.service seatd.service plymouth-quit-wait.service")
  unit.add("Unit", "Wants", "seatd.service")
  unit.add("Unit", "Conflicts", "getty@tty7.service")
  unit.add("Unit", "StartLimitIntervalSec", "0")

  unit.add("Service", "Type", "simple")
  unit.add("Service", "User", user.name)
  unit.add("Service", "PAMName", "login")
  unit.add("Service", "WorkingDirectory", user.home)
  unit.add("Service", "TTYPath", "/dev/tty7")
  unit.add("Service", "TTYReset", "yes")
  unit.add("Service", "TTYVHangup", "yes")
  unit.add("Service", "TTYVTDisallocate", "yes")
  unit.add("Service", "StandardInput", "tty-fail")
  unit.add("Service", "StandardOutput", "journal")
  unit.add("Service", "StandardError", "journal")
  unit.add("Service", "UtmpIdentifier", "tty7")
  unit.add("Service", "UtmpMode", "user")
  unit.add("Service", "Environment", "XDG_RUNTIME_DIR=/run/user/%d" % user.uid)
  unit.add("Service", "Environment", "XDG_SESSION_TYPE=wayland")
  unit.add("Service", "Environment", "LIBSEAT_BACKEND=seatd")
  unit.add("Service", "ExecStartPre", "+/usr/bin/chvt 7")
  unit.add("Service", "ExecStart", "/usr/bin/labwc")
  unit.add("Service", "Restart", "always")
  unit.add("Service", "RestartSec", "5")

  unit.add("Install", "WantedBy", "graphical.target")
  return unit


def generate_browser_unit(config, user):
  unit = unit_file(const.browser_service)
  unit.add("Unit", "Description", "Kiosk web browser")
  unit.add("Unit", "After", "%s network-online.target" % const.compositor_service)
  unit.add("Unit", "Wants", "%s network-online.target" % const.compositor_service)
  unit.add("Unit", "BindsTo", const.compositor_service)
  unit.add("Unit", "StartLimitIntervalSec", "0")

  unit.add("Service", "Type", "simple")
  unit.add("Service", "User", user.name)
  unit.add("Service", "WorkingDirectory", user.home)
  unit.add("Service", "Environment", "XDG_RUNTIME_DIR=/run/user/%d" % user.uid)
  unit.add("Service", "Environment", "WAYLAND_DISPLAY=%s" % config.WAYLAND_DISPLAY)
  unit.add("Service", "ExecStart", launcher_script_path(config))
  unit.add("Service", "Restart", "always")
  unit.add("Service", "RestartSec", "10")
  unit.add("Service", "StandardOutput", "append:%s/browser.log" % config.LOG_DIR)
  unit.add("Service", "StandardError", "append:%s/browser.log" % config.LOG_DIR)

  unit.add("Install", "WantedBy", "graphical.target")
  return unit


def generate_restart_service(config):
  unit = unit_file(const.restart_service)
  unit.add("Unit", "Description", "Daily restart of the kiosk browser")
  unit.add("Service", "Type", "oneshot")
  unit.add("Service", "ExecStart", "/bin/systemctl try-restart %s" % const.browser_service)
  return unit


def generate_restart_timer(config):
  unit = unit_file(const.restart_timer)
  unit.add("Unit", "Description", "Daily restart of the kiosk browser")
  unit.add("Timer", "OnCalendar", "*-*-* %s" % config.RESTART_TIME)
  unit.add("Timer", "Persistent", "true")
  unit.add("Timer", "Unit", const.restart_service)
  unit.add("Install", "WantedBy", "timers.target")
  return unit


def generate_units(config, user):
  return [generate_compositor_unit(config, user),
          generate_browser_unit(config, user),
          generate_restart_service(config),
          generate_restart_timer(config)]


class task_enable_services(op_task_command):
  """daemon-reload and enable the units. Offline roots only get the enable symlinks."""
  def __init__(self, description, units, root='/', default_target='graphical.target', **kwargs):
    super().__init__(description, **kwargs)
    self.units = units
    self.root = root
    self.default_target = default_target
    pass

  def plan_commands(self):
    if self.root not in (None, '', '/'):
      systemctl = ['systemctl', '--root=%s' % self.root]
      argvs = [systemctl + ['enable'] + self.units]
    else:
      systemctl = ['systemctl']
      argvs = [['systemctl', 'daemon-reload'],
               ['systemctl', 'enable'] + self.units]
      pass
    if self.default_target:
      argvs.append(systemctl + ['set-default', self.default_target])
      pass
    return argvs

  def explain(self):
    explanation = "systemctl daemon-reload; systemctl enable %s" % " ".join(self.units)
    if self.default_target:
      explanation += "; systemctl set-default %s" % self.default_target
      pass
    return explanation
  pass


def install_kiosk_services_tasks(context):
  config = context.config
  tasks = [
    task_make_dirs("Create %s" % config.OPT_DIR, context.path(config.OPT_DIR)),
    task_write_file("Write browser launch script", context.path(launcher_script_path(config)),
                    generate_launch_browser_script(config), mode=0o755),
    task_make_dirs("Create %s" % config.LOG_DIR, context.path(config.LOG_DIR), owner=context.owner),
  ]
  for unit in generate_units(config, context.user):
    tasks.append(task_write_file("Write %s" % unit.name,
                                 context.path(config.SYSTEMD_DIR + "/" + unit.name),
                                 unit.generate()))
    pass
  tasks.append(task_write_file("Write logrotate rule", context.path(config.LOGROTATE_FILE),
                               logrotate_template.format(log_dir=config.LOG_DIR)))
  tasks.append(task_enable_services("Enable kiosk services",
                                    ['seatd.service', const.compositor_service, const.browser_service, const.restart_timer],
                                    root=config.ROOT))
  return tasks
