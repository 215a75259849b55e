#
# labwc configuration, the Wayland session launcher and the .profile fallback
#
from xml.sax.saxutils import quoteattr

from ..const import const
from ..config.config_tasks import task_write_file, task_make_dirs, task_append_once
from ..bin.launch_browser import browser_process_name


rc_xml_template = '''<?xml version="1.0" encoding="UTF-8"?>
<!-- Generated by pi-kiosk. Overwritten on every setup run. -->
<labwc_config>
  <core>
    <gap>0</gap>
    <adaptiveSync>no</adaptiveSync>
    <reuseOutputMode>yes</reuseOutputMode>
  </core>
  <theme>
    <cornerRadius>0</cornerRadius>
    <keepBorder>no</keepBorder>
  </theme>
  <windowRules>
    <windowRule identifier={browser_id} serverDecoration="no" skipTaskbar="yes">
      <action name="Maximize" />
      <action name="ToggleFullscreen" />
    </windowRule>
    <windowRule identifier="*" serverDecoration="no" />
  </windowRules>
  <keyboard>
    <!-- Restarts the browser. The launcher or systemd brings it back. -->
    <keybind key="C-A-r">
      <action name="Execute" command={restart_command} />
    </keybind>
  </keyboard>
  <mouse>
    <default />
  </mouse>
</labwc_config>
'''


def generate_rc_xml(config):
  return rc_xml_template.format(browser_id=quoteattr(config.BROWSER + "*"),
                                restart_command=quoteattr("pkill -x %s" % browser_process_name(config.BROWSER)))


def generate_autostart(config):
  lines = ["# Generated by pi-kiosk. labwc runs this once it is up.",
           ""]
  if config.MODE:
    lines.append("wlr-randr --output %s --mode %s >/dev/null 2>&1 &" % (config.OUTPUT, config.MODE))
  else:
    lines.append("wlr-randr --output %s --preferred >/dev/null 2>&1 &" % config.OUTPUT)
    pass
  lines.append("")
  if config.BLANK_TIMEOUT:
    lines += [
      "# Blank the display when idle.",
      "swayidle -w timeout %d 'wlr-randr --output %s --off' resume 'wlr-randr --output %s --on' >/dev/null 2>&1 &"
      % (config.BLANK_TIMEOUT, config.OUTPUT, config.OUTPUT),
    ]
  else:
    lines += [
      "# Keep the display awake.",
      "(while true; do sleep %d; wtype -M shift -m shift >/dev/null 2>&1; done) &" % config.KEEPALIVE_INTERVAL,
    ]
    pass
  lines.append("")
  return "\n".join(lines)


environment_template = '''XDG_CURRENT_DESKTOP=labwc:wlroots
XDG_SESSION_TYPE=wayland
XCURSOR_SIZE=24
'''


wayland_session_template = '''#!/bin/sh
# Generated by pi-kiosk.
# Starts the kiosk compositor and browser from a console login.
export XDG_RUNTIME_DIR="${{XDG_RUNTIME_DIR:-/run/user/$(id -u)}}"
export XDG_SESSION_TYPE=wayland
export XDG_CURRENT_DESKTOP=labwc:wlroots
export LIBSEAT_BACKEND=seatd
exec labwc -s {launcher}
'''


# The substring check on "labwc" is the guard against appending this twice.
profile_snippet_template = '''
# pi-kiosk: start labwc on tty1 when the kiosk service is not running
if [ -z "$WAYLAND_DISPLAY" ] && [ "$(tty)" = "/dev/tty1" ] && ! systemctl is-active --quiet {service}; then
  exec "$HOME/.wayland-session"
fi
'''


def launcher_script_path(config):
  return config.OPT_DIR + "/launch-browser.sh"


def config_compositor_tasks(context):
  config = context.config
  owner = context.owner
  labwc_dir = context.home_path('.config', 'labwc')
  return [
    task_make_dirs("Create labwc config directory", labwc_dir, owner=owner),
    task_write_file("Write labwc rc.xml", labwc_dir + "/rc.xml", generate_rc_xml(config), owner=owner),
    task_write_file("Write labwc autostart", labwc_dir + "/autostart", generate_autostart(config), mode=0o755, owner=owner),
    task_write_file("Write labwc environment", labwc_dir + "/environment", environment_template, owner=owner),
    task_write_file("Write Wayland session launcher", context.home_path('.wayland-session'),
                    wayland_session_template.format(launcher=launcher_script_path(config)), mode=0o755, owner=owner),
    task_append_once("Add kiosk fallback to .profile", context.home_path('.profile'),
                     profile_snippet_template.format(service=const.compositor_service),
                     const.profile_marker, owner=owner),
  ]
